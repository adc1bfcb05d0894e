"""
Dice expression engine.

Provides:
- Tokenizer for dice and arithmetic expressions
- Shunting-yard conversion to Reverse Polish Notation
- Stack-based evaluation with an injectable random source
- Breakdown formatting (markdown, plain, html)
- RollService: the error-safe entry point for callers

Usage:
    service = RollService(DiceRoller(seed=42))
    result = service.roll("(3d20b2 + 11) ^ (d4 * 2) / 2d100w ! fireball")
    if result:
        print(result.data.breakdown)
    else:
        print(result.error_code, result.error)
"""

import logging
from typing import Callable, Optional, TypeVar

from dicebag.core.result import ErrorCode, Result

from .converter import to_rpn
from .errors import DiceError, EvaluatorStateError
from .evaluator import EvaluationResult, RollRecord, evaluate
from .formatter import STYLES, format_breakdown
from .random_source import RandomSource, ScriptedRandomSource, SeededRandomSource
from .roller import BatchOutcome, DiceRoller, RollOutcome, split_annotation
from .tokenizer import tokenize
from .tokens import format_tokens

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RollService:
    """
    Error-safe front door to the dice roller.

    User-input errors come back as failed Result objects carrying an
    ErrorCode. Internal evaluator errors are logged at critical level and
    re-raised: they mean the converter produced something the evaluator
    cannot run, which no input should be able to cause.
    """

    def __init__(self, roller: Optional[DiceRoller] = None):
        """
        Args:
            roller: Roller to use. Defaults to an unseeded DiceRoller.
        """
        self.roller = roller or DiceRoller()

    @classmethod
    def from_config(cls, config) -> 'RollService':
        return cls(DiceRoller.from_config(config))

    def roll(self, command: str, style: Optional[str] = None) -> Result:
        """
        Roll a command.

        Returns:
            Result.ok(RollOutcome) or Result.fail(message, ErrorCode)
        """
        if style is not None and style not in STYLES:
            return Result.fail(
                f"Unknown breakdown style '{style}'. Must be one of: {', '.join(STYLES)}",
                ErrorCode.INVALID_INPUT
            )
        return self._run(command, lambda: self.roller.roll(command, style=style))

    def batch_roll(self, command: str, count: int) -> Result:
        """
        Evaluate a command several times.

        Returns:
            Result.ok(BatchOutcome) or Result.fail(message, ErrorCode)
        """
        return self._run(command, lambda: self.roller.batch_roll(command, count))

    def rpn(self, command: str) -> Result:
        """
        Convert the expression part of a command to postfix.

        Returns:
            Result.ok(list of token strings) or Result.fail(message, ErrorCode)
        """
        expression, _ = split_annotation(command)
        return self._run(
            command,
            lambda: [str(token) for token in self.roller.parse(expression)]
        )

    def new_dice(self) -> Result:
        """
        Replace the roller's dice.

        Returns:
            Result.ok(RollRecord) with a sample roll from the new dice
        """
        return Result.ok(self.roller.new_dice())

    def _run(self, command: str, action: Callable[[], T]) -> Result:
        try:
            return Result.ok(action())
        except DiceError as e:
            logger.warning(f"Rejected roll command '{command}': {e}")
            return Result.fail(str(e), e.code)
        except EvaluatorStateError:
            logger.critical(f"Evaluator state error for command '{command}'", exc_info=True)
            raise


__all__ = [
    'RollService', 'DiceRoller', 'RollOutcome', 'BatchOutcome',
    'EvaluationResult', 'RollRecord', 'RandomSource', 'SeededRandomSource',
    'ScriptedRandomSource', 'DiceError', 'EvaluatorStateError',
    'tokenize', 'to_rpn', 'evaluate', 'format_breakdown', 'format_tokens',
]
