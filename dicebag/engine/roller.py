"""
Dice roller: the pipeline behind a roll command.

Runs tokenize -> to_rpn -> evaluate -> format for a command string, and adds
what callers need around it:
- annotations (``2d20b + 5 ! attack the goblin``)
- a cap on the number of dice a single command may roll
- batch rolls of the same command
- swapping in fresh dice ("dice jail")
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .converter import to_rpn
from .errors import InvalidBatchCount, TooManyDice
from .evaluator import EvaluationResult, RollRecord, evaluate, roll_dice
from .formatter import (
    STYLES,
    format_batch,
    format_breakdown,
    format_number,
    needs_detailed_view,
    result_to_dict,
    total_is_redundant,
)
from .random_source import RandomSource, SeededRandomSource
from .tokenizer import tokenize
from .tokens import DiceToken, Token, format_tokens

logger = logging.getLogger(__name__)

ANNOTATION_CHAR = '!'

# Sample roll shown after the dice are replaced
JAIL_SAMPLE = DiceToken(count=5, size=20)

DEFAULT_MAX_DICE = 1000
DEFAULT_MAX_BATCH_COUNT = 100


def split_annotation(command: str) -> Tuple[str, Optional[str]]:
    """
    Split a command into expression and annotation at the first '!'.

    Examples:
        "2d20b + 5 ! attack" -> ("2d20b + 5", "attack")
        "3d6"                -> ("3d6", None)
        "3d6 !"              -> ("3d6", None)
    """
    index = command.find(ANNOTATION_CHAR)
    if index < 0:
        return command.strip(), None
    annotation = command[index + 1:].strip()
    return command[:index].strip(), annotation or None


def count_dice(rpn: Sequence[Token]) -> int:
    """Total number of dice a sequence rolls on one evaluation."""
    return sum(token.count for token in rpn if isinstance(token, DiceToken))


@dataclass(frozen=True)
class RollOutcome:
    """
    Complete result of a roll command.

    Attributes:
        command: Command as given
        expression: Expression part (annotation removed)
        annotation: Text after '!', if any
        result: Structured evaluation result
        breakdown: Rendered breakdown
    """
    command: str
    expression: str
    annotation: Optional[str]
    result: EvaluationResult
    breakdown: str

    @property
    def value(self) -> float:
        return self.result.value

    @property
    def total_display(self) -> str:
        return format_number(self.result.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'command': self.command,
            'expression': self.expression,
            'annotation': self.annotation,
            'total': self.result.value,
            'total_display': self.total_display,
            'breakdown': self.breakdown,
            'detailed': needs_detailed_view(self.result),
            'total_is_redundant': total_is_redundant(self.result),
            'rolls': result_to_dict(self.result)['rolls'],
        }


@dataclass(frozen=True)
class BatchOutcome:
    """Totals of one command evaluated several times."""
    command: str
    expression: str
    annotation: Optional[str]
    totals: Tuple[float, ...]

    @property
    def count(self) -> int:
        return len(self.totals)

    @property
    def listing(self) -> str:
        return format_batch(self.totals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'command': self.command,
            'expression': self.expression,
            'annotation': self.annotation,
            'count': self.count,
            'totals': list(self.totals),
            'totals_display': [format_number(total) for total in self.totals],
            'listing': self.listing,
        }


class DiceRoller:
    """
    Runs roll commands against a random source.

    Supports:
    - Arithmetic with + - * / ^, unary minus and parentheses
    - Dice notation (d20, 3d6, 4d6b3, 2d20w)
    - Annotations after '!'
    - Batch rolls
    - Seeded random for determinism

    Example:
        roller = DiceRoller(seed=42)
        outcome = roller.roll("(3d20b2 + 11) ^ (d4 * 2) / 2d100w ! fireball")
        print(outcome.breakdown)
    """

    def __init__(
        self,
        source: Optional[RandomSource] = None,
        seed: Optional[int] = None,
        max_dice: int = DEFAULT_MAX_DICE,
        max_batch_count: int = DEFAULT_MAX_BATCH_COUNT,
        style: str = 'markdown',
        max_breakdown_length: Optional[int] = None
    ):
        """
        Initialize roller.

        Args:
            source: Random source to roll with. Mutually exclusive with seed.
            seed: Seed for a SeededRandomSource (testing/replay)
            max_dice: Most dice one command may roll, across a whole batch
            max_batch_count: Most repetitions a batch roll may ask for
            style: Default breakdown style
            max_breakdown_length: Clip roll breakdowns longer than this

        Raises:
            ValueError: If both source and seed are given, or style is unknown
        """
        if source is not None and seed is not None:
            raise ValueError("Pass either a random source or a seed, not both")
        if style not in STYLES:
            raise ValueError(f"Unknown breakdown style '{style}'")

        self.source: RandomSource = source if source is not None else SeededRandomSource(seed)
        self.max_dice = max_dice
        self.max_batch_count = max_batch_count
        self.style = style
        self.max_breakdown_length = max_breakdown_length

    @classmethod
    def from_config(cls, config, source: Optional[RandomSource] = None) -> 'DiceRoller':
        """Build a roller from a dicebag.core.config.Config."""
        return cls(
            source=source,
            seed=None if source is not None else config.dice_seed,
            max_dice=config.max_dice,
            max_batch_count=config.max_batch_count,
            style=config.breakdown_style,
            max_breakdown_length=config.max_breakdown_length
        )

    def parse(self, expression: str) -> Tuple[Token, ...]:
        """
        Parse an expression into postfix tokens.

        Raises:
            DiceError: If the expression is malformed
        """
        return to_rpn(tokenize(expression))

    def check_dice_limit(self, rpn: Sequence[Token], repetitions: int = 1) -> int:
        """
        Enforce the dice cap before anything is rolled.

        Returns:
            Number of dice that will be rolled

        Raises:
            TooManyDice: If the cap would be exceeded
        """
        total = count_dice(rpn) * repetitions
        if total > self.max_dice:
            raise TooManyDice(f"Too many dice: {total} requested, at most {self.max_dice} allowed")
        return total

    def evaluate(self, expression: str) -> EvaluationResult:
        """Parse and evaluate an expression without annotation handling."""
        rpn = self.parse(expression)
        self.check_dice_limit(rpn)
        return evaluate(rpn, self.source)

    def roll(self, command: str, style: Optional[str] = None) -> RollOutcome:
        """
        Roll a command.

        Args:
            command: Expression, optionally followed by '!' and an annotation
            style: Breakdown style, defaults to the roller's style

        Returns:
            RollOutcome with the result and rendered breakdown

        Raises:
            DiceError: Malformed expression, arithmetic error or too many dice
        """
        style = style or self.style
        if style not in STYLES:
            raise ValueError(f"Unknown breakdown style '{style}'")

        expression, annotation = split_annotation(command)
        rpn = self.parse(expression)
        self.check_dice_limit(rpn)

        logger.debug(f"Rolling '{expression}' as RPN: {format_tokens(rpn)}")
        result = evaluate(rpn, self.source)

        return RollOutcome(
            command=command,
            expression=expression,
            annotation=annotation,
            result=result,
            breakdown=format_breakdown(result, style, self.max_breakdown_length)
        )

    def batch_roll(self, command: str, count: int) -> BatchOutcome:
        """
        Evaluate one command several times.

        The expression is parsed once; dice are rolled fresh on every pass.

        Args:
            command: Expression, optionally followed by '!' and an annotation
            count: Number of evaluations, at least 2

        Raises:
            InvalidBatchCount: count not an int, below 2 or above max_batch_count
            DiceError: Malformed expression, arithmetic error or too many dice
        """
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidBatchCount(f"Batch count must be a whole number, got {count!r}")
        if count < 2 or count > self.max_batch_count:
            raise InvalidBatchCount(
                f"Batch count must be between 2 and {self.max_batch_count}, got {count}"
            )

        expression, annotation = split_annotation(command)
        rpn = self.parse(expression)
        self.check_dice_limit(rpn, repetitions=count)

        totals = tuple(evaluate(rpn, self.source).value for _ in range(count))
        return BatchOutcome(
            command=command,
            expression=expression,
            annotation=annotation,
            totals=totals
        )

    def new_dice(self) -> RollRecord:
        """
        Put the current dice in dice jail and get new ones.

        Replaces the random source with a freshly seeded one and rolls a
        sample with the new dice.

        Returns:
            Sample roll made with the new source
        """
        self.source = SeededRandomSource()
        logger.info("Replaced random source with fresh dice")
        return roll_dice(JAIL_SAMPLE, self.source)

    def set_seed(self, seed: int) -> None:
        """Change random seed (for testing/replay)."""
        self.source = SeededRandomSource(seed)


__all__ = [
    'ANNOTATION_CHAR', 'JAIL_SAMPLE', 'split_annotation', 'count_dice',
    'RollOutcome', 'BatchOutcome', 'DiceRoller',
]
