"""
Error taxonomy for the dice expression engine.

Two families:
- DiceError: caused by what the user typed. Recoverable, reported back to
  the caller with a machine-readable code.
- EvaluatorStateError: the converter handed the evaluator an RPN sequence it
  cannot execute. Never caused by input alone; signals a programming error.
"""

from typing import Optional

from dicebag.core.result import ErrorCode


class DiceError(Exception):
    """
    Base class for user-input errors.

    Attributes:
        message: Human-readable description
        text: Offending substring, if known
        position: Zero-based offset of the offending text, if known
    """

    code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, text: Optional[str] = None, position: Optional[int] = None):
        self.message = message
        self.text = text
        self.position = position
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.position is not None:
            return f"{self.message} (at position {self.position + 1})"
        return self.message


class InvalidCharacter(DiceError):
    """Character that cannot start any token."""
    code = ErrorCode.INVALID_CHARACTER


class MalformedNumber(DiceError):
    """Numeric literal that is not a valid decimal number."""
    code = ErrorCode.MALFORMED_NUMBER


class MalformedDiceSpec(DiceError):
    """Dice literal with a bad count, size or keep modifier."""
    code = ErrorCode.MALFORMED_DICE_SPEC


class UnbalancedParens(DiceError):
    code = ErrorCode.UNBALANCED_PARENS


class MalformedExpression(DiceError):
    """Operand or operator where the other was expected, or nothing at all."""
    code = ErrorCode.MALFORMED_EXPRESSION


class DivisionByZero(DiceError):
    code = ErrorCode.DIVISION_BY_ZERO


class NumericOverflow(DiceError):
    """An operation produced a value too large to represent."""
    code = ErrorCode.NUMERIC_OVERFLOW


class UndefinedResult(DiceError):
    """An operation has no real-valued result, e.g. (-8) ^ 0.5."""
    code = ErrorCode.UNDEFINED_RESULT


class TooManyDice(DiceError):
    code = ErrorCode.TOO_MANY_DICE


class InvalidBatchCount(DiceError):
    code = ErrorCode.INVALID_BATCH_COUNT


class EvaluatorStateError(RuntimeError):
    """The RPN sequence could not be executed by the stack machine."""


class StackUnderflow(EvaluatorStateError):
    pass


class StackOverflow(EvaluatorStateError):
    pass


__all__ = [
    'DiceError', 'InvalidCharacter', 'MalformedNumber', 'MalformedDiceSpec',
    'UnbalancedParens', 'MalformedExpression', 'DivisionByZero',
    'NumericOverflow', 'UndefinedResult', 'TooManyDice', 'InvalidBatchCount',
    'EvaluatorStateError', 'StackUnderflow', 'StackOverflow',
]
