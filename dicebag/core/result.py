"""
Result type returned across dicebag's outer boundaries.

The engine raises typed DiceError exceptions. RollService catches them and
hands callers (CLI, HTTP API) a Result instead, so a mistyped roll is a value
to report and never an exception to guard against.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Machine-readable reason a roll command failed.

    Values are stable strings: they appear in HTTP error bodies and in the
    CLI's error line.
    """

    # Tokenizer
    INVALID_CHARACTER = "invalid_character"
    MALFORMED_NUMBER = "malformed_number"
    MALFORMED_DICE_SPEC = "malformed_dice_spec"

    # Converter
    UNBALANCED_PARENS = "unbalanced_parens"
    MALFORMED_EXPRESSION = "malformed_expression"

    # Evaluator
    DIVISION_BY_ZERO = "division_by_zero"
    NUMERIC_OVERFLOW = "numeric_overflow"
    UNDEFINED_RESULT = "undefined_result"

    # Roller limits
    TOO_MANY_DICE = "too_many_dice"
    INVALID_BATCH_COUNT = "invalid_batch_count"

    # Configuration
    INVALID_CONFIG = "invalid_config"

    # Request handling
    INVALID_INPUT = "invalid_input"
    SCHEMA_VALIDATION_FAILED = "schema_validation_failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class Result:
    """
    Outcome of a service call: data on success, message and code on failure.

    Examples:
        >>> result = service.roll("4d6b3 ! strength")
        >>> if result:
        ...     print(result.data.breakdown)

        >>> result = service.roll("5 / 0")
        >>> result.error_code
        'division_by_zero'
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def ok(data: Any = None) -> 'Result':
        return Result(success=True, data=data)

    @staticmethod
    def fail(error: str, code: Optional[str | ErrorCode] = None) -> 'Result':
        """
        Build a failed result.

        Args:
            error: Message shown to the person who typed the command
            code: ErrorCode (stored as its string value) or a raw string
        """
        if isinstance(code, ErrorCode):
            code = code.value
        return Result(success=False, error=error, error_code=code)

    def error_dict(self) -> Dict[str, Any]:
        """JSON body for a failed result."""
        return {'success': False, 'error': self.error, 'error_code': self.error_code}

    def __bool__(self) -> bool:
        return self.success
