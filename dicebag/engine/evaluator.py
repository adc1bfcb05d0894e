"""
RPN evaluator for dice expressions.

Walks a postfix token sequence with a value stack. Dice are rolled here, at
evaluation time, through the random source passed in by the caller. Every
roll is kept as a structured RollRecord so the formatter can explain the
result later without the evaluator knowing anything about presentation.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from .errors import (
    DivisionByZero,
    EvaluatorStateError,
    NumericOverflow,
    StackOverflow,
    StackUnderflow,
    UndefinedResult,
)
from .random_source import RandomSource
from .tokens import DiceToken, KeepMode, NumberToken, OperatorToken, Token, format_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollRecord:
    """
    Result of rolling one dice token.

    Attributes:
        dice: The dice token that was rolled
        faces: Individual die results in roll order
        kept: Per-face flag, True if the face counts toward the total
        total: Sum of the kept faces
    """
    dice: DiceToken
    faces: Tuple[int, ...]
    kept: Tuple[bool, ...]
    total: int

    @classmethod
    def from_faces(cls, dice: DiceToken, faces: Sequence[int]) -> 'RollRecord':
        faces = tuple(faces)
        kept = select_kept(faces, dice)
        total = sum(face for face, is_kept in zip(faces, kept) if is_kept)
        return cls(dice=dice, faces=faces, kept=kept, total=total)

    @property
    def kept_faces(self) -> Tuple[int, ...]:
        return tuple(face for face, is_kept in zip(self.faces, self.kept) if is_kept)

    @property
    def dropped_faces(self) -> Tuple[int, ...]:
        return tuple(face for face, is_kept in zip(self.faces, self.kept) if not is_kept)


@dataclass(frozen=True)
class EvaluationResult:
    """
    Final value of an expression plus every roll made to reach it.

    Attributes:
        value: Numeric result, never rounded
        rolls: Roll records in evaluation order
    """
    value: float
    rolls: Tuple[RollRecord, ...] = ()

    @property
    def dice_rolled(self) -> int:
        return sum(len(record.faces) for record in self.rolls)


@dataclass(frozen=True)
class _StackEntry:
    value: float
    rolls: Tuple[RollRecord, ...] = ()


def select_kept(faces: Sequence[int], dice: DiceToken) -> Tuple[bool, ...]:
    """
    Decide which faces count toward a dice total.

    Without a keep modifier every face is kept. With one, faces are ranked
    best-first or worst-first; equal faces keep their roll order, so the
    earlier of two equal dice wins.

    Args:
        faces: Rolled faces in roll order
        dice: Dice token carrying the keep modifier

    Returns:
        Tuple of flags aligned with ``faces``
    """
    if dice.keep is None:
        return tuple(True for _ in faces)

    if dice.keep.mode == KeepMode.BEST:
        ranked = sorted(range(len(faces)), key=lambda i: -faces[i])
    else:
        ranked = sorted(range(len(faces)), key=lambda i: faces[i])

    chosen = set(ranked[:dice.keep.amount])
    return tuple(i in chosen for i in range(len(faces)))


def roll_dice(dice: DiceToken, source: RandomSource) -> RollRecord:
    """
    Roll a dice token.

    Args:
        dice: What to roll
        source: Random source; called once per die

    Returns:
        RollRecord with faces, kept flags and kept total
    """
    faces = [source.randint(1, dice.size) for _ in range(dice.count)]
    record = RollRecord.from_faces(dice, faces)
    logger.debug(f"Rolled {dice}: {list(record.faces)} -> {record.total}")
    return record


def _divide(left: float, right: float, token: OperatorToken) -> float:
    if right == 0:
        raise DivisionByZero("Division by zero", text='/', position=token.position)
    return left / right


def _power(left: float, right: float, token: OperatorToken) -> float:
    try:
        return math.pow(left, right)
    except OverflowError:
        raise NumericOverflow(
            "Exponentiation result is too large",
            text='^',
            position=token.position
        ) from None
    except ValueError:
        raise UndefinedResult(
            f"{left:g} ^ {right:g} has no real result",
            text='^',
            position=token.position
        ) from None


BINARY_OPERATIONS: Dict[str, Callable[[float, float, OperatorToken], float]] = {
    '+': lambda left, right, _: left + right,
    '-': lambda left, right, _: left - right,
    '*': lambda left, right, _: left * right,
    '/': _divide,
    '^': _power,
}


def apply_operator(token: OperatorToken, left: float, right: float) -> float:
    """
    Apply a binary operator.

    Raises:
        DivisionByZero: Divisor is exactly zero
        NumericOverflow: Result is not finite
        UndefinedResult: Power without a real result
    """
    operation = BINARY_OPERATIONS.get(token.symbol)
    if operation is None:
        raise EvaluatorStateError(f"Unknown binary operator: {token.symbol}")

    value = operation(left, right, token)
    if not math.isfinite(value):
        raise NumericOverflow(
            f"Result of '{token.symbol}' is too large",
            text=token.symbol,
            position=token.position
        )
    return value


def evaluate(rpn: Sequence[Token], source: RandomSource) -> EvaluationResult:
    """
    Evaluate a postfix token sequence.

    Args:
        rpn: Tokens in postfix order (see converter.to_rpn)
        source: Random source used for every die

    Returns:
        EvaluationResult with the final value and roll records

    Raises:
        DivisionByZero, NumericOverflow, UndefinedResult: arithmetic on user input
        StackUnderflow, StackOverflow: the sequence is not valid postfix
    """
    stack: List[_StackEntry] = []

    for token in rpn:
        if isinstance(token, NumberToken):
            stack.append(_StackEntry(float(token.value)))

        elif isinstance(token, DiceToken):
            record = roll_dice(token, source)
            try:
                total = float(record.total)
            except OverflowError:
                raise NumericOverflow(
                    f"Total of '{token}' is too large",
                    text=str(token),
                    position=token.position
                ) from None
            stack.append(_StackEntry(total, (record,)))

        elif isinstance(token, OperatorToken):
            if len(stack) < token.arity:
                raise StackUnderflow(
                    f"Operator '{token.symbol}' needs {token.arity} operands, "
                    f"stack has {len(stack)} in: {format_tokens(rpn)}"
                )

            if token.is_unary:
                operand = stack.pop()
                stack.append(_StackEntry(-operand.value, operand.rolls))
                continue

            right = stack.pop()
            left = stack.pop()
            value = apply_operator(token, left.value, right.value)
            stack.append(_StackEntry(value, left.rolls + right.rolls))

        else:
            raise EvaluatorStateError(f"Unexpected token in RPN sequence: {token!r}")

    if not stack:
        raise StackUnderflow(f"No value left after evaluating: {format_tokens(rpn)}")
    if len(stack) > 1:
        raise StackOverflow(
            f"{len(stack)} values left after evaluating: {format_tokens(rpn)}"
        )

    final = stack[0]
    return EvaluationResult(value=final.value, rolls=final.rolls)


__all__ = [
    'RollRecord', 'EvaluationResult', 'select_kept', 'roll_dice',
    'apply_operator', 'evaluate', 'BINARY_OPERATIONS',
]
