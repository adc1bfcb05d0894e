"""
Token definitions for dice expressions.

A token is one of:
- NumberToken: decimal literal (``11``, ``2.5``)
- DiceToken: dice literal (``3d20b2``, ``d4``, ``2d100w``)
- OperatorToken: ``+ - * / ^`` and unary minus
- LeftParen / RightParen

Tokens are immutable. Positions are informational only and do not take part
in equality, so ``d4`` and ``1d4`` at different offsets still compare by value.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union


class KeepMode(Enum):
    """Which dice a keep modifier retains."""
    BEST = "b"
    WORST = "w"


class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Keep:
    """Keep modifier: retain the best/worst ``amount`` dice of a roll."""
    mode: KeepMode
    amount: int

    def __str__(self) -> str:
        return f"{self.mode.value}{self.amount}"


@dataclass(frozen=True)
class NumberToken:
    value: float
    position: int = field(default=0, compare=False)

    def __str__(self) -> str:
        if self.value == int(self.value):
            return str(int(self.value))
        return str(self.value)


@dataclass(frozen=True)
class DiceToken:
    """
    Dice literal.

    Attributes:
        count: Number of dice to roll (1 when omitted in the text)
        size: Number of faces per die
        keep: Optional keep-best/keep-worst modifier
    """
    count: int
    size: int
    keep: Optional[Keep] = None
    position: int = field(default=0, compare=False)

    def __str__(self) -> str:
        spec = f"{self.count}d{self.size}"
        if self.keep:
            spec += str(self.keep)
        return spec


@dataclass(frozen=True)
class OperatorToken:
    """
    Arithmetic operator.

    ``symbol`` is canonical: aliases such as ``x`` or ``÷`` are normalized by
    the tokenizer. Unary minus uses the symbol ``neg``.
    """
    symbol: str
    precedence: int
    associativity: Associativity
    arity: int = 2
    position: int = field(default=0, compare=False)

    @property
    def is_unary(self) -> bool:
        return self.arity == 1

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class LeftParen:
    position: int = field(default=0, compare=False)

    def __str__(self) -> str:
        return "("


@dataclass(frozen=True)
class RightParen:
    position: int = field(default=0, compare=False)

    def __str__(self) -> str:
        return ")"


Token = Union[NumberToken, DiceToken, OperatorToken, LeftParen, RightParen]

NEGATE = 'neg'

# Binary operators, keyed by canonical symbol
OPERATOR_DEFINITIONS: Dict[str, OperatorToken] = {
    '+': OperatorToken('+', precedence=2, associativity=Associativity.LEFT),
    '-': OperatorToken('-', precedence=2, associativity=Associativity.LEFT),
    '*': OperatorToken('*', precedence=3, associativity=Associativity.LEFT),
    '/': OperatorToken('/', precedence=3, associativity=Associativity.LEFT),
    '^': OperatorToken('^', precedence=4, associativity=Associativity.RIGHT),
}

# Prefix minus binds tighter than every binary operator
UNARY_MINUS = OperatorToken(NEGATE, precedence=5, associativity=Associativity.RIGHT, arity=1)

# Alternate spellings accepted in input
OPERATOR_ALIASES: Dict[str, str] = {
    '+': '+',
    '-': '-',
    '*': '*',
    'x': '*',
    '×': '*',
    '/': '/',
    '÷': '/',
    '^': '^',
}


def make_operator(char: str, position: int, unary: bool = False) -> OperatorToken:
    """
    Build an operator token for a character of input.

    Args:
        char: Operator character as typed (aliases allowed)
        position: Offset in the input
        unary: Build a prefix minus instead of binary subtraction

    Returns:
        OperatorToken carrying the input position
    """
    if unary:
        template = UNARY_MINUS
    else:
        template = OPERATOR_DEFINITIONS[OPERATOR_ALIASES[char]]
    return OperatorToken(
        symbol=template.symbol,
        precedence=template.precedence,
        associativity=template.associativity,
        arity=template.arity,
        position=position
    )


def is_operand(token: Token) -> bool:
    return isinstance(token, (NumberToken, DiceToken))


def format_tokens(tokens) -> str:
    """Render a token sequence space-separated (``2 3 4 * +``)."""
    return ' '.join(str(token) for token in tokens)


__all__ = [
    'KeepMode', 'Associativity', 'Keep', 'NumberToken', 'DiceToken',
    'OperatorToken', 'LeftParen', 'RightParen', 'Token',
    'NEGATE', 'OPERATOR_DEFINITIONS', 'UNARY_MINUS', 'OPERATOR_ALIASES',
    'make_operator', 'is_operand', 'format_tokens',
]
