"""
Tokenizer for dice expressions.

Turns raw text into a tuple of typed tokens:
- 2, 11, 2.5, .5      -> NumberToken
- d20, 3d6, 4d6b3, 2d20w -> DiceToken
- + - * x × / ÷ ^    -> OperatorToken
- ( )                 -> LeftParen / RightParen

Whitespace between tokens is ignored.
"""

import logging
import math
import re
from typing import List, Tuple

from .errors import InvalidCharacter, MalformedDiceSpec, MalformedNumber
from .tokens import (
    DiceToken,
    Keep,
    KeepMode,
    LeftParen,
    NumberToken,
    OperatorToken,
    OPERATOR_ALIASES,
    RightParen,
    Token,
    make_operator,
)

logger = logging.getLogger(__name__)

DIGITS = '0123456789'

# Regex patterns
NUMBER_RUN_PATTERN = re.compile(r'[0-9.]+')
DICE_PATTERN = re.compile(
    r'(?P<count>[0-9]*)[dD](?P<size>[0-9]*)(?:(?P<mode>[bBwW])(?P<amount>[0-9]*))?'
)

# Characters that may not directly follow a complete dice literal
DICE_TRAILING_CHARS = DIGITS + '.dDbBwW'


def tokenize(text: str) -> Tuple[Token, ...]:
    """
    Split an expression into tokens.

    Examples:
        "2 + 3" -> (NumberToken(2.0), OperatorToken('+'), NumberToken(3.0))
        "d20"   -> (DiceToken(count=1, size=20),)
        "4d6b3" -> (DiceToken(count=4, size=6, keep=Keep(BEST, 3)),)

    Args:
        text: Raw expression text

    Returns:
        Tuple of tokens in input order

    Raises:
        InvalidCharacter: Character that starts no token
        MalformedNumber: Number with more than one decimal point
        MalformedDiceSpec: Dice literal with a bad count, size or keep modifier
    """
    tokens: List[Token] = []
    index = 0
    length = len(text)

    while index < length:
        char = text[index]

        if char.isspace():
            index += 1
            continue

        if char in DIGITS or char in '.dD':
            token, index = _read_operand(text, index)
            tokens.append(token)
            continue

        if char in OPERATOR_ALIASES:
            unary = char == '-' and _expects_operand(tokens)
            tokens.append(make_operator(char, index, unary=unary))
            index += 1
            continue

        if char == '(':
            tokens.append(LeftParen(position=index))
            index += 1
            continue

        if char == ')':
            tokens.append(RightParen(position=index))
            index += 1
            continue

        raise InvalidCharacter(f"Unexpected character '{char}'", text=char, position=index)

    logger.debug(f"Tokenized '{text}' into {len(tokens)} tokens")
    return tuple(tokens)


def _expects_operand(tokens: List[Token]) -> bool:
    """A minus in operand position is a prefix minus."""
    if not tokens:
        return True
    return isinstance(tokens[-1], (OperatorToken, LeftParen))


def _read_operand(text: str, start: int) -> Tuple[Token, int]:
    """Read a number or dice literal starting at ``start``; return it and the next offset."""
    run = NUMBER_RUN_PATTERN.match(text, start)
    literal = run.group() if run else ''
    end = start + len(literal)

    if end < len(text) and text[end] in 'dD':
        if '.' in literal:
            raise MalformedDiceSpec(
                f"Dice count must be a whole number, got '{literal}'",
                text=literal,
                position=start
            )
        return _read_dice(text, start)

    if literal.count('.') > 1 or literal == '.':
        raise MalformedNumber(f"Malformed number '{literal}'", text=literal, position=start)

    value = float(literal)
    if not math.isfinite(value):
        raise MalformedNumber(f"Number '{literal}' is too large", text=literal, position=start)

    return NumberToken(value, position=start), end


def _dice_number(digits: str, label: str, spec: str, start: int) -> int:
    """Whole number from a dice digit run; leading zeros are ignored."""
    digits = digits.lstrip('0') or '0'
    if not math.isfinite(float(digits)):
        raise MalformedDiceSpec(f"Dice {label} in '{spec}' is too large", text=spec, position=start)
    return int(digits)


def _read_dice(text: str, start: int) -> Tuple[DiceToken, int]:
    match = DICE_PATTERN.match(text, start)
    end = match.end()
    spec = text[start:end]

    count_str = match.group('count')
    size_str = match.group('size')
    mode_str = match.group('mode')
    amount_str = match.group('amount')

    if not size_str:
        raise MalformedDiceSpec(
            f"Dice '{spec}' is missing its size after 'd'",
            text=spec,
            position=start
        )

    count = _dice_number(count_str, 'count', spec, start) if count_str else 1
    size = _dice_number(size_str, 'size', spec, start)

    if count < 1:
        raise MalformedDiceSpec(f"Dice count must be at least 1, got {count}", text=spec, position=start)
    if size < 1:
        raise MalformedDiceSpec(f"Dice must have at least 1 side, got {size}", text=spec, position=start)

    keep = None
    if mode_str:
        # A bare b/w keeps a single die
        amount = _dice_number(amount_str, 'keep amount', spec, start) if amount_str else 1
        if amount < 1:
            raise MalformedDiceSpec(
                f"Keep amount must be at least 1, got {amount}",
                text=spec,
                position=start
            )
        if amount > count:
            raise MalformedDiceSpec(
                f"Cannot keep {amount} of {count} dice in '{spec}'",
                text=spec,
                position=start
            )
        keep = Keep(KeepMode(mode_str.lower()), amount)

    if end < len(text) and text[end] in DICE_TRAILING_CHARS:
        raise MalformedDiceSpec(
            f"Unexpected '{text[end]}' after dice '{spec}'",
            text=text[start:end + 1],
            position=start
        )

    return DiceToken(count=count, size=size, keep=keep, position=start), end


__all__ = ['tokenize']
