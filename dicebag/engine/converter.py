"""
Infix to postfix (RPN) conversion.

Implements the shunting-yard algorithm. All operator precedence and
associativity handling lives here; the evaluator only ever sees a valid
postfix sequence and never looks at precedence.
"""

import logging
from typing import List, Sequence, Tuple, Union

from .errors import MalformedExpression, UnbalancedParens
from .tokens import (
    Associativity,
    LeftParen,
    OperatorToken,
    RightParen,
    Token,
    format_tokens,
    is_operand,
)

logger = logging.getLogger(__name__)


def to_rpn(tokens: Sequence[Token]) -> Tuple[Token, ...]:
    """
    Convert an infix token sequence to Reverse Polish Notation.

    Besides ordering operators, the conversion checks that operands and
    operators alternate correctly, so every sequence it returns can be
    executed by a stack machine without running out of operands.

    Examples:
        2 + 3 * 4   -> 2 3 4 * +
        2 ^ 3 ^ 2   -> 2 3 2 ^ ^
        (2 + 3) * 4 -> 2 3 + 4 *
        -2 ^ 2      -> 2 neg 2 ^

    Args:
        tokens: Tokens as produced by the tokenizer

    Returns:
        Tuple of tokens in postfix order, without parentheses

    Raises:
        UnbalancedParens: A ')' without a matching '(' or vice versa
        MalformedExpression: Empty input, adjacent operands, missing operands
    """
    output: List[Token] = []
    holding: List[Union[OperatorToken, LeftParen]] = []
    expect_operand = True

    for token in tokens:
        if is_operand(token):
            if not expect_operand:
                raise MalformedExpression(
                    f"Missing operator before '{token}'",
                    text=str(token),
                    position=token.position
                )
            output.append(token)
            expect_operand = False

        elif isinstance(token, OperatorToken):
            if token.is_unary:
                if not expect_operand:
                    raise MalformedExpression(
                        f"Unexpected prefix operator '{token}'",
                        text=str(token),
                        position=token.position
                    )
                # Prefix operators wait for their operand; nothing is popped
                holding.append(token)
                continue

            if expect_operand:
                raise MalformedExpression(
                    f"Missing operand before '{token}'",
                    text=str(token),
                    position=token.position
                )
            while holding and _should_pop(holding[-1], token):
                output.append(holding.pop())
            holding.append(token)
            expect_operand = True

        elif isinstance(token, LeftParen):
            if not expect_operand:
                raise MalformedExpression(
                    "Missing operator before '('",
                    text='(',
                    position=token.position
                )
            holding.append(token)

        elif isinstance(token, RightParen):
            if expect_operand:
                raise MalformedExpression(
                    "Missing operand before ')'",
                    text=')',
                    position=token.position
                )
            while True:
                if not holding:
                    raise UnbalancedParens(
                        "Unmatched ')'",
                        text=')',
                        position=token.position
                    )
                top = holding.pop()
                if isinstance(top, LeftParen):
                    break
                output.append(top)

    if not tokens:
        raise MalformedExpression("Expression is empty")
    if expect_operand:
        raise MalformedExpression("Expression ends without an operand")

    while holding:
        top = holding.pop()
        if isinstance(top, LeftParen):
            raise UnbalancedParens("Unmatched '('", text='(', position=top.position)
        output.append(top)

    logger.debug(f"Converted to RPN: {format_tokens(output)}")
    return tuple(output)


def _should_pop(top: Union[OperatorToken, LeftParen], incoming: OperatorToken) -> bool:
    if not isinstance(top, OperatorToken):
        return False
    if top.precedence > incoming.precedence:
        return True
    return (
        top.precedence == incoming.precedence
        and incoming.associativity == Associativity.LEFT
    )


__all__ = ['to_rpn']
