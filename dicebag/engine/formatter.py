"""
Trace formatter: renders an EvaluationResult for people.

This is the only part of the engine that knows about presentation. Each roll
record is shown as ``<dice>: [<faces>] = <kept total>`` with dropped faces
de-emphasized, followed by the final total:

    markdown: 4d6b3: [~~1~~, 5, 4, 6] = 15 | **Total: 15**
    plain:    4d6b3: [(1), 5, 4, 6] = 15 | Total: 15
    html:     4d6b3: [<s>1</s>, 5, 4, 6] = 15 | <strong>Total: 15</strong>
"""

from typing import Any, Dict, List, Sequence

from markupsafe import escape

from .evaluator import EvaluationResult, RollRecord

STYLES = ('markdown', 'plain', 'html')
SEPARATOR = ' | '
CLIPPED_TEXT = '…clipped because there were too many values'

# Single rolls with at least this many faces get a detailed view
DETAILED_FACE_COUNT = 5


def format_number(value: float) -> str:
    """
    Format a result with at most two decimal places.

    Trailing zeros and a trailing decimal point are stripped, so whole
    results read like integers.

    Examples:
        >>> format_number(600.0)
        '600'
        >>> format_number(2.5)
        '2.5'
        >>> format_number(1 / 3)
        '0.33'
    """
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    if text == '-0':
        return '0'
    return text


def _check_style(style: str) -> None:
    if style not in STYLES:
        raise ValueError(f"Unknown breakdown style '{style}'. Must be one of: {', '.join(STYLES)}")


def _format_face(face: int, kept: bool, style: str) -> str:
    if kept:
        return str(face)
    if style == 'markdown':
        return f"~~{face}~~"
    if style == 'html':
        return f"<s>{face}</s>"
    return f"({face})"


def format_record(record: RollRecord, style: str = 'markdown') -> str:
    """Render a single roll record (``2d20b1: [~~3~~, 17] = 17``)."""
    _check_style(style)
    faces = ', '.join(
        _format_face(face, kept, style)
        for face, kept in zip(record.faces, record.kept)
    )
    label = str(escape(str(record.dice))) if style == 'html' else str(record.dice)
    return f"{label}: [{faces}] = {record.total}"


def format_rolls(
    rolls: Sequence[RollRecord],
    style: str = 'markdown',
    max_length: int = None
) -> str:
    """
    Render every roll record, separated by `` | ``.

    Args:
        rolls: Roll records in evaluation order
        style: One of markdown, plain, html
        max_length: If set, longer output is replaced by a clipped notice

    Returns:
        Rendered rolls, empty string when there were no dice
    """
    _check_style(style)
    text = SEPARATOR.join(format_record(record, style) for record in rolls)

    if max_length is not None and len(text) > max_length:
        if style == 'markdown':
            return f"*{CLIPPED_TEXT}*"
        if style == 'html':
            return f"<em>{escape(CLIPPED_TEXT)}</em>"
        return CLIPPED_TEXT

    return text


def format_total(value: float, style: str = 'markdown') -> str:
    _check_style(style)
    total = f"Total: {format_number(value)}"
    if style == 'markdown':
        return f"**{total}**"
    if style == 'html':
        return f"<strong>{escape(total)}</strong>"
    return total


def format_breakdown(
    result: EvaluationResult,
    style: str = 'markdown',
    max_length: int = None
) -> str:
    """
    Render the full breakdown: every roll, then the total.

    Args:
        result: Evaluation result to explain
        style: One of markdown, plain, html
        max_length: Clip the rolls part when it grows past this length

    Returns:
        Display string

    Example:
        >>> format_breakdown(result, style='plain')
        '4d6b3: [(1), 5, 4, 6] = 15 | Total: 15'
    """
    parts: List[str] = []
    rolls = format_rolls(result.rolls, style, max_length)
    if rolls:
        parts.append(rolls)
    parts.append(format_total(result.value, style))
    return SEPARATOR.join(parts)


def format_batch(totals: Sequence[float]) -> str:
    """
    Render batch totals one per line, numbered and right-aligned.

    Example:
        >>> print(format_batch([12.0, 7.0, 15.5]))
        1: 12
        2: 7
        3: 15.5
    """
    width = len(str(len(totals)))
    return '\n'.join(
        f"{index:>{width}}: {format_number(total)}"
        for index, total in enumerate(totals, start=1)
    )


def needs_detailed_view(result: EvaluationResult) -> bool:
    """True when the rolls are too many to show inline with the total."""
    if len(result.rolls) > 1:
        return True
    return len(result.rolls) == 1 and len(result.rolls[0].faces) >= DETAILED_FACE_COUNT


def total_is_redundant(result: EvaluationResult) -> bool:
    """True when the only roll is a single die whose face already is the total."""
    if len(result.rolls) != 1:
        return False
    record = result.rolls[0]
    return len(record.faces) == 1 and float(record.faces[0]) == result.value


def record_to_dict(record: RollRecord) -> Dict[str, Any]:
    return {
        'dice': str(record.dice),
        'count': record.dice.count,
        'size': record.dice.size,
        'keep': (
            {'mode': record.dice.keep.mode.name.lower(), 'amount': record.dice.keep.amount}
            if record.dice.keep else None
        ),
        'faces': list(record.faces),
        'kept': list(record.kept),
        'total': record.total,
    }


def result_to_dict(result: EvaluationResult) -> Dict[str, Any]:
    """Machine-readable rendering of an evaluation result."""
    return {
        'value': result.value,
        'display': format_number(result.value),
        'rolls': [record_to_dict(record) for record in result.rolls],
    }


__all__ = [
    'STYLES', 'CLIPPED_TEXT', 'format_number', 'format_record', 'format_rolls',
    'format_total', 'format_breakdown', 'format_batch', 'needs_detailed_view',
    'total_is_redundant', 'record_to_dict', 'result_to_dict',
]
