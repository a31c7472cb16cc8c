import re
from typing import Any, Sequence

# Written in front of identifier and phone cells so the sheet keeps them as text
# (leading zeros survive). Stripped again on every read.
TEXT_MARKER = "'"

_WORD_START = re.compile(r'\b\w')


def cell(row: Sequence[Any], index: int) -> Any:
    if index >= len(row) or row[index] is None:
        return ''
    return row[index]


def cell_text(row: Sequence[Any], index: int) -> str:
    value = cell(row, index)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def as_text(value: Any) -> str:
    """Trimmed text for any JSON scalar; ``None`` becomes ``''``."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def strip_text_marker(value: Any) -> str:
    text = str(value if value is not None else '').strip()
    if text.startswith(TEXT_MARKER):
        text = text[len(TEXT_MARKER):]
    return text.strip()


def with_text_marker(value: Any) -> str:
    text = strip_text_marker(value)
    if not text:
        return ''
    return TEXT_MARKER + text


def normalize_identifier(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return strip_text_marker(value)


def find_row_index(rows: Sequence[Sequence[Any]], identifier: Any) -> int | None:
    target = normalize_identifier(identifier)
    if not target:
        return None
    for index, row in enumerate(rows):
        if normalize_identifier(cell(row, 0)) == target:
            return index
    return None


def title_case(value: Any) -> str:
    """``"budi SANTOSO"`` -> ``"Budi Santoso"``."""
    text = str(value if value is not None else '').lower()
    return _WORD_START.sub(lambda match: match.group(0).upper(), text)


def upper_case(value: Any) -> str:
    return str(value if value is not None else '').upper()
