"""CSV rendering for dashboard exports."""

from __future__ import annotations

from typing import Iterable, Sequence

_NEEDS_QUOTING = (",", '"', "\n")


def escape_csv(value: str) -> str:
    """Quote ``value`` when it contains a comma, quote or newline.

    Examples:
        >>> escape_csv("Acme")
        'Acme'
        >>> escape_csv('Say "hi", Bob')
        '"Say ""hi"", Bob"'
    """
    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def build_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Join escaped headers and rows with ``\\n`` line endings (no trailing newline)."""
    lines = [",".join(escape_csv(h) for h in headers)]
    lines.extend(",".join(escape_csv(cell) for cell in row) for row in rows)
    return "\n".join(lines)
