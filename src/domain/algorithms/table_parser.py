from __future__ import annotations

import re

Row = dict[str, str]

_SURROUNDING_QUOTE = re.compile(r'^"|"$')


def _unquote(field: str) -> str:
    return _SURROUNDING_QUOTE.sub("", field.strip())


def split_fields(line: str) -> list[str]:
    """Split one line on commas outside double quotes.

    A quote only toggles the in-quotes state; `""` is not an escape.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def parse_table(text: str) -> list[Row]:
    """Parse GTFS-style CSV text into rows keyed by header name.

    Blank lines are dropped first, so the first non-blank line is the header.
    Values stay strings; missing trailing values become "".
    """

    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return []

    headers = [_unquote(h) for h in split_fields(lines[0])]
    rows: list[Row] = []
    for line in lines[1:]:
        values = split_fields(line)
        row: Row = {}
        for i, header in enumerate(headers):
            row[header] = _unquote(values[i]) if i < len(values) else ""
        rows.append(row)
    return rows
