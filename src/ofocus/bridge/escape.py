"""Escaping helpers for AppleScript string literals and the shell."""

from __future__ import annotations

import re
from collections.abc import Iterable

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(T(\d{2}):(\d{2}):?(\d{2})?)?")


def escape_applescript(text: str) -> str:
    """Escape backslashes and double quotes for an AppleScript string literal."""

    return text.replace("\\", "\\\\").replace('"', '\\"')


def quote_literal(text: str) -> str:
    """Render `text` as a double-quoted AppleScript string literal."""

    return f'"{escape_applescript(text)}"'


def applescript_list(values: Iterable[str]) -> str:
    """Render strings as an AppleScript list literal, e.g. `{"a", "b"}`."""

    return "{" + ", ".join(quote_literal(value) for value in values) + "}"


def shell_quote(text: str) -> str:
    """Single-quote `text` for a POSIX shell; `'` becomes `'\\''`."""

    return "'" + text.replace("'", "'\\''") + "'"


def to_applescript_date(date_str: str) -> str:
    """Convert ISO dates to the `MM/DD/YYYY [h:MM[:SS] AM|PM]` form AppleScript parses.

    Non-ISO input is returned unchanged since AppleScript accepts many
    natural formats such as "January 1, 2024".
    """

    match = _ISO_DATE.match(date_str)
    if match is None:
        return date_str

    year, month, day = match.group(1), match.group(2), match.group(3)
    hours, minutes, seconds = match.group(5), match.group(6), match.group(7)

    result = f"{month}/{day}/{year}"
    if hours and minutes:
        hour = int(hours)
        period = "PM" if hour >= 12 else "AM"
        hour12 = 12 if hour == 0 else hour - 12 if hour > 12 else hour
        result += f" {hour12}:{minutes}"
        if seconds:
            result += f":{seconds}"
        result += f" {period}"
    return result
