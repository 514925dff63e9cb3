"""Wire codec for the JSON that scripts assemble by hand.

AppleScript has no JSON support; `scripts/helpers/json.applescript` builds
the text with three handlers. The functions below are their Python
counterparts and document the exact conventions:

- `jsonString`: empty, `missing value` or the text "missing value" -> `null`,
  anything else -> escaped, double-quoted string.
- `jsonArray`: list -> `[...]` of escaped, double-quoted strings joined by ",".
- `escapeJson`: escapes `"`, `\\`, CR/LF (both as `\\n`) and TAB, and drops
  every other control character below code point 32.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

MISSING_VALUE = "missing value"

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\r": "\\n",
    "\n": "\\n",
    "\t": "\\t",
}


def escape_json(text: str) -> str:
    parts: list[str] = []
    for char in text:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 32:
            continue
        else:
            parts.append(char)
    return "".join(parts)


def encode_json_string(value: str | None) -> str:
    if value is None or value in ("", MISSING_VALUE):
        return "null"
    return f'"{escape_json(value)}"'


def encode_json_array(values: Sequence[str]) -> str:
    if not values:
        return "[]"
    return "[" + ",".join(f'"{escape_json(value)}"' for value in values) + "]"


def decode_output(stdout: str) -> Any:
    """Decode trimmed interpreter stdout: JSON when it parses, the raw text otherwise."""

    text = stdout.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
