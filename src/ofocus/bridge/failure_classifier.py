"""Best-effort classification of osascript diagnostics into `ErrorCode` values.

Diagnostic wording comes from AppleScript and OmniFocus and may change between
versions or locales. Unmatched text falls back to `APPLESCRIPT_ERROR` and the
raw text is always preserved in `details`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ofocus.bridge.errors import BridgeError, ErrorCode, create_error

logger = logging.getLogger(__name__)

CLASSIFIER_VERSION = 1


@dataclass(frozen=True, slots=True)
class _Rule:
    code: ErrorCode
    message: str
    phrases: tuple[str, ...] = ()
    all_of: tuple[tuple[str, ...], ...] = ()

    def matches(self, haystack: str) -> bool:
        if any(phrase in haystack for phrase in self.phrases):
            return True
        return any(all(part in haystack for part in group) for group in self.all_of)


def _not_found_rule(code: ErrorCode, noun: str, *extra: str) -> _Rule:
    return _Rule(
        code=code,
        message=f"{noun.capitalize()} not found",
        phrases=(f"can't get first flattened {noun}", *extra, f"no {noun}"),
        all_of=((noun, "doesn't exist"),),
    )


_RULES: tuple[_Rule, ...] = (
    _Rule(
        code=ErrorCode.OMNIFOCUS_NOT_RUNNING,
        message="OmniFocus is not running",
        phrases=("application isn't running", "connection is invalid", "not running"),
    ),
    _not_found_rule(ErrorCode.TASK_NOT_FOUND, "task"),
    _not_found_rule(ErrorCode.PROJECT_NOT_FOUND, "project"),
    _not_found_rule(ErrorCode.TAG_NOT_FOUND, "tag"),
    _not_found_rule(ErrorCode.FOLDER_NOT_FOUND, "folder", "can't get folder"),
    _Rule(
        code=ErrorCode.INVALID_DATE_FORMAT,
        message="Invalid date format",
        all_of=(("can't make", "into type date"),),
    ),
)


def classify_script_error(raw_error: str) -> BridgeError:
    """Map raw interpreter diagnostics to a structured error."""

    haystack = raw_error.lower().replace("\u2019", "'")
    for rule in _RULES:
        if rule.matches(haystack):
            logger.warning("osascript failure classified as %s: %s", rule.code.value, raw_error)
            return create_error(rule.code, rule.message, raw_error)

    logger.warning("osascript failure left unclassified: %s", raw_error)
    return create_error(ErrorCode.APPLESCRIPT_ERROR, "AppleScript execution failed", raw_error)
