"""Validation gate for every value interpolated into a generated script.

AppleScript has no parameterized queries, so each command runs these checks
before composing anything. Validators return `None` when the value is
acceptable and a `BridgeError` otherwise.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Literal

from ofocus.bridge.errors import BridgeError, ErrorCode, create_error

if TYPE_CHECKING:
    from ofocus.commands.models import RepetitionRule

IdKind = Literal["task", "project", "tag", "folder", "item"]

MAX_PAGINATION_LIMIT = 10_000

_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
_DATE_PATTERN = re.compile(r"[A-Za-z0-9 /:,.-]+")

VALID_FREQUENCIES: tuple[str, ...] = ("daily", "weekly", "monthly", "yearly")
VALID_REPEAT_METHODS: tuple[str, ...] = ("due-again", "defer-another")


def first_error(*checks: BridgeError | None) -> BridgeError | None:
    """Return the first failed check, or `None` when every check passed."""

    for check in checks:
        if check is not None:
            return check
    return None


def validate_id(value: str, kind: IdKind) -> BridgeError | None:
    if not value or not value.strip():
        return create_error(ErrorCode.INVALID_ID_FORMAT, f"{kind.capitalize()} ID cannot be empty")
    if _ID_PATTERN.fullmatch(value) is None:
        return create_error(
            ErrorCode.INVALID_ID_FORMAT,
            f"Invalid {kind} ID format: {value}",
            "IDs must contain only alphanumeric characters, dashes, and underscores",
        )
    return None


def validate_ids(values: Iterable[str], kind: IdKind) -> BridgeError | None:
    return first_error(*(validate_id(value, kind) for value in values))


def validate_date_string(value: str | None) -> BridgeError | None:
    """Check a date string; empty means "clear the date" and is accepted."""

    if not value or not value.strip():
        return None
    if _has_breakout_chars(value):
        return create_error(
            ErrorCode.INVALID_DATE_FORMAT,
            "Invalid characters in date string",
            "Date strings cannot contain quotes or backslashes",
        )
    if _DATE_PATTERN.fullmatch(value) is None:
        return create_error(ErrorCode.INVALID_DATE_FORMAT, f"Invalid date format: {value}")
    return None


def validate_tags(tags: Sequence[str] | None) -> BridgeError | None:
    for tag in tags or ():
        if not tag or not tag.strip():
            return create_error(ErrorCode.VALIDATION_ERROR, "Tag name cannot be empty")
        error = _reject_breakout_chars(tag, "tag name", "Tag names")
        if error is not None:
            return error
    return None


def validate_tag_name(name: str) -> BridgeError | None:
    if not name or not name.strip():
        return create_error(ErrorCode.VALIDATION_ERROR, "Tag name cannot be empty")
    return _reject_breakout_chars(name, "tag name", "Tag names")


def validate_project_name(name: str | None) -> BridgeError | None:
    if not name or not name.strip():
        return None
    return _reject_breakout_chars(name, "project name", "Project names")


def validate_folder_name(name: str | None) -> BridgeError | None:
    if not name or not name.strip():
        return None
    return _reject_breakout_chars(name, "folder name", "Folder names")


def validate_search_query(query: str) -> BridgeError | None:
    if not query or not query.strip():
        return create_error(ErrorCode.VALIDATION_ERROR, "Search query cannot be empty")
    if _has_breakout_chars(query):
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            "Invalid characters in search query",
            "Search queries cannot contain quotes or backslashes",
        )
    return None


def validate_repetition_rule(rule: RepetitionRule | None) -> BridgeError | None:  # noqa: C901
    if rule is None:
        return None

    if rule.frequency not in VALID_FREQUENCIES:
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid repetition frequency: {rule.frequency}",
            "Valid frequencies are: " + ", ".join(VALID_FREQUENCIES),
        )
    if not _is_int(rule.interval) or rule.interval < 1:
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid repetition interval: {rule.interval}",
            "Interval must be a positive integer",
        )
    if rule.repeat_method not in VALID_REPEAT_METHODS:
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid repeat method: {rule.repeat_method}",
            "Valid methods are: " + ", ".join(VALID_REPEAT_METHODS),
        )

    if rule.days_of_week is not None:
        if len(rule.days_of_week) == 0:
            return create_error(ErrorCode.VALIDATION_ERROR, "daysOfWeek must be a non-empty array")
        for day in rule.days_of_week:
            if not _is_int(day) or not 0 <= day <= 6:
                return create_error(
                    ErrorCode.VALIDATION_ERROR,
                    f"Invalid day of week: {day}",
                    "Days of week must be integers 0-6 (Sunday=0, Saturday=6)",
                )

    if rule.day_of_month is not None and (
        not _is_int(rule.day_of_month) or not 1 <= rule.day_of_month <= 31
    ):
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid day of month: {rule.day_of_month}",
            "Day of month must be an integer 1-31",
        )
    return None


def validate_estimated_minutes(minutes: int | None) -> BridgeError | None:
    if minutes is None:
        return None
    if not _is_int(minutes) or minutes < 0:
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid estimated minutes: {minutes}",
            "Estimated minutes must be a non-negative integer",
        )
    return None


def validate_pagination_params(limit: int | None, offset: int | None) -> BridgeError | None:
    if limit is not None:
        if not _is_int(limit) or limit < 1:
            return create_error(
                ErrorCode.VALIDATION_ERROR,
                f"Invalid limit: {limit}",
                "Limit must be a positive integer",
            )
        if limit > MAX_PAGINATION_LIMIT:
            return create_error(
                ErrorCode.VALIDATION_ERROR,
                f"Limit exceeds maximum allowed value: {limit}",
                f"Maximum limit is {MAX_PAGINATION_LIMIT}",
            )

    if offset is not None and (not _is_int(offset) or offset < 0):
        return create_error(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid offset: {offset}",
            "Offset must be a non-negative integer",
        )
    return None


def _has_breakout_chars(value: str) -> bool:
    return '"' in value or "\\" in value


def _reject_breakout_chars(value: str, label: str, plural: str) -> BridgeError | None:
    if not _has_breakout_chars(value):
        return None
    return create_error(
        ErrorCode.VALIDATION_ERROR,
        f"Invalid characters in {label}: {value}",
        f"{plural} cannot contain quotes or backslashes",
    )


def _is_int(value: object) -> bool:
    # bool is an int subclass; never accept it as a count
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()
