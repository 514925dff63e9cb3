"""Closed error taxonomy shared by the bridge and the command layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error kinds every failed outcome is classified into."""

    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    TAG_NOT_FOUND = "TAG_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    OMNIFOCUS_NOT_RUNNING = "OMNIFOCUS_NOT_RUNNING"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_ID_FORMAT = "INVALID_ID_FORMAT"
    APPLESCRIPT_ERROR = "APPLESCRIPT_ERROR"
    JSON_PARSE_ERROR = "JSON_PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass(frozen=True, slots=True)
class BridgeError:
    """Structured failure carried by an `Outcome`. Build with `create_error`."""

    code: ErrorCode
    message: str
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


def create_error(code: ErrorCode | str, message: str, details: str | None = None) -> BridgeError:
    """Create a `BridgeError`, rejecting codes outside `ErrorCode`."""

    return BridgeError(code=ErrorCode(code), message=message, details=details)
