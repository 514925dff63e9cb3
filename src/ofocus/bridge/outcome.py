"""Outcome shapes returned by every bridge and command operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ofocus.bridge.errors import BridgeError, ErrorCode, create_error

T = TypeVar("T")


@dataclass(slots=True)
class Outcome(Generic[T]):
    """Success/failure result. Callers branch on `success`; it is never raised."""

    success: bool
    data: T | None = None
    error: BridgeError | None = None

    @classmethod
    def ok(cls, data: T) -> Outcome[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: BridgeError) -> Outcome[T]:
        return cls(success=False, error=error)

    def error_or(self, message: str) -> BridgeError:
        """Return the attached error, or an `UNKNOWN_ERROR` carrying `message`."""

        if self.error is not None:
            return self.error
        return create_error(ErrorCode.UNKNOWN_ERROR, message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the `{success, data, error}` envelope."""

        return {
            "success": self.success,
            "data": _plain(self.data) if self.success else None,
            "error": self.error.to_dict() if self.error is not None else None,
        }


@dataclass(frozen=True, slots=True)
class BatchFailure:
    """One item a batch chunk script could not process."""

    id: str
    error: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "error": self.error}


@dataclass(slots=True)
class BatchResult(Generic[T]):
    """Aggregate of all chunks of one batch call."""

    succeeded: list[T] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)

    @property
    def total_succeeded(self) -> int:
        return len(self.succeeded)

    @property
    def total_failed(self) -> int:
        return len(self.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": [_plain(item) for item in self.succeeded],
            "failed": [failure.to_dict() for failure in self.failed],
            "totalSucceeded": self.total_succeeded,
            "totalFailed": self.total_failed,
        }


def _plain(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value
