"""Runtime configuration for the AppleScript bridge."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_BATCH_CHUNK_SIZE = 50


@dataclass(slots=True)
class BridgeSettings:
    """Settings for osascript invocation and script assembly."""

    osascript_bin: str = "osascript"
    application: str = "OmniFocus"
    batch_chunk_size: int = DEFAULT_BATCH_CHUNK_SIZE
    script_timeout_seconds: float | None = None
    scripts_dir: Path | None = None


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    bridge: BridgeSettings = field(default_factory=BridgeSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from `OFOCUS_*` environment variables."""

        scripts_dir = (os.getenv("OFOCUS_SCRIPTS_DIR") or "").strip()
        return cls(
            bridge=BridgeSettings(
                osascript_bin=os.getenv("OFOCUS_OSASCRIPT_BIN", "osascript").strip()
                or "osascript",
                application=os.getenv("OFOCUS_APPLICATION", "OmniFocus").strip() or "OmniFocus",
                batch_chunk_size=int(
                    os.getenv("OFOCUS_BATCH_CHUNK_SIZE", str(DEFAULT_BATCH_CHUNK_SIZE)),
                ),
                script_timeout_seconds=_env_optional_float("OFOCUS_SCRIPT_TIMEOUT_SECONDS"),
                scripts_dir=Path(scripts_dir) if scripts_dir else None,
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the bridge cannot work with."""

        if self.bridge.batch_chunk_size <= 0:
            raise ValueError("OFOCUS_BATCH_CHUNK_SIZE must be a positive integer.")
        timeout = self.bridge.script_timeout_seconds
        if timeout is not None and timeout <= 0:
            raise ValueError("OFOCUS_SCRIPT_TIMEOUT_SECONDS must be > 0 when set.")
        if '"' in self.bridge.application or "\\" in self.bridge.application:
            raise ValueError("OFOCUS_APPLICATION cannot contain quotes or backslashes.")


def _env_optional_float(name: str) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    return float(raw)
