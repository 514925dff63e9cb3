"""Shared test fixtures."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass
from typing import Any

import pytest

from ofocus.bridge import assets as assets_module
from ofocus.bridge.assets import ScriptAssets
from ofocus.bridge.executor import ScriptExecutor


@dataclass(slots=True)
class FakeRun:
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


class FakeInterpreter:
    """Stands in for the osascript subprocess; replays queued responses."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self._responses: deque[FakeRun | Exception] = deque()

    def reply(self, stdout: Any = "", *, stderr: str = "", returncode: int = 0) -> FakeInterpreter:
        text = stdout if isinstance(stdout, str) else json.dumps(stdout)
        self._responses.append(FakeRun(returncode=returncode, stdout=text, stderr=stderr))
        return self

    def raise_error(self, error: Exception) -> FakeInterpreter:
        self._responses.append(error)
        return self

    def __call__(self, argv: list[str], timeout: float | None = None, **_kwargs: Any) -> FakeRun:
        self.calls.append(list(argv))
        self.timeouts.append(timeout)
        if not self._responses:
            raise AssertionError(f"Unexpected interpreter call: {argv[:2]}")
        response = self._responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def programs(self) -> list[str]:
        return [argv[2] for argv in self.calls if len(argv) > 2 and argv[1] == "-e"]


@pytest.fixture()
def fake_osascript() -> FakeInterpreter:
    return FakeInterpreter()


@pytest.fixture()
def executor(fake_osascript: FakeInterpreter) -> ScriptExecutor:
    return ScriptExecutor(assets=ScriptAssets(), runner=fake_osascript)


@pytest.fixture()
def clean_env(monkeypatch) -> None:
    """Drop OFOCUS_* overrides and the process-wide asset loader."""

    for name in (
        "OFOCUS_OSASCRIPT_BIN",
        "OFOCUS_APPLICATION",
        "OFOCUS_BATCH_CHUNK_SIZE",
        "OFOCUS_SCRIPT_TIMEOUT_SECONDS",
        "OFOCUS_SCRIPTS_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(assets_module, "_default_assets", None)
