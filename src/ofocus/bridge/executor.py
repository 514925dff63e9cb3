"""Run AppleScript programs through osascript and decode their output."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Protocol

from ofocus.bridge.assets import ScriptAssets, default_assets
from ofocus.bridge.codec import decode_output
from ofocus.bridge.composer import DEFAULT_APPLICATION, compose, script_with_json_helpers
from ofocus.bridge.errors import ErrorCode, create_error
from ofocus.bridge.escape import shell_quote
from ofocus.bridge.failure_classifier import classify_script_error
from ofocus.bridge.outcome import Outcome
from ofocus.config import DEFAULT_BATCH_CHUNK_SIZE, Settings

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "AppleScript returned empty response"


class CompletedRun(Protocol):
    """Subset of `subprocess.CompletedProcess` the executor reads."""

    returncode: int
    stdout: str | None
    stderr: str | None


Runner = Callable[[list[str], float | None], CompletedRun]


def _run_interpreter(argv: list[str], timeout: float | None) -> CompletedRun:
    return subprocess.run(  # noqa: S603
        argv,
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
        timeout=timeout,
    )


class ScriptExecutor:
    """Execute composed programs or script files, one subprocess per call."""

    def __init__(
        self,
        *,
        interpreter: str = "osascript",
        application: str = DEFAULT_APPLICATION,
        timeout_seconds: float | None = None,
        batch_chunk_size: int = DEFAULT_BATCH_CHUNK_SIZE,
        assets: ScriptAssets | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.interpreter = interpreter
        self.application = application
        self.timeout_seconds = timeout_seconds
        self.batch_chunk_size = batch_chunk_size
        self._assets = assets
        self._runner = runner or _run_interpreter

    @classmethod
    def from_settings(cls, settings: Settings, *, runner: Runner | None = None) -> ScriptExecutor:
        bridge = settings.bridge
        return cls(
            interpreter=bridge.osascript_bin,
            application=bridge.application,
            timeout_seconds=bridge.script_timeout_seconds,
            batch_chunk_size=bridge.batch_chunk_size,
            assets=ScriptAssets(bridge.scripts_dir) if bridge.scripts_dir else None,
            runner=runner,
        )

    @property
    def assets(self) -> ScriptAssets:
        return self._assets or default_assets()

    def run_script(self, program: str) -> Outcome[Any]:
        """Execute an inline program via `<interpreter> -e <program>`."""

        rendered = f"{shell_quote(self.interpreter)} -e {shell_quote(program)}"
        return self._execute(shlex.split(rendered))

    def run_script_file(self, path: Path | str, args: Sequence[str] = ()) -> Outcome[Any]:
        """Execute a script file with positional string arguments."""

        quoted_args = " ".join(shell_quote(arg) for arg in args)
        rendered = f"{shell_quote(self.interpreter)} {shell_quote(str(path))} {quoted_args}"
        return self._execute(shlex.split(rendered))

    def run_composed(self, fragments: Sequence[str], body: str) -> Outcome[Any]:
        return self.run_script(compose(fragments, body, application=self.application))

    def run_with_json_helpers(
        self,
        body: str,
        *,
        extra_fragments: Sequence[str] = (),
    ) -> Outcome[Any]:
        """Execute `body` with the JSON helpers and optional serializer fragments."""

        program = script_with_json_helpers(
            body,
            extra_fragments=extra_fragments,
            assets=self.assets,
            application=self.application,
        )
        return self.run_script(program)

    def load_fragment(self, relative_path: str) -> str:
        return self.assets.load_cached(relative_path)

    def _execute(self, argv: list[str]) -> Outcome[Any]:
        logger.debug("Dispatching %s (%d argv items)", argv[0], len(argv))
        try:
            completed = self._runner(argv, self.timeout_seconds)
        except subprocess.TimeoutExpired:
            return Outcome.fail(
                create_error(
                    ErrorCode.APPLESCRIPT_ERROR,
                    "AppleScript execution timed out",
                    f"{self.interpreter} did not finish within {self.timeout_seconds} seconds",
                ),
            )
        except (OSError, subprocess.SubprocessError) as error:
            return Outcome.fail(classify_script_error(str(error)))
        except UnicodeDecodeError as error:
            return Outcome.fail(
                create_error(
                    ErrorCode.APPLESCRIPT_ERROR,
                    "AppleScript output is not valid text",
                    str(error),
                ),
            )

        stderr = (completed.stderr or "").strip()
        if stderr:
            return Outcome.fail(classify_script_error(stderr))

        if completed.returncode != 0:
            return Outcome.fail(
                classify_script_error(
                    f"{self.interpreter} exited with status {completed.returncode}",
                ),
            )

        stdout = (completed.stdout or "").strip()
        if not stdout:
            return Outcome.fail(create_error(ErrorCode.APPLESCRIPT_ERROR, EMPTY_RESPONSE_MESSAGE))

        return Outcome.ok(decode_output(stdout))


def default_executor() -> ScriptExecutor:
    """Executor configured from `OFOCUS_*` environment variables."""

    settings = Settings.from_env()
    settings.validate()
    return ScriptExecutor.from_settings(settings)
