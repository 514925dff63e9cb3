from __future__ import annotations

import subprocess
from pathlib import Path

import allure
import pytest

from ofocus.bridge import executor as executor_module
from ofocus.bridge.assets import ScriptAssets
from ofocus.bridge.errors import ErrorCode
from ofocus.bridge.executor import EMPTY_RESPONSE_MESSAGE, ScriptExecutor, default_executor
from ofocus.config import BridgeSettings, Settings

pytestmark = [
    allure.epic("AppleScript Bridge"),
    allure.feature("Executor"),
]


def test_json_stdout_is_decoded(executor: ScriptExecutor, fake_osascript) -> None:
    fake_osascript.reply('{"id": "abc", "count": 2}\n')

    result = executor.run_script('return "x"')

    assert result.success
    assert result.data == {"id": "abc", "count": 2}
    assert fake_osascript.calls[0][:2] == ["osascript", "-e"]


def test_non_json_stdout_is_returned_as_trimmed_text(executor, fake_osascript) -> None:
    fake_osascript.reply("  plain words \n")

    result = executor.run_script("return 1")

    assert result.success
    assert result.data == "plain words"


@pytest.mark.parametrize("stdout", ["", "   \n"])
def test_empty_stdout_is_a_failure(executor, fake_osascript, stdout: str) -> None:
    fake_osascript.reply(stdout)

    result = executor.run_script("return 1")

    assert not result.success
    assert result.error is not None
    assert result.error.code == ErrorCode.APPLESCRIPT_ERROR
    assert result.error.message == EMPTY_RESPONSE_MESSAGE
    assert "empty" in result.error.message


def test_stderr_wins_over_stdout(executor, fake_osascript) -> None:
    stderr = "execution error: OmniFocus got an error: Can't get first flattened task. (-1728)"
    fake_osascript.reply('{"ok": true}', stderr=stderr)

    result = executor.run_script("return 1")

    assert not result.success
    assert result.error is not None
    assert result.error.code == ErrorCode.TASK_NOT_FOUND
    assert result.error.details == stderr


def test_non_zero_exit_without_stderr_is_classified(executor, fake_osascript) -> None:
    fake_osascript.reply('{"ok": true}', returncode=1)

    result = executor.run_script("return 1")

    assert not result.success
    assert result.error is not None
    assert result.error.code == ErrorCode.APPLESCRIPT_ERROR
    assert result.error.details == "osascript exited with status 1"


def test_missing_interpreter_becomes_failure(executor, fake_osascript) -> None:
    fake_osascript.raise_error(FileNotFoundError(2, "No such file or directory", "osascript"))

    result = executor.run_script("return 1")

    assert not result.success
    assert result.error is not None
    assert result.error.code == ErrorCode.APPLESCRIPT_ERROR
    assert "No such file" in (result.error.details or "")


def test_timeout_becomes_failure(fake_osascript) -> None:
    fake_osascript.raise_error(subprocess.TimeoutExpired(["osascript"], 5))
    executor = ScriptExecutor(timeout_seconds=5, assets=ScriptAssets(), runner=fake_osascript)

    result = executor.run_script("return 1")

    assert not result.success
    assert result.error is not None
    assert result.error.message == "AppleScript execution timed out"
    assert fake_osascript.timeouts == [5]


def test_program_reaches_interpreter_intact_through_shell_quoting(executor, fake_osascript) -> None:
    program = "set x to \"it's\" & 'odd' & \"\\\\\"\nreturn x"
    fake_osascript.reply("ok")

    executor.run_script(program)

    assert fake_osascript.calls[0] == ["osascript", "-e", program]


def test_script_file_passes_arguments_verbatim(executor, fake_osascript) -> None:
    fake_osascript.reply("[]")

    result = executor.run_script_file(Path("/tmp/my script.applescript"), ["it's", "two words"])

    assert result.success
    assert fake_osascript.calls[0] == [
        "osascript",
        "/tmp/my script.applescript",
        "it's",
        "two words",
    ]


def test_run_with_json_helpers_prepends_helpers(executor, fake_osascript) -> None:
    fake_osascript.reply('"done"')

    result = executor.run_with_json_helpers(
        'return "done"',
        extra_fragments=["on extra()\nend extra"],
    )

    program = fake_osascript.programs[0]
    assert result.data == "done"
    assert program.index("on escapeJson(") < program.index("on extra()")
    assert program.index("on extra()") < program.index('tell application "OmniFocus"')


def test_executor_from_settings_uses_bridge_values(tmp_path: Path, fake_osascript) -> None:
    settings = Settings(
        bridge=BridgeSettings(
            osascript_bin="/usr/local/bin/osascript",
            application="OmniFocus 4",
            batch_chunk_size=10,
            script_timeout_seconds=30,
            scripts_dir=tmp_path,
        ),
    )

    executor = ScriptExecutor.from_settings(settings, runner=fake_osascript)
    fake_osascript.reply("1")
    executor.run_composed([], "return 1")

    assert executor.batch_chunk_size == 10
    assert executor.assets.root == tmp_path.resolve()
    assert fake_osascript.calls[0][0] == "/usr/local/bin/osascript"
    assert 'tell application "OmniFocus 4"' in fake_osascript.programs[0]
    assert fake_osascript.timeouts == [30]


def test_default_executor_runs_subprocess(monkeypatch, clean_env, fake_osascript) -> None:
    monkeypatch.setattr(executor_module.subprocess, "run", fake_osascript)
    fake_osascript.reply('{"ok": 1}')

    result = default_executor().run_script("return 1")

    assert result.data == {"ok": 1}


def test_default_executor_rejects_invalid_settings(monkeypatch, clean_env) -> None:
    monkeypatch.setenv("OFOCUS_BATCH_CHUNK_SIZE", "0")

    with pytest.raises(ValueError, match="OFOCUS_BATCH_CHUNK_SIZE"):
        default_executor()


def test_undecodable_output_is_replaced_not_raised(monkeypatch, clean_env) -> None:
    seen: dict[str, object] = {}

    def run(argv, **kwargs):
        seen.update(kwargs)
        stdout = b"\xff\xfebad".decode("utf-8", errors=kwargs.get("errors", "strict"))
        return subprocess.CompletedProcess(argv, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(executor_module.subprocess, "run", run)

    result = ScriptExecutor(assets=ScriptAssets()).run_script("return 1")

    assert seen["errors"] == "replace"
    assert result.success
    assert result.data == "\ufffd\ufffdbad"


def test_decode_error_from_runner_becomes_failure(executor, fake_osascript) -> None:
    fake_osascript.raise_error(
        UnicodeDecodeError("utf-8", b"\xff\xfebad", 0, 1, "invalid start byte"),
    )

    result = executor.run_script("return 1")

    assert not result.success
    assert result.error is not None
    assert result.error.code == ErrorCode.APPLESCRIPT_ERROR
    assert result.error.message == "AppleScript output is not valid text"
    assert "0xff" in (result.error.details or "")
