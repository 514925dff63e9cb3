from __future__ import annotations

from pathlib import Path

import allure

from ofocus.bridge.assets import JSON_HELPERS, ScriptAssets
from ofocus.bridge.composer import application_script, compose, script_with_json_helpers

pytestmark = [
    allure.epic("AppleScript Bridge"),
    allure.feature("Script Composition"),
]


def test_compose_places_fragments_before_tell_block_in_order() -> None:
    program = compose(["on a()\nend a", "on b()\nend b"], "return my a()")

    assert program.index("on a()") < program.index("on b()") < program.index("tell application")
    assert program.endswith("  end tell\nend tell")
    assert '    return my a()\n' in program


def test_application_script_wraps_body_in_default_document() -> None:
    program = application_script('return "ok"')

    assert program.splitlines()[2:4] == ['tell application "OmniFocus"', "  tell default document"]
    assert 'return "ok"' in program


def test_compose_targets_configured_application() -> None:
    program = compose([], "return 1", application="OmniFocus 4")

    assert 'tell application "OmniFocus 4"' in program


def test_json_helpers_precede_extra_fragments(tmp_path: Path) -> None:
    (tmp_path / "helpers").mkdir()
    (tmp_path / JSON_HELPERS).write_text("on escapeJson(t)\nend escapeJson", "utf-8")

    program = script_with_json_helpers(
        "return 1",
        extra_fragments=["on serializeTask(t)\nend serializeTask"],
        assets=ScriptAssets(tmp_path),
    )

    assert program.index("on escapeJson") < program.index("on serializeTask")
    assert program.index("on serializeTask") < program.index("tell application")
