"""Helpers shared by command modules."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ofocus.bridge.errors import BridgeError, ErrorCode, create_error
from ofocus.bridge.escape import quote_literal, to_applescript_date
from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import Outcome
from ofocus.bridge.validation import (
    IdKind,
    first_error,
    validate_date_string,
    validate_estimated_minutes,
    validate_id,
    validate_project_name,
    validate_repetition_rule,
    validate_tags,
)
from ofocus.commands.models import DeleteResult, TaskUpdateOptions
from ofocus.commands.repetition import clear_repetition_script, repetition_rule_script


def expect_data(result: Outcome[Any], failure_message: str, missing_message: str) -> Outcome[Any]:
    """Pass a successful payload through; name the failure when the bridge gave none."""

    if not result.success:
        return Outcome.fail(result.error_or(failure_message))
    if result.data is None:
        return Outcome.fail(create_error(ErrorCode.UNKNOWN_ERROR, missing_message))
    return Outcome.ok(result.data)


def tag_assignment_lines(task_var: str, tags: Iterable[str]) -> list[str]:
    # unknown tags are skipped rather than failing the whole command
    return [
        "try\n"
        f"      set theTag to first flattened tag whose name is {quote_literal(tag)}\n"
        f"      add theTag to tags of {task_var}\n"
        "    end try"
        for tag in tags
    ]


def date_assignment(target: str, field_name: str, value: str) -> str:
    """`set <field> of <target>`; an empty value clears the date."""

    if value == "":
        return f"set {field_name} of {target} to missing value"
    return f"set {field_name} of {target} to date {quote_literal(to_applescript_date(value))}"


def validate_task_update(options: TaskUpdateOptions) -> BridgeError | None:
    return first_error(
        validate_date_string(options.due),
        validate_date_string(options.defer),
        validate_tags(options.tags),
        validate_project_name(options.project),
        validate_estimated_minutes(options.estimated_minutes),
        validate_repetition_rule(options.repeat),
    )


def task_update_statements(task_var: str, options: TaskUpdateOptions) -> list[str]:  # noqa: C901
    """Render the changes in `options` against the task bound to `task_var`.

    Order: plain fields, project move, tags (cleared then re-added), repetition.
    """

    statements: list[str] = []
    if options.title is not None:
        statements.append(f"set name of {task_var} to {quote_literal(options.title)}")
    if options.note is not None:
        statements.append(f"set note of {task_var} to {quote_literal(options.note)}")
    if options.flag is not None:
        statements.append(f"set flagged of {task_var} to {str(options.flag).lower()}")
    for field_name, value in (("due date", options.due), ("defer date", options.defer)):
        if value is not None:
            statements.append(date_assignment(task_var, field_name, value))
    if options.estimated_minutes is not None:
        statements.append(
            f"set estimated minutes of {task_var} to {int(options.estimated_minutes)}",
        )
    if options.clear_estimate:
        statements.append(f"set estimated minutes of {task_var} to missing value")

    if options.project is not None:
        if options.project == "":
            statements.append(f"set containing project of {task_var} to missing value")
        else:
            statements.append(
                "set theProject to first flattened project whose name is "
                f"{quote_literal(options.project)}\n"
                f"        move {task_var} to end of tasks of theProject",
            )

    if options.tags is not None:
        statements.append(
            f"repeat with existingTag in (tags of {task_var})\n"
            f"          remove existingTag from tags of {task_var}\n"
            "        end repeat",
        )
        statements.extend(tag_assignment_lines(task_var, options.tags))

    if options.clear_repeat:
        statements.append(clear_repetition_script(task_var))
    elif options.repeat is not None:
        statements.append(repetition_rule_script(task_var, options.repeat))
    return statements


def delete_by_id(
    object_id: str,
    kind: IdKind,
    *,
    executor: ScriptExecutor | None,
) -> Outcome[DeleteResult]:
    """Delete one project, folder or tag; the caller gets `{<kind>Id, deleted}`."""

    id_error = validate_id(object_id, kind)
    if id_error is not None:
        return Outcome.fail(id_error)

    key = f"{kind}Id"
    body = f"""
    set theObject to first flattened {kind} whose id is {quote_literal(object_id)}
    delete theObject
    return "{{\\"{key}\\": \\"" & (my escapeJson({quote_literal(object_id)})) & ¬
      "\\", \\"deleted\\": true}}"
    """
    runner = executor or default_executor()
    return expect_data(
        runner.run_with_json_helpers(body),
        f"Failed to delete {kind}",
        "No result returned",
    )
