"""Project queries and project create/update/drop/delete."""

from __future__ import annotations

from ofocus.bridge.errors import BridgeError, ErrorCode, create_error
from ofocus.bridge.escape import quote_literal, to_applescript_date
from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import Outcome
from ofocus.bridge.validation import (
    first_error,
    validate_date_string,
    validate_folder_name,
    validate_id,
    validate_project_name,
)
from ofocus.commands.common import date_assignment, delete_by_id, expect_data
from ofocus.commands.models import (
    DeleteResult,
    ProjectDropResult,
    ProjectOptions,
    ProjectRecord,
    ProjectStatus,
    ProjectUpdateOptions,
)

PROJECT_SERIALIZER = "serializers/project.applescript"
PROJECT_STATUSES: tuple[str, ...] = ("active", "on-hold", "completed", "dropped")

# project status names as OmniFocus spells them
_STATUS_TERMS = {
    "active": "active",
    "on-hold": "on hold",
    "completed": "done",
    "dropped": "dropped",
}


def _validate_status(status: str | None, allowed: tuple[str, ...]) -> BridgeError | None:
    if status is None or status in allowed:
        return None
    return create_error(
        ErrorCode.VALIDATION_ERROR,
        f"Invalid project status: {status}",
        "Valid statuses are: " + ", ".join(allowed),
    )


def _folder_lookup(folder_id: str | None, folder_name: str | None) -> str | None:
    if folder_id:
        return f"first flattened folder whose id is {quote_literal(folder_id)}"
    if folder_name:
        return f"first flattened folder whose name is {quote_literal(folder_name)}"
    return None


def _run_project_script(
    lines: list[str],
    failure_message: str,
    executor: ScriptExecutor | None,
) -> Outcome[ProjectRecord]:
    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        "\n    ".join(lines),
        extra_fragments=[runner.load_fragment(PROJECT_SERIALIZER)],
    )
    return expect_data(result, failure_message, "No project data returned")


def create_project(
    name: str,
    options: ProjectOptions | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[ProjectRecord]:
    """Create a project at the top level or inside a folder found by id or name."""

    opts = options or ProjectOptions()
    if not name or not name.strip():
        return Outcome.fail(
            create_error(ErrorCode.VALIDATION_ERROR, "Project name cannot be empty"),
        )
    error = first_error(
        validate_project_name(name),
        validate_id(opts.folder_id, "folder") if opts.folder_id is not None else None,
        validate_folder_name(opts.folder_name),
        _validate_status(opts.status, ("active", "on-hold")),
        validate_date_string(opts.due),
        validate_date_string(opts.defer),
    )
    if error is not None:
        return Outcome.fail(error)

    properties = [f"name:{quote_literal(name)}"]
    if opts.note is not None:
        properties.append(f"note:{quote_literal(opts.note)}")
    if opts.sequential is not None:
        properties.append(f"sequential:{str(opts.sequential).lower()}")
    if opts.status == "on-hold":
        properties.append("status:on hold")
    if opts.due:
        properties.append(f"due date:date {quote_literal(to_applescript_date(opts.due))}")
    if opts.defer:
        properties.append(f"defer date:date {quote_literal(to_applescript_date(opts.defer))}")
    record = "{" + ", ".join(properties) + "}"

    folder = _folder_lookup(opts.folder_id, opts.folder_name)
    if folder is not None:
        lines = [
            f"set targetFolder to {folder}",
            "set newProject to make new project at end of projects of targetFolder "
            f"with properties {record}",
        ]
    else:
        lines = [f"set newProject to make new project with properties {record}"]
    lines.append("return my serializeProject(newProject)")
    return _run_project_script(lines, "Failed to create project", executor)


def update_project(
    project_id: str,
    options: ProjectUpdateOptions,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[ProjectRecord]:
    """Change a project in place; a folder id or name moves it into that folder."""

    error = first_error(
        validate_id(project_id, "project"),
        validate_project_name(options.name),
        validate_id(options.folder_id, "folder") if options.folder_id is not None else None,
        validate_folder_name(options.folder_name),
        _validate_status(options.status, PROJECT_STATUSES),
        validate_date_string(options.due),
        validate_date_string(options.defer),
    )
    if error is not None:
        return Outcome.fail(error)

    lines = [f"set theProject to first flattened project whose id is {quote_literal(project_id)}"]
    if options.name is not None:
        lines.append(f"set name of theProject to {quote_literal(options.name)}")
    if options.note is not None:
        lines.append(f"set note of theProject to {quote_literal(options.note)}")
    if options.sequential is not None:
        lines.append(f"set sequential of theProject to {str(options.sequential).lower()}")
    if options.status is not None:
        lines.append(f"set status of theProject to {_STATUS_TERMS[options.status]}")
    for field_name, value in (("due date", options.due), ("defer date", options.defer)):
        if value is not None:
            lines.append(date_assignment("theProject", field_name, value))

    folder = _folder_lookup(options.folder_id, options.folder_name)
    if folder is not None:
        lines.append(f"set targetFolder to {folder}")
        lines.append("move theProject to end of projects of targetFolder")
    lines.append("return my serializeProject(theProject)")
    return _run_project_script(lines, "Failed to update project", executor)


def drop_project(
    project_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[ProjectDropResult]:
    """Mark a project dropped; it stays in the database with its history."""

    id_error = validate_id(project_id, "project")
    if id_error is not None:
        return Outcome.fail(id_error)

    body = f"""
    set theProject to first flattened project whose id is {quote_literal(project_id)}
    set status of theProject to dropped
    set projDropped to (status of theProject is dropped)
    return "{{\\"projectId\\": \\"" & (my escapeJson({quote_literal(project_id)})) & ¬
      "\\", \\"projectName\\": \\"" & (my escapeJson(name of theProject)) & ¬
      "\\", \\"dropped\\": " & projDropped & "}}"
    """
    runner = executor or default_executor()
    return expect_data(
        runner.run_with_json_helpers(body),
        "Failed to drop project",
        "No result returned",
    )


def delete_project(
    project_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[DeleteResult]:
    """Delete a project permanently, with every task in it."""

    return delete_by_id(project_id, "project", executor=executor)


def query_projects(
    status: ProjectStatus | None = None,
    folder: str | None = None,
    sequential: bool | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[list[ProjectRecord]]:
    """List projects, optionally filtered by status, containing folder and ordering."""

    error = first_error(
        _validate_status(status, PROJECT_STATUSES),
        validate_folder_name(folder),
    )
    if error is not None:
        return Outcome.fail(error)

    where_clause = ""
    if sequential is not None:
        where_clause = f" where sequential is {str(sequential).lower()}"

    filters: list[str] = []
    if status is not None:
        filters.append(
            f'if (my projectStatusName(p)) is not "{status}" then set shouldInclude to false',
        )
    if folder:
        filters.append(
            "try\n"
            f"        if name of folder of p is not {quote_literal(folder)} "
            "then set shouldInclude to false\n"
            "      on error\n"
            "        set shouldInclude to false\n"
            "      end try",
        )

    filter_lines = "\n      ".join(filters)

    body = f"""
    set output to "["
    set isFirst to true

    repeat with p in (flattened projects{where_clause})
      set shouldInclude to true
      {filter_lines}
      if shouldInclude then
        if not isFirst then set output to output & ","
        set isFirst to false
        set output to output & (my serializeProject(p))
      end if
    end repeat

    return output & "]"
    """

    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        body,
        extra_fragments=[runner.load_fragment(PROJECT_SERIALIZER)],
    )
    if not result.success:
        return Outcome.fail(result.error_or("Failed to query projects"))
    return Outcome.ok(result.data or [])
