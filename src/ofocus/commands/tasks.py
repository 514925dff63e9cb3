"""Single-task commands: inbox capture, status changes, queries and search."""

from __future__ import annotations

from ofocus.bridge.errors import ErrorCode, create_error
from ofocus.bridge.escape import quote_literal, to_applescript_date
from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import Outcome
from ofocus.bridge.validation import (
    first_error,
    validate_date_string,
    validate_estimated_minutes,
    validate_id,
    validate_pagination_params,
    validate_project_name,
    validate_repetition_rule,
    validate_search_query,
    validate_tags,
)
from ofocus.commands.common import (
    expect_data,
    tag_assignment_lines,
    task_update_statements,
    validate_task_update,
)
from ofocus.commands.models import (
    InboxOptions,
    PaginatedResult,
    SearchScope,
    TaskActionResult,
    TaskQuery,
    TaskRecord,
    TaskUpdateOptions,
)
from ofocus.commands.repetition import repetition_rule_script

TASK_SERIALIZER = "serializers/task.applescript"
TEXT_HELPERS = "helpers/text.applescript"

DEFAULT_QUERY_LIMIT = 100
SEARCH_SCOPES: tuple[str, ...] = ("name", "note", "both")


def add_to_inbox(
    title: str,
    options: InboxOptions | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TaskRecord]:
    """Create an inbox task and return it as a task record."""

    opts = options or InboxOptions()
    if not title or not title.strip():
        return Outcome.fail(create_error(ErrorCode.VALIDATION_ERROR, "Task title cannot be empty"))
    error = first_error(
        validate_date_string(opts.due),
        validate_date_string(opts.defer),
        validate_tags(opts.tags),
        validate_estimated_minutes(opts.estimated_minutes),
        validate_repetition_rule(opts.repeat),
    )
    if error is not None:
        return Outcome.fail(error)

    properties = [f"name:{quote_literal(title)}"]
    if opts.note is not None:
        properties.append(f"note:{quote_literal(opts.note)}")
    if opts.flag:
        properties.append("flagged:true")
    if opts.due:
        properties.append(f"due date:date {quote_literal(to_applescript_date(opts.due))}")
    if opts.defer:
        properties.append(f"defer date:date {quote_literal(to_applescript_date(opts.defer))}")
    if opts.estimated_minutes is not None:
        properties.append(f"estimated minutes:{int(opts.estimated_minutes)}")

    lines = [f"set newTask to make new inbox task with properties {{{', '.join(properties)}}}"]
    lines.extend(tag_assignment_lines("newTask", opts.tags))
    if opts.repeat is not None:
        lines.append(repetition_rule_script("newTask", opts.repeat))
    lines.append("return my serializeTask(newTask)")

    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        "\n    ".join(lines),
        extra_fragments=[runner.load_fragment(TASK_SERIALIZER)],
    )
    return expect_data(result, "Failed to add task to inbox", "No task data returned")


def complete_task(
    task_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TaskActionResult]:
    return _task_action(
        task_id,
        action="mark complete theTask",
        state_key="completed",
        state_expr="completed of theTask",
        failure_message="Failed to complete task",
        executor=executor,
    )


def drop_task(
    task_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TaskActionResult]:
    return _task_action(
        task_id,
        action="mark dropped theTask",
        state_key="dropped",
        state_expr="dropped of theTask",
        failure_message="Failed to drop task",
        executor=executor,
    )


def delete_task(
    task_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TaskActionResult]:
    """Delete a task permanently."""

    id_error = validate_id(task_id, "task")
    if id_error is not None:
        return Outcome.fail(id_error)

    body = f"""
    set theTask to first flattened task whose id is {quote_literal(task_id)}
    delete theTask
    return "{{\\"taskId\\": \\"" & (my escapeJson({quote_literal(task_id)})) & ¬
      "\\", \\"deleted\\": true}}"
    """
    runner = executor or default_executor()
    return expect_data(
        runner.run_with_json_helpers(body),
        "Failed to delete task",
        "No result returned",
    )


def update_task(
    task_id: str,
    options: TaskUpdateOptions,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TaskRecord]:
    """Change one task in place and return its updated record."""

    error = first_error(validate_id(task_id, "task"), validate_task_update(options))
    if error is not None:
        return Outcome.fail(error)

    lines = [
        f"set theTask to first flattened task whose id is {quote_literal(task_id)}",
        *task_update_statements("theTask", options),
        "return my serializeTask(theTask)",
    ]
    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        "\n    ".join(lines),
        extra_fragments=[runner.load_fragment(TASK_SERIALIZER)],
    )
    return expect_data(result, "Failed to update task", "No task data returned")


def query_tasks(
    query: TaskQuery | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[PaginatedResult[TaskRecord]]:
    """List tasks matching the filters, one page at a time."""

    q = query or TaskQuery()
    error = first_error(
        validate_date_string(q.due_before),
        validate_date_string(q.due_after),
        validate_project_name(q.project),
        validate_tags([q.tag] if q.tag is not None else None),
        validate_pagination_params(q.limit, q.offset),
    )
    if error is not None:
        return Outcome.fail(error)

    limit = int(q.limit) if q.limit is not None else DEFAULT_QUERY_LIMIT
    offset = int(q.offset) if q.offset is not None else 0

    conditions: list[str] = []
    if q.completed is True:
        conditions.append("completed is true")
    elif q.completed is False:
        conditions.append("completed is false")
    if q.flagged is True:
        conditions.append("flagged is true")
    if q.available:
        conditions.extend(
            ["completed is false", "effectively dropped is false", "blocked is false"],
        )
    where_clause = f" where {' and '.join(conditions)}" if conditions else ""

    body = f"""
    set itemsJson to ""
    set isFirst to true
    set totalCount to 0
    set returnedCount to 0

    repeat with t in (flattened tasks{where_clause})
      set shouldInclude to true
      {_task_filter_lines(q)}
      if shouldInclude then
        if totalCount >= {offset} and returnedCount < {limit} then
          if not isFirst then set itemsJson to itemsJson & ","
          set isFirst to false
          set itemsJson to itemsJson & (my serializeTask(t))
          set returnedCount to returnedCount + 1
        end if
        set totalCount to totalCount + 1
      end if
    end repeat

    set hasMore to (totalCount > ({offset} + returnedCount))
    return "{{\\"items\\": [" & itemsJson & "], " & ¬
      "\\"totalCount\\": " & totalCount & ", " & ¬
      "\\"returnedCount\\": " & returnedCount & ", " & ¬
      "\\"hasMore\\": " & hasMore & ", " & ¬
      "\\"offset\\": {offset}, " & ¬
      "\\"limit\\": {limit}}}"
    """

    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        body,
        extra_fragments=[runner.load_fragment(TASK_SERIALIZER)],
    )
    return expect_data(result, "Failed to query tasks", "No task data returned")


def search_tasks(  # noqa: PLR0913
    query: str,
    *,
    scope: SearchScope = "both",
    limit: int = DEFAULT_QUERY_LIMIT,
    include_completed: bool = False,
    executor: ScriptExecutor | None = None,
) -> Outcome[list[TaskRecord]]:
    """Case-insensitive substring search over task names and/or notes."""

    error = first_error(
        validate_search_query(query),
        validate_pagination_params(limit, None),
    )
    if error is not None:
        return Outcome.fail(error)
    if scope not in SEARCH_SCOPES:
        return Outcome.fail(
            create_error(
                ErrorCode.VALIDATION_ERROR,
                f"Invalid search scope: {scope}",
                "Valid scopes are: " + ", ".join(SEARCH_SCOPES),
            ),
        )

    needle = quote_literal(query.lower())
    matchers = {
        "name": f"my containsText(name of t, {needle})",
        "note": f"my containsText(note of t, {needle})",
    }
    condition = (
        f"({matchers['name']} or {matchers['note']})" if scope == "both" else matchers[scope]
    )
    completed_filter = (
        "" if include_completed else "if completed of t is true then set shouldInclude to false"
    )

    body = f"""
    set output to "["
    set isFirst to true
    set matchCount to 0

    repeat with t in flattened tasks
      if matchCount >= {int(limit)} then exit repeat
      set shouldInclude to false
      try
        if {condition} then set shouldInclude to true
      end try
      {completed_filter}
      if shouldInclude then
        set matchCount to matchCount + 1
        if not isFirst then set output to output & ","
        set isFirst to false
        set output to output & (my serializeTask(t))
      end if
    end repeat

    return output & "]"
    """

    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        body,
        extra_fragments=[
            runner.load_fragment(TEXT_HELPERS),
            runner.load_fragment(TASK_SERIALIZER),
        ],
    )
    if not result.success:
        return Outcome.fail(result.error_or("Failed to search tasks"))
    return Outcome.ok(result.data or [])


def _task_action(  # noqa: PLR0913
    task_id: str,
    *,
    action: str,
    state_key: str,
    state_expr: str,
    failure_message: str,
    executor: ScriptExecutor | None,
) -> Outcome[TaskActionResult]:
    id_error = validate_id(task_id, "task")
    if id_error is not None:
        return Outcome.fail(id_error)

    body = f"""
    set theTask to first flattened task whose id is {quote_literal(task_id)}
    {action}
    set taskName to name of theTask
    set taskState to {state_expr}
    return "{{" & ¬
      "\\"taskId\\": \\"" & (my escapeJson(id of theTask)) & "\\", " & ¬
      "\\"taskName\\": \\"" & (my escapeJson(taskName)) & "\\", " & ¬
      "\\"{state_key}\\": " & taskState & ¬
      "}}"
    """
    runner = executor or default_executor()
    return expect_data(runner.run_with_json_helpers(body), failure_message, "No result returned")


def _task_filter_lines(query: TaskQuery) -> str:
    lines: list[str] = []
    if query.project:
        lines.append(
            "try\n"
            f"        if name of containing project of t is not {quote_literal(query.project)} "
            "then set shouldInclude to false\n"
            "      on error\n"
            "        set shouldInclude to false\n"
            "      end try",
        )
    if query.tag:
        lines.append(
            "if shouldInclude then\n"
            "        set hasTag to false\n"
            "        repeat with tg in tags of t\n"
            f"          if name of tg is {quote_literal(query.tag)} then set hasTag to true\n"
            "        end repeat\n"
            "        if not hasTag then set shouldInclude to false\n"
            "      end if",
        )
    for bound, comparison in ((query.due_before, ">"), (query.due_after, "<")):
        if not bound:
            continue
        lines.append(
            "if shouldInclude then\n"
            "        try\n"
            f"          if (due date of t) {comparison} "
            f"date {quote_literal(to_applescript_date(bound))} then set shouldInclude to false\n"
            "        on error\n"
            "          set shouldInclude to false\n"
            "        end try\n"
            "      end if",
        )
    return "\n      ".join(lines)
