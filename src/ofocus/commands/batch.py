"""Multi-task mutations built on the chunked batch engine."""

from __future__ import annotations

from collections.abc import Sequence

from ofocus.bridge.batch import batch_loop_body, run_batch
from ofocus.bridge.executor import ScriptExecutor
from ofocus.bridge.outcome import BatchResult, Outcome
from ofocus.commands.common import task_update_statements, validate_task_update
from ofocus.commands.models import BatchTaskItem, TaskUpdateOptions

_TASK_FIELDS = {"taskId": "itemId", "taskName": "taskName"}


def complete_tasks(
    task_ids: Sequence[str],
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[BatchResult[BatchTaskItem]]:
    """Mark every task complete; unknown ids are reported per item."""

    def build_body(chunk: list[str]) -> str:
        return batch_loop_body(
            chunk,
            "set completed of theTask to true\n        set taskName to name of theTask",
            _TASK_FIELDS,
            item_var="theTask",
        )

    return run_batch(
        task_ids,
        build_body,
        kind="task",
        executor=executor,
        failure_message="Failed to complete tasks",
    )


def delete_tasks(
    task_ids: Sequence[str],
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[BatchResult[BatchTaskItem]]:
    """Delete every task permanently; unknown ids are reported per item."""

    def build_body(chunk: list[str]) -> str:
        return batch_loop_body(
            chunk,
            "delete theTask",
            {"taskId": "itemId"},
            item_var="theTask",
        )

    return run_batch(
        task_ids,
        build_body,
        kind="task",
        executor=executor,
        failure_message="Failed to delete tasks",
    )


def update_tasks(
    task_ids: Sequence[str],
    options: TaskUpdateOptions,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[BatchResult[BatchTaskItem]]:
    """Apply the same field changes to every task."""

    error = validate_task_update(options)
    if error is not None:
        return Outcome.fail(error)

    statements = "\n        ".join(
        [*task_update_statements("theTask", options), "set taskName to name of theTask"],
    )

    def build_body(chunk: list[str]) -> str:
        return batch_loop_body(chunk, statements, _TASK_FIELDS, item_var="theTask")

    return run_batch(
        task_ids,
        build_body,
        kind="task",
        executor=executor,
        failure_message="Failed to update tasks",
    )

