"""Chunked batch execution for multi-item mutations.

osascript becomes unreliable when one invocation touches too many objects,
so ids are split into chunks and each chunk runs as one script. Per-item
failures are caught inside the chunk script and reported as data; only a
chunk that cannot run at all fails the whole batch. Chunks run strictly one
after another because OmniFocus gives no guarantees for concurrent
automation sessions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any, TypeVar

from ofocus.bridge.errors import ErrorCode, create_error
from ofocus.bridge.escape import applescript_list
from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import BatchFailure, BatchResult, Outcome
from ofocus.bridge.validation import IdKind, validate_id
from ofocus.config import DEFAULT_BATCH_CHUNK_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_BATCH_SIZE = DEFAULT_BATCH_CHUNK_SIZE

ChunkBodyBuilder = Callable[[list[str]], str]


def chunked(ids: Sequence[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive slices of `ids`, preserving order."""

    if size <= 0:
        raise ValueError("Chunk size must be a positive integer.")
    for start in range(0, len(ids), size):
        yield list(ids[start : start + size])


def run_batch(  # noqa: PLR0913
    ids: Sequence[str],
    build_body: ChunkBodyBuilder,
    *,
    kind: IdKind = "task",
    chunk_size: int | None = None,
    executor: ScriptExecutor | None = None,
    extra_fragments: Sequence[str] = (),
    parse_item: Callable[[Any], T] | None = None,
    failure_message: str = "Batch operation failed",
) -> Outcome[BatchResult[T]]:
    """Validate every id, run one script per chunk and merge the chunk reports.

    `build_body` receives the ids of one chunk and returns the script body
    (usually rendered with `batch_loop_body`); it is composed with the JSON
    helpers and `extra_fragments` before execution.
    """

    if not ids:
        return Outcome.fail(
            create_error(ErrorCode.VALIDATION_ERROR, f"No {kind} IDs provided"),
        )

    for item_id in ids:
        id_error = validate_id(item_id, kind)
        if id_error is not None:
            return Outcome.fail(id_error)

    if chunk_size is not None and not _is_positive_int(chunk_size):
        return Outcome.fail(
            create_error(
                ErrorCode.VALIDATION_ERROR,
                f"Invalid batch chunk size: {chunk_size}",
                "Chunk size must be a positive integer",
            ),
        )

    runner = executor or default_executor()
    size = chunk_size
    if size is None:
        configured = runner.batch_chunk_size
        size = configured if _is_positive_int(configured) else MAX_BATCH_SIZE
    aggregate: BatchResult[T] = BatchResult()

    for index, chunk in enumerate(chunked(ids, size), start=1):
        logger.info("Batch chunk %d: %d %s id(s)", index, len(chunk), kind)
        result = runner.run_with_json_helpers(build_body(chunk), extra_fragments=extra_fragments)
        if not result.success:
            return Outcome.fail(result.error_or(failure_message))

        report = _read_chunk_report(result.data)
        if report is None:
            return Outcome.fail(
                create_error(
                    ErrorCode.JSON_PARSE_ERROR,
                    "Batch chunk returned an unexpected payload",
                    str(result.data)[:500],
                ),
            )

        succeeded, failed = report
        for item in succeeded:
            aggregate.succeeded.append(parse_item(item) if parse_item else item)
        aggregate.failed.extend(failed)

    logger.info(
        "Batch finished: succeeded=%d failed=%d",
        aggregate.total_succeeded,
        aggregate.total_failed,
    )
    return Outcome.ok(aggregate)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _read_chunk_report(data: Any) -> tuple[list[Any], list[BatchFailure]] | None:
    if not isinstance(data, Mapping):
        return None
    succeeded = data.get("succeeded")
    failed = data.get("failed")
    if not isinstance(succeeded, list) or not isinstance(failed, list):
        return None

    failures: list[BatchFailure] = []
    for entry in failed:
        if not isinstance(entry, Mapping):
            return None
        failures.append(
            BatchFailure(id=str(entry.get("id", "")), error=str(entry.get("error", ""))),
        )
    return succeeded, failures


def batch_loop_body(
    chunk: Sequence[str],
    item_statements: str,
    succeeded_fields: Mapping[str, str],
    *,
    item_var: str = "theItem",
    lookup: str = "first flattened task whose id is itemId",
) -> str:
    """Render the per-chunk AppleScript loop.

    Each id is looked up into `item_var`, `item_statements` run inside a
    local `try`, and the chunk emits one `{"succeeded": [...], "failed": [...]}`
    object. `succeeded_fields` maps JSON keys to AppleScript expressions that
    are captured after the statements succeed; they are emitted as escaped
    strings.
    """

    keys = list(succeeded_fields)
    if not keys:
        raise ValueError("succeeded_fields must name at least one field.")
    captures = ", ".join(succeeded_fields[key] for key in keys)
    entry_parts = [
        f'"\\"{key}\\": \\"" & (my escapeJson((item {position} of entry) as string)) & "\\""'
        for position, key in enumerate(keys, start=1)
    ]
    entry_json = ' & ", " & '.join(entry_parts)

    return f"""
    set idList to {applescript_list(chunk)}
    set succeededList to {{}}
    set failedList to {{}}

    repeat with itemRef in idList
      set itemId to itemRef as string
      try
        set {item_var} to {lookup}
        {item_statements}
        set end of succeededList to {{{captures}}}
      on error errMsg
        set end of failedList to {{itemId, errMsg}}
      end try
    end repeat

    set output to "{{\\"succeeded\\": ["
    set isFirst to true
    repeat with entry in succeededList
      if not isFirst then set output to output & ","
      set isFirst to false
      set output to output & "{{" & {entry_json} & "}}"
    end repeat
    set output to output & "], \\"failed\\": ["
    set isFirst to true
    repeat with entry in failedList
      if not isFirst then set output to output & ","
      set isFirst to false
      set output to output & "{{\\"id\\": \\"" & (my escapeJson((item 1 of entry) as string)) & ¬
        "\\", \\"error\\": \\"" & (my escapeJson((item 2 of entry) as string)) & "\\"}}"
    end repeat
    return output & "]}}"
    """
