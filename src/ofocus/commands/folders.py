"""Folder queries and folder create/update/delete."""

from __future__ import annotations

from ofocus.bridge.errors import ErrorCode, create_error
from ofocus.bridge.escape import quote_literal
from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import Outcome
from ofocus.bridge.validation import (
    first_error,
    validate_folder_name,
    validate_id,
    validate_pagination_params,
)
from ofocus.commands.common import delete_by_id, expect_data
from ofocus.commands.models import (
    DeleteResult,
    FolderRecord,
    FolderUpdateOptions,
    PaginatedResult,
)

FOLDER_SERIALIZER = "serializers/folder.applescript"
DEFAULT_QUERY_LIMIT = 100


def create_folder(
    name: str,
    parent_id: str | None = None,
    parent_name: str | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[FolderRecord]:
    """Create a folder at the top level or inside a parent found by id or name.

    `parent_id` wins when both parent selectors are given.
    """

    if not name or not name.strip():
        return Outcome.fail(create_error(ErrorCode.VALIDATION_ERROR, "Folder name cannot be empty"))
    error = first_error(
        validate_folder_name(name),
        validate_id(parent_id, "folder") if parent_id is not None else None,
        validate_folder_name(parent_name),
    )
    if error is not None:
        return Outcome.fail(error)

    properties = f"{{name:{quote_literal(name)}}}"
    parent = _parent_lookup(parent_id, parent_name)
    if parent is not None:
        lines = [
            f"set parentFolder to {parent}",
            "set newFolder to make new folder at end of folders of parentFolder "
            f"with properties {properties}",
        ]
    else:
        lines = [f"set newFolder to make new folder with properties {properties}"]
    lines.append("return my serializeFolder(newFolder)")
    return _run_folder_script(lines, "Failed to create folder", executor)


def update_folder(
    folder_id: str,
    options: FolderUpdateOptions,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[FolderRecord]:
    """Rename a folder and/or move it into another folder."""

    if options.name is not None and not options.name.strip():
        return Outcome.fail(create_error(ErrorCode.VALIDATION_ERROR, "Folder name cannot be empty"))
    error = first_error(
        validate_id(folder_id, "folder"),
        validate_folder_name(options.name),
        validate_id(options.parent_id, "folder") if options.parent_id is not None else None,
        validate_folder_name(options.parent_name),
    )
    if error is not None:
        return Outcome.fail(error)

    lines = [f"set theFolder to first flattened folder whose id is {quote_literal(folder_id)}"]
    if options.name is not None:
        lines.append(f"set name of theFolder to {quote_literal(options.name)}")
    parent = _parent_lookup(options.parent_id, options.parent_name)
    if parent is not None:
        lines.append(f"set newParent to {parent}")
        lines.append("move theFolder to end of folders of newParent")
    lines.append("return my serializeFolder(theFolder)")
    return _run_folder_script(lines, "Failed to update folder", executor)


def delete_folder(
    folder_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[DeleteResult]:
    """Delete a folder permanently, with the projects and folders inside it."""

    return delete_by_id(folder_id, "folder", executor=executor)


def _parent_lookup(parent_id: str | None, parent_name: str | None) -> str | None:
    if parent_id:
        return f"first flattened folder whose id is {quote_literal(parent_id)}"
    if parent_name:
        return f"first flattened folder whose name is {quote_literal(parent_name)}"
    return None


def _run_folder_script(
    lines: list[str],
    failure_message: str,
    executor: ScriptExecutor | None,
) -> Outcome[FolderRecord]:
    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        "\n    ".join(lines),
        extra_fragments=[runner.load_fragment(FOLDER_SERIALIZER)],
    )
    return expect_data(result, failure_message, "No folder data returned")


def query_folders(
    parent: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[PaginatedResult[FolderRecord]]:
    """List folders one page at a time, optionally only children of `parent`."""

    error = first_error(
        validate_folder_name(parent),
        validate_pagination_params(limit, offset),
    )
    if error is not None:
        return Outcome.fail(error)

    page_limit = int(limit) if limit is not None else DEFAULT_QUERY_LIMIT
    page_offset = int(offset) if offset is not None else 0

    parent_filter = ""
    if parent:
        parent_filter = (
            "try\n"
            "        set parentContainer to container of f\n"
            "        if class of parentContainer is not folder or "
            f"name of parentContainer is not {quote_literal(parent)} "
            "then set shouldInclude to false\n"
            "      on error\n"
            "        set shouldInclude to false\n"
            "      end try"
        )

    body = f"""
    set itemsJson to ""
    set isFirst to true
    set totalCount to 0
    set returnedCount to 0

    repeat with f in flattened folders
      set shouldInclude to true
      {parent_filter}
      if shouldInclude then
        if totalCount >= {page_offset} and returnedCount < {page_limit} then
          if not isFirst then set itemsJson to itemsJson & ","
          set isFirst to false
          set itemsJson to itemsJson & (my serializeFolder(f))
          set returnedCount to returnedCount + 1
        end if
        set totalCount to totalCount + 1
      end if
    end repeat

    set hasMore to (totalCount > ({page_offset} + returnedCount))
    return "{{\\"items\\": [" & itemsJson & "], " & ¬
      "\\"totalCount\\": " & totalCount & ", " & ¬
      "\\"returnedCount\\": " & returnedCount & ", " & ¬
      "\\"hasMore\\": " & hasMore & ", " & ¬
      "\\"offset\\": {page_offset}, " & ¬
      "\\"limit\\": {page_limit}}}"
    """

    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        body,
        extra_fragments=[runner.load_fragment(FOLDER_SERIALIZER)],
    )
    if not result.success:
        return Outcome.fail(result.error_or("Failed to query folders"))
    empty_page: PaginatedResult[FolderRecord] = {
        "items": [],
        "totalCount": 0,
        "returnedCount": 0,
        "hasMore": False,
        "offset": page_offset,
        "limit": page_limit,
    }
    return Outcome.ok(result.data or empty_page)
