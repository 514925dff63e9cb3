"""Tag queries and tag create/update/delete."""

from __future__ import annotations

from ofocus.bridge.errors import BridgeError
from ofocus.bridge.escape import quote_literal
from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import Outcome
from ofocus.bridge.validation import first_error, validate_id, validate_tag_name
from ofocus.commands.common import delete_by_id, expect_data
from ofocus.commands.models import DeleteResult, TagRecord, TagUpdateOptions

TAG_SERIALIZER = "serializers/tag.applescript"


def query_tags(
    parent: str | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[list[TagRecord]]:
    """List all tags, or only the direct children of the tag named `parent`."""

    parent_filter = ""
    if parent is not None:
        error = validate_tag_name(parent)
        if error is not None:
            return Outcome.fail(error)
        parent_filter = (
            "set shouldInclude to false\n"
            "      try\n"
            f"        if name of (container of theTag) is {quote_literal(parent)} "
            "then set shouldInclude to true\n"
            "      end try"
        )

    body = f"""
    set output to "["
    set isFirst to true

    repeat with theTag in flattened tags
      set shouldInclude to true
      {parent_filter}
      if shouldInclude then
        if not isFirst then set output to output & ","
        set isFirst to false
        set output to output & (my serializeTag(theTag))
      end if
    end repeat

    return output & "]"
    """

    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        body,
        extra_fragments=[runner.load_fragment(TAG_SERIALIZER)],
    )
    if not result.success:
        return Outcome.fail(result.error_or("Failed to query tags"))
    return Outcome.ok(result.data or [])


def _parent_lookup(parent_id: str | None, parent_name: str | None) -> str | None:
    if parent_id:
        return f"first flattened tag whose id is {quote_literal(parent_id)}"
    if parent_name:
        return f"first flattened tag whose name is {quote_literal(parent_name)}"
    return None


def _validate_parent(parent_id: str | None, parent_name: str | None) -> BridgeError | None:
    return first_error(
        validate_id(parent_id, "tag") if parent_id is not None else None,
        validate_tag_name(parent_name) if parent_name is not None else None,
    )


def _run_tag_script(
    lines: list[str],
    failure_message: str,
    executor: ScriptExecutor | None,
) -> Outcome[TagRecord]:
    runner = executor or default_executor()
    result = runner.run_with_json_helpers(
        "\n    ".join(lines),
        extra_fragments=[runner.load_fragment(TAG_SERIALIZER)],
    )
    return expect_data(result, failure_message, "No tag data returned")


def create_tag(
    name: str,
    parent_id: str | None = None,
    parent_name: str | None = None,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TagRecord]:
    """Create a tag at the top level or under a parent tag; `parent_id` wins."""

    error = first_error(validate_tag_name(name), _validate_parent(parent_id, parent_name))
    if error is not None:
        return Outcome.fail(error)

    properties = f"{{name:{quote_literal(name)}}}"
    parent = _parent_lookup(parent_id, parent_name)
    if parent is not None:
        lines = [
            f"set parentTag to {parent}",
            f"set newTag to make new tag at end of tags of parentTag with properties {properties}",
        ]
    else:
        lines = [f"set newTag to make new tag with properties {properties}"]
    lines.append("return my serializeTag(newTag)")
    return _run_tag_script(lines, "Failed to create tag", executor)


def update_tag(
    tag_id: str,
    options: TagUpdateOptions,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[TagRecord]:
    """Rename a tag and/or move it under another tag."""

    error = first_error(
        validate_id(tag_id, "tag"),
        validate_tag_name(options.name) if options.name is not None else None,
        _validate_parent(options.parent_id, options.parent_name),
    )
    if error is not None:
        return Outcome.fail(error)

    lines = [f"set theTag to first flattened tag whose id is {quote_literal(tag_id)}"]
    if options.name is not None:
        lines.append(f"set name of theTag to {quote_literal(options.name)}")
    parent = _parent_lookup(options.parent_id, options.parent_name)
    if parent is not None:
        lines.append(f"set newParent to {parent}")
        lines.append("move theTag to end of tags of newParent")
    lines.append("return my serializeTag(theTag)")
    return _run_tag_script(lines, "Failed to update tag", executor)


def delete_tag(
    tag_id: str,
    *,
    executor: ScriptExecutor | None = None,
) -> Outcome[DeleteResult]:
    """Delete a tag; its tasks keep their other tags."""

    return delete_by_id(tag_id, "tag", executor=executor)
