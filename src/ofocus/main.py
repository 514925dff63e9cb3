"""CLI entrypoint for ofocus."""

from collections.abc import Callable
from typing import Any

import rich_click as click

from ofocus import __version__
from ofocus.controllers import (
    BatchCommand,
    CliResult,
    CreateFolderCommand,
    CreateProjectCommand,
    CreateTagCommand,
    FolderListCommand,
    InboxCommand,
    OmniFocusCliController,
    ProjectListCommand,
    RemoveCommand,
    RenameMoveCommand,
    RepeatOptions,
    SearchCommand,
    TaskActionCommand,
    TaskChanges,
    TaskListCommand,
    UpdateBatchCommand,
    UpdateProjectCommand,
    UpdateTaskCommand,
)

click.rich_click.USE_MARKDOWN = True
CONTROLLER = OmniFocusCliController()

_FREQUENCIES = ["daily", "weekly", "monthly", "yearly"]
_REPEAT_METHODS = ["due-again", "defer-another"]


def _repeat_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option(
            "--repeat",
            "repeat_frequency",
            type=click.Choice(_FREQUENCIES, case_sensitive=False),
            default=None,
            help="Repeat frequency.",
        ),
        click.option(
            "--repeat-interval",
            type=int,
            default=1,
            show_default=True,
            help="Repeat every N periods.",
        ),
        click.option(
            "--repeat-method",
            type=click.Choice(_REPEAT_METHODS, case_sensitive=False),
            default="due-again",
            show_default=True,
            help="How the next occurrence is scheduled.",
        ),
        click.option(
            "--repeat-day",
            "repeat_days",
            type=int,
            multiple=True,
            help="Weekday for weekly repeats, 0=Sunday..6=Saturday. Can be repeated.",
        ),
        click.option(
            "--repeat-day-of-month",
            type=int,
            default=None,
            help="Day of month for monthly repeats (1-31).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _repeat(
    frequency: str | None,
    interval: int,
    method: str,
    days: tuple[int, ...],
    day_of_month: int | None,
) -> RepeatOptions:
    return RepeatOptions(
        frequency=frequency.lower() if frequency else None,
        interval=interval,
        repeat_method=method.lower(),
        days_of_week=days,
        day_of_month=day_of_month,
    )


@click.group()
@click.version_option(version=__version__, prog_name="ofocus")
def ofocus() -> None:
    """OmniFocus automation from the command line.

    Every command prints a JSON envelope `{success, data, error}` and exits
    with status 1 when `success` is false.
    """


@ofocus.command("inbox")
@click.argument("title")
@click.option("--note", default=None, help="Task note.")
@click.option("--due", default=None, help="Due date (ISO 8601 or AppleScript date).")
@click.option("--defer", default=None, help="Defer date (ISO 8601 or AppleScript date).")
@click.option("--flag", is_flag=True, default=False, help="Flag the task.")
@click.option("--tag", "tags", multiple=True, help="Tag name. Can be repeated.")
@click.option("--estimate", "estimated_minutes", type=int, default=None, help="Minutes.")
@_repeat_options
def inbox(  # noqa: PLR0913
    title: str,
    note: str | None,
    due: str | None,
    defer: str | None,
    flag: bool,
    tags: tuple[str, ...],
    estimated_minutes: int | None,
    repeat_frequency: str | None,
    repeat_interval: int,
    repeat_method: str,
    repeat_days: tuple[int, ...],
    repeat_day_of_month: int | None,
) -> None:
    """Add a task to the OmniFocus inbox."""

    _emit_result(
        lambda: CONTROLLER.inbox(
            InboxCommand(
                title=title,
                note=note,
                due=due,
                defer=defer,
                flag=flag,
                tags=tags,
                estimated_minutes=estimated_minutes,
                repeat=_repeat(
                    repeat_frequency,
                    repeat_interval,
                    repeat_method,
                    repeat_days,
                    repeat_day_of_month,
                ),
            ),
        ),
    )


@ofocus.command("complete")
@click.argument("task_id")
def complete(task_id: str) -> None:
    """Mark a task complete."""

    _emit_result(lambda: CONTROLLER.task_action(TaskActionCommand(task_id, "complete")))


@ofocus.command("drop")
@click.argument("task_id")
def drop(task_id: str) -> None:
    """Drop a task."""

    _emit_result(lambda: CONTROLLER.task_action(TaskActionCommand(task_id, "drop")))


@ofocus.command("delete")
@click.argument("task_id")
def delete(task_id: str) -> None:
    """Delete a task permanently."""

    _emit_result(lambda: CONTROLLER.task_action(TaskActionCommand(task_id, "delete")))


@ofocus.command("tasks")
@click.option("--completed/--not-completed", default=None, help="Filter by completion.")
@click.option("--flagged", is_flag=True, default=None, help="Only flagged tasks.")
@click.option("--available", is_flag=True, default=False, help="Only available tasks.")
@click.option("--project", default=None, help="Containing project name.")
@click.option("--tag", default=None, help="Tag name.")
@click.option("--due-before", default=None, help="Due on or before this date.")
@click.option("--due-after", default=None, help="Due on or after this date.")
@click.option("--limit", type=int, default=None, help="Page size (default 100).")
@click.option("--offset", type=int, default=None, help="Items to skip.")
def tasks(  # noqa: PLR0913
    completed: bool | None,
    flagged: bool | None,
    available: bool,
    project: str | None,
    tag: str | None,
    due_before: str | None,
    due_after: str | None,
    limit: int | None,
    offset: int | None,
) -> None:
    """List tasks, one page at a time."""

    _emit_result(
        lambda: CONTROLLER.list_tasks(
            TaskListCommand(
                completed=completed,
                flagged=flagged,
                available=available,
                project=project,
                tag=tag,
                due_before=due_before,
                due_after=due_after,
                limit=limit,
                offset=offset,
            ),
        ),
    )


@ofocus.command("search")
@click.argument("query")
@click.option(
    "--scope",
    type=click.Choice(["name", "note", "both"], case_sensitive=False),
    default="both",
    show_default=True,
    help="Fields to search.",
)
@click.option("--limit", type=int, default=100, show_default=True, help="Maximum matches.")
@click.option(
    "--include-completed",
    is_flag=True,
    default=False,
    help="Also match completed tasks.",
)
def search(query: str, scope: str, limit: int, include_completed: bool) -> None:
    """Search tasks by name and/or note."""

    _emit_result(
        lambda: CONTROLLER.search(
            SearchCommand(
                query=query,
                scope=scope.lower(),
                limit=limit,
                include_completed=include_completed,
            ),
        ),
    )


@ofocus.command("projects")
@click.option(
    "--status",
    type=click.Choice(["active", "on-hold", "completed", "dropped"], case_sensitive=False),
    default=None,
    help="Project status.",
)
@click.option("--folder", default=None, help="Containing folder name.")
@click.option("--sequential/--parallel", default=None, help="Task ordering.")
def projects(status: str | None, folder: str | None, sequential: bool | None) -> None:
    """List projects."""

    _emit_result(
        lambda: CONTROLLER.list_projects(
            ProjectListCommand(
                status=status.lower() if status else None,
                folder=folder,
                sequential=sequential,
            ),
        ),
    )


@ofocus.command("tags")
@click.option("--parent", default=None, help="Only children of this tag.")
def tags(parent: str | None) -> None:
    """List tags."""

    _emit_result(lambda: CONTROLLER.list_tags(parent))


@ofocus.command("folders")
@click.option("--parent", default=None, help="Only children of this folder.")
@click.option("--limit", type=int, default=None, help="Page size (default 100).")
@click.option("--offset", type=int, default=None, help="Items to skip.")
def folders(parent: str | None, limit: int | None, offset: int | None) -> None:
    """List folders, one page at a time."""

    _emit_result(
        lambda: CONTROLLER.list_folders(
            FolderListCommand(parent=parent, limit=limit, offset=offset),
        ),
    )


@ofocus.command("create-folder")
@click.argument("name")
@click.option("--parent-id", default=None, help="Parent folder id.")
@click.option("--parent", "parent_name", default=None, help="Parent folder name.")
def create_folder(name: str, parent_id: str | None, parent_name: str | None) -> None:
    """Create a folder."""

    _emit_result(
        lambda: CONTROLLER.create_folder(
            CreateFolderCommand(name=name, parent_id=parent_id, parent_name=parent_name),
        ),
    )


@ofocus.command("complete-batch")
@click.argument("task_ids", nargs=-1)
def complete_batch(task_ids: tuple[str, ...]) -> None:
    """Mark several tasks complete."""

    _emit_result(lambda: CONTROLLER.batch(BatchCommand(task_ids, "complete")))


@ofocus.command("delete-batch")
@click.argument("task_ids", nargs=-1)
def delete_batch(task_ids: tuple[str, ...]) -> None:
    """Delete several tasks permanently."""

    _emit_result(lambda: CONTROLLER.batch(BatchCommand(task_ids, "delete")))


def _task_change_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option("--title", default=None, help="New task name."),
        click.option("--note", default=None, help="New note."),
        click.option("--flag/--unflag", default=None, help="Set or clear the flag."),
        click.option("--due", default=None, help='Due date; "" clears it.'),
        click.option("--defer", default=None, help='Defer date; "" clears it.'),
        click.option("--estimate", "estimated_minutes", type=int, default=None, help="Minutes."),
        click.option(
            "--clear-estimate",
            is_flag=True,
            default=False,
            help="Remove the estimate.",
        ),
        click.option("--tag", "tags", multiple=True, help="Replace tags. Can be repeated."),
        click.option("--clear-tags", is_flag=True, default=False, help="Remove all tags."),
        click.option("--project", default=None, help='Move to project; "" clears the project.'),
        click.option("--clear-repeat", is_flag=True, default=False, help="Remove repetition."),
    ]
    for option in reversed(options):
        func = option(func)
    return _repeat_options(func)


def _task_changes(params: dict[str, Any]) -> TaskChanges:
    tags = params["tags"]
    return TaskChanges(
        title=params["title"],
        note=params["note"],
        flag=params["flag"],
        due=params["due"],
        defer=params["defer"],
        estimated_minutes=params["estimated_minutes"],
        clear_estimate=params["clear_estimate"],
        tags=tags if tags or params["clear_tags"] else None,
        project=params["project"],
        repeat=_repeat(
            params["repeat_frequency"],
            params["repeat_interval"],
            params["repeat_method"],
            params["repeat_days"],
            params["repeat_day_of_month"],
        ),
        clear_repeat=params["clear_repeat"],
    )


@ofocus.command("update")
@click.argument("task_id")
@_task_change_options
def update(task_id: str, **params: Any) -> None:
    """Change one task."""

    _emit_result(
        lambda: CONTROLLER.update_task(UpdateTaskCommand(task_id, _task_changes(params))),
    )


@ofocus.command("update-batch")
@click.argument("task_ids", nargs=-1)
@_task_change_options
def update_batch(task_ids: tuple[str, ...], **params: Any) -> None:
    """Apply the same changes to several tasks."""

    _emit_result(
        lambda: CONTROLLER.update_batch(UpdateBatchCommand(task_ids, _task_changes(params))),
    )


@ofocus.command("create-project")
@click.argument("name")
@click.option("--note", default=None, help="Project note.")
@click.option("--folder-id", default=None, help="Containing folder id.")
@click.option("--folder", "folder_name", default=None, help="Containing folder name.")
@click.option("--sequential/--parallel", default=None, help="Task ordering.")
@click.option("--on-hold", is_flag=True, default=False, help="Create the project on hold.")
@click.option("--due", default=None, help="Due date.")
@click.option("--defer", default=None, help="Defer date.")
def create_project(  # noqa: PLR0913
    name: str,
    note: str | None,
    folder_id: str | None,
    folder_name: str | None,
    sequential: bool | None,
    on_hold: bool,
    due: str | None,
    defer: str | None,
) -> None:
    """Create a project."""

    _emit_result(
        lambda: CONTROLLER.create_project(
            CreateProjectCommand(
                name=name,
                note=note,
                folder_id=folder_id,
                folder_name=folder_name,
                sequential=sequential,
                on_hold=on_hold,
                due=due,
                defer=defer,
            ),
        ),
    )


@ofocus.command("update-project")
@click.argument("project_id")
@click.option("--name", default=None, help="New project name.")
@click.option("--note", default=None, help="New note.")
@click.option(
    "--status",
    type=click.Choice(["active", "on-hold", "completed", "dropped"], case_sensitive=False),
    default=None,
    help="New status.",
)
@click.option("--folder-id", default=None, help="Move into this folder id.")
@click.option("--folder", "folder_name", default=None, help="Move into this folder name.")
@click.option("--sequential/--parallel", default=None, help="Task ordering.")
@click.option("--due", default=None, help='Due date; "" clears it.')
@click.option("--defer", default=None, help='Defer date; "" clears it.')
def update_project(  # noqa: PLR0913
    project_id: str,
    name: str | None,
    note: str | None,
    status: str | None,
    folder_id: str | None,
    folder_name: str | None,
    sequential: bool | None,
    due: str | None,
    defer: str | None,
) -> None:
    """Change a project."""

    _emit_result(
        lambda: CONTROLLER.update_project(
            UpdateProjectCommand(
                project_id=project_id,
                name=name,
                note=note,
                status=status.lower() if status else None,
                folder_id=folder_id,
                folder_name=folder_name,
                sequential=sequential,
                due=due,
                defer=defer,
            ),
        ),
    )


@ofocus.command("drop-project")
@click.argument("project_id")
def drop_project(project_id: str) -> None:
    """Drop a project, keeping its history."""

    _emit_result(lambda: CONTROLLER.remove(RemoveCommand("project", project_id, "drop")))


@ofocus.command("delete-project")
@click.argument("project_id")
def delete_project(project_id: str) -> None:
    """Delete a project permanently."""

    _emit_result(lambda: CONTROLLER.remove(RemoveCommand("project", project_id)))


@ofocus.command("create-tag")
@click.argument("name")
@click.option("--parent-id", default=None, help="Parent tag id.")
@click.option("--parent", "parent_name", default=None, help="Parent tag name.")
def create_tag(name: str, parent_id: str | None, parent_name: str | None) -> None:
    """Create a tag."""

    _emit_result(
        lambda: CONTROLLER.create_tag(
            CreateTagCommand(name=name, parent_id=parent_id, parent_name=parent_name),
        ),
    )


@ofocus.command("update-tag")
@click.argument("tag_id")
@click.option("--name", default=None, help="New tag name.")
@click.option("--parent-id", default=None, help="Move under this tag id.")
@click.option("--parent", "parent_name", default=None, help="Move under this tag name.")
def update_tag(
    tag_id: str,
    name: str | None,
    parent_id: str | None,
    parent_name: str | None,
) -> None:
    """Rename or move a tag."""

    _emit_result(
        lambda: CONTROLLER.update_tag(RenameMoveCommand(tag_id, name, parent_id, parent_name)),
    )


@ofocus.command("delete-tag")
@click.argument("tag_id")
def delete_tag(tag_id: str) -> None:
    """Delete a tag."""

    _emit_result(lambda: CONTROLLER.remove(RemoveCommand("tag", tag_id)))


@ofocus.command("update-folder")
@click.argument("folder_id")
@click.option("--name", default=None, help="New folder name.")
@click.option("--parent-id", default=None, help="Move into this folder id.")
@click.option("--parent", "parent_name", default=None, help="Move into this folder name.")
def update_folder(
    folder_id: str,
    name: str | None,
    parent_id: str | None,
    parent_name: str | None,
) -> None:
    """Rename or move a folder."""

    _emit_result(
        lambda: CONTROLLER.update_folder(
            RenameMoveCommand(folder_id, name, parent_id, parent_name),
        ),
    )


@ofocus.command("delete-folder")
@click.argument("folder_id")
def delete_folder(folder_id: str) -> None:
    """Delete a folder permanently."""

    _emit_result(lambda: CONTROLLER.remove(RemoveCommand("folder", folder_id)))


def _emit_result(run: Callable[[], CliResult]) -> None:
    try:
        result = run()
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    for line in result.lines:
        click.echo(line)
    if not result.success:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    ofocus()
