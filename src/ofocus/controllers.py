"""Controllers for OmniFocus CLI commands."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ofocus.bridge.executor import ScriptExecutor, default_executor
from ofocus.bridge.outcome import Outcome
from ofocus.commands.batch import complete_tasks, delete_tasks, update_tasks
from ofocus.commands.folders import create_folder, delete_folder, query_folders, update_folder
from ofocus.commands.models import (
    FolderUpdateOptions,
    InboxOptions,
    ProjectOptions,
    ProjectUpdateOptions,
    RepetitionRule,
    TagUpdateOptions,
    TaskQuery,
    TaskUpdateOptions,
)
from ofocus.commands.projects import (
    create_project,
    delete_project,
    drop_project,
    query_projects,
    update_project,
)
from ofocus.commands.tags import create_tag, delete_tag, query_tags, update_tag
from ofocus.commands.tasks import (
    add_to_inbox,
    complete_task,
    delete_task,
    drop_task,
    query_tasks,
    search_tasks,
    update_task,
)


@dataclass(slots=True)
class RepeatOptions:
    """CLI inputs shared by commands that can set a repetition rule."""

    frequency: str | None
    interval: int
    repeat_method: str
    days_of_week: tuple[int, ...]
    day_of_month: int | None

    def to_rule(self) -> RepetitionRule | None:
        if self.frequency is None:
            return None
        return RepetitionRule(
            frequency=self.frequency,
            interval=self.interval,
            repeat_method=self.repeat_method,
            days_of_week=self.days_of_week or None,
            day_of_month=self.day_of_month,
        )


@dataclass(slots=True)
class InboxCommand:
    """CLI inputs for inbox capture."""

    title: str
    note: str | None
    due: str | None
    defer: str | None
    flag: bool
    tags: tuple[str, ...]
    estimated_minutes: int | None
    repeat: RepeatOptions


@dataclass(slots=True)
class TaskActionCommand:
    """CLI inputs for complete/drop/delete of one task."""

    task_id: str
    action: str


@dataclass(slots=True)
class TaskListCommand:
    """CLI inputs for task listing."""

    completed: bool | None
    flagged: bool | None
    available: bool
    project: str | None
    tag: str | None
    due_before: str | None
    due_after: str | None
    limit: int | None
    offset: int | None


@dataclass(slots=True)
class SearchCommand:
    query: str
    scope: str
    limit: int
    include_completed: bool


@dataclass(slots=True)
class ProjectListCommand:
    status: str | None
    folder: str | None
    sequential: bool | None


@dataclass(slots=True)
class FolderListCommand:
    parent: str | None
    limit: int | None
    offset: int | None


@dataclass(slots=True)
class CreateFolderCommand:
    name: str
    parent_id: str | None
    parent_name: str | None


@dataclass(slots=True)
class BatchCommand:
    """CLI inputs for complete-batch/delete-batch."""

    task_ids: tuple[str, ...]
    action: str


@dataclass(slots=True)
class TaskChanges:
    """CLI inputs shared by update and update-batch."""

    title: str | None
    note: str | None
    flag: bool | None
    due: str | None
    defer: str | None
    estimated_minutes: int | None
    clear_estimate: bool
    tags: tuple[str, ...] | None
    project: str | None
    repeat: RepeatOptions
    clear_repeat: bool

    def to_options(self) -> TaskUpdateOptions:
        return TaskUpdateOptions(
            title=self.title,
            note=self.note,
            flag=self.flag,
            due=self.due,
            defer=self.defer,
            estimated_minutes=self.estimated_minutes,
            clear_estimate=self.clear_estimate,
            tags=self.tags,
            project=self.project,
            repeat=self.repeat.to_rule(),
            clear_repeat=self.clear_repeat,
        )


@dataclass(slots=True)
class UpdateTaskCommand:
    task_id: str
    changes: TaskChanges


@dataclass(slots=True)
class UpdateBatchCommand:
    task_ids: tuple[str, ...]
    changes: TaskChanges


@dataclass(slots=True)
class CreateProjectCommand:
    name: str
    note: str | None
    folder_id: str | None
    folder_name: str | None
    sequential: bool | None
    on_hold: bool
    due: str | None
    defer: str | None


@dataclass(slots=True)
class UpdateProjectCommand:
    project_id: str
    name: str | None
    note: str | None
    status: str | None
    folder_id: str | None
    folder_name: str | None
    sequential: bool | None
    due: str | None
    defer: str | None


@dataclass(slots=True)
class CreateTagCommand:
    name: str
    parent_id: str | None
    parent_name: str | None


@dataclass(slots=True)
class RenameMoveCommand:
    """CLI inputs for update-tag and update-folder."""

    object_id: str
    name: str | None
    parent_id: str | None
    parent_name: str | None


@dataclass(slots=True)
class RemoveCommand:
    """CLI inputs for drop-project and the delete-project/tag/folder commands."""

    kind: str
    object_id: str
    action: str = "delete"


@dataclass(slots=True)
class CliResult:
    """Rendered outcome for the CLI."""

    lines: list[str]
    success: bool


class OmniFocusCliController:
    """Maps CLI inputs onto commands and renders their outcomes as JSON."""

    def __init__(self, executor_factory: Callable[[], ScriptExecutor] | None = None) -> None:
        self._executor_factory = executor_factory or default_executor

    def inbox(self, command: InboxCommand) -> CliResult:
        options = InboxOptions(
            note=command.note,
            due=command.due,
            defer=command.defer,
            flag=command.flag,
            tags=command.tags,
            estimated_minutes=command.estimated_minutes,
            repeat=command.repeat.to_rule(),
        )
        return _render(add_to_inbox(command.title, options, executor=self._executor_factory()))

    def task_action(self, command: TaskActionCommand) -> CliResult:
        actions: dict[str, Callable[..., Outcome[Any]]] = {
            "complete": complete_task,
            "drop": drop_task,
            "delete": delete_task,
        }
        action = actions[command.action]
        return _render(action(command.task_id, executor=self._executor_factory()))

    def list_tasks(self, command: TaskListCommand) -> CliResult:
        query = TaskQuery(
            completed=command.completed,
            flagged=command.flagged,
            available=command.available,
            project=command.project,
            tag=command.tag,
            due_before=command.due_before,
            due_after=command.due_after,
            limit=command.limit,
            offset=command.offset,
        )
        return _render(query_tasks(query, executor=self._executor_factory()))

    def search(self, command: SearchCommand) -> CliResult:
        return _render(
            search_tasks(
                command.query,
                scope=command.scope,  # type: ignore[arg-type]
                limit=command.limit,
                include_completed=command.include_completed,
                executor=self._executor_factory(),
            ),
        )

    def list_projects(self, command: ProjectListCommand) -> CliResult:
        return _render(
            query_projects(
                command.status,  # type: ignore[arg-type]
                command.folder,
                command.sequential,
                executor=self._executor_factory(),
            ),
        )

    def list_tags(self, parent: str | None) -> CliResult:
        return _render(query_tags(parent, executor=self._executor_factory()))

    def list_folders(self, command: FolderListCommand) -> CliResult:
        return _render(
            query_folders(
                command.parent,
                command.limit,
                command.offset,
                executor=self._executor_factory(),
            ),
        )

    def create_folder(self, command: CreateFolderCommand) -> CliResult:
        return _render(
            create_folder(
                command.name,
                command.parent_id,
                command.parent_name,
                executor=self._executor_factory(),
            ),
        )

    def batch(self, command: BatchCommand) -> CliResult:
        action = complete_tasks if command.action == "complete" else delete_tasks
        return _render(action(command.task_ids, executor=self._executor_factory()))

    def update_task(self, command: UpdateTaskCommand) -> CliResult:
        return _render(
            update_task(
                command.task_id,
                command.changes.to_options(),
                executor=self._executor_factory(),
            ),
        )

    def update_batch(self, command: UpdateBatchCommand) -> CliResult:
        return _render(
            update_tasks(
                command.task_ids,
                command.changes.to_options(),
                executor=self._executor_factory(),
            ),
        )

    def create_project(self, command: CreateProjectCommand) -> CliResult:
        options = ProjectOptions(
            note=command.note,
            folder_id=command.folder_id,
            folder_name=command.folder_name,
            sequential=command.sequential,
            status="on-hold" if command.on_hold else None,
            due=command.due,
            defer=command.defer,
        )
        return _render(
            create_project(command.name, options, executor=self._executor_factory()),
        )

    def update_project(self, command: UpdateProjectCommand) -> CliResult:
        options = ProjectUpdateOptions(
            name=command.name,
            note=command.note,
            status=command.status,  # type: ignore[arg-type]
            folder_id=command.folder_id,
            folder_name=command.folder_name,
            sequential=command.sequential,
            due=command.due,
            defer=command.defer,
        )
        return _render(
            update_project(command.project_id, options, executor=self._executor_factory()),
        )

    def create_tag(self, command: CreateTagCommand) -> CliResult:
        return _render(
            create_tag(
                command.name,
                command.parent_id,
                command.parent_name,
                executor=self._executor_factory(),
            ),
        )

    def update_tag(self, command: RenameMoveCommand) -> CliResult:
        options = TagUpdateOptions(
            name=command.name,
            parent_id=command.parent_id,
            parent_name=command.parent_name,
        )
        return _render(
            update_tag(command.object_id, options, executor=self._executor_factory()),
        )

    def update_folder(self, command: RenameMoveCommand) -> CliResult:
        options = FolderUpdateOptions(
            name=command.name,
            parent_id=command.parent_id,
            parent_name=command.parent_name,
        )
        return _render(
            update_folder(command.object_id, options, executor=self._executor_factory()),
        )

    def remove(self, command: RemoveCommand) -> CliResult:
        actions: dict[tuple[str, str], Callable[..., Outcome[Any]]] = {
            ("project", "drop"): drop_project,
            ("project", "delete"): delete_project,
            ("tag", "delete"): delete_tag,
            ("folder", "delete"): delete_folder,
        }
        action = actions[(command.kind, command.action)]
        return _render(action(command.object_id, executor=self._executor_factory()))


def _render(outcome: Outcome[Any]) -> CliResult:
    return CliResult(
        lines=[json.dumps(outcome.to_dict(), indent=2)],
        success=outcome.success,
    )
