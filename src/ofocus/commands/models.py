"""Command options and the JSON records OmniFocus scripts return."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypedDict, TypeVar

T = TypeVar("T")

ProjectStatus = Literal["active", "on-hold", "completed", "dropped"]
SearchScope = Literal["name", "note", "both"]


class TaskRecord(TypedDict):
    id: str
    name: str
    note: str | None
    flagged: bool
    completed: bool
    dueDate: str | None
    deferDate: str | None
    completionDate: str | None
    projectId: str | None
    projectName: str | None
    tags: list[str]
    estimatedMinutes: int | None


class ProjectRecord(TypedDict):
    id: str
    name: str
    note: str | None
    status: ProjectStatus
    sequential: bool
    folderId: str | None
    folderName: str | None
    taskCount: int
    remainingTaskCount: int


class FolderRecord(TypedDict):
    id: str
    name: str
    parentId: str | None
    parentName: str | None
    projectCount: int
    folderCount: int


class TagRecord(TypedDict):
    id: str
    name: str
    parentId: str | None
    parentName: str | None
    availableTaskCount: int


class PaginatedResult(TypedDict, Generic[T]):
    items: list[T]
    totalCount: int
    returnedCount: int
    hasMore: bool
    offset: int
    limit: int


class TaskActionResult(TypedDict, total=False):
    taskId: str
    taskName: str
    completed: bool
    dropped: bool
    deleted: bool


class DeleteResult(TypedDict, total=False):
    projectId: str
    folderId: str
    tagId: str
    deleted: bool


class ProjectDropResult(TypedDict):
    projectId: str
    projectName: str
    dropped: bool


class BatchTaskItem(TypedDict, total=False):
    taskId: str
    taskName: str


@dataclass(slots=True)
class RepetitionRule:
    """Task repetition, rendered as an iCalendar RRULE."""

    frequency: str
    interval: int = 1
    repeat_method: str = "due-again"
    days_of_week: tuple[int, ...] | None = None
    day_of_month: int | None = None


@dataclass(slots=True)
class InboxOptions:
    note: str | None = None
    due: str | None = None
    defer: str | None = None
    flag: bool = False
    tags: tuple[str, ...] = ()
    estimated_minutes: int | None = None
    repeat: RepetitionRule | None = None


@dataclass(slots=True)
class TaskQuery:
    """Filters for `query_tasks`. `None` means "do not filter"."""

    completed: bool | None = None
    flagged: bool | None = None
    available: bool = False
    project: str | None = None
    tag: str | None = None
    due_before: str | None = None
    due_after: str | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(slots=True)
class TaskUpdateOptions:
    """Fields to change on one task, or on every task of a batch update.

    An empty string for `due`, `defer` or `project` clears that field.
    """

    title: str | None = None
    note: str | None = None
    flag: bool | None = None
    due: str | None = None
    defer: str | None = None
    estimated_minutes: int | None = None
    clear_estimate: bool = False
    tags: tuple[str, ...] | None = None
    project: str | None = None
    repeat: RepetitionRule | None = None
    clear_repeat: bool = False


@dataclass(slots=True)
class ProjectOptions:
    """Properties for `create_project`. A folder id wins over a folder name."""

    note: str | None = None
    folder_id: str | None = None
    folder_name: str | None = None
    sequential: bool | None = None
    status: Literal["active", "on-hold"] | None = None
    due: str | None = None
    defer: str | None = None


@dataclass(slots=True)
class ProjectUpdateOptions:
    """Changes for `update_project`. An empty `due` or `defer` clears that date."""

    name: str | None = None
    note: str | None = None
    status: ProjectStatus | None = None
    folder_id: str | None = None
    folder_name: str | None = None
    sequential: bool | None = None
    due: str | None = None
    defer: str | None = None


@dataclass(slots=True)
class TagUpdateOptions:
    name: str | None = None
    parent_id: str | None = None
    parent_name: str | None = None


@dataclass(slots=True)
class FolderUpdateOptions:
    name: str | None = None
    parent_id: str | None = None
    parent_name: str | None = None
