from __future__ import annotations

import allure

from ofocus.bridge.errors import ErrorCode
from ofocus.commands.folders import create_folder, delete_folder, query_folders, update_folder
from ofocus.commands.models import (
    FolderUpdateOptions,
    ProjectOptions,
    ProjectUpdateOptions,
    RepetitionRule,
    TagUpdateOptions,
)
from ofocus.commands.projects import (
    create_project,
    delete_project,
    drop_project,
    query_projects,
    update_project,
)
from ofocus.commands.repetition import build_rrule, clear_repetition_script, repetition_rule_script
from ofocus.commands.tags import create_tag, delete_tag, query_tags, update_tag

pytestmark = [
    allure.epic("OmniFocus Commands"),
    allure.feature("Projects, Folders, Tags"),
]

PROJECT = {
    "id": "p1",
    "name": "Home",
    "note": None,
    "status": "active",
    "sequential": False,
    "folderId": "f1",
    "folderName": "Personal",
    "taskCount": 4,
    "remainingTaskCount": 2,
}
FOLDER = {
    "id": "f2",
    "name": "Archive",
    "parentId": "f1",
    "parentName": "Personal",
    "projectCount": 0,
    "folderCount": 0,
}


def test_query_projects_filters(executor, fake_osascript) -> None:
    fake_osascript.reply([PROJECT])

    result = query_projects("on-hold", "Personal", True, executor=executor)

    program = fake_osascript.programs[0]
    assert result.data == [PROJECT]
    assert "flattened projects where sequential is true" in program
    assert 'if (my projectStatusName(p)) is not "on-hold"' in program
    assert 'name of folder of p is not "Personal"' in program
    assert program.index("on serializeProject(") < program.index("tell application")


def test_query_projects_rejects_unknown_status(executor, fake_osascript) -> None:
    result = query_projects("paused", executor=executor)  # type: ignore[arg-type]

    assert result.error is not None
    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert fake_osascript.calls == []


def test_query_projects_failure_keeps_bridge_error(executor, fake_osascript) -> None:
    fake_osascript.reply("", stderr="Application isn't running. (-600)")

    result = query_projects(executor=executor)

    assert result.error is not None
    assert result.error.code == ErrorCode.OMNIFOCUS_NOT_RUNNING


def test_create_folder_prefers_parent_id(executor, fake_osascript) -> None:
    fake_osascript.reply(FOLDER)

    result = create_folder("Archive", parent_id="f1", parent_name="Ignored", executor=executor)

    program = fake_osascript.programs[0]
    assert result.data == FOLDER
    assert 'first flattened folder whose id is "f1"' in program
    assert "Ignored" not in program
    assert 'make new folder at end of folders of parentFolder with properties {name:"Archive"}' in (
        program
    )


def test_create_folder_at_top_level(executor, fake_osascript) -> None:
    fake_osascript.reply(FOLDER)

    create_folder("Archive", executor=executor)

    assert 'set newFolder to make new folder with properties {name:"Archive"}' in (
        fake_osascript.programs[0]
    )


def test_create_folder_validation(executor, fake_osascript) -> None:
    empty = create_folder(" ", executor=executor)
    bad_parent = create_folder("Archive", parent_id="f 1", executor=executor)

    assert empty.error is not None
    assert empty.error.message == "Folder name cannot be empty"
    assert bad_parent.error is not None
    assert bad_parent.error.code == ErrorCode.INVALID_ID_FORMAT
    assert fake_osascript.calls == []


def test_query_folders_paginates_and_filters_by_parent(executor, fake_osascript) -> None:
    page = {
        "items": [FOLDER],
        "totalCount": 1,
        "returnedCount": 1,
        "hasMore": False,
        "offset": 0,
        "limit": 10,
    }
    fake_osascript.reply(page)

    result = query_folders("Personal", limit=10, executor=executor)

    program = fake_osascript.programs[0]
    assert result.data == page
    assert 'name of parentContainer is not "Personal"' in program
    assert "returnedCount < 10" in program


def test_query_tags_by_parent(executor, fake_osascript) -> None:
    tag = {
        "id": "g1",
        "name": "Phone",
        "parentId": "g0",
        "parentName": "Contexts",
        "availableTaskCount": 3,
    }
    fake_osascript.reply([tag])

    result = query_tags("Contexts", executor=executor)

    assert result.data == [tag]
    assert 'if name of (container of theTag) is "Contexts"' in fake_osascript.programs[0]
    assert "on serializeTag(" in fake_osascript.programs[0]


def test_query_tags_rejects_quoted_parent(executor, fake_osascript) -> None:
    result = query_tags('Con"texts', executor=executor)

    assert result.error is not None
    assert fake_osascript.calls == []


def test_rrule_rendering() -> None:
    assert build_rrule(RepetitionRule(frequency="daily")) == "FREQ=DAILY"
    assert (
        build_rrule(RepetitionRule(frequency="weekly", interval=3, days_of_week=(0, 6)))
        == "FREQ=WEEKLY;INTERVAL=3;BYDAY=SU,SA"
    )
    yearly = RepetitionRule(frequency="yearly", repeat_method="defer-another")
    assert repetition_rule_script("t", yearly) == (
        'set repetition rule of t to {repetition method:defer another, recurrence:"FREQ=YEARLY"}'
    )
    assert clear_repetition_script("t") == "set repetition rule of t to missing value"


TAG = {
    "id": "g1",
    "name": "Phone",
    "parentId": "g0",
    "parentName": "Contexts",
    "availableTaskCount": 0,
}


def test_create_project_in_folder_with_properties(executor, fake_osascript) -> None:
    fake_osascript.reply(PROJECT)

    result = create_project(
        "Home",
        ProjectOptions(
            note="Chores",
            folder_name="Personal",
            sequential=True,
            status="on-hold",
            due="2024-03-01",
        ),
        executor=executor,
    )

    program = fake_osascript.programs[0]
    assert result.data == PROJECT
    assert 'set targetFolder to first flattened folder whose name is "Personal"' in program
    assert (
        "make new project at end of projects of targetFolder with properties "
        '{name:"Home", note:"Chores", sequential:true, status:on hold, '
        'due date:date "03/01/2024"}'
    ) in program
    assert "return my serializeProject(newProject)" in program


def test_create_project_validation(executor, fake_osascript) -> None:
    empty = create_project("  ", executor=executor)
    bad_folder = create_project("Home", ProjectOptions(folder_id="f\n1"), executor=executor)
    bad_status = create_project(
        "Home",
        ProjectOptions(status="completed"),  # type: ignore[arg-type]
        executor=executor,
    )

    assert empty.error is not None
    assert empty.error.message == "Project name cannot be empty"
    assert bad_folder.error is not None
    assert bad_folder.error.code == ErrorCode.INVALID_ID_FORMAT
    assert bad_status.error is not None
    assert bad_status.error.code == ErrorCode.VALIDATION_ERROR
    assert fake_osascript.calls == []


def test_update_project_renders_changes_and_move(executor, fake_osascript) -> None:
    fake_osascript.reply(PROJECT)

    update_project(
        "p1",
        ProjectUpdateOptions(
            name="House",
            status="completed",
            sequential=False,
            due="",
            folder_id="f2",
            folder_name="Ignored",
        ),
        executor=executor,
    )

    program = fake_osascript.programs[0]
    assert 'set theProject to first flattened project whose id is "p1"' in program
    assert 'set name of theProject to "House"' in program
    assert "set status of theProject to done" in program
    assert "set sequential of theProject to false" in program
    assert "set due date of theProject to missing value" in program
    assert 'set targetFolder to first flattened folder whose id is "f2"' in program
    assert "move theProject to end of projects of targetFolder" in program
    assert "Ignored" not in program


def test_update_project_not_found_is_classified(executor, fake_osascript) -> None:
    fake_osascript.reply(
        "",
        stderr='error: Can’t get first flattened project whose id = "p9". (-1728)',
    )

    result = update_project("p9", ProjectUpdateOptions(note="x"), executor=executor)

    assert result.error is not None
    assert result.error.code == ErrorCode.PROJECT_NOT_FOUND


def test_drop_and_delete_project(executor, fake_osascript) -> None:
    fake_osascript.reply({"projectId": "p1", "projectName": "Home", "dropped": True})
    fake_osascript.reply({"projectId": "p1", "deleted": True})

    dropped = drop_project("p1", executor=executor)
    deleted = delete_project("p1", executor=executor)

    assert dropped.data == {"projectId": "p1", "projectName": "Home", "dropped": True}
    assert deleted.data == {"projectId": "p1", "deleted": True}
    drop_program, delete_program = fake_osascript.programs
    assert "set status of theProject to dropped" in drop_program
    assert 'set theObject to first flattened project whose id is "p1"' in delete_program
    assert "delete theObject" in delete_program
    assert '\\"projectId\\"' in delete_program


def test_create_tag_under_parent(executor, fake_osascript) -> None:
    fake_osascript.reply(TAG)

    result = create_tag("Phone", parent_id="g0", executor=executor)

    program = fake_osascript.programs[0]
    assert result.data == TAG
    assert 'set parentTag to first flattened tag whose id is "g0"' in program
    assert 'make new tag at end of tags of parentTag with properties {name:"Phone"}' in program
    assert "on serializeTag(" in program


def test_create_tag_at_top_level_and_validation(executor, fake_osascript) -> None:
    fake_osascript.reply(TAG)

    create_tag("Phone", executor=executor)
    empty = create_tag("", executor=executor)
    quoted = create_tag("Pho\\ne", executor=executor)

    assert 'set newTag to make new tag with properties {name:"Phone"}' in (
        fake_osascript.programs[0]
    )
    assert empty.error is not None
    assert empty.error.message == "Tag name cannot be empty"
    assert quoted.error is not None
    assert len(fake_osascript.calls) == 1


def test_update_tag_renames_and_moves(executor, fake_osascript) -> None:
    fake_osascript.reply(TAG)

    update_tag("g1", TagUpdateOptions(name="Calls", parent_name="Contexts"), executor=executor)

    program = fake_osascript.programs[0]
    assert 'set theTag to first flattened tag whose id is "g1"' in program
    assert 'set name of theTag to "Calls"' in program
    assert 'set newParent to first flattened tag whose name is "Contexts"' in program
    assert "move theTag to end of tags of newParent" in program


def test_delete_tag_not_found_is_classified(executor, fake_osascript) -> None:
    fake_osascript.reply("", stderr="Can't get first flattened tag whose id = \"g9\". (-1728)")

    result = delete_tag("g9", executor=executor)

    assert result.error is not None
    assert result.error.code == ErrorCode.TAG_NOT_FOUND
    assert "delete theObject" in fake_osascript.programs[0]


def test_update_folder_renames_and_moves(executor, fake_osascript) -> None:
    fake_osascript.reply(FOLDER)

    result = update_folder(
        "f2",
        FolderUpdateOptions(name="Old", parent_id="f1"),
        executor=executor,
    )

    program = fake_osascript.programs[0]
    assert result.data == FOLDER
    assert 'set theFolder to first flattened folder whose id is "f2"' in program
    assert 'set name of theFolder to "Old"' in program
    assert "move theFolder to end of folders of newParent" in program
    assert "return my serializeFolder(theFolder)" in program


def test_update_folder_validation(executor, fake_osascript) -> None:
    blank = update_folder("f2", FolderUpdateOptions(name=" "), executor=executor)
    bad_id = update_folder("f 2", FolderUpdateOptions(name="Old"), executor=executor)

    assert blank.error is not None
    assert blank.error.message == "Folder name cannot be empty"
    assert bad_id.error is not None
    assert bad_id.error.code == ErrorCode.INVALID_ID_FORMAT
    assert fake_osascript.calls == []


def test_delete_folder(executor, fake_osascript) -> None:
    fake_osascript.reply({"folderId": "f2", "deleted": True})

    result = delete_folder("f2", executor=executor)

    assert result.data == {"folderId": "f2", "deleted": True}
    assert 'first flattened folder whose id is "f2"' in fake_osascript.programs[0]


def test_delete_rejects_bad_ids_before_running(executor, fake_osascript) -> None:
    for outcome in (
        delete_project("p\x001", executor=executor),
        delete_tag("", executor=executor),
        delete_folder("f2\n", executor=executor),
    ):
        assert outcome.error is not None
        assert outcome.error.code == ErrorCode.INVALID_ID_FORMAT
    assert fake_osascript.calls == []
