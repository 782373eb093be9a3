from app.task_markdown import (
    TaskFields,
    TaskUpdate,
    build_task_markdown,
    rebuild_task_line,
    toggle_task_line,
)
from app.task_parser import parse_task_line


def _parse(line: str):
    task = parse_task_line(line, "a.md", 1)
    assert task is not None
    return task


def test_build_task_markdown_uses_canonical_order():
    line = build_task_markdown(
        TaskFields(
            description="Ship release",
            due_date="2025-05-01",
            scheduled_date="2025-04-28",
            start_date="2025-04-20",
            priority="high",
            tags=["release", "#work"],
            recurrence="weekly",
        )
    )

    assert line == (
        "- [ ] Ship release ⏫ 🔁 weekly 🛫 2025-04-20 "
        "⏳ 2025-04-28 📅 2025-05-01 #release #work"
    )


def test_build_task_markdown_minimal_and_unknown_priority():
    assert build_task_markdown(TaskFields(description="Plain")) == "- [ ] Plain"
    assert (
        build_task_markdown(TaskFields(description="Odd", priority="urgent"))
        == "- [ ] Odd"
    )


def test_build_then_parse_round_trips_fields():
    fields = TaskFields(
        description="Pay rent",
        due_date="2025-06-01",
        scheduled_date="2025-05-30",
        start_date="2025-05-25",
        priority="lowest",
        tags=["home"],
        recurrence="monthly",
    )

    task = _parse(build_task_markdown(fields))

    assert task.description == "Pay rent"
    assert task.due_date == "2025-06-01"
    assert task.scheduled_date == "2025-05-30"
    assert task.start_date == "2025-05-25"
    assert task.priority.value == "lowest"
    assert task.tags == ("#home",)
    assert task.recurrence == "monthly"


def test_rebuild_is_idempotent():
    messy = "- [ ] #work Review 📅 2025-04-01   ⏫ draft"

    once = rebuild_task_line(_parse(messy))
    twice = rebuild_task_line(_parse(once))

    assert once == "- [ ] Review draft ⏫ 📅 2025-04-01 #work"
    assert twice == once


def test_rebuild_applies_overrides():
    task = _parse("- [ ] Plan trip 🔼 🔁 yearly ⏳ 2025-03-01 📅 2025-04-01 #travel")

    line = rebuild_task_line(
        task,
        TaskUpdate(
            description="Plan summer trip",
            due_date="",
            scheduled_date="2025-03-05",
            priority="none",
            tags=["holiday"],
            recurrence="",
            status="complete",
        ),
    )

    assert line == "- [x] Plan summer trip ⏳ 2025-03-05 #holiday"


def test_rebuild_keeps_unset_fields_and_prefix():
    task = _parse("  * [/] Nested 🔽 📅 2025-04-01 #a")

    line = rebuild_task_line(task, TaskUpdate(start_date="2025-03-01"))

    assert line == "  * [/] Nested 🔽 🛫 2025-03-01 📅 2025-04-01 #a"


def test_rebuild_keeps_unrecognized_hash_tokens():
    task = _parse("- [ ] Fix #!urgent bug ## 📅 2025-01-01 #work,")

    line = rebuild_task_line(task, TaskUpdate(due_date="2025-02-02"))

    assert line == "- [ ] Fix #!urgent bug ## 📅 2025-02-02 #work"


def test_rebuild_drops_created_date():
    task = _parse("- [ ] Old ➕ 2025-01-01 📅 2025-02-01")

    assert rebuild_task_line(task) == "- [ ] Old 📅 2025-02-01"


def test_rebuild_maps_status_names_to_markers():
    task = _parse("1. [x] Numbered")

    assert rebuild_task_line(task, TaskUpdate(status="cancelled")) == "1. [-] Numbered"
    assert rebuild_task_line(task, TaskUpdate(status="in_progress")) == "1. [/] Numbered"
    assert rebuild_task_line(task, TaskUpdate(status="incomplete")) == "1. [ ] Numbered"


def test_toggle_reopens_completed_task():
    line = "- [x] Done task"

    assert toggle_task_line(line, _parse(line)) == "- [ ] Done task"


def test_toggle_completes_other_statuses():
    for marker in (" ", "/", "-"):
        line = f"- [{marker}] Work 📅 2025-04-01 🔁 daily"
        assert toggle_task_line(line, _parse(line)) == "- [x] Work 📅 2025-04-01 🔁 daily"


def test_toggle_only_replaces_first_bracket():
    line = "- [ ] check [ ] box"

    assert toggle_task_line(line, _parse(line)) == "- [x] check [ ] box"
