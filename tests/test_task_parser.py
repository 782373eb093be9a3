from app.task_model import TaskPriority, TaskStatus
from app.task_parser import parse_document, parse_task_line, strip_metadata


def test_parse_task_line_extracts_every_metadata_category():
    line = (
        "- [ ] Buy milk 📅 2025-04-01 ⏳ 2025-03-30 🛫 2025-03-29 "
        "➕ 2025-03-01 ⏫ 🔁 daily #home #errands"
    )

    task = parse_task_line(line, "Inbox.md", 3)

    assert task is not None
    assert task.identifier == "Inbox.md:3"
    assert task.description == "Buy milk"
    assert task.status is TaskStatus.INCOMPLETE
    assert task.status_marker == " "
    assert task.due_date == "2025-04-01"
    assert task.scheduled_date == "2025-03-30"
    assert task.start_date == "2025-03-29"
    assert task.created_date == "2025-03-01"
    assert task.priority is TaskPriority.HIGH
    assert task.recurrence == "daily"
    assert task.tags == ("#home", "#errands")
    assert task.original_text == line


def test_parse_task_line_rejects_non_task_lines():
    assert parse_task_line("Just some prose", "a.md", 1) is None
    assert parse_task_line("- a plain bullet", "a.md", 1) is None
    assert parse_task_line("-[ ] missing space", "a.md", 1) is None
    assert parse_task_line("", "a.md", 1) is None


def test_parse_task_line_maps_status_markers():
    expected = {
        " ": TaskStatus.INCOMPLETE,
        "x": TaskStatus.COMPLETE,
        "X": TaskStatus.COMPLETE,
        "-": TaskStatus.CANCELLED,
        "/": TaskStatus.IN_PROGRESS,
        "?": TaskStatus.INCOMPLETE,
    }
    for marker, status in expected.items():
        task = parse_task_line(f"- [{marker}] Something", "a.md", 1)
        assert task is not None
        assert task.status is status
        assert task.status_marker == marker


def test_parse_task_line_accepts_list_marker_variants():
    for line in (
        "* [ ] star",
        "+ [ ] plus",
        "1. [ ] numbered",
        "12) [ ] paren numbered",
        "    - [ ] indented",
        "> - [ ] quoted",
    ):
        assert parse_task_line(line, "a.md", 1) is not None, line


def test_parse_task_line_prefers_double_high_priority_glyph():
    task = parse_task_line("- [ ] Urgent ⏫⏫", "a.md", 1)

    assert task.priority is TaskPriority.HIGHEST
    assert task.description == "Urgent"


def test_parse_task_line_first_priority_wins():
    task = parse_task_line("- [ ] Mixed 🔽 🔼", "a.md", 1)

    assert task.priority is TaskPriority.LOW
    assert task.description == "Mixed"


def test_parse_task_line_keeps_first_date_and_strips_all():
    task = parse_task_line("- [ ] Twice 📅 2025-01-01 📅 2025-02-02", "a.md", 1)

    assert task.due_date == "2025-01-01"
    assert task.description == "Twice"


def test_parse_task_line_accepts_alternate_due_glyph():
    task = parse_task_line("- [ ] Alt \U0001F5D3\ufe0f 2025-01-02", "a.md", 1)

    assert task.due_date == "2025-01-02"
    assert task.description == "Alt"


def test_parse_task_line_truncates_recurrence_to_first_token():
    task = parse_task_line("- [ ] Water plants 🔁 every week", "a.md", 1)

    assert task.recurrence == "every"
    assert task.description == "Water plants week"


def test_parse_task_line_tag_rules():
    task = parse_task_line("- [ ] Mail bob@example.com#nope about #work, #a/b", "a.md", 1)

    assert task.tags == ("#work", "#a/b")
    assert task.description == "Mail bob@example.com#nope about"


def test_parse_task_line_keeps_unrecognized_hash_tokens():
    task = parse_task_line("- [ ] Fix #!urgent bug ## 📅 2025-01-01", "a.md", 1)

    assert task.tags == ()
    assert task.description == "Fix #!urgent bug ##"
    assert task.due_date == "2025-01-01"


def test_parse_task_line_without_metadata():
    task = parse_task_line("- [x]   Done   task  ", "a.md", 1)

    assert task.description == "Done task"
    assert task.tags == ()
    assert task.due_date is None
    assert task.priority is None
    assert task.recurrence is None


def test_task_to_dict_uses_wire_names():
    task = parse_task_line("- [/] Draft 🔼 📅 2025-04-01 #work", "notes/plan.md", 7)

    assert task.to_dict() == {
        "id": "notes/plan.md:7",
        "description": "Draft",
        "status": "in_progress",
        "statusSymbol": "/",
        "filePath": "notes/plan.md",
        "lineNumber": 7,
        "tags": ["#work"],
        "dueDate": "2025-04-01",
        "scheduledDate": None,
        "startDate": None,
        "createdDate": None,
        "priority": "medium",
        "recurrence": None,
        "originalMarkdown": "- [/] Draft 🔼 📅 2025-04-01 #work",
    }


def test_strip_metadata_collapses_whitespace():
    assert strip_metadata("  a  ⏬  b 📅 2025-01-01   #t  ") == "a b"


def test_parse_document_numbers_lines_from_one():
    content = "# Title\n- [ ] first\nprose\n- [x] second\n"

    tasks = parse_document("doc.md", content)

    assert [task.line_number for task in tasks] == [2, 4]
    assert [task.identifier for task in tasks] == ["doc.md:2", "doc.md:4"]
