from datetime import date

from app.task_filters import (
    AllOf,
    AnyOf,
    DescriptionIncludes,
    Not,
    evaluate_filter,
    parse_predicate,
)
from app.task_parser import parse_task_line

TODAY = date(2025, 4, 15)


def _task(line: str, path: str = "notes.md"):
    task = parse_task_line(line, path, 1)
    assert task is not None
    return task


def _matches(line: str, text: str, path: str = "notes.md") -> bool:
    return evaluate_filter(_task(line, path), text, today=TODAY)


def test_status_filters():
    assert _matches("- [ ] a", "not done")
    assert _matches("- [/] a", "not done")
    assert not _matches("- [x] a", "not done")
    assert not _matches("- [-] a", "not done")

    assert _matches("- [x] a", "done")
    assert _matches("- [X] a", "done")
    assert not _matches("- [/] a", "done")
    assert not _matches("- [-] a", "done")

    assert _matches("- [-] a", "cancelled")
    assert _matches("- [/] a", "in progress")
    assert not _matches("- [ ] a", "in progress")


def test_due_filters_use_injected_today():
    assert _matches("- [ ] a 📅 2025-04-15", "due today")
    assert _matches("- [ ] a 📅 2025-04-14", "due before today")
    assert _matches("- [ ] a 📅 2025-04-14", "overdue")
    assert _matches("- [ ] a 📅 2025-04-16", "due after today")
    assert not _matches("- [ ] a 📅 2025-04-15", "overdue")
    assert not _matches("- [ ] a", "due today")


def test_absolute_due_filters():
    line = "- [ ] a 📅 2025-04-01"
    assert _matches(line, "due 2025-04-01")
    assert _matches(line, "due on 2025-04-01")
    assert _matches(line, "due before 2025-04-02")
    assert not _matches(line, "due before 2025-04-01")
    assert _matches(line, "due after 2025-03-31")
    assert not _matches("- [ ] no date", "due before 2030-01-01")
    assert not _matches("- [ ] no date", "due after 2000-01-01")


def test_date_presence_filters():
    line = "- [ ] a ⏳ 2025-04-10 🛫 2025-04-15"
    assert _matches(line, "has scheduled date")
    assert _matches(line, "scheduled before today")
    assert _matches(line, "has start date")
    assert _matches(line, "starts today")
    assert _matches(line, "no due date")
    assert not _matches(line, "has due date")
    assert _matches("- [ ] a", "no scheduled date")
    assert _matches("- [ ] a", "no start date")
    assert not _matches(line, "starts before today")


def test_tag_filters_ignore_case_and_hash():
    line = "- [ ] a #Work"
    assert _matches(line, "tag includes work")
    assert _matches(line, "tag includes #work")
    assert _matches(line, "tag include WOR")
    assert not _matches(line, "tag does not include work")
    assert _matches(line, "tag do not include home")
    assert _matches(line, "has tags")
    assert _matches("- [ ] a", "no tags")
    assert not _matches("- [ ] a", "tag includes work")


def test_path_and_description_filters():
    assert _matches("- [ ] a", "path includes projects", path="Projects/alpha.md")
    assert _matches("- [ ] a", "path does not include archive", path="Projects/alpha.md")
    assert _matches("- [ ] Call the Bank", "description includes bank")
    assert _matches("- [ ] Call the Bank", "description does not include dentist")


def test_priority_filters():
    assert _matches("- [ ] a ⏫", "priority is high")
    assert not _matches("- [ ] a ⏫⏫", "priority is high")
    assert _matches("- [ ] a ⏫⏫", "priority is highest")
    assert _matches("- [ ] a", "priority is none")
    assert not _matches("- [ ] a 🔽", "priority is none")


def test_recurrence_filters():
    assert _matches("- [ ] a 🔁 daily", "is recurring")
    assert _matches("- [ ] a", "is not recurring")
    assert not _matches("- [ ] a", "is recurring")


def test_combinators():
    line = "- [ ] a 📅 2025-04-01 #work"
    assert _matches(line, "not done and tag includes work")
    assert not _matches(line, "done and tag includes work")
    assert _matches(line, "done or tag includes work")
    assert _matches(line, "not tag includes home")
    assert not _matches(line, "not has tags")


def test_and_is_split_before_or():
    predicate = parse_predicate("done or has tags and due before today")

    assert isinstance(predicate, AllOf)
    assert isinstance(predicate.operands[0], AnyOf)
    assert _matches("- [ ] a 📅 2025-04-01 #x", "done or has tags and due before today")
    assert not _matches("- [x] a", "done or has tags and due before today")


def test_not_done_is_a_leaf():
    assert not isinstance(parse_predicate("not done"), Not)
    assert isinstance(parse_predicate("not cancelled"), Not)


def test_unknown_text_searches_description():
    assert parse_predicate("Buy MILK") == DescriptionIncludes("buy milk")
    assert _matches("- [ ] Buy milk today", "buy milk")
    assert not _matches("- [ ] Buy bread", "milk")
