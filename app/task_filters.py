"""Task query language.

A query is newline-separated; blank lines and ``#`` comment lines are ignored
and the remaining predicates are AND-ed. Each predicate is parsed into a small
AST before evaluation.

Combinators are split in a fixed order rather than by precedence: a predicate
containing `` and `` is split on it first, then `` or ``, then a leading
``not``. ``a or b and c`` therefore means ``(a or b) and c``. Saved queries
depend on this, so mixed expressions keep this behaviour.

``today`` is always supplied by the caller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Union

from app.task_model import PRIORITY_NONE, Task, TaskStatus

_DATE = r"(\d{4}-\d{2}-\d{2})"
_DUE_ON_PATTERN = re.compile(rf"^due\s+(?:on\s+)?{_DATE}$")
_DUE_BEFORE_PATTERN = re.compile(rf"^due\s+before\s+{_DATE}$")
_DUE_AFTER_PATTERN = re.compile(rf"^due\s+after\s+{_DATE}$")

_DATE_FIELDS = {
    "due": "due_date",
    "scheduled": "scheduled_date",
    "start": "start_date",
}

# Sentinel target meaning "the evaluation date".
TODAY = "today"


def _strip_hash(value: str) -> str:
    return value[1:] if value.startswith("#") else value


@dataclass(frozen=True)
class AllOf:
    operands: tuple["Predicate", ...]

    def matches(self, task: Task, today: date) -> bool:
        return all(operand.matches(task, today) for operand in self.operands)


@dataclass(frozen=True)
class AnyOf:
    operands: tuple["Predicate", ...]

    def matches(self, task: Task, today: date) -> bool:
        return any(operand.matches(task, today) for operand in self.operands)


@dataclass(frozen=True)
class Not:
    operand: "Predicate"

    def matches(self, task: Task, today: date) -> bool:
        return not self.operand.matches(task, today)


@dataclass(frozen=True)
class StatusIn:
    statuses: frozenset[TaskStatus]

    def matches(self, task: Task, today: date) -> bool:
        return task.status in self.statuses


@dataclass(frozen=True)
class DateCompare:
    """Compare an ISO date field against a fixed date or today.

    A task without the date never matches.
    """

    field: str
    operator: str
    target: str

    def matches(self, task: Task, today: date) -> bool:
        value = getattr(task, self.field)
        if value is None:
            return False
        target = today.isoformat() if self.target == TODAY else self.target
        if self.operator == "<":
            return value < target
        if self.operator == ">":
            return value > target
        return value == target


@dataclass(frozen=True)
class DatePresence:
    field: str
    present: bool

    def matches(self, task: Task, today: date) -> bool:
        return (getattr(task, self.field) is not None) == self.present


@dataclass(frozen=True)
class HasTags:
    present: bool

    def matches(self, task: Task, today: date) -> bool:
        return bool(task.tags) == self.present


@dataclass(frozen=True)
class TagIncludes:
    needle: str
    negate: bool = False

    def matches(self, task: Task, today: date) -> bool:
        found = any(self.needle in _strip_hash(tag).lower() for tag in task.tags)
        return found != self.negate


@dataclass(frozen=True)
class PathIncludes:
    needle: str
    negate: bool = False

    def matches(self, task: Task, today: date) -> bool:
        return (self.needle in task.document_path.lower()) != self.negate


@dataclass(frozen=True)
class DescriptionIncludes:
    needle: str
    negate: bool = False

    def matches(self, task: Task, today: date) -> bool:
        return (self.needle in task.description.lower()) != self.negate


@dataclass(frozen=True)
class PriorityIs:
    """``priority is none`` matches tasks without a priority marker."""

    priority: str

    def matches(self, task: Task, today: date) -> bool:
        if self.priority == PRIORITY_NONE:
            return task.priority is None
        return task.priority is not None and task.priority.value == self.priority


@dataclass(frozen=True)
class IsRecurring:
    recurring: bool

    def matches(self, task: Task, today: date) -> bool:
        return (task.recurrence is not None) == self.recurring


Predicate = Union[
    AllOf,
    AnyOf,
    Not,
    StatusIn,
    DateCompare,
    DatePresence,
    HasTags,
    TagIncludes,
    PathIncludes,
    DescriptionIncludes,
    PriorityIs,
    IsRecurring,
]


def _date_filters(name: str, verb: str) -> dict[str, Predicate]:
    field = _DATE_FIELDS[name]
    return {
        f"{verb} today": DateCompare(field, "=", TODAY),
        f"{verb} before today": DateCompare(field, "<", TODAY),
        f"has {name} date": DatePresence(field, True),
        f"no {name} date": DatePresence(field, False),
    }


EXACT_FILTERS: dict[str, Predicate] = {
    "done": StatusIn(frozenset({TaskStatus.COMPLETE})),
    "not done": StatusIn(frozenset({TaskStatus.INCOMPLETE, TaskStatus.IN_PROGRESS})),
    "cancelled": StatusIn(frozenset({TaskStatus.CANCELLED})),
    "in progress": StatusIn(frozenset({TaskStatus.IN_PROGRESS})),
    **_date_filters("due", "due"),
    "due after today": DateCompare("due_date", ">", TODAY),
    "overdue": DateCompare("due_date", "<", TODAY),
    **_date_filters("scheduled", "scheduled"),
    **_date_filters("start", "starts"),
    "has tags": HasTags(True),
    "no tags": HasTags(False),
    "is recurring": IsRecurring(True),
    "is not recurring": IsRecurring(False),
}

_PATTERN_FILTERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (_DUE_ON_PATTERN, "="),
    (_DUE_BEFORE_PATTERN, "<"),
    (_DUE_AFTER_PATTERN, ">"),
)

# Longer prefixes first so "tag includes" wins over "tag include".
_PREFIX_FILTERS: tuple[tuple[str, Callable[[str], Predicate]], ...] = (
    ("tag does not include ", lambda value: TagIncludes(_strip_hash(value), True)),
    ("tag do not include ", lambda value: TagIncludes(_strip_hash(value), True)),
    ("tag includes ", lambda value: TagIncludes(_strip_hash(value))),
    ("tag include ", lambda value: TagIncludes(_strip_hash(value))),
    ("path does not include ", lambda value: PathIncludes(value, True)),
    ("path includes ", lambda value: PathIncludes(value)),
    (
        "description does not include ",
        lambda value: DescriptionIncludes(value, True),
    ),
    ("description includes ", lambda value: DescriptionIncludes(value)),
    ("priority is ", lambda value: PriorityIs(value)),
)


def parse_predicate(text: str) -> Predicate:
    """Parse a single predicate line; unknown text becomes a description search."""
    text = text.lower().strip()

    if " and " in text:
        return AllOf(tuple(parse_predicate(part) for part in text.split(" and ")))
    if " or " in text:
        return AnyOf(tuple(parse_predicate(part) for part in text.split(" or ")))
    if text.startswith("not ") and text != "not done":
        return Not(parse_predicate(text[len("not ") :]))

    exact = EXACT_FILTERS.get(text)
    if exact is not None:
        return exact

    for pattern, operator in _PATTERN_FILTERS:
        match = pattern.match(text)
        if match:
            return DateCompare("due_date", operator, match.group(1))

    for prefix, build in _PREFIX_FILTERS:
        if text.startswith(prefix):
            return build(text[len(prefix) :].strip())

    return DescriptionIncludes(text)


def evaluate_filter(task: Task, text: str, *, today: date) -> bool:
    return parse_predicate(text).matches(task, today)


def parse_query(query_text: str) -> list[Predicate]:
    predicates: list[Predicate] = []
    for line in query_text.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        predicates.append(parse_predicate(line))
    return predicates


def query_tasks(tasks: Iterable[Task], query_text: str, *, today: date) -> list[Task]:
    """Return the tasks matching every predicate line, in input order."""
    predicates = parse_query(query_text)
    return [
        task
        for task in tasks
        if all(predicate.matches(task, today) for predicate in predicates)
    ]
