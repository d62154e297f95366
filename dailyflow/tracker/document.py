"""
Tracker document — the in-memory snapshot of one user's data.

Snapshots are never mutated in place. Every mutation below returns a new
`UserDocument`, so derivations can hold on to an older snapshot safely.

Wire shape (what the API stores and returns)
--------------------------------------------
    {
      "habits":      [{"id": "wake", "label": "Wake up early"}, ...],
      "history":     {"2026-02-20": {"habits": {"wake": true}}},
      "tasksByDate": {"2026-02-20": [{"id", "text", "done", "reminderTime"}]}
    }
"""
from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Mapping, Optional

from dailyflow.tracker.dates import today_key

SLUG_MAX_LENGTH = 30


@dataclass(frozen=True)
class Habit:
    id: str
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "label": self.label}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Habit":
        return cls(id=str(data["id"]), label=str(data.get("label", data["id"])))


@dataclass(frozen=True)
class Task:
    id: str
    text: str
    done: bool = False
    reminder_time: str = ""   # "HH:MM" or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "done": self.done,
            "reminderTime": self.reminder_time,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            text=str(data.get("text", "")),
            done=bool(data.get("done", False)),
            reminder_time=str(data.get("reminderTime") or ""),
        )


DEFAULT_HABITS: tuple[Habit, ...] = (
    Habit("wake", "Wake up early"),
    Habit("exercise", "Exercise"),
    Habit("study", "Study / Learn new skill"),
    Habit("problems", "2 problems a day"),
    Habit("water", "Drink enough water"),
    Habit("meditate", "Meditation"),
    Habit("read", "Reading"),
)


def default_history(today: Optional[date] = None) -> dict[str, dict]:
    return {today_key(today): {"habits": {}}}


def default_tasks_by_date(today: Optional[date] = None) -> dict[str, tuple]:
    return {today_key(today): ()}


@dataclass(frozen=True)
class UserDocument:
    identity: str = ""
    habits: tuple[Habit, ...] = DEFAULT_HABITS
    history: Mapping[str, Mapping[str, Any]] = field(default_factory=default_history)
    tasks_by_date: Mapping[str, tuple[Task, ...]] = field(default_factory=default_tasks_by_date)

    def tasks_for(self, day: str) -> tuple[Task, ...]:
        return tuple(self.tasks_by_date.get(day, ()))

    def habits_on(self, day: str) -> Mapping[str, bool]:
        entry = self.history.get(day) or {}
        return entry.get("habits") or {}

    def to_payload(self) -> dict[str, Any]:
        return {
            "habits": [h.to_dict() for h in self.habits],
            "history": {
                day: {**entry, "habits": dict(entry.get("habits") or {})}
                for day, entry in self.history.items()
            },
            "tasksByDate": {
                day: [t.to_dict() for t in tasks]
                for day, tasks in self.tasks_by_date.items()
            },
        }

    @classmethod
    def from_payload(
        cls,
        identity: str,
        payload: Mapping[str, Any],
        today: Optional[date] = None,
    ) -> "UserDocument":
        """
        Build a snapshot from an API response, falling back to the default
        seed for any part that is missing or empty.
        """
        raw_habits = payload.get("habits")
        habits: tuple[Habit, ...] = ()
        if isinstance(raw_habits, list):
            habits = tuple(Habit.from_dict(h) for h in raw_habits if _has_id(h))
        habits = habits or DEFAULT_HABITS

        # Entries that are not objects are dropped rather than trusted.
        raw_history = payload.get("history")
        history: dict[str, dict] = {}
        if isinstance(raw_history, Mapping):
            history = {
                day: {**entry, "habits": _checks(entry.get("habits"))}
                for day, entry in raw_history.items()
                if isinstance(entry, Mapping)
            }
        history = history or default_history(today)

        raw_tasks = payload.get("tasksByDate")
        if isinstance(raw_tasks, Mapping):
            tasks_by_date = {day: _tasks(tasks) for day, tasks in raw_tasks.items()}
        else:
            tasks_by_date = default_tasks_by_date(today)

        return cls(identity=identity, habits=habits, history=history, tasks_by_date=tasks_by_date)


def _has_id(item: Any) -> bool:
    return isinstance(item, Mapping) and bool(item.get("id"))


def _checks(raw: Any) -> dict[str, Any]:
    return dict(raw) if isinstance(raw, Mapping) else {}


def _tasks(raw: Any) -> tuple[Task, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(Task.from_dict(t) for t in raw if _has_id(t))


def default_document(identity: str = "", today: Optional[date] = None) -> UserDocument:
    return UserDocument(
        identity=identity,
        habits=DEFAULT_HABITS,
        history=default_history(today),
        tasks_by_date=default_tasks_by_date(today),
    )


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")[:SLUG_MAX_LENGTH]
    return slug or f"habit-{int(time.time() * 1000)}"


def new_task_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Habit mutations
# ---------------------------------------------------------------------------

def toggle_habit(
    doc: UserDocument, habit_id: str, checked: bool, day: Optional[str] = None
) -> UserDocument:
    day = day or today_key()
    history = dict(doc.history)
    current = history.get(day) or {"habits": {}}
    history[day] = {**current, "habits": {**(current.get("habits") or {}), habit_id: checked}}
    return replace(doc, history=history)


def add_habit(doc: UserDocument, label: str) -> UserDocument:
    """Append a habit and back-fill `False` for it into every history entry."""
    label = label.strip()
    if not label:
        return doc
    habit_id = slugify(label)
    if any(h.id == habit_id for h in doc.habits):
        return doc
    history = {
        day: {**(entry or {}), "habits": {**((entry or {}).get("habits") or {}), habit_id: False}}
        for day, entry in doc.history.items()
    }
    return replace(doc, habits=doc.habits + (Habit(habit_id, label),), history=history)


def delete_habit(doc: UserDocument, habit_id: str) -> UserDocument:
    """Drop a habit and remove its key from every history entry."""
    history = {}
    for day, entry in doc.history.items():
        entry = entry or {}
        habits = {k: v for k, v in (entry.get("habits") or {}).items() if k != habit_id}
        history[day] = {**entry, "habits": habits}
    habits = tuple(h for h in doc.habits if h.id != habit_id)
    return replace(doc, habits=habits, history=history)


def rename_habit(doc: UserDocument, habit_id: str, label: str) -> UserDocument:
    label = (label or "").strip()
    if not label or not any(h.id == habit_id for h in doc.habits):
        return doc
    habits = tuple(replace(h, label=label) if h.id == habit_id else h for h in doc.habits)
    return replace(doc, habits=habits)


# ---------------------------------------------------------------------------
# Task mutations: all scoped to one date key
# ---------------------------------------------------------------------------

def _with_tasks(doc: UserDocument, day: str, tasks: tuple[Task, ...]) -> UserDocument:
    return replace(doc, tasks_by_date={**doc.tasks_by_date, day: tasks})


def add_task(doc: UserDocument, day: str, text: str, reminder_time: str = "") -> UserDocument:
    """Insert a task at the top of the day's list (newest first)."""
    text = text.strip()
    if not text:
        return doc
    task = Task(id=new_task_id(), text=text, done=False, reminder_time=reminder_time or "")
    return _with_tasks(doc, day, (task,) + doc.tasks_for(day))


def toggle_task(doc: UserDocument, day: str, task_id: str) -> UserDocument:
    tasks = tuple(
        replace(t, done=not t.done) if t.id == task_id else t for t in doc.tasks_for(day)
    )
    return _with_tasks(doc, day, tasks)


def edit_task(doc: UserDocument, day: str, task_id: str, text: str) -> UserDocument:
    text = (text or "").strip()
    if not text or not any(t.id == task_id for t in doc.tasks_for(day)):
        return doc
    tasks = tuple(replace(t, text=text) if t.id == task_id else t for t in doc.tasks_for(day))
    return _with_tasks(doc, day, tasks)


def delete_task(doc: UserDocument, day: str, task_id: str) -> UserDocument:
    return _with_tasks(doc, day, tuple(t for t in doc.tasks_for(day) if t.id != task_id))


def visit_date(doc: UserDocument, day: str) -> UserDocument:
    """Make sure a task list exists for a newly selected date."""
    if not day or day in doc.tasks_by_date:
        return doc
    return _with_tasks(doc, day, ())
