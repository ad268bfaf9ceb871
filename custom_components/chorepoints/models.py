"""Data models for ChorePoints integration."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import re
from typing import Any

from .const import PRIORITIES, PRIORITY_MEDIUM, REPEAT_DAILY, REPEAT_TYPES, REPEAT_WEEKLY


@dataclass
class Role:
    id: str
    name: str
    points: int = 0

@dataclass
class TaskDefinition:
    """A recurring rule; instances are materialized per date from it."""
    id: str
    role_id: str
    title: str
    points: int
    note: str = ""
    repeat_type: str = REPEAT_DAILY  # "daily" | "weekly"
    repeat_days: list[int] = field(default_factory=list)  # 0=Sunday, 6=Saturday
    repeat_until: str | None = None  # YYYY-MM-DD, inclusive
    priority: str = PRIORITY_MEDIUM  # "high" | "medium" | "low"

    def is_weekly(self) -> bool:
        return self.repeat_type == REPEAT_WEEKLY

@dataclass
class DailyInstance:
    """Snapshot of a task definition on one date."""
    task_def_id: str
    role_id: str
    title: str
    points: int
    note: str = ""
    completed: bool = False
    completed_at: int | None = None  # epoch milliseconds

    @classmethod
    def from_task_def(cls, task_def: TaskDefinition) -> DailyInstance:
        return cls(
            task_def_id=task_def.id,
            role_id=task_def.role_id,
            title=task_def.title,
            points=task_def.points,
            note=task_def.note or "",
        )

@dataclass
class Reward:
    id: str
    role_id: str
    title: str
    cost: int
    note: str = ""
    redeemed_count: int = 0

@dataclass
class DailyStats:
    completed: int = 0
    points: int = 0

@dataclass
class TaskHistoryStats:
    count: int = 0
    points: int = 0

@dataclass
class DocumentModel:
    roles: list[Role] = field(default_factory=list)
    task_defs: list[TaskDefinition] = field(default_factory=list)
    daily_tasks: dict[str, list[DailyInstance]] = field(default_factory=dict)  # key: YYYY-MM-DD
    rewards: list[Reward] = field(default_factory=list)


# ---- dates ----
_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


def parse_date(date_str: str) -> date:
    """Build a calendar date from the integer parts of a YYYY-MM-DD string.

    Raises ValueError for anything that is not a canonical, valid date.
    """
    match = _DATE_RE.fullmatch(date_str) if isinstance(date_str, str) else None
    if match is None:
        raise ValueError(f"Invalid date string: {date_str!r}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


# ---- normalization ----
def clean_text(value: Any) -> str | None:
    """Return stripped text, or None when the value is not a non-blank string."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def positive_int(value: Any) -> int | None:
    """Coerce to a positive integer, or None when that is not possible."""
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def normalize_repeat_type(value: Any) -> str:
    return value if value in REPEAT_TYPES else REPEAT_DAILY


def normalize_priority(value: Any) -> str:
    return value if value in PRIORITIES else PRIORITY_MEDIUM


def normalize_repeat_days(values: Any) -> list[int]:
    """Coerce weekday values (ints or numeric strings) to a sorted set of 0-6."""
    if values is None or isinstance(values, (str, bytes, dict)):
        return []
    days: set[int] = set()
    try:
        iterator = iter(values)
    except TypeError:
        return []
    for value in iterator:
        if isinstance(value, bool):
            continue
        try:
            day = int(value)
        except (TypeError, ValueError):
            continue
        if 0 <= day <= 6:
            days.add(day)
    return sorted(days)


def normalize_repeat_until(value: Any) -> str | None:
    """Return a canonical YYYY-MM-DD bound, or None for anything else."""
    if isinstance(value, date):
        return format_date(value)
    if not isinstance(value, str) or not value:
        return None
    try:
        return format_date(parse_date(value))
    except ValueError:
        return None
