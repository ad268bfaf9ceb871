"""Recurrence rules and per-day reconciliation for ChorePoints.

Pure functions; nothing here touches storage or Home Assistant.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import date
import logging

from .models import DailyInstance, TaskDefinition, format_date, parse_date

_LOGGER = logging.getLogger(__name__)


def weekday_index(value: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""
    return (value.weekday() + 1) % 7


def is_eligible(task_def: TaskDefinition, date_str: str) -> bool:
    """Check whether a task definition is scheduled on the given date.

    The bound comparison is a plain string comparison, which matches calendar
    order for canonical YYYY-MM-DD strings.
    """
    day = parse_date(date_str)
    canonical = format_date(day)

    until_ok = task_def.repeat_until is None or canonical <= task_def.repeat_until
    if not until_ok:
        return False

    if task_def.is_weekly():
        return weekday_index(day) in task_def.repeat_days
    return True


def reconcile_instances(
    instances: Iterable[DailyInstance],
    task_defs: Iterable[TaskDefinition],
    date_str: str,
) -> list[DailyInstance]:
    """Prune stale instances for a date and backfill missing eligible ones.

    Orphaned and completed instances always survive. An incomplete instance
    survives only while its definition still covers the date. When the stored
    list holds several instances for one definition, a single one is kept,
    preferring a completed one.
    """
    task_defs = list(task_defs)
    defs_by_id = {td.id: td for td in task_defs}

    kept: list[DailyInstance] = []
    position: dict[str, int] = {}
    for instance in instances:
        task_def = defs_by_id.get(instance.task_def_id)
        if task_def is not None and not instance.completed and not is_eligible(task_def, date_str):
            _LOGGER.debug("Pruning %s on %s: no longer scheduled", instance.task_def_id, date_str)
            continue

        index = position.get(instance.task_def_id)
        if index is None:
            position[instance.task_def_id] = len(kept)
            kept.append(instance)
        elif instance.completed and not kept[index].completed:
            kept[index] = instance

    for task_def in task_defs:
        if task_def.id in position or not is_eligible(task_def, date_str):
            continue
        _LOGGER.debug("Backfilling %s on %s", task_def.id, date_str)
        position[task_def.id] = len(kept)
        kept.append(DailyInstance.from_task_def(task_def))

    return kept
