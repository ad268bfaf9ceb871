"""Synchronous ChorePoints engine.

Owns the document for one session: registry operations, daily reconciliation
and the points ledger. Every mutating call writes the whole document back
through the store before returning. Invalid input and unknown ids are no-ops
reported through the return value, never exceptions.
"""
from __future__ import annotations

import logging
from typing import Any
import uuid

from homeassistant.util import dt as dt_util

from .const import PRIORITIES, PRIORITY_MEDIUM, REPEAT_DAILY, REPEAT_TYPES
from .models import (
    DailyInstance,
    DailyStats,
    DocumentModel,
    Reward,
    Role,
    TaskDefinition,
    TaskHistoryStats,
    clean_text,
    format_date,
    normalize_priority,
    normalize_repeat_days,
    normalize_repeat_type,
    normalize_repeat_until,
    parse_date,
    positive_int,
)
from .recurrence import reconcile_instances
from .storage import ChorePointsStore, StorageAdapter, document_from_dict, document_to_dict

_LOGGER = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


class ChorePointsEngine:
    """Roles, task definitions, daily instances and rewards for one session."""

    def __init__(self, adapter: StorageAdapter) -> None:
        self.store = ChorePointsStore(adapter)
        self.model: DocumentModel | None = None

    def load(self) -> DocumentModel:
        """Read the persisted document, replacing any in-memory state."""
        self.model = self.store.load()
        _LOGGER.debug(
            "Loaded %d roles, %d task definitions, %d days",
            len(self.model.roles), len(self.model.task_defs), len(self.model.daily_tasks),
        )
        return self.model

    def save(self) -> bool:
        return self.store.save(self._require_model())

    def _require_model(self) -> DocumentModel:
        if self.model is None:
            raise RuntimeError("Model not initialized")
        return self.model

    # ---- lookups ----
    def get_role(self, role_id: str) -> Role | None:
        return next((r for r in self._require_model().roles if r.id == role_id), None)

    def get_points(self, role_id: str) -> int:
        role = self.get_role(role_id)
        return role.points if role else 0

    def get_task_def(self, task_def_id: str) -> TaskDefinition | None:
        return next((td for td in self._require_model().task_defs if td.id == task_def_id), None)

    def get_task_defs(self, role_id: str | None = None) -> list[TaskDefinition]:
        task_defs = list(self._require_model().task_defs)
        if role_id:
            task_defs = [td for td in task_defs if td.role_id == role_id]
        return task_defs

    def get_reward(self, reward_id: str) -> Reward | None:
        return next((rw for rw in self._require_model().rewards if rw.id == reward_id), None)

    def get_rewards(self, role_id: str | None = None) -> list[Reward]:
        rewards = list(self._require_model().rewards)
        if role_id:
            rewards = [rw for rw in rewards if rw.role_id == role_id]
        return rewards

    def get_daily_instances(self, date_str: str) -> list[DailyInstance]:
        """Instances stored for a date, without reconciling."""
        return list(self._require_model().daily_tasks.get(date_str, []))

    # ---- roles ----
    def add_role(self, name: str) -> str | None:
        model = self._require_model()
        name = clean_text(name)
        if name is None:
            _LOGGER.warning("Rejected role with blank name")
            return None
        role = Role(id=_new_id(), name=name, points=0)
        model.roles.append(role)
        self.save()
        return role.id

    def ensure_role(self, name: str) -> str | None:
        """Return the id of the role with this name, creating it when missing."""
        cleaned = clean_text(name)
        if cleaned is None:
            return None
        existing = next((r for r in self._require_model().roles if r.name == cleaned), None)
        if existing is not None:
            return existing.id
        return self.add_role(cleaned)

    def delete_role(self, role_id: str) -> bool:
        """Delete a role with its task definitions, rewards and daily instances."""
        model = self._require_model()
        if self.get_role(role_id) is None:
            return False

        removed_defs = {td.id for td in model.task_defs if td.role_id == role_id}
        model.roles = [r for r in model.roles if r.id != role_id]
        model.task_defs = [td for td in model.task_defs if td.role_id != role_id]
        model.rewards = [rw for rw in model.rewards if rw.role_id != role_id]
        self._purge_instances(lambda it: it.role_id == role_id or it.task_def_id in removed_defs)
        self.save()
        return True

    def _purge_instances(self, predicate) -> None:
        """Drop matching instances on every date, then any empty date buckets."""
        model = self._require_model()
        for date_str in list(model.daily_tasks):
            remaining = [it for it in model.daily_tasks[date_str] if not predicate(it)]
            if remaining:
                model.daily_tasks[date_str] = remaining
            else:
                del model.daily_tasks[date_str]

    # ---- task definitions ----
    def add_task_def(
        self,
        role_id: str,
        title: str,
        points: int,
        note: str = "",
        repeat_type: str = REPEAT_DAILY,
        repeat_days: Any = None,
        repeat_until: Any = None,
        priority: str = PRIORITY_MEDIUM,
    ) -> str | None:
        model = self._require_model()
        title = clean_text(title)
        points = positive_int(points)
        if not role_id or self.get_role(role_id) is None or title is None or points is None:
            _LOGGER.warning("Rejected task definition for role %s: invalid role, title or points", role_id)
            return None

        task_def = TaskDefinition(
            id=_new_id(),
            role_id=role_id,
            title=title,
            points=points,
            note=note if isinstance(note, str) else "",
            repeat_type=normalize_repeat_type(repeat_type),
            repeat_days=normalize_repeat_days(repeat_days),
            repeat_until=normalize_repeat_until(repeat_until),
            priority=normalize_priority(priority),
        )
        model.task_defs.append(task_def)
        self.save()
        return task_def.id

    def update_task_def(self, task_def_id: str, **patch: Any) -> bool:
        """Apply the valid fields of a partial update.

        Omitted or invalid fields keep their value; passing ``repeat_until=None``
        clears the bound. Incomplete instances on every date are re-synced to the
        new title, points and note; completed ones keep their snapshot.
        """
        model = self._require_model()
        task_def = self.get_task_def(task_def_id)
        if task_def is None:
            return False

        if "role_id" in patch and patch["role_id"] and self.get_role(patch["role_id"]) is not None:
            task_def.role_id = patch["role_id"]
        title = clean_text(patch.get("title"))
        if title is not None:
            task_def.title = title
        points = positive_int(patch.get("points"))
        if points is not None:
            task_def.points = points
        if isinstance(patch.get("note"), str):
            task_def.note = patch["note"]
        if patch.get("repeat_type") in REPEAT_TYPES:
            task_def.repeat_type = patch["repeat_type"]
        if "repeat_days" in patch and patch["repeat_days"] is not None:
            task_def.repeat_days = normalize_repeat_days(patch["repeat_days"])
        if "repeat_until" in patch:
            until = normalize_repeat_until(patch["repeat_until"])
            if until is not None or patch["repeat_until"] is None:
                task_def.repeat_until = until
        if patch.get("priority") in PRIORITIES:
            task_def.priority = patch["priority"]

        for instances in model.daily_tasks.values():
            for instance in instances:
                if instance.task_def_id == task_def_id and not instance.completed:
                    instance.title = task_def.title
                    instance.points = task_def.points
                    instance.note = task_def.note or ""

        self.save()
        return True

    def delete_task_def(self, task_def_id: str) -> bool:
        """Delete a definition and all of its instances, completed ones included.

        Points already earned from those instances stay on the role.
        """
        model = self._require_model()
        if self.get_task_def(task_def_id) is None:
            return False
        model.task_defs = [td for td in model.task_defs if td.id != task_def_id]
        self._purge_instances(lambda it: it.task_def_id == task_def_id)
        self.save()
        return True

    # ---- rewards ----
    def add_reward(self, role_id: str, title: str, cost: int, note: str = "") -> str | None:
        model = self._require_model()
        title = clean_text(title)
        cost = positive_int(cost)
        if not role_id or self.get_role(role_id) is None or title is None or cost is None:
            _LOGGER.warning("Rejected reward for role %s: invalid role, title or cost", role_id)
            return None
        reward = Reward(
            id=_new_id(),
            role_id=role_id,
            title=title,
            cost=cost,
            note=note if isinstance(note, str) else "",
            redeemed_count=0,
        )
        model.rewards.append(reward)
        self.save()
        return reward.id

    def delete_reward(self, reward_id: str) -> bool:
        model = self._require_model()
        if self.get_reward(reward_id) is None:
            return False
        model.rewards = [rw for rw in model.rewards if rw.id != reward_id]
        self.save()
        return True

    # ---- daily reconciliation ----
    def ensure_daily(self, date_str: str) -> list[DailyInstance]:
        """Reconcile and persist the instance list for a date, then return it."""
        model = self._require_model()
        try:
            date_str = format_date(parse_date(date_str))
        except ValueError:
            _LOGGER.warning("Ignoring reconciliation for invalid date %r", date_str)
            return []

        instances = reconcile_instances(model.daily_tasks.get(date_str, []), model.task_defs, date_str)
        model.daily_tasks[date_str] = instances
        self.save()
        return instances

    # ---- points ----
    def complete_task(self, task_def_id: str, date_str: str) -> bool:
        """Complete the instance of a definition on a date and credit its points.

        The credited amount is the instance snapshot, not the live definition.
        Completing twice, or a task with no instance on that date, is a no-op.
        """
        instances = self.ensure_daily(date_str)
        instance = next((it for it in instances if it.task_def_id == task_def_id), None)
        if instance is None or instance.completed:
            return False

        instance.completed = True
        instance.completed_at = int(dt_util.utcnow().timestamp() * 1000)
        role = self.get_role(instance.role_id)
        if role is not None:
            role.points += instance.points
        else:
            _LOGGER.warning("Completed %s but role %s no longer exists", task_def_id, instance.role_id)
        self.save()
        return True

    def redeem_reward(self, reward_id: str) -> bool:
        """Spend a role's points on a reward; all-or-nothing."""
        reward = self.get_reward(reward_id)
        if reward is None:
            return False
        role = self.get_role(reward.role_id)
        if role is None:
            return False
        if role.points < reward.cost:
            _LOGGER.debug("Role %s has %d points, reward %s costs %d", role.id, role.points, reward_id, reward.cost)
            return False
        role.points -= reward.cost
        reward.redeemed_count += 1
        self.save()
        return True

    # ---- stats ----
    def get_daily_stats(self, date_str: str) -> DailyStats:
        stats = DailyStats()
        for instance in self._require_model().daily_tasks.get(date_str, []):
            if instance.completed:
                stats.completed += 1
                stats.points += instance.points
        return stats

    def get_task_history_stats(self, task_def_id: str) -> TaskHistoryStats:
        stats = TaskHistoryStats()
        for instances in self._require_model().daily_tasks.values():
            for instance in instances:
                if instance.task_def_id == task_def_id and instance.completed:
                    stats.count += 1
                    stats.points += instance.points
        return stats

    # ---- import/export ----
    def replace_document(self, candidate: Any) -> bool:
        """Replace the whole document with imported data and persist it."""
        if not isinstance(candidate, dict):
            _LOGGER.warning("Rejected import: expected an object, got %s", type(candidate).__name__)
            return False
        self.model = document_from_dict(candidate)
        self.save()
        return True

    def export_document(self) -> dict[str, Any]:
        return document_to_dict(self._require_model())
