"""Storage utilities for ChorePoints integration."""
from __future__ import annotations

import logging
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.json import json_dumps
from homeassistant.helpers.storage import Store
from homeassistant.util.json import json_loads

from .const import STORAGE_KEY, STORAGE_VERSION
from .models import (
    DailyInstance,
    DocumentModel,
    Reward,
    Role,
    TaskDefinition,
    normalize_priority,
    normalize_repeat_days,
    normalize_repeat_type,
    normalize_repeat_until,
)

_LOGGER = logging.getLogger(__name__)


class StorageAdapter:
    """Byte store holding one serialized document."""

    async def async_load(self) -> None:
        """Read the backing store before the first load()."""

    async def async_flush(self) -> None:
        """Write out any pending save."""

    def load(self) -> bytes | None:
        raise NotImplementedError

    def save(self, raw: bytes) -> bool:
        raise NotImplementedError


class HomeAssistantStorageAdapter(StorageAdapter):
    """Keep the document in Home Assistant's .storage directory.

    load() serves what async_load() read; save() schedules a write through
    the Store, which also flushes pending data when Home Assistant stops.
    """

    def __init__(self, hass: HomeAssistant):
        self._store: Store[dict] = Store(hass, STORAGE_VERSION, STORAGE_KEY)
        self._data: dict | None = None

    @property
    def path(self) -> str:
        return self._store.path

    async def async_load(self) -> None:
        try:
            self._data = await self._store.async_load()
        except (HomeAssistantError, OSError, ValueError) as ex:
            _LOGGER.warning("Failed to read %s: %s", STORAGE_KEY, ex)
            self._data = None

    async def async_flush(self) -> None:
        if self._data is not None:
            await self._store.async_save(self._data)

    def load(self) -> bytes | None:
        if self._data is None:
            return None
        return json_dumps(self._data).encode("utf-8")

    def save(self, raw: bytes) -> bool:
        self._data = json_loads(raw)
        self._store.async_delay_save(self._pending_data)
        return True

    def _pending_data(self) -> dict | None:
        return self._data


# ---- codec ----
def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _entries(container: Any) -> list[dict]:
    if not isinstance(container, list):
        return []
    return [entry for entry in container if isinstance(entry, dict)]


def role_from_dict(data: dict) -> Role:
    return Role(id=str(data.get("id", "")), name=_as_text(data.get("name")), points=_as_int(data.get("points")))


def task_def_from_dict(data: dict) -> TaskDefinition:
    raw_until = data.get("repeatUntil")
    repeat_until = normalize_repeat_until(raw_until)
    if repeat_until is None and raw_until not in (None, ""):
        _LOGGER.warning("Dropping invalid repeatUntil %r on task %s", raw_until, data.get("id"))
    return TaskDefinition(
        id=str(data.get("id", "")),
        role_id=str(data.get("roleId", "")),
        title=_as_text(data.get("title")),
        points=_as_int(data.get("points")),
        note=_as_text(data.get("note")),
        repeat_type=normalize_repeat_type(data.get("repeatType")),
        repeat_days=normalize_repeat_days(data.get("repeatDays")),
        repeat_until=repeat_until,
        priority=normalize_priority(data.get("priority")),
    )


def instance_from_dict(data: dict) -> DailyInstance:
    completed_at = data.get("completedAt")
    return DailyInstance(
        task_def_id=str(data.get("taskDefId", "")),
        role_id=str(data.get("roleId", "")),
        title=_as_text(data.get("title")),
        points=_as_int(data.get("points")),
        note=_as_text(data.get("note")),
        completed=data.get("completed") is True,
        completed_at=_as_int(completed_at) if completed_at is not None else None,
    )


def reward_from_dict(data: dict) -> Reward:
    return Reward(
        id=str(data.get("id", "")),
        role_id=str(data.get("roleId", "")),
        title=_as_text(data.get("title")),
        cost=_as_int(data.get("cost")),
        note=_as_text(data.get("note")),
        redeemed_count=_as_int(data.get("redeemedCount")),
    )


def document_from_dict(data: Any) -> DocumentModel:
    """Build a document from decoded JSON.

    Each top-level field falls back to its empty form when missing or of the
    wrong container type; unknown keys and non-object entries are ignored.
    """
    if not isinstance(data, dict):
        return DocumentModel()

    daily_tasks: dict[str, list[DailyInstance]] = {}
    raw_daily = data.get("dailyTasks")
    if isinstance(raw_daily, dict):
        for date_str, entries in raw_daily.items():
            daily_tasks[str(date_str)] = [instance_from_dict(e) for e in _entries(entries)]

    return DocumentModel(
        roles=[role_from_dict(e) for e in _entries(data.get("roles"))],
        task_defs=[task_def_from_dict(e) for e in _entries(data.get("taskDefs"))],
        daily_tasks=daily_tasks,
        rewards=[reward_from_dict(e) for e in _entries(data.get("rewards"))],
    )


def document_to_dict(model: DocumentModel) -> dict[str, Any]:
    return {
        "roles": [{"id": r.id, "name": r.name, "points": r.points} for r in model.roles],
        "taskDefs": [
            {
                "id": td.id,
                "roleId": td.role_id,
                "title": td.title,
                "points": td.points,
                "note": td.note,
                "repeatType": td.repeat_type,
                "repeatDays": list(td.repeat_days),
                "repeatUntil": td.repeat_until,
                "priority": td.priority,
            }
            for td in model.task_defs
        ],
        "dailyTasks": {
            date_str: [
                {
                    "taskDefId": it.task_def_id,
                    "roleId": it.role_id,
                    "title": it.title,
                    "points": it.points,
                    "note": it.note,
                    "completed": it.completed,
                    "completedAt": it.completed_at,
                }
                for it in instances
            ]
            for date_str, instances in model.daily_tasks.items()
        },
        "rewards": [
            {
                "id": rw.id,
                "roleId": rw.role_id,
                "title": rw.title,
                "cost": rw.cost,
                "note": rw.note,
                "redeemedCount": rw.redeemed_count,
            }
            for rw in model.rewards
        ],
    }


class ChorePointsStore:
    """Serialize the whole document through a storage adapter.

    Adapter failures never propagate: they are logged and the caller keeps its
    in-memory document.
    """

    def __init__(self, adapter: StorageAdapter):
        self.adapter = adapter

    def load(self) -> DocumentModel:
        try:
            raw = self.adapter.load()
        except OSError as ex:
            _LOGGER.warning("Failed to load ChorePoints data: %s", ex)
            return DocumentModel()
        if not raw:
            return DocumentModel()
        try:
            data = json_loads(raw)
        except ValueError as ex:
            _LOGGER.warning("Stored ChorePoints data is not valid JSON: %s", ex)
            return DocumentModel()
        if not isinstance(data, dict):
            _LOGGER.warning("Stored ChorePoints data is not an object, starting empty")
        return document_from_dict(data)

    def save(self, model: DocumentModel) -> bool:
        raw = json_dumps(document_to_dict(model)).encode("utf-8")
        try:
            saved = self.adapter.save(raw)
        except OSError as ex:
            _LOGGER.warning("Failed to save ChorePoints data: %s", ex)
            return False
        if not saved:
            _LOGGER.warning("ChorePoints data was not saved, keeping in-memory state")
        return bool(saved)
