"""Data coordinator for ChorePoints integration."""
from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any, TypeVar

from homeassistant.core import HomeAssistant
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.util import dt as dt_util

from .const import SIGNAL_DOCUMENT_UPDATED
from .engine import ChorePointsEngine
from .models import DailyInstance, format_date
from .storage import StorageAdapter

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class ChorePointsCoordinator:
    """Runs engine calls on the event loop and notifies entities.

    Engine calls never await, so each one completes before any entity,
    service or diagnostics reader sees the document again.
    """

    def __init__(self, hass: HomeAssistant, adapter: StorageAdapter) -> None:
        """Initialize the coordinator."""
        self.hass = hass
        self.adapter = adapter
        self.engine = ChorePointsEngine(adapter)

    @property
    def model(self):
        return self.engine.model

    def today(self) -> str:
        """Today's date in Home Assistant's local time zone."""
        return format_date(dt_util.now().date())

    async def async_init(self) -> None:
        """Initialize the coordinator by loading data."""
        await self.adapter.async_load()
        self.engine.load()

    async def async_shutdown(self) -> None:
        """Write out any save still pending."""
        await self.adapter.async_flush()

    async def async_call(self, func: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
        """Run an engine method and signal entities afterwards."""
        result = func(*args, **kwargs)
        async_dispatcher_send(self.hass, SIGNAL_DOCUMENT_UPDATED)
        return result

    async def async_seed_roles(self, names: list[str]) -> None:
        """Make sure every configured role name exists."""
        for name in names:
            await self.async_call(self.engine.ensure_role, name)

    async def async_ensure_today(self) -> list[DailyInstance]:
        """Reconcile today's instances."""
        today = self.today()
        instances = await self.async_call(self.engine.ensure_daily, today)
        _LOGGER.debug("Reconciled %s: %d instances", today, len(instances))
        return instances

    async def async_complete_task(self, task_def_id: str, date_str: str | None = None) -> bool:
        return await self.async_call(self.engine.complete_task, task_def_id, date_str or self.today())
