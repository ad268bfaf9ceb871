"""Sensor entities for ChorePoints integration."""
from __future__ import annotations

from homeassistant.components.sensor import SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, SIGNAL_DOCUMENT_UPDATED
from .coordinator import ChorePointsCoordinator


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: ChorePointsCoordinator = hass.data[DOMAIN][entry.entry_id]

    entities = [RolePointsSensor(coordinator, role.id) for role in coordinator.model.roles]
    entities.append(DailyProgressSensor(coordinator))
    add_entities(entities, True)


class _ChorePointsSensor(SensorEntity):
    """Base sensor that refreshes whenever the document changes."""

    _attr_should_poll = False

    def __init__(self, coord: ChorePointsCoordinator):
        self._coord = coord

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(self.hass, SIGNAL_DOCUMENT_UPDATED, self._handle_document_updated)
        )

    @callback
    def _handle_document_updated(self) -> None:
        self.async_write_ha_state()

    @property
    def available(self) -> bool:
        """Check if coordinator is ready."""
        return self._coord.model is not None


class RolePointsSensor(_ChorePointsSensor):
    _attr_icon = "mdi:star-circle-outline"

    def __init__(self, coord: ChorePointsCoordinator, role_id: str):
        super().__init__(coord)
        self._role_id = role_id
        role = coord.engine.get_role(role_id) if coord.model else None
        name = role.name if role else role_id
        self._attr_unique_id = f"{DOMAIN}_{role_id}_points"
        self._attr_name = f"ChorePoints {name} Points"

    @property
    def available(self) -> bool:
        return super().available and self._coord.engine.get_role(self._role_id) is not None

    @property
    def native_value(self):
        if not self._coord.model:
            return 0
        return self._coord.engine.get_points(self._role_id)

    @property
    def extra_state_attributes(self):
        if not self._coord.model:
            return {}
        today = self._coord.engine.get_daily_instances(self._coord.today())
        mine = [it for it in today if it.role_id == self._role_id]
        return {
            "role_id": self._role_id,
            "open_today": sum(1 for it in mine if not it.completed),
            "completed_today": sum(1 for it in mine if it.completed),
        }


class DailyProgressSensor(_ChorePointsSensor):
    """Completed instances today, across all roles."""

    _attr_icon = "mdi:calendar-check"

    def __init__(self, coord: ChorePointsCoordinator):
        super().__init__(coord)
        self._attr_unique_id = f"{DOMAIN}_daily_progress"
        self._attr_name = "ChorePoints Completed Today"

    @property
    def native_value(self):
        if not self._coord.model:
            return 0
        return self._coord.engine.get_daily_stats(self._coord.today()).completed

    @property
    def extra_state_attributes(self):
        if not self._coord.model:
            return {}
        today = self._coord.today()
        stats = self._coord.engine.get_daily_stats(today)
        return {
            "date": today,
            "points_earned": stats.points,
            "total_tasks": len(self._coord.engine.get_daily_instances(today)),
        }
