"""Todo entities for ChorePoints integration."""
from __future__ import annotations

import logging

from homeassistant.components.todo import TodoItem, TodoItemStatus, TodoListEntity, TodoListEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import CONF_USE_TODO, DOMAIN, SIGNAL_DOCUMENT_UPDATED
from .coordinator import ChorePointsCoordinator
from .models import DailyInstance

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    if not entry.options.get(CONF_USE_TODO, entry.data.get(CONF_USE_TODO, True)):
        return
    coordinator: ChorePointsCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities([RoleTodoList(coordinator, role.id) for role in coordinator.model.roles], True)


def _summary(instance: DailyInstance) -> str:
    return f"{instance.title} (+{instance.points})"


class RoleTodoList(TodoListEntity):
    """Today's task instances for one role.

    Item uids are task definition ids, which are unique within a day.
    """

    _attr_should_poll = False
    _attr_supported_features = TodoListEntityFeature.UPDATE_TODO_ITEM

    def __init__(self, coord: ChorePointsCoordinator, role_id: str):
        self._coord = coord
        self._role_id = role_id
        role = coord.engine.get_role(role_id) if coord.model else None
        self._attr_name = f"{role.name if role else role_id} Tasks"
        self._attr_unique_id = f"{DOMAIN}_todo_{role_id}"

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(self.hass, SIGNAL_DOCUMENT_UPDATED, self._handle_document_updated)
        )

    @callback
    def _handle_document_updated(self) -> None:
        self.async_write_ha_state()

    def _instances(self) -> list[DailyInstance]:
        if not self._coord.model:
            return []
        today = self._coord.engine.get_daily_instances(self._coord.today())
        return [it for it in today if it.role_id == self._role_id]

    @property
    def todo_items(self) -> list[TodoItem]:
        return [
            TodoItem(
                summary=_summary(instance),
                uid=instance.task_def_id,
                status=TodoItemStatus.COMPLETED if instance.completed else TodoItemStatus.NEEDS_ACTION,
                description=instance.note or None,
            )
            for instance in self._instances()
        ]

    async def async_update_todo_item(self, item: TodoItem) -> None:
        """Completing an item completes the task instance and credits its points."""
        instance = next((it for it in self._instances() if it.task_def_id == item.uid), None)
        if instance is None:
            raise HomeAssistantError(f"Task {item.uid} is not scheduled today")

        if item.status == TodoItemStatus.COMPLETED:
            if not instance.completed:
                await self._coord.async_complete_task(instance.task_def_id)
                _LOGGER.info("Completed %s for role %s via todo list", instance.title, self._role_id)
        elif instance.completed:
            raise HomeAssistantError(f"{instance.title} is already completed and cannot be reopened")

        self.async_write_ha_state()
