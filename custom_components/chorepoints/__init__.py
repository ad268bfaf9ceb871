"""The ChorePoints integration."""
from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryNotReady, HomeAssistantError
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.typing import ConfigType
import voluptuous as vol

_LOGGER = logging.getLogger(__name__)

from .const import (
    CONF_ROLES,
    CONF_ROLES_SEEDED,
    DAILY_ROLLOVER_TIME,
    DOMAIN,
    PLATFORMS,
    PRIORITIES,
    REPEAT_TYPES,
    SERVICE_ADD_REWARD,
    SERVICE_ADD_ROLE,
    SERVICE_ADD_TASK,
    SERVICE_COMPLETE_TASK,
    SERVICE_DELETE_REWARD,
    SERVICE_DELETE_ROLE,
    SERVICE_DELETE_TASK,
    SERVICE_IMPORT_DATA,
    SERVICE_RECONCILE_DAY,
    SERVICE_REDEEM_REWARD,
    SERVICE_UPDATE_TASK,
    SERVICES,
)
from .coordinator import ChorePointsCoordinator
from .models import format_date
from .storage import HomeAssistantStorageAdapter

WEEKDAYS = vol.All(cv.ensure_list, [vol.All(vol.Coerce(int), vol.Range(min=0, max=6))])
POSITIVE = vol.All(vol.Coerce(int), vol.Range(min=1))

ADD_ROLE_SCHEMA = vol.Schema({
    vol.Required("name"): cv.string,
})

ROLE_ID_SCHEMA = vol.Schema({
    vol.Required("role_id"): cv.string,
})

ADD_TASK_SCHEMA = vol.Schema({
    vol.Required("role_id"): cv.string,
    vol.Required("title"): cv.string,
    vol.Required("points"): POSITIVE,
    vol.Optional("note", default=""): cv.string,
    vol.Optional("repeat_type", default="daily"): vol.In(REPEAT_TYPES),
    vol.Optional("repeat_days", default=[]): WEEKDAYS,
    vol.Optional("repeat_until"): vol.Any(None, cv.date),
    vol.Optional("priority", default="medium"): vol.In(PRIORITIES),
})

UPDATE_TASK_SCHEMA = vol.Schema({
    vol.Required("task_id"): cv.string,
    vol.Optional("role_id"): cv.string,
    vol.Optional("title"): cv.string,
    vol.Optional("points"): POSITIVE,
    vol.Optional("note"): cv.string,
    vol.Optional("repeat_type"): vol.In(REPEAT_TYPES),
    vol.Optional("repeat_days"): WEEKDAYS,
    vol.Optional("repeat_until"): vol.Any(None, cv.date),
    vol.Optional("priority"): vol.In(PRIORITIES),
})

TASK_ID_SCHEMA = vol.Schema({
    vol.Required("task_id"): cv.string,
})

ADD_REWARD_SCHEMA = vol.Schema({
    vol.Required("role_id"): cv.string,
    vol.Required("title"): cv.string,
    vol.Required("cost"): POSITIVE,
    vol.Optional("note", default=""): cv.string,
})

REWARD_ID_SCHEMA = vol.Schema({
    vol.Required("reward_id"): cv.string,
})

COMPLETE_TASK_SCHEMA = vol.Schema({
    vol.Required("task_id"): cv.string,
    vol.Optional("date"): cv.date,
})

RECONCILE_DAY_SCHEMA = vol.Schema({
    vol.Optional("date"): cv.date,
})

IMPORT_DATA_SCHEMA = vol.Schema({
    vol.Required("data"): dict,
})


def _role_names(entry: ConfigEntry) -> list[str]:
    roles_csv = entry.data.get(CONF_ROLES, "") or ""
    return [name.strip() for name in roles_csv.split(",") if name.strip()]


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the ChorePoints component."""
    return True

async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up ChorePoints from a config entry."""
    try:
        coordinator = ChorePointsCoordinator(hass, HomeAssistantStorageAdapter(hass))
        await coordinator.async_init()
        if not entry.data.get(CONF_ROLES_SEEDED):
            await coordinator.async_seed_roles(_role_names(entry))
            hass.config_entries.async_update_entry(entry, data={**entry.data, CONF_ROLES_SEEDED: True})
        await coordinator.async_ensure_today()
    except OSError as ex:
        raise ConfigEntryNotReady(f"Failed to initialize ChorePoints coordinator: {ex}") from ex
    except Exception as ex:
        _LOGGER.exception("Unexpected error setting up ChorePoints")
        raise ConfigEntryNotReady(f"Setup failed: {ex}") from ex

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception as ex:
        _LOGGER.exception("Failed to set up platforms")
        raise ConfigEntryNotReady(f"Failed to set up platforms: {ex}") from ex

    async def _rollover(_now) -> None:
        """Materialize the new day's instances."""
        await coordinator.async_ensure_today()

    entry.async_on_unload(async_track_time_change(hass, _rollover, **DAILY_ROLLOVER_TIME))

    engine = coordinator.engine

    def _reload_entities() -> None:
        """Per-role entities are built at setup, so follow registry changes by reloading."""
        hass.async_create_task(hass.config_entries.async_reload(entry.entry_id))

    def _service_date(data: dict[str, Any]) -> str:
        day = data.get("date")
        return format_date(day) if day is not None else coordinator.today()

    async def _run(service: str, func, *args, **kwargs):
        """Call the engine, mapping unexpected failures to HomeAssistantError."""
        try:
            return await coordinator.async_call(func, *args, **kwargs)
        except HomeAssistantError:
            raise
        except Exception as ex:
            _LOGGER.exception("Unexpected error in %s service", service)
            raise HomeAssistantError(f"Service failed: {ex}") from ex

    # ---- Services ----
    async def _add_role(call: ServiceCall) -> None:
        name = call.data["name"]
        role_id = await _run(SERVICE_ADD_ROLE, engine.add_role, name)
        if role_id is None:
            raise HomeAssistantError(f"Invalid role name: {name!r}")
        _LOGGER.info("Created role %s (%s)", role_id, name)
        _reload_entities()

    async def _delete_role(call: ServiceCall) -> None:
        role_id = call.data["role_id"]
        if not await _run(SERVICE_DELETE_ROLE, engine.delete_role, role_id):
            raise HomeAssistantError(f"Role not found: {role_id}")
        _LOGGER.info("Deleted role %s and everything assigned to it", role_id)
        _reload_entities()

    async def _add_task(call: ServiceCall) -> None:
        data = call.data
        task_id = await _run(
            SERVICE_ADD_TASK,
            engine.add_task_def,
            data["role_id"],
            data["title"],
            data["points"],
            note=data.get("note", ""),
            repeat_type=data.get("repeat_type", "daily"),
            repeat_days=data.get("repeat_days", []),
            repeat_until=data.get("repeat_until"),
            priority=data.get("priority", "medium"),
        )
        if task_id is None:
            raise HomeAssistantError(f"Could not create task for role {data['role_id']}")
        _LOGGER.info("Created task %s: %s (%d points)", task_id, data["title"], data["points"])
        await coordinator.async_ensure_today()

    async def _update_task(call: ServiceCall) -> None:
        patch = dict(call.data)
        task_id = patch.pop("task_id")
        if not await _run(SERVICE_UPDATE_TASK, engine.update_task_def, task_id, **patch):
            raise HomeAssistantError(f"Task not found: {task_id}")
        _LOGGER.info("Updated task %s: %s", task_id, sorted(patch))
        await coordinator.async_ensure_today()

    async def _delete_task(call: ServiceCall) -> None:
        task_id = call.data["task_id"]
        if not await _run(SERVICE_DELETE_TASK, engine.delete_task_def, task_id):
            raise HomeAssistantError(f"Task not found: {task_id}")
        _LOGGER.info("Deleted task %s", task_id)

    async def _add_reward(call: ServiceCall) -> None:
        data = call.data
        reward_id = await _run(
            SERVICE_ADD_REWARD, engine.add_reward, data["role_id"], data["title"], data["cost"], data.get("note", "")
        )
        if reward_id is None:
            raise HomeAssistantError(f"Could not create reward for role {data['role_id']}")
        _LOGGER.info("Created reward %s: %s (%d points)", reward_id, data["title"], data["cost"])

    async def _delete_reward(call: ServiceCall) -> None:
        reward_id = call.data["reward_id"]
        if not await _run(SERVICE_DELETE_REWARD, engine.delete_reward, reward_id):
            raise HomeAssistantError(f"Reward not found: {reward_id}")
        _LOGGER.info("Deleted reward %s", reward_id)

    async def _complete_task(call: ServiceCall) -> None:
        task_id = call.data["task_id"]
        date_str = _service_date(call.data)
        if not await _run(SERVICE_COMPLETE_TASK, engine.complete_task, task_id, date_str):
            raise HomeAssistantError(f"No open instance of task {task_id} on {date_str}")
        _LOGGER.info("Completed task %s on %s", task_id, date_str)

    def _redeem(reward_id: str):
        reward = engine.get_reward(reward_id)
        if reward is None:
            raise HomeAssistantError(f"Reward not found: {reward_id}")
        role = engine.get_role(reward.role_id)
        if role is None:
            raise HomeAssistantError(f"Role not found: {reward.role_id}")
        balance = role.points
        if not engine.redeem_reward(reward_id):
            raise HomeAssistantError(
                f"Insufficient points: role {reward.role_id} has {balance}, need {reward.cost}"
            )
        return reward

    async def _redeem_reward(call: ServiceCall) -> None:
        reward = await _run(SERVICE_REDEEM_REWARD, _redeem, call.data["reward_id"])
        _LOGGER.info("Redeemed reward '%s' for role %s (%d points)", reward.title, reward.role_id, reward.cost)

    async def _reconcile_day(call: ServiceCall) -> None:
        date_str = _service_date(call.data)
        instances = await _run(SERVICE_RECONCILE_DAY, engine.ensure_daily, date_str)
        _LOGGER.info("Reconciled %s: %d instances", date_str, len(instances))

    async def _import_data(call: ServiceCall) -> None:
        if not await _run(SERVICE_IMPORT_DATA, engine.replace_document, call.data["data"]):
            raise HomeAssistantError("Imported data must be an object")
        _LOGGER.info("Imported ChorePoints data")
        _reload_entities()

    hass.services.async_register(DOMAIN, SERVICE_ADD_ROLE, _add_role, schema=ADD_ROLE_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_DELETE_ROLE, _delete_role, schema=ROLE_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_ADD_TASK, _add_task, schema=ADD_TASK_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_UPDATE_TASK, _update_task, schema=UPDATE_TASK_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_DELETE_TASK, _delete_task, schema=TASK_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_ADD_REWARD, _add_reward, schema=ADD_REWARD_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_DELETE_REWARD, _delete_reward, schema=REWARD_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_COMPLETE_TASK, _complete_task, schema=COMPLETE_TASK_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_REDEEM_REWARD, _redeem_reward, schema=REWARD_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_RECONCILE_DAY, _reconcile_day, schema=RECONCILE_DAY_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_IMPORT_DATA, _import_data, schema=IMPORT_DATA_SCHEMA)

    return True

async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        coordinator = hass.data[DOMAIN].pop(entry.entry_id, None)
        if coordinator is not None:
            await coordinator.async_shutdown()
        # Unregister services if this is the last instance
        if not hass.data[DOMAIN]:
            for service in SERVICES:
                hass.services.async_remove(DOMAIN, service)
    return unload_ok
