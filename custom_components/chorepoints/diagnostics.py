"""Diagnostics support for ChorePoints integration."""
from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_ROLES, CONF_USE_TODO, DOMAIN
from .coordinator import ChorePointsCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry, including a full data export."""
    coordinator: ChorePointsCoordinator = hass.data[DOMAIN][entry.entry_id]

    if not coordinator.model:
        return {"error": "Coordinator model not initialized"}

    engine = coordinator.engine
    model = coordinator.model
    today = coordinator.today()
    today_stats = engine.get_daily_stats(today)

    all_instances = [it for instances in model.daily_tasks.values() for it in instances]
    known_defs = {td.id for td in model.task_defs}

    return {
        "config_data": {
            "roles": entry.data.get(CONF_ROLES, ""),
            "use_todo": entry.options.get(CONF_USE_TODO, entry.data.get(CONF_USE_TODO, True)),
        },
        "statistics": {
            "total_roles": len(model.roles),
            "total_task_definitions": len(model.task_defs),
            "weekly_task_definitions": sum(1 for td in model.task_defs if td.is_weekly()),
            "total_rewards": len(model.rewards),
            "total_redemptions": sum(rw.redeemed_count for rw in model.rewards),
            "days_tracked": len(model.daily_tasks),
            "total_instances": len(all_instances),
            "completed_instances": sum(1 for it in all_instances if it.completed),
            "orphaned_instances": sum(1 for it in all_instances if it.task_def_id not in known_defs),
        },
        "today": {
            "date": today,
            "completed": today_stats.completed,
            "points_earned": today_stats.points,
        },
        "roles_summary": {
            role.id: {
                "name": role.name,
                "current_points": role.points,
                "task_definitions": len(engine.get_task_defs(role.id)),
                "rewards": len(engine.get_rewards(role.id)),
            }
            for role in model.roles
        },
        "task_history": {
            td.id: {
                "title": td.title,
                "completions": history.count,
                "points_earned": history.points,
            }
            for td in model.task_defs
            for history in [engine.get_task_history_stats(td.id)]
        },
        "storage_status": {
            "model_loaded": coordinator.model is not None,
            "storage_file": str(getattr(engine.store.adapter, "path", "")),
        },
        "export": engine.export_document(),
    }
