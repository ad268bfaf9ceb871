"""Config flow for ChorePoints integration."""
from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback
import voluptuous as vol

from .const import CONF_ROLES, CONF_USE_TODO, DOMAIN


def _has_duplicate_names(roles_csv: str) -> bool:
    names = [name.strip().lower() for name in roles_csv.split(",") if name.strip()]
    return len(names) != len(set(names))


class ChorePointsConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        # One document per installation
        if self._async_current_entries():
            return self.async_abort(reason="single_instance_allowed")

        errors = {}
        if user_input is not None:
            if _has_duplicate_names(user_input.get(CONF_ROLES, "")):
                errors[CONF_ROLES] = "duplicate_roles"
            else:
                return self.async_create_entry(title="ChorePoints", data=user_input)

        data_schema = vol.Schema({
            vol.Optional(CONF_ROLES, default=(user_input or {}).get(CONF_ROLES, "")): str,
            vol.Optional(CONF_USE_TODO, default=True): bool,
        })
        return self.async_show_form(step_id="user", data_schema=data_schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return ChorePointsOptionsFlow(config_entry)

class ChorePointsOptionsFlow(config_entries.OptionsFlow):
    """Toggle the per-role todo lists after setup."""

    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self.entry.options.get(CONF_USE_TODO, self.entry.data.get(CONF_USE_TODO, True))
        data_schema = vol.Schema({
            vol.Optional(CONF_USE_TODO, default=current): bool,
        })
        return self.async_show_form(step_id="init", data_schema=data_schema)
