"""Integration tests for ChorePoints config flow."""
from __future__ import annotations

from unittest.mock import Mock

from homeassistant.data_entry_flow import FlowResultType
import pytest

from custom_components.chorepoints import config_flow
from custom_components.chorepoints.const import CONF_ROLES, CONF_USE_TODO


class TestChorePointsConfigFlow:
    """Test ChorePoints config flow."""

    @pytest.mark.asyncio
    async def test_user_form_display(self):
        """Test the user form is displayed correctly."""
        flow = config_flow.ChorePointsConfigFlow()
        flow.hass = Mock()
        flow._async_current_entries = Mock(return_value=[])

        result = await flow.async_step_user()

        assert result["type"] == FlowResultType.FORM
        assert result["step_id"] == "user"
        assert result["errors"] == {}

        schema = result["data_schema"]
        assert CONF_ROLES in schema.schema
        assert CONF_USE_TODO in schema.schema

    @pytest.mark.asyncio
    async def test_user_form_submission(self):
        flow = config_flow.ChorePointsConfigFlow()
        flow.hass = Mock()
        flow._async_current_entries = Mock(return_value=[])

        user_input = {CONF_ROLES: "Alice, Bob", CONF_USE_TODO: True}
        result = await flow.async_step_user(user_input)

        assert result["type"] == FlowResultType.CREATE_ENTRY
        assert result["title"] == "ChorePoints"
        assert result["data"] == user_input

    @pytest.mark.asyncio
    async def test_duplicate_role_names(self):
        """Role names must be unique, ignoring case and padding."""
        flow = config_flow.ChorePointsConfigFlow()
        flow.hass = Mock()
        flow._async_current_entries = Mock(return_value=[])

        result = await flow.async_step_user({CONF_ROLES: "Alice, alice ", CONF_USE_TODO: False})

        assert result["type"] == FlowResultType.FORM
        assert result["errors"] == {CONF_ROLES: "duplicate_roles"}

    @pytest.mark.asyncio
    async def test_single_instance_restriction(self):
        flow = config_flow.ChorePointsConfigFlow()
        flow.hass = Mock()
        flow._async_current_entries = Mock(return_value=[Mock()])

        result = await flow.async_step_user()

        assert result["type"] == FlowResultType.ABORT
        assert result["reason"] == "single_instance_allowed"

    def test_options_flow_creation(self):
        mock_entry = Mock()
        options_flow = config_flow.ChorePointsConfigFlow.async_get_options_flow(mock_entry)

        assert isinstance(options_flow, config_flow.ChorePointsOptionsFlow)
        assert options_flow.entry == mock_entry


class TestChorePointsOptionsFlow:
    """Test ChorePoints options flow."""

    @pytest.fixture
    def mock_entry(self):
        entry = Mock()
        entry.data = {CONF_ROLES: "Alice", CONF_USE_TODO: True}
        entry.options = {CONF_USE_TODO: False}
        return entry

    @pytest.mark.asyncio
    async def test_options_form_display(self, mock_entry):
        flow = config_flow.ChorePointsOptionsFlow(mock_entry)

        result = await flow.async_step_init()

        assert result["type"] == FlowResultType.FORM
        assert result["step_id"] == "init"
        assert CONF_USE_TODO in result["data_schema"].schema

    @pytest.mark.asyncio
    async def test_options_form_submission(self, mock_entry):
        flow = config_flow.ChorePointsOptionsFlow(mock_entry)

        result = await flow.async_step_init({CONF_USE_TODO: True})

        assert result["type"] == FlowResultType.CREATE_ENTRY
        assert result["title"] == ""
        assert result["data"] == {CONF_USE_TODO: True}

    @pytest.mark.asyncio
    async def test_options_default_falls_back_to_entry_data(self):
        """Without saved options the toggle starts from the initial setup value."""
        entry = Mock()
        entry.data = {CONF_USE_TODO: False}
        entry.options = {}

        flow = config_flow.ChorePointsOptionsFlow(entry)
        result = await flow.async_step_init()

        assert result["type"] == FlowResultType.FORM
        marker = next(key for key in result["data_schema"].schema if key == CONF_USE_TODO)
        assert marker.default() is False
