"""Pytest configuration for ChorePoints tests."""
from __future__ import annotations

from unittest.mock import AsyncMock, Mock, patch

from homeassistant.core import HomeAssistant
import pytest

from custom_components.chorepoints.coordinator import ChorePointsCoordinator
from custom_components.chorepoints.engine import ChorePointsEngine
from custom_components.chorepoints.storage import StorageAdapter


class FakeStorageAdapter(StorageAdapter):
    """In-memory adapter that records every save."""

    def __init__(self, raw: bytes | None = None, fail_save: bool = False):
        self.raw = raw
        self.fail_save = fail_save
        self.saves: list[bytes] = []

    def load(self) -> bytes | None:
        return self.raw

    def save(self, raw: bytes) -> bool:
        self.saves.append(raw)
        if self.fail_save:
            return False
        self.raw = raw
        return True


@pytest.fixture
def adapter_factory():
    """Return the fake adapter class for tests that need custom contents."""
    return FakeStorageAdapter


@pytest.fixture
def adapter():
    """Return an empty in-memory adapter."""
    return FakeStorageAdapter()


@pytest.fixture
def engine(adapter):
    """Return a loaded engine over an empty document."""
    eng = ChorePointsEngine(adapter)
    eng.load()
    return eng


@pytest.fixture
def role_id(engine):
    """Return the id of a freshly created role."""
    return engine.add_role("Alice")


@pytest.fixture
def mock_storage_data():
    """Return stored data in the persisted camelCase layout."""
    return {
        "roles": [
            {"id": "r1", "name": "Alice", "points": 50},
            {"id": "r2", "name": "Bob", "points": 5},
        ],
        "taskDefs": [
            {
                "id": "t1",
                "roleId": "r1",
                "title": "Make bed",
                "points": 10,
                "note": "",
                "repeatType": "daily",
                "repeatDays": [],
                "repeatUntil": None,
                "priority": "medium",
            },
            {
                "id": "t2",
                "roleId": "r2",
                "title": "Take out trash",
                "points": 5,
                "note": "Blue bin",
                "repeatType": "weekly",
                "repeatDays": ["1", 3],
                "repeatUntil": None,
                "priority": "high",
            },
        ],
        "dailyTasks": {
            "2025-01-06": [
                {
                    "taskDefId": "t1",
                    "roleId": "r1",
                    "title": "Make bed",
                    "points": 10,
                    "note": "",
                    "completed": True,
                    "completedAt": 1736150400000,
                }
            ]
        },
        "rewards": [
            {"id": "w1", "roleId": "r1", "title": "Movie Night", "cost": 20, "note": "", "redeemedCount": 1}
        ],
    }


@pytest.fixture
def mock_hass(tmp_path):
    """Return a mock Home Assistant instance."""
    hass = Mock(spec=HomeAssistant)
    hass.data = {}
    hass.config = Mock()
    hass.config.path = Mock(side_effect=lambda *parts: str(tmp_path.joinpath(*parts)))
    hass.config_entries = Mock()
    hass.services = Mock()

    hass.config_entries.async_forward_entry_setups = AsyncMock(return_value=True)
    hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    hass.config_entries.async_reload = Mock()

    def _update_entry(entry, data=None, **kwargs):
        if data is not None:
            entry.data = data
        return True

    hass.config_entries.async_update_entry = Mock(side_effect=_update_entry)
    hass.services.async_register = Mock()
    hass.services.async_remove = Mock()

    return hass


@pytest.fixture
def coordinator(mock_hass, adapter):
    """Return a coordinator over the in-memory adapter with a loaded document."""
    coord = ChorePointsCoordinator(mock_hass, adapter)
    coord.engine.load()
    return coord


@pytest.fixture(autouse=True)
def no_dispatch():
    """Keep entity notifications out of the way of unit tests."""
    with patch("custom_components.chorepoints.coordinator.async_dispatcher_send") as mock_send:
        yield mock_send


@pytest.fixture
def hass_store():
    """Replace Home Assistant's Store with one that keeps its data in a dict.

    Delayed saves are written straight away. The dict survives entry reloads.
    """
    saved: dict = {}
    with patch("custom_components.chorepoints.storage.Store") as mock_store_class:
        mock_store = mock_store_class.return_value
        mock_store.path = "/config/.storage/chorepoints_data"
        mock_store.async_load = AsyncMock(side_effect=lambda: saved.get("data"))
        mock_store.async_save = AsyncMock(side_effect=lambda data: saved.update(data=data))
        mock_store.async_delay_save = Mock(side_effect=lambda func, delay=0: saved.update(data=func()))
        yield mock_store, saved
