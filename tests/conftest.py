"""Shared fixtures for TaskQuest tests."""

from typing import Any
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from homeassistant.core import HomeAssistant, ServiceCall
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_mock_service,
)

from custom_components.taskquest.const import (
    CONF_CHECK_INTERVAL,
    CONF_NOTIFY_SERVICE,
    COORDINATOR,
    DEFAULT_CHECK_INTERVAL,
    DOMAIN,
)
from custom_components.taskquest.coordinator import TaskQuestDataCoordinator
from custom_components.taskquest.utils import dt_utils

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

TEST_NOTIFY_SERVICE = "test_phone"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Any:
    """Run every test against UTC calendar days unless setup changes it."""
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="TaskQuest",
        data={},
        options={
            CONF_NOTIFY_SERVICE: f"notify.{TEST_NOTIFY_SERVICE}",
            CONF_CHECK_INTERVAL: DEFAULT_CHECK_INTERVAL,
        },
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any] | None:
    """Return stored data to load at setup (None = fresh install)."""
    return None


@pytest.fixture
def notify_calls(hass: HomeAssistant) -> list[ServiceCall]:
    """Register a mock notify service and collect its calls."""
    return async_mock_service(hass, "notify", TEST_NOTIFY_SERVICE)


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any] | None,  # pylint: disable=redefined-outer-name
    notify_calls: list[ServiceCall],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the TaskQuest integration for testing with mocked storage."""
    # pylint: disable=unused-argument
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
def coordinator(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> TaskQuestDataCoordinator:
    """Return the coordinator of the loaded entry."""
    return hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]
