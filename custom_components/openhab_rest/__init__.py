import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv

from .constants import DOMAIN
from .openhab_api import OpenHABAPI
from .services import SERVICE_EXECUTE, async_register_services, async_unregister_services

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

_LOGGER = logging.getLogger(__name__)


async def async_setup(hass: HomeAssistant, config: dict):
    return True  # configured through config entries only


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    hass.data.setdefault(DOMAIN, {})
    api = OpenHABAPI(entry.data)
    hass.data[DOMAIN][entry.entry_id] = {
        "api": api,
        "options": dict(entry.options),
    }

    if not hass.services.has_service(DOMAIN, SERVICE_EXECUTE):
        await async_register_services(hass)

    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    _LOGGER.debug("openHAB REST entry %s set up", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    entry_data = hass.data[DOMAIN].pop(entry.entry_id)
    await entry_data["api"].close()

    if not hass.data[DOMAIN]:
        async_unregister_services(hass)
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry):
    await hass.config_entries.async_reload(entry.entry_id)
