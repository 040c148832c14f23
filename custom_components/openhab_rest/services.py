"""Service handlers for the openHAB REST integration.

This module registers the execute service, which runs one openHAB operation
for each input row and returns the collected output rows:
- item: list, get, state, command, updateState, metadata
- thing: list, get, status
- rule: list, run, toggle
- system: info
"""

import logging

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from .constants import CONF_DEBUG_LOGGING, DEFAULT_OPERATIONS, DOMAIN, RESOURCE_OPERATIONS
from .executor import ROW_ERRORS, async_execute_rows, error_message
from .operations import async_run_operation, build_operation_request

_LOGGER = logging.getLogger(__name__)

SERVICE_EXECUTE = "execute"

ATTR_CONFIG_ENTRY_ID = "config_entry_id"
ATTR_RESOURCE = "resource"
ATTR_OPERATION = "operation"
ATTR_ROWS = "rows"
ATTR_CONTINUE_ON_FAIL = "continue_on_fail"

ROW_FIELDS = ("item_name", "command", "tag_filter", "thing_uid", "rule_uid", "enable")

ROW_SCHEMA = vol.Schema(
    {
        vol.Optional("item_name"): cv.string,
        vol.Optional("command"): cv.string,
        vol.Optional("tag_filter"): cv.string,
        vol.Optional("thing_uid"): cv.string,
        vol.Optional("rule_uid"): cv.string,
        vol.Optional("enable"): cv.boolean,
    }
)

EXECUTE_SCHEMA = ROW_SCHEMA.extend(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
        vol.Required(ATTR_RESOURCE): vol.In(list(RESOURCE_OPERATIONS)),
        vol.Optional(ATTR_OPERATION): cv.string,
        vol.Optional(ATTR_ROWS): vol.All(cv.ensure_list, [ROW_SCHEMA]),
        vol.Optional(ATTR_CONTINUE_ON_FAIL, default=False): cv.boolean,
        vol.Optional(CONF_DEBUG_LOGGING): cv.boolean,
    }
)


def _resolve_entry_data(hass: HomeAssistant, entry_id: str | None) -> dict:
    """Find the loaded config entry the call is aimed at."""
    entries = hass.data.get(DOMAIN, {})
    if entry_id:
        if entry_id not in entries:
            raise HomeAssistantError(f"openHAB config entry '{entry_id}' is not loaded")
        return entries[entry_id]

    if len(entries) != 1:
        raise HomeAssistantError(
            f"{len(entries)} openHAB config entries are loaded; pass {ATTR_CONFIG_ENTRY_ID} to pick one"
        )
    return next(iter(entries.values()))


async def async_register_services(hass: HomeAssistant, domain: str = DOMAIN):
    """Register all openHAB REST services.

    Args:
        hass: Home Assistant instance
        domain: Integration domain (default: openhab_rest)
    """

    async def handle_execute_service(call: ServiceCall) -> ServiceResponse:
        """Handle execute service call."""
        entry_data = _resolve_entry_data(hass, call.data.get(ATTR_CONFIG_ENTRY_ID))
        api = entry_data["api"]
        debug = call.data.get(CONF_DEBUG_LOGGING, entry_data.get("options", {}).get(CONF_DEBUG_LOGGING, False))

        resource = call.data[ATTR_RESOURCE]
        operation = call.data.get(ATTR_OPERATION) or DEFAULT_OPERATIONS[resource]
        defaults = {key: call.data[key] for key in ROW_FIELDS if key in call.data}
        rows = [{**defaults, **row} for row in call.data.get(ATTR_ROWS) or [{}]]

        async def _run_row(params):
            request = build_operation_request(resource, operation, params)
            return await async_run_operation(api, request, debug=debug)

        try:
            output = await async_execute_rows(
                rows,
                _run_row,
                continue_on_fail=call.data[ATTR_CONTINUE_ON_FAIL],
            )
        except ROW_ERRORS as e:
            _LOGGER.error("openHAB %s.%s failed: %s", resource, operation, error_message(e))
            raise HomeAssistantError(error_message(e)) from e

        _LOGGER.debug("openHAB %s.%s returned %d rows", resource, operation, len(output))
        return {"rows": output}

    hass.services.async_register(
        domain,
        SERVICE_EXECUTE,
        handle_execute_service,
        schema=EXECUTE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    _LOGGER.debug("Registered openHAB REST services: %s", SERVICE_EXECUTE)


def async_unregister_services(hass: HomeAssistant, domain: str = DOMAIN):
    """Remove the services once the last config entry is unloaded."""
    hass.services.async_remove(domain, SERVICE_EXECUTE)
