import logging

import aiohttp
import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigFlow, OptionsFlow

from .constants import (
    CONF_ALLOW_SELF_SIGNED,
    CONF_AUTH_TYPE,
    CONF_BASE_URL_LOCAL,
    CONF_CLOUD_TOKEN,
    CONF_DEBUG_LOGGING,
    CONF_PASSWORD,
    CONF_TOKEN,
    CONF_USERNAME,
    DEFAULT_LOCAL_BASE_URL,
    DOMAIN,
    AuthMode,
)
from .infrastructure.errors import (
    OpenHABConfigurationError,
    OpenHABRequestError,
    OpenHABResponseError,
)
from .openhab_api import OpenHABAPI
from .validators import validate_base_url

_LOGGER = logging.getLogger(__name__)


async def async_validate_credentials(data: dict) -> str | None:
    """Run the credential test request; return an error key or None."""
    api = OpenHABAPI(data)
    try:
        await api.async_test_connection()
    except OpenHABConfigurationError:
        return "invalid_config"
    except OpenHABRequestError as err:
        if err.status_code in (401, 403):
            return "invalid_auth"
        return "cannot_connect"
    except OpenHABResponseError:
        return "cannot_connect"
    except (TimeoutError, aiohttp.ClientError) as err:
        _LOGGER.debug("openHAB connection test failed: %s", err)
        return "cannot_connect"
    finally:
        await api.close()
    return None


class OpenHABConfigFlow(ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        if user_input is not None:
            if user_input[CONF_AUTH_TYPE] == AuthMode.CLOUD.value:
                return await self.async_step_cloud()
            return await self.async_step_local()

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_AUTH_TYPE, default=AuthMode.TOKEN.value): vol.In(
                        {
                            AuthMode.TOKEN.value: "API Token (local openHAB)",
                            AuthMode.CLOUD.value: "myopenHAB Account",
                        }
                    )
                }
            ),
        )

    async def async_step_local(self, user_input=None):
        errors = {}

        if user_input is not None:
            base_url = user_input.get(CONF_BASE_URL_LOCAL, DEFAULT_LOCAL_BASE_URL).strip()
            is_valid, error_message = validate_base_url(base_url)
            if not is_valid:
                _LOGGER.debug("Rejected openHAB base URL %s: %s", base_url, error_message)
                errors[CONF_BASE_URL_LOCAL] = "invalid_url"
            else:
                data = {
                    CONF_AUTH_TYPE: AuthMode.TOKEN.value,
                    CONF_TOKEN: user_input[CONF_TOKEN],
                    CONF_BASE_URL_LOCAL: base_url.rstrip("/"),
                    CONF_ALLOW_SELF_SIGNED: user_input.get(CONF_ALLOW_SELF_SIGNED, False),
                }
                error = await async_validate_credentials(data)
                if error is None:
                    return self.async_create_entry(
                        title=f"openHAB @ {data[CONF_BASE_URL_LOCAL]}",
                        data=data,
                    )
                errors["base"] = error

        return self.async_show_form(
            step_id="local",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_TOKEN): str,
                    vol.Required(CONF_BASE_URL_LOCAL, default=DEFAULT_LOCAL_BASE_URL): str,
                    vol.Optional(CONF_ALLOW_SELF_SIGNED, default=False): bool,
                }
            ),
            errors=errors,
        )

    async def async_step_cloud(self, user_input=None):
        errors = {}

        if user_input is not None:
            data = {
                CONF_AUTH_TYPE: AuthMode.CLOUD.value,
                CONF_USERNAME: user_input[CONF_USERNAME],
                CONF_PASSWORD: user_input[CONF_PASSWORD],
                CONF_CLOUD_TOKEN: user_input.get(CONF_CLOUD_TOKEN, ""),
            }
            error = await async_validate_credentials(data)
            if error is None:
                return self.async_create_entry(
                    title=f"myopenHAB ({data[CONF_USERNAME]})",
                    data=data,
                )
            errors["base"] = error

        return self.async_show_form(
            step_id="cloud",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_USERNAME): str,
                    vol.Required(CONF_PASSWORD): str,
                    vol.Optional(CONF_CLOUD_TOKEN, default=""): str,
                }
            ),
            errors=errors,
        )

    @classmethod
    def async_get_options_flow(cls, entry: ConfigEntry):
        return OpenHABOptionsFlow(entry)


class OpenHABOptionsFlow(OptionsFlow):
    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_DEBUG_LOGGING,
                        default=self.entry.options.get(CONF_DEBUG_LOGGING, False),
                    ): bool,
                }
            ),
        )
