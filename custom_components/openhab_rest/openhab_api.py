# openhab_api.py
import json
import logging
from collections.abc import Mapping
from typing import Any, NamedTuple

import aiohttp

from .api_decorators import api_call
from .constants import (
    API_DEFAULTS,
    BODY_PREVIEW_LIMIT,
    CLOUD_AUTH_HINT,
    CLOUD_BASE_URL,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_TEXT,
    DEBUG_LOG_PREFIX,
    DEFAULT_LOCAL_BASE_URL,
    MISSING_STATUS_MESSAGE,
    READ_ONLY_METHODS,
    REDACTED,
    REST_ROOT,
    SENSITIVE_DEBUG_HEADERS,
    TOKEN_HEADER,
)
from .infrastructure.errors import (
    OpenHABConfigurationError,
    OpenHABRequestError,
    OpenHABResponseError,
)
from .models import OpenHABCredentials, RequestOptions, ResponseEnvelope

_LOGGER = logging.getLogger(__name__)


def sanitize_headers_for_debug(headers: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of headers with every sensitive value redacted."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_DEBUG_HEADERS else value
        for key, value in headers.items()
    }


def format_body_preview(value: Any) -> str:
    """Render a body for logs and error messages, cut to BODY_PREVIEW_LIMIT chars."""
    if isinstance(value, str):
        text = value
    elif isinstance(value, (dict, list)):
        try:
            text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError):
            return "[Unserializable Object]"
    else:
        return str(value)

    if len(text) > BODY_PREVIEW_LIMIT:
        return f"{text[:BODY_PREVIEW_LIMIT]}..."
    return text


def log_debug(enabled: bool, phase: str, payload: dict[str, Any]) -> None:
    """Emit one diagnostic entry; rendering problems degrade to a bare line."""
    if not enabled:
        return

    try:
        _LOGGER.info("%s %s %s", DEBUG_LOG_PREFIX, phase, json.dumps(payload))
    except (TypeError, ValueError):
        _LOGGER.info("%s %s", DEBUG_LOG_PREFIX, phase)


def _stringify_query(query: Mapping[str, Any] | None) -> dict[str, str]:
    params: dict[str, str] = {}
    for key, value in (query or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params


def _decode_body(raw: bytes, charset: str | None, plain_text: bool) -> tuple[str, Any]:
    """Return the response text as sent and the decoded body."""
    try:
        text = raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        text = raw.decode("utf-8", errors="replace")

    if plain_text:
        return text, text
    try:
        return text, json.loads(text)
    except ValueError:
        return text, text


class _ResolvedAuth(NamedTuple):
    base_url: str
    headers: dict[str, str]
    basic_auth: aiohttp.BasicAuth | None
    verify_ssl: bool
    use_cloud: bool


class OpenHABAPI:
    """Client for the openHAB REST API, locally or through myopenHAB.

    Credentials are kept as the raw config entry mapping and parsed again on
    every call, so each request resolves its own authentication from scratch.
    """

    def __init__(
        self,
        credentials: Mapping[str, Any],
        session: aiohttp.ClientSession | None = None,
        request_timeout: int = API_DEFAULTS.REQUEST_TIMEOUT,
    ):
        self._credentials = credentials
        self._session = session
        self._owns_session = session is None
        self.request_timeout = request_timeout

    async def _get_session(self):
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    @staticmethod
    def _resolve_auth(credentials: OpenHABCredentials) -> _ResolvedAuth:
        """Turn credentials into base URL, auth headers and transport settings.

        Raises:
            OpenHABConfigurationError: If a field required by the active mode is
                missing, or cloud mode is combined with self-signed certificates.
        """
        use_cloud = credentials.use_cloud
        base_url = (CLOUD_BASE_URL if use_cloud else credentials.base_url_local or DEFAULT_LOCAL_BASE_URL).rstrip("/")
        if not base_url:
            raise OpenHABConfigurationError("Base URL is missing in credentials.")

        headers: dict[str, str] = {}
        basic_auth = None
        if use_cloud:
            if not credentials.username or not credentials.password:
                raise OpenHABConfigurationError("Username and password are required for myopenHAB Account.")
            if credentials.cloud_token:
                headers[TOKEN_HEADER] = credentials.cloud_token
            basic_auth = aiohttp.BasicAuth(credentials.username, credentials.password)
        else:
            if not credentials.token:
                raise OpenHABConfigurationError("API token is required.")
            # Some admin endpoints only honour X-OPENHAB-TOKEN, so both are sent
            headers["Authorization"] = f"Bearer {credentials.token}"
            headers[TOKEN_HEADER] = credentials.token

        if use_cloud and credentials.allow_self_signed:
            raise OpenHABConfigurationError(
                "Self-signed certificates are not allowed for myopenHAB authentication. "
                'Disable "Allow Self-Signed Certificates" in credentials.'
            )

        verify_ssl = not (credentials.allow_self_signed and not use_cloud)
        return _ResolvedAuth(base_url, headers, basic_auth, verify_ssl, use_cloud)

    async def async_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
        options: RequestOptions | None = None,
    ) -> Any:
        """Perform one REST call and classify its outcome.

        Args:
            method: HTTP verb. GET and HEAD never carry a body.
            path: Resource path below /rest, e.g. "/items/Kitchen_Light".
            body: Raw text or a JSON-serialisable value for mutating verbs.
            query: Query string parameters.
            options: Content negotiation, full-response and debug switches.

        Returns:
            The decoded body, or a ResponseEnvelope when options.full_response
            is set.

        Raises:
            OpenHABConfigurationError: Credentials are unusable (no request sent).
            OpenHABResponseError: The response has no usable status code.
            OpenHABRequestError: The status code is outside 200-299.
            aiohttp.ClientError, TimeoutError: Transport failures, unchanged.
        """
        options = options or RequestOptions()
        credentials = OpenHABCredentials.from_config(self._credentials)
        auth = self._resolve_auth(credentials)

        method = method.upper()
        is_read_operation = method in READ_ONLY_METHODS
        debug = options.debug

        headers: dict[str, str] = {
            "Accept": CONTENT_TYPE_TEXT if options.plain_text else CONTENT_TYPE_JSON,
            **auth.headers,
        }
        if not is_read_operation:
            headers["Content-Type"] = CONTENT_TYPE_TEXT if options.plain_text else CONTENT_TYPE_JSON
        headers.update(options.extra_headers)

        url = f"{auth.base_url}{REST_ROOT}{path}"
        params = _stringify_query(query)
        request_kwargs: dict[str, Any] = {
            "params": params,
            "headers": headers,
            "timeout": aiohttp.ClientTimeout(total=options.timeout or self.request_timeout),
        }
        if not auth.verify_ssl:
            request_kwargs["ssl"] = False
        if auth.basic_auth is not None:
            request_kwargs["auth"] = auth.basic_auth
        if not is_read_operation and body is not None:
            if isinstance(body, (str, bytes)):
                request_kwargs["data"] = body
            else:
                request_kwargs["json"] = body

        request_debug: dict[str, Any] = {
            "method": method,
            "url": url,
            "query": params,
            "headers": sanitize_headers_for_debug(headers),
            "authType": credentials.auth_mode.value,
            "useCloud": auth.use_cloud,
            "expectFullResponse": options.full_response,
        }
        if not is_read_operation:
            request_debug["body"] = format_body_preview(body)
        log_debug(debug, "request", request_debug)

        session = await self._get_session()
        try:
            async with session.request(method, url, **request_kwargs) as response:
                status_code = response.status
                status_message = response.reason or ""
                response_headers = dict(response.headers)
                raw_body = await response.read()
                charset = response.charset
        except (TimeoutError, aiohttp.ClientError) as err:
            log_debug(
                debug,
                "transportError",
                {"method": method, "url": url, "error": str(err) or type(err).__name__},
            )
            raise

        if not isinstance(status_code, int) or isinstance(status_code, bool):
            log_debug(debug, "responseError", {"method": method, "url": url, "error": MISSING_STATUS_MESSAGE})
            raise OpenHABResponseError(MISSING_STATUS_MESSAGE)

        log_debug(
            debug,
            "response",
            {"method": method, "url": url, "statusCode": status_code, "statusMessage": status_message},
        )

        response_text, response_body = _decode_body(raw_body, charset, options.plain_text)

        if status_code < 200 or status_code >= 300:
            log_debug(
                debug,
                "responseError",
                {
                    "method": method,
                    "url": url,
                    "statusCode": status_code,
                    "statusMessage": status_message,
                    "body": format_body_preview(response_text),
                },
            )
            body_message = format_body_preview(response_text).strip()
            message = f"openHAB {method} request failed with status {status_code} {status_message}".strip()
            if body_message:
                message += f" - {body_message}"
            if auth.use_cloud and status_code == 401:
                message += CLOUD_AUTH_HINT
            raise OpenHABRequestError(message, status_code=status_code)

        if options.full_response:
            return ResponseEnvelope(
                status_code=status_code,
                status_message=status_message,
                headers=response_headers,
                body=response_body,
            )

        return response_body

    async def async_test_connection(self) -> bool:
        """Check the stored credentials with a minimal items query."""
        await self.async_request(
            "GET",
            "/items",
            query={"limit": 1},
            options=RequestOptions(timeout=API_DEFAULTS.TEST_TIMEOUT),
        )
        return True

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    @api_call("GET", "/items", query_from={"tags": "tag_filter"})
    async def async_list_items(self, response_data, tag_filter: str | None = None):
        return response_data

    @api_call("GET", "/items/{item_name}")
    async def async_get_item(self, response_data, item_name: str):
        return response_data

    @api_call("GET", "/items/{item_name}/state", plain_text=True)
    async def async_get_item_state(self, response_data, item_name: str):
        return {"item": item_name, "state": response_data}

    @api_call("POST", "/items/{item_name}", body_from="command", plain_text=True, full_response=True)
    async def async_send_command(self, response_data, item_name: str, command: str):
        return {"item": item_name, "command": command, "statusCode": response_data.status_code}

    @api_call("PUT", "/items/{item_name}/state", body_from="state", plain_text=True, full_response=True)
    async def async_update_state(self, response_data, item_name: str, state: str):
        return {"item": item_name, "state": state, "statusCode": response_data.status_code}

    @api_call("GET", "/items/{item_name}", query={"metadata": ".*"})
    async def async_get_item_metadata(self, response_data, item_name: str):
        metadata = response_data.get("metadata") if isinstance(response_data, dict) else None
        return {"item": item_name, "metadata": metadata or {}}

    # -------------------------------------------------------------------------
    # Things
    # -------------------------------------------------------------------------

    @api_call("GET", "/things")
    async def async_list_things(self, response_data):
        return response_data

    @api_call("GET", "/things/{thing_uid}")
    async def async_get_thing(self, response_data, thing_uid: str):
        return response_data

    @api_call("GET", "/things/{thing_uid}/status")
    async def async_get_thing_status(self, response_data, thing_uid: str):
        return response_data

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    @api_call("GET", "/rules")
    async def async_list_rules(self, response_data):
        return response_data

    @api_call("POST", "/rules/{rule_uid}/runnow", body={}, full_response=True)
    async def async_run_rule(self, response_data, rule_uid: str):
        return {"rule": rule_uid, "statusCode": response_data.status_code}

    @api_call("POST", "/rules/{rule_uid}/enable", body_from="enable", plain_text=True, full_response=True)
    async def async_set_rule_enabled(self, response_data, rule_uid: str, enable: bool = True):
        return {"rule": rule_uid, "enabled": enable, "statusCode": response_data.status_code}

    # -------------------------------------------------------------------------
    # System
    # -------------------------------------------------------------------------

    @api_call("GET", "/systeminfo")
    async def async_get_system_info(self, response_data):
        return response_data
