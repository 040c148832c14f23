# api_decorators.py
"""Decorator for declaring openHAB REST endpoints.

Endpoint methods only describe the verb, the path template and how the
response is shaped. The decorator takes care of the rest:

- Percent-encoding every path segment taken from user input
- Building the query string and body from the method arguments
- Calling the dispatcher with the right request options
- Forwarding the per-call debug flag

Usage:
    @api_call("GET", "/items/{item_name}/state", plain_text=True)
    async def async_get_item_state(self, response_data, item_name: str):
        return {"item": item_name, "state": response_data}

    @api_call("POST", "/rules/{rule_uid}/runnow", body={}, full_response=True)
    async def async_run_rule(self, response_data, rule_uid: str):
        return {"rule": rule_uid, "statusCode": response_data.status_code}
"""

import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

from .models import RequestOptions

_LOGGER = logging.getLogger(__name__)


def to_wire_text(value: Any) -> str:
    """Render an argument as openHAB expects it in text bodies and paths."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def api_call(
    method: str,
    path_template: str,
    *,
    plain_text: bool = False,
    full_response: bool = False,
    body_from: str | None = None,
    body: Any = None,
    query: Mapping[str, Any] | None = None,
    query_from: Mapping[str, str] | None = None,
):
    """Decorator for openHAB REST endpoints.

    Args:
        method: HTTP verb sent to openHAB.
        path_template: Path below /rest with placeholders named after method
            parameters (e.g. "/items/{item_name}"). Every placeholder value is
            percent-encoded, slashes included.
        plain_text: Negotiate text/plain instead of JSON.
        full_response: Hand the ResponseEnvelope to the decorated method
            instead of only the body.
        body_from: Name of the parameter whose value becomes the text body.
        body: Fixed body sent when body_from is not given, e.g. {} for JSON
            endpoints that expect an empty object.
        query: Static query parameters.
        query_from: Maps query keys to parameter names. Empty values are left
            out entirely.

    The decorated method receives the dispatcher result as its first argument
    after self, followed by its own arguments, and returns the shaped output.
    Callers may pass debug=True to log the call.
    """

    def decorator(func: Callable) -> Callable:
        sig = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(self, *args, debug: bool = False, **kwargs):
            # Skip 'response_data' when binding the caller's arguments
            bound = sig.bind(self, None, *args, **kwargs)
            bound.apply_defaults()
            arguments = dict(bound.arguments)
            arguments.pop("self", None)
            arguments.pop("response_data", None)

            path = path_template.format(
                **{name: quote(to_wire_text(value), safe="") for name, value in arguments.items()}
            )

            params: dict[str, Any] = dict(query or {})
            for key, name in (query_from or {}).items():
                value = arguments.get(name)
                if value:
                    params[key] = value

            request_body = to_wire_text(arguments[body_from]) if body_from else body

            options = RequestOptions(plain_text=plain_text, full_response=full_response, debug=debug)
            response_data = await self.async_request(method, path, body=request_body, query=params, options=options)
            _LOGGER.debug("API %s %s completed", method, path)

            return await func(self, response_data, *args, **kwargs)

        return wrapper

    return decorator
