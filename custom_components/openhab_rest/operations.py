"""Operation catalogue for the openHAB REST integration.

Maps every resource/operation pair the execute service accepts to the
OpenHABAPI endpoint method that implements it, together with the row fields
that feed the method's arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, NamedTuple

from pydantic import ValidationError

from .infrastructure.errors import OpenHABValidationError
from .models import OperationRequest
from .validators import normalize_tag_filter, validate_identifier

_LOGGER = logging.getLogger(__name__)


class OperationArgument(NamedTuple):
    field: str
    kwarg: str
    required: bool = True


class OperationSpec(NamedTuple):
    method_name: str
    arguments: tuple[OperationArgument, ...] = ()


_ITEM_NAME = OperationArgument("item_name", "item_name")
_THING_UID = OperationArgument("thing_uid", "thing_uid")
_RULE_UID = OperationArgument("rule_uid", "rule_uid")

OPERATIONS: dict[str, OperationSpec] = {
    "item.list": OperationSpec("async_list_items", (OperationArgument("tag_filter", "tag_filter", False),)),
    "item.get": OperationSpec("async_get_item", (_ITEM_NAME,)),
    "item.state": OperationSpec("async_get_item_state", (_ITEM_NAME,)),
    "item.command": OperationSpec("async_send_command", (_ITEM_NAME, OperationArgument("command", "command"))),
    "item.updateState": OperationSpec("async_update_state", (_ITEM_NAME, OperationArgument("command", "state"))),
    "item.metadata": OperationSpec("async_get_item_metadata", (_ITEM_NAME,)),
    "thing.list": OperationSpec("async_list_things"),
    "thing.get": OperationSpec("async_get_thing", (_THING_UID,)),
    "thing.status": OperationSpec("async_get_thing_status", (_THING_UID,)),
    "rule.list": OperationSpec("async_list_rules"),
    "rule.run": OperationSpec("async_run_rule", (_RULE_UID,)),
    "rule.toggle": OperationSpec("async_set_rule_enabled", (_RULE_UID, OperationArgument("enable", "enable", False))),
    "system.info": OperationSpec("async_get_system_info"),
}

FIELD_LABELS = {
    "item_name": "Item name",
    "command": "Command / State",
    "thing_uid": "Thing UID",
    "rule_uid": "Rule UID",
}


def build_operation_request(resource: str, operation: str, params: Mapping[str, Any]) -> OperationRequest:
    """Validate the resource/operation pair of one input row.

    Raises:
        OpenHABValidationError: If the pair is not in the catalogue.
    """
    try:
        return OperationRequest(resource=resource, operation=operation, params=dict(params))
    except ValidationError as err:
        reason = err.errors()[0].get("msg", str(err)) if err.errors() else str(err)
        raise OpenHABValidationError(f"Invalid operation {resource}.{operation}: {reason}") from err


def build_call_arguments(request: OperationRequest) -> dict[str, Any]:
    """Collect the endpoint method arguments for one row.

    Raises:
        OpenHABValidationError: If a required field is missing or empty.
    """
    spec = OPERATIONS[request.key]
    kwargs: dict[str, Any] = {}
    for argument in spec.arguments:
        value = request.params.get(argument.field)

        if argument.field == "tag_filter":
            value = normalize_tag_filter(value)

        if argument.required:
            is_valid, error_message = validate_identifier(value, FIELD_LABELS.get(argument.field, argument.field))
            if not is_valid:
                raise OpenHABValidationError(error_message)
        elif value is None:
            continue

        kwargs[argument.kwarg] = value
    return kwargs


async def async_run_operation(api, request: OperationRequest, debug: bool = False) -> Any:
    """Invoke the endpoint method behind request and return its shaped result."""
    spec = OPERATIONS[request.key]
    kwargs = build_call_arguments(request)
    _LOGGER.debug("Running openHAB operation %s with %s", request.key, kwargs)
    return await getattr(api, spec.method_name)(debug=debug, **kwargs)
