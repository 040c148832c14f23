"""Per-row execution of openHAB operations.

Each input row is resolved, dispatched and collected before the next one
starts. Results that are lists expand into one output row per element.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

import aiohttp

from .infrastructure.errors import OpenHABError

_LOGGER = logging.getLogger(__name__)

ROW_ERRORS = (OpenHABError, TimeoutError, aiohttp.ClientError)


def error_message(err: BaseException) -> str:
    """Single descriptive message for any error a row can raise."""
    return str(err) or type(err).__name__


def _as_row(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {"value": value}


def expand_result(result: Any) -> list[dict[str, Any]]:
    """Turn one operation result into output rows."""
    if isinstance(result, list):
        return [_as_row(entry) for entry in result]
    return [_as_row(result)]


async def async_execute_rows(
    rows: Iterable[Mapping[str, Any]],
    handler: Callable[[Mapping[str, Any]], Awaitable[Any]],
    *,
    continue_on_fail: bool = False,
) -> list[dict[str, Any]]:
    """Run handler for every row, strictly one after another.

    Args:
        rows: Parameter mappings, one per input row.
        handler: Coroutine function performing the operation for one row.
        continue_on_fail: Record failures as {"error": message} rows and keep
            going instead of aborting on the first failure.

    Returns:
        The collected output rows.
    """
    output: list[dict[str, Any]] = []
    for index, row in enumerate(rows):
        try:
            result = await handler(row)
        except ROW_ERRORS as err:
            if not continue_on_fail:
                raise
            _LOGGER.warning("openHAB row %d failed: %s", index, error_message(err))
            output.append({"error": error_message(err)})
            continue

        output.extend(expand_result(result))
    return output
