"""
Continuation-style bridge over the coroutine API.

Callers that work with success/failure callbacks (instead of awaiting an
Outcome) hand the repository call to `deliver()`. The call is scheduled on
the running event loop and exactly one of the two callbacks fires once it
completes.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ..errors import LitLoreError, RemoteFailure
from ..value_objects import Outcome

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[LitLoreError], None]


async def _settle(
    operation: Awaitable[Any],
    on_success: SuccessCallback,
    on_failure: FailureCallback,
) -> None:
    try:
        result = await operation
    except asyncio.CancelledError:
        _invoke(on_failure, RemoteFailure("Operation cancelled"))
        raise
    except LitLoreError as e:
        _invoke(on_failure, e)
        return
    except Exception as e:
        # Repositories are not supposed to raise; report it as a remote failure.
        logger.exception("Operation raised instead of returning an Outcome")
        _invoke(on_failure, RemoteFailure.from_exception(e))
        return

    if isinstance(result, Outcome):
        if result.ok:
            _invoke(on_success, result.value)
        else:
            _invoke(on_failure, result.error)
    else:
        _invoke(on_success, result)


def _invoke(callback: Callable[[Any], None], argument: Any) -> None:
    try:
        callback(argument)
    except Exception:
        logger.exception("Completion callback %r raised", callback)


def deliver(
    operation: Awaitable[Any],
    on_success: SuccessCallback,
    on_failure: FailureCallback,
    *,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> asyncio.Task:
    """
    Schedule a repository call and route its outcome to callbacks.

    Returns immediately; callbacks run on the event loop once the call
    completes. An exception raised by a callback is logged and does not
    trigger the other callback.

    Args:
        operation: Awaitable returning an Outcome (or a plain value)
        on_success: Called with Outcome.value
        on_failure: Called with the LitLoreError
        loop: Event loop to schedule on; defaults to the running loop

    Returns:
        The scheduled task (await it to wait for the callbacks)
    """
    coro = _settle(operation, on_success, on_failure)
    if loop is None:
        return asyncio.ensure_future(coro)
    return loop.create_task(coro)
