"""Client-side duplicate-reply detection.

The reply channel carries no request correlation id, so a reply fetched
right after a previous exchange can be that previous reply again. The loop
below resends the same message until the reply text changes or the budget
runs out.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_BUDGET = 5.0
DEFAULT_INTERVAL = 0.05


async def await_distinct_reply(
    send: Callable[[], Awaitable[str]],
    last_reply: str | None,
    budget: float = DEFAULT_BUDGET,
    interval: float = DEFAULT_INTERVAL,
) -> str | None:
    """Call ``send`` until it returns something other than ``last_reply``.

    Args:
        send: Sends the message and returns the reply text
        last_reply: Last assistant reply already displayed, if any
        budget: Wall-clock seconds to keep retrying
        interval: Seconds to wait between attempts

    Returns:
        The first distinct reply, or None once the budget is exhausted
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + budget
    attempts = 0

    while loop.time() < deadline:
        reply = await send()
        attempts += 1
        if last_reply is None or reply != last_reply:
            return reply
        await asyncio.sleep(interval)

    logger.info("No distinct reply after %d attempts; dropping it", attempts)
    return None
