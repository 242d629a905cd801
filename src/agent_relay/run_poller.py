"""Poll an agent run until it leaves the queued/in_progress states."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .models import AgentRun

if TYPE_CHECKING:
    from .agents_client import AgentsClient

logger = logging.getLogger(__name__)


class RunTimeoutError(Exception):
    """A run was still pending when the poll timeout elapsed."""

    def __init__(self, run_id: str, timeout: float, checks: int):
        super().__init__(f"Run {run_id} timed out after {timeout:g}s ({checks} status checks)")
        self.run_id = run_id
        self.timeout = timeout
        self.checks = checks


class RunPoller:
    """Drives a single run to a non-pending state.

    Every iteration sleeps first and then fetches the run, so the status
    returned by run creation is never trusted on its own.
    """

    def __init__(
        self,
        client: "AgentsClient",
        interval: float = 0.1,
        timeout: float | None = 120.0,
    ):
        """Initialize poller.

        Args:
            client: Agents client used for status checks
            interval: Seconds to sleep before each status check
            timeout: Seconds before giving up, or None to wait forever
        """
        self.client = client
        self.interval = interval
        self.timeout = timeout

    async def wait(self, thread_id: str, run: AgentRun) -> AgentRun:
        """Block until the run reaches a non-pending status.

        A terminal failure status is returned as-is, not raised.

        Raises:
            RunTimeoutError: if the run is still pending after the timeout
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout if self.timeout is not None else None
        checks = 0

        while True:
            await asyncio.sleep(self.interval)
            run = await self.client.get_run(thread_id, run.id)
            checks += 1

            if not run.is_pending:
                break
            if deadline is not None and loop.time() >= deadline:
                raise RunTimeoutError(run.id, self.timeout, checks)

        if run.status != "completed":
            logger.warning(
                "Run %s on thread %s ended with status %s: %s",
                run.id,
                thread_id,
                run.status,
                run.last_error,
            )
        logger.debug("Run %s finished after %d status checks", run.id, checks)
        return run
