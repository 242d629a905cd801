"""Agent session: the two operations the HTTP layer calls into.

A single session is built at startup and shared by every request. It holds
no per-request state; the only mutable part is the table of per-thread
locks used to queue concurrent requests for the same thread.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncIterator

from .agents_client import AgentsClient
from .config import RelayConfig
from .models import NO_REPLY_DETAIL, AgentResult
from .reply_extractor import extract_reply
from .run_poller import RunPoller, RunTimeoutError

logger = logging.getLogger(__name__)


class ThreadLocks:
    """One asyncio.Lock per thread id, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, thread_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(thread_id, asyncio.Lock())
        self._users[thread_id] = self._users.get(thread_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[thread_id] -= 1
            if self._users[thread_id] == 0:
                del self._users[thread_id]
                del self._locks[thread_id]


class AgentSession:
    """Owns the agent id and default thread id of one hosted agent."""

    def __init__(
        self,
        client: AgentsClient,
        agent_id: str,
        default_thread_id: str,
        poller: RunPoller | None = None,
        serialize_threads: bool = True,
    ):
        """Initialize session.

        Args:
            client: Agents client shared by all requests
            agent_id: Pre-provisioned agent to run
            default_thread_id: Thread used when a request names none
            poller: Run poller (defaults to 100ms interval, 120s timeout)
            serialize_threads: Queue concurrent requests per thread id
        """
        self.client = client
        self.agent_id = agent_id
        self.default_thread_id = default_thread_id
        self.poller = poller or RunPoller(client)
        self._thread_locks = ThreadLocks() if serialize_threads else None

    @classmethod
    def from_config(cls, config: RelayConfig) -> "AgentSession":
        """Build a session from configuration, failing fast if it is incomplete.

        Raises:
            ConfigError: if a required Azure setting is missing
        """
        config.validate()
        logger.info("Creating agent session...")
        logger.info("Agent ID: %s", config.agent_id)
        logger.info("Thread ID: %s", config.thread_id)

        client = AgentsClient.from_endpoint(config.project_endpoint, timeout=config.request_timeout)
        poller = RunPoller(client, interval=config.poll_interval, timeout=config.run_timeout)
        return cls(
            client,
            agent_id=config.agent_id,
            default_thread_id=config.thread_id,
            poller=poller,
            serialize_threads=config.serialize_threads,
        )

    async def close(self) -> None:
        await self.client.close()

    async def create_thread(self) -> AgentResult:
        """Ask the agent service for a new thread.

        Returns:
            Success carrying the thread id, or a remote_failure whose detail
            holds the cause and a stack summary
        """
        try:
            thread_id = await self.client.create_thread()
        except Exception as e:
            logger.exception("Thread creation failed")
            stack = "".join(traceback.format_tb(e.__traceback__)).strip()
            return AgentResult.failure("remote_failure", f"{str(e) or type(e).__name__} | {stack}")
        return AgentResult.success(thread_id)

    async def get_response(self, prompt: str, thread_id: str | None = None) -> AgentResult:
        """Submit a prompt and return the agent's reply.

        Args:
            prompt: User message text
            thread_id: Thread to use instead of the session default

        Returns:
            Success carrying the reply text, or a validation, remote_failure,
            no_reply or timeout failure. Never raises except on cancellation.
        """
        if not prompt or not prompt.strip():
            return AgentResult.failure("validation", "Message is required.")

        use_thread_id = thread_id or self.default_thread_id

        if self._thread_locks is None:
            return await self._exchange(prompt, use_thread_id)
        async with self._thread_locks.hold(use_thread_id):
            return await self._exchange(prompt, use_thread_id)

    async def _exchange(self, prompt: str, thread_id: str) -> AgentResult:
        try:
            await self.client.create_message(thread_id, prompt)
            run = await self.client.create_run(thread_id, self.agent_id)
            await self.poller.wait(thread_id, run)

            messages = await self.client.list_messages(thread_id)
            reply = extract_reply(messages)
        except RunTimeoutError as e:
            logger.warning("Thread %s: %s", thread_id, e)
            return AgentResult.failure("timeout", str(e))
        except Exception as e:
            logger.exception("Agent exchange failed on thread %s", thread_id)
            return AgentResult.failure("remote_failure", str(e) or type(e).__name__)

        if reply is None:
            return AgentResult.failure("no_reply", NO_REPLY_DETAIL)
        return AgentResult.success(reply)
