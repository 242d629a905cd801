"""Client for the relay HTTP API plus the conversation state a chat UI keeps.

The relay itself remembers nothing about a conversation; the client keeps
the thread id (cached on disk) and the list of displayed messages.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .dedup import DEFAULT_BUDGET, DEFAULT_INTERVAL, await_distinct_reply
from .models import DisplayedMessage
from .thread_store import ThreadIdStore, is_valid_thread_id

logger = logging.getLogger(__name__)

MAX_THREAD_ATTEMPTS = 10
THREAD_RETRY_DELAY = 0.3


class InvalidThreadIdError(ValueError):
    """A message was about to be sent with a missing or malformed thread id."""


class ThreadAcquisitionError(RuntimeError):
    """No valid thread id could be obtained from the server."""


class ChatClient:
    """Thin async client for the relay's chat routes."""

    def __init__(self, api_url: str = "http://localhost:5000", timeout: float = 300.0):
        """Initialize client.

        Args:
            api_url: Base URL of the relay server
            timeout: Per-request timeout; a chat request stays open for the whole run
        """
        self.api_url = api_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self.client.aclose()

    async def health_check(self) -> bool:
        try:
            response = await self.client.get(f"{self.api_url}/api/health")
            return response.status_code == 200
        except httpx.RequestError:
            return False

    async def create_thread(self) -> str | None:
        """Ask the server for a new thread id.

        Returns:
            The ``threadId`` field of the response, or None if there is none
        """
        response = await self.client.post(f"{self.api_url}/api/chat/thread")
        try:
            data = response.json()
        except ValueError:
            logger.warning("Thread request returned non-JSON body (%s)", response.status_code)
            return None
        if not isinstance(data, dict):
            return None
        if response.status_code != 200:
            logger.warning("Thread request failed (%s): %s", response.status_code, data.get("error"))
        return data.get("threadId")

    async def send_message(self, message: str, thread_id: str | None) -> str:
        """Post a chat message and return the raw reply text.

        Raises:
            InvalidThreadIdError: before any request, if thread_id is malformed
            httpx.HTTPStatusError: if the server answers with an error status
        """
        if not is_valid_thread_id(thread_id):
            raise InvalidThreadIdError(
                "Invalid threadId. Please refresh the page or start a new conversation."
            )
        response = await self.client.post(
            f"{self.api_url}/api/chat/chat",
            json={"message": message, "threadId": thread_id},
        )
        response.raise_for_status()
        return response.text


class ChatConversation:
    """One user's conversation: thread id, displayed messages, send and reset."""

    def __init__(
        self,
        client: ChatClient,
        store: ThreadIdStore,
        max_thread_attempts: int = MAX_THREAD_ATTEMPTS,
        thread_retry_delay: float = THREAD_RETRY_DELAY,
        dedup_budget: float = DEFAULT_BUDGET,
        dedup_interval: float = DEFAULT_INTERVAL,
    ):
        self.client = client
        self.store = store
        self.max_thread_attempts = max_thread_attempts
        self.thread_retry_delay = thread_retry_delay
        self.dedup_budget = dedup_budget
        self.dedup_interval = dedup_interval

        self.thread_id: str | None = None
        self.messages: list[DisplayedMessage] = []
        self.loading = False

    @property
    def last_assistant_reply(self) -> str | None:
        for message in reversed(self.messages):
            if message.role == "assistant":
                return message.content
        return None

    async def ensure_thread(self) -> str:
        """Return a usable thread id, requesting a new one if the cached id is bad.

        Raises:
            ThreadAcquisitionError: after max_thread_attempts invalid answers
        """
        thread_id = await self.store.load()
        attempts = 0

        while not is_valid_thread_id(thread_id) and attempts < self.max_thread_attempts:
            try:
                thread_id = await self.client.create_thread()
            except httpx.RequestError as e:
                logger.warning("Thread request failed: %s", e)
                thread_id = None

            if is_valid_thread_id(thread_id):
                await self.store.save(thread_id)
                break
            attempts += 1
            await asyncio.sleep(self.thread_retry_delay)

        if not is_valid_thread_id(thread_id):
            self.thread_id = None
            raise ThreadAcquisitionError(
                "Failed to get a valid thread ID from the server after "
                f"{self.max_thread_attempts} attempts. Please try again later."
            )

        self.thread_id = thread_id
        return thread_id

    async def send(self, text: str) -> DisplayedMessage | None:
        """Send a message and append the reply if it is a new one.

        Returns:
            The appended assistant message, or None if nothing was displayed
            (blank input, no thread, busy, or only a repeated reply came back)
        """
        if not text.strip() or self.loading or not self.thread_id:
            return None

        thread_id = self.thread_id
        self.messages.append(DisplayedMessage(role="user", content=text))
        last_reply = self.last_assistant_reply

        self.loading = True
        try:
            reply = await await_distinct_reply(
                lambda: self.client.send_message(text, thread_id),
                last_reply,
                budget=self.dedup_budget,
                interval=self.dedup_interval,
            )
        finally:
            self.loading = False

        if not reply:
            return None
        message = DisplayedMessage(role="assistant", content=reply)
        self.messages.append(message)
        return message

    async def reset(self) -> str:
        """Forget the cached thread and displayed messages, then start a new thread."""
        await self.store.clear()
        self.messages.clear()
        self.thread_id = None
        return await self.ensure_thread()
