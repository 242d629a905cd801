"""Azure AI Agents client.

Thin async adapter over the ``azure-ai-projects`` SDK. The project client's
``agents`` operations cover the five calls the relay needs:
- threads.create
- messages.create / messages.list
- runs.create / runs.get

SDK objects are mapped onto the relay's own ``AgentRun`` and
``ThreadMessage`` models so nothing above this module imports the SDK.
"""

from __future__ import annotations

import logging
from typing import Any

from azure.ai.agents.models import ListSortOrder, MessageRole

from .models import AgentRun, ThreadMessage

logger = logging.getLogger(__name__)


class AgentServiceError(Exception):
    """The agent service answered with a payload we cannot use."""


class AgentsClient:
    """Client for threads, messages and runs of a hosted agent."""

    def __init__(self, agents: Any, endpoint: str = "", closeables: list[Any] | None = None):
        """Initialize the client.

        Args:
            agents: The SDK agents operations (``AIProjectClient.agents``)
            endpoint: Project endpoint, kept for logging
            closeables: Async SDK objects to close with this client
        """
        self.agents = agents
        self.endpoint = endpoint
        self._closeables = list(closeables or [])

    @classmethod
    def from_endpoint(
        cls,
        endpoint: str,
        credential: Any = None,
        timeout: float = 30.0,
    ) -> "AgentsClient":
        """Create a client authenticated through DefaultAzureCredential.

        Args:
            endpoint: AI Foundry project endpoint
                (``https://<resource>.services.ai.azure.com/api/projects/<project>``)
            credential: Async Azure credential; defaults to DefaultAzureCredential
            timeout: Read timeout for each service call in seconds
        """
        from azure.ai.projects.aio import AIProjectClient
        from azure.identity.aio import DefaultAzureCredential

        owned = []
        if credential is None:
            credential = DefaultAzureCredential()
            owned.append(credential)
        project = AIProjectClient(endpoint=endpoint, credential=credential, read_timeout=timeout)
        return cls(project.agents, endpoint=endpoint, closeables=[project, *owned])

    async def close(self) -> None:
        """Close the project client and any credential we created."""
        for closeable in self._closeables:
            await closeable.close()
        self._closeables = []

    async def create_thread(self) -> str:
        """Allocate a new thread and return its id."""
        thread = await self.agents.threads.create()
        if not thread.id:
            raise AgentServiceError("Thread creation returned no id")
        logger.info("Created thread %s", thread.id)
        return thread.id

    async def create_message(self, thread_id: str, content: str) -> ThreadMessage:
        """Append a user message to a thread."""
        message = await self.agents.messages.create(
            thread_id=thread_id,
            role=MessageRole.USER,
            content=content,
        )
        return ThreadMessage.from_sdk(message)

    async def create_run(self, thread_id: str, agent_id: str) -> AgentRun:
        """Start a run of the agent against a thread."""
        run = await self.agents.runs.create(thread_id=thread_id, agent_id=agent_id)
        return AgentRun.from_sdk(run)

    async def get_run(self, thread_id: str, run_id: str) -> AgentRun:
        """Fetch the current state of a run."""
        run = await self.agents.runs.get(thread_id=thread_id, run_id=run_id)
        return AgentRun.from_sdk(run)

    async def list_messages(self, thread_id: str) -> list[ThreadMessage]:
        """List a thread's messages newest-first, following every page."""
        pages = self.agents.messages.list(thread_id=thread_id, order=ListSortOrder.DESCENDING)
        return [ThreadMessage.from_sdk(message) async for message in pages]
