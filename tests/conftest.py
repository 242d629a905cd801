"""Shared fixtures: an in-memory stand-in for the SDK's agents operations."""

from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Callable

import pytest
from azure.ai.agents.models import ListSortOrder, MessageRole, RunStatus
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from agent_relay.agent_session import AgentSession
from agent_relay.agents_client import AgentsClient
from agent_relay.run_poller import RunPoller


async def _pages(items):
    for item in items:
        yield item


class FakeAgentService:
    """Minimal threads/messages/runs service shaped like ``AIProjectClient.agents``.

    Runs walk through ``statuses`` one step per status check; the agent reply
    is appended when a check reports "completed". Messages come back
    newest-first unless ascending order is requested, like the real service.
    """

    def __init__(
        self,
        statuses: list[str] | None = None,
        responder: Callable[[str], str | None] | None = None,
    ):
        self.statuses = statuses or ["in_progress", "completed"]
        self.responder = responder or (lambda prompt: f"echo: {prompt}")
        self.threads: dict[str, list[SimpleNamespace]] = {}
        self.runs: dict[str, dict] = {}
        self.log: list[str] = []
        self.calls: list[tuple[str, dict]] = []
        self.fail_ops: dict[str, int] = {}
        self._counter = 0

        self.agents = SimpleNamespace(
            threads=SimpleNamespace(create=self._create_thread),
            messages=SimpleNamespace(create=self._create_message, list=self._list_messages),
            runs=SimpleNamespace(create=self._create_run, get=self._get_run),
        )

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_{self._counter}"

    def _record(self, operation: str, **kwargs) -> None:
        self.calls.append((operation, kwargs))
        if operation in self.fail_ops:
            status = self.fail_ops[operation]
            raise HttpResponseError(message=f"({status}) service unavailable")
        thread_id = kwargs.get("thread_id")
        if thread_id is not None and thread_id not in self.threads:
            raise ResourceNotFoundError(message=f"(404) No thread found with id '{thread_id}'.")

    def add_thread(self, thread_id: str) -> None:
        self.threads.setdefault(thread_id, [])

    def add_message(self, thread_id: str, role: str, text: str) -> SimpleNamespace:
        message = SimpleNamespace(
            id=self._next("msg"),
            thread_id=thread_id,
            role=MessageRole.AGENT if role == "assistant" else MessageRole.USER,
            content=[SimpleNamespace(type="text", text=SimpleNamespace(value=text, annotations=[]))],
            created_at=datetime.fromtimestamp(1700000000 + self._counter, UTC),
        )
        self.threads[thread_id].append(message)
        return message

    def texts(self, thread_id: str) -> list[str]:
        return [m.content[0].text.value for m in self.threads[thread_id]]

    def user_texts(self, thread_id: str) -> list[str]:
        return [
            m.content[0].text.value
            for m in self.threads[thread_id]
            if m.role == MessageRole.USER
        ]

    async def _create_thread(self, **kwargs):
        self._record("threads.create", **kwargs)
        thread_id = self._next("thread")
        self.add_thread(thread_id)
        self.log.append("thread")
        return SimpleNamespace(id=thread_id)

    async def _create_message(self, thread_id: str, role, content: str, **kwargs):
        self._record("messages.create", thread_id=thread_id, role=role, content=content)
        assert role == MessageRole.USER
        self.log.append("post_message")
        return self.add_message(thread_id, "user", content)

    def _list_messages(self, thread_id: str, order=None, **kwargs):
        self._record("messages.list", thread_id=thread_id, order=order)
        self.log.append("list_messages")
        messages = list(self.threads[thread_id])
        if order != ListSortOrder.ASCENDING:
            messages.reverse()
        return _pages(messages)

    async def _create_run(self, thread_id: str, agent_id: str, **kwargs):
        self._record("runs.create", thread_id=thread_id, agent_id=agent_id)
        run = SimpleNamespace(
            id=self._next("run"),
            thread_id=thread_id,
            agent_id=agent_id,
            status=RunStatus.QUEUED,
            last_error=None,
        )
        self.runs[run.id] = {"run": run, "script": iter(self.statuses), "replied": False}
        self.log.append("create_run")
        return run

    async def _get_run(self, thread_id: str, run_id: str, **kwargs):
        self._record("runs.get", thread_id=thread_id, run_id=run_id)
        entry = self.runs[run_id]
        run = entry["run"]
        step = next(entry["script"], None)
        if step is not None:
            run.status = RunStatus(step)
        if run.status == RunStatus.COMPLETED and not entry["replied"]:
            entry["replied"] = True
            prompt = self.user_texts(thread_id)[-1]
            reply = self.responder(prompt)
            if reply is not None:
                self.add_message(thread_id, "assistant", reply)
        self.log.append("get_run")
        return SimpleNamespace(**vars(run))


@pytest.fixture
def service() -> FakeAgentService:
    svc = FakeAgentService()
    svc.add_thread("thread_default")
    return svc


@pytest.fixture
async def agents_client(service):
    client = AgentsClient(service.agents)
    yield client
    await client.close()


@pytest.fixture
def session(agents_client) -> AgentSession:
    return AgentSession(
        agents_client,
        agent_id="asst_test",
        default_thread_id="thread_default",
        poller=RunPoller(agents_client, interval=0, timeout=5.0),
    )
