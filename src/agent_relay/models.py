"""Data models for agent threads, runs and session results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal


MessageRole = Literal["user", "agent"]

# Statuses reported by the agent service; only the first two are pending.
RunStatus = Literal[
    "queued",
    "in_progress",
    "requires_action",
    "cancelling",
    "cancelled",
    "failed",
    "completed",
    "expired",
]

PENDING_STATUSES = frozenset({"queued", "in_progress"})

ErrorKind = Literal["validation", "remote_failure", "no_reply", "timeout"]

ERROR_PREFIX = "[Error]: "
NO_REPLY_DETAIL = "No agent reply found for this prompt."


def _enum_value(value: Any) -> str:
    # SDK enums are str subclasses whose str() is "Class.MEMBER"
    return str(getattr(value, "value", value) or "")


@dataclass(frozen=True)
class AgentRun:
    """One asynchronous execution of the agent against a thread."""

    id: str
    thread_id: str
    status: str
    last_error: Any = None

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    @classmethod
    def from_sdk(cls, run: Any) -> "AgentRun":
        """Create from an SDK ThreadRun."""
        return cls(
            id=run.id,
            thread_id=run.thread_id or "",
            status=_enum_value(run.status).lower(),
            last_error=run.last_error,
        )


@dataclass(frozen=True)
class ThreadMessage:
    """An immutable message in a thread."""

    id: str
    thread_id: str
    role: MessageRole
    text_segments: tuple[str, ...] = ()
    created_at: datetime | None = None

    @property
    def text(self) -> str:
        return "".join(self.text_segments)

    @classmethod
    def from_sdk(cls, message: Any) -> "ThreadMessage":
        """Create from an SDK ThreadMessage.

        The service reports agent-authored messages with role "assistant".
        Non-text content parts (images, files) are skipped.
        """
        segments: list[str] = []
        for part in message.content or []:
            if _enum_value(getattr(part, "type", "")) != "text":
                continue
            value = part.text.value
            if value:
                segments.append(value)

        role = _enum_value(message.role)
        return cls(
            id=message.id or "",
            thread_id=message.thread_id or "",
            role="agent" if role in ("assistant", "agent") else "user",
            text_segments=tuple(segments),
            created_at=message.created_at,
        )


@dataclass(frozen=True)
class AgentResult:
    """Outcome of a session operation: a value or a tagged error."""

    ok: bool
    value: str | None = None
    error_kind: ErrorKind | None = None
    detail: str | None = None

    @classmethod
    def success(cls, value: str) -> "AgentResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str) -> "AgentResult":
        return cls(ok=False, error_kind=kind, detail=detail)

    def to_text(self) -> str:
        """Render the legacy wire form: the value, or an [Error]-prefixed string."""
        if self.ok:
            return self.value or ""
        return f"{ERROR_PREFIX}{self.detail}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ok": self.ok,
            "value": self.value,
            "error_kind": self.error_kind,
            "detail": self.detail,
        }


DisplayRole = Literal["user", "assistant"]


@dataclass
class DisplayedMessage:
    """A message rendered in the client conversation."""

    role: DisplayRole
    content: str
    timestamp: str = field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))
