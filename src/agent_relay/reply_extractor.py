"""Pick the agent reply out of a thread's message list."""

from typing import Iterable

from .models import ThreadMessage


def extract_reply(messages: Iterable[ThreadMessage]) -> str | None:
    """Return the text of the first agent message, in the order given.

    No sorting happens here. The agent service lists messages newest-first,
    which makes the first agent message the latest reply; a service listing
    oldest-first would yield the oldest one instead.

    Args:
        messages: Thread messages in service order

    Returns:
        Concatenated text segments of the first agent message, or None
    """
    for message in messages:
        if message.role == "agent":
            return "".join(message.text_segments)
    return None
