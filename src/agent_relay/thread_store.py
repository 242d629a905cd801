"""Local cache for the client's conversation thread id."""

import json
from pathlib import Path

import aiofiles

THREAD_KEY = "ai_thread_id"


def is_valid_thread_id(value: object) -> bool:
    """Thread ids issued by the agent service start with "thread"."""
    return isinstance(value, str) and value.startswith("thread")


class ThreadIdStore:
    """Persists the thread id in a small JSON file between client runs."""

    def __init__(self, path: str | Path = ".agent-relay/client-state.json"):
        self.path = Path(path)

    async def _read(self) -> dict:
        try:
            async with aiofiles.open(self.path) as f:
                content = await f.read()
        except (OSError, UnicodeDecodeError):
            # An unreadable cache file counts as empty
            return {}
        try:
            data = json.loads(content)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w") as f:
            await f.write(json.dumps(data, indent=2))

    async def load(self) -> str | None:
        """Return the cached thread id, or None if absent."""
        value = (await self._read()).get(THREAD_KEY)
        return value if isinstance(value, str) else None

    async def save(self, thread_id: str) -> None:
        data = await self._read()
        data[THREAD_KEY] = thread_id
        await self._write(data)

    async def clear(self) -> None:
        data = await self._read()
        if data.pop(THREAD_KEY, None) is not None:
            await self._write(data)
