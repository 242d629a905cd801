import json
from pathlib import Path

import pytest

from agent_relay.thread_store import THREAD_KEY, ThreadIdStore, is_valid_thread_id


@pytest.mark.parametrize(
    "value,expected",
    [
        ("thread_abc123", True),
        ("thread", True),
        ("", False),
        (None, False),
        ("abc-thread", False),
        ("7c9e6679-7425-40de-944b-e07fc1f90ae7", False),
        (42, False),
    ],
)
def test_is_valid_thread_id(value, expected):
    assert is_valid_thread_id(value) is expected


@pytest.mark.asyncio
async def test_missing_file_loads_none(tmp_path: Path):
    store = ThreadIdStore(tmp_path / "state.json")

    assert await store.load() is None


@pytest.mark.asyncio
async def test_save_load_clear(tmp_path: Path):
    path = tmp_path / "nested" / "state.json"
    store = ThreadIdStore(path)

    await store.save("thread_1")
    assert await store.load() == "thread_1"
    assert json.loads(path.read_text()) == {THREAD_KEY: "thread_1"}

    await store.clear()
    assert await store.load() is None


@pytest.mark.asyncio
async def test_clear_keeps_other_keys(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({THREAD_KEY: "thread_1", "theme": "dark"}))

    await ThreadIdStore(path).clear()

    assert json.loads(path.read_text()) == {"theme": "dark"}


@pytest.mark.asyncio
async def test_corrupt_file_loads_none(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text("{not json")

    assert await ThreadIdStore(path).load() is None


@pytest.mark.asyncio
async def test_undecodable_file_loads_none_and_is_overwritten(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    store = ThreadIdStore(path)

    assert await store.load() is None

    await store.save("thread_2")
    assert await store.load() == "thread_2"


@pytest.mark.asyncio
async def test_directory_in_place_of_file_loads_none(tmp_path: Path):
    path = tmp_path / "state.json"
    path.mkdir()

    assert await ThreadIdStore(path).load() is None
