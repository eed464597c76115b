import asyncio
import json
from pathlib import Path

import pytest

from zingo_bridge.parsers import extract_balanced
from zingo_bridge.process import (
    ProcessSpawnError,
    ProcessState,
    ToolNotFoundError,
    ZingoProcess,
)


async def _wait_for_region(handle: ZingoProcess, offset: int) -> str:
    for _ in range(100):
        region = extract_balanced(handle.buffer[offset:])
        if region is not None:
            return region
        await handle.wait_for_output(0.1)
    raise AssertionError("no response from fake zingo-cli")


def test_spawn_passes_identity_arguments(fake_zingo, identity):
    async def scenario():
        handle = await ZingoProcess.spawn(identity, executable=fake_zingo)
        try:
            assert handle.state is ProcessState.READY
            offset = handle.offset
            await handle.send_line("info")
            info = json.loads(await _wait_for_region(handle, offset))
            return handle.pid, info
        finally:
            await handle.destroy()

    pid, info = asyncio.run(scenario())

    assert info["pid"] == pid
    assert info["chain"] == "testnet"
    assert info["server"] == "https://testnet.zec.rocks:443"
    assert info["data_dir"] == identity.data_dir


def test_buffer_only_grows_and_keeps_banner(fake_zingo, identity):
    async def scenario():
        handle = await ZingoProcess.spawn(identity, executable=fake_zingo)
        try:
            first_offset = handle.offset
            await handle.send_line("ping")
            await _wait_for_region(handle, first_offset)
            snapshot = handle.buffer
            second_offset = handle.offset
            await handle.send_line("pong")
            await _wait_for_region(handle, second_offset)
            return snapshot, handle.buffer
        finally:
            await handle.destroy()

    before, after = asyncio.run(scenario())

    assert after.startswith(before)
    assert "Zingo CLI 1.0 ready" in before
    assert '{"echo": "pong"}' in after[len(before):]


def test_destroy_is_idempotent_and_notifies_listeners(fake_zingo, identity):
    exited = []

    async def scenario():
        handle = await ZingoProcess.spawn(identity, executable=fake_zingo)
        handle.add_exit_listener(exited.append)
        await handle.destroy()
        await handle.destroy()
        woke = await handle.wait_for_output(5)
        return handle, woke

    handle, woke = asyncio.run(scenario())

    assert handle.state is ProcessState.EXITED
    assert exited == [handle]
    assert woke is True


def test_stderr_is_kept_out_of_the_buffer(fake_zingo, identity):
    async def scenario():
        handle = await ZingoProcess.spawn(identity, executable=fake_zingo)
        await handle.send_line("crash")
        await handle.wait_closed()
        return handle

    handle = asyncio.run(scenario())

    assert handle.return_code == 3
    assert handle.stderr_tail == ["panic: database locked"]
    assert "panic" not in handle.buffer
    assert handle.snapshot()["state"] == "exited"


def test_missing_executable_is_detected_before_spawning(tmp_path: Path, identity):
    missing = tmp_path / "missing" / "zingo-cli"

    with pytest.raises(ToolNotFoundError) as excinfo:
        asyncio.run(ZingoProcess.spawn(identity, executable=str(missing)))

    assert str(missing) in str(excinfo.value)


def test_non_executable_file_fails_to_spawn(tmp_path: Path, identity):
    script = tmp_path / "zingo-cli"
    script.write_text("not a program", encoding="utf-8")

    with pytest.raises(ProcessSpawnError):
        asyncio.run(ZingoProcess.spawn(identity, executable=str(script)))
