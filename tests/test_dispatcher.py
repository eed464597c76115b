import asyncio

import pytest

from zingo_bridge.parsers import ParseStatus, parse_blocks
from zingo_bridge.process import (
    CommandDispatcher,
    CommandTimeoutError,
    ProcessExitedError,
    ProcessPool,
)


def _run(fake_zingo, scenario, **options):
    async def wrapper():
        pool = ProcessPool(executable=fake_zingo)
        dispatcher = CommandDispatcher(
            pool,
            timeout=options.get("timeout", 5.0),
            poll_interval=options.get("poll_interval", 0.05),
            stale_grace=options.get("stale_grace", 2.0),
        )
        try:
            return await scenario(pool, dispatcher)
        finally:
            await pool.close()

    return asyncio.run(wrapper())


def test_sync_status_is_repaired_and_parsed(fake_zingo, identity):
    async def scenario(pool, dispatcher):
        return await dispatcher.send(identity, "sync status")

    result = _run(fake_zingo, scenario)

    assert result.status is ParseStatus.PARSED
    assert result.value == {"sync_id": 7, "in_progress": False, "scanned_blocks": 1000}


def test_response_split_across_chunks_is_awaited(fake_zingo, identity):
    async def scenario(pool, dispatcher):
        return await dispatcher.send(identity, "split")

    result = _run(fake_zingo, scenario)

    assert result.value == {"part": 1}


def test_concurrent_commands_are_serialised(fake_zingo, identity):
    async def scenario(pool, dispatcher):
        results = await asyncio.gather(
            *(dispatcher.send(identity, f"cmd-{index}") for index in range(4))
        )
        return results, len(pool)

    results, size = _run(fake_zingo, scenario)

    assert [result.value for result in results] == [
        {"echo": f"cmd-{index}"} for index in range(4)
    ]
    assert size == 1


def test_timeout_leaves_the_process_usable(fake_zingo, identity):
    async def scenario(pool, dispatcher):
        handle = await pool.acquire(identity)
        with pytest.raises(CommandTimeoutError) as excinfo:
            await dispatcher.send(identity, "slow", timeout=0.2)
        follow_up = await dispatcher.send(identity, "ping")
        return handle, pool.get(identity), excinfo.value, follow_up

    handle, current, error, follow_up = _run(fake_zingo, scenario)

    assert current is handle
    assert error.command == "slow"
    assert follow_up.value == {"echo": "ping"}


def test_unresolved_stale_command_does_not_block_forever(fake_zingo, identity):
    async def scenario(pool, dispatcher):
        with pytest.raises(CommandTimeoutError):
            await dispatcher.send(identity, "silent", timeout=0.1)
        handle = pool.get(identity)
        follow_up = await dispatcher.send(identity, "ping")
        return handle, follow_up

    handle, follow_up = _run(fake_zingo, scenario, stale_grace=0.1)

    assert handle.abandoned_offset is None
    assert follow_up.value == {"echo": "ping"}


def test_process_exit_fails_the_waiting_command(fake_zingo, identity):
    async def scenario(pool, dispatcher):
        handle = await pool.acquire(identity)
        with pytest.raises(ProcessExitedError) as excinfo:
            await dispatcher.send(identity, "crash")
        registered = identity in pool
        retried = await dispatcher.send(identity, "ping")
        return handle, excinfo.value, registered, retried

    handle, error, registered, retried = _run(fake_zingo, scenario)

    assert error.return_code == 3
    assert "panic: database locked" in error.stderr
    assert registered is False
    assert handle.exited
    assert retried.value == {"echo": "ping"}


def test_custom_parser_receives_the_extracted_region(fake_zingo, identity):
    seen = []

    def parser(text):
        seen.append(text)
        return parse_blocks(text)

    async def scenario(pool, dispatcher):
        return await dispatcher.send(identity, "notes", parser=parser)

    result = _run(fake_zingo, scenario)

    assert seen == ["{\n  value: 2000\n  spend_status: unspent\n}"]
    assert result.status is ParseStatus.PARSED
    assert result.value == {"value": 2000, "spend_status": "unspent"}
