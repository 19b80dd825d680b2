from __future__ import annotations

import asyncio
import logging
from typing import Callable, List

import pytest

from chatflow.workflow_orchestration.chat_loop import ActivityFailure, ChatLoop, ChatState
from chatflow.workflow_orchestration.signals import InstanceTerminated, SignalKind, SignalRouter

LOGGER = logging.getLogger("tests.chat_loop")


class RecordingGreeter:
    def __init__(self, failing: tuple[str, ...] = ()) -> None:
        self.calls: List[str] = []
        self.failing = failing
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, name: str) -> str:
        self.calls.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if name in self.failing:
                raise ActivityFailure(f"greet activity failed for {name!r}")
            return f"Hello, {name}!"
        finally:
            self.in_flight -= 1


async def settle(predicate: Callable[[], bool]) -> None:
    async def _wait() -> None:
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_wait(), timeout=1)


@pytest.mark.asyncio
async def test_chat_scenario_from_greeting_to_end(router: SignalRouter) -> None:
    greeter = RecordingGreeter()
    loop = ChatLoop(router, greeter, LOGGER)
    assert loop.state is ChatState.GREETING

    task = asyncio.create_task(loop.run("Hello World"))
    await settle(lambda: loop.state is ChatState.WAITING)
    assert loop.current_result == "Hello, Hello World!"

    router.enqueue(SignalKind.USER_PROMPT, "What's the weather?")
    await settle(lambda: loop.signals_processed == 1)
    assert loop.current_result == "Hello, What's the weather?!"

    router.enqueue(SignalKind.END_CHAT, "Goodbye")
    assert await asyncio.wait_for(task, timeout=1) == "Chat ended: Goodbye"
    assert loop.terminated

    with pytest.raises(InstanceTerminated):
        router.enqueue(SignalKind.USER_PROMPT, "anyone there?")
    assert loop.current_result == "Chat ended: Goodbye"


@pytest.mark.asyncio
async def test_last_dispatched_signal_wins(router: SignalRouter) -> None:
    greeter = RecordingGreeter()
    loop = ChatLoop(router, greeter, LOGGER)
    router.enqueue(SignalKind.USER_PROMPT, "one")
    router.enqueue(SignalKind.CONFIRM, "two")
    router.enqueue(SignalKind.USER_PROMPT, "three")
    router.enqueue(SignalKind.CONFIRM, "yes")

    task = asyncio.create_task(loop.run("start"))
    await settle(lambda: loop.signals_processed == 4)

    assert loop.current_result == "Hello, Confirmed: yes!"
    assert greeter.calls == ["start", "one", "Confirmed: two", "three", "Confirmed: yes"]
    assert greeter.max_in_flight == 1

    router.enqueue(SignalKind.END_CHAT, "done")
    await asyncio.wait_for(task, timeout=1)


@pytest.mark.asyncio
async def test_repeated_confirm_is_dispatched_each_time(router: SignalRouter) -> None:
    greeter = RecordingGreeter()
    loop = ChatLoop(router, greeter, LOGGER)
    task = asyncio.create_task(loop.run("start"))

    router.enqueue(SignalKind.CONFIRM, "yes")
    await settle(lambda: loop.signals_processed == 1)
    first = loop.current_result
    router.enqueue(SignalKind.CONFIRM, "yes")
    await settle(lambda: loop.signals_processed == 2)

    assert first == loop.current_result == "Hello, Confirmed: yes!"
    assert greeter.calls.count("Confirmed: yes") == 2

    router.enqueue(SignalKind.END_CHAT, "done")
    await asyncio.wait_for(task, timeout=1)


@pytest.mark.asyncio
async def test_activity_failure_keeps_previous_result(router: SignalRouter, caplog) -> None:
    greeter = RecordingGreeter(failing=("broken",))
    loop = ChatLoop(router, greeter, LOGGER)
    task = asyncio.create_task(loop.run("start"))

    with caplog.at_level(logging.ERROR, logger="tests.chat_loop"):
        router.enqueue(SignalKind.USER_PROMPT, "broken")
        await settle(lambda: loop.signals_processed == 1)

    assert loop.current_result == "Hello, start!"
    assert loop.state is ChatState.WAITING
    assert any(record.getMessage() == "chat_signal_activity_failed" for record in caplog.records)

    router.enqueue(SignalKind.USER_PROMPT, "fine")
    await settle(lambda: loop.signals_processed == 2)
    assert loop.current_result == "Hello, fine!"

    router.enqueue(SignalKind.END_CHAT, "done")
    assert await asyncio.wait_for(task, timeout=1) == "Chat ended: done"


@pytest.mark.asyncio
async def test_end_chat_is_dispatched_before_stopping(router: SignalRouter) -> None:
    greeter = RecordingGreeter()
    loop = ChatLoop(router, greeter, LOGGER)
    router.enqueue(SignalKind.USER_PROMPT, "before")
    router.enqueue(SignalKind.END_CHAT, "bye")
    with pytest.raises(InstanceTerminated):
        router.enqueue(SignalKind.CONFIRM, "after")

    result = await asyncio.wait_for(loop.run("start"), timeout=1)

    assert result == "Chat ended: bye"
    assert greeter.calls == ["start", "before"]
    assert loop.signals_processed == 2
    assert router.closed


@pytest.mark.asyncio
async def test_end_chat_ignores_prior_results(router: SignalRouter) -> None:
    loop = ChatLoop(router, RecordingGreeter(), LOGGER)
    router.enqueue(SignalKind.CONFIRM, "sure")
    router.enqueue(SignalKind.END_CHAT, "")

    assert await asyncio.wait_for(loop.run("start"), timeout=1) == "Chat ended: "


@pytest.mark.asyncio
async def test_initial_greeting_failure_propagates(router: SignalRouter) -> None:
    loop = ChatLoop(router, RecordingGreeter(failing=("start",)), LOGGER)

    with pytest.raises(ActivityFailure):
        await loop.run("start")
    assert loop.state is ChatState.GREETING
