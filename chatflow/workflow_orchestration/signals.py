"""Per-instance signal channels multiplexed into one fair wait.

Imported inside the Temporal workflow sandbox, so it only depends on the
standard library and keeps every decision a pure function of arrival order.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Deque, Dict, Tuple


class SignalKind(str, Enum):
    """Signal channel names, in tie-break priority order."""

    USER_PROMPT = "user_prompt"
    CONFIRM = "confirm"
    END_CHAT = "end_chat"


class InstanceTerminated(RuntimeError):
    """Raised when a signal targets an instance that already finished."""


@dataclass(frozen=True)
class Signal:
    kind: SignalKind
    message: str
    sequence: int


WaitCondition = Callable[[Callable[[], bool]], Awaitable[None]]


class SignalRouter:
    """Queue signals per channel and hand them out oldest-first.

    Every enqueue is stamped with a sequence number, so ``wait_next`` always
    returns the signal that arrived first across all channels. The channel
    order of :class:`SignalKind` breaks ties between equal stamps.
    """

    def __init__(self, wait_condition: WaitCondition) -> None:
        self._wait_condition = wait_condition
        self._channels: Dict[SignalKind, Deque[Signal]] = {kind: deque() for kind in SignalKind}
        self._sequence = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ending(self) -> bool:
        """True once an end_chat signal is queued or the chat has ended."""
        return self._closed or bool(self._channels[SignalKind.END_CHAT])

    def check_accepting(self, kind: SignalKind | str) -> None:
        """Raise :class:`InstanceTerminated` when a new signal could never be dispatched."""

        if self.ending:
            raise InstanceTerminated(f"Cannot deliver {SignalKind(kind).value} signal: chat has ended")

    def enqueue(self, kind: SignalKind | str, message: str) -> Signal:
        self.check_accepting(kind)
        signal = Signal(kind=SignalKind(kind), message=message, sequence=self._sequence)
        self._sequence += 1
        self._channels[signal.kind].append(signal)
        return signal

    def has_pending(self) -> bool:
        return any(self._channels.values())

    def pending(self, kind: SignalKind | None = None) -> int:
        if kind is not None:
            return len(self._channels[SignalKind(kind)])
        return sum(len(channel) for channel in self._channels.values())

    async def wait_next(self) -> Tuple[SignalKind, str]:
        """Suspend until any channel holds a signal, then pop the oldest one."""

        await self._wait_condition(self.has_pending)
        signal = self._pop_oldest()
        return signal.kind, signal.message

    def close(self) -> None:
        self._closed = True

    def _pop_oldest(self) -> Signal:
        heads = [
            (channel[0].sequence, priority, kind)
            for priority, (kind, channel) in enumerate(self._channels.items())
            if channel
        ]
        _, _, kind = min(heads)
        return self._channels[kind].popleft()
