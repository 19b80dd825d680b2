"""Signal-driven chat state machine run by the chat workflow."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, Union

from chatflow.workflow_orchestration.signals import SignalKind, SignalRouter

CONFIRM_PREFIX = "Confirmed: "
END_CHAT_PREFIX = "Chat ended: "

Greeter = Callable[[str], Awaitable[str]]


class ActivityFailure(RuntimeError):
    """Raised by a greeter when the greet activity did not produce a result."""


class ChatState(str, Enum):
    GREETING = "greeting"
    WAITING = "waiting"
    TERMINATED = "terminated"


class ChatLoop:
    """Own one chat instance from its greeting to ``end_chat``.

    ``greet`` runs the greet activity and raises :class:`ActivityFailure` when
    it fails; such failures are logged and leave ``current_result`` untouched.
    Any other exception propagates to the engine.
    """

    def __init__(
        self,
        router: SignalRouter,
        greet: Greeter,
        logger: Union[logging.Logger, logging.LoggerAdapter],
    ) -> None:
        self._router = router
        self._greet = greet
        self._logger = logger
        self.state = ChatState.GREETING
        self.current_result = ""
        self.signals_processed = 0

    @property
    def terminated(self) -> bool:
        return self.state is ChatState.TERMINATED

    async def run(self, initial_message: str) -> str:
        self.current_result = await self._greet(initial_message)
        self.state = ChatState.WAITING
        self._logger.info("chat_greeted", extra={"result": self.current_result})

        while not self.terminated:
            kind, message = await self._router.wait_next()
            self._logger.info("chat_signal_received", extra={"signal": kind.value, "signal_message": message})
            await self.dispatch(kind, message)
            self.signals_processed += 1

        self._router.close()
        return self.current_result

    async def dispatch(self, kind: SignalKind, message: str) -> None:
        if kind is SignalKind.END_CHAT:
            self.current_result = END_CHAT_PREFIX + message
            self.state = ChatState.TERMINATED
            return

        prompt = CONFIRM_PREFIX + message if kind is SignalKind.CONFIRM else message
        try:
            result = await self._greet(prompt)
        except ActivityFailure as exc:
            self._logger.error(
                "chat_signal_activity_failed",
                extra={"signal": kind.value, "error": str(exc)},
            )
            return
        self.current_result = result
