"""Chat workflow driven by user_prompt, confirm and end_chat updates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError, ApplicationError

from chatflow.workflow_orchestration.chat_loop import ActivityFailure, ChatLoop, ChatState
from chatflow.workflow_orchestration.signals import InstanceTerminated, SignalKind, SignalRouter

with workflow.unsafe.imports_passed_through():
    from chatflow.workflow_orchestration import activities


@dataclass
class GreetOptions:
    timeout_seconds: float = 10.0
    max_attempts: int = 3


@workflow.defn(name="chat")
class ChatWorkflow:
    """
    Greets the caller, then keeps answering signals until the chat ends.

    Flow:
    1. Run the greet activity on the initial message
    2. Wait for the oldest pending signal across all channels
    3. user_prompt / confirm re-run greet; end_chat sets the final result
    4. Return the final result once end_chat has been dispatched
    """

    def __init__(self) -> None:
        self._router = SignalRouter(workflow.wait_condition)
        self._options = GreetOptions()
        self._loop = ChatLoop(self._router, self._greet, workflow.logger)

    @workflow.run
    async def run(self, message: str, options: Optional[GreetOptions] = None) -> str:
        """
        Execute the chat workflow.

        Args:
            message: Initial chat message to greet
            options: Time budget and attempt limit for each greet invocation

        Returns:
            The result of the last dispatched signal, ``"Chat ended: ..."``
        """
        if options is not None:
            self._options = options
        try:
            return await self._loop.run(message)
        except ActivityFailure as exc:
            raise ApplicationError(str(exc), type="GreetingFailed", non_retryable=True) from exc

    async def _greet(self, name: str) -> str:
        budget = timedelta(seconds=self._options.timeout_seconds)
        try:
            return await workflow.execute_activity(
                activities.greet_activity,
                name,
                start_to_close_timeout=budget,
                schedule_to_close_timeout=budget,
                retry_policy=RetryPolicy(maximum_attempts=self._options.max_attempts),
            )
        except ActivityError as exc:
            cause = exc.__cause__ or exc
            raise ActivityFailure(f"greet activity failed: {cause}") from exc

    def _reject_if_ending(self, kind: SignalKind) -> None:
        try:
            self._router.check_accepting(kind)
        except InstanceTerminated as exc:
            raise ApplicationError(str(exc), type="InstanceTerminated", non_retryable=True) from exc

    def _deliver(self, kind: SignalKind, message: str) -> None:
        # Validators and handlers of one activation run before the loop resumes,
        # so a second end_chat in the same batch is rejected here.
        self._reject_if_ending(kind)
        self._router.enqueue(kind, message)

    @workflow.update(name="user_prompt")
    async def user_prompt(self, message: str) -> None:
        self._deliver(SignalKind.USER_PROMPT, message)

    @user_prompt.validator
    def validate_user_prompt(self, message: str) -> None:
        self._reject_if_ending(SignalKind.USER_PROMPT)

    @workflow.update(name="confirm")
    async def confirm(self, message: str) -> None:
        self._deliver(SignalKind.CONFIRM, message)

    @confirm.validator
    def validate_confirm(self, message: str) -> None:
        self._reject_if_ending(SignalKind.CONFIRM)

    @workflow.update(name="end_chat")
    async def end_chat(self, message: str) -> None:
        self._deliver(SignalKind.END_CHAT, message)

    @end_chat.validator
    def validate_end_chat(self, message: str) -> None:
        self._reject_if_ending(SignalKind.END_CHAT)

    @workflow.update(name="greeting")
    async def greeting(self) -> str:
        """Return the greeting once the initial activity has settled."""
        await workflow.wait_condition(lambda: self._loop.state is not ChatState.GREETING)
        return self._loop.current_result

    @workflow.query(name="current_result")
    def current_result(self) -> str:
        return self._loop.current_result

    @workflow.query(name="status")
    def status(self) -> Dict[str, Any]:
        return {
            "state": self._loop.state.value,
            "signals_processed": self._loop.signals_processed,
            "pending_signals": self._router.pending(),
        }
