"""Start chat workflows and relay signals into running instances."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from temporalio.client import Client, WorkflowExecutionStatus, WorkflowHandle, WorkflowUpdateFailedError
from temporalio.exceptions import ApplicationError
from temporalio.service import RPCError, RPCStatusCode

from chatflow.workflow_orchestration.config import TemporalConfig
from chatflow.workflow_orchestration.signals import SignalKind
from chatflow.workflow_orchestration.workflows import ChatWorkflow, GreetOptions

WORKFLOW_ID_PREFIX = "chat-workflow-"


class GatewayError(RuntimeError):
    """Raised when the orchestration engine rejects a gateway call."""

    def __init__(self, message: str, *, workflow_id: str = "", run_id: str = "") -> None:
        super().__init__(message)
        self.workflow_id = workflow_id
        self.run_id = run_id


class InstanceNotFoundError(GatewayError):
    """Raised when no chat workflow matches the requested identifiers."""


class InstanceTerminatedError(GatewayError):
    """Raised when the targeted chat workflow has already finished."""


@dataclass(frozen=True)
class StartedChat:
    workflow_id: str
    run_id: str
    result: str


@dataclass(frozen=True)
class ChatSnapshot:
    workflow_id: str
    run_id: Optional[str]
    status: str
    state: Optional[str]
    result: Optional[str]


class ChatGateway:
    """Thin service over a connected Temporal client for the chat workflow."""

    def __init__(self, client: Client, config: TemporalConfig) -> None:
        self._client = client
        self._config = config
        self._logger = logging.getLogger("chatflow.services.chat_gateway")

    async def start_chat(self, message: str) -> StartedChat:
        """Start a chat instance and wait for its greeting."""

        workflow_id = f"{WORKFLOW_ID_PREFIX}{time.time_ns()}"
        options = GreetOptions(
            timeout_seconds=self._config.greet_timeout.total_seconds(),
            max_attempts=self._config.greet_max_attempts,
        )

        try:
            handle = await self._client.start_workflow(
                ChatWorkflow.run,
                args=[message, options],
                id=workflow_id,
                task_queue=self._config.task_queue,
            )
        except Exception as exc:
            self._logger.error(
                "chat_workflow_start_failed",
                extra={"workflow_id": workflow_id, "error": str(exc)},
                exc_info=True,
            )
            raise GatewayError(f"Unable to execute workflow: {exc}", workflow_id=workflow_id) from exc

        run_id = handle.first_execution_run_id or ""
        self._logger.info("chat_workflow_started", extra={"workflow_id": workflow_id, "run_id": run_id})

        try:
            result = await handle.execute_update(ChatWorkflow.greeting)
        except Exception as exc:
            self._logger.error(
                "chat_workflow_greeting_failed",
                extra={"workflow_id": workflow_id, "run_id": run_id, "error": str(exc)},
                exc_info=True,
            )
            raise GatewayError(
                f"Unable to get workflow result: {exc}", workflow_id=workflow_id, run_id=run_id
            ) from exc

        return StartedChat(workflow_id=workflow_id, run_id=run_id, result=result)

    async def send_signal(
        self,
        workflow_id: str,
        run_id: Optional[str],
        kind: SignalKind,
        message: str,
    ) -> None:
        """
        Deliver a signal to a running chat workflow.

        The signal is sent as a workflow update, so it is only acknowledged
        once the workflow has queued it.

        Raises:
            InstanceNotFoundError: no execution exists for the identifiers
            InstanceTerminatedError: the execution has ended or is ending
            GatewayError: any other engine failure
        """
        handle = self._client.get_workflow_handle(workflow_id, run_id=run_id or None)
        self._logger.info(
            "sending_chat_signal",
            extra={"workflow_id": workflow_id, "run_id": run_id, "signal_name": kind.value},
        )

        try:
            await handle.execute_update(kind.value, message)
        except WorkflowUpdateFailedError as exc:
            raise self._classify_rejection(workflow_id, run_id or "", kind, exc) from exc
        except RPCError as exc:
            if exc.status != RPCStatusCode.NOT_FOUND:
                self._log_signal_failure(workflow_id, kind, exc)
                raise GatewayError(str(exc), workflow_id=workflow_id, run_id=run_id or "") from exc
            missing = exc
        except Exception as exc:
            self._log_signal_failure(workflow_id, kind, exc)
            raise GatewayError(str(exc), workflow_id=workflow_id, run_id=run_id or "") from exc
        else:
            self._logger.info(
                "chat_signal_sent",
                extra={"workflow_id": workflow_id, "run_id": run_id, "signal_name": kind.value},
            )
            return

        raise await self._classify_missing(handle, kind, missing) from missing

    async def get_result(self, workflow_id: str, run_id: Optional[str] = None) -> ChatSnapshot:
        """Return the latest result of a chat, final once it has completed."""

        handle = self._client.get_workflow_handle(workflow_id, run_id=run_id or None)
        try:
            description = await handle.describe()
        except RPCError as exc:
            if exc.status == RPCStatusCode.NOT_FOUND:
                raise InstanceNotFoundError(
                    f"workflow {workflow_id} not found", workflow_id=workflow_id, run_id=run_id or ""
                ) from exc
            raise GatewayError(str(exc), workflow_id=workflow_id, run_id=run_id or "") from exc
        except Exception as exc:
            self._logger.error(
                "chat_describe_failed",
                extra={"workflow_id": workflow_id, "error": str(exc)},
                exc_info=True,
            )
            raise GatewayError(str(exc), workflow_id=workflow_id, run_id=run_id or "") from exc

        status = description.status
        status_name = status.name.lower() if status is not None else "unknown"

        try:
            if status == WorkflowExecutionStatus.RUNNING:
                snapshot = await handle.query(ChatWorkflow.status)
                result = await handle.query(ChatWorkflow.current_result)
                state = snapshot["state"]
            elif status == WorkflowExecutionStatus.COMPLETED:
                result = await handle.result()
                state = "terminated"
            else:
                result = None
                state = None
        except Exception as exc:
            self._logger.error(
                "chat_result_lookup_failed",
                extra={"workflow_id": workflow_id, "error": str(exc)},
                exc_info=True,
            )
            raise GatewayError(str(exc), workflow_id=workflow_id, run_id=run_id or "") from exc

        return ChatSnapshot(
            workflow_id=workflow_id,
            run_id=description.run_id,
            status=status_name,
            state=state,
            result=result,
        )

    def _classify_rejection(
        self,
        workflow_id: str,
        run_id: str,
        kind: SignalKind,
        error: WorkflowUpdateFailedError,
    ) -> GatewayError:
        cause = error.__cause__
        if isinstance(cause, ApplicationError) and cause.type == "InstanceTerminated":
            self._logger.warning(
                "chat_signal_rejected_chat_ending",
                extra={"workflow_id": workflow_id, "signal_name": kind.value},
            )
            return InstanceTerminatedError(cause.message, workflow_id=workflow_id, run_id=run_id)

        self._log_signal_failure(workflow_id, kind, error)
        return GatewayError(str(cause or error), workflow_id=workflow_id, run_id=run_id)

    async def _classify_missing(
        self,
        handle: WorkflowHandle,
        kind: SignalKind,
        error: RPCError,
    ) -> GatewayError:
        workflow_id = handle.id
        run_id = handle.run_id or ""
        try:
            description = await handle.describe()
        except Exception as exc:
            if not isinstance(exc, RPCError) or exc.status != RPCStatusCode.NOT_FOUND:
                self._log_signal_failure(workflow_id, kind, exc)
                return GatewayError(str(error), workflow_id=workflow_id, run_id=run_id)
            self._logger.warning(
                "chat_signal_instance_not_found",
                extra={"workflow_id": workflow_id, "run_id": run_id, "signal_name": kind.value},
            )
            return InstanceNotFoundError(
                f"workflow {workflow_id} not found", workflow_id=workflow_id, run_id=run_id
            )

        if description.status != WorkflowExecutionStatus.RUNNING:
            status_name = description.status.name.lower() if description.status else "closed"
            self._logger.warning(
                "chat_signal_instance_terminated",
                extra={"workflow_id": workflow_id, "status": status_name, "signal_name": kind.value},
            )
            return InstanceTerminatedError(
                f"workflow {workflow_id} has already ended ({status_name})",
                workflow_id=workflow_id,
                run_id=description.run_id or run_id,
            )

        self._log_signal_failure(workflow_id, kind, error)
        return GatewayError(str(error), workflow_id=workflow_id, run_id=run_id)

    def _log_signal_failure(self, workflow_id: str, kind: SignalKind, exc: Exception) -> None:
        self._logger.error(
            "chat_signal_failed",
            extra={
                "workflow_id": workflow_id,
                "signal_name": kind.value,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
