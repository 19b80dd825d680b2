import asyncio
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("TEMPORAL_API_KEY", "test-api-key")
os.environ.setdefault("TEMPORAL_TASK_QUEUE", "unit-tests")
os.environ.setdefault("LOG_JSON", "false")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from chatflow.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from chatflow.main import create_app  # noqa: E402
from chatflow.services.chat_gateway import ChatSnapshot, GatewayError, StartedChat  # noqa: E402
from chatflow.workflow_orchestration.signals import SignalKind, SignalRouter  # noqa: E402


async def poll_until(predicate: Callable[[], bool]) -> None:
    """asyncio stand-in for ``workflow.wait_condition``."""
    while not predicate():
        await asyncio.sleep(0)


class StubGateway:
    def __init__(self) -> None:
        self.started: List[str] = []
        self.signals: List[Tuple[str, Optional[str], SignalKind, str]] = []
        self.error: Optional[GatewayError] = None
        self.snapshot: Optional[ChatSnapshot] = None

    async def start_chat(self, message: str) -> StartedChat:
        self.started.append(message)
        if self.error is not None:
            raise self.error
        return StartedChat(workflow_id="chat-workflow-1", run_id="run-1", result=f"Hello, {message}!")

    async def send_signal(self, workflow_id, run_id, kind, message) -> None:
        self.signals.append((workflow_id, run_id, kind, message))
        if self.error is not None:
            raise self.error

    async def get_result(self, workflow_id, run_id=None) -> ChatSnapshot:
        if self.error is not None:
            raise self.error
        return self.snapshot


@pytest.fixture()
def router() -> SignalRouter:
    return SignalRouter(poll_until)


@pytest.fixture()
def gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture()
def client(gateway: StubGateway) -> TestClient:  # noqa: ANN001
    app = create_app(gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client
