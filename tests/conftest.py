"""
Pytest fixtures for the relay tests.

Provides a fake Dialogflow client so no test talks to Google.
"""

import pytest
from starlette.testclient import TestClient

from backend.core.relay import MessageRelay
from backend.main import create_app
from tests.fixtures import FakeDialogflowClient


@pytest.fixture
def fake_client() -> FakeDialogflowClient:
    return FakeDialogflowClient()


@pytest.fixture
def relay(fake_client: FakeDialogflowClient) -> MessageRelay:
    return MessageRelay(fake_client)


@pytest.fixture
def http_client(relay: MessageRelay) -> TestClient:
    return TestClient(create_app(relay=relay))
