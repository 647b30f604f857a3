"""
Pytest fixtures and configuration for tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from flowstate.api.app import create_app
from flowstate.config import Environment, Settings
from flowstate.core.models import WorkflowDefinition
from flowstate.orchestrator.engine import WorkflowEngine


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        environment=Environment.TEST,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def order_workflow() -> dict:
    """Order workflow: new -> shipped -> done (final)."""
    return {
        "id": "order",
        "name": "Order fulfilment",
        "states": [
            {"id": "new", "isInitial": True},
            {"id": "shipped"},
            {"id": "done", "isFinal": True},
        ],
        "actions": [
            {"id": "ship", "enabled": True, "fromStates": ["new"], "toState": "shipped"},
            {"id": "close", "enabled": True, "fromStates": ["shipped"], "toState": "done"},
        ],
    }


@pytest.fixture
def review_workflow() -> dict:
    """
    Document review workflow with a loop and a multi-source action.

    draft -> review -> (approved | draft); withdraw from draft or review.
    """
    return {
        "id": "review",
        "name": "Document review",
        "states": [
            {"id": "draft", "isInitial": True, "description": "Being written"},
            {"id": "review"},
            {"id": "approved", "isFinal": True},
            {"id": "withdrawn", "isFinal": True},
        ],
        "actions": [
            {"id": "submit", "enabled": True, "fromStates": ["draft"], "toState": "review"},
            {"id": "approve", "enabled": True, "fromStates": ["review"], "toState": "approved"},
            {"id": "reject", "enabled": True, "fromStates": ["review"], "toState": "draft"},
            {"id": "withdraw", "enabled": True, "fromStates": ["draft", "review"], "toState": "withdrawn"},
            {"id": "escalate", "enabled": False, "fromStates": ["review"], "toState": "approved"},
        ],
    }


@pytest.fixture
def engine() -> WorkflowEngine:
    """Fresh in-memory engine."""
    return WorkflowEngine()


@pytest.fixture
def order_engine(engine: WorkflowEngine, order_workflow: dict) -> WorkflowEngine:
    """Engine with the order workflow registered."""
    engine.create_definition(WorkflowDefinition.model_validate(order_workflow)).unwrap()
    return engine


@pytest_asyncio.fixture
async def client(test_settings: Settings, engine: WorkflowEngine) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app serving the ``engine`` fixture."""
    app = create_app(settings=test_settings, engine=engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
