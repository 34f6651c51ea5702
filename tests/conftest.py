"""
Pytest configuration and fixtures.
"""
from typing import Any, AsyncGenerator, Callable, Dict
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from failure_monitor.api.main import create_app
from failure_monitor.api.services import MonitorServices
from failure_monitor.core.dispatcher import WebhookDispatcher
from failure_monitor.core.events import Charge
from failure_monitor.core.failure_handler import FailureHandler
from failure_monitor.integrations.airtable import AirtableRecorder
from failure_monitor.integrations.mailer import AlertMailer
from failure_monitor.integrations.stripe_client import StripeClient
from failure_monitor.monitoring.activity_log import ActivityLog


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "integration: tests through the HTTP surface")


@pytest.fixture
def activity_log() -> ActivityLog:
    return ActivityLog()


@pytest.fixture
def notifier() -> AsyncMock:
    """Alert mailer double that reports successful sends."""
    mock = AsyncMock(spec=AlertMailer)
    mock.send_failure_alert.return_value = True
    return mock


@pytest.fixture
def recorder() -> AsyncMock:
    """Airtable recorder double that reports successful inserts."""
    mock = AsyncMock(spec=AirtableRecorder)
    mock.append_failure_row.return_value = True
    return mock


@pytest.fixture
def stripe_client() -> AsyncMock:
    return AsyncMock(spec=StripeClient)


@pytest.fixture
def failure_handler(
    notifier: AsyncMock, recorder: AsyncMock, activity_log: ActivityLog
) -> FailureHandler:
    return FailureHandler(notifier, recorder, activity_log)


@pytest.fixture
def dispatcher(
    failure_handler: FailureHandler, stripe_client: AsyncMock, activity_log: ActivityLog
) -> WebhookDispatcher:
    return WebhookDispatcher(failure_handler, stripe_client, activity_log)


@pytest.fixture
def services(
    activity_log: ActivityLog,
    notifier: AsyncMock,
    recorder: AsyncMock,
    stripe_client: AsyncMock,
    failure_handler: FailureHandler,
    dispatcher: WebhookDispatcher,
) -> MonitorServices:
    return MonitorServices(
        activity_log=activity_log,
        notifier=notifier,
        recorder=recorder,
        stripe_client=stripe_client,
        handler=failure_handler,
        dispatcher=dispatcher,
    )


@pytest_asyncio.fixture
async def client(services: MonitorServices) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client bound to an app with test doubles."""
    app = create_app(services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def charge_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for Stripe-shaped charge objects."""

    def _make(**overrides: Any) -> Dict[str, Any]:
        charge: Dict[str, Any] = {
            "id": "ch_1",
            "object": "charge",
            "amount": 500,
            "currency": "usd",
            "customer": "cus_123",
            "billing_details": {"email": "a@b.com", "name": "Ada"},
            "payment_method_details": {"type": "card"},
            "failure_message": "card_declined",
            "created": 1700000000,
        }
        charge.update(overrides)
        return charge

    return _make


@pytest.fixture
def sample_charge(charge_payload: Callable[..., Dict[str, Any]]) -> Charge:
    return Charge.model_validate(charge_payload())
