"""
API routes for the payment failure monitor.

None of these endpoints are authenticated, and webhook bodies are not
signature-verified.
"""
from datetime import datetime, timezone
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from failure_monitor.core.events import PayloadParseError
from failure_monitor.core.models import FailureRecord

from .dependencies import get_services
from .schemas import (
    HealthResponse,
    LogsResponse,
    ServiceInfoResponse,
    SyntheticAlertResponse,
    WebhookAck,
)
from .services import MonitorServices

logger = structlog.get_logger(__name__)

SERVICE_NAME = "Payment Failure Monitor"
ENDPOINTS = ["/", "/health", "/logs", "/test", "/webhook"]
RECENT_LOG_LIMIT = 20

monitoring_router = APIRouter(tags=["monitoring"])
webhook_router = APIRouter(tags=["webhooks"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def synthetic_failure_record() -> FailureRecord:
    """Fixed failure used by the test endpoint."""
    return FailureRecord(
        customer_email="test@example.com",
        customer_id="test_customer",
        amount=2000,
        payment_method="card",
        failure_reason="Test failure",
        charge_id="test_charge",
        occurred_at_ms=int(datetime.now(timezone.utc).timestamp() * 1000),
    )


@monitoring_router.get("/", response_model=ServiceInfoResponse, summary="Service descriptor")
async def root() -> Dict[str, Any]:
    """Root endpoint with service information."""
    return {"name": SERVICE_NAME, "status": "running", "endpoints": ENDPOINTS}


@monitoring_router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health() -> Dict[str, Any]:
    return {"status": "healthy", "time": _now_iso()}


@monitoring_router.get(
    "/logs",
    response_model=LogsResponse,
    summary="Recent activity",
    description="Most recent activity log entries, oldest first",
)
async def logs(services: MonitorServices = Depends(get_services)) -> Dict[str, Any]:
    entries = services.activity_log.read_recent(RECENT_LOG_LIMIT)
    return {"logs": [entry.to_dict() for entry in entries]}


@monitoring_router.post(
    "/test",
    response_model=SyntheticAlertResponse,
    summary="Send a test alert",
    description="Send a synthetic failure alert through the mailer only",
)
async def send_test_alert(
    services: MonitorServices = Depends(get_services),
) -> Dict[str, Any]:
    """
    Exercise the alert mailer with a synthetic failure.

    Responds 200 whether or not the email went out; ``emailSent`` carries the
    result.
    """
    services.activity_log.record("Test triggered")
    logger.info("api_test_alert_requested")

    email_sent = await services.notifier.send_failure_alert(synthetic_failure_record())

    return {"message": "Test complete", "emailSent": email_sent, "time": _now_iso()}


@webhook_router.post(
    "/webhook",
    response_model=WebhookAck,
    summary="Stripe webhook endpoint",
    responses={status.HTTP_400_BAD_REQUEST: {"description": "Body is not valid JSON"}},
)
async def webhook(
    request: Request,
    services: MonitorServices = Depends(get_services),
) -> Any:
    """
    Handle a Stripe webhook event.

    Every parseable body is acknowledged, even when alerting or recording
    failed, so Stripe will not redeliver it.
    """
    body = await request.body()

    try:
        result = await services.dispatcher.dispatch_payload(body)
    except PayloadParseError as e:
        logger.warning("api_webhook_invalid_json", error=str(e))
        services.activity_log.record("Invalid JSON in webhook")
        return PlainTextResponse("Invalid JSON", status_code=status.HTTP_400_BAD_REQUEST)

    logger.info(
        "api_webhook_processed",
        event_type=result.event_type,
        action=result.action,
        email_sent=result.outcome.email_sent if result.outcome else None,
        row_recorded=result.outcome.row_recorded if result.outcome else None,
    )
    return {"received": True}
