"""
Webhook event dispatch.

Routes decoded Stripe events to the failure handler:

- ``charge.failed``: the embedded charge
- ``payment_intent.payment_failed``: the first nested charge, if any
- ``invoice.payment_failed``: the invoice's charge, fetched from Stripe
- anything else: logged as unhandled

Side-effect failures never escape ``dispatch``; they are reported through the
returned ``DispatchResult``.
"""
from typing import TYPE_CHECKING, Union

import structlog

from failure_monitor.monitoring.activity_log import ActivityLog

from .events import (
    ChargeFailedEvent,
    EventDecodeError,
    InvoicePaymentFailedEvent,
    PaymentIntentFailedEvent,
    WebhookEvent,
    decode_event,
    parse_payload,
)
from .failure_handler import FailureHandler
from .models import DispatchResult

if TYPE_CHECKING:
    from failure_monitor.integrations.stripe_client import StripeClient

logger = structlog.get_logger(__name__)


class WebhookDispatcher:
    """Classifies webhook events and hands failures to the handler."""

    def __init__(
        self,
        handler: FailureHandler,
        stripe_client: "StripeClient",
        activity_log: ActivityLog,
    ):
        self.handler = handler
        self.stripe_client = stripe_client
        self.activity_log = activity_log

    async def dispatch_payload(self, payload: Union[bytes, str]) -> DispatchResult:
        """
        Parse, decode and dispatch a raw webhook body.

        Args:
            payload: Raw request body

        Returns:
            DispatchResult: What was done with the event

        Raises:
            PayloadParseError: If the body is not valid JSON
        """
        raw = parse_payload(payload)
        try:
            event = decode_event(raw)
        except EventDecodeError as e:
            logger.warning("webhook_event_invalid", event_type=e.event_type, error=str(e))
            if e.event_type is not None:
                self.activity_log.record(f"Webhook received: {e.event_type}")
            self.activity_log.record(f"Invalid event payload: {e}")
            return DispatchResult(event_type=e.event_type, action="invalid", error=str(e))

        return await self.dispatch(event)

    async def dispatch(self, event: WebhookEvent) -> DispatchResult:
        """
        Dispatch one decoded event.

        Args:
            event: Decoded webhook event

        Returns:
            DispatchResult: What was done with the event
        """
        logger.info("webhook_received", event_id=event.id, event_type=event.type)
        self.activity_log.record(f"Webhook received: {event.type}")

        if isinstance(event, ChargeFailedEvent):
            outcome = await self.handler.handle(event.data.object)
            return DispatchResult(event_type=event.type, action="handled", outcome=outcome)

        if isinstance(event, PaymentIntentFailedEvent):
            charge = event.first_charge
            if charge is None:
                logger.info("payment_intent_without_charges", event_id=event.id)
                return DispatchResult(event_type=event.type, action="skipped")
            outcome = await self.handler.handle(charge)
            return DispatchResult(event_type=event.type, action="handled", outcome=outcome)

        if isinstance(event, InvoicePaymentFailedEvent):
            return await self._dispatch_invoice(event)

        logger.info("webhook_unhandled", event_id=event.id, event_type=event.type)
        self.activity_log.record(f"Unhandled event: {event.type}")
        return DispatchResult(event_type=event.type, action="unhandled")

    async def _dispatch_invoice(self, event: InvoicePaymentFailedEvent) -> DispatchResult:
        charge_id = event.charge_id
        if not charge_id:
            logger.info("invoice_without_charge", event_id=event.id)
            return DispatchResult(event_type=event.type, action="skipped")

        try:
            charge = await self.stripe_client.retrieve_charge(charge_id)
        except Exception as e:
            logger.error(
                "invoice_charge_fetch_failed",
                event_id=event.id,
                charge_id=charge_id,
                error=str(e),
            )
            self.activity_log.record(f"Failed to get charge: {e}")
            return DispatchResult(event_type=event.type, action="fetch_failed", error=str(e))

        outcome = await self.handler.handle(charge)
        return DispatchResult(event_type=event.type, action="handled", outcome=outcome)
