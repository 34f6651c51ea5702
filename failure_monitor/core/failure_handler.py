"""
Failed payment handling.

Normalizes a charge and runs the two side effects (alert email, table row)
one after the other. Each side effect reports its own failure, so a broken
mailer never stops the row from being recorded and vice versa. There is no
rollback between them.
"""
from typing import TYPE_CHECKING

import structlog

from failure_monitor.monitoring.activity_log import ActivityLog

from .events import Charge
from .models import FailureOutcome, FailureRecord

if TYPE_CHECKING:
    from failure_monitor.integrations.airtable import AirtableRecorder
    from failure_monitor.integrations.mailer import AlertMailer

logger = structlog.get_logger(__name__)


class FailureHandler:
    """Turns one failed charge into an alert and a recorded row."""

    def __init__(
        self,
        notifier: "AlertMailer",
        recorder: "AirtableRecorder",
        activity_log: ActivityLog,
    ):
        self.notifier = notifier
        self.recorder = recorder
        self.activity_log = activity_log

    async def handle(self, charge: Charge) -> FailureOutcome:
        """
        Handle one failed charge.

        Args:
            charge: Validated charge from the webhook or from Stripe

        Returns:
            FailureOutcome: The normalized record and per-side-effect results
        """
        record = FailureRecord.from_charge(charge)

        logger.info(
            "handling_failed_payment",
            charge_id=record.charge_id,
            amount=record.amount,
            customer_id=record.customer_id,
        )
        self.activity_log.record(f"Processing failed payment: {record.charge_id}")

        email_sent = await self.notifier.send_failure_alert(record)
        row_recorded = await self.recorder.append_failure_row(record)

        outcome = FailureOutcome(
            record=record, email_sent=email_sent, row_recorded=row_recorded
        )
        if not outcome.fully_delivered:
            logger.warning(
                "failed_payment_partially_delivered",
                charge_id=record.charge_id,
                email_sent=email_sent,
                row_recorded=row_recorded,
            )
        return outcome
