"""
Domain models for failed payments.

A FailureRecord is the canonical, processor-independent view of one failed
payment. It is built fresh for every handled event, handed to the notifier and
the recorder, then discarded.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .events import Charge

UNKNOWN = "Unknown"


class FailureRecord(BaseModel):
    """Normalized failed payment."""

    model_config = ConfigDict(frozen=True)

    customer_email: str = Field(default=UNKNOWN, description="Customer billing email")
    customer_id: str = Field(default=UNKNOWN, description="Processor customer ID")
    amount: int = Field(..., description="Amount in minor currency units")
    payment_method: str = Field(default=UNKNOWN, description="Payment method type")
    failure_reason: str = Field(default=UNKNOWN, description="Processor failure message")
    charge_id: str = Field(..., description="Processor charge ID")
    occurred_at_ms: int = Field(..., description="Failure time, epoch milliseconds")

    @classmethod
    def from_charge(cls, charge: Charge) -> "FailureRecord":
        """
        Normalize a processor charge.

        Empty or missing email, customer, method and reason become "Unknown";
        amount and charge ID pass through unchanged.
        """
        billing = charge.billing_details
        method = charge.payment_method_details
        return cls(
            customer_email=(billing.email if billing else None) or UNKNOWN,
            customer_id=charge.customer or UNKNOWN,
            amount=charge.amount,
            payment_method=(method.type if method else None) or UNKNOWN,
            failure_reason=charge.failure_message or UNKNOWN,
            charge_id=charge.id,
            occurred_at_ms=charge.created * 1000,
        )

    @property
    def occurred_at(self) -> Optional[datetime]:
        """Failure time as aware UTC datetime, or None if it is outside the datetime range."""
        try:
            return datetime.fromtimestamp(self.occurred_at_ms / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None

    @property
    def amount_major(self) -> float:
        return self.amount / 100

    @property
    def amount_display(self) -> str:
        """Amount in major units with two decimals, e.g. ``20.00``."""
        return f"{self.amount / 100:.2f}"


class FailureOutcome(BaseModel):
    """Result of handling one failed payment."""

    record: FailureRecord
    email_sent: bool
    row_recorded: bool

    @property
    def fully_delivered(self) -> bool:
        return self.email_sent and self.row_recorded


class DispatchResult(BaseModel):
    """
    What the dispatcher did with one webhook event.

    ``action`` is one of ``handled``, ``skipped``, ``fetch_failed``,
    ``unhandled`` or ``invalid``.
    """

    event_type: Optional[str] = None
    action: str
    outcome: Optional[FailureOutcome] = None
    error: Optional[str] = None
