"""
Webhook event decoding.

Turns a raw request body into one of a closed set of event variants, keyed by
the event ``type``. Downstream code only ever sees validated models.
"""
import json
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, Field, ValidationError

CHARGE_FAILED = "charge.failed"
PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"


class PayloadParseError(Exception):
    """Raised when the request body is not valid JSON."""

    pass


class EventDecodeError(Exception):
    """Raised when a JSON body does not match the shape of its event type."""

    def __init__(self, message: str, event_type: Optional[str] = None):
        super().__init__(message)
        self.event_type = event_type


class BillingDetails(BaseModel):
    email: Optional[str] = None


class PaymentMethodDetails(BaseModel):
    type: Optional[str] = None


class Charge(BaseModel):
    """The subset of a Stripe charge the monitor uses."""

    id: str
    amount: int
    created: int = Field(..., description="Epoch seconds")
    customer: Optional[str] = None
    billing_details: Optional[BillingDetails] = None
    payment_method_details: Optional[PaymentMethodDetails] = None
    failure_message: Optional[str] = None


class ChargeList(BaseModel):
    data: List[Charge] = Field(default_factory=list)


class PaymentIntent(BaseModel):
    id: Optional[str] = None
    charges: Optional[ChargeList] = None


class Invoice(BaseModel):
    id: Optional[str] = None
    charge: Optional[str] = None


class ChargeData(BaseModel):
    object: Charge


class PaymentIntentData(BaseModel):
    object: PaymentIntent


class InvoiceData(BaseModel):
    object: Invoice


class ChargeFailedEvent(BaseModel):
    type: Literal["charge.failed"]
    id: Optional[str] = None
    data: ChargeData


class PaymentIntentFailedEvent(BaseModel):
    type: Literal["payment_intent.payment_failed"]
    id: Optional[str] = None
    data: PaymentIntentData

    @property
    def first_charge(self) -> Optional[Charge]:
        charges = self.data.object.charges
        if charges and charges.data:
            return charges.data[0]
        return None


class InvoicePaymentFailedEvent(BaseModel):
    type: Literal["invoice.payment_failed"]
    id: Optional[str] = None
    data: InvoiceData

    @property
    def charge_id(self) -> Optional[str]:
        return self.data.object.charge


class UnhandledEvent(BaseModel):
    """Any event type the monitor does not act on."""

    type: str
    id: Optional[str] = None


WebhookEvent = Union[
    ChargeFailedEvent,
    PaymentIntentFailedEvent,
    InvoicePaymentFailedEvent,
    UnhandledEvent,
]

_EVENT_MODELS: Dict[str, Type[BaseModel]] = {
    CHARGE_FAILED: ChargeFailedEvent,
    PAYMENT_INTENT_FAILED: PaymentIntentFailedEvent,
    INVOICE_PAYMENT_FAILED: InvoicePaymentFailedEvent,
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_payload(payload: Union[bytes, str]) -> Any:
    """
    Parse a raw webhook body as strict JSON.

    ``NaN``, ``Infinity`` and ``-Infinity`` are rejected.

    Raises:
        PayloadParseError: If the body is not valid JSON
    """
    try:
        return json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        raise PayloadParseError(f"Invalid JSON: {e}") from e


def decode_event(raw: Any) -> WebhookEvent:
    """
    Decode a parsed JSON document into an event variant.

    Args:
        raw: Parsed JSON document

    Returns:
        WebhookEvent: Validated event

    Raises:
        EventDecodeError: If the document is not an event envelope or a known
            event type has an unexpected shape
    """
    if not isinstance(raw, dict):
        raise EventDecodeError("Event envelope must be a JSON object")

    event_type = raw.get("type")
    if not isinstance(event_type, str):
        raise EventDecodeError("Event envelope has no string 'type'")

    model = _EVENT_MODELS.get(event_type, UnhandledEvent)
    try:
        return model.model_validate(raw)  # type: ignore[return-value]
    except ValidationError as e:
        raise EventDecodeError(
            f"Malformed {event_type} event: {e.error_count()} validation error(s)",
            event_type=event_type,
        ) from e
