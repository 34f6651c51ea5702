"""Core failure handling: event decoding, normalization and dispatch."""
from .dispatcher import WebhookDispatcher
from .events import (
    EventDecodeError,
    PayloadParseError,
    WebhookEvent,
    decode_event,
    parse_payload,
)
from .failure_handler import FailureHandler
from .models import DispatchResult, FailureOutcome, FailureRecord

__all__ = [
    "DispatchResult",
    "EventDecodeError",
    "FailureHandler",
    "FailureOutcome",
    "FailureRecord",
    "PayloadParseError",
    "WebhookDispatcher",
    "WebhookEvent",
    "decode_event",
    "parse_payload",
]
