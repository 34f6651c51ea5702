"""External integrations: Stripe, SMTP and Airtable."""
from .airtable import AirtableError, AirtableRecorder
from .mailer import AlertMailer
from .stripe_client import StripeClient, StripeError, StripeErrorType

__all__ = [
    "AirtableError",
    "AirtableRecorder",
    "AlertMailer",
    "StripeClient",
    "StripeError",
    "StripeErrorType",
]
