"""
Stripe API client for fetching charges.

Wraps the synchronous Stripe SDK for use from async request handlers and
classifies SDK errors. There is deliberately no retry: a failed fetch is
reported to the caller, who logs it and moves on.
"""
import asyncio
from enum import Enum
from typing import Optional

import stripe
import structlog
from pydantic import ValidationError

from failure_monitor.core.events import Charge

logger = structlog.get_logger(__name__)


class StripeErrorType(Enum):
    """Classification of Stripe errors."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    RATE_LIMIT = "rate_limit"


class StripeError(Exception):
    """Base exception for Stripe-related errors."""

    def __init__(
        self,
        message: str,
        error_type: StripeErrorType,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize Stripe error.

        Args:
            message: Error message
            error_type: Classification of error
            original_error: Original Stripe exception
        """
        super().__init__(message)
        self.error_type = error_type
        self.original_error = original_error


class StripeClient:
    """Thin async wrapper around the Stripe charges API."""

    def __init__(self, secret_key: str, api_version: Optional[str] = None) -> None:
        """
        Initialize Stripe client.

        Args:
            secret_key: Stripe secret API key
            api_version: Optional pinned API version
        """
        stripe.api_key = secret_key
        if api_version:
            stripe.api_version = api_version
        self.test_mode = secret_key.startswith(("sk_test_", "rk_test_"))

        logger.info(
            "stripe_client_initialized",
            api_version=stripe.api_version,
            test_mode=self.test_mode,
        )

    @staticmethod
    def _classify_error(error: stripe.StripeError) -> StripeErrorType:
        """
        Classify Stripe error.

        Args:
            error: Stripe error

        Returns:
            StripeErrorType: Error classification
        """
        if isinstance(error, stripe.RateLimitError):
            return StripeErrorType.RATE_LIMIT
        elif isinstance(error, (stripe.APIConnectionError, stripe.APIError)):
            return StripeErrorType.TRANSIENT
        elif isinstance(
            error,
            (
                stripe.InvalidRequestError,
                stripe.AuthenticationError,
                stripe.PermissionError,
            ),
        ):
            return StripeErrorType.PERMANENT
        else:
            # Unknown errors are treated as transient
            return StripeErrorType.TRANSIENT

    async def retrieve_charge(self, charge_id: str) -> Charge:
        """
        Retrieve a charge by ID.

        Args:
            charge_id: Stripe charge ID (ch_...)

        Returns:
            Charge: Validated charge

        Raises:
            StripeError: If the fetch fails or the charge has an unexpected shape
        """
        logger.info("retrieving_charge", charge_id=charge_id)

        try:
            charge = await asyncio.to_thread(stripe.Charge.retrieve, charge_id)
        except stripe.StripeError as e:
            error_type = self._classify_error(e)
            logger.error(
                "stripe_api_error",
                charge_id=charge_id,
                error_type=error_type.value,
                error_code=getattr(e, "code", None),
                error_message=str(e),
            )
            raise StripeError(str(e), error_type, original_error=e) from e

        try:
            return Charge.model_validate(charge.to_dict())
        except ValidationError as e:
            logger.error("stripe_charge_malformed", charge_id=charge_id, error=str(e))
            raise StripeError(
                f"Charge {charge_id} has an unexpected shape",
                StripeErrorType.PERMANENT,
                original_error=e,
            ) from e
