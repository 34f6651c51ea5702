"""
Unit tests for the Stripe client wrapper.
"""
from unittest.mock import MagicMock, patch

import pytest
import stripe

from failure_monitor.integrations.stripe_client import (
    StripeClient,
    StripeError,
    StripeErrorType,
)


@pytest.fixture
def stripe_api() -> StripeClient:
    return StripeClient("sk_test_fake_key_for_testing")


class TestStripeClient:
    """Test suite for StripeClient."""

    @pytest.mark.unit
    def test_init_sets_api_key(self, stripe_api: StripeClient) -> None:
        assert stripe.api_key == "sk_test_fake_key_for_testing"
        assert stripe_api.test_mode is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_retrieve_charge(self, stripe_api: StripeClient, charge_payload) -> None:
        stripe_charge = MagicMock()
        stripe_charge.to_dict.return_value = charge_payload(id="ch_fetched")

        with patch("stripe.Charge.retrieve", return_value=stripe_charge) as mock_retrieve:
            charge = await stripe_api.retrieve_charge("ch_fetched")

        mock_retrieve.assert_called_once_with("ch_fetched")
        assert charge.id == "ch_fetched"
        assert charge.billing_details is not None
        assert charge.billing_details.email == "a@b.com"

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,expected_type",
        [
            (stripe.InvalidRequestError("No such charge", "id"), StripeErrorType.PERMANENT),
            (stripe.RateLimitError("Too many requests"), StripeErrorType.RATE_LIMIT),
            (stripe.APIConnectionError("Network down"), StripeErrorType.TRANSIENT),
        ],
    )
    async def test_retrieve_charge_errors(
        self, stripe_api: StripeClient, error: Exception, expected_type: StripeErrorType
    ) -> None:
        with patch("stripe.Charge.retrieve", side_effect=error):
            with pytest.raises(StripeError) as exc_info:
                await stripe_api.retrieve_charge("ch_1")

        assert exc_info.value.error_type == expected_type
        assert exc_info.value.original_error is error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_charge(self, stripe_api: StripeClient) -> None:
        stripe_charge = MagicMock()
        stripe_charge.to_dict.return_value = {"id": "ch_1"}

        with patch("stripe.Charge.retrieve", return_value=stripe_charge):
            with pytest.raises(StripeError, match="unexpected shape") as exc_info:
                await stripe_api.retrieve_charge("ch_1")

        assert exc_info.value.error_type == StripeErrorType.PERMANENT
