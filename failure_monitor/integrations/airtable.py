"""
Airtable recorder for failed payments.

Appends one row per failure to an Airtable table through the REST API.
"""
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import structlog

from failure_monitor.core.models import FailureRecord
from failure_monitor.monitoring.activity_log import ActivityLog

logger = structlog.get_logger(__name__)

FAILED_STATUS = "Failed"


class AirtableError(Exception):
    """Raised when Airtable rejects or garbles a create request."""

    pass


def failure_row_fields(record: FailureRecord) -> Dict[str, Any]:
    """
    Map a failure record onto the table's columns.

    A failure time outside the representable range leaves "Failure Date" empty.
    """
    occurred_at = record.occurred_at
    failure_date = (
        occurred_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        if occurred_at is not None
        else None
    )
    return {
        "Customer Email": record.customer_email,
        "Customer ID": record.customer_id,
        "Payment Amount": record.amount_major,
        "Payment Method": record.payment_method,
        "Failure Reason": record.failure_reason,
        "Failure Date": failure_date,
        "Charge ID": record.charge_id,
        "Status": FAILED_STATUS,
    }


class AirtableRecorder:
    """
    Writes failure rows to one Airtable table.

    Insert failures are logged and reported as ``False``; there is no retry and
    no cleanup of partially written data.
    """

    def __init__(
        self,
        activity_log: ActivityLog,
        api_key: str,
        base_id: str,
        table_name: str = "Failed Payments",
        api_url: str = "https://api.airtable.com/v0",
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the recorder.

        Args:
            activity_log: Log that receives insert results
            api_key: Airtable personal access token
            base_id: Airtable base ID
            table_name: Table receiving the rows
            api_url: REST API root
            client: Optional preconfigured HTTP client
        """
        self.activity_log = activity_log
        self.table_name = table_name
        self.table_url = f"{api_url.rstrip('/')}/{base_id}/{quote(table_name, safe='')}"
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def create_row(self, fields: Dict[str, Any]) -> str:
        """
        Create one row.

        Args:
            fields: Column name to value mapping

        Returns:
            str: ID of the created Airtable record

        Raises:
            AirtableError: If the API rejects the request or returns no record
            httpx.HTTPError: On transport failures
        """
        response = await self.client.post(
            self.table_url,
            json={"records": [{"fields": fields}]},
            headers=self._headers,
        )
        if response.is_error:
            raise AirtableError(
                f"Airtable returned {response.status_code}: {response.text[:200]}"
            )

        try:
            return response.json()["records"][0]["id"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AirtableError(f"Unexpected Airtable response: {e!r}") from e

    async def append_failure_row(self, record: FailureRecord) -> bool:
        """
        Record one failed payment.

        Args:
            record: Failure to record

        Returns:
            bool: True if the row was created
        """
        try:
            record_id = await self.create_row(failure_row_fields(record))
        except Exception as e:
            logger.error(
                "airtable_insert_failed",
                charge_id=record.charge_id,
                table=self.table_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.activity_log.record(f"Airtable error: {e}")
            return False

        logger.info(
            "airtable_row_created",
            charge_id=record.charge_id,
            record_id=record_id,
        )
        self.activity_log.record(f"Added to Airtable: {record_id}")
        return True

    async def close(self) -> None:
        """Close the HTTP client if this recorder created it."""
        if self._owns_client:
            await self.client.aclose()
