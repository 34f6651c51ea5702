"""
Failure alert emails.

Builds a fixed HTML alert for one failed payment and sends it over SMTP.
Send failures are logged and reported as ``False``; they never propagate.
"""
from email.message import EmailMessage
from html import escape
from typing import Optional

import aiosmtplib
import structlog

from failure_monitor.core.models import FailureRecord
from failure_monitor.monitoring.activity_log import ActivityLog

logger = structlog.get_logger(__name__)

ALERT_TEMPLATE = """
<h2>Payment Failure Alert</h2>
<p><strong>Customer:</strong> {email}</p>
<p><strong>Amount:</strong> ${amount}</p>
<p><strong>Reason:</strong> {reason}</p>
<p><strong>Charge ID:</strong> {charge_id}</p>
<p><strong>Date:</strong> {date}</p>
"""

DATE_FORMAT = "%m/%d/%Y, %I:%M:%S %p"
INVALID_DATE = "Invalid Date"


def format_alert_date(record: FailureRecord) -> str:
    """Failure time in server local time, or "Invalid Date" if it cannot be represented."""
    occurred_at = record.occurred_at
    if occurred_at is None:
        return INVALID_DATE
    try:
        return occurred_at.astimezone().strftime(DATE_FORMAT)
    except (ValueError, OverflowError, OSError):
        return INVALID_DATE


def render_alert_html(record: FailureRecord) -> str:
    """Render the alert body for a failure record."""
    return ALERT_TEMPLATE.format(
        email=escape(record.customer_email),
        amount=record.amount_display,
        reason=escape(record.failure_reason),
        charge_id=escape(record.charge_id),
        date=format_alert_date(record),
    )


class AlertMailer:
    """
    Sends one alert email per failed payment.

    Uses implicit TLS by default (Gmail on port 465).
    """

    def __init__(
        self,
        activity_log: ActivityLog,
        username: str,
        password: str,
        recipient: Optional[str] = None,
        hostname: str = "smtp.gmail.com",
        port: int = 465,
        use_tls: bool = True,
    ):
        """
        Initialize the mailer.

        Args:
            activity_log: Log that receives send results
            username: SMTP account, also used as the sender address
            password: SMTP account (app) password
            recipient: Alert recipient; defaults to ``username``
            hostname: SMTP host
            port: SMTP port
            use_tls: Connect with implicit TLS
        """
        self.activity_log = activity_log
        self.username = username
        self.password = password
        self.recipient = recipient or username
        self.hostname = hostname
        self.port = port
        self.use_tls = use_tls

    def build_message(self, record: FailureRecord) -> EmailMessage:
        """Build the alert email for one failure record."""
        message = EmailMessage()
        message["From"] = self.username
        message["To"] = self.recipient
        message["Subject"] = f"🚨 Payment Failed - {record.customer_email}"
        message.set_content(render_alert_html(record), subtype="html")
        return message

    async def send_failure_alert(self, record: FailureRecord) -> bool:
        """
        Send the alert for one failed payment.

        Args:
            record: Failure to report

        Returns:
            bool: True if the SMTP server accepted the message
        """
        try:
            message = self.build_message(record)
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
            )
        except Exception as e:
            logger.error(
                "email_send_failed",
                charge_id=record.charge_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.activity_log.record(f"Email failed: {e}")
            return False

        logger.info("email_sent", charge_id=record.charge_id, recipient=self.recipient)
        self.activity_log.record(f"Email sent for charge {record.charge_id}")
        return True
