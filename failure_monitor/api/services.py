"""
Process-wide service container.

Everything a request handler needs is built once at startup and shared by
reference through ``app.state.services``. The activity log lives here rather
than as module state so tests can build isolated instances.
"""
from dataclasses import dataclass

import structlog

from failure_monitor.config import Settings
from failure_monitor.core.dispatcher import WebhookDispatcher
from failure_monitor.core.failure_handler import FailureHandler
from failure_monitor.integrations.airtable import AirtableRecorder
from failure_monitor.integrations.mailer import AlertMailer
from failure_monitor.integrations.stripe_client import StripeClient
from failure_monitor.monitoring.activity_log import ActivityLog

logger = structlog.get_logger(__name__)


@dataclass
class MonitorServices:
    """Shared collaborators of the HTTP surface."""

    activity_log: ActivityLog
    notifier: AlertMailer
    recorder: AirtableRecorder
    stripe_client: StripeClient
    handler: FailureHandler
    dispatcher: WebhookDispatcher

    async def aclose(self) -> None:
        await self.recorder.close()


def build_services(settings: Settings) -> MonitorServices:
    """
    Wire the monitor's components from settings.

    Args:
        settings: Application settings

    Returns:
        MonitorServices: Ready-to-use service container
    """
    activity_log = ActivityLog(capacity=settings.activity_log_capacity)
    notifier = AlertMailer(
        activity_log,
        username=settings.gmail_user,
        password=settings.gmail_app_password,
        recipient=settings.alert_recipient,
        hostname=settings.smtp_host,
        port=settings.smtp_port,
    )
    recorder = AirtableRecorder(
        activity_log,
        api_key=settings.airtable_api_key,
        base_id=settings.airtable_base_id,
        table_name=settings.airtable_table_name,
        api_url=settings.airtable_api_url,
    )
    stripe_client = StripeClient(
        settings.stripe_secret_key, api_version=settings.stripe_api_version
    )
    handler = FailureHandler(notifier, recorder, activity_log)
    dispatcher = WebhookDispatcher(handler, stripe_client, activity_log)

    logger.info(
        "services_built",
        airtable_table=settings.airtable_table_name,
        alert_recipient=settings.alert_recipient,
    )
    return MonitorServices(
        activity_log=activity_log,
        notifier=notifier,
        recorder=recorder,
        stripe_client=stripe_client,
        handler=handler,
        dispatcher=dispatcher,
    )
