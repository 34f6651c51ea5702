"""
Pydantic schemas for API responses.
"""
from typing import List

from pydantic import BaseModel, Field


class ServiceInfoResponse(BaseModel):
    """Response schema for the root endpoint."""

    name: str = Field(..., description="Service name")
    status: str = Field(..., description="Service status")
    endpoints: List[str] = Field(..., description="Available endpoints")


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str = Field(..., description="Health status")
    time: str = Field(..., description="Server time (ISO 8601)")


class LogEntry(BaseModel):
    """One activity log entry."""

    time: str = Field(..., description="Entry time (ISO 8601)")
    message: str = Field(..., description="Activity message")


class LogsResponse(BaseModel):
    """Most recent activity log entries, oldest first."""

    logs: List[LogEntry] = Field(default_factory=list)


class SyntheticAlertResponse(BaseModel):
    """Result of a synthetic alert."""

    message: str = Field(..., description="Status message")
    email_sent: bool = Field(..., alias="emailSent", description="Whether the email was sent")
    time: str = Field(..., description="Completion time (ISO 8601)")

    model_config = {"populate_by_name": True}


class WebhookAck(BaseModel):
    """Acknowledgement returned for every parseable webhook."""

    received: bool = Field(default=True)
