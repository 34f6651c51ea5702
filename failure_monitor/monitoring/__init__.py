"""Monitoring and observability package."""
from .activity_log import ActivityEntry, ActivityLog
from .logging import setup_logging

__all__ = ["ActivityEntry", "ActivityLog", "setup_logging"]
