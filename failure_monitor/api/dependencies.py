"""FastAPI dependencies."""
from fastapi import Request

from .services import MonitorServices


def get_services(request: Request) -> MonitorServices:
    """Return the service container attached to the running app."""
    return request.app.state.services
