"""FastAPI application and routes."""
from .main import app, create_app
from .services import MonitorServices, build_services

__all__ = ["MonitorServices", "app", "build_services", "create_app"]
