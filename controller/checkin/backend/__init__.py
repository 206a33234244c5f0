"""Clients for the remote event-management API."""
from .http_client import ApiResponse, CheckinApiClient

__all__ = ["ApiResponse", "CheckinApiClient"]
