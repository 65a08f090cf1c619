"""Version 1 HTTP API."""

from speakerdesk.api.v1.router import get_api_router

__all__ = ["get_api_router"]
