"""Data models for ign-heightmap."""

from .config import MapRequest
from .responses import (
    ElevationResponse,
    ErrorResponse,
    RunSummary,
    format_response,
)

__all__ = [
    "MapRequest",
    "ElevationResponse",
    "ErrorResponse",
    "RunSummary",
    "format_response",
]
