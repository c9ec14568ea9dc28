"""
HTTP client for the IGN altimetry REST service.

One call sends one batch of (lon, lat) points and returns one elevation per
point, in request order. Every failure mode is reported as a FetchError;
the client never retries.
"""

import logging
from collections.abc import Sequence

import requests
from pydantic import ValidationError

from ..constants import (
    DEFAULT_ELEVATION_URL,
    QUERY_LAT_PARAM,
    QUERY_LON_PARAM,
    QUERY_SEPARATOR,
    QUERY_ZONLY_PARAM,
    QUERY_ZONLY_VALUE,
    AppConfig,
    ErrorMessages,
)
from ..models.responses import ElevationResponse
from .grid import Position

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """A batch of elevations could not be retrieved."""


def build_query(points: Sequence[Position]) -> dict[str, str]:
    """Serialize a batch as pipe-delimited lon/lat query parameters."""
    return {
        QUERY_LON_PARAM: QUERY_SEPARATOR.join(str(float(lon)) for lon, _ in points),
        QUERY_LAT_PARAM: QUERY_SEPARATOR.join(str(float(lat)) for _, lat in points),
        QUERY_ZONLY_PARAM: QUERY_ZONLY_VALUE,
    }


class ElevationClient:
    """Synchronous client for batched elevation queries."""

    def __init__(
        self,
        url: str = DEFAULT_ELEVATION_URL,
        timeout_s: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = f"{AppConfig.NAME}/{AppConfig.VERSION}"
        self._session = session

    def fetch_elevations(self, points: Sequence[Position]) -> list[float]:
        """
        Fetch the elevation of every point in a batch.

        Args:
            points: Batch of (lon, lat) pairs in degrees

        Returns:
            Elevations in metres, same length and order as ``points``

        Raises:
            FetchError: on transport failure, non-success status,
                malformed body, or a count mismatch
        """
        if not points:
            return []

        try:
            response = self._session.get(
                self.url, params=build_query(points), timeout=self.timeout_s
            )
        except requests.RequestException as e:
            raise FetchError(ErrorMessages.REQUEST_FAILED.format(e)) from e

        if not response.ok:
            raise FetchError(ErrorMessages.BAD_STATUS.format(response.status_code))

        try:
            payload = ElevationResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise FetchError(ErrorMessages.INVALID_JSON.format(e)) from e

        if len(payload.elevations) != len(points):
            raise FetchError(
                ErrorMessages.COUNT_MISMATCH.format(len(points), len(payload.elevations))
            )

        logger.debug(f"Fetched {len(points)} elevations from {self.url}")
        return payload.elevations

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ElevationClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
