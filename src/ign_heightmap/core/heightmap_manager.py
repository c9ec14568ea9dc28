"""
Heightmap Manager: batch orchestrator for elevation queries.

Splits the sample points into fixed-size batches, sends them one after the
other through an ElevationClient, and accumulates the elevations in point
order. A failed batch is logged and skipped; the run always continues.
"""

import logging
import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray
from tqdm import tqdm

from ..constants import BATCH_SIZE, ErrorMessages, SuccessMessages
from .elevation_client import ElevationClient, FetchError
from .grid import Position

logger = logging.getLogger(__name__)

FloatArray = NDArray[np.floating[Any]]
ProgressCallback = Callable[[int, int], None]


@dataclass
class FetchResult:
    """Elevations aligned 1:1 with the requested points."""

    elevations: FloatArray
    valid: NDArray[np.bool_]
    batch_count: int
    failed_batches: list[int] = field(default_factory=list)

    @property
    def fetched(self) -> int:
        return int(np.count_nonzero(self.valid))

    def compact(self) -> list[float]:
        """Elevations of the successful batches only, in point order."""
        return [float(v) for v in self.elevations[self.valid]]


def iter_batches(
    points: Sequence[Position],
    batch_size: int = BATCH_SIZE,
) -> Iterator[list[Position]]:
    """Yield consecutive slices of at most ``batch_size`` points."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be > 0, got {batch_size}")
    for start in range(0, len(points), batch_size):
        yield list(points[start : start + batch_size])


def batch_count(n_points: int, batch_size: int = BATCH_SIZE) -> int:
    return math.ceil(n_points / batch_size)


class HeightmapManager:
    """Drives an ElevationClient over every batch of a point set."""

    def __init__(
        self,
        client: ElevationClient,
        batch_size: int = BATCH_SIZE,
        progress_callback: ProgressCallback | None = None,
        show_progress: bool = True,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        self.client = client
        self.batch_size = batch_size
        self.progress_callback = progress_callback
        self.show_progress = show_progress

    def fetch_all(self, points: Sequence[Position]) -> list[float]:
        """
        Fetch elevations for every point, best effort.

        Failed batches contribute nothing, so the result is shorter than
        ``points`` whenever a batch fails. Use fetch_aligned() to keep
        positions and heights index-aligned.
        """
        heights: list[float] = []
        for _, _, values in self._run(points):
            if values is not None:
                heights.extend(values)
        return heights

    def fetch_aligned(self, points: Sequence[Position]) -> FetchResult:
        """Fetch elevations for every point, NaN where a batch failed."""
        elevations = np.full(len(points), np.nan, dtype=np.float64)
        valid = np.zeros(len(points), dtype=bool)
        failed: list[int] = []

        for index, start, values in self._run(points):
            if values is None:
                failed.append(index)
                continue
            stop = start + len(values)
            elevations[start:stop] = values
            valid[start:stop] = True

        result = FetchResult(
            elevations=elevations,
            valid=valid,
            batch_count=batch_count(len(points), self.batch_size),
            failed_batches=failed,
        )
        logger.info(SuccessMessages.FETCH_SUMMARY.format(result.fetched, len(points), len(failed)))
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(
        self, points: Sequence[Position]
    ) -> Iterator[tuple[int, int, list[float] | None]]:
        """Yield (batch_index, first_point_index, elevations or None) per batch."""
        total = batch_count(len(points), self.batch_size)
        with tqdm(
            total=total,
            unit="batch",
            desc="Fetching elevations",
            disable=not self.show_progress,
        ) as pbar:
            for index, batch in enumerate(iter_batches(points, self.batch_size)):
                values: list[float] | None
                try:
                    values = self.client.fetch_elevations(batch)
                except FetchError as e:
                    logger.error(ErrorMessages.BATCH_FAILED.format(index + 1, total, e))
                    values = None

                pbar.update(1)
                if self.progress_callback is not None:
                    self.progress_callback(index + 1, total)

                yield index, index * self.batch_size, values
