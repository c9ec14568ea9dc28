"""Run configuration model for ign-heightmap."""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..constants import (
    DEFAULT_ELEVATION_URL,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_RESOLUTION_M,
    DEFAULT_SIZE_M,
    ErrorMessages,
)


class MapRequest(BaseModel):
    """Validated parameters of one heightmap extraction."""

    model_config = ConfigDict(extra="forbid")

    latitude: float = Field(
        ..., description="Latitude of the map center", gt=-90, lt=90, allow_inf_nan=False
    )
    longitude: float = Field(
        ..., description="Longitude of the map center", allow_inf_nan=False
    )
    size_m: float = Field(
        DEFAULT_SIZE_M, description="Size of the map in metres", gt=0, allow_inf_nan=False
    )
    resolution_m: float = Field(
        DEFAULT_RESOLUTION_M,
        description="Resolution of the map in metres",
        gt=0,
        allow_inf_nan=False,
    )
    output: str = Field(DEFAULT_OUTPUT_PATH, description="Path of the HDF5 output")
    image: str | None = Field(None, description="Path of the optional grayscale image")
    fill_missing: bool = Field(
        False, description="Keep heights aligned with positions, NaN for failed batches"
    )
    elevation_url: str = Field(DEFAULT_ELEVATION_URL, description="Elevation service endpoint")
    timeout_s: float | None = Field(
        None, description="HTTP timeout in seconds", gt=0, allow_inf_nan=False
    )

    @model_validator(mode="after")
    def _check_grid(self) -> "MapRequest":
        if not math.isfinite(self.size_m / self.resolution_m):
            raise ValueError(ErrorMessages.OVERSIZED_GRID.format(self.size_m, self.resolution_m))
        if self.map_size <= 0:
            raise ValueError(ErrorMessages.DEGENERATE_GRID.format(self.size_m, self.resolution_m))
        return self

    @property
    def map_size(self) -> int:
        """Number of samples along each axis."""
        return math.floor(self.size_m / self.resolution_m)
