"""
Response models for ign-heightmap.

Covers the payload returned by the remote elevation service and the
summary reported at the end of a run.
"""

from pydantic import BaseModel, ConfigDict, Field


def format_response(model: BaseModel, output_mode: str = "text") -> str:
    """Format a response model as JSON or human-readable text.

    Args:
        model: Pydantic response model instance
        output_mode: "text" (default) or "json"

    Returns:
        Formatted string
    """
    if output_mode == "text" and hasattr(model, "to_text"):
        return str(model.to_text())
    return str(model.model_dump_json())


class ElevationResponse(BaseModel):
    """Body of an elevation service reply (``zonly=true`` mode)."""

    model_config = ConfigDict(extra="ignore")

    elevations: list[float] = Field(
        ..., description="Elevation in metres for each requested point, in request order"
    )


class ErrorResponse(BaseModel):
    """Error report for a failed run."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(..., description="Error message describing what went wrong")

    def to_text(self) -> str:
        return f"Error: {self.error}"


class RunSummary(BaseModel):
    """Summary of a completed heightmap extraction."""

    model_config = ConfigDict(extra="forbid")

    center: list[float] = Field(..., description="Map center [latitude, longitude]")
    size_m: float = Field(..., description="Map side length in metres", gt=0)
    resolution_m: float = Field(..., description="Grid spacing in metres", gt=0)
    map_size: int = Field(..., description="Number of samples per axis", ge=0)
    points: int = Field(..., description="Number of requested sample points", ge=0)
    heights: int = Field(..., description="Number of elevations written", ge=0)
    batches: int = Field(..., description="Number of batches sent", ge=0)
    failed_batches: list[int] = Field(
        default_factory=list, description="Indices of batches that could not be fetched"
    )
    elevation_range: list[float] | None = Field(
        None, description="[min, max] elevation in metres over fetched values"
    )
    output: str = Field(..., description="Path of the HDF5 dataset")
    image: str | None = Field(None, description="Path of the rendered image, if any")
    aligned: bool = Field(False, description="Whether missing heights are kept as NaN")
    image_error: str | None = Field(None, description="Why the image could not be produced")

    def to_text(self) -> str:
        lines = [
            f"Heightmap: ({self.center[0]:.6f}, {self.center[1]:.6f})",
            f"Size: {self.size_m:.0f}m, resolution: {self.resolution_m:.0f}m "
            f"({self.map_size}x{self.map_size})",
            f"Heights: {self.heights} of {self.points} points",
            f"Batches: {self.batches} ({len(self.failed_batches)} failed)",
        ]
        if self.elevation_range is not None:
            lines.append(
                f"Elevation: {self.elevation_range[0]:.1f}m to {self.elevation_range[1]:.1f}m"
            )
        lines.append(f"Output: {self.output}")
        if self.image:
            lines.append(f"Image: {self.image}")
        if self.image_error:
            lines.append(f"ERROR: image not written: {self.image_error}")
        if self.failed_batches and not self.aligned:
            lines.append("WARNING: heights are not aligned with positions (failed batches dropped)")
        return "\n".join(lines)
