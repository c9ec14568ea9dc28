#!/usr/bin/env python3
"""
ign-heightmap - Entry Point

Builds the sample grid, fetches elevations from the IGN API, writes the
HDF5 dataset, and optionally renders a grayscale image.

Configuration comes from command-line arguments, falling back to
environment variables (a .env file in the working directory is loaded
first).
"""

import argparse
import logging
import os
import sys

import numpy as np
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError
from tqdm.contrib.logging import logging_redirect_tqdm

from .constants import (
    DEFAULT_ELEVATION_URL,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_RESOLUTION_M,
    DEFAULT_SIZE_M,
    AppConfig,
    DatasetAttr,
    EnvVar,
    ErrorMessages,
    SuccessMessages,
)
from .core.dataset_io import DatasetWriteError, write_output
from .core.elevation_client import ElevationClient
from .core.grid import build_grid, build_positions
from .core.heightmap_manager import HeightmapManager, batch_count
from .core.image_renderer import RenderError, render_image, save_image
from .models import ErrorResponse, MapRequest, RunSummary, format_response

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=AppConfig.NAME, description=AppConfig.DESCRIPTION)
    parser.add_argument("latitude", type=float, help="Latitude of the map center")
    parser.add_argument("longitude", type=float, help="Longitude of the map center")
    parser.add_argument(
        "-s",
        "--size",
        type=float,
        default=DEFAULT_SIZE_M,
        help=f"Size of the map in meters (default: {DEFAULT_SIZE_M:g})",
    )
    parser.add_argument(
        "-r",
        "--resolution",
        type=float,
        default=DEFAULT_RESOLUTION_M,
        help=f"Resolution of the map in meters (default: {DEFAULT_RESOLUTION_M:g})",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        help=f"Path of the output (default: {DEFAULT_OUTPUT_PATH})",
    )
    parser.add_argument("--image", default=None, help="Path of the image (optional)")
    parser.add_argument(
        "--fill-missing",
        action="store_true",
        help="Keep heights aligned with positions: NaN plus a 'valid' mask for failed batches",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help=f"Elevation service URL (env {EnvVar.ELEVATION_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"HTTP timeout in seconds (env {EnvVar.TIMEOUT_S}, default: none)",
    )
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("--json", action="store_true", help="Print the run summary as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=AppConfig.VERSION)
    return parser


def request_from_args(args: argparse.Namespace) -> MapRequest:
    """Merge parsed arguments with environment defaults into a MapRequest."""
    endpoint = args.endpoint or os.environ.get(EnvVar.ELEVATION_URL) or DEFAULT_ELEVATION_URL
    timeout = args.timeout
    if timeout is None:
        timeout = os.environ.get(EnvVar.TIMEOUT_S) or None

    return MapRequest(
        latitude=args.latitude,
        longitude=args.longitude,
        size_m=args.size,
        resolution_m=args.resolution,
        output=args.output,
        image=args.image,
        fill_missing=args.fill_missing,
        elevation_url=endpoint,
        timeout_s=timeout,
    )


def run(
    request: MapRequest,
    client: ElevationClient | None = None,
    show_progress: bool = True,
) -> RunSummary:
    """
    Execute one extraction end to end.

    Per-batch fetch failures are logged and tolerated. A failed image is
    reported in the summary; the dataset is kept.

    Raises:
        ValueError: if the grid is empty
        DatasetWriteError: if the HDF5 output cannot be written
    """
    logger.info(SuccessMessages.CALCULATING)
    lon_axis, lat_axis = build_grid(
        request.latitude, request.longitude, request.size_m, request.resolution_m
    )
    map_size = len(lon_axis)
    if map_size == 0:
        raise ValueError(
            ErrorMessages.DEGENERATE_GRID.format(request.size_m, request.resolution_m)
        )
    positions = build_positions(lon_axis, lat_axis)

    if client is None:
        client = ElevationClient(url=request.elevation_url, timeout_s=request.timeout_s)
    with client:
        manager = HeightmapManager(client, show_progress=show_progress)
        logger.info(
            SuccessMessages.FETCHING.format(
                len(positions), batch_count(len(positions), manager.batch_size)
            )
        )
        result = manager.fetch_aligned(positions)

    if request.fill_missing:
        heights = result.elevations
        valid = result.valid
    else:
        heights = np.asarray(result.compact(), dtype=np.float64)
        valid = None

    logger.info(SuccessMessages.SAVING.format(request.output))
    write_output(
        request.output,
        heights,
        positions,
        request.resolution_m,
        valid=valid,
        attrs={
            DatasetAttr.CENTER_LATITUDE: request.latitude,
            DatasetAttr.CENTER_LONGITUDE: request.longitude,
            DatasetAttr.SIZE_M: request.size_m,
            DatasetAttr.MAP_SIZE: map_size,
            DatasetAttr.ELEVATION_URL: request.elevation_url,
            DatasetAttr.CREATOR: f"{AppConfig.NAME} {AppConfig.VERSION}",
        },
    )

    image_path = None
    image_error = None
    if request.image:
        try:
            save_image(render_image(heights, map_size), request.image)
            image_path = request.image
            logger.info(SuccessMessages.IMAGE_SAVED.format(request.image))
        except RenderError as e:
            logger.error(f"Image step failed, dataset kept at {request.output}: {e}")
            image_error = str(e)

    finite = heights[np.isfinite(heights)]
    return RunSummary(
        center=[request.latitude, request.longitude],
        size_m=request.size_m,
        resolution_m=request.resolution_m,
        map_size=map_size,
        points=len(positions),
        heights=int(heights.size),
        batches=result.batch_count,
        failed_batches=result.failed_batches,
        elevation_range=[float(finite.min()), float(finite.max())] if finite.size else None,
        output=request.output,
        image=image_path,
        aligned=request.fill_missing,
        image_error=image_error,
    )


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def _resolve_log_level(verbose: bool) -> int | None:
    """Level from --verbose or the environment; None if the name is unknown."""
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName(os.environ.get(EnvVar.LOG_LEVEL, "INFO").upper())
    return level if isinstance(level, int) else None


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the ign-heightmap command."""
    load_dotenv(find_dotenv(usecwd=True))

    args = build_parser().parse_args(argv)

    level = _resolve_log_level(args.verbose)
    logging.basicConfig(level=logging.INFO if level is None else level)
    if level is None:
        logger.warning(ErrorMessages.INVALID_LOG_LEVEL.format(os.environ.get(EnvVar.LOG_LEVEL)))
    output_mode = "json" if args.json else "text"

    try:
        request = request_from_args(args)
    except ValidationError as e:
        message = _format_validation_error(e)
        logger.error(f"Invalid input: {message}")
        print(format_response(ErrorResponse(error=message), output_mode), file=sys.stderr)
        return 1

    try:
        with logging_redirect_tqdm():
            summary = run(request, show_progress=not args.no_progress)
    except (ValueError, DatasetWriteError) as e:
        logger.error(f"ign-heightmap failed: {e}")
        print(format_response(ErrorResponse(error=str(e)), output_mode), file=sys.stderr)
        return 1

    print(format_response(summary, output_mode))
    return 1 if summary.image_error else 0


if __name__ == "__main__":
    sys.exit(main())
