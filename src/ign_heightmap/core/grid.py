"""
Grid construction for heightmap sampling.

Uses a local flat-Earth approximation: one degree of latitude is a fixed
number of metres, and a degree of longitude shrinks with cos(latitude).
Accuracy degrades near the poles and for very large map sizes.
"""

import math

from ..constants import METERS_PER_LAT_DEGREE, ErrorMessages

# (lon, lat) in degrees
Position = tuple[float, float]


def meters_per_lon_degree(
    latitude: float,
    meters_per_lat_degree: float = METERS_PER_LAT_DEGREE,
) -> float:
    """Metres spanned by one degree of longitude at the given latitude."""
    return meters_per_lat_degree * math.cos(math.radians(latitude))


def grid_size(size_m: float, resolution_m: float) -> int:
    """Number of samples along each axis: floor(size / resolution)."""
    if resolution_m <= 0:
        raise ValueError(ErrorMessages.INVALID_RESOLUTION.format(resolution_m))
    return math.floor(size_m / resolution_m)


def build_grid(
    center_lat: float,
    center_lon: float,
    size_m: float,
    resolution_m: float,
    meters_per_lat_degree: float = METERS_PER_LAT_DEGREE,
) -> tuple[list[float], list[float]]:
    """
    Compute the longitude and latitude axes of a square map.

    Samples are spaced ``resolution_m`` metres apart, starting half a map
    size west/south of the center.

    Args:
        center_lat: Latitude of the map center (degrees)
        center_lon: Longitude of the map center (degrees)
        size_m: Side length of the map in metres
        resolution_m: Spacing between samples in metres
        meters_per_lat_degree: Scale of the flat-Earth approximation

    Returns:
        Tuple of (lon_axis, lat_axis), both of length floor(size / resolution).
        Both are empty when the map is smaller than one resolution step.
    """
    lon_scale = meters_per_lon_degree(center_lat, meters_per_lat_degree)
    n = grid_size(size_m, resolution_m)

    lon_axis: list[float] = []
    lat_axis: list[float] = []
    for i in range(max(n, 0)):
        offset = 0.5 * size_m - i * resolution_m
        lon_axis.append(center_lon - offset / lon_scale)
        lat_axis.append(center_lat - offset / meters_per_lat_degree)
    return lon_axis, lat_axis


def build_positions(lon_axis: list[float], lat_axis: list[float]) -> list[Position]:
    """Cross product of the axes, longitude outer and latitude inner."""
    return [(lon, lat) for lon in lon_axis for lat in lat_axis]
