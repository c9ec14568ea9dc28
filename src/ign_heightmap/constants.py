"""
Constants for ign-heightmap.

All magic strings, protocol parameters, and configuration values live here.
"""


class AppConfig:
    NAME = "ign-heightmap"
    VERSION = "0.1.0"
    DESCRIPTION = "Extract elevation maps from the IGN altimetry API"


class EnvVar:
    ELEVATION_URL = "IGN_HEIGHTMAP_ELEVATION_URL"
    TIMEOUT_S = "IGN_HEIGHTMAP_TIMEOUT_S"
    LOG_LEVEL = "IGN_HEIGHTMAP_LOG_LEVEL"


# Flat-Earth approximation: metres per degree of latitude
METERS_PER_LAT_DEGREE = 111000.0

# Remote elevation service
DEFAULT_ELEVATION_URL = "https://wxs.ign.fr/calcul/alti/rest/elevation.json"
QUERY_LON_PARAM = "lon"
QUERY_LAT_PARAM = "lat"
QUERY_ZONLY_PARAM = "zonly"
QUERY_ZONLY_VALUE = "true"
QUERY_SEPARATOR = "|"
BATCH_SIZE = 50

# CLI defaults
DEFAULT_SIZE_M = 1000.0
DEFAULT_RESOLUTION_M = 50.0
DEFAULT_OUTPUT_PATH = "heights.dat"


class DatasetName:
    HEIGHTS = "heights"
    POSITIONS = "positions"
    RESOLUTION = "resolution"
    VALID = "valid"


class DatasetAttr:
    CENTER_LATITUDE = "center_latitude"
    CENTER_LONGITUDE = "center_longitude"
    SIZE_M = "size_m"
    MAP_SIZE = "map_size"
    ELEVATION_URL = "elevation_url"
    CREATOR = "creator"


# HDF5 element types
HEIGHT_DTYPE = "<f8"
POSITION_FIELDS = [("lon", "<f8"), ("lat", "<f8")]

# Image rendering
INTENSITY_LEVELS = 256
UNIFORM_INTENSITY = 128
NODATA_INTENSITY = 0


class ErrorMessages:
    INVALID_RESOLUTION = "resolution must be > 0, got {}"
    DEGENERATE_GRID = "Grid is empty: size ({}) must be at least one resolution step ({})"
    OVERSIZED_GRID = "Grid is too large: size ({}) / resolution ({}) is not a finite step count"
    INVALID_LOG_LEVEL = "Unknown log level {!r}, using INFO"
    REQUEST_FAILED = "Failed to get the request: {}"
    BAD_STATUS = "Request failed with status: {}"
    INVALID_JSON = "Failed to parse response as JSON: {}"
    COUNT_MISMATCH = "Expected {} elevations, got {}"
    BATCH_FAILED = "Error fetching elevation data (batch {}/{}): {}"
    CREATE_FILE = "Failed to create HDF5 file '{}': {}"
    CREATE_DATASET = "Failed to create '{}' dataset: {}"
    CREATE_SCALAR = "Failed to create '{}' scalar: {}"
    CLOSE_FILE = "Failed to finalize HDF5 file '{}': {}"
    WRITE_ATTRS = "Failed to write file attributes: {}"
    READ_FILE = "Failed to read HDF5 file '{}': {}"
    EMPTY_HEIGHTS = "Cannot render an image without any finite height value"
    SHAPE_MISMATCH = "Cannot build a {0}x{0} image from {1} height values"
    SAVE_IMAGE = "Failed to save the image '{}': {}"
    MASK_MISMATCH = "valid mask length ({}) does not match heights length ({})"


class SuccessMessages:
    CALCULATING = "Calculating the positions ..."
    FETCHING = "Fetching the data from the IGN API ({} points, {} batches) ..."
    SAVING = "Saving the data to {}"
    IMAGE_SAVED = "Image saved to {}"
    FETCH_SUMMARY = "Fetched {} of {} elevations ({} failed batches)"
