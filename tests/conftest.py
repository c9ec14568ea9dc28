"""Shared test fixtures for ign-heightmap."""

from unittest.mock import MagicMock

import numpy as np
import pytest


@pytest.fixture
def sample_positions():
    """2x2 grid around (45.0, 5.0): 100m map at 50m resolution."""
    from ign_heightmap.core.grid import build_grid, build_positions

    lon_axis, lat_axis = build_grid(45.0, 5.0, 100.0, 50.0)
    return build_positions(lon_axis, lat_axis)


@pytest.fixture
def sample_heights():
    """10x10 heightmap with values 100-500m."""
    rng = np.random.default_rng(42)
    return rng.uniform(100, 500, 100)


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects."""

    def _make(payload=None, status_code=200, json_error=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = payload
        return response

    return _make


@pytest.fixture
def mock_session(make_response):
    """requests.Session stand-in answering with an empty elevation list."""
    session = MagicMock()
    session.headers = {}
    session.get.return_value = make_response({"elevations": []})
    return session


@pytest.fixture
def echo_client():
    """ElevationClient stand-in returning the latitude of each point as its height."""
    client = MagicMock()
    client.fetch_elevations.side_effect = lambda batch: [lat for _, lat in batch]
    return client
