"""
Tests for HeightmapManager.

Covers batch partitioning, best-effort accumulation, aligned results,
and progress reporting. The elevation client is always mocked.
"""

import logging
from unittest.mock import MagicMock

import numpy as np
import pytest

from ign_heightmap.constants import BATCH_SIZE
from ign_heightmap.core.elevation_client import FetchError
from ign_heightmap.core.heightmap_manager import (
    FetchResult,
    HeightmapManager,
    batch_count,
    iter_batches,
)


def _points(n):
    return [(float(i), float(i) + 0.5) for i in range(n)]


# ===================================================================
# Batch partitioning
# ===================================================================


class TestIterBatches:
    def test_exact_multiple(self):
        batches = list(iter_batches(_points(100), 50))
        assert [len(b) for b in batches] == [50, 50]

    def test_remainder_in_last_batch(self):
        batches = list(iter_batches(_points(120), 50))
        assert [len(b) for b in batches] == [50, 50, 20]

    def test_preserves_order(self):
        points = _points(7)
        batches = list(iter_batches(points, 3))
        assert [p for b in batches for p in b] == points

    def test_empty(self):
        assert list(iter_batches([], 50)) == []

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError, match="batch_size"):
            list(iter_batches(_points(3), 0))

    def test_default_batch_size(self):
        assert BATCH_SIZE == 50
        assert [len(b) for b in iter_batches(_points(51))] == [50, 1]


class TestBatchCount:
    @pytest.mark.parametrize("n, expected", [(0, 0), (1, 1), (50, 1), (51, 2), (400, 8)])
    def test_ceil(self, n, expected):
        assert batch_count(n, 50) == expected


# ===================================================================
# fetch_all (best effort)
# ===================================================================


class TestFetchAll:
    """Tests for HeightmapManager.fetch_all()."""

    def test_one_call_per_batch_for_multiple(self, echo_client):
        manager = HeightmapManager(echo_client, show_progress=False)
        manager.fetch_all(_points(150))
        assert echo_client.fetch_elevations.call_count == 3

    def test_last_call_gets_remainder(self, echo_client):
        manager = HeightmapManager(echo_client, show_progress=False)
        points = _points(120)
        manager.fetch_all(points)

        calls = echo_client.fetch_elevations.call_args_list
        assert len(calls) == 3
        assert calls[-1].args[0] == points[100:]

    def test_all_success_lengths_match(self, echo_client):
        manager = HeightmapManager(echo_client, show_progress=False)
        points = _points(120)
        heights = manager.fetch_all(points)

        assert len(heights) == len(points)
        assert heights == [lat for _, lat in points]

    def test_failed_batch_skipped(self, echo_client):
        points = _points(120)
        good = echo_client.fetch_elevations.side_effect
        echo_client.fetch_elevations.side_effect = [
            good(points[:50]),
            FetchError("boom"),
            good(points[100:]),
        ]
        manager = HeightmapManager(echo_client, show_progress=False)

        heights = manager.fetch_all(points)

        assert len(heights) == 70
        assert heights == [lat for _, lat in points[:50] + points[100:]]

    def test_failure_logged_per_batch(self, caplog):
        client = MagicMock()
        client.fetch_elevations.side_effect = FetchError("Request failed with status: 500")
        manager = HeightmapManager(client, show_progress=False)

        with caplog.at_level(logging.ERROR):
            heights = manager.fetch_all(_points(120))

        assert heights == []
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 3
        assert "batch 2/3" in errors[1].getMessage()
        assert "status: 500" in errors[0].getMessage()

    def test_other_exceptions_propagate(self):
        client = MagicMock()
        client.fetch_elevations.side_effect = KeyError("bug")
        manager = HeightmapManager(client, show_progress=False)

        with pytest.raises(KeyError):
            manager.fetch_all(_points(10))

    def test_custom_batch_size(self, echo_client):
        manager = HeightmapManager(echo_client, batch_size=4, show_progress=False)
        manager.fetch_all(_points(10))
        sizes = [len(c.args[0]) for c in echo_client.fetch_elevations.call_args_list]
        assert sizes == [4, 4, 2]

    def test_no_points_no_calls(self, echo_client):
        manager = HeightmapManager(echo_client, show_progress=False)
        assert manager.fetch_all([]) == []
        echo_client.fetch_elevations.assert_not_called()

    def test_invalid_batch_size(self, echo_client):
        with pytest.raises(ValueError):
            HeightmapManager(echo_client, batch_size=0)


# ===================================================================
# fetch_aligned
# ===================================================================


class TestFetchAligned:
    """Tests for HeightmapManager.fetch_aligned()."""

    def test_returns_fetch_result(self, echo_client):
        manager = HeightmapManager(echo_client, show_progress=False)
        result = manager.fetch_aligned(_points(60))

        assert isinstance(result, FetchResult)
        assert result.batch_count == 2
        assert result.failed_batches == []
        assert result.fetched == 60
        assert bool(np.all(result.valid))

    def test_failed_batch_is_nan(self, echo_client):
        points = _points(120)
        good = echo_client.fetch_elevations.side_effect
        echo_client.fetch_elevations.side_effect = [
            good(points[:50]),
            FetchError("boom"),
            good(points[100:]),
        ]
        manager = HeightmapManager(echo_client, show_progress=False)

        result = manager.fetch_aligned(points)

        assert result.elevations.shape == (120,)
        assert result.failed_batches == [1]
        assert bool(np.all(np.isnan(result.elevations[50:100])))
        assert not result.valid[50:100].any()
        assert result.valid[:50].all() and result.valid[100:].all()
        assert result.elevations[100] == points[100][1]

    def test_compact_matches_fetch_all(self, echo_client):
        points = _points(120)
        good = echo_client.fetch_elevations.side_effect
        outcomes = [good(points[:50]), FetchError("boom"), good(points[100:])]

        echo_client.fetch_elevations.side_effect = list(outcomes)
        aligned = HeightmapManager(echo_client, show_progress=False).fetch_aligned(points)
        echo_client.fetch_elevations.side_effect = list(outcomes)
        compact = HeightmapManager(echo_client, show_progress=False).fetch_all(points)

        assert aligned.compact() == compact

    def test_all_failed(self):
        client = MagicMock()
        client.fetch_elevations.side_effect = FetchError("down")
        result = HeightmapManager(client, show_progress=False).fetch_aligned(_points(4))

        assert result.fetched == 0
        assert result.compact() == []
        assert result.failed_batches == [0]


# ===================================================================
# Progress reporting
# ===================================================================


class TestProgress:
    def test_callback_once_per_batch(self, echo_client):
        progress = MagicMock()
        manager = HeightmapManager(echo_client, progress_callback=progress, show_progress=False)

        manager.fetch_all(_points(120))

        assert [c.args for c in progress.call_args_list] == [(1, 3), (2, 3), (3, 3)]

    def test_callback_advances_on_failure(self):
        client = MagicMock()
        client.fetch_elevations.side_effect = FetchError("down")
        progress = MagicMock()
        manager = HeightmapManager(client, progress_callback=progress, show_progress=False)

        manager.fetch_all(_points(100))

        assert progress.call_count == 2

    def test_progress_bar_enabled(self, echo_client, capsys):
        manager = HeightmapManager(echo_client, show_progress=True)
        manager.fetch_all(_points(60))
        assert "2/2" in capsys.readouterr().err
