"""Shared test fixtures for chuk-mcp-los."""

import math
import threading

import pytest
from unittest.mock import AsyncMock, MagicMock

from chuk_mcp_los.core.coverage_engine import CoverageConfig
from chuk_mcp_los.core.elevation_pipeline import ElevationFetchPipeline, RateLimiter


class FakeElevationClient:
    """In-process stand-in for ElevationClient.

    Elevation is a function of the point; every call is recorded. Runs in
    worker threads under the pipeline, hence the lock.
    """

    def __init__(self, elevation_fn=None, fail_with=None):
        self.elevation_fn = elevation_fn or (lambda point: 0.0)
        self.fail_with = fail_with
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def lookup(self, points):
        with self._lock:
            self.calls.append(list(points))
        if self.fail_with is not None:
            raise self.fail_with
        return [float(self.elevation_fn(p)) for p in points]

    def close(self):
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def fake_client():
    return FakeElevationClient()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def small_config():
    """4 radials, 5 km at 1 km, flat Earth, no pacing delays."""
    return CoverageConfig(
        num_radials=4,
        max_distance_km=5.0,
        sample_interval_km=1.0,
        k_factor=math.inf,
        batch_size=3,
        max_concurrent=2,
        request_interval_s=0.0,
        max_retries=3,
        retry_base_delay_s=0.0,
    )


@pytest.fixture
def make_pipeline(recording_sleep):
    """Factory for pipelines that never really sleep."""

    def _make(client, batch_size=3, max_concurrent=2, max_retries=3, base_delay=1.0):
        return ElevationFetchPipeline(
            client,
            batch_size=batch_size,
            max_concurrent=max_concurrent,
            rate_limiter=RateLimiter(0.0, sleep=recording_sleep),
            max_retries=max_retries,
            retry_base_delay_s=base_delay,
            sleep=recording_sleep,
        )

    return _make


@pytest.fixture
def mock_artifact_store():
    """Mock artifact store."""
    store = AsyncMock()
    store.store = AsyncMock(return_value=None)
    store.retrieve = AsyncMock(return_value=b"{}")
    return store


@pytest.fixture
def mock_manager(mock_artifact_store, fake_client, small_config):
    """LOSManager backed by the fake elevation client and a mocked store."""
    from chuk_mcp_los.core.los_manager import LOSManager

    manager = LOSManager(config=small_config, client=fake_client)
    manager._get_store = MagicMock(return_value=mock_artifact_store)
    return manager


@pytest.fixture
def capture_tools():
    """Register a tool module against a fake MCP and return name -> coroutine."""

    def _capture(register, manager):
        tools = {}
        mcp = MagicMock()

        def capture_tool(**kwargs):
            def decorator(fn):
                tools[fn.__name__] = fn
                return fn

            return decorator

        mcp.tool = capture_tool
        register(mcp, manager)
        return tools

    return _capture
