"""Tests for chuk_mcp_los.constants."""

import re

import pytest

from chuk_mcp_los.constants import (
    COVERAGE_TOOLS,
    DEFAULT_K_FACTOR,
    DEFAULT_MAX_DISTANCE_KM,
    DEFAULT_NUM_RADIALS,
    DEFAULT_PRECISION,
    DEFAULT_SAMPLE_INTERVAL_KM,
    ELEVATION_TOOLS,
    GRID_LOCATOR_PATTERN,
    GRID_PRECISIONS,
    GRID_TIERS,
    GRID_TOOLS,
    MAX_RETAINED_COVERAGES,
    RETRY_ATTEMPTS,
    RETRY_BASE_DELAY_S,
    EnvVar,
    ErrorMessages,
    ServerConfig,
    SessionProvider,
    StorageProvider,
    SuccessMessages,
)

# ── ServerConfig ────────────────────────────────────────────────────


class TestServerConfig:
    def test_name(self):
        assert ServerConfig.NAME == "chuk-mcp-los"

    def test_version(self):
        assert ServerConfig.VERSION == "0.1.0"

    def test_description_is_nonempty(self):
        assert len(ServerConfig.DESCRIPTION) > 10


# ── Providers / env ─────────────────────────────────────────────────


class TestProviders:
    def test_storage_providers(self):
        assert {StorageProvider.MEMORY, StorageProvider.S3, StorageProvider.FILESYSTEM} == {
            "memory",
            "s3",
            "filesystem",
        }

    def test_session_providers(self):
        assert SessionProvider.MEMORY == "memory"
        assert SessionProvider.REDIS == "redis"


class TestEnvVar:
    def test_los_settings_are_prefixed(self):
        names = [
            EnvVar.ELEVATION_API_URL,
            EnvVar.BATCH_SIZE,
            EnvVar.MAX_CONCURRENT,
            EnvVar.REQUEST_INTERVAL_S,
            EnvVar.NUM_RADIALS,
            EnvVar.MAX_DISTANCE_KM,
            EnvVar.SAMPLE_INTERVAL_KM,
            EnvVar.K_FACTOR,
            EnvVar.MAX_RETRIES,
        ]
        assert all(name.startswith("LOS_") for name in names)
        assert len(set(names)) == len(names)

    def test_artifact_settings(self):
        assert EnvVar.ARTIFACTS_PROVIDER == "CHUK_ARTIFACTS_PROVIDER"
        assert EnvVar.ARTIFACTS_PATH == "CHUK_ARTIFACTS_PATH"


# ── Grid ────────────────────────────────────────────────────────────


class TestGridConstants:
    def test_precisions(self):
        assert GRID_PRECISIONS == [2, 4, 6, 8, 10]
        assert DEFAULT_PRECISION in GRID_PRECISIONS

    def test_one_tier_per_pair(self):
        assert len(GRID_TIERS) == len(GRID_PRECISIONS)

    def test_tiers_nest(self):
        for (lng, lat, _, _), (next_lng, next_lat, divisions, _) in zip(GRID_TIERS, GRID_TIERS[1:]):
            assert next_lng * divisions == pytest.approx(lng)
            assert next_lat * divisions == pytest.approx(lat)

    def test_field_divisions_cover_globe(self):
        lng, lat, divisions, name = GRID_TIERS[0]
        assert name == "field"
        assert lng * divisions == 360.0
        assert lat * divisions == 180.0

    @pytest.mark.parametrize("locator", ["KN", "KN41", "kn41kb", "KN41KB58", "FN31pr58ab"])
    def test_pattern_accepts(self, locator):
        assert re.fullmatch(GRID_LOCATOR_PATTERN, locator)

    @pytest.mark.parametrize("locator", ["K", "KN4", "SS", "KN41y", "KN41kbz", "KN41kb58yz"])
    def test_pattern_rejects(self, locator):
        assert not re.fullmatch(GRID_LOCATOR_PATTERN, locator)


# ── Coverage defaults ───────────────────────────────────────────────


class TestCoverageDefaults:
    def test_radials_divide_circle(self):
        assert 360 % DEFAULT_NUM_RADIALS == 0

    def test_geometry(self):
        assert DEFAULT_MAX_DISTANCE_KM == 300.0
        assert DEFAULT_SAMPLE_INTERVAL_KM == 1.0
        assert DEFAULT_K_FACTOR == pytest.approx(4 / 3)

    def test_retry_policy(self):
        assert RETRY_ATTEMPTS == 3
        assert RETRY_BASE_DELAY_S == 1.0

    def test_retention_positive(self):
        assert MAX_RETAINED_COVERAGES > 0


class TestToolLists:
    def test_no_duplicates(self):
        tools = GRID_TOOLS + ELEVATION_TOOLS + COVERAGE_TOOLS
        assert len(tools) == len(set(tools))

    def test_prefixes(self):
        assert all(t.startswith("grid_") for t in GRID_TOOLS)
        assert all(t.startswith("elevation_") for t in ELEVATION_TOOLS)
        assert all(t.startswith("coverage_") for t in COVERAGE_TOOLS)


# ── Messages ────────────────────────────────────────────────────────


class TestMessages:
    def test_error_templates_format(self):
        assert ErrorMessages.INVALID_LOCATOR.format("ZZ") == "Invalid Maidenhead locator 'ZZ'"
        assert "5" in ErrorMessages.RATE_LIMIT_EXHAUSTED.format(5)
        assert ErrorMessages.PROVIDER_STATUS.format(503, "Service Unavailable").endswith(
            "503 Service Unavailable"
        )

    def test_success_templates_format(self):
        assert SuccessMessages.LOCATE.format("KN41kb", 6) == "KN41kb at precision 6"
        assert SuccessMessages.COVERAGE_COMPLETE.format(360, 42.123, 88.0) == (
            "Coverage computed: 360 rays, mean LOS 42.1 km, max 88.0 km"
        )
