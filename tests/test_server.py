"""Tests for server.py and async_server.py."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def clean_server_import():
    """
    Remove cached server modules so each test re-imports them with fresh
    patches in place.
    """
    prefixes = ("chuk_mcp_los.server", "chuk_mcp_los.async_server")
    saved = {k: sys.modules.pop(k) for k in list(sys.modules) if k.startswith(prefixes)}
    yield
    for k in list(sys.modules):
        if k.startswith(prefixes):
            sys.modules.pop(k, None)
    sys.modules.update(saved)


@pytest.fixture
def store_patches():
    """Patch ArtifactStore and set_global_artifact_store; yields both mocks."""
    mock_store_cls = MagicMock(name="ArtifactStore")
    mock_set_global = MagicMock(name="set_global_artifact_store")
    with (
        patch("chuk_artifacts.ArtifactStore", mock_store_cls),
        patch("chuk_mcp_server.set_global_artifact_store", mock_set_global),
    ):
        yield mock_store_cls, mock_set_global


def _init_with_env(env):
    with patch.dict(os.environ, env, clear=True):
        from chuk_mcp_los.server import _init_artifact_store

        return _init_artifact_store()


# =====================================================================
# _resolve_storage / _init_artifact_store
# =====================================================================


class TestResolveStorage:
    """Provider selection from the environment."""

    def test_default_memory(self, clean_server_import):
        with patch.dict(os.environ, {}, clear=True):
            from chuk_mcp_los.server import _resolve_storage

            assert _resolve_storage() == ("memory", None)

    def test_s3_without_credentials(self, clean_server_import):
        with patch.dict(os.environ, {"CHUK_ARTIFACTS_PROVIDER": "s3"}, clear=True):
            from chuk_mcp_los.server import _resolve_storage

            assert _resolve_storage() is None

    def test_filesystem_without_path_falls_back(self, clean_server_import):
        with patch.dict(os.environ, {"CHUK_ARTIFACTS_PROVIDER": "filesystem"}, clear=True):
            from chuk_mcp_los.server import _resolve_storage

            assert _resolve_storage() == ("memory", None)


class TestInitArtifactStoreMemory:
    """No env vars set -- falls back to the memory provider."""

    def test_default_memory_provider(self, clean_server_import, store_patches):
        mock_store_cls, mock_set_global = store_patches

        assert _init_with_env({}) is True
        mock_store_cls.assert_called_once_with(
            storage_provider="memory",
            session_provider="memory",
        )
        mock_set_global.assert_called_once_with(mock_store_cls.return_value)

    def test_redis_url_sets_redis_session(self, clean_server_import, store_patches):
        mock_store_cls, _ = store_patches

        assert _init_with_env({"REDIS_URL": "redis://cache.example.com:6379"}) is True
        mock_store_cls.assert_called_once_with(
            storage_provider="memory",
            session_provider="redis",
        )


class TestInitArtifactStoreS3:
    """S3 provider."""

    def test_s3_provider_success(self, clean_server_import, store_patches):
        mock_store_cls, mock_set_global = store_patches
        env = {
            "CHUK_ARTIFACTS_PROVIDER": "s3",
            "BUCKET_NAME": "coverage-bucket",
            "AWS_ACCESS_KEY_ID": "AKID",
            "AWS_SECRET_ACCESS_KEY": "SECRET",
            "AWS_ENDPOINT_URL_S3": "https://s3.example.com",
        }

        assert _init_with_env(env) is True
        mock_store_cls.assert_called_once_with(
            storage_provider="s3",
            session_provider="memory",
            bucket="coverage-bucket",
        )
        mock_set_global.assert_called_once()

    @pytest.mark.parametrize(
        "env",
        [
            {"CHUK_ARTIFACTS_PROVIDER": "s3"},
            {
                "CHUK_ARTIFACTS_PROVIDER": "s3",
                "AWS_ACCESS_KEY_ID": "AKID",
                "AWS_SECRET_ACCESS_KEY": "SECRET",
            },
            {
                "CHUK_ARTIFACTS_PROVIDER": "s3",
                "BUCKET_NAME": "bucket",
                "AWS_ACCESS_KEY_ID": "AKID",
            },
        ],
    )
    def test_s3_incomplete_config_returns_false(self, clean_server_import, store_patches, env):
        mock_store_cls, mock_set_global = store_patches

        assert _init_with_env(env) is False
        mock_store_cls.assert_not_called()
        mock_set_global.assert_not_called()


class TestInitArtifactStoreFilesystem:
    """Filesystem provider."""

    def test_filesystem_with_path(self, clean_server_import, store_patches, tmp_path):
        mock_store_cls, _ = store_patches
        artifacts_dir = str(tmp_path / "a" / "b" / "artifacts")
        env = {"CHUK_ARTIFACTS_PROVIDER": "filesystem", "CHUK_ARTIFACTS_PATH": artifacts_dir}

        assert _init_with_env(env) is True
        assert Path(artifacts_dir).is_dir()
        mock_store_cls.assert_called_once_with(
            storage_provider="filesystem",
            session_provider="memory",
            bucket=artifacts_dir,
        )

    def test_filesystem_no_path_uses_memory(self, clean_server_import, store_patches):
        mock_store_cls, _ = store_patches

        assert _init_with_env({"CHUK_ARTIFACTS_PROVIDER": "filesystem"}) is True
        mock_store_cls.assert_called_once_with(
            storage_provider="memory",
            session_provider="memory",
        )


class TestInitArtifactStoreErrors:
    """Failures while constructing or installing the store."""

    def test_constructor_raises(self, clean_server_import, store_patches):
        mock_store_cls, mock_set_global = store_patches
        mock_store_cls.side_effect = RuntimeError("connection refused")

        assert _init_with_env({}) is False
        mock_set_global.assert_not_called()

    def test_set_global_raises(self, clean_server_import, store_patches):
        _, mock_set_global = store_patches
        mock_set_global.side_effect = RuntimeError("global store error")

        assert _init_with_env({}) is False


# =====================================================================
# main()
# =====================================================================


def _run_main(argv, env=None, isatty=None):
    """Import server, swap in mocks for mcp/manager, run main()."""
    mock_mcp = MagicMock(name="mcp")
    mock_manager = MagicMock(name="manager")

    with patch.dict(os.environ, env or {}, clear=True):
        with (
            patch("chuk_artifacts.ArtifactStore", MagicMock()),
            patch("chuk_mcp_server.set_global_artifact_store", MagicMock()),
        ):
            from chuk_mcp_los import server

            server.mcp = mock_mcp
            server.manager = mock_manager

            with patch("sys.argv", argv), patch("sys.stdin") as mock_stdin:
                mock_stdin.isatty.return_value = isatty if isatty is not None else True
                server.main()

    return mock_mcp, mock_manager


class TestMain:
    def test_stdio_mode(self, clean_server_import):
        mock_mcp, _ = _run_main(["server", "stdio"])
        mock_mcp.run.assert_called_once_with(stdio=True)

    def test_http_mode_custom_host_port(self, clean_server_import):
        mock_mcp, _ = _run_main(["server", "http", "--host", "127.0.0.1", "--port", "9000"])
        mock_mcp.run.assert_called_once_with(host="127.0.0.1", port=9000, stdio=False)

    def test_http_mode_defaults(self, clean_server_import):
        mock_mcp, _ = _run_main(["server", "http"])
        mock_mcp.run.assert_called_once_with(host="0.0.0.0", port=8004, stdio=False)

    def test_auto_detect_stdio_from_env(self, clean_server_import):
        mock_mcp, _ = _run_main(["server"], env={"MCP_STDIO": "1"})
        mock_mcp.run.assert_called_once_with(stdio=True)

    def test_auto_detect_stdio_when_not_tty(self, clean_server_import):
        mock_mcp, _ = _run_main(["server"], isatty=False)
        mock_mcp.run.assert_called_once_with(stdio=True)

    def test_auto_detect_http_when_tty(self, clean_server_import):
        mock_mcp, _ = _run_main(["server"], isatty=True)
        mock_mcp.run.assert_called_once_with(host="0.0.0.0", port=8004, stdio=False)

    def test_manager_closed_on_exit(self, clean_server_import):
        _, mock_manager = _run_main(["server", "stdio"])
        mock_manager.close.assert_called_once()

    def test_manager_closed_when_run_fails(self, clean_server_import):
        mock_manager = MagicMock(name="manager")
        with patch.dict(os.environ, {}, clear=True):
            from chuk_mcp_los import server

            server.mcp = MagicMock()
            server.mcp.run.side_effect = KeyboardInterrupt
            server.manager = mock_manager

            with patch.object(server, "_init_artifact_store"), patch("sys.argv", ["s", "stdio"]):
                with pytest.raises(KeyboardInterrupt):
                    server.main()

        mock_manager.close.assert_called_once()

    def test_init_artifact_store_called(self, clean_server_import):
        with patch.dict(os.environ, {}, clear=True):
            from chuk_mcp_los import server

            server.mcp = MagicMock()
            server.manager = MagicMock()

            with (
                patch.object(server, "_init_artifact_store") as mock_init,
                patch("sys.argv", ["server", "stdio"]),
            ):
                server.main()

            mock_init.assert_called_once()


# =====================================================================
# async_server.py
# =====================================================================


class TestAsyncServer:
    def test_mcp_is_chuk_mcp_server_instance(self):
        from chuk_mcp_server import ChukMCPServer
        from chuk_mcp_los.async_server import mcp

        assert isinstance(mcp, ChukMCPServer)

    def test_mcp_name(self):
        from chuk_mcp_los.async_server import mcp

        assert mcp.server_info.name == "chuk-mcp-los"

    def test_manager_is_los_manager(self):
        from chuk_mcp_los.async_server import manager
        from chuk_mcp_los.core.los_manager import LOSManager

        assert isinstance(manager, LOSManager)

    def test_manager_config_from_env(self, clean_server_import):
        with patch.dict(os.environ, {"LOS_NUM_RADIALS": "72"}, clear=True):
            from chuk_mcp_los.async_server import manager

            assert manager.config.num_radials == 72

    def test_mcp_from_server_is_same_as_async_server(self):
        from chuk_mcp_los.async_server import mcp as async_mcp
        from chuk_mcp_los.server import mcp as server_mcp

        assert server_mcp is async_mcp
