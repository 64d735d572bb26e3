#!/usr/bin/env python3
"""
LOS MCP Server - Entry Point

Runs the async MCP server for Maidenhead grid lookups and radio
line-of-sight coverage over stdio (for Claude Desktop) or HTTP.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .constants import EnvVar, ServerConfig, SessionProvider, StorageProvider

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

logger = logging.getLogger(__name__)


def _resolve_storage() -> tuple[str, str | None] | None:
    """Pick the storage provider and bucket from the environment.

    Returns:
        (provider, bucket), or None when S3 is selected without credentials
    """
    provider = os.environ.get(EnvVar.ARTIFACTS_PROVIDER, StorageProvider.MEMORY)

    if provider == StorageProvider.S3:
        bucket = os.environ.get(EnvVar.BUCKET_NAME)
        credentials = [
            os.environ.get(EnvVar.AWS_ACCESS_KEY_ID),
            os.environ.get(EnvVar.AWS_SECRET_ACCESS_KEY),
        ]
        if not bucket or not all(credentials):
            logger.warning(
                "S3 provider configured but missing credentials. "
                f"Set {EnvVar.AWS_ACCESS_KEY_ID}, {EnvVar.AWS_SECRET_ACCESS_KEY}, "
                f"and {EnvVar.BUCKET_NAME}."
            )
            return None
        endpoint = os.environ.get(EnvVar.AWS_ENDPOINT_URL_S3)
        logger.info(f"Using S3 artifact storage (bucket: {bucket}, endpoint: {endpoint})")
        return provider, bucket

    if provider == StorageProvider.FILESYSTEM:
        artifacts_path = os.environ.get(EnvVar.ARTIFACTS_PATH)
        if not artifacts_path:
            logger.warning(
                f"Filesystem provider configured but {EnvVar.ARTIFACTS_PATH} not set. "
                "Defaulting to memory provider."
            )
            return StorageProvider.MEMORY, None
        Path(artifacts_path).mkdir(parents=True, exist_ok=True)
        logger.info(f"Using filesystem artifact storage (path: {artifacts_path})")
        return provider, artifacts_path

    return provider, None


def _init_artifact_store() -> bool:
    """
    Initialize the artifact store that coverage results are written to.

    Returns:
        True if artifact store was initialized, False otherwise
    """
    resolved = _resolve_storage()
    if resolved is None:
        return False
    provider, bucket = resolved
    redis_url = os.environ.get(EnvVar.REDIS_URL)

    try:
        from chuk_artifacts import ArtifactStore
        from chuk_mcp_server import set_global_artifact_store

        store_kwargs: dict[str, Any] = {
            "storage_provider": provider,
            "session_provider": SessionProvider.REDIS if redis_url else SessionProvider.MEMORY,
        }
        if bucket:
            store_kwargs["bucket"] = bucket

        set_global_artifact_store(ArtifactStore(**store_kwargs))
        logger.info(f"Artifact store initialized (provider: {provider})")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize artifact store: {e}")
        return False


# Import mcp instance and all registered tools from async server
from .async_server import manager, mcp  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=ServerConfig.DESCRIPTION)
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["stdio", "http"],
        default=None,
        help="Transport mode (stdio for Claude Desktop, http for API)",
    )
    parser.add_argument(
        "--host", default="0.0.0.0", help="Host for HTTP mode (default: 0.0.0.0)"
    )
    parser.add_argument("--port", type=int, default=8004, help="Port for HTTP mode (default: 8004)")
    return parser


def _use_stdio(mode: str | None) -> bool:
    if mode is not None:
        return mode == "stdio"
    return bool(os.environ.get(EnvVar.MCP_STDIO)) or not sys.stdin.isatty()


def main() -> None:
    """Main entry point for the MCP server."""
    # Initialize artifact store at startup, not at import time
    _init_artifact_store()

    args = _build_parser().parse_args()

    try:
        if _use_stdio(args.mode):
            print(f"{ServerConfig.NAME} starting in STDIO mode", file=sys.stderr)
            mcp.run(stdio=True)
        else:
            print(
                f"{ServerConfig.NAME} starting in HTTP mode on {args.host}:{args.port}",
                file=sys.stderr,
            )
            mcp.run(host=args.host, port=args.port, stdio=False)
    finally:
        manager.close()


if __name__ == "__main__":
    main()
