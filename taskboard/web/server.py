"""Taskboard Web Server - Entry point for running the HTTP API."""

import logging
from typing import Optional

import uvicorn

from taskboard.config import Config
from taskboard.utils.logs import setup_logger

from .app import create_app

logger = logging.getLogger(__name__)


def start_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    debug: Optional[bool] = None,
    config: Optional[Config] = None,
) -> None:
    """Start the web server programmatically.

    Args:
        host: Host to bind the server to (defaults to the configured host)
        port: Port to bind the server to (defaults to the configured port)
        debug: Enable debug logging
        config: Preloaded configuration
    """
    config = config or Config.load_config()
    host = host or config.server.host
    port = port or config.server.port
    debug = config.server.debug if debug is None else debug

    setup_logger(config.logging.directory, "DEBUG" if debug else config.logging.level)

    app = create_app(config)
    logger.info(f"Starting Taskboard on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="debug" if debug else "info")


def main() -> int:
    """Entry point for the web server."""
    start_server()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
