"""Entrypoint for the AWS ChatOps console."""

from __future__ import annotations

import sys
from pathlib import Path

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # pragma: no cover

from aws_chatops import __version__
from aws_chatops.config import load_settings
from aws_chatops.logging_utils import configure_logging, get_logger


def run_entrypoint() -> None:
    """Run the HTTP server; in socket mode the Slack bot starts with it."""
    settings = load_settings()
    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Initializing AWS ChatOps v%s (mode=%s)", __version__, settings.server.mode
    )
    logger.info("Log file configured at: %s", settings.logging.file)

    from aws_chatops.transport.http_server import create_http_app

    try:
        import uvicorn
    except ImportError as exc:
        raise RuntimeError("uvicorn is required to run the ChatOps server") from exc

    app = create_http_app()
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        ws="none",
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
