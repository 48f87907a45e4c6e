"""Uvicorn server launcher.

Console scripts must point to a callable, not an ASGI app object.
"""

from __future__ import annotations

from typing import Annotated, Optional

import typer
import uvicorn

from blogflow.config import load_settings
from blogflow.logging import configure_logging


def main(
    host: Annotated[Optional[str], typer.Option(help="Bind host (default: BLOGFLOW_API_HOST)")] = None,
    port: Annotated[Optional[int], typer.Option(help="Bind port (default: BLOGFLOW_API_PORT)")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload (dev)")] = False,
) -> None:
    """Start the blog flow API server."""

    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "blogflow.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def run() -> None:
    typer.run(main)


if __name__ == "__main__":
    run()
