"""Application entry point for the webhooker relay server."""

from __future__ import annotations

import os

import uvicorn

from webhooker.config.settings import ServerConfig


def main() -> None:
    """Start the webhooker control server and relay."""
    server = ServerConfig()
    reload = os.getenv("WEBHOOKER_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "webhooker.api.app:create_app",
        factory=True,
        host=server.host,
        port=server.port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
