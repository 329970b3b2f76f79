"""
unleash_proxy.api.__main__

Entrypoint for running the proxy via `python -m unleash_proxy.api` (or `unleash-proxy`).

Responsibilities:
- Load settings and the caller allow-list.
- Start uvicorn first, then initialize all Unleash clients next to it.
- Treat a failed client initialization as fatal (exit status 1).
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from unleash_proxy.allowlist import AllowListError
from unleash_proxy.api.app import create_app, initialize_clients
from unleash_proxy.clients.registry import AggregateInitializationError
from unleash_proxy.observability.logging import get_logger
from unleash_proxy.settings import Settings, get_settings

log = get_logger(__name__)


async def serve(settings: Settings) -> int:
    try:
        app = create_app(settings=settings)
    except AllowListError as e:
        log.error("allow_list_invalid", error=str(e), path=settings.nais_config_path)
        return 1

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.api_host,
            port=settings.port,
            log_config=None,  # structlog
            timeout_graceful_shutdown=settings.shutdown_timeout_seconds,
        )
    )
    # Health probes are served while the clients synchronize with Unleash.
    server_task = asyncio.create_task(server.serve())

    try:
        await initialize_clients(app)
    except AggregateInitializationError as e:
        log.error("failed_to_initialize_unleash_clients", failed_apps=e.app_names, error=str(e))
        server.should_exit = True
        await server_task
        # uvicorn skips the lifespan shutdown when told to exit during its own startup.
        await asyncio.to_thread(app.state.registry.close)
        return 1

    await server_task
    return 0


def main() -> None:
    sys.exit(asyncio.run(serve(get_settings())))


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# uvicorn handles SIGINT/SIGTERM: it stops accepting connections, drains in-flight requests
# within `timeout_graceful_shutdown`, then the app lifespan releases every client.
