"""
unleash_proxy.api.app

FastAPI app factory for the Unleash proxy service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/metrics.
- Create the client registry and dispatcher once and stash them on app.state.
- Release every Unleash client and flush traces on shutdown.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from unleash_proxy import __version__
from unleash_proxy.allowlist import load_inbound_apps
from unleash_proxy.api.routers.features import router as features_router
from unleash_proxy.api.routers.health import router as health_router
from unleash_proxy.clients.registry import ClientRegistry
from unleash_proxy.clients.unleash import ClientFactory, UnleashClientFactory
from unleash_proxy.features.dispatcher import Dispatcher
from unleash_proxy.observability.logging import configure_logging, get_logger
from unleash_proxy.observability.middleware import RequestContextMiddleware
from unleash_proxy.observability.metrics import configure_metrics
from unleash_proxy.observability.tracing import configure_telemetry, instrument_app
from unleash_proxy.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    allow_list: Iterable[str] | None = None,
    client_factory: ClientFactory | None = None,
) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    apps = (
        tuple(dict.fromkeys(allow_list))
        if allow_list is not None
        else load_inbound_apps(settings.nais_config_path)
    )
    registry = ClientRegistry(factory=client_factory or UnleashClientFactory(settings=settings))
    dispatcher = Dispatcher(
        registry=registry,
        environment=settings.unleash_server_api_env,
        allowed=apps,
    )
    configure_metrics(settings)
    telemetry = configure_telemetry(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log.info(
            "startup",
            url=settings.unleash_api_url,
            environment=settings.unleash_server_api_env,
            has_api_key=bool(settings.unleash_server_api_token),
            apps=list(apps),
        )
        yield
        # Runs after uvicorn drained in-flight requests (bounded by the graceful timeout).
        await asyncio.to_thread(registry.close)
        if telemetry is not None:
            telemetry.shutdown()
        log.info("shutdown")

    app = FastAPI(
        title="Unleash Proxy",
        version=__version__,
        docs_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.allow_list = apps
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(features_router)
    app.mount("/metrics", make_asgi_app())
    if telemetry is not None:
        instrument_app(
            app,
            tracer_provider=telemetry.tracer_provider,
            meter_provider=telemetry.meter_provider,
        )

    return app


async def initialize_clients(app: FastAPI) -> None:
    """
    Start every per-caller Unleash client and wait for all of them.
    Raises `AggregateInitializationError` when any client fails; readiness then stays false.
    """

    registry: ClientRegistry = app.state.registry
    await registry.initialize(app.state.allow_list)
    log.info("accepting_feature_checks", apps=registry.app_names())


# --- Module Notes -----------------------------------------------------------
# Client initialization is not part of the lifespan: it runs next to the server (see
# `api.__main__`) so liveness/readiness probes are answered while clients synchronize.
