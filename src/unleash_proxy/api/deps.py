"""
unleash_proxy.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for the client registry, dispatcher and allow-list.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from fastapi import Request

from unleash_proxy.clients.registry import ClientRegistry
from unleash_proxy.features.dispatcher import Dispatcher


def registry_from_app(request: Request) -> ClientRegistry:
    # Created once in `unleash_proxy.api.app.create_app`.
    return request.app.state.registry  # type: ignore[attr-defined]


def dispatcher_from_app(request: Request) -> Dispatcher:
    return request.app.state.dispatcher  # type: ignore[attr-defined]


def allow_list_from_app(request: Request) -> tuple[str, ...]:
    return request.app.state.allow_list  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# Keeping the registry on app.state (not a module global) lets each test build an isolated app.
