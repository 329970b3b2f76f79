"""
tests.test_main

Process entrypoint behaviour.

Responsibilities:
- A failed client initialization stops the server and exits with status 1.
- Clients that did initialize are released on the way out.
- An unreadable allow-list exits before anything is served.
"""

from __future__ import annotations

import pytest

from tests.conftest import StubClientFactory
from unleash_proxy.api import __main__ as entrypoint
from unleash_proxy.api.app import create_app
from unleash_proxy.settings import Settings


@pytest.mark.asyncio
async def test_serve_exits_nonzero_when_a_client_fails(
    settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    factory = StubClientFactory(fail=("app2",))
    monkeypatch.setattr(
        entrypoint,
        "create_app",
        lambda *, settings: create_app(
            settings=settings, allow_list=["app1", "app2", "app3"], client_factory=factory
        ),
    )
    local = settings.model_copy(
        update={"api_host": "127.0.0.1", "port": 0, "shutdown_timeout_seconds": 1}
    )

    assert await entrypoint.serve(local) == 1

    assert sorted(factory.started) == ["app1", "app2", "app3"]
    assert sorted(factory.clients) == ["app1", "app3"]
    assert all(c.destroyed for c in factory.clients.values())


@pytest.mark.asyncio
async def test_serve_exits_nonzero_without_allow_list(settings: Settings) -> None:
    assert settings.nais_config_path == "does-not-exist.yaml"

    assert await entrypoint.serve(settings) == 1


# --- Module Notes -----------------------------------------------------------
# Port 0 lets uvicorn bind an ephemeral port; the failing construction raises at once, so the
# server is told to exit before it ever serves a request.
