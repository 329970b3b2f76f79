"""
tests.conftest

Shared stubs for the Unleash client capability.

Responsibilities:
- Provide an in-memory `FeatureClient` and a controllable client factory.
- Provide a settings object that never touches a real Unleash server or NAIS manifest.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from unleash_proxy.settings import Settings

FlagValue = bool | Callable[[dict[str, Any]], bool]


class StubFeatureClient:
    def __init__(self, app_name: str, flags: Mapping[str, FlagValue] | None = None) -> None:
        self.app_name = app_name
        self.flags = dict(flags or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.destroyed = False
        self.error: Exception | None = None
        # Set last, so a half-built instance is detectable.
        self.constructed = True

    def is_enabled(self, feature_name: str, context: dict[str, Any] | None = None) -> bool:
        ctx = dict(context or {})
        self.calls.append((feature_name, ctx))
        if self.error is not None:
            raise self.error
        value = self.flags.get(feature_name, False)
        return value(ctx) if callable(value) else value

    def destroy(self) -> None:
        self.destroyed = True


class StubClientFactory:
    """
    - `fail`: app names whose construction raises immediately
    - `gates`: per-app events a construction blocks on before completing
    """

    def __init__(
        self,
        *,
        flags: Mapping[str, Mapping[str, FlagValue]] | None = None,
        fail: tuple[str, ...] = (),
        gates: Mapping[str, threading.Event] | None = None,
    ) -> None:
        self.flags = dict(flags or {})
        self.fail = frozenset(fail)
        self.gates = dict(gates or {})
        self.started: list[str] = []
        self.clients: dict[str, StubFeatureClient] = {}
        self._lock = threading.Lock()

    def __call__(self, app_name: str, listener: Any) -> StubFeatureClient:
        with self._lock:
            self.started.append(app_name)
        if app_name in self.fail:
            error = ConnectionError(f"upstream unavailable for {app_name}")
            listener.on_error(error)
            raise error

        gate = self.gates.get(app_name)
        if gate is not None:
            # Bounded so a broken test cannot hang the suite.
            gate.wait(timeout=10)

        client = StubFeatureClient(app_name, self.flags.get(app_name))
        with self._lock:
            self.clients[app_name] = client
        listener.on_ready()
        return client


@pytest.fixture
def settings() -> Settings:
    return Settings(
        unleash_server_api_url="http://unleash.test",
        unleash_server_api_token="test-token",
        unleash_server_api_env="test",
        nais_config_path="does-not-exist.yaml",
        otel_exporter_otlp_endpoint="",
    )


# --- Module Notes -----------------------------------------------------------
# The stubs satisfy `clients.unleash.FeatureClient` / `ClientFactory` structurally.
