"""
unleash_proxy.clients.unleash

Upstream flag-evaluation capability backed by the Unleash Python SDK.

Responsibilities:
- Define the `FeatureClient` protocol the registry and dispatcher depend on.
- Construct one `UnleashClient` per caller app (shared URL/token/environment, caller as app_name).
- Block construction until the client's first synchronization with Unleash (READY event).
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Protocol

from UnleashClient import UnleashClient
from UnleashClient.events import UnleashEventType

from unleash_proxy.settings import Settings


class FeatureClient(Protocol):
    def is_enabled(self, feature_name: str, context: dict[str, Any] | None = None) -> bool: ...

    def destroy(self) -> None: ...


class ClientListener(Protocol):
    def __call__(self, event: Any) -> None: ...

    def on_ready(self) -> None: ...

    def on_error(self, error: BaseException) -> None: ...


# (app_name, listener) -> ready client; blocks until synchronized or raises.
ClientFactory = Callable[[str, ClientListener], FeatureClient]


class UnleashNotReadyError(Exception):
    pass


class UnleashClientFactory:
    """
    Builds Unleash clients that all point at the same server, token and environment.
    Each client keeps a local toggle snapshot refreshed by its own background scheduler,
    so `is_enabled` never performs network I/O on the request path.
    """

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings

    def __call__(self, app_name: str, listener: ClientListener) -> FeatureClient:
        ready = threading.Event()

        def on_event(event: Any) -> None:
            if getattr(event, "event_type", None) == UnleashEventType.READY:
                ready.set()
            listener(event)

        client = UnleashClient(
            url=self._settings.unleash_api_url,
            app_name=app_name,
            environment=self._settings.unleash_server_api_env,
            refresh_interval=self._settings.unleash_refresh_interval_seconds,
            metrics_interval=self._settings.unleash_metrics_interval_seconds,
            custom_headers={"Authorization": self._settings.unleash_server_api_token},
            event_callback=on_event,
        )

        try:
            client.initialize_client()
            timeout = self._settings.unleash_ready_timeout_seconds
            if not ready.wait(timeout=timeout):
                raise UnleashNotReadyError(
                    f"Unleash client for {app_name} not ready after {timeout}s"
                )
        except Exception as e:
            listener.on_error(e)
            # Scheduler jobs only exist once initialize_client succeeded.
            if client.is_initialized:
                client.destroy()
            raise

        return client


# --- Module Notes -----------------------------------------------------------
# Tests substitute a plain callable for `UnleashClientFactory`; anything matching
# `ClientFactory` can back the registry.
