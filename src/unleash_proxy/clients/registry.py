"""
unleash_proxy.clients.registry

Registry of per-caller Unleash clients.

Responsibilities:
- Construct one client per allow-listed caller, concurrently, behind a full barrier.
- Serve thread-safe lookups by caller app name.
- Expose aggregate readiness (one-shot, set only when every client synchronized).
- Release every client at shutdown.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from unleash_proxy.clients.listener import UnleashEventListener
from unleash_proxy.clients.unleash import ClientFactory, ClientListener, FeatureClient
from unleash_proxy.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class InitializationFailure:
    app_name: str
    cause: BaseException


class AggregateInitializationError(Exception):
    """
    Raised after the startup barrier when one or more clients failed to construct.
    Carries every failure, not just the first.
    """

    def __init__(self, failures: list[InitializationFailure]) -> None:
        self.failures = failures
        details = "; ".join(f"{f.app_name}: {f.cause!r}" for f in failures)
        super().__init__(f"failed to initialize {len(failures)} Unleash client(s): {details}")

    @property
    def app_names(self) -> list[str]:
        return [f.app_name for f in self.failures]


class ClientRegistry:
    """
    Exclusive owner of every client entry.

    - The map and the lifecycle flags share one lock; each get/insert is its own critical section.
    - Readiness is a separate `threading.Event`, so `is_ready()` never contends with `get()`.
    """

    def __init__(
        self,
        *,
        factory: ClientFactory,
        listener_factory: Callable[[str], ClientListener] = UnleashEventListener,
    ) -> None:
        self._factory = factory
        self._listener_factory = listener_factory
        self._clients: dict[str, FeatureClient] = {}
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._started = False
        self._closed = False

    async def initialize(self, allow_list: Iterable[str]) -> None:
        with self._lock:
            if self._started:
                raise RuntimeError("client registry can only be initialized once")
            self._started = True

        apps = list(dict.fromkeys(allow_list))
        log.info("initializing_clients", count=len(apps), apps=apps)

        # One thread per caller: constructions block on upstream sync and must all run in parallel.
        loop = asyncio.get_running_loop()
        pool = ThreadPoolExecutor(max_workers=max(len(apps), 1), thread_name_prefix="unleash-init")
        try:
            results = await asyncio.gather(
                *(loop.run_in_executor(pool, self._construct, app) for app in apps),
                return_exceptions=True,
            )
        finally:
            pool.shutdown(wait=False)

        failures = [
            InitializationFailure(app_name=app, cause=result)
            for app, result in zip(apps, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            for failure in failures:
                log.error(
                    "client_initialization_failed",
                    app_name=failure.app_name,
                    error=repr(failure.cause),
                )
            raise AggregateInitializationError(failures)

        self._ready.set()
        log.info("clients_ready", count=len(apps))

    def _construct(self, app_name: str) -> None:
        log.info("initializing_client", app_name=app_name)
        client = self._factory(app_name, self._listener_factory(app_name))

        with self._lock:
            if not self._closed:
                self._clients[app_name] = client
                return

        # Shutdown raced ahead of this construction; never publish a client nobody will release.
        log.warning("client_discarded_after_close", app_name=app_name)
        client.destroy()

    def get(self, app_name: str) -> FeatureClient | None:
        with self._lock:
            return self._clients.get(app_name)

    def is_ready(self) -> bool:
        return self._ready.is_set()

    def app_names(self) -> list[str]:
        with self._lock:
            return list(self._clients)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            for app_name, client in self._clients.items():
                log.info("closing_client", app_name=app_name)
                try:
                    client.destroy()
                except Exception:
                    log.exception("client_close_failed", app_name=app_name)
            self._clients = {}


# --- Module Notes -----------------------------------------------------------
# A failed initialize leaves the registry permanently not-ready: `initialize` cannot be
# re-run, and the entrypoint treats the aggregate error as fatal.
