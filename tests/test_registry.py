"""
tests.test_registry

Client registry lifecycle.

Responsibilities:
- Concurrent initialization behind a full barrier, with aggregate failures.
- One-shot readiness and lookup visibility during startup.
- Release of every client on close.
"""

from __future__ import annotations

import asyncio
import threading

import pytest

from tests.conftest import StubClientFactory, StubFeatureClient
from unleash_proxy.clients.registry import AggregateInitializationError, ClientRegistry


async def _wait_until(predicate, timeout: float = 5.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_all_clients_ready() -> None:
    factory = StubClientFactory()
    registry = ClientRegistry(factory=factory)

    await registry.initialize(["app1", "app2"])

    assert registry.is_ready()
    assert isinstance(registry.get("app1"), StubFeatureClient)
    assert isinstance(registry.get("app2"), StubFeatureClient)
    assert registry.get("app3") is None
    assert sorted(registry.app_names()) == ["app1", "app2"]


@pytest.mark.asyncio
async def test_one_client_per_distinct_app() -> None:
    factory = StubClientFactory()
    registry = ClientRegistry(factory=factory)

    await registry.initialize(["app1", "app2", "app1"])

    assert sorted(factory.started) == ["app1", "app2"]


@pytest.mark.asyncio
async def test_initialize_waits_for_every_construction() -> None:
    gate = threading.Event()
    apps = ["app1", "app2", "app3", "app4"]
    factory = StubClientFactory(gates={app: gate for app in apps})
    registry = ClientRegistry(factory=factory)

    task = asyncio.create_task(registry.initialize(apps))
    try:
        # All constructions run in parallel, so every one starts before any is released.
        await _wait_until(lambda: len(factory.started) == len(apps))
        await asyncio.sleep(0.05)
        assert not task.done()
        assert not registry.is_ready()
        assert registry.app_names() == []
    finally:
        gate.set()

    await asyncio.wait_for(task, timeout=5)
    assert sorted(factory.started) == apps
    assert registry.is_ready()


@pytest.mark.asyncio
async def test_failure_does_not_cancel_pending_constructions() -> None:
    gate = threading.Event()
    factory = StubClientFactory(fail=("app2",), gates={"app1": gate, "app3": gate})
    registry = ClientRegistry(factory=factory)

    task = asyncio.create_task(registry.initialize(["app1", "app2", "app3"]))
    try:
        await _wait_until(lambda: len(factory.started) == 3)
        await asyncio.sleep(0.05)
        # app2 already failed, but the barrier still waits for app1 and app3.
        assert not task.done()
    finally:
        gate.set()

    with pytest.raises(AggregateInitializationError):
        await asyncio.wait_for(task, timeout=5)
    assert sorted(factory.clients) == ["app1", "app3"]


@pytest.mark.asyncio
async def test_one_failure_keeps_registry_not_ready() -> None:
    factory = StubClientFactory(fail=("app2",))
    registry = ClientRegistry(factory=factory)

    with pytest.raises(AggregateInitializationError) as exc:
        await registry.initialize(["app1", "app2", "app3"])

    assert exc.value.app_names == ["app2"]
    assert isinstance(exc.value.failures[0].cause, ConnectionError)
    assert "app2" in str(exc.value)
    assert not registry.is_ready()
    # Successful constructions stay registered; readiness alone gates traffic.
    assert registry.get("app1") is not None
    assert registry.get("app2") is None


@pytest.mark.asyncio
async def test_every_failure_is_reported() -> None:
    registry = ClientRegistry(factory=StubClientFactory(fail=("app1", "app3")))

    with pytest.raises(AggregateInitializationError) as exc:
        await registry.initialize(["app1", "app2", "app3"])

    assert exc.value.app_names == ["app1", "app3"]


@pytest.mark.asyncio
async def test_initialize_runs_only_once() -> None:
    registry = ClientRegistry(factory=StubClientFactory(fail=("app1",)))

    with pytest.raises(AggregateInitializationError):
        await registry.initialize(["app1"])
    with pytest.raises(RuntimeError):
        await registry.initialize(["app1"])

    assert not registry.is_ready()


@pytest.mark.asyncio
async def test_entries_become_visible_as_they_complete() -> None:
    slow = threading.Event()
    factory = StubClientFactory(gates={"slow-app": slow})
    registry = ClientRegistry(factory=factory)

    task = asyncio.create_task(registry.initialize(["fast-app", "slow-app"]))
    try:
        await _wait_until(lambda: registry.get("fast-app") is not None)
        assert registry.get("slow-app") is None
        assert not registry.is_ready()
    finally:
        slow.set()

    await asyncio.wait_for(task, timeout=5)
    assert registry.get("slow-app") is not None


@pytest.mark.asyncio
async def test_concurrent_readers_only_see_complete_entries() -> None:
    apps = [f"app{i}" for i in range(16)]
    registry = ClientRegistry(factory=StubClientFactory())
    stop = threading.Event()
    seen: list[object] = []

    def reader() -> None:
        while not stop.is_set():
            for app in apps:
                client = registry.get(app)
                if client is not None:
                    seen.append(client)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    try:
        await registry.initialize(apps)
    finally:
        stop.set()
        for t in threads:
            t.join(timeout=5)

    assert registry.is_ready()
    assert all(isinstance(c, StubFeatureClient) and c.constructed for c in seen)


@pytest.mark.asyncio
async def test_close_releases_every_client() -> None:
    factory = StubClientFactory()
    registry = ClientRegistry(factory=factory)
    await registry.initialize(["app1", "app2"])

    registry.close()

    assert all(c.destroyed for c in factory.clients.values())
    assert registry.get("app1") is None
    assert registry.app_names() == []


@pytest.mark.asyncio
async def test_close_continues_after_a_failing_release() -> None:
    factory = StubClientFactory()
    registry = ClientRegistry(factory=factory)
    await registry.initialize(["app1", "app2"])

    def broken() -> None:
        raise RuntimeError("scheduler already stopped")

    factory.clients["app1"].destroy = broken  # type: ignore[method-assign]
    registry.close()

    assert factory.clients["app2"].destroyed
    assert registry.app_names() == []


@pytest.mark.asyncio
async def test_construction_finishing_after_close_is_released() -> None:
    gate = threading.Event()
    factory = StubClientFactory(gates={"app1": gate})
    registry = ClientRegistry(factory=factory)

    task = asyncio.create_task(registry.initialize(["app1"]))
    await _wait_until(lambda: factory.started == ["app1"])
    registry.close()
    gate.set()
    await asyncio.wait_for(task, timeout=5)

    assert factory.clients["app1"].destroyed
    assert registry.get("app1") is None


# --- Module Notes -----------------------------------------------------------
# Constructions run on real threads; gates are `threading.Event`s with bounded waits.
