"""
unleash_proxy.features.dispatcher

Routes a validated feature check to the caller's Unleash client.

Responsibilities:
- Resolve the caller's client from the registry (unknown and not-yet-ready look the same).
- Build the Unleash evaluation context and return the boolean decision verbatim.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from unleash_proxy.clients.registry import ClientRegistry
from unleash_proxy.features.errors import UnknownCallerError, UpstreamEvaluationError
from unleash_proxy.observability.logging import get_logger

log = get_logger(__name__)


class Dispatcher:
    def __init__(
        self,
        *,
        registry: ClientRegistry,
        environment: str,
        allowed: Iterable[str],
    ) -> None:
        self._registry = registry
        self._environment = environment
        # Only used to build error messages; routing is decided by the registry alone.
        self._allowed = tuple(allowed)

    def evaluate(
        self,
        app_name: str,
        flag_name: str,
        *,
        user_id: str = "",
        remote_address: str = "",
        properties: Mapping[str, str] | None = None,
    ) -> bool:
        client = self._registry.get(app_name)
        if client is None:
            raise UnknownCallerError(app_name, self._allowed)

        # currentTime is defaulted to now by the SDK.
        context: dict[str, Any] = {
            "environment": self._environment,
            "userId": user_id,
            "appName": app_name,
            "remoteAddress": remote_address,
            "properties": dict(properties or {}),
        }

        try:
            # In-memory lookup against the client's cached toggle snapshot; no retry.
            return bool(client.is_enabled(flag_name, context))
        except Exception as e:
            log.error(
                "feature_evaluation_failed",
                feature=flag_name,
                app_name=app_name,
                error=repr(e),
            )
            raise UpstreamEvaluationError(flag_name, app_name) from e


# --- Module Notes -----------------------------------------------------------
# The dispatcher holds a client reference only for the duration of one `evaluate` call.
