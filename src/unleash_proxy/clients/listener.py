"""
unleash_proxy.clients.listener

Per-caller listener for Unleash client lifecycle events.

Responsibilities:
- Attribute SDK events (ready, fetched, impressions) to the caller app in structured logs.
- Classify construction errors (transient back-off vs hard failure).
"""

from __future__ import annotations

from typing import Any

from UnleashClient.events import UnleashEventType

from unleash_proxy.observability.logging import get_logger

log = get_logger(__name__)


class UnleashEventListener:
    """
    Supplied by the registry to every client it constructs, parameterized by caller identity.
    Instances are callable so they can be passed as the SDK `event_callback`.
    """

    def __init__(self, app_name: str) -> None:
        self.app_name = app_name

    def __call__(self, event: Any) -> None:
        event_type = getattr(event, "event_type", None)
        if event_type == UnleashEventType.READY:
            self.on_ready()
        elif event_type == UnleashEventType.FETCHED:
            features = getattr(event, "features", None) or {}
            log.debug("unleash_fetched", app_name=self.app_name, toggles=len(features))
        elif event_type in (UnleashEventType.FEATURE_FLAG, UnleashEventType.VARIANT):
            log.debug(
                "unleash_feature_count",
                app_name=self.app_name,
                feature=getattr(event, "feature_name", None),
                enabled=getattr(event, "enabled", None),
            )

    def on_ready(self) -> None:
        log.info("unleash_client_ready", app_name=self.app_name)

    def on_error(self, error: BaseException) -> None:
        message = str(error)
        # The SDK reports 429/5xx retries with this phrase; they resolve on their own.
        if "backing off" in message:
            log.warning("unleash_request_retry", app_name=self.app_name, warning=message)
            return
        log.error("unleash_error", app_name=self.app_name, error=message)


# --- Module Notes -----------------------------------------------------------
# HTTP-level SDK warnings go through the stdlib `UnleashClient` logger configured in
# `observability.logging`.
