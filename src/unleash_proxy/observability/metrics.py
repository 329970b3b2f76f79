"""
unleash_proxy.observability.metrics

Prometheus collectors for feature checks.

Responsibilities:
- Count feature checks by flag, caller and result.
- Track feature check latency (in-memory lookups, so buckets start well below 1ms).
- Count request failures by error type.
- Stamp every sample with the deployment labels (app, version, namespace, pod_name).
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from unleash_proxy.settings import Settings

DEFAULT_LABEL_NAMES = ("app", "version", "namespace", "pod_name")

_default_labels: dict[str, str] = dict.fromkeys(DEFAULT_LABEL_NAMES, "")

feature_requests_total = Counter(
    "feature_requests_total",
    "Total number of feature check requests, with state",
    [*DEFAULT_LABEL_NAMES, "feature", "app_name", "enabled"],
)

feature_request_duration_seconds = Histogram(
    "feature_request_duration_seconds",
    "Duration of feature check requests in seconds",
    [*DEFAULT_LABEL_NAMES, "feature", "app_name"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.02, 0.03, 0.04, 0.05, 0.075, 0.1, 0.125, 0.15, 0.2],
)

feature_request_errors_total = Counter(
    "feature_request_errors_total",
    "Total number of errors during feature check requests",
    [*DEFAULT_LABEL_NAMES, "error_type"],
)


def configure_metrics(settings: Settings) -> None:
    _default_labels.update(
        app=settings.nais_app_name,
        version=settings.app_version or settings.otel_service_version,
        namespace=settings.nais_namespace,
        pod_name=settings.nais_pod_name,
    )


def default_labels() -> dict[str, str]:
    return dict(_default_labels)


def record_feature_request(*, feature: str, app_name: str, enabled: bool, duration: float) -> None:
    feature_requests_total.labels(
        **_default_labels, feature=feature, app_name=app_name, enabled=str(enabled).lower()
    ).inc()
    feature_request_duration_seconds.labels(
        **_default_labels, feature=feature, app_name=app_name
    ).observe(duration)


def record_feature_error(error_type: str) -> None:
    feature_request_errors_total.labels(**_default_labels, error_type=error_type).inc()


# --- Module Notes -----------------------------------------------------------
# Collectors live on the default registry; `api.app` mounts `make_asgi_app()` at /metrics.
# prometheus_client has no registry-wide constant labels, so the deployment labels are
# ordinary label names filled in from `configure_metrics`.
