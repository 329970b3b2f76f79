"""
unleash_proxy.observability

Observability package.

Responsibilities:
- Structured logging configuration and request context propagation.
- Prometheus collectors for feature checks.
- OpenTelemetry tracer setup.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The registry and dispatcher only log; metric and span emission stays at the HTTP boundary.
