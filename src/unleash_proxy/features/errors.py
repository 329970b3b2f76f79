"""
unleash_proxy.features.errors

Error taxonomy for the feature check request path.

Responsibilities:
- Carry the HTTP status and the metric/span `error_type` label for each failure class.
- Build human-readable messages (caller errors list the allowed applications).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import ClassVar


class FeatureRequestError(Exception):
    status_code: ClassVar[int] = 400
    error_type: ClassVar[str] = "bad_request"


class MethodNotAllowedError(FeatureRequestError):
    status_code = 405
    error_type = "method_not_allowed"

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__("Method not allowed")


class MissingFlagNameError(FeatureRequestError):
    error_type = "missing_feature"

    def __init__(self) -> None:
        super().__init__("Feature name is required")


class InvalidFlagNameError(FeatureRequestError):
    error_type = "invalid_feature"

    def __init__(self, flag_name: str) -> None:
        self.flag_name = flag_name
        super().__init__(
            "Invalid feature name: must be URL-friendly, 1-100 characters, and not '.' or '..'"
        )


class MalformedBodyError(FeatureRequestError):
    error_type = "invalid_body"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__("Invalid JSON body")


class MissingCallerIdentityError(FeatureRequestError):
    error_type = "missing_app_name"

    def __init__(self, allowed: Iterable[str]) -> None:
        self.allowed = tuple(allowed)
        super().__init__(
            "callerAppName is required in request body, must be one of the allowed "
            f"inbound applications: {', '.join(self.allowed)}"
        )


class UnknownCallerError(FeatureRequestError):
    """
    Raised for callers that are not allow-listed *and* for allow-listed callers whose
    client is not initialized yet; the two cases are indistinguishable from outside.
    """

    error_type = "unknown_app_name"

    def __init__(self, app_name: str, allowed: Iterable[str]) -> None:
        self.app_name = app_name
        self.allowed = tuple(allowed)
        super().__init__(
            "Unknown callerAppName: must be one of the allowed inbound applications: "
            f"{', '.join(self.allowed)}"
        )


class UpstreamEvaluationError(FeatureRequestError):
    status_code = 500
    error_type = "evaluation_failed"

    def __init__(self, flag_name: str, app_name: str) -> None:
        self.flag_name = flag_name
        self.app_name = app_name
        super().__init__("Feature evaluation failed")


# --- Module Notes -----------------------------------------------------------
# Startup failures are not request errors; see `clients.registry.AggregateInitializationError`.
