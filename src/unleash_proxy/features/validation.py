"""
unleash_proxy.features.validation

Structural validation of feature check requests.

Responsibilities:
- Enforce the accepted HTTP verbs (POST and QUERY).
- Enforce Unleash feature name rules (1-100 chars, not '.'/'..', path-segment safe).
- Parse the JSON body into a typed `FeatureRequest`.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from unleash_proxy.features.errors import (
    InvalidFlagNameError,
    MalformedBodyError,
    MethodNotAllowedError,
    MissingCallerIdentityError,
    MissingFlagNameError,
)

ALLOWED_METHODS = frozenset({"POST", "QUERY"})

MAX_FLAG_NAME_LENGTH = 100

# Reserved characters that may appear unescaped inside a single path segment.
_SEGMENT_SAFE = "$&+:=@"


class FeatureRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_identifier: str = Field(default="", alias="userIdentifier")
    caller_app_name: str = Field(default="", alias="callerAppName")
    pod_name: str = Field(default="", alias="podName")

    @field_validator("user_identifier", "caller_app_name", "pod_name", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class FeatureResponse(BaseModel):
    enabled: bool


def is_valid_flag_name(name: str) -> bool:
    if not 1 <= len(name) <= MAX_FLAG_NAME_LENGTH:
        return False
    if name in (".", ".."):
        return False
    # URL-friendly: escaping the name as one path segment must be a no-op.
    return quote(name, safe=_SEGMENT_SAFE) == name


def validate_method(method: str) -> None:
    if method.upper() not in ALLOWED_METHODS:
        raise MethodNotAllowedError(method)


def validate_flag_name(name: str) -> str:
    if not name:
        raise MissingFlagNameError()
    if not is_valid_flag_name(name):
        raise InvalidFlagNameError(name)
    return name


def parse_request_body(raw: bytes, *, allowed: Iterable[str]) -> FeatureRequest:
    try:
        body = FeatureRequest.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedBodyError(str(e)) from e

    if not body.caller_app_name:
        raise MissingCallerIdentityError(allowed)
    return body


# --- Module Notes -----------------------------------------------------------
# Validation runs before any registry lookup; rejected requests never touch a client.
