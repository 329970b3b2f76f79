"""
unleash_proxy.api.routers.features

Feature check endpoint.

Responsibilities:
- Accept `POST|QUERY /features/{flagName}` with a JSON body naming the caller app.
- Run validation in order: method, flag name, body, caller identity, registry lookup.
- Map request errors to HTTP status codes; record metrics and spans for every outcome.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, HTTPException, Request
from opentelemetry.trace import Status, StatusCode

from unleash_proxy.api.deps import allow_list_from_app, dispatcher_from_app
from unleash_proxy.features.dispatcher import Dispatcher
from unleash_proxy.features.errors import FeatureRequestError
from unleash_proxy.features.validation import (
    FeatureResponse,
    parse_request_body,
    validate_flag_name,
    validate_method,
)
from unleash_proxy.observability.logging import get_logger
from unleash_proxy.observability.metrics import record_feature_error, record_feature_request
from unleash_proxy.observability.tracing import get_tracer

log = get_logger(__name__)

router = APIRouter(tags=["features"])

PATH_PREFIX = "/features/"

# Every verb is routed here so unsupported ones are rejected (and counted) by the validator.
_ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "QUERY"]


@router.api_route(
    PATH_PREFIX + "{flag_name:path}",
    methods=_ROUTED_METHODS,
    response_model=FeatureResponse,
    include_in_schema=False,
)
async def check_feature(
    request: Request,
    flag_name: str,
    dispatcher: Dispatcher = Depends(dispatcher_from_app),
    allowed: tuple[str, ...] = Depends(allow_list_from_app),
) -> FeatureResponse:
    start = time.perf_counter()
    tracer = get_tracer()

    with tracer.start_as_current_span(
        "feature_check",
        attributes={"http.method": request.method, "http.path": request.url.path},
    ) as span:
        try:
            validate_method(request.method)
            validate_flag_name(flag_name)
            span.set_attribute("feature.name", flag_name)

            body = parse_request_body(await request.body(), allowed=allowed)
            span.set_attribute("request.app_name", body.caller_app_name)
            span.set_attribute("request.pod_name", body.pod_name)

            with tracer.start_as_current_span(
                "unleash.is_enabled",
                attributes={
                    "feature.name": flag_name,
                    "user_id": body.user_identifier,
                    "app_name": body.caller_app_name,
                    "pod_name": body.pod_name,
                },
            ) as eval_span:
                enabled = dispatcher.evaluate(
                    body.caller_app_name,
                    flag_name,
                    user_id=body.user_identifier,
                    remote_address=request.client.host if request.client else "",
                    properties={"podName": body.pod_name},
                )
                eval_span.set_attribute("feature.enabled", enabled)
        except FeatureRequestError as e:
            span.set_status(Status(StatusCode.ERROR, e.error_type))
            span.set_attribute("error.type", e.error_type)
            record_feature_error(e.error_type)
            report = log.error if e.status_code >= 500 else log.warning
            report(
                "feature_check_rejected",
                error_type=e.error_type,
                feature=flag_name,
                detail=str(e),
            )
            raise HTTPException(status_code=e.status_code, detail=str(e)) from e

        span.set_attribute("feature.enabled", enabled)

    duration = time.perf_counter() - start
    record_feature_request(
        feature=flag_name,
        app_name=body.caller_app_name,
        enabled=enabled,
        duration=duration,
    )
    log.debug(
        "feature_check",
        feature=flag_name,
        enabled=enabled,
        user_id=body.user_identifier,
        app_name=body.caller_app_name,
        pod_name=body.pod_name,
        duration_ms=round(duration * 1000, 3),
    )
    return FeatureResponse(enabled=enabled)


# --- Module Notes -----------------------------------------------------------
# The body is read manually (not as a FastAPI body parameter) so that flag-name errors win
# over body errors and malformed JSON maps to 400 rather than FastAPI's 422.
