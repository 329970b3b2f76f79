"""
unleash_proxy.features

Feature check request path.

Responsibilities:
- Validate feature check requests.
- Dispatch a validated request to the caller's Unleash client.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# This package is HTTP-agnostic; `api.routers.features` maps its errors to status codes.
