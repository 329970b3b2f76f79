"""
unleash_proxy.api

API package for the Unleash proxy service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: validation errors map to status codes, evaluation is delegated
# to `features.dispatcher`.
