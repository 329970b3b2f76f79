"""
unleash_proxy.api.routers

HTTP routers.

Responsibilities:
- Health/readiness probes.
- Feature check endpoint.
"""

# Package marker.
