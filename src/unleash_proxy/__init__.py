"""
unleash_proxy

Top-level package for the shared Unleash feature-flag proxy.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; the registry and Unleash clients are created by the app factory,
# never at import time.
