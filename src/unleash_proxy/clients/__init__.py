"""
unleash_proxy.clients

Per-caller Unleash client package.

Responsibilities:
- Define the upstream flag-evaluation capability and its Unleash-backed factory.
- Own one client per allow-listed caller via the client registry.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Request handling depends on `ClientRegistry` and the `FeatureClient` protocol only,
# never on the Unleash SDK directly.
