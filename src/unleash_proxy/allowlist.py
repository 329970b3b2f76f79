"""
unleash_proxy.allowlist

Allow-list provider for caller applications.

Responsibilities:
- Read the inbound access policy (`spec.accessPolicy.inbound.rules`) from the NAIS manifest.
- Return the ordered, de-duplicated set of caller app names permitted to use the proxy.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


class AllowListError(Exception):
    pass


def parse_inbound_apps(document: Any) -> tuple[str, ...]:
    """
    Extract application names from a parsed NAIS manifest.
    Rules without an `application` (e.g. namespace-only rules) are skipped.
    """

    if not isinstance(document, dict):
        raise AllowListError("NAIS manifest must be a mapping")

    rules = (
        (((document.get("spec") or {}).get("accessPolicy") or {}).get("inbound") or {}).get(
            "rules"
        )
        or []
    )
    if not isinstance(rules, list):
        raise AllowListError("accessPolicy.inbound.rules must be a list")

    apps: dict[str, None] = {}
    for rule in rules:
        if not isinstance(rule, dict):
            continue
        app = rule.get("application")
        if app:
            apps[str(app)] = None

    if not apps:
        raise AllowListError("no inbound applications found in NAIS manifest")
    return tuple(apps)


def load_inbound_apps(path: str | Path) -> tuple[str, ...]:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise AllowListError(f"cannot read NAIS manifest {path}: {e}") from e

    try:
        document = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise AllowListError(f"failed to parse NAIS manifest {path}: {e}") from e

    return parse_inbound_apps(document)


# --- Module Notes -----------------------------------------------------------
# The allow-list is immutable for the process lifetime; the registry creates exactly one
# client per entry returned here.
