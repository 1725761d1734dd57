"""
Route policy table loader.

Policies are declared in YAML and resolved once, when the routers are
built. Looking up a route that has no policy is a configuration error,
so an unprotected route cannot slip in silently.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from elikia.auth.gate import RoutePolicy
from elikia.config import ConfigurationError

DEFAULT_POLICY_FILE = Path(__file__).parent / "route_policies.yaml"


class RoutePolicyTable:
    """Route name -> RoutePolicy."""

    def __init__(self, policies: dict[str, RoutePolicy] | None = None):
        self._policies: dict[str, RoutePolicy] = dict(policies or {})

    def get(self, route_name: str) -> RoutePolicy:
        if route_name not in self._policies:
            raise ConfigurationError(f"No route policy declared for '{route_name}'")
        return self._policies[route_name]

    def names(self) -> list[str]:
        return sorted(self._policies)

    def __contains__(self, route_name: str) -> bool:
        return route_name in self._policies

    def __len__(self) -> int:
        return len(self._policies)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutePolicyTable:
        routes = data.get("routes") if isinstance(data, dict) else None
        if not isinstance(routes, dict):
            raise ConfigurationError("Route policy file must define a 'routes' mapping")

        policies = {}
        for name, entry in routes.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise ConfigurationError(f"Route '{name}': policy must be a mapping")
            policies[name] = _parse_policy(name, entry)
        return cls(policies)


def _parse_policy(name: str, entry: dict[str, Any]) -> RoutePolicy:
    unknown = set(entry) - {"auth_required", "required_role"}
    if unknown:
        raise ConfigurationError(f"Route '{name}': unknown policy keys {sorted(unknown)}")

    auth_required = entry.get("auth_required", True)
    required_role = entry.get("required_role")

    if not isinstance(auth_required, bool):
        raise ConfigurationError(f"Route '{name}': auth_required must be true or false")
    if required_role is not None and not isinstance(required_role, str):
        raise ConfigurationError(f"Route '{name}': required_role must be a string")
    if required_role is not None and not auth_required:
        raise ConfigurationError(f"Route '{name}': required_role needs auth_required: true")

    return RoutePolicy(auth_required=auth_required, required_role=required_role)


def load_route_policies(path: Path | str | None = None) -> RoutePolicyTable:
    """Load the route policy table from YAML (the packaged file by default)."""
    path = Path(path) if path is not None else DEFAULT_POLICY_FILE
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read route policies from {path}: {e}") from e

    return RoutePolicyTable.from_dict(data)
