"""Reachability analysis over the library's dependency graph."""

from __future__ import annotations

from .descriptors import (
    COMPONENTS,
    PROVIDERS,
    ComponentDescriptor,
    ProviderDescriptor,
    resolve_components,
    resolve_providers,
)
from .reachability import ReachabilityAnalyzer, calculate_components_used

__all__ = [
    "COMPONENTS",
    "PROVIDERS",
    "ComponentDescriptor",
    "ProviderDescriptor",
    "ReachabilityAnalyzer",
    "calculate_components_used",
    "resolve_components",
    "resolve_providers",
]
