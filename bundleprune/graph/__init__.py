"""Dependency graph model."""

from .dependency_map import DependencyMap, format_dependency_map, purge_loader_prefix

__all__ = ["DependencyMap", "format_dependency_map", "purge_loader_prefix"]
