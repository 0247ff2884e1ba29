"""Tests for the dependency graph model."""

from __future__ import annotations

from bundleprune.graph import DependencyMap, format_dependency_map, purge_loader_prefix


def test_self_edges_are_dropped() -> None:
    dependency_map = DependencyMap({"a.js": ["a.js", "b.js"]})

    assert dependency_map.get("a.js") == {"b.js"}


def test_narrow_removes_single_edge() -> None:
    dependency_map = DependencyMap({"a.js": ["b.js", "c.js"]})

    assert dependency_map.narrow("a.js", "b.js") is True
    assert dependency_map.narrow("a.js", "b.js") is False
    assert dependency_map.narrow("missing.js", "b.js") is False
    assert dependency_map.get("a.js") == {"c.js"}


def test_remove_referrer_everywhere_reports_touched_paths() -> None:
    dependency_map = DependencyMap(
        {"a.js": ["x.js"], "b.js": ["x.js", "y.js"], "c.js": ["y.js"]}
    )

    touched = dependency_map.remove_referrer_everywhere("x.js")

    assert sorted(touched) == ["a.js", "b.js"]
    assert dependency_map.get("a.js") == set()
    assert dependency_map.get("c.js") == {"y.js"}


def test_copy_is_independent() -> None:
    original = DependencyMap({"a.js": ["b.js"]})
    clone = original.copy()
    clone.narrow("a.js", "b.js")

    assert original.get("a.js") == {"b.js"}
    assert clone != original


def test_without_drops_paths_and_their_edges() -> None:
    dependency_map = DependencyMap({"a.js": ["b.js"], "b.js": ["c.js"]})

    assert dependency_map.without(["b.js"]).to_dict() == {"a.js": []}


def test_from_webpack_stats_strips_loaders_and_walks_nested_modules() -> None:
    stats = {
        "modules": [
            {
                "identifier": "/node_modules/loader/index.js!/lib/module.js",
                "reasons": [{"moduleIdentifier": "/loader.js!/lib/index.js"}],
            },
            {
                "identifier": "/lib/concatenated.js",
                "reasons": [],
                "modules": [
                    {"identifier": "/lib/inner.js", "reasons": [{"moduleIdentifier": "/lib/module.js"}]},
                ],
            },
            {"name": 42},
        ]
    }

    dependency_map = DependencyMap.from_webpack_stats(stats)

    assert dependency_map.to_dict() == {
        "/lib/module.js": ["/lib/index.js"],
        "/lib/concatenated.js": [],
        "/lib/inner.js": ["/lib/module.js"],
    }


def test_purge_loader_prefix_handles_chains() -> None:
    assert purge_loader_prefix("a-loader!b-loader?x=1!/src/app.js") == "/src/app.js"
    assert purge_loader_prefix("/src/app.js") == "/src/app.js"


def test_format_dependency_map_lists_referrers() -> None:
    text = format_dependency_map(DependencyMap({"a.js": ["c.js", "b.js"]}))

    assert text.splitlines() == ["a.js is imported by 2 modules", "   b.js", "   c.js"]
