"""Tests for registration pruning across bundle, factories and metadata."""

from __future__ import annotations

import json
import re
from typing import Any, Dict

import pytest

from bundleprune.analyzers import resolve_components, resolve_providers
from bundleprune.errors import PreconditionError
from bundleprune.stores import FileCache
from bundleprune.treeshake import RegistrationPruner
from tests._fixtures.workspace import BUNDLE_JS, FACTORY_JS

LIBRARY = "/app/node_modules/ionic-angular"
BUNDLE = f"{LIBRARY}/index.fesm.js"
FACTORY_FILE = "/app/src/pages/home/home.module.ngfactory.js"
TOAST_CONTROLLER = f"{LIBRARY}/components/toast/toast-controller.js"
TOAST_COMPONENT = f"{LIBRARY}/components/toast/toast-component.js"


def _pruner(cache: FileCache) -> RegistrationPruner:
    return RegistrationPruner(cache, bundle_path=BUNDLE, module_class="IonicModule")


def _cache() -> FileCache:
    cache = FileCache()
    cache.put(BUNDLE, BUNDLE_JS)
    cache.put(FACTORY_FILE, FACTORY_JS)
    return cache


def test_prune_removes_provider_and_component_everywhere(
    metadata_document: Dict[str, Any],
) -> None:
    cache = _cache()
    purged = {TOAST_CONTROLLER: frozenset(), TOAST_COMPONENT: frozenset()}

    document = _pruner(cache).prune(
        purged,
        metadata_document,
        providers=resolve_providers(LIBRARY),
        components=resolve_components(LIBRARY),
    )

    serialized = json.dumps(document)
    assert '"ToastController"' not in serialized
    assert '"ToastCmp"' not in serialized
    assert '"AlertCmp"' in serialized
    bundle = cache.get(BUNDLE)
    assert bundle is not None and bundle.content != BUNDLE_JS
    factory = cache.get(FACTORY_FILE)
    assert factory is not None and "i2.ToastCmpNgFactory" not in factory.content


def test_prune_with_empty_purge_set_changes_nothing(metadata_document: Dict[str, Any]) -> None:
    cache = _cache()

    document = _pruner(cache).prune(
        {},
        metadata_document,
        providers=resolve_providers(LIBRARY),
        components=resolve_components(LIBRARY),
    )

    assert document == metadata_document
    assert cache.get(BUNDLE).content == BUNDLE_JS
    assert cache.get(FACTORY_FILE).content == FACTORY_JS


def test_provider_pruning_requires_bundle(metadata_document: Dict[str, Any]) -> None:
    cache = FileCache()

    with pytest.raises(PreconditionError, match="not in cache"):
        _pruner(cache).prune_bundle(
            {TOAST_CONTROLLER: frozenset()}, metadata_document, resolve_providers(LIBRARY)
        )


def test_second_prune_is_idempotent(metadata_document: Dict[str, Any]) -> None:
    cache = _cache()
    purged = {TOAST_CONTROLLER: frozenset(), TOAST_COMPONENT: frozenset()}
    pruner = _pruner(cache)
    providers = resolve_providers(LIBRARY)
    components = resolve_components(LIBRARY)

    first = pruner.prune(purged, metadata_document, providers=providers, components=components)
    bundle_after_first = cache.get(BUNDLE).content
    factory_after_first = cache.get(FACTORY_FILE).content
    second = pruner.prune(purged, first, providers=providers, components=components)

    assert second == first
    assert cache.get(BUNDLE).content == bundle_after_first
    assert cache.get(FACTORY_FILE).content == factory_after_first


def test_prune_fails_when_for_root_cannot_be_located(metadata_document: Dict[str, Any]) -> None:
    cache = _cache()
    cache.put(BUNDLE, BUNDLE_JS.replace("IonicModule.forRoot", "IonicModule.configure"))

    with pytest.raises(PreconditionError, match="forRoot"):
        _pruner(cache).prune_bundle(
            {TOAST_CONTROLLER: frozenset()}, metadata_document, resolve_providers(LIBRARY)
        )


def test_prune_cuts_purged_module_code_with_provider_edit(
    metadata_document: Dict[str, Any],
) -> None:
    cache = _cache()
    pruner = RegistrationPruner(
        cache, bundle_path=BUNDLE, module_class="IonicModule", library_dir=LIBRARY
    )

    pruner.prune(
        {TOAST_CONTROLLER: frozenset(), TOAST_COMPONENT: frozenset()},
        metadata_document,
        providers=resolve_providers(LIBRARY),
        components=resolve_components(LIBRARY),
        module_symbols={TOAST_CONTROLLER: ["ToastController"], TOAST_COMPONENT: ["ToastCmp"]},
    )

    bundle = cache.get(BUNDLE).content
    assert "var ToastController" not in bundle
    assert re.search(r"AlertController,\s*\{ provide: APP_INITIALIZER", bundle)
    assert "var AlertController = (function () {" in bundle
