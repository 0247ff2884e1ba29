"""Pipeline orchestration for the post-bundle optimization pass."""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Set

from .analyzers import (
    ReachabilityAnalyzer,
    calculate_components_used,
    resolve_components,
    resolve_providers,
)
from .bundler import Bundler, StatsFileBundler, build_dependency_map
from .compiler import Compiler, CompilerOptions, SubprocessCompiler
from .config import PruneConfig
from .decorators import purge_decorators
from .editing import PatchedString
from .errors import OptimizationError
from .graph import DependencyMap, format_dependency_map
from .logging import get_logger
from .metadata import MetadataDocument, find_dangling_references, synchronize
from .models import CacheEntry, TreeShakeResults
from .stores import FileCache
from .treeshake import ExportPurger, ReferenceLocator, RegistrationPruner, ScanningLocator


@dataclass
class OptimizationOutcome:
    """Summary of a pipeline run."""

    skipped: bool
    purged_modules: Mapping[str, AbstractSet[str]] = field(default_factory=dict)
    included_component_dirs: Set[str] = field(default_factory=set)
    metadata_changed: bool = False
    maps_written: List[str] = field(default_factory=list)


class OptimizationPipeline:
    """Runs decorator stripping and manual tree shaking between the two compiles."""

    def __init__(
        self,
        config: PruneConfig,
        file_cache: FileCache | None = None,
        bundler: Bundler | None = None,
        compiler: Compiler | None = None,
        *,
        locator: ReferenceLocator | None = None,
        included_component_dirs: Iterable[str] = (),
        persist: bool = True,
    ) -> None:
        self.config = config
        self.file_cache = file_cache or FileCache()
        self.bundler = bundler or StatsFileBundler(config.stats_file)
        self.compiler = compiler or SubprocessCompiler(config.compiler_command)
        self.locator = locator or ScanningLocator()
        self.export_purger = ExportPurger()
        self.included_component_dirs: Set[str] = set(included_component_dirs)
        self.persist = persist
        self.logger = get_logger("orchestrator")

        library_dir = config.library_dir.as_posix()
        self.providers = resolve_providers(library_dir)
        self.components = resolve_components(library_dir)

    @property
    def bundle_path(self) -> str:
        return self.config.bundle_path.as_posix()

    def run(self) -> OptimizationOutcome:
        flags = self.config.flags
        if not flags.enabled:
            self.logger.debug("Optimizations disabled; nothing to do")
            return OptimizationOutcome(skipped=True)

        self.logger.info("Starting optimization pass")
        try:
            outcome = self._run()
        except Exception as exc:
            raise OptimizationError(f"Optimization failed: {exc}", fatal=True) from exc
        self.logger.info("Optimization pass finished")
        return outcome

    def _run(self) -> OptimizationOutcome:
        flags = self.config.flags
        dependency_map = build_dependency_map(self.bundler)
        if flags.print_dependency_trees:
            self.logger.debug("Original dependency map:\n%s", format_dependency_map(dependency_map))

        self.purge_generated_files()
        self.file_cache.read_and_cache(self.config.bundle_path)
        snapshot = {entry.path: entry.content for entry in self.file_cache.get_all()}

        maps_written: List[str] = []
        if flags.purge_decorators:
            maps_written = self.strip_decorators()

        results = TreeShakeResults.empty(dependency_map)
        if flags.manual_tree_shaking:
            results = self.tree_shake(dependency_map)
            if flags.print_dependency_trees:
                self.logger.debug(
                    "Modified dependency map:\n%s",
                    format_dependency_map(results.updated_dependency_map),
                )

        self.purge_library_files()
        module_symbols = self.resolve_public_symbols(results.purged_modules)
        metadata_changed = self.prune_registrations(results.purged_modules, module_symbols)
        self.purge_exports(module_symbols)
        if self.persist:
            written = self._changed_paths(snapshot)
            self.file_cache.persist(written)
            self.logger.info("Wrote %d optimized files", len(written))
        self.compile()

        return OptimizationOutcome(
            skipped=False,
            purged_modules=results.purged_modules,
            included_component_dirs=set(self.included_component_dirs),
            metadata_changed=metadata_changed,
            maps_written=maps_written,
        )

    def purge_generated_files(self) -> List[str]:
        """Drop outputs of an earlier bundle run from the working set."""
        build_dir = self.config.build_dir.as_posix().rstrip("/") + "/"
        removed = [
            entry.path
            for entry in self.file_cache.get_all()
            if entry.path.startswith(build_dir)
            and entry.path.endswith(self.config.bundle_output_name)
        ]
        for path in removed:
            self.file_cache.remove(path)
        if removed:
            self.logger.debug("Removed %d generated bundle outputs", len(removed))
        return removed

    def strip_decorators(self) -> List[str]:
        maps: List[str] = []
        for entry in self.file_cache.get_all():
            if not entry.path.endswith(".js"):
                continue
            patched = purge_decorators(entry.path, entry.content)
            if not patched.has_changed():
                continue
            name = posixpath.basename(entry.path)
            source_map = patched.generate_map(source=name, file=name, include_content=True)
            self.file_cache.put(entry.path, patched.to_string())
            self.file_cache.put(entry.path + ".map", source_map.to_json())
            maps.append(entry.path + ".map")
        self.logger.info("Stripped decorators from %d scripts", len(maps))
        return maps

    def tree_shake(self, dependency_map: DependencyMap) -> TreeShakeResults:
        module_file = self.config.module_file.as_posix()
        if module_file not in self.file_cache:
            self.logger.warning(
                "%s is not in the working set; skipping manual tree shaking", module_file
            )
            return TreeShakeResults.empty(dependency_map)

        analyzer = ReachabilityAnalyzer(
            module_file,
            self.config.library_dir.as_posix(),
            self.providers,
            self.components,
        )
        analyzer.mark_providers_used_in_source(dependency_map, self._app_sources())
        results = analyzer.calculate_unused_components(dependency_map)
        for path in sorted(results.purged_modules):
            self.logger.info("Purging unused module %s", path)

        self.included_component_dirs = calculate_components_used(
            results.updated_dependency_map,
            self.config.optimization_components_dir.as_posix(),
            self.config.components_dir.as_posix(),
            self.included_component_dirs,
        )
        return results

    def purge_library_files(self) -> None:
        library_dir = self.config.library_dir.as_posix().rstrip("/") + "/"
        outputs = {self.bundle_path, self.bundle_path + ".map"}
        for entry in self.file_cache.get_all():
            if entry.path in outputs:
                continue
            if entry.path.startswith(library_dir):
                self.file_cache.remove(entry.path)

    def resolve_public_symbols(
        self, purged_modules: Mapping[str, AbstractSet[str]]
    ) -> Dict[str, List[str]]:
        """Map each purged module to the symbols the public entry point re-exports from it."""
        entry_point = self.config.public_entry_point.as_posix()
        content = self.file_cache.read_and_cache(self.config.public_entry_point)
        self.file_cache.remove(entry_point)
        return self.export_purger.symbols_by_module(purged_modules, entry_point, content)

    def prune_registrations(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        module_symbols: Mapping[str, List[str]],
    ) -> bool:
        metadata_path = self.config.metadata_path.as_posix()
        original = self.file_cache.read_and_cache(self.config.metadata_path)
        before: MetadataDocument = json.loads(original)
        document = before

        pruner = RegistrationPruner(
            self.file_cache,
            bundle_path=self.bundle_path,
            module_class=self.config.module_class,
            factory_suffix=self.config.factory_suffix,
            library_dir=self.config.library_dir.as_posix(),
            locator=self.locator,
        )
        document = pruner.prune(
            purged_modules,
            document,
            providers=self.providers,
            components=self.components,
            module_symbols=module_symbols,
        )
        document = synchronize(document, self._purged_class_names(purged_modules, module_symbols))
        for module_class, key, name in find_dangling_references(document):
            self.logger.warning("%s.%s still references missing class %s", module_class, key, name)

        if document == before:
            return False
        self.file_cache.put(metadata_path, json.dumps(document, separators=(",", ":")))
        self.logger.info("Updated metadata %s", metadata_path)
        return True

    def purge_exports(self, module_symbols: Mapping[str, List[str]]) -> None:
        symbols = {name for names in module_symbols.values() for name in names}
        bundle = self.file_cache.get(self.bundle_path)
        patched: Optional[PatchedString] = PatchedString(bundle.content) if bundle else None
        patched = self.export_purger.purge_symbols(symbols, patched)
        if patched.has_changed():
            self.file_cache.put(self.bundle_path, patched.to_string())

    def compile(self) -> None:
        options = CompilerOptions(
            entry_point=self.config.app_entry_point.as_posix(),
            root_dir=self.config.root.as_posix(),
            ts_config_path=self.config.ts_config.as_posix(),
            app_module_class=self.config.app_module_class,
            app_module_path=self.config.app_module_path.as_posix(),
            for_optimization=False,
        )
        self.compiler.compile(options)

    def _app_sources(self) -> List[CacheEntry]:
        src_dir = self.config.src_dir.as_posix().rstrip("/") + "/"
        return [
            entry
            for entry in self.file_cache.get_all()
            if entry.path.startswith(src_dir)
            and entry.path.endswith(".ts")
            and not entry.path.endswith(".d.ts")
            and ".ngfactory." not in entry.path
        ]

    def _changed_paths(self, snapshot: Mapping[str, str]) -> List[str]:
        changed: List[str] = []
        for entry in self.file_cache.get_all():
            if entry.path in snapshot:
                if snapshot[entry.path] != entry.content:
                    changed.append(entry.path)
                continue
            target = Path(entry.path)
            if not target.is_file() or target.read_text(encoding="utf-8") != entry.content:
                changed.append(entry.path)
        return changed

    def _purged_class_names(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        module_symbols: Mapping[str, List[str]],
    ) -> List[str]:
        names: Dict[str, None] = {}
        for provider in self.providers:
            if provider.module_path in purged_modules:
                names[provider.class_name] = None
        for component in self.components:
            if component.component_path in purged_modules:
                names[component.class_name] = None
        for module_path in sorted(purged_modules):
            for name in module_symbols.get(module_path, ()):
                names[name] = None
        return list(names)


__all__ = ["OptimizationOutcome", "OptimizationPipeline"]
