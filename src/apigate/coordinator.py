"""Run coordinator -- drives one apigate run through its three phases.

    collecting  --on_parse_complete-->  binding  --on_run_complete-->  done

While collecting, the host feeds doclets (``on_symbol_discovered``), marker
applications (``apply_marker``) and syntax-tree nodes (``visit_node``).
``on_parse_complete`` runs the visibility filter over the full collection;
``on_run_complete`` flags default exports.  Each :class:`ApiRun` owns its
own :class:`SymbolRegistry`, so independent runs never share state.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Mapping, Sequence

from .exports import AstNode, ExportNameBinder
from .hierarchy import ClassHierarchyPropagator
from .marker import apply_marker
from .models import ApiGateConfig, CycleReport, Doclet, DocletIndex, RunReport
from .registry import SymbolRegistry
from .visibility import VisibilityFilter

logger = logging.getLogger(__name__)


class RunPhase(Enum):
    COLLECTING = "collecting"
    FILTERING = "filtering"
    BINDING = "binding"
    DONE = "done"


class LifecycleError(RuntimeError):
    """A run hook was called outside the phase it belongs to."""


class ApiRun:
    """One documentation-generation run."""

    def __init__(self, config: ApiGateConfig | None = None) -> None:
        self.config = config or ApiGateConfig()
        self.registry = SymbolRegistry(scan_unmarked_types=self.config.scan_unmarked_types)
        self.propagator = ClassHierarchyPropagator(self.registry)
        self.filter = VisibilityFilter(self.registry, self.propagator)
        self.binder = ExportNameBinder(self.registry, self.config.source_root)
        self.phase = RunPhase.COLLECTING
        self.report = RunReport()

    def _require(self, phase: RunPhase, hook: str) -> None:
        if self.phase is not phase:
            raise LifecycleError(
                f"{hook} called during {self.phase.value} phase (expected {phase.value})"
            )

    # -- Phase 1 -------------------------------------------------------------

    def apply_marker(self, doclet: Doclet) -> Doclet:
        self._require(RunPhase.COLLECTING, "apply_marker")
        return apply_marker(doclet, self.registry, self.config.stability_label)

    def visit_node(self, node: AstNode, context: Any, source_path: str | os.PathLike[str]) -> None:
        self._require(RunPhase.COLLECTING, "visit_node")
        self.binder.visit_node(node, context, source_path)

    def visit_tree(self, tree: dict[str, Any], source_path: str | os.PathLike[str]) -> None:
        self._require(RunPhase.COLLECTING, "visit_tree")
        self.binder.visit_tree(tree, source_path)

    def on_symbol_discovered(self, doclet: Doclet) -> None:
        self._require(RunPhase.COLLECTING, "on_symbol_discovered")
        self.registry.intake(doclet)

    # -- Phase 2 -------------------------------------------------------------

    def on_parse_complete(self, doclets: Sequence[Doclet], index: DocletIndex | None = None) -> None:
        self._require(RunPhase.COLLECTING, "on_parse_complete")
        self.phase = RunPhase.FILTERING
        decisions = self.filter.apply(doclets, index)

        hidden = sum(1 for d in doclets if d.hidden)
        self.report.total = len(doclets)
        self.report.hidden = hidden
        self.report.kept = len(doclets) - hidden
        self.report.decisions = decisions
        self.report.cycles = [CycleReport(chain=list(c.chain)) for c in self.propagator.cycles]
        self.report.referenced_modules = sorted(self.registry.referenced_module_names)
        self.report.documented_closure = sorted(self.registry.documented_closure)
        logger.info("Visibility pass kept %d of %d doclet(s)", self.report.kept, self.report.total)
        self.phase = RunPhase.BINDING

    # -- Phase 3 -------------------------------------------------------------

    def on_run_complete(self, doclets: Sequence[Doclet], index: DocletIndex | None = None) -> RunReport:
        self._require(RunPhase.BINDING, "on_run_complete")
        if index is None:
            index = DocletIndex.build(doclets)
        for name in sorted(self.registry.default_export_names):
            matches = index.get(name)
            if not matches:
                logger.debug("Default export %s has no doclet", name)
                continue
            for doclet in matches:
                doclet.is_default_export = True
        self.report.default_exports = sorted(self.registry.default_export_names)
        self.phase = RunPhase.DONE
        return self.report


def process(
    doclets: Sequence[Doclet],
    asts: Mapping[str, dict[str, Any]] | None = None,
    config: ApiGateConfig | None = None,
) -> RunReport:
    """Run every phase over an in-memory doclet collection.

    *asts* maps source paths to ESTree programs; their default exports are
    bound before the doclets are collected.
    """
    run = ApiRun(config)
    for source_path, tree in (asts or {}).items():
        run.visit_tree(tree, source_path)
    for doclet in doclets:
        run.on_symbol_discovered(doclet)
    index = DocletIndex.build(doclets)
    run.on_parse_complete(doclets, index)
    return run.on_run_complete(doclets, index)
