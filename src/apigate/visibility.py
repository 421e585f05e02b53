"""Visibility filter -- decide which doclets make it into the docs.

Assumes that doclets without an ``@api`` marker should not be documented,
then carves out the exceptions: referenced modules, data shapes, classes
that only document some members, and ancestors documented classes depend
on.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from .hierarchy import ClassHierarchyPropagator
from .models import Decision, DecisionRecord, Doclet, DocletIndex
from .registry import SymbolRegistry

logger = logging.getLogger(__name__)

_EVENT_MARKER = re.compile(r"#?event:")


def event_local_name(event: str) -> str:
    """``module:ol/Object~ObjectEvent#event:change`` -> ``change``."""
    parts = _EVENT_MARKER.split(event, maxsplit=1)
    return parts[1] if len(parts) > 1 else event


def sort_inherited(doclet: Doclet) -> None:
    """Order events by local name and observables by name, in place."""
    doclet.emitted_events.sort(key=event_local_name)
    doclet.observable_properties.sort(key=lambda o: o.name)


class VisibilityFilter:
    """Applies the keep/hide policy to a full doclet collection."""

    def __init__(self, registry: SymbolRegistry, propagator: ClassHierarchyPropagator | None = None) -> None:
        self.registry = registry
        self.propagator = propagator or ClassHierarchyPropagator(registry)

    def _flattens(self, doclet: Doclet) -> bool:
        if not doclet.is_class:
            return False
        return bool(doclet.stability) or doclet.qualified_name in self.registry.public_api_base_names

    def compute_closure(self, doclets: Sequence[Doclet]) -> set[str]:
        """Flatten every class that will be kept and collect its ancestors.

        Runs before any doclet is hidden, so which ancestors are exempt
        from exclusion does not depend on collection order.
        """
        for doclet in doclets:
            if self._flattens(doclet):
                self.propagator.propagate(doclet)
        logger.info(
            "Documented closure holds %d ancestor class(es)",
            len(self.registry.documented_closure),
        )
        return self.registry.documented_closure

    def apply(self, doclets: Sequence[Doclet], index: DocletIndex | None = None) -> list[DecisionRecord]:
        """Compute the closure, then decide every doclet, last to first."""
        if index is None:
            index = DocletIndex.build(doclets)
        self.compute_closure(doclets)

        records: list[DecisionRecord] = []
        for doclet in reversed(doclets):
            decision = self.decide(doclet, index)
            records.append(
                DecisionRecord(
                    qualified_name=doclet.qualified_name,
                    kind=doclet.kind,
                    decision=decision,
                    hidden=doclet.hidden,
                )
            )
        records.reverse()
        return records

    def decide(self, doclet: Doclet, index: DocletIndex) -> Decision:
        registry = self.registry

        if doclet.stability:
            if doclet.is_class:
                self.propagator.propagate(doclet)
            sort_inherited(doclet)
            return Decision.MARKED

        if doclet.kind == "module" and doclet.qualified_name in registry.referenced_module_names:
            return Decision.REFERENCED_MODULE

        if doclet.is_enum_member or doclet.is_typedef:
            return Decision.DATA_SHAPE

        if doclet.is_class and doclet.qualified_name in registry.public_api_base_names:
            # Documented members, undocumented class: keep it, hide the constructor.
            doclet.hide_constructor = True
            self.propagator.propagate(doclet)
            sort_inherited(doclet)
            decision = Decision.PUBLIC_MEMBERS
        elif doclet.hide_constructor:
            decision = Decision.CONSTRUCTOR_HIDDEN
        elif self._is_enum_default_export(doclet, index):
            decision = Decision.ENUM_DEFAULT_EXPORT
        else:
            doclet.hidden = True
            decision = Decision.EXCLUDED

        if doclet.force_documented:
            doclet.hidden = False
            if decision is Decision.EXCLUDED or decision is Decision.CONSTRUCTOR_HIDDEN:
                decision = Decision.ANCESTOR
        logger.debug("%s (%s): %s", doclet.qualified_name, doclet.kind, decision.value)
        return decision

    def _is_enum_default_export(self, doclet: Doclet, index: DocletIndex) -> bool:
        if doclet.qualified_name not in self.registry.default_export_names:
            return False
        return any(d.is_enum_member for d in index.get(doclet.qualified_name, ()))
