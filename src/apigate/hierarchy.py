"""Class hierarchy propagation -- flatten inherited events and observables.

Every class that stays in the docs lists the events it fires and the
properties it exposes as observable, including those declared on its
ancestors.  Flattening walks the ``augments`` chain depth-first and, as a
side effect, marks each ancestor it reaches:

* ``hide_constructor`` -- the ancestor is documented for its members, not
  as something users construct;
* ``force_documented`` -- the ancestor must survive the visibility pass,
  unless it was already hidden when it was reached.

Mutations are applied to the authoritative record held by the registry,
so flattening the same class twice is harmless.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .models import Doclet, Observable
from .registry import SymbolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleDiagnostic:
    """An ``augments`` chain that leads back to a class already on it."""

    chain: tuple[str, ...]

    def __str__(self) -> str:
        return " -> ".join(self.chain)


def merge_events(target: list[str], extra: Iterable[str]) -> None:
    for event in extra:
        if event not in target:
            target.append(event)


def merge_observables(target: list[Observable], extra: Iterable[Observable]) -> None:
    seen = {o.name for o in target}
    for observable in extra:
        if observable.name not in seen:
            target.append(observable)
            seen.add(observable.name)


class ClassHierarchyPropagator:
    """Flattens ancestor metadata into classes, guarding against cycles."""

    def __init__(self, registry: SymbolRegistry) -> None:
        self.registry = registry
        self.cycles: list[CycleDiagnostic] = []

    def propagate(self, record: Doclet) -> None:
        self._propagate(record, ())

    def _propagate(self, record: Doclet, stack: Sequence[str]) -> None:
        name = record.qualified_name
        cls = self.registry.authoritative(name)
        if cls is None:
            cls = record
        elif cls is not record:
            self._reconcile(record, cls)

        ancestors = record.ancestors if record.ancestors is not None else cls.ancestors
        if not ancestors:
            return

        path = (*stack, name)
        for ancestor_name in reversed(ancestors):
            ancestor = self.registry.authoritative(ancestor_name)
            if ancestor is None:
                logger.debug("%s extends %s, which is not documented", name, ancestor_name)
                continue
            if ancestor_name in path:
                self._report_cycle((*path, ancestor_name))
                continue

            self._propagate(ancestor, path)
            merge_events(record.emitted_events, ancestor.emitted_events)
            merge_observables(record.observable_properties, ancestor.observable_properties)

            ancestor.hide_constructor = True
            if not ancestor.hidden:
                ancestor.force_documented = True
                self.registry.documented_closure.add(ancestor_name)

    @staticmethod
    def _reconcile(record: Doclet, cls: Doclet) -> None:
        """Make a duplicate record agree with the authoritative one."""
        if cls.observable_properties and not record.observable_properties:
            record.observable_properties = cls.observable_properties
        if not record.emitted_events:
            record.emitted_events = cls.emitted_events
        elif record.emitted_events is not cls.emitted_events:
            merge_events(cls.emitted_events, record.emitted_events)
            merge_events(record.emitted_events, cls.emitted_events)

    def _report_cycle(self, chain: tuple[str, ...]) -> None:
        diagnostic = CycleDiagnostic(chain)
        if diagnostic in self.cycles:
            return
        logger.warning("Inheritance cycle, not following: %s", diagnostic)
        self.cycles.append(diagnostic)
