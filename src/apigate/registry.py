"""Run-scoped symbol registry, filled one doclet at a time."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .models import Doclet
from .type_refs import TypeReferenceExtractor

logger = logging.getLogger(__name__)

_ROOT_SEPARATORS = re.compile(r"[~.]")


def root_segment(qualified_name: str) -> str:
    """``module:ol/Map~Map.foo`` -> ``module:ol/Map``."""
    return _ROOT_SEPARATORS.split(qualified_name, maxsplit=1)[0]


def member_base(qualified_name: str) -> str:
    """Strip an instance-member suffix: ``Foo#bar`` -> ``Foo``."""
    return qualified_name.split("#", 1)[0]


@dataclass
class SymbolRegistry:
    """Everything one run learns about the doclet graph while collecting.

    A registry belongs to exactly one run.  The two name sets only grow
    while doclets are collected; ``class_by_name`` holds one authoritative
    record per qualified name.
    """

    public_api_base_names: set[str] = field(default_factory=set)
    referenced_module_names: set[str] = field(default_factory=set)
    referenced_type_names: set[str] = field(default_factory=set)
    class_by_name: dict[str, Doclet] = field(default_factory=dict)
    default_export_names: set[str] = field(default_factory=set)
    documented_closure: set[str] = field(default_factory=set)
    scan_unmarked_types: bool = True

    def __post_init__(self) -> None:
        self.types = TypeReferenceExtractor(self)

    def intake(self, doclet: Doclet) -> None:
        """Record a newly discovered doclet."""
        if doclet.stability or self.scan_unmarked_types:
            self.types.scan(doclet)

        if doclet.stability:
            self.referenced_module_names.add(root_segment(doclet.qualified_name))
            self.public_api_base_names.add(member_base(doclet.qualified_name))

        if doclet.is_class:
            self._register_class(doclet)

        if doclet.name == doclet.qualified_name and not doclet.container_name:
            # Anonymous default exports get addressed through their own name.
            doclet.container_name = doclet.qualified_name

    def _register_class(self, doclet: Doclet) -> None:
        existing = self.class_by_name.get(doclet.qualified_name)
        if existing is None:
            self.class_by_name[doclet.qualified_name] = doclet
        elif existing is not doclet and doclet.ancestors is not None:
            # The upstream parser may emit a class more than once; the
            # latest inheritance list is the most complete one.
            logger.debug("Updating ancestors of %s from a duplicate record", doclet.qualified_name)
            existing.ancestors = doclet.ancestors

    def authoritative(self, qualified_name: str) -> Doclet | None:
        return self.class_by_name.get(qualified_name)
