"""Type reference extraction -- pull base type names out of annotations."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Iterable

from .models import Doclet, TypedEntry

if TYPE_CHECKING:
    from .registry import SymbolRegistry

logger = logging.getLogger(__name__)

# Optional ``Wrapper.<`` prefix, the inner name, optional closing ``>``.
_TYPE_PATTERN = re.compile(r"^(.*<)?([^>]*)>?$")


def extract_type_name(raw: str) -> str:
    """Return the base identifier of a type annotation.

    ``Array.<Thing>`` gives ``Thing``; a plain ``Thing`` is returned as is.
    Never raises: anything the pattern cannot take apart is returned whole.
    """
    match = _TYPE_PATTERN.match(raw)
    if match is None:
        return raw
    return match.group(2)


class TypeReferenceExtractor:
    """Registers every type a doclet mentions as a referenced name."""

    def __init__(self, registry: "SymbolRegistry") -> None:
        self.registry = registry

    def register(self, raw: str) -> str:
        name = extract_type_name(raw)
        self.registry.referenced_module_names.add(name)
        self.registry.referenced_type_names.add(name)
        return name

    def scan_entries(self, entries: Iterable[TypedEntry]) -> list[str]:
        found: list[str] = []
        for entry in entries:
            if entry.type is None:
                logger.debug("Skipping untyped entry %r", entry.name)
                continue
            found.extend(self.register(raw) for raw in entry.type.names)
        return found

    def scan(self, doclet: Doclet) -> list[str]:
        """Register the types of *doclet*'s params, returns and properties.

        The doclet's own ``type`` is only scanned for bare member
        expressions, where it describes the exported value itself.
        """
        found = self.scan_entries(doclet.parameter_types)
        found += self.scan_entries(doclet.return_types)
        found += self.scan_entries(doclet.property_types)
        if doclet.type is not None and doclet.exposes_own_type:
            found.extend(self.register(raw) for raw in doclet.type.names)
        return found
