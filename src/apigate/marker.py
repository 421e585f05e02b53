"""The ``@api`` marker -- declares a symbol part of the public API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import Doclet
from .registry import SymbolRegistry


@dataclass(frozen=True)
class TagDefinition:
    """How a custom tag may be written in a doc comment."""

    name: str
    must_not_have_value: bool = False
    can_have_type: bool = True
    can_have_name: bool = True

    def validate_usage(self, value: Any = None, type: Any = None, name: Any = None) -> None:
        """Raise ``ValueError`` if a use of the tag breaks its declaration."""
        if self.must_not_have_value and value:
            raise ValueError(f"@{self.name} does not take a value (got {value!r})")
        if not self.can_have_type and type:
            raise ValueError(f"@{self.name} does not take a type (got {type!r})")
        if not self.can_have_name and name:
            raise ValueError(f"@{self.name} does not take a name (got {name!r})")


API_TAG = TagDefinition(
    name="api",
    must_not_have_value=True,
    can_have_type=False,
    can_have_name=False,
)


def apply_marker(doclet: Doclet, registry: SymbolRegistry, label: str = "stable") -> Doclet:
    """Mark *doclet* as public API and register the types it mentions."""
    registry.types.scan(doclet)
    doclet.stability = label
    return doclet
