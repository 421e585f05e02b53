"""Pydantic models for apigate's doclet graph."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Shared primitives
# ---------------------------------------------------------------------------

class TypeSpec(BaseModel):
    """A type annotation as emitted by the documentation generator."""

    model_config = ConfigDict(extra="allow")

    names: list[str] = Field(default_factory=list)


class TypedEntry(BaseModel):
    """A parameter, return value or declared property carrying a type."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    type: TypeSpec | None = None


class Observable(BaseModel):
    """An externally observable property declared on a class."""

    model_config = ConfigDict(extra="allow")

    name: str


# ---------------------------------------------------------------------------
# Doclet
# ---------------------------------------------------------------------------

class Doclet(BaseModel):
    """One documented symbol.

    Field aliases are the keys used by ``jsdoc -X`` so a raw dump validates
    directly.  Keys apigate does not know about are kept untouched and
    written back out for the renderer.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    qualified_name: str = Field(alias="longname")
    name: str = ""
    kind: str = ""
    container_name: str | None = Field(default=None, alias="memberof")
    stability: str | None = None

    ancestors: list[str] | None = Field(default=None, alias="augments")
    """``None`` when the record says nothing about inheritance."""

    emitted_events: list[str] = Field(default_factory=list, alias="fires")
    observable_properties: list[Observable] = Field(default_factory=list, alias="observables")

    parameter_types: list[TypedEntry] = Field(default_factory=list, alias="params")
    return_types: list[TypedEntry] = Field(default_factory=list, alias="returns")
    property_types: list[TypedEntry] = Field(default_factory=list, alias="properties")
    type: TypeSpec | None = None
    is_type_expression: bool = Field(default=False, alias="isTypeExpression")

    # Visibility flags.  Only the engine sets these.
    hidden: bool = Field(default=False, alias="undocumented")
    hide_constructor: bool = Field(default=False, alias="_hideConstructor")
    force_documented: bool = Field(default=False, alias="_documented")
    is_default_export: bool = Field(default=False, alias="isDefaultExport")
    is_enum_member: bool = Field(default=False, alias="isEnum")

    @property
    def exposes_own_type(self) -> bool:
        """True for a bare ``a.b = ...`` member, whose own type is exported."""
        if self.is_type_expression:
            return True
        meta = (self.model_extra or {}).get("meta")
        code = meta.get("code") if isinstance(meta, dict) else None
        return isinstance(code, dict) and code.get("type") == "MemberExpression"

    @property
    def is_typedef(self) -> bool:
        return self.kind == "typedef"

    @property
    def is_class(self) -> bool:
        return self.kind == "class"

    def to_json(self) -> dict[str, Any]:
        """Serialize using the upstream keys.

        A key is written when it was in the input or when the run changed
        its value, so untouched input comes back out unchanged.
        """
        untouched = {
            name
            for name, field in type(self).model_fields.items()
            if name not in self.model_fields_set
            and getattr(self, name) == field.get_default(call_default_factory=True)
        }
        return self.model_dump(by_alias=True, exclude=untouched)


class DocletIndex(dict[str, list[Doclet]]):
    """Qualified name -> every doclet carrying that name, in input order."""

    @classmethod
    def build(cls, doclets: Iterable[Doclet]) -> "DocletIndex":
        index = cls()
        for doclet in doclets:
            index.setdefault(doclet.qualified_name, []).append(doclet)
        return index


# ---------------------------------------------------------------------------
# Run output
# ---------------------------------------------------------------------------

class Decision(str, Enum):
    """Why the visibility pass kept or hid a doclet."""

    MARKED = "marked"
    REFERENCED_MODULE = "referenced-module"
    DATA_SHAPE = "data-shape"
    PUBLIC_MEMBERS = "public-members"
    ENUM_DEFAULT_EXPORT = "enum-default-export"
    CONSTRUCTOR_HIDDEN = "constructor-hidden"
    ANCESTOR = "ancestor"
    EXCLUDED = "excluded"


class DecisionRecord(BaseModel):
    """The visibility outcome for a single doclet."""

    qualified_name: str
    kind: str
    decision: Decision
    hidden: bool


class CycleReport(BaseModel):
    """An inheritance cycle found while flattening ancestors."""

    chain: list[str]


class RunReport(BaseModel):
    """Summary of one apigate run."""

    total: int = 0
    kept: int = 0
    hidden: int = 0
    decisions: list[DecisionRecord] = Field(default_factory=list)
    cycles: list[CycleReport] = Field(default_factory=list)
    default_exports: list[str] = Field(default_factory=list)
    referenced_modules: list[str] = Field(default_factory=list)
    documented_closure: list[str] = Field(default_factory=list)

    def decisions_for(self, qualified_name: str) -> list[DecisionRecord]:
        return [d for d in self.decisions if d.qualified_name == qualified_name]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ApiGateConfig(BaseModel):
    """User configuration from ``apigate.toml`` or ``[tool.apigate]``.

    CLI flags override these values for a single invocation.
    Precedence: CLI flag > config file > default.
    """

    model_config = ConfigDict(extra="forbid")

    source_root: str = "src"
    """Directory default-export module paths are made relative to."""

    stability_label: str = "stable"
    """Value written to ``stability`` when the ``@api`` marker is applied."""

    scan_unmarked_types: bool = True
    """Register type references of every doclet, not only marked ones."""

    drop_hidden: bool = False
    """Leave hidden doclets out of the written output entirely."""

    log_level: str = "WARNING"
    """Level for the CLI's log handler."""

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)} (got {value!r})")
        return level
