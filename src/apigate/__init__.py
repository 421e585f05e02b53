"""apigate - public-API visibility and inheritance flattening for doclets."""

from .models import (  # noqa: F401 -- public re-exports
    ApiGateConfig,
    Decision,
    Doclet,
    DocletIndex,
    Observable,
    RunReport,
    TypedEntry,
    TypeSpec,
)
from .coordinator import ApiRun, LifecycleError, RunPhase, process
from .exports import default_export_name
from .registry import SymbolRegistry
from .type_refs import extract_type_name

__version__ = "0.1.0"

__all__ = [
    "ApiRun",
    "LifecycleError",
    "RunPhase",
    "process",
    "SymbolRegistry",
    "default_export_name",
    "extract_type_name",
    "ApiGateConfig",
    "Decision",
    "Doclet",
    "DocletIndex",
    "Observable",
    "RunReport",
    "TypedEntry",
    "TypeSpec",
]
