"""Default-export naming -- bind a file's default export to its module name.

The host walks every parsed source file and calls
:meth:`ExportNameBinder.visit_node` once per node.  Nodes only need the
small :class:`AstNode` surface; :func:`iter_estree` adapts an ESTree JSON
dump (as produced by espree or babel) to it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any, Iterator, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .registry import SymbolRegistry

logger = logging.getLogger(__name__)

EXPORT_DEFAULT = "ExportDefaultDeclaration"


@runtime_checkable
class AstNode(Protocol):
    """The part of a syntax-tree node the binder looks at."""

    type: str
    parent: "AstNode | None"

    @property
    def local_name(self) -> str | None:
        """Identifier the node is declared under, if any."""
        ...


@dataclass(eq=False)
class EstreeNode:
    """An ESTree node with a link back to its parent."""

    type: str
    data: dict[str, Any] = field(repr=False)
    parent: "EstreeNode | None" = field(default=None, repr=False)

    @property
    def local_name(self) -> str | None:
        name = self.data.get("name")
        if isinstance(name, str):
            return name
        ident = self.data.get("id")
        if isinstance(ident, dict) and isinstance(ident.get("name"), str):
            return ident["name"]
        return None


# Position data and parser-attached comments and tokens are not part of the tree.
_SKIPPED_KEYS = frozenset(
    {"loc", "range", "comments", "tokens", "leadingComments", "trailingComments", "innerComments"}
)


def iter_estree(tree: dict[str, Any]) -> Iterator[EstreeNode]:
    """Yield every node of an ESTree program, parents before children."""
    stack: list[tuple[dict[str, Any], EstreeNode | None]] = [(tree, None)]
    while stack:
        data, parent = stack.pop()
        node = EstreeNode(type=str(data.get("type", "")), data=data, parent=parent)
        yield node
        children: list[dict[str, Any]] = []
        for key, value in data.items():
            if key in _SKIPPED_KEYS:
                continue
            if isinstance(value, dict) and "type" in value:
                children.append(value)
            elif isinstance(value, list):
                children.extend(v for v in value if isinstance(v, dict) and "type" in v)
        # Reversed so the walk visits children in source order.
        stack.extend((child, node) for child in reversed(children))


def default_export_name(
    source_path: str | os.PathLike[str],
    source_root: str | os.PathLike[str],
    local_name: str | None = None,
) -> str:
    """Return ``module:<path>`` (plus ``~<local_name>``) for a default export.

    *path* is *source_path* relative to *source_root* with the file suffix
    removed and separators normalised to ``/``.
    """
    relative = os.path.relpath(os.fspath(source_path), os.fspath(source_root))
    stem = str(PurePath(relative).with_suffix("")) if PurePath(relative).suffix else relative
    module_path = stem.replace("\\", "/")
    name = f"module:{module_path}"
    if local_name:
        name += f"~{local_name}"
    return name


class ExportNameBinder:
    """Records the qualified names of default exports as nodes are visited."""

    def __init__(self, registry: "SymbolRegistry", source_root: str | os.PathLike[str]) -> None:
        self.registry = registry
        self.source_root = Path(source_root)

    def visit_node(self, node: AstNode, context: Any, source_path: str | os.PathLike[str]) -> None:
        """React to the direct target of an ``export default`` declaration."""
        parent = node.parent
        if parent is None or parent.type != EXPORT_DEFAULT:
            return
        name = default_export_name(source_path, self.source_root, node.local_name)
        if name not in self.registry.default_export_names:
            logger.debug("Default export %s in %s", name, source_path)
        self.registry.default_export_names.add(name)

    def visit_tree(self, tree: dict[str, Any], source_path: str | os.PathLike[str]) -> None:
        for node in iter_estree(tree):
            self.visit_node(node, None, source_path)
