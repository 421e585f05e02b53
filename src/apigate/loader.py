"""Read and write doclet and syntax-tree JSON dumps."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, TextIO

from .models import Doclet

logger = logging.getLogger(__name__)


def parse_doclets(data: Any) -> list[Doclet]:
    """Validate a decoded ``jsdoc -X`` dump (a list of doclet objects)."""
    if not isinstance(data, list):
        raise ValueError(f"expected a list of doclets, got {type(data).__name__}")
    return [Doclet.model_validate(item) for item in data]


def load_doclets(path: Path) -> list[Doclet]:
    doclets = parse_doclets(json.loads(path.read_text(encoding="utf-8")))
    logger.info("Loaded %d doclet(s) from %s", len(doclets), path)
    return doclets


def load_asts(path: Path) -> dict[str, dict[str, Any]]:
    """Load ``{source_path: estree_program}`` from *path*."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object mapping source paths to syntax trees")
    trees: dict[str, dict[str, Any]] = {}
    for source, tree in data.items():
        if not isinstance(tree, dict):
            logger.warning("Ignoring syntax tree for %s: not an object", source)
            continue
        trees[source] = tree
    return trees


def serialize_doclets(doclets: Iterable[Doclet], drop_hidden: bool = False) -> list[dict[str, Any]]:
    return [d.to_json() for d in doclets if not (drop_hidden and d.hidden)]


def dump_doclets(doclets: Iterable[Doclet], out: TextIO, drop_hidden: bool = False) -> None:
    json.dump(serialize_doclets(doclets, drop_hidden), out, indent=2)
    out.write("\n")
