"""Tests for default-export naming."""

from __future__ import annotations

from pathlib import Path

import pytest

from apigate.exports import EstreeNode, ExportNameBinder, default_export_name, iter_estree
from apigate.registry import SymbolRegistry


def _export_default(declaration: dict) -> dict:
    return {
        "type": "Program",
        "body": [
            {"type": "ImportDeclaration", "specifiers": [], "source": {"type": "Literal", "value": "x"}},
            {"type": "ExportDefaultDeclaration", "declaration": declaration},
        ],
    }


@pytest.fixture
def registry() -> SymbolRegistry:
    return SymbolRegistry()


class TestDefaultExportName:
    def test_anonymous(self, tmp_path: Path):
        name = default_export_name(tmp_path / "pkg" / "widget.js", tmp_path)
        assert name == "module:pkg/widget"

    def test_named(self, tmp_path: Path):
        name = default_export_name(tmp_path / "pkg" / "widget.js", tmp_path, "make")
        assert name == "module:pkg/widget~make"

    def test_other_suffix_stripped(self):
        assert default_export_name("src/ol/Map.ts", "src") == "module:ol/Map"

    def test_backslashes_normalised(self):
        assert default_export_name("src/ol\\format\\GeoJSON.js", "src") == "module:ol/format/GeoJSON"


class TestIterEstree:
    def test_parents_linked(self):
        nodes = list(iter_estree(_export_default({"type": "ClassDeclaration", "id": None, "body": {"type": "ClassBody", "body": []}})))
        types = [n.type for n in nodes]
        assert types[0] == "Program"
        assert types.index("ImportDeclaration") < types.index("ExportDefaultDeclaration")
        cls = next(n for n in nodes if n.type == "ClassDeclaration")
        assert cls.parent is not None
        assert cls.parent.type == "ExportDefaultDeclaration"

    def test_local_name(self):
        assert EstreeNode("Identifier", {"type": "Identifier", "name": "foo"}).local_name == "foo"
        func = {"type": "FunctionDeclaration", "id": {"type": "Identifier", "name": "make"}}
        assert EstreeNode("FunctionDeclaration", func).local_name == "make"
        assert EstreeNode("ClassDeclaration", {"type": "ClassDeclaration", "id": None}).local_name is None


class TestExportNameBinder:
    def test_anonymous_class(self, registry: SymbolRegistry, tmp_path: Path):
        binder = ExportNameBinder(registry, tmp_path)
        tree = _export_default({"type": "ClassDeclaration", "id": None, "body": {"type": "ClassBody", "body": []}})
        binder.visit_tree(tree, tmp_path / "pkg" / "widget.js")
        assert registry.default_export_names == {"module:pkg/widget"}

    def test_named_function(self, registry: SymbolRegistry, tmp_path: Path):
        binder = ExportNameBinder(registry, tmp_path)
        tree = _export_default({
            "type": "FunctionDeclaration",
            "id": {"type": "Identifier", "name": "make"},
            "params": [],
            "body": {"type": "BlockStatement", "body": []},
        })
        binder.visit_tree(tree, tmp_path / "pkg" / "widget.js")
        # The Identifier under the declaration is not a direct export target.
        assert registry.default_export_names == {"module:pkg/widget~make"}

    def test_exported_identifier(self, registry: SymbolRegistry):
        binder = ExportNameBinder(registry, "src")
        binder.visit_tree(_export_default({"type": "Identifier", "name": "Units"}), "src/ol/proj/Units.js")
        assert registry.default_export_names == {"module:ol/proj/Units~Units"}

    def test_ignores_non_default_exports(self, registry: SymbolRegistry):
        binder = ExportNameBinder(registry, "src")
        tree = {
            "type": "Program",
            "body": [{
                "type": "ExportNamedDeclaration",
                "declaration": {"type": "FunctionDeclaration", "id": {"type": "Identifier", "name": "f"}},
            }],
        }
        binder.visit_tree(tree, "src/a.js")
        assert registry.default_export_names == set()

    def test_visit_node_without_parent(self, registry: SymbolRegistry):
        binder = ExportNameBinder(registry, "src")
        binder.visit_node(EstreeNode("Program", {"type": "Program"}), None, "src/a.js")
        assert registry.default_export_names == set()

    def test_attached_comments_not_walked(self, registry: SymbolRegistry):
        doc_comment = {"type": "CommentBlock", "value": "*\n * @api\n "}
        tree = _export_default({"type": "FunctionDeclaration", "id": {"type": "Identifier", "name": "make"}})
        tree["comments"] = [doc_comment]
        tree["body"][1]["leadingComments"] = [doc_comment]
        tree["body"][1]["declaration"]["trailingComments"] = [{"type": "CommentLine", "value": " end"}]
        nodes = list(iter_estree(tree))
        assert not any(n.type.startswith("Comment") for n in nodes)
        ExportNameBinder(registry, "src").visit_tree(tree, "src/pkg/widget.js")
        assert registry.default_export_names == {"module:pkg/widget~make"}
