"""Tests for the keep/hide policy."""

from __future__ import annotations

from apigate.models import Decision, Doclet, DocletIndex
from apigate.registry import SymbolRegistry
from apigate.visibility import VisibilityFilter, event_local_name, sort_inherited


def _doclet(**data) -> Doclet:
    return Doclet.model_validate(data)


def _filter(doclets: list[Doclet], registry: SymbolRegistry | None = None) -> tuple[VisibilityFilter, list]:
    registry = registry or SymbolRegistry()
    for d in doclets:
        registry.intake(d)
    vf = VisibilityFilter(registry)
    records = vf.apply(doclets, DocletIndex.build(doclets))
    return vf, records


class TestSorting:
    def test_event_local_name(self):
        assert event_local_name("module:ol/Object~ObjectEvent#event:propertychange") == "propertychange"
        assert event_local_name("event:change") == "change"
        assert event_local_name("plain") == "plain"

    def test_sort_inherited(self):
        doclet = _doclet(
            longname="C",
            fires=["module:b~E#event:zoom", "event:add", "module:a~E#event:change"],
            observables=[{"name": "zIndex"}, {"name": "opacity"}],
        )
        sort_inherited(doclet)
        assert doclet.emitted_events == ["event:add", "module:a~E#event:change", "module:b~E#event:zoom"]
        assert [o.name for o in doclet.observable_properties] == ["opacity", "zIndex"]


class TestDecisions:
    def test_marked_symbol_kept(self):
        d = _doclet(longname="f", kind="function", stability="stable")
        _vf, records = _filter([d])
        assert not d.hidden
        assert records[0].decision is Decision.MARKED

    def test_plain_function_hidden(self):
        d = _doclet(longname="helper", kind="function")
        _vf, records = _filter([d])
        assert d.hidden
        assert records[0].decision is Decision.EXCLUDED

    def test_referenced_module_kept(self):
        module = _doclet(longname="module:ol/Map", kind="module")
        fn = _doclet(
            longname="f", kind="function",
            params=[{"type": {"names": ["module:ol/Map"]}}],
        )
        _vf, records = _filter([module, fn])
        assert not module.hidden
        assert records[0].decision is Decision.REFERENCED_MODULE

    def test_unreferenced_module_hidden(self):
        module = _doclet(longname="module:ol/util", kind="module")
        _filter([module])
        assert module.hidden

    def test_typedef_and_enum_kept(self):
        typedef = _doclet(longname="module:ol/Map~Options", kind="typedef")
        enum = _doclet(longname="module:ol/proj/Units", kind="member", isEnum=True)
        _filter([typedef, enum])
        assert not typedef.hidden
        assert not enum.hidden

    def test_class_with_public_members(self):
        cls = _doclet(
            longname="module:ol/Map~Map", name="Map", kind="class",
            fires=["event:moveend", "event:change"],
        )
        member = _doclet(
            longname="module:ol/Map~Map#render", name="render", kind="function",
            memberof="module:ol/Map~Map", stability="stable",
        )
        _vf, records = _filter([cls, member])
        assert not cls.hidden
        assert cls.hide_constructor
        assert cls.emitted_events == ["event:change", "event:moveend"]
        assert records[0].decision is Decision.PUBLIC_MEMBERS

    def test_enum_default_export_alias_kept(self):
        enum = _doclet(longname="module:ol/proj/Units", kind="member", isEnum=True)
        alias = _doclet(longname="module:ol/proj/Units", kind="constant")
        registry = SymbolRegistry()
        registry.default_export_names.add("module:ol/proj/Units")
        _vf, records = _filter([enum, alias], registry)
        assert not alias.hidden
        assert records[1].decision is Decision.ENUM_DEFAULT_EXPORT

    def test_default_export_without_enum_hidden(self):
        fn = _doclet(longname="module:ol/foo", kind="function")
        registry = SymbolRegistry()
        registry.default_export_names.add("module:ol/foo")
        _filter([fn], registry)
        assert fn.hidden

    def test_preset_hide_constructor_keeps(self):
        d = _doclet(longname="X", kind="class", _hideConstructor=True)
        _vf, records = _filter([d])
        assert not d.hidden
        assert records[0].decision is Decision.CONSTRUCTOR_HIDDEN


class TestAncestorExemption:
    def test_ancestor_of_marked_class(self):
        base = _doclet(longname="Base", name="Base", kind="class", fires=["event:change"])
        derived = _doclet(longname="Derived", name="Derived", kind="class", augments=["Base"], stability="stable")
        _vf, records = _filter([base, derived])
        assert not base.hidden
        assert base.hide_constructor
        assert records[0].decision is Decision.ANCESTOR
        assert derived.emitted_events == ["event:change"]

    def test_order_independent(self):
        # Ancestor listed after its subclass, so it is decided first.
        derived = _doclet(longname="Derived", name="Derived", kind="class", augments=["Base"], stability="stable")
        base = _doclet(longname="Base", name="Base", kind="class")
        _filter([derived, base])
        assert not base.hidden
        assert base.hide_constructor

    def test_transitive_ancestors(self):
        root = _doclet(longname="Root", name="Root", kind="class")
        mid = _doclet(longname="Mid", name="Mid", kind="class", augments=["Root"])
        leaf = _doclet(longname="Leaf", name="Leaf", kind="class", augments=["Mid"], stability="stable")
        vf, _records = _filter([leaf, mid, root])
        for cls in (root, mid):
            assert not cls.hidden
            assert cls.hide_constructor
        assert vf.registry.documented_closure == {"Root", "Mid"}

    def test_ancestor_of_hidden_class_not_exempt(self):
        base = _doclet(longname="Base", name="Base", kind="class")
        derived = _doclet(longname="Derived", name="Derived", kind="class", augments=["Base"])
        _filter([base, derived])
        assert base.hidden
        assert derived.hidden
