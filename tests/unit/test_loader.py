"""Tests for YAML symbol-graph loading and reference resolution."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from enumaudit.analysis.naming import display_name, is_nullable_value_type
from enumaudit.errors import SymbolGraphError
from enumaudit.symbols.base import SymbolProvider
from enumaudit.symbols.loader import SymbolGraph, load_solution, load_solution_from_string
from enumaudit.symbols.models import (
    Accessibility,
    ArrayType,
    MethodKind,
    NamedType,
    ProjectInfo,
    TypeKind,
    TypeParameter,
)


def run_async(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _types(yaml_text: str) -> dict[str, NamedType]:
    graph = load_solution_from_string(yaml_text)
    compilation = run_async(graph.get_compilation(graph.projects[0]))
    return {t.qualified_name: t for t in compilation.global_namespace.iter_types()}


class TestLoadSolution:
    def test_load_fixture(self, shop_solution_path: Path):
        messages: list[str] = []
        graph = load_solution(shop_solution_path, log=messages.append)

        assert graph.name == "Shop"
        assert graph.file_path == "/src/Shop.sln"
        assert [p.name for p in graph.projects] == [
            "Shop.Api",
            "Shop.Web",
            "Shop.Broken",
            "Admin.Api",
        ]
        assert graph.projects[1].language == "F#"
        assert messages[0] == f"Loading solution: {shop_solution_path.resolve()}"
        assert "[WorkspaceFailed:Failure] Msbuild failed when processing the file" in messages
        assert messages[-2:] == ["Loaded: /src/Shop.sln", "Projects: 4"]

    def test_graph_is_a_symbol_provider(self, shop_graph: SymbolGraph):
        assert isinstance(shop_graph, SymbolProvider)

    def test_compilation_error_means_unavailable(self, shop_graph: SymbolGraph):
        broken = shop_graph.projects[2]
        assert run_async(shop_graph.get_compilation(broken)) is None
        assert shop_graph.diagnostics == [
            "[WorkspaceFailed:Failure] Msbuild failed when processing the file"
        ]

    def test_unknown_project(self, shop_graph: SymbolGraph):
        assert run_async(shop_graph.get_compilation(ProjectInfo(id="x", name="x"))) is None

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_solution(tmp_path / "nope.yaml")

    def test_solution_path_defaults_to_file(self, tmp_path: Path):
        path = tmp_path / "s.yaml"
        path.write_text("name: s\nprojects: []\n")
        assert load_solution(path).file_path == str(path.resolve())

    def test_duplicate_project_id(self):
        graph = SymbolGraph()
        graph.add_project(ProjectInfo(id="1", name="a"), None)
        with pytest.raises(SymbolGraphError, match="Duplicate project"):
            graph.add_project(ProjectInfo(id="1", name="b"), None)


class TestDeclarations:
    def test_namespaces_and_nested_types(self):
        types = _types(
            """
projects:
  - name: P
    namespaces:
      - name: Shop
        namespaces:
          - name: Api
            types:
              - name: Outer
                types:
                  - name: Inner
"""
        )
        assert list(types) == ["Shop.Api.Outer", "Shop.Api.Outer.Inner"]
        assert types["Shop.Api.Outer.Inner"].containing_type is types["Shop.Api.Outer"]

    def test_kinds_and_flags(self):
        types = _types(
            """
projects:
  - name: P
    types:
      - {name: A, kind: record}
      - {name: B, kind: record struct}
      - {name: C, kind: enum}
      - {name: D, abstract: true}
"""
        )
        assert types["A"].kind == TypeKind.CLASS and types["A"].is_record
        assert types["B"].kind == TypeKind.STRUCT and types["B"].is_record
        assert types["C"].kind == TypeKind.ENUM
        assert types["D"].is_abstract

    def test_members(self):
        types = _types(
            """
projects:
  - name: P
    types:
      - name: Status
        kind: enum
      - name: ThingsController
        sources: [A.cs, A.Partial.cs]
        methods:
          - name: Get
            returns: Status
            access: protected
            kind: ordinary
            attributes: [Microsoft.AspNetCore.Mvc.HttpGet]
            explicit_interface: IThings.Get
            parameters:
              - {name: id, type: int, attributes: [FromRoute]}
          - {name: .ctor, kind: constructor}
        properties:
          - {name: A, type: Status, setter: none}
          - {name: B, type: Status, setter: private, init_only: true}
          - {name: C, type: Status, static: true, access: internal}
"""
        )
        controller = types["ThingsController"]
        assert [loc.file_path for loc in controller.locations] == ["A.cs", "A.Partial.cs"]

        get, ctor = controller.methods
        assert get.accessibility == Accessibility.PROTECTED
        assert get.return_type is types["Status"]
        assert get.attributes[0].name == "HttpGet"
        assert get.attributes[0].namespace == "Microsoft.AspNetCore.Mvc"
        assert get.explicit_interface_implementations == ("IThings.Get",)
        assert get.parameters[0].attributes[0].name == "FromRoute"
        assert display_name(get.parameters[0].type) == "int"
        assert ctor.kind == MethodKind.CONSTRUCTOR
        assert display_name(ctor.return_type) == "void"

        a, b, c = controller.properties
        assert a.setter is None
        assert b.setter.accessibility == Accessibility.PRIVATE and b.setter.is_init_only
        assert c.is_static and c.accessibility == Accessibility.INTERNAL


class TestReferences:
    YAML = """
projects:
  - name: P
    externals:
      - {name: System.DateTime, kind: struct}
    namespaces:
      - name: Shop
        types:
          - name: Status
            kind: enum
          - name: Page
            type_parameters: [T]
            properties:
              - {name: Items, type: "T[]"}
              - {name: Current, type: "T?"}
          - name: Model
            properties:
              - {name: A, type: "Status?"}
              - {name: B, type: "string?"}
              - {name: C, type: "Status[]?"}
              - {name: D, type: "Page<Status>"}
              - {name: E, type: "System.DateTime?"}
              - {name: F, type: "Model?"}
              - {name: G, type: "System.Nullable<Status>"}
              - {name: H, type: Other.Thing}
"""

    def test_resolution(self):
        types = _types(self.YAML)
        props = {p.name: p.type for p in types["Shop.Model"].properties}

        assert is_nullable_value_type(props["A"])
        assert props["A"].type_arguments[0] is types["Shop.Status"]

        assert display_name(props["B"]) == "string?"
        assert props["B"].nullable_annotated

        assert isinstance(props["C"], ArrayType) and props["C"].nullable_annotated
        assert display_name(props["D"]) == "Shop.Page<Shop.Status>"
        assert display_name(props["E"]) == "System.DateTime?"
        assert is_nullable_value_type(props["E"])
        assert props["F"].nullable_annotated and not is_nullable_value_type(props["F"])
        assert display_name(props["G"]) == "Shop.Status?"
        assert display_name(props["H"]) == "Other.Thing"

    def test_generic_members_substitute(self):
        types = _types(self.YAML)
        page = next(p.type for p in types["Shop.Model"].properties if p.name == "D")
        items, current = page.properties
        assert display_name(items.type) == "Shop.Status[]"
        # T? on an unconstrained parameter is an annotation, not Nullable<T>
        assert display_name(current.type) == "Shop.Status?"

        definition = types["Shop.Page"]
        assert isinstance(definition.properties[0].type.element_type, TypeParameter)

    def test_inner_namespace_wins(self):
        types = _types(
            """
projects:
  - name: P
    namespaces:
      - name: A
        types:
          - {name: Status, kind: enum}
        namespaces:
          - name: B
            types:
              - {name: Status, kind: enum}
              - name: Model
                properties:
                  - {name: S, type: Status}
"""
        )
        model = types["A.B.Model"]
        assert model.properties[0].type is types["A.B.Status"]

    def test_nested_sibling_lookup(self):
        types = _types(
            """
projects:
  - name: P
    types:
      - name: Outer
        types:
          - {name: Mode, kind: enum}
          - name: Inner
            properties:
              - {name: M, type: Mode}
"""
        )
        assert types["Outer.Inner"].properties[0].type is types["Outer.Mode"]

    def test_ambiguous_simple_name(self):
        with pytest.raises(SymbolGraphError, match="Ambiguous"):
            _types(
                """
projects:
  - name: P
    namespaces:
      - {name: A, types: [{name: Status, kind: enum}]}
      - {name: B, types: [{name: Status, kind: enum}]}
    types:
      - name: Model
        properties:
          - {name: S, type: Status}
"""
            )

    def test_base_type(self):
        types = _types(
            """
projects:
  - name: P
    types:
      - {name: Derived, base: Base}
      - {name: Base}
"""
        )
        assert types["Derived"].base_type is types["Base"]

    def test_bare_nullable_is_the_system_wrapper(self):
        types = _types(
            """
projects:
  - name: P
    types:
      - {name: Status, kind: enum}
      - name: Model
        properties:
          - {name: S, type: "Nullable<Status>"}
"""
        )
        prop = types["Model"].properties[0]
        assert is_nullable_value_type(prop.type)
        assert display_name(prop.type) == "Status?"

    def test_global_prefix_in_generic_argument(self):
        types = _types(
            """
projects:
  - name: P
    namespaces:
      - name: Shop
        types:
          - {name: Status, kind: enum}
          - name: Model
            properties:
              - {name: S, type: "System.Collections.Generic.List<global::Shop.Status>"}
"""
        )
        prop = types["Shop.Model"].properties[0]
        assert prop.type.type_arguments[0] is types["Shop.Status"]


class TestErrors:
    @pytest.mark.parametrize(
        "text,match",
        [
            ("just a string", "mapping"),
            ("projects: {a: 1}", "must be a list"),
            ("projects: [{language: C#}]", "name"),
            ("projects: [{name: P, types: [{name: A, kind: blob}]}]", "Unknown kind"),
            ("projects: [{name: P, types: [{name: A}, {name: A}]}]", "Duplicate type"),
            ("projects: [{name: P, types: [{name: A, properties: [{name: X}]}]}]", "Missing 'type'"),
            (
                "projects: [{name: P, types: [{name: A, methods: [{name: M, access: open}]}]}]",
                "Invalid value",
            ),
            ("projects: [{name: P, types: [{name: A, base: 'int[]'}]}]", "named type"),
            ("projects: [{name: P, types: [{name: A, base: 'List<'}]}]", "type reference"),
            ("key: [unclosed", "Invalid solution YAML"),
        ],
    )
    def test_malformed_documents(self, text, match):
        with pytest.raises(SymbolGraphError, match=match):
            load_solution_from_string(text)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            load_solution_from_string("[]")

    @pytest.mark.parametrize(
        "types",
        [
            "[{name: A, base: A}]",
            "[{name: A, base: B}, {name: B, base: A}]",
            "[{name: A, base: B}, {name: B, base: C}, {name: C, base: B}]",
            "[{name: A, type_parameters: [T], base: 'B<T>'}, {name: B, type_parameters: [T], base: 'A<T>'}]",
        ],
    )
    def test_cyclic_base_chain(self, types):
        with pytest.raises(SymbolGraphError, match="Cyclic base type chain"):
            load_solution_from_string(f"projects: [{{name: P, types: {types}}}]")

    def test_non_utf8_file(self, tmp_path: Path):
        path = tmp_path / "latin1.yaml"
        path.write_bytes("name: Caf\xe9\n".encode("latin-1"))
        with pytest.raises(SymbolGraphError, match="UTF-8"):
            load_solution(path)
