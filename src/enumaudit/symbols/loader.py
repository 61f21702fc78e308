"""Load a symbol graph from a YAML solution description.

The document lists projects; each project declares namespaces and types the
way a compiler front end would report them. Types are declared in a first
pass and every reference (base types, property/parameter/return types) is
resolved in a second, so declarations may refer to each other in any order.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

import yaml

from enumaudit.errors import SymbolGraphError
from enumaudit.symbols.models import (
    NULLABLE_DEFINITION,
    REFERENCE_KEYWORDS,
    SPECIAL_TYPE_KEYWORDS,
    AccessorSymbol,
    Accessibility,
    ArrayType,
    AttributeData,
    Compilation,
    Location,
    MethodKind,
    MethodSymbol,
    NamedType,
    NamespaceSymbol,
    ParameterSymbol,
    ProjectInfo,
    PropertySymbol,
    TypeKind,
    TypeParameter,
    TypeSymbol,
    nullable_of,
)
from enumaudit.symbols.typeref import NULLABLE_SUFFIX, TypeRef, parse_type_ref

logger = logging.getLogger(__name__)

_VALUE_TYPE_FULL_NAMES = frozenset(
    full for kw, full in SPECIAL_TYPE_KEYWORDS.items() if kw not in REFERENCE_KEYWORDS
)

# YAML kind -> (TypeKind, is_record)
_KINDS: dict[str, tuple[TypeKind, bool]] = {
    "class": (TypeKind.CLASS, False),
    "struct": (TypeKind.STRUCT, False),
    "enum": (TypeKind.ENUM, False),
    "interface": (TypeKind.INTERFACE, False),
    "delegate": (TypeKind.DELEGATE, False),
    "record": (TypeKind.CLASS, True),
    "record class": (TypeKind.CLASS, True),
    "record struct": (TypeKind.STRUCT, True),
}


class SymbolGraph:
    """In-memory SymbolProvider over a loaded solution."""

    def __init__(self, name: str = "", file_path: str = "") -> None:
        self.name = name
        self.file_path = file_path
        self.diagnostics: list[str] = []
        self._projects: list[ProjectInfo] = []
        self._compilations: dict[str, Compilation | None] = {}

    @property
    def projects(self) -> Sequence[ProjectInfo]:
        return tuple(self._projects)

    def add_project(self, project: ProjectInfo, compilation: Compilation | None) -> None:
        if project.id in self._compilations:
            raise SymbolGraphError(f"Duplicate project id: {project.id}")
        self._projects.append(project)
        self._compilations[project.id] = compilation

    async def get_compilation(self, project: ProjectInfo) -> Compilation | None:
        return self._compilations.get(project.id)


def load_solution(
    path: str | Path,
    log: Callable[[str], None] | None = None,
) -> SymbolGraph:
    """Load a solution description from a YAML file path."""
    full_path = Path(path).resolve()
    if not full_path.is_file():
        raise FileNotFoundError(f"Solution file not found: {full_path}")

    _emit(log, f"Loading solution: {full_path}")
    try:
        text = full_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SymbolGraphError(f"Solution file is not valid UTF-8: {full_path}") from e
    graph = _build_graph(_parse_document(text), default_path=str(full_path), log=log)
    _emit(log, f"Loaded: {graph.file_path}")
    _emit(log, f"Projects: {len(graph.projects)}")
    return graph


def load_solution_from_string(
    text: str,
    log: Callable[[str], None] | None = None,
) -> SymbolGraph:
    """Parse a YAML string into a SymbolGraph."""
    return _build_graph(_parse_document(text), default_path="", log=log)


def _parse_document(text: str) -> dict:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SymbolGraphError(f"Invalid solution YAML: {e}") from e
    if not isinstance(data, dict):
        raise SymbolGraphError("Solution YAML must be a mapping")
    return data


def _build_graph(
    data: dict,
    default_path: str,
    log: Callable[[str], None] | None,
) -> SymbolGraph:
    graph = SymbolGraph(
        name=str(data.get("name", "")),
        file_path=str(data.get("path") or default_path),
    )

    projects = data.get("projects") or []
    if not isinstance(projects, list):
        raise SymbolGraphError("'projects' must be a list")

    for index, raw in enumerate(projects):
        if not isinstance(raw, dict) or not raw.get("name"):
            raise SymbolGraphError(f"Project #{index} must be a mapping with a 'name'")

        name = str(raw["name"])
        project = ProjectInfo(
            id=str(raw.get("id") or f"{index}:{name}"),
            name=name,
            file_path=str(raw.get("path") or ""),
            language=str(raw.get("language") or "C#"),
        )

        error = raw.get("compilation_error")
        if error:
            message = f"[WorkspaceFailed:Failure] {error}"
            graph.diagnostics.append(message)
            _emit(log, message)
            graph.add_project(project, None)
            continue

        compilation = _ProjectBuilder(name).build(raw)
        graph.add_project(project, compilation)

    return graph


class _ProjectBuilder:
    """Two-pass declaration and reference resolution for one project."""

    def __init__(self, project_name: str) -> None:
        self._project = project_name
        self._by_name: dict[tuple[str, int], NamedType] = {
            ("System.Nullable", 1): NULLABLE_DEFINITION,
        }
        self._by_simple_name: dict[tuple[str, int], list[NamedType]] = {
            ("Nullable", 1): [NULLABLE_DEFINITION],
        }
        self._pending: list[tuple[NamedType, dict]] = []

    def build(self, raw: dict) -> Compilation:
        for ext in _as_list(raw.get("externals"), "externals"):
            qualified = _require_name(ext, "external type")
            namespace, _, simple = qualified.rpartition(".")
            self._declare_type({**ext, "name": simple}, namespace, None)

        root = NamespaceSymbol()
        for ns_data in _as_list(raw.get("namespaces"), "namespaces"):
            root.namespaces.append(self._declare_namespace(ns_data, ""))
        for type_data in _as_list(raw.get("types"), "types"):
            root.types.append(self._declare_type(type_data, "", None))

        for named, data in self._pending:
            self._resolve_members(named, data)

        for named, _ in self._pending:
            _check_base_chain(named)

        return Compilation(
            global_namespace=root,
            assembly_name=str(raw.get("assembly") or self._project),
        )

    # -- pass 1: declarations ------------------------------------------------

    def _declare_namespace(self, data: dict, parent: str) -> NamespaceSymbol:
        name = _require_name(data, "namespace")
        full = f"{parent}.{name}" if parent else name
        ns = NamespaceSymbol(name=name)
        for child in _as_list(data.get("namespaces"), "namespaces"):
            ns.namespaces.append(self._declare_namespace(child, full))
        for type_data in _as_list(data.get("types"), "types"):
            ns.types.append(self._declare_type(type_data, full, None))
        return ns

    def _declare_type(
        self,
        data: dict,
        namespace: str,
        containing: NamedType | None,
    ) -> NamedType:
        name = _require_name(data, "type")
        kind_text = str(data.get("kind", "class")).lower()
        if kind_text not in _KINDS:
            raise SymbolGraphError(f"Unknown kind {kind_text!r} for type {name!r}")
        kind, is_record = _KINDS[kind_text]

        named = NamedType(
            name=name,
            kind=kind,
            namespace=namespace if containing is None else "",
            containing_type=containing,
            is_abstract=bool(data.get("abstract", False)),
            is_record=is_record,
            type_parameters=tuple(
                TypeParameter(str(p)) for p in _as_list(data.get("type_parameters"), "type_parameters")
            ),
            attributes=_attributes(data.get("attributes")),
            locations=[Location(file_path=str(s)) for s in _sources(data)],
        )

        key = (named.qualified_name, named.arity)
        if key in self._by_name:
            raise SymbolGraphError(f"Duplicate type {named.qualified_name!r} in {self._project}")
        self._by_name[key] = named
        self._by_simple_name.setdefault((name, named.arity), []).append(named)

        for nested in _as_list(data.get("types"), "types"):
            named.nested_types.append(self._declare_type(nested, "", named))

        self._pending.append((named, data))
        return named

    # -- pass 2: references --------------------------------------------------

    def _resolve_members(self, named: NamedType, data: dict) -> None:
        base = data.get("base")
        if base:
            resolved = self._resolve(str(base), named)
            if not isinstance(resolved, NamedType):
                raise SymbolGraphError(f"Base of {named.qualified_name!r} must be a named type")
            named.declared_base = resolved

        for prop in _as_list(data.get("properties"), "properties"):
            named.declared_properties.append(self._property(prop, named))

        for method in _as_list(data.get("methods"), "methods"):
            named.declared_methods.append(self._method(method, named))

    def _property(self, data: dict, owner: NamedType) -> PropertySymbol:
        name = _require_name(data, f"property of {owner.qualified_name}")
        setter_access = data.get("setter", "public")
        if setter_access is True:
            setter_access = "public"
        setter = None
        if setter_access not in (None, False, "none"):
            setter = AccessorSymbol(
                accessibility=_enum_value(Accessibility, setter_access, f"setter of {name}"),
                is_init_only=bool(data.get("init_only", False)),
            )
        return PropertySymbol(
            name=name,
            type=self._resolve(_require(data, "type", name), owner),
            accessibility=_enum_value(Accessibility, data.get("access", "public"), name),
            is_static=bool(data.get("static", False)),
            is_indexer=bool(data.get("indexer", False)),
            setter=setter,
            attributes=_attributes(data.get("attributes")),
        )

    def _method(self, data: dict, owner: NamedType) -> MethodSymbol:
        name = _require_name(data, f"method of {owner.qualified_name}")
        params = tuple(
            ParameterSymbol(
                name=_require_name(p, f"parameter of {name}"),
                type=self._resolve(_require(p, "type", name), owner),
                attributes=_attributes(p.get("attributes")),
            )
            for p in _as_list(data.get("parameters"), "parameters")
        )
        explicit = data.get("explicit_interface") or ()
        if isinstance(explicit, str):
            explicit = (explicit,)
        return MethodSymbol(
            name=name,
            return_type=self._resolve(str(data.get("returns", "void")), owner),
            parameters=params,
            kind=_enum_value(MethodKind, data.get("kind", "ordinary"), name),
            is_static=bool(data.get("static", False)),
            is_abstract=bool(data.get("abstract", False)),
            accessibility=_enum_value(Accessibility, data.get("access", "public"), name),
            attributes=_attributes(data.get("attributes")),
            explicit_interface_implementations=tuple(str(e) for e in explicit),
        )

    def _resolve(self, text: str, context: NamedType) -> TypeSymbol:
        return self._resolve_ref(parse_type_ref(text), context)

    def _resolve_ref(self, ref: TypeRef, context: NamedType) -> TypeSymbol:
        result: TypeSymbol = self._lookup(ref.name, len(ref.args), context)

        if ref.args:
            args = tuple(self._resolve_ref(a, context) for a in ref.args)
            result = result.construct(args)

        for suffix in ref.suffixes:
            if suffix == NULLABLE_SUFFIX:
                if _is_value_type(result):
                    result = nullable_of(result)
                else:
                    result = result.with_nullable_annotation(True)
            else:
                result = ArrayType(result, rank=suffix)
        return result

    def _lookup(self, name: str, arity: int, context: NamedType) -> TypeSymbol:
        if arity == 0 and "." not in name:
            scope: NamedType | None = context
            while scope is not None:
                for param in scope.type_parameters:
                    if param.name == name:
                        return param
                scope = scope.containing_type

        name = SPECIAL_TYPE_KEYWORDS.get(name, name)

        # Innermost scope first, as in C# name lookup; the name as written last
        candidates: list[str] = []
        scope = context
        while scope is not None:
            candidates.append(f"{scope.qualified_name}.{name}")
            outermost = scope
            scope = scope.containing_type
        namespace = outermost.namespace
        while namespace:
            candidates.append(f"{namespace}.{name}")
            namespace = namespace.rpartition(".")[0]
        candidates.append(name)

        for candidate in candidates:
            found = self._by_name.get((candidate, arity))
            if found is not None:
                return found

        if "." not in name:
            matches = self._by_simple_name.get((name, arity), [])
            if len(matches) == 1:
                return matches[0]
            if len(matches) > 1:
                options = ", ".join(m.qualified_name for m in matches)
                raise SymbolGraphError(f"Ambiguous type reference {name!r}: {options}")

        return self._external(name, arity)

    def _external(self, qualified: str, arity: int) -> NamedType:
        namespace, _, simple = qualified.rpartition(".")
        if arity == 1:
            params = (TypeParameter("T"),)
        else:
            params = tuple(TypeParameter(f"T{i + 1}") for i in range(arity))
        stub = NamedType(
            name=simple,
            namespace=namespace,
            kind=TypeKind.STRUCT if qualified in _VALUE_TYPE_FULL_NAMES else TypeKind.CLASS,
            type_parameters=params,
        )
        logger.debug("Unresolved type %s in %s, using external stub", qualified, self._project)
        self._by_name[(qualified, arity)] = stub
        return stub


def _check_base_chain(named: NamedType) -> None:
    seen = {named}
    base = named.declared_base
    while base is not None:
        definition = base.original_definition
        if definition in seen:
            raise SymbolGraphError(f"Cyclic base type chain through {named.qualified_name!r}")
        seen.add(definition)
        base = definition.declared_base


def _is_value_type(type_: TypeSymbol) -> bool:
    if not isinstance(type_, NamedType):
        return False
    if type_.original_definition is NULLABLE_DEFINITION:
        return False
    return type_.kind in (TypeKind.STRUCT, TypeKind.ENUM)


def _attributes(raw) -> tuple[AttributeData, ...]:
    result = []
    for item in _as_list(raw, "attributes"):
        if isinstance(item, dict):
            item = _require_name(item, "attribute")
        namespace, _, name = str(item).rpartition(".")
        result.append(AttributeData(name=name, namespace=namespace))
    return tuple(result)


def _sources(data: dict) -> list[str]:
    sources = data.get("sources")
    if sources is None:
        source = data.get("source")
        return [source] if source else []
    return [str(s) for s in _as_list(sources, "sources")]


def _as_list(raw, what: str) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise SymbolGraphError(f"'{what}' must be a list")
    return raw


def _require(data: dict, key: str, owner: str) -> str:
    if not isinstance(data, dict) or data.get(key) in (None, ""):
        raise SymbolGraphError(f"Missing '{key}' for {owner}")
    return str(data[key])


def _require_name(data, what: str) -> str:
    if not isinstance(data, dict) or not data.get("name"):
        raise SymbolGraphError(f"Each {what} must be a mapping with a 'name'")
    return str(data["name"])


def _enum_value(enum_cls: type[enum.Enum], value, owner: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise SymbolGraphError(
            f"Invalid value {value!r} for {owner}; expected one of: {choices}"
        ) from None


def _emit(log: Callable[[str], None] | None, message: str) -> None:
    logger.info(message)
    if log:
        log(message)
