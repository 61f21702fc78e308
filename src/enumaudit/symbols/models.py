"""Symbol data models — the abstract type graph every analysis reads.

The graph may be cyclic (a property's type can refer back to its declaring
type), so graph nodes compare by identity and use a short, non-recursive
``repr``. Structural identity for the walker's visited set comes from
:meth:`TypeSymbol.identity`, which ignores nullable annotations.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterator
from dataclasses import dataclass, field


class TypeKind(enum.Enum):
    """Shape of a type symbol."""

    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    INTERFACE = "interface"
    DELEGATE = "delegate"
    ARRAY = "array"
    TYPE_PARAMETER = "type_parameter"


class Accessibility(enum.Enum):
    """Declared accessibility of a member or accessor."""

    PUBLIC = "public"
    PROTECTED_INTERNAL = "protected internal"
    INTERNAL = "internal"
    PROTECTED = "protected"
    PRIVATE_PROTECTED = "private protected"
    PRIVATE = "private"


class MethodKind(enum.Enum):
    """What sort of method a method symbol is."""

    ORDINARY = "ordinary"
    CONSTRUCTOR = "constructor"
    STATIC_CONSTRUCTOR = "static_constructor"
    DESTRUCTOR = "destructor"
    PROPERTY_GET = "property_get"
    PROPERTY_SET = "property_set"
    EVENT_ADD = "event_add"
    EVENT_REMOVE = "event_remove"
    OPERATOR = "operator"
    CONVERSION = "conversion"
    LOCAL_FUNCTION = "local_function"


# C# keyword -> metadata full name
SPECIAL_TYPE_KEYWORDS: dict[str, str] = {
    "bool": "System.Boolean",
    "byte": "System.Byte",
    "sbyte": "System.SByte",
    "char": "System.Char",
    "decimal": "System.Decimal",
    "double": "System.Double",
    "float": "System.Single",
    "int": "System.Int32",
    "uint": "System.UInt32",
    "long": "System.Int64",
    "ulong": "System.UInt64",
    "short": "System.Int16",
    "ushort": "System.UInt16",
    "object": "System.Object",
    "string": "System.String",
    "void": "System.Void",
}

REFERENCE_KEYWORDS = frozenset({"object", "string", "void"})

NULLABLE_FULL_NAME = "System.Nullable"


@dataclass(frozen=True)
class AttributeData:
    """An attribute applied to a symbol, identified by its class name."""

    name: str
    namespace: str = ""


@dataclass(frozen=True)
class Location:
    """A declaration location."""

    file_path: str = ""
    in_source: bool = True


class TypeSymbol:
    """Common surface of array, type-parameter, and named types."""

    kind: TypeKind
    nullable_annotated: bool

    def with_nullable_annotation(self, annotated: bool) -> TypeSymbol:
        if self.nullable_annotated == annotated:
            return self
        return dataclasses.replace(self, nullable_annotated=annotated)

    def identity(self) -> tuple:
        """Structural identity, independent of nullable annotation."""
        raise NotImplementedError


@dataclass(eq=False, repr=False)
class ArrayType(TypeSymbol):
    """A single- or multi-dimensional array of ``element_type``."""

    element_type: TypeSymbol
    rank: int = 1
    nullable_annotated: bool = False

    @property
    def kind(self) -> TypeKind:
        return TypeKind.ARRAY

    def identity(self) -> tuple:
        return ("array", self.element_type.identity(), self.rank)

    def __repr__(self) -> str:
        return f"ArrayType({self.element_type!r}, rank={self.rank})"


@dataclass(eq=False, repr=False)
class TypeParameter(TypeSymbol):
    """An unsubstituted generic type parameter such as ``T``."""

    name: str
    nullable_annotated: bool = False

    @property
    def kind(self) -> TypeKind:
        return TypeKind.TYPE_PARAMETER

    def identity(self) -> tuple:
        return ("type_parameter", self.name)

    def __repr__(self) -> str:
        return f"TypeParameter({self.name!r})"


@dataclass(eq=False)
class AccessorSymbol:
    """A property setter."""

    accessibility: Accessibility = Accessibility.PUBLIC
    is_init_only: bool = False


@dataclass(eq=False)
class PropertySymbol:
    """A property declared on a named type."""

    name: str
    type: TypeSymbol
    accessibility: Accessibility = Accessibility.PUBLIC
    is_static: bool = False
    is_indexer: bool = False
    setter: AccessorSymbol | None = field(default_factory=AccessorSymbol)
    attributes: tuple[AttributeData, ...] = ()


@dataclass(eq=False)
class ParameterSymbol:
    """A method parameter."""

    name: str
    type: TypeSymbol
    attributes: tuple[AttributeData, ...] = ()


@dataclass(eq=False)
class MethodSymbol:
    """A method declared on a named type."""

    name: str
    return_type: TypeSymbol
    parameters: tuple[ParameterSymbol, ...] = ()
    kind: MethodKind = MethodKind.ORDINARY
    is_static: bool = False
    is_abstract: bool = False
    accessibility: Accessibility = Accessibility.PUBLIC
    attributes: tuple[AttributeData, ...] = ()
    explicit_interface_implementations: tuple[str, ...] = ()


@dataclass(eq=False, repr=False)
class NamedType(TypeSymbol):
    """A class, struct, enum, interface, or delegate.

    A generic definition carries ``type_parameters``; :meth:`construct`
    produces a constructed type whose ``definition`` points back at it and
    whose member and base types have the arguments substituted on access.
    """

    name: str
    kind: TypeKind = TypeKind.CLASS
    namespace: str = ""
    containing_type: NamedType | None = None
    is_abstract: bool = False
    is_record: bool = False
    declared_base: NamedType | None = None
    type_parameters: tuple[TypeParameter, ...] = ()
    attributes: tuple[AttributeData, ...] = ()
    locations: list[Location] = field(default_factory=list)
    declared_properties: list[PropertySymbol] = field(default_factory=list)
    declared_methods: list[MethodSymbol] = field(default_factory=list)
    nested_types: list[NamedType] = field(default_factory=list)
    type_arguments: tuple[TypeSymbol, ...] = ()
    definition: NamedType | None = None
    nullable_annotated: bool = False

    @property
    def original_definition(self) -> NamedType:
        return self.definition if self.definition is not None else self

    @property
    def arity(self) -> int:
        return len(self.original_definition.type_parameters)

    @property
    def qualified_name(self) -> str:
        """Namespace- and containing-type-qualified name, no generic detail."""
        if self.containing_type is not None:
            return f"{self.containing_type.qualified_name}.{self.name}"
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    @property
    def base_type(self) -> NamedType | None:
        base = self.original_definition.declared_base
        if base is None or not self.type_arguments:
            return base
        return substitute(base, self.type_map())

    @property
    def properties(self) -> list[PropertySymbol]:
        props = self.original_definition.declared_properties
        if not self.type_arguments:
            return list(props)
        mapping = self.type_map()
        return [
            dataclasses.replace(p, type=substitute(p.type, mapping)) for p in props
        ]

    @property
    def methods(self) -> list[MethodSymbol]:
        methods = self.original_definition.declared_methods
        if not self.type_arguments:
            return list(methods)
        mapping = self.type_map()
        return [_substitute_method(m, mapping) for m in methods]

    @property
    def source_locations(self) -> list[Location]:
        return self.original_definition.locations

    def type_map(self) -> dict[str, TypeSymbol]:
        params = self.original_definition.type_parameters
        return {p.name: a for p, a in zip(params, self.type_arguments)}

    def construct(self, type_arguments: tuple[TypeSymbol, ...]) -> NamedType:
        """Return this definition constructed with ``type_arguments``."""
        definition = self.original_definition
        if len(type_arguments) != len(definition.type_parameters):
            raise ValueError(
                f"{definition.qualified_name} takes {len(definition.type_parameters)} "
                f"type argument(s), got {len(type_arguments)}"
            )
        return NamedType(
            name=definition.name,
            kind=definition.kind,
            namespace=definition.namespace,
            containing_type=definition.containing_type,
            is_abstract=definition.is_abstract,
            is_record=definition.is_record,
            attributes=definition.attributes,
            type_arguments=tuple(type_arguments),
            definition=definition,
        )

    def with_nullable_annotation(self, annotated: bool) -> NamedType:
        if self.nullable_annotated == annotated:
            return self
        return dataclasses.replace(
            self,
            nullable_annotated=annotated,
            definition=self.original_definition,
        )

    def identity(self) -> tuple:
        return (
            "named",
            self.qualified_name,
            self.arity,
            tuple(a.identity() for a in self.type_arguments),
        )

    def __repr__(self) -> str:
        return f"NamedType({self.qualified_name!r}, kind={self.kind.value})"


@dataclass(eq=False)
class NamespaceSymbol:
    """A namespace; the global namespace has an empty name."""

    name: str = ""
    namespaces: list[NamespaceSymbol] = field(default_factory=list)
    types: list[NamedType] = field(default_factory=list)

    def iter_types(self) -> Iterator[NamedType]:
        """Yield every named type below this namespace, nested types included."""
        for ns in self.namespaces:
            yield from ns.iter_types()
        for named in self.types:
            yield from _flatten(named)


@dataclass(eq=False)
class Compilation:
    """A project's compiled symbol graph."""

    global_namespace: NamespaceSymbol = field(default_factory=NamespaceSymbol)
    assembly_name: str = ""


@dataclass(frozen=True)
class ProjectInfo:
    """What the provider tells us about a project before compiling it."""

    id: str
    name: str
    file_path: str = ""
    language: str = "C#"


NULLABLE_DEFINITION = NamedType(
    name="Nullable",
    namespace="System",
    kind=TypeKind.STRUCT,
    type_parameters=(TypeParameter("T"),),
)


def nullable_of(type_: TypeSymbol) -> NamedType:
    """Wrap a value type in ``System.Nullable<T>``."""
    return NULLABLE_DEFINITION.construct((type_,))


def substitute(type_: TypeSymbol, mapping: dict[str, TypeSymbol]) -> TypeSymbol:
    """Replace type parameters in ``type_`` according to ``mapping``."""
    if not mapping:
        return type_

    if isinstance(type_, TypeParameter):
        replacement = mapping.get(type_.name)
        if replacement is None:
            return type_
        if type_.nullable_annotated:
            return replacement.with_nullable_annotation(True)
        return replacement

    if isinstance(type_, ArrayType):
        element = substitute(type_.element_type, mapping)
        if element is type_.element_type:
            return type_
        return ArrayType(element, type_.rank, type_.nullable_annotated)

    if isinstance(type_, NamedType) and type_.type_arguments:
        args = tuple(substitute(a, mapping) for a in type_.type_arguments)
        if all(new is old for new, old in zip(args, type_.type_arguments)):
            return type_
        constructed = type_.original_definition.construct(args)
        return constructed.with_nullable_annotation(type_.nullable_annotated)

    return type_


def _substitute_method(method: MethodSymbol, mapping: dict[str, TypeSymbol]) -> MethodSymbol:
    return dataclasses.replace(
        method,
        return_type=substitute(method.return_type, mapping),
        parameters=tuple(
            dataclasses.replace(p, type=substitute(p.type, mapping))
            for p in method.parameters
        ),
    )


def _flatten(named: NamedType) -> Iterator[NamedType]:
    yield named
    for nested in named.nested_types:
        yield from _flatten(nested)
