"""Request-model scan — ``*Request*`` types that expose settable enum properties.

Unlike the action walk this looks only one level deep: a type's own public
properties whose type is an enum or ``Nullable<enum>`` and whose setter is
public.
"""

from __future__ import annotations

from dataclasses import dataclass

from enumaudit.analysis.naming import display_name, unwrap_nullable
from enumaudit.symbols.models import (
    Accessibility,
    Compilation,
    NamedType,
    PropertySymbol,
    TypeKind,
)


@dataclass(frozen=True)
class EnumProperty:
    name: str
    enum_type: str
    init_only: bool = False


@dataclass(frozen=True)
class RequestModel:
    type_name: str
    properties: tuple[EnumProperty, ...]


def find_request_models(
    compilation: Compilation,
    namespace_prefix: str | None = None,
    name_fragment: str = "Request",
) -> list[RequestModel]:
    """Return request-like types with enum properties, sorted by type name."""
    fragment = name_fragment.lower()
    hits: list[RequestModel] = []

    for named in compilation.global_namespace.iter_types():
        if named.kind not in (TypeKind.CLASS, TypeKind.STRUCT):
            continue
        if fragment not in named.name.lower():
            continue
        if namespace_prefix and not _namespace_of(named).startswith(namespace_prefix):
            continue

        props = tuple(
            EnumProperty(
                name=p.name,
                enum_type=display_name(unwrap_nullable(p.type)),
                init_only=p.setter.is_init_only,
            )
            for p in named.properties
            if _is_public_settable_enum(p)
        )
        if props:
            hits.append(RequestModel(type_name=display_name(named), properties=props))

    hits.sort(key=lambda m: m.type_name)
    return hits


def _is_public_settable_enum(prop: PropertySymbol) -> bool:
    if prop.accessibility != Accessibility.PUBLIC or prop.is_indexer:
        return False
    if prop.setter is None or prop.setter.accessibility != Accessibility.PUBLIC:
        return False
    return unwrap_nullable(prop.type).kind == TypeKind.ENUM


def _namespace_of(named: NamedType) -> str:
    while named.containing_type is not None:
        named = named.containing_type
    return named.namespace
