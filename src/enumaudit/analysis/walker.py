"""Recursive, depth-bounded, cycle-safe enum discovery over the type graph.

Every kind of descent (array element, ``Nullable<T>`` argument, generic
argument, property) costs one unit of the depth budget. Array membership and
generic containment keep the current path; only property descent extends it.
"""

from __future__ import annotations

from collections.abc import Iterator

from enumaudit.analysis.models import EnumFinding
from enumaudit.analysis.naming import display_name, is_nullable_value_type, strip_nullable
from enumaudit.symbols.models import (
    Accessibility,
    ArrayType,
    NamedType,
    PropertySymbol,
    TypeKind,
    TypeSymbol,
)

DEFAULT_DEPTH_LIMIT = 6


def collect_enum_params(
    type_: TypeSymbol | None,
    current_path: str,
    dest: list[EnumFinding],
    visited: set[tuple],
    depth_limit: int = DEFAULT_DEPTH_LIMIT,
) -> None:
    """Append an :class:`EnumFinding` to ``dest`` for every enum reachable from ``type_``.

    ``visited`` holds the identities of named types already expanded during
    this walk. Callers pass a fresh set per top-level parameter.
    """
    if type_ is None or depth_limit < 0:
        return

    type_ = strip_nullable(type_)

    if isinstance(type_, ArrayType):
        collect_enum_params(type_.element_type, current_path, dest, visited, depth_limit - 1)
        return

    if type_.kind == TypeKind.ENUM:
        dest.append(EnumFinding(enum_type=display_name(type_), name=current_path))
        return

    if not isinstance(type_, NamedType):
        return

    identity = type_.identity()
    if identity in visited:
        return
    visited.add(identity)

    if is_nullable_value_type(type_):
        collect_enum_params(
            type_.type_arguments[0], current_path, dest, visited, depth_limit - 1
        )
        return

    # List<Status> and friends: the enum is still named by the parameter
    for argument in type_.type_arguments:
        collect_enum_params(argument, current_path, dest, visited, depth_limit - 1)

    if type_.kind in (TypeKind.CLASS, TypeKind.STRUCT):
        for prop in settable_properties(type_):
            collect_enum_params(
                prop.type,
                f"{current_path}.{prop.name}",
                dest,
                visited,
                depth_limit - 1,
            )


def settable_properties(type_: NamedType) -> Iterator[PropertySymbol]:
    """Public instance non-indexer properties with a setter, own then inherited.

    Init-only setters count.
    """
    current: NamedType | None = type_
    while current is not None:
        for prop in current.properties:
            if prop.is_static or prop.is_indexer:
                continue
            if prop.accessibility != Accessibility.PUBLIC:
                continue
            if prop.setter is None:
                continue
            yield prop
        current = current.base_type


def find_enums(
    type_: TypeSymbol,
    path: str,
    depth_limit: int = DEFAULT_DEPTH_LIMIT,
) -> list[EnumFinding]:
    """Walk ``type_`` with a fresh visited set and return the findings."""
    findings: list[EnumFinding] = []
    collect_enum_params(type_, path, findings, set(), depth_limit)
    return findings
