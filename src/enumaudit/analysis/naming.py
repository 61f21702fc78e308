"""Canonical textual rendering of types, used for report fields and comparisons."""

from __future__ import annotations

from enumaudit.symbols.models import (
    NULLABLE_FULL_NAME,
    SPECIAL_TYPE_KEYWORDS,
    ArrayType,
    NamedType,
    TypeParameter,
    TypeSymbol,
)

_KEYWORD_BY_FULL_NAME = {full: kw for kw, full in SPECIAL_TYPE_KEYWORDS.items()}


def display_name(type_: TypeSymbol) -> str:
    """Render a type for display.

    Namespace- and containing-type-qualified with no ``global::`` prefix,
    C# keywords for special types, generic arguments included, and the
    nullable-reference marker kept. ``Nullable<T>`` renders as ``T?``.
    """
    if isinstance(type_, ArrayType):
        text = display_name(type_.element_type) + _rank_suffix(type_.rank)
    elif isinstance(type_, TypeParameter):
        text = type_.name
    elif isinstance(type_, NamedType):
        text = _display_named(type_)
    else:
        raise TypeError(f"Not a type symbol: {type_!r}")

    if type_.nullable_annotated:
        text += "?"
    return text


def full_name(type_: TypeSymbol) -> str:
    """Qualified name without generic detail, keywords, or nullable marker."""
    if isinstance(type_, ArrayType):
        return full_name(type_.element_type) + _rank_suffix(type_.rank)
    if isinstance(type_, TypeParameter):
        return type_.name
    if isinstance(type_, NamedType):
        return type_.qualified_name
    raise TypeError(f"Not a type symbol: {type_!r}")


def strip_nullable(type_: TypeSymbol) -> TypeSymbol:
    return type_.with_nullable_annotation(False)


def is_nullable_value_type(type_: TypeSymbol) -> bool:
    """True for the one-argument ``System.Nullable<T>`` wrapper."""
    return (
        isinstance(type_, NamedType)
        and type_.original_definition.qualified_name == NULLABLE_FULL_NAME
        and len(type_.type_arguments) == 1
    )


def unwrap_nullable(type_: TypeSymbol) -> TypeSymbol:
    if is_nullable_value_type(type_):
        return type_.type_arguments[0]
    return type_


def element_type(type_: TypeSymbol) -> TypeSymbol | None:
    if isinstance(type_, ArrayType):
        return type_.element_type
    return None


def primary_source_path(type_: NamedType) -> str:
    """First in-source declaration file path, or an empty string."""
    for location in type_.source_locations:
        if location.in_source and location.file_path and location.file_path.strip():
            return location.file_path
    return ""


def _display_named(type_: NamedType) -> str:
    if is_nullable_value_type(type_):
        return display_name(type_.type_arguments[0]) + "?"

    keyword = _KEYWORD_BY_FULL_NAME.get(type_.qualified_name)
    if keyword is not None and not type_.type_arguments:
        return keyword

    if type_.containing_type is not None:
        text = f"{_display_named(type_.containing_type)}.{type_.name}"
    elif type_.namespace:
        text = f"{type_.namespace}.{type_.name}"
    else:
        text = type_.name

    if type_.type_arguments:
        args = ", ".join(display_name(a) for a in type_.type_arguments)
        text += f"<{args}>"
    elif type_.type_parameters:
        text += "<" + ", ".join(p.name for p in type_.type_parameters) + ">"
    return text


def _rank_suffix(rank: int) -> str:
    return "[" + "," * (rank - 1) + "]"
