"""Controller / action / request-parameter predicates.

Each check is a pure function over the symbol model. Controller detection is
an ordered composition of two independent predicates: the inheritance check,
then the name-suffix fallback for controllers that do not statically derive
from a known base.
"""

from __future__ import annotations

from collections.abc import Iterable

from enumaudit.analysis.naming import full_name
from enumaudit.config import AuditConfig
from enumaudit.symbols.models import (
    Accessibility,
    AttributeData,
    MethodKind,
    MethodSymbol,
    NamedType,
    ParameterSymbol,
    TypeKind,
)

_ATTRIBUTE_SUFFIX = "Attribute"

_DEFAULT_CONFIG = AuditConfig()


def normalize_attribute_name(name: str) -> str:
    """Strip a trailing ``Attribute`` so ``Foo`` and ``FooAttribute`` compare equal."""
    if name.endswith(_ATTRIBUTE_SUFFIX) and len(name) > len(_ATTRIBUTE_SUFFIX):
        return name[: -len(_ATTRIBUTE_SUFFIX)]
    return name


def has_attribute(attributes: Iterable[AttributeData], attribute_name: str) -> bool:
    wanted = normalize_attribute_name(attribute_name)
    return any(normalize_attribute_name(a.name) == wanted for a in attributes)


def derives_from(type_: NamedType, base_full_names: Iterable[str]) -> bool:
    """True if ``type_`` or any type on its base chain has one of the given names."""
    names = set(base_full_names)
    current: NamedType | None = type_
    while current is not None:
        if full_name(current) in names:
            return True
        current = current.base_type
    return False


def has_controller_suffix(type_: NamedType, suffix: str = "Controller") -> bool:
    return type_.name.endswith(suffix)


def is_controller(type_: NamedType | None, config: AuditConfig | None = None) -> bool:
    if type_ is None:
        return False
    config = config or _DEFAULT_CONFIG

    if type_.kind != TypeKind.CLASS or type_.is_abstract:
        return False

    if derives_from(type_, config.controller_base_types):
        return True
    return has_controller_suffix(type_, config.controller_suffix)


def is_action_method(method: MethodSymbol | None, config: AuditConfig | None = None) -> bool:
    if method is None:
        return False
    config = config or _DEFAULT_CONFIG

    if method.kind != MethodKind.ORDINARY:
        return False
    if method.is_static or method.is_abstract:
        return False
    if method.accessibility != Accessibility.PUBLIC:
        return False
    if has_attribute(method.attributes, config.non_action_attribute):
        return False
    if method.explicit_interface_implementations:
        return False
    return True


def is_request_parameter(
    parameter: ParameterSymbol | None,
    config: AuditConfig | None = None,
) -> bool:
    if parameter is None:
        return False
    config = config or _DEFAULT_CONFIG

    # Injected services are not bound from the request
    if has_attribute(parameter.attributes, config.from_services_attribute):
        return False

    # Exact match only, no inheritance check
    return full_name(parameter.type) not in config.excluded_parameter_types
