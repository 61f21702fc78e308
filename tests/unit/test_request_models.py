"""Tests for the request-model scan."""

from __future__ import annotations

import asyncio

from enumaudit.analysis.request_models import EnumProperty, RequestModel, find_request_models
from enumaudit.symbols.models import (
    AccessorSymbol,
    Accessibility,
    Compilation,
    NamedType,
    NamespaceSymbol,
    PropertySymbol,
    TypeKind,
    nullable_of,
)


def _compilation(*types: NamedType) -> Compilation:
    return Compilation(global_namespace=NamespaceSymbol(types=list(types)))


def test_fixture_request_model(shop_graph):
    compilation = asyncio.run(shop_graph.get_compilation(shop_graph.projects[0]))
    assert find_request_models(compilation) == [
        RequestModel(
            type_name="Shop.Api.CreateOrderRequest",
            properties=(
                EnumProperty("Status", "Shop.Api.Status", init_only=False),
                EnumProperty("Priority", "Shop.Api.Priority", init_only=True),
            ),
        )
    ]


def test_namespace_prefix(shop_graph):
    compilation = asyncio.run(shop_graph.get_compilation(shop_graph.projects[0]))
    assert len(find_request_models(compilation, namespace_prefix="Shop.")) == 1
    assert find_request_models(compilation, namespace_prefix="Billing") == []


def test_name_match_is_case_insensitive(status_enum):
    model = NamedType(name="BulkrequestBody", kind=TypeKind.STRUCT)
    model.declared_properties.append(PropertySymbol(name="S", type=nullable_of(status_enum)))
    [hit] = find_request_models(_compilation(model))
    assert hit.properties == (EnumProperty("S", "Status"),)


def test_only_public_settable_enum_properties(status_enum):
    model = NamedType(name="UpdateRequest")
    model.declared_properties.extend(
        [
            PropertySymbol(name="NoSetter", type=status_enum, setter=None),
            PropertySymbol(
                name="Protected",
                type=status_enum,
                setter=AccessorSymbol(accessibility=Accessibility.PROTECTED),
            ),
            PropertySymbol(name="Internal", type=status_enum, accessibility=Accessibility.INTERNAL),
            PropertySymbol(name="Item", type=status_enum, is_indexer=True),
            PropertySymbol(name="Name", type=NamedType(name="String", namespace="System")),
        ]
    )
    assert find_request_models(_compilation(model)) == []


def test_nested_type_uses_outer_namespace(status_enum):
    outer = NamedType(name="Orders", namespace="Shop.Api")
    inner = NamedType(name="CancelRequest", containing_type=outer)
    inner.declared_properties.append(PropertySymbol(name="Reason", type=status_enum))
    outer.nested_types.append(inner)

    [hit] = find_request_models(_compilation(outer), namespace_prefix="Shop")
    assert hit.type_name == "Shop.Api.Orders.CancelRequest"


def test_enums_and_interfaces_are_not_models(status_enum):
    iface = NamedType(name="IRequest", kind=TypeKind.INTERFACE)
    iface.declared_properties.append(PropertySymbol(name="S", type=status_enum))
    enum_named = NamedType(name="RequestKind", kind=TypeKind.ENUM)
    assert find_request_models(_compilation(iface, enum_named)) == []


def test_sorted_by_type_name(status_enum):
    types = []
    for name in ("ZRequest", "ARequest", "MRequest"):
        named = NamedType(name=name)
        named.declared_properties.append(PropertySymbol(name="S", type=status_enum))
        types.append(named)
    names = [m.type_name for m in find_request_models(_compilation(*types))]
    assert names == ["ARequest", "MRequest", "ZRequest"]
