"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from enumaudit.symbols.loader import SymbolGraph, load_solution
from enumaudit.symbols.models import NamedType, PropertySymbol, TypeKind


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def shop_solution_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "shop_solution.yaml"


@pytest.fixture
def shop_graph(shop_solution_path: Path) -> SymbolGraph:
    return load_solution(shop_solution_path)


@pytest.fixture
def status_enum() -> NamedType:
    return NamedType(name="Status", kind=TypeKind.ENUM)


@pytest.fixture
def self_referential(status_enum: NamedType) -> NamedType:
    """``class Node { Node Child; Status S; }``"""
    node = NamedType(name="Node")
    node.declared_properties.extend(
        [
            PropertySymbol(name="Child", type=node),
            PropertySymbol(name="S", type=status_enum),
        ]
    )
    return node
