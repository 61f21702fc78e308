"""Report data models — immutable once an analysis pass returns them."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class EnumFinding:
    """An enum type and the dotted path (rooted at the parameter) that reaches it."""

    enum_type: str
    name: str


@dataclass(frozen=True)
class ParameterInfo:
    """A request parameter's name and display type."""

    name: str
    type: str


@dataclass(frozen=True)
class ActionResult:
    """An action method with at least one enum reachable from its request parameters."""

    method_name: str
    return_type: str
    parameters: tuple[ParameterInfo, ...]
    enum_params: tuple[EnumFinding, ...]

    def __post_init__(self) -> None:
        if not self.enum_params:
            raise ValueError(f"Action {self.method_name!r} has no enum findings")

    @property
    def parameter_types(self) -> tuple[str, ...]:
        return tuple(p.type for p in self.parameters)

    @property
    def signature(self) -> tuple[str, str, tuple[str, ...]]:
        """Identity used to collapse duplicate actions within a controller."""
        return (self.method_name, self.return_type, self.parameter_types)


@dataclass(frozen=True)
class ControllerResult:
    controller_class_name: str
    controller_source_file_path: str
    actions: tuple[ActionResult, ...]


@dataclass(frozen=True)
class ProjectResult:
    project_name: str
    project_file_path: str
    controllers: tuple[ControllerResult, ...]


@dataclass(frozen=True)
class AnalysisReport:
    """Ordered Project -> Controller -> Action tree from one analysis pass."""

    projects: tuple[ProjectResult, ...] = ()

    def __iter__(self) -> Iterator[ProjectResult]:
        return iter(self.projects)

    def __len__(self) -> int:
        return len(self.projects)

    @property
    def is_empty(self) -> bool:
        return not self.projects

    @property
    def action_count(self) -> int:
        return sum(len(c.actions) for p in self.projects for c in p.controllers)

    @property
    def finding_count(self) -> int:
        return sum(
            len(a.enum_params)
            for p in self.projects
            for c in p.controllers
            for a in c.actions
        )
