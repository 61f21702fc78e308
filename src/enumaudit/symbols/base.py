"""SymbolProvider protocol — anything that can hand the analysis a symbol graph."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from enumaudit.symbols.models import Compilation, ProjectInfo


@runtime_checkable
class SymbolProvider(Protocol):
    """Protocol for the upstream build-system collaborator."""

    @property
    def projects(self) -> Sequence[ProjectInfo]:
        """Projects in the loaded solution, in solution order."""
        ...

    async def get_compilation(self, project: ProjectInfo) -> Compilation | None:
        """Return the project's compiled symbol graph, or None if unavailable."""
        ...
