"""Fold per-action findings into the Project -> Controller -> Action report."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from enumaudit.analysis.models import (
    ActionResult,
    AnalysisReport,
    ControllerResult,
    ProjectResult,
)
from enumaudit.symbols.models import ProjectInfo

logger = logging.getLogger(__name__)


@dataclass
class _ControllerEntry:
    class_name: str
    source_file_path: str
    actions: list[ActionResult] = field(default_factory=list)

    def add(self, action: ActionResult) -> bool:
        signature = action.signature
        if any(existing.signature == signature for existing in self.actions):
            return False
        self.actions.append(action)
        return True


@dataclass
class _ProjectEntry:
    name: str
    file_path: str
    controllers: list[_ControllerEntry] = field(default_factory=list)

    def controller(self, class_name: str, source_file_path: str) -> _ControllerEntry:
        for entry in self.controllers:
            if entry.class_name == class_name:
                return entry
        entry = _ControllerEntry(class_name=class_name, source_file_path=source_file_path)
        self.controllers.append(entry)
        return entry


class ReportBuilder:
    """Find-or-create accumulator for one analysis pass. Not thread-safe."""

    def __init__(self) -> None:
        self._projects: dict[str, _ProjectEntry] = {}

    def add(
        self,
        project: ProjectInfo,
        controller_class_name: str,
        controller_source_file_path: str,
        actions: Iterable[ActionResult],
    ) -> int:
        """Record a controller's actions. Returns how many were new.

        Nothing is materialized when ``actions`` is empty. An action whose
        name, return type, and ordered parameter types match one already
        recorded for the controller is discarded.
        """
        actions = list(actions)
        if not actions:
            return 0

        entry = self._projects.get(project.id)
        if entry is None:
            entry = _ProjectEntry(name=project.name, file_path=project.file_path or "")
            self._projects[project.id] = entry

        controller = entry.controller(controller_class_name, controller_source_file_path)
        added = sum(1 for action in actions if controller.add(action))
        if added < len(actions):
            logger.debug(
                "Discarded %d duplicate action(s) on %s",
                len(actions) - added,
                controller_class_name,
            )
        return added

    def build(self) -> AnalysisReport:
        """Sort every level by name (ordinal) and freeze the tree.

        Findings within an action keep parameter-then-discovery order.
        """
        projects = sorted(self._projects.values(), key=lambda p: p.name)
        return AnalysisReport(
            projects=tuple(
                ProjectResult(
                    project_name=p.name,
                    project_file_path=p.file_path,
                    controllers=tuple(
                        ControllerResult(
                            controller_class_name=c.class_name,
                            controller_source_file_path=c.source_file_path,
                            actions=tuple(sorted(c.actions, key=lambda a: a.method_name)),
                        )
                        for c in sorted(p.controllers, key=lambda c: c.class_name)
                    ),
                )
                for p in projects
            )
        )
