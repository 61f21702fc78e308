"""Analysis engine — drives one pass over every project in a symbol graph."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable

from enumaudit.analysis.aggregator import ReportBuilder
from enumaudit.analysis.classifier import (
    is_action_method,
    is_controller,
    is_request_parameter,
)
from enumaudit.analysis.models import (
    ActionResult,
    AnalysisReport,
    EnumFinding,
    ParameterInfo,
)
from enumaudit.analysis.naming import display_name, primary_source_path
from enumaudit.analysis.request_models import RequestModel, find_request_models
from enumaudit.analysis.walker import collect_enum_params
from enumaudit.config import AuditConfig
from enumaudit.errors import AnalysisCancelled, InvalidInputError
from enumaudit.symbols.base import SymbolProvider
from enumaudit.symbols.models import Compilation, MethodSymbol, NamedType, ProjectInfo

logger = logging.getLogger(__name__)


class ActionEnumAnalyzer:
    """Finds controller actions whose request parameters reach enum types."""

    def __init__(
        self,
        provider: SymbolProvider | None,
        log: Callable[[str], None] | None = None,
        config: AuditConfig | None = None,
    ) -> None:
        if provider is None:
            raise InvalidInputError("provider must not be None")
        self._provider = provider
        self._log = log
        self._config = config or AuditConfig()

    def run(self, cancel: threading.Event | None = None) -> AnalysisReport:
        """Synchronous wrapper around :meth:`find_enum_request_params`."""
        return asyncio.run(self.find_enum_request_params(cancel))

    async def find_enum_request_params(
        self,
        cancel: threading.Event | None = None,
    ) -> AnalysisReport:
        """Search every target-language project and return the ordered report.

        Raises :class:`AnalysisCancelled` if ``cancel`` is set at a project,
        controller, or method boundary; nothing is returned in that case.
        """
        builder = ReportBuilder()

        async for project, compilation in self._compilations(cancel):
            for controller in compilation.global_namespace.iter_types():
                if not is_controller(controller, self._config):
                    continue
                _check_cancelled(cancel)

                actions = self._analyze_controller(controller, cancel)
                if not actions:
                    continue

                class_name = display_name(controller)
                added = builder.add(
                    project,
                    class_name,
                    primary_source_path(controller),
                    actions,
                )
                logger.debug("%s: %d action(s) with enum parameters", class_name, added)

        report = builder.build()
        logger.info(
            "Found %d action(s) across %d project(s)",
            report.action_count,
            len(report),
        )
        return report

    async def find_request_models(
        self,
        namespace_prefix: str | None = None,
        cancel: threading.Event | None = None,
    ) -> dict[str, list[RequestModel]]:
        """Run the request-model scan per project; keyed by project name.

        Projects whose compiled graph is unavailable are absent from the result.
        """
        results: dict[str, list[RequestModel]] = {}
        async for project, compilation in self._compilations(cancel):
            results[project.name] = find_request_models(
                compilation, namespace_prefix=namespace_prefix
            )
        return results

    async def _compilations(
        self,
        cancel: threading.Event | None,
    ) -> AsyncIterator[tuple[ProjectInfo, Compilation]]:
        for project in self._provider.projects:
            _check_cancelled(cancel)

            if project.language.lower() != self._config.target_language.lower():
                logger.debug("Skipping %s (%s)", project.name, project.language)
                continue

            self._report(f"[Project] {project.name}")
            logger.info("Analyzing project %s", project.name)

            compilation = await self._provider.get_compilation(project)
            if compilation is None:
                self._report(f"  - Skip: compilation is null ({project.name})")
                logger.warning("No compilation for %s, skipping", project.name)
                continue

            yield project, compilation

    def _analyze_controller(
        self,
        controller: NamedType,
        cancel: threading.Event | None,
    ) -> list[ActionResult]:
        actions: list[ActionResult] = []
        for method in controller.methods:
            if not is_action_method(method, self._config):
                continue
            _check_cancelled(cancel)

            action = self._analyze_action(method)
            if action is not None:
                actions.append(action)
        return actions

    def _analyze_action(self, method: MethodSymbol) -> ActionResult | None:
        request_params = [
            p for p in method.parameters if is_request_parameter(p, self._config)
        ]
        if not request_params:
            return None

        findings: list[EnumFinding] = []
        for param in request_params:
            # Fresh per parameter: the same enum via two parameters is reported twice
            visited: set[tuple] = set()
            collect_enum_params(
                param.type,
                param.name,
                findings,
                visited,
                self._config.depth_limit,
            )

        if not findings:
            return None

        return ActionResult(
            method_name=method.name,
            return_type=display_name(method.return_type),
            parameters=tuple(
                ParameterInfo(name=p.name, type=display_name(p.type))
                for p in request_params
            ),
            enum_params=tuple(findings),
        )

    def _report(self, message: str) -> None:
        if self._log:
            self._log(message)


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelled("Analysis cancelled")


def analyze(
    provider: SymbolProvider,
    log: Callable[[str], None] | None = None,
    config: AuditConfig | None = None,
) -> AnalysisReport:
    """Run a full pass synchronously and return the report."""
    return ActionEnumAnalyzer(provider, log=log, config=config).run()

