"""Report renderers — plain text, JSON, and Rich tree."""

from __future__ import annotations

import json
from typing import Any

from rich.markup import escape
from rich.tree import Tree

from enumaudit.analysis.models import ActionResult, AnalysisReport
from enumaudit.analysis.request_models import RequestModel


def render_text(
    report: AnalysisReport,
    show_return_type: bool = False,
    show_param_types: bool = False,
) -> str:
    """Tab-indented dump: project, controller, action, then findings."""
    lines: list[str] = []
    for project in report:
        lines.append(project.project_name)
        lines.append(f"\t{project.project_file_path}")

        for controller in project.controllers:
            lines.append(f"\t\t{controller.controller_class_name}")
            lines.append(f"\t\t {controller.controller_source_file_path}")

            for action in controller.actions:
                lines.append(f"\t\t\t{action.method_name}")
                if show_return_type:
                    lines.append(f"\t\t\t {action.return_type}")
                if show_param_types:
                    lines.append(f"\t\t\t {format_parameters(action)}")
                for finding in action.enum_params:
                    lines.append(f"\t\t\t\t{finding.name}")
                    lines.append(f"\t\t\t\t {finding.enum_type}")

    return "\n".join(lines) + ("\n" if lines else "")


def format_parameters(action: ActionResult) -> str:
    return ", ".join(f"{p.type} {p.name}" for p in action.parameters)


def report_to_dict(report: AnalysisReport) -> list[dict[str, Any]]:
    return [
        {
            "ProjectName": project.project_name,
            "ProjectFilePath": project.project_file_path,
            "Controllers": [
                {
                    "ControllerClassName": controller.controller_class_name,
                    "ControllerSourceFilePath": controller.controller_source_file_path,
                    "Actions": [
                        {
                            "MethodName": action.method_name,
                            "ReturnType": action.return_type,
                            "Parameters": [
                                {"Name": p.name, "Type": p.type} for p in action.parameters
                            ],
                            "EnumParams": [
                                {"EnumType": f.enum_type, "Name": f.name}
                                for f in action.enum_params
                            ],
                        }
                        for action in controller.actions
                    ],
                }
                for controller in project.controllers
            ],
        }
        for project in report
    ]


def render_json(report: AnalysisReport, indent: int = 2) -> str:
    return json.dumps(report_to_dict(report), indent=indent, ensure_ascii=False)


def build_tree(report: AnalysisReport, title: str = "Enum request parameters") -> Tree:
    """Build a Rich tree for console display."""
    root = Tree(f"[bold]{escape(title)}[/bold]")
    for project in report:
        project_node = root.add(
            f"[bold cyan]{escape(project.project_name)}[/bold cyan] "
            f"[dim]{escape(project.project_file_path)}[/dim]"
        )
        for controller in project.controllers:
            controller_node = project_node.add(
                f"[bold]{escape(controller.controller_class_name)}[/bold] "
                f"[dim]{escape(controller.controller_source_file_path)}[/dim]"
            )
            for action in controller.actions:
                action_node = controller_node.add(
                    f"[green]{escape(action.method_name)}[/green]"
                    f"({escape(format_parameters(action))}) "
                    f"[dim]-> {escape(action.return_type)}[/dim]"
                )
                for finding in action.enum_params:
                    action_node.add(
                        f"{escape(finding.name)}: [yellow]{escape(finding.enum_type)}[/yellow]"
                    )
    return root


def render_request_models(models: list[RequestModel]) -> str:
    lines: list[str] = []
    for model in models:
        lines.append(model.type_name)
        for prop in model.properties:
            init_only = "true" if prop.init_only else "false"
            lines.append(f"  - {prop.name}: {prop.enum_type} (initOnly={init_only})")
    return "\n".join(lines) + ("\n" if lines else "")
