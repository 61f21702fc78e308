"""Global configuration — defaults, XDG config file, env vars."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

DEFAULT_CONTROLLER_BASE_TYPES = (
    "Microsoft.AspNetCore.Mvc.ControllerBase",
    "Microsoft.AspNetCore.Mvc.Controller",
)

DEFAULT_EXCLUDED_PARAMETER_TYPES = (
    "System.Threading.CancellationToken",
    "Microsoft.AspNetCore.Http.HttpContext",
    "Microsoft.AspNetCore.Http.HttpRequest",
    "Microsoft.AspNetCore.Http.HttpResponse",
    "System.Security.Claims.ClaimsPrincipal",
)


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "enumaudit"
    return Path.home() / ".config" / "enumaudit"


@dataclass
class AuditConfig:
    """Recognized analysis options and their compatible defaults."""

    target_language: str = "C#"
    depth_limit: int = 6
    controller_suffix: str = "Controller"
    controller_base_types: tuple[str, ...] = DEFAULT_CONTROLLER_BASE_TYPES
    non_action_attribute: str = "NonActionAttribute"
    from_services_attribute: str = "FromServicesAttribute"
    excluded_parameter_types: tuple[str, ...] = DEFAULT_EXCLUDED_PARAMETER_TYPES
    config_dir: Path = field(default_factory=_default_config_dir)

    @classmethod
    def load(cls) -> AuditConfig:
        """Load config from the XDG config file and environment variables."""
        config = cls()

        config_file = config.config_dir / "config.yaml"
        if config_file.is_file():
            config = load_config(config_file, base=config)

        env_depth = os.environ.get("ENUMAUDIT_DEPTH_LIMIT")
        if env_depth:
            config.depth_limit = _check_depth(int(env_depth))

        env_language = os.environ.get("ENUMAUDIT_TARGET_LANGUAGE")
        if env_language:
            config.target_language = env_language

        return config


def load_config(path: str | Path, base: AuditConfig | None = None) -> AuditConfig:
    """Apply the overrides in a YAML file on top of ``base`` (or defaults)."""
    text = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Config YAML must be a mapping")
    return _apply_overrides(base or AuditConfig(), data)


def _apply_overrides(config: AuditConfig, data: dict) -> AuditConfig:
    known = {f.name for f in fields(AuditConfig)} - {"config_dir"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    for key, value in data.items():
        if key == "depth_limit":
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise ValueError(f"depth_limit must be an integer, got {value!r}")
            value = _check_depth(int(value))
        elif key in ("controller_base_types", "excluded_parameter_types"):
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ValueError(f"{key} must be a list of type names")
            value = tuple(str(v) for v in value)
        else:
            value = str(value)
        setattr(config, key, value)

    return config


def _check_depth(depth: int) -> int:
    if depth < 0:
        raise ValueError(f"depth_limit must be non-negative, got {depth}")
    return depth
