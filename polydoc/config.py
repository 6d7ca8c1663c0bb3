"""Configuration loading for polydoc (.polydoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import LinkArgument

CONFIG_FILE_NAME = ".polydoc.yml"

COLLISION_POLICIES = ("overwrite", "report", "keep-first")
SOURCE_ROOT_POLICIES = ("first", "all", "report")
# Least to most restrictive.
DOCUMENTATION_SCOPES = ("private", "package", "protected", "public")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PolyDocConfig:
    """Represents the settings defined in .polydoc.yml."""

    root: Path
    sourcepath: List[Path] = field(default_factory=list)
    encoding: str = "utf-8"
    collision_policy: str = "overwrite"
    source_root_policy: str = "first"
    links: List[LinkArgument] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> PolyDocConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PolyDocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root")

    sourcepath = [root / entry for entry in _as_str_list(data.get("sourcepath"))]

    collision_policy = _as_str(data.get("collision_policy")) or "overwrite"
    if collision_policy not in COLLISION_POLICIES:
        raise ConfigError(
            f"collision_policy must be one of {', '.join(COLLISION_POLICIES)}; got {collision_policy!r}"
        )

    source_root_policy = _as_str(data.get("source_root_policy")) or "first"
    if source_root_policy not in SOURCE_ROOT_POLICIES:
        raise ConfigError(
            f"source_root_policy must be one of {', '.join(SOURCE_ROOT_POLICIES)}; got {source_root_policy!r}"
        )

    links = [_parse_link(entry) for entry in _as_list(data.get("links"))]

    options = _as_dict(data.get("options"))
    scope = options.get("scope")
    if scope is not None and str(scope).lower() not in DOCUMENTATION_SCOPES:
        raise ConfigError(f"options.scope must be one of {', '.join(DOCUMENTATION_SCOPES)}; got {scope!r}")

    return PolyDocConfig(
        root=root,
        sourcepath=sourcepath,
        encoding=_as_str(data.get("encoding")) or "utf-8",
        collision_policy=collision_policy,
        source_root_policy=source_root_policy,
        links=links,
        options=options,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_link(entry: Any) -> LinkArgument:
    data = _as_dict(entry)
    href = _as_str(data.get("href"))
    if not href:
        raise ConfigError("Each links entry requires an 'href'")
    return LinkArgument(href=href, packages=_as_str_list(data.get("packages")))


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        # Comma separated values are accepted for package lists.
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "COLLISION_POLICIES",
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DOCUMENTATION_SCOPES",
    "PolyDocConfig",
    "SOURCE_ROOT_POLICIES",
    "load_config",
]
