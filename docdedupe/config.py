"""Configuration loading for docdedupe (.docdedupe.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docdedupe.yml"

DEFAULT_INDEX_DIR = "FrameworksIndex"
DEFAULT_UNARY_KINDS = ("summary",)
DEFAULT_POLICY = "most-complete"

INDEX_ERROR_MODES = ("abort", "skip")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DocDedupeConfig:
    """Represents the settings defined in .docdedupe.yml."""

    root: Path
    index_dir: str = DEFAULT_INDEX_DIR
    unary_kinds: List[str] = field(default_factory=lambda: list(DEFAULT_UNARY_KINDS))
    content_case_sensitive: bool = False
    losing_policy: str = DEFAULT_POLICY
    workers: Optional[int] = None
    exclude_paths: List[str] = field(default_factory=list)
    index_errors: str = "abort"
    strict_exit: bool = False

    @property
    def index_path(self) -> Path:
        return self.root / self.index_dir


def load_config(config_path: Path) -> DocDedupeConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocDedupeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = DocDedupeConfig(root=root)

    index_dir = _as_str(data.get("index_dir"))
    if index_dir:
        config.index_dir = index_dir.strip("/\\")

    if "unary_kinds" in data:
        config.unary_kinds = _as_str_list(data.get("unary_kinds"))

    if "content_case_sensitive" in data:
        case_sensitive = _as_bool(data.get("content_case_sensitive"))
        if case_sensitive is None:
            raise ConfigError("content_case_sensitive must be a boolean")
        config.content_case_sensitive = case_sensitive

    policy = _as_str(data.get("losing_policy"))
    if policy:
        config.losing_policy = policy

    if data.get("workers") is not None:
        workers = _as_int(data.get("workers"))
        if workers is None or workers < 1:
            raise ConfigError("workers must be a positive integer")
        config.workers = workers

    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    index_errors = _as_str(data.get("index_errors"))
    if index_errors:
        index_errors = index_errors.lower()
        if index_errors not in INDEX_ERROR_MODES:
            raise ConfigError(
                f"index_errors must be one of {', '.join(INDEX_ERROR_MODES)}, got {index_errors!r}"
            )
        config.index_errors = index_errors

    config.strict_exit = _as_bool(data.get("strict_exit")) or False
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
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


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]
    return []
