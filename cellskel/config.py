"""Configuration loading for cellskel (.cellskel.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".cellskel.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class EngineSettings:
    """Thresholds that drive the skeletonization engine."""

    small_cell_threshold: int = 6
    body_line_threshold: int = 6
    long_value_threshold: int = 100
    explanatory_min_length: int = 15
    reference_threshold: int = 3
    default_language: str = "python"
    path_extensions: tuple[str, ...] = ()


@dataclass
class CellSkelConfig:
    """Represents the settings defined in .cellskel.yml."""

    root: Path
    engine: EngineSettings = field(default_factory=EngineSettings)
    workers: Optional[int] = None
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> CellSkelConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CellSkelConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    engine_data = _as_dict(data.get("engine"))
    defaults = EngineSettings()
    engine = EngineSettings(
        small_cell_threshold=_as_positive_int(
            engine_data.get("small_cell_threshold"),
            "small_cell_threshold",
            defaults.small_cell_threshold,
        ),
        body_line_threshold=_as_positive_int(
            engine_data.get("body_line_threshold"),
            "body_line_threshold",
            defaults.body_line_threshold,
        ),
        long_value_threshold=_as_positive_int(
            engine_data.get("long_value_threshold"),
            "long_value_threshold",
            defaults.long_value_threshold,
        ),
        explanatory_min_length=_as_positive_int(
            engine_data.get("explanatory_min_length"),
            "explanatory_min_length",
            defaults.explanatory_min_length,
        ),
        reference_threshold=_as_positive_int(
            engine_data.get("reference_threshold"),
            "reference_threshold",
            defaults.reference_threshold,
        ),
        default_language=_as_str(engine_data.get("default_language")) or defaults.default_language,
        path_extensions=tuple(
            ext.lower().lstrip(".") for ext in _as_str_list(engine_data.get("path_extensions"))
        ),
    )

    workers = data.get("workers")
    workers_value = _as_positive_int(workers, "workers", 0) if workers is not None else None

    log_file_str = _as_str(data.get("log_file"))
    log_file = root / log_file_str if log_file_str else None

    return CellSkelConfig(
        root=root,
        engine=engine,
        workers=workers_value or None,
        log_file=log_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
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


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_positive_int(value: Any, key: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a positive integer")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as exc:
            raise ConfigError(f"{key} must be a positive integer") from exc
    if not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key} must be a positive integer")
    return value


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "CellSkelConfig", "ConfigError", "EngineSettings", "load_config"]
