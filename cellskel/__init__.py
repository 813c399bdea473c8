"""Cell skeletonization engine for compressing notebooks into prompt context."""

from __future__ import annotations

from .config import CellSkelConfig, ConfigError, EngineSettings, load_config
from .engine import SkeletonEngine, skeletonize_documents
from .loaders import DocumentLoadError, load_cells
from .models import Cell, Contract, DocumentState, SkeletonResult

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "CellSkelConfig",
    "ConfigError",
    "Contract",
    "DocumentLoadError",
    "DocumentState",
    "EngineSettings",
    "SkeletonEngine",
    "SkeletonResult",
    "load_cells",
    "load_config",
    "skeletonize_documents",
]
