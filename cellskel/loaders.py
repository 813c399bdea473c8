"""Turn notebooks and scripts on disk into ordered cell sequences."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Cell

_LANGUAGE_BY_SUFFIX = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".kt": "kotlin",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".r": "r",
    ".jl": "julia",
    ".sh": "shell",
}

# Jupytext/VS Code percent format cell separators.
_PERCENT_MARKER = re.compile(r"^\s*#\s*%%")


class DocumentLoadError(RuntimeError):
    """Raised when a document cannot be turned into cells."""


def load_cells(path: Path, *, language: Optional[str] = None) -> List[Cell]:
    """Load ``path`` as a sequence of cells with 1-based indexes."""
    if not path.exists():
        raise FileNotFoundError(f"No such document: {path}")
    if path.is_dir():
        raise DocumentLoadError(f"Expected a file, got a directory: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"Failed to read {path}: {exc}") from exc

    if path.suffix.lower() == ".ipynb":
        return notebook_cells(text, language=language, source=path.name)

    detected = language or _LANGUAGE_BY_SUFFIX.get(path.suffix.lower())
    return script_cells(text, language=detected)


def notebook_cells(
    text: str, *, language: Optional[str] = None, source: str = "notebook"
) -> List[Cell]:
    """Return the code cells of an ``.ipynb`` document, numbered from 1."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(f"{source} is not valid notebook JSON: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("cells"), list):
        raise DocumentLoadError(f"{source} has no cell list")

    notebook_language = language or _notebook_language(data)
    cells: List[Cell] = []
    for position, raw in enumerate(data["cells"], start=1):
        if not isinstance(raw, dict) or raw.get("cell_type") != "code":
            continue
        cells.append(
            Cell(index=position, raw_text=_join_source(raw.get("source")), language=notebook_language)
        )
    return cells


def script_cells(text: str, *, language: Optional[str] = None) -> List[Cell]:
    """Split percent-format scripts on ``# %%`` markers; otherwise one cell."""
    lines = text.splitlines()
    if not any(_PERCENT_MARKER.match(line) for line in lines):
        return [Cell(index=1, raw_text=text, language=language)]

    chunks: List[List[str]] = []
    current: List[str] = []
    for line in lines:
        if _PERCENT_MARKER.match(line):
            if any(item.strip() for item in current):
                chunks.append(current)
            current = []
            continue
        current.append(line)
    if any(item.strip() for item in current):
        chunks.append(current)

    return [
        Cell(index=position, raw_text="\n".join(chunk), language=language)
        for position, chunk in enumerate(chunks, start=1)
    ]


def _join_source(source: Any) -> str:
    if isinstance(source, list):
        return "".join(str(part) for part in source)
    if isinstance(source, str):
        return source
    return ""


def _notebook_language(data: Dict[str, Any]) -> Optional[str]:
    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        return None
    kernelspec = metadata.get("kernelspec")
    if isinstance(kernelspec, dict) and isinstance(kernelspec.get("language"), str):
        return kernelspec["language"].lower()
    language_info = metadata.get("language_info")
    if isinstance(language_info, dict) and isinstance(language_info.get("name"), str):
        return language_info["name"].lower()
    return None


__all__ = ["DocumentLoadError", "load_cells", "notebook_cells", "script_cells"]
