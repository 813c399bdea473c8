"""File-path detection and read/write contract extraction."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Contract
from .normalizer import Statement
from .patterns import iter_string_literals, parse_assignment, single_string_value

DEFAULT_PATH_EXTENSIONS: Tuple[str, ...] = (
    "json",
    "jsonl",
    "csv",
    "tsv",
    "parquet",
    "feather",
    "arrow",
    "txt",
    "npy",
    "npz",
    "pt",
    "pth",
    "ckpt",
    "bin",
    "safetensors",
    "onnx",
    "h5",
    "hdf5",
    "pkl",
    "pickle",
    "xlsx",
    "yaml",
    "yml",
    "zip",
    "gz",
)

_REGEX_METACHARACTERS = re.compile(r"[\^$*+?\[\]()|\\]")
_DRIVE_ROOT = re.compile(r"^[A-Za-z]:")
_IDENTIFIER = re.compile(r"(?<![\w.])[A-Za-z_]\w*\b")

_URL = re.compile(r"\b(?:https?|gs|s3)://[^\s'\"]+")
_URL_TRAILING = "),;"

_READ_CALLS = re.compile(
    r"pd\.read_?\w*\s*\(|np\.load\w*\s*\(|json\.load\s*\(|torch\.load\s*\("
    r"|\.read_(?:csv|json|parquet|table|excel|feather)\s*\(|\bopen\s*\("
    r"|\b(?:wget|curl|gdown)\b|\bgsutil\s+cp\b|\brequests\.get\s*\(|\burlopen\s*\("
)
_WRITE_CALLS = re.compile(
    r"torch\.save\s*\(|np\.save\w*\s*\(|save_pretrained\s*\(|\.to_json\s*\(|\.to_csv\s*\("
    r"|\.to_parquet\s*\(|json\.dump\s*\(|pickle\.dump\s*\("
)
# The mode is the second positional argument of open() (nested calls allowed
# in the first), a ``mode=`` keyword, or the only argument of ``Path.open``.
_OPEN_WRITE_MODE = re.compile(
    r"\bopen\s*\(\s*(?:[^,()]|\((?:[^()]|\([^()]*\))*\))+,\s*(?:mode\s*=\s*)?['\"][rbt+]*[wax]"
    r"|\bmode\s*=\s*['\"][rbt+]*[wax]"
    r"|\.open\s*\(\s*['\"][rbt+]*[wax]"
)


class PathExtractor:
    """Finds path-like literals and classifies them as reads or writes."""

    def __init__(self, extra_extensions: Iterable[str] = ()) -> None:
        extensions = set(DEFAULT_PATH_EXTENSIONS)
        extensions.update(ext.lower().lstrip(".") for ext in extra_extensions if ext)
        self._extensions = frozenset(extensions)

    def looks_like_path(self, value: str) -> bool:
        """Return True when a string literal body reads like a file path."""
        if len(value) < 4:
            return False
        if _REGEX_METACHARACTERS.search(value):
            return False
        if "{" in value or "}" in value:
            return False

        has_extension = self._has_known_extension(value)
        if "/" in value:
            rooted = value.startswith((".", "/", "~")) or bool(_DRIVE_ROOT.match(value))
            return rooted or has_extension
        return has_extension

    def literal_paths(self, code: str) -> List[str]:
        found: List[str] = []
        for literal in iter_string_literals(code):
            if literal.is_formatted:
                continue
            if self.looks_like_path(literal.body) and literal.body not in found:
                found.append(literal.body)
        return found

    def path_bindings(self, statements: Sequence[Statement]) -> Dict[str, str]:
        """Map top-level names bound directly to a path literal."""
        bindings: Dict[str, str] = {}
        for statement in statements:
            if statement.indent != 0:
                continue
            assignment = parse_assignment(statement.code)
            if assignment is None:
                continue
            literal = single_string_value(assignment.value)
            if literal is not None and (self.looks_like_path(literal) or urls_in(literal) == [literal]):
                bindings[assignment.name] = literal
        return bindings

    def reads_and_writes(self, statements: Sequence[Statement]) -> Tuple[List[str], List[str]]:
        """Classify every path used by a read or write call in ``statements``."""
        bindings = self.path_bindings(statements)
        reads: List[str] = []
        writes: List[str] = []
        for statement in statements:
            intent = classify_io(statement.code)
            if intent is None:
                continue
            paths = self.literal_paths(statement.code)
            for url in urls_in(statement.code):
                if url not in paths:
                    paths.append(url)
            for name in _IDENTIFIER.findall(statement.code):
                bound = bindings.get(name)
                if bound is not None and bound not in paths:
                    paths.append(bound)
            target = writes if intent == "write" else reads
            for path in paths:
                if path not in target:
                    target.append(path)
        return reads, writes

    def _has_known_extension(self, value: str) -> bool:
        tail = value.rsplit("/", 1)[-1]
        if "." not in tail:
            return False
        extension = tail.rsplit(".", 1)[-1].lower()
        return extension in self._extensions


def classify_io(code: str) -> Optional[str]:
    """Return ``"write"``, ``"read"`` or None for a statement's I/O intent.

    Write calls take precedence when a statement matches both.
    """
    if _WRITE_CALLS.search(code) or _OPEN_WRITE_MODE.search(code):
        return "write"
    if _READ_CALLS.search(code):
        return "read"
    return None


def urls_in(code: str) -> List[str]:
    """Return remote locations (``http(s)://``, ``gs://``, ``s3://``) named in ``code``."""
    found: List[str] = []
    for match in _URL.finditer(code):
        url = match.group(0).rstrip(_URL_TRAILING)
        if "{" in url or "}" in url:
            continue
        if url not in found:
            found.append(url)
    return found


def build_contract(
    defines: Iterable[str], reads: Iterable[str], writes: Iterable[str]
) -> Contract:
    return Contract(
        defines=_ordered_unique(defines),
        reads=_ordered_unique(reads),
        writes=_ordered_unique(writes),
    )


def render_contract(contract: Contract) -> List[str]:
    lines: List[str] = []
    if contract.defines:
        lines.append(f"# Defines: {', '.join(contract.defines)}")
    if contract.reads:
        lines.append(f"# Reads: {', '.join(contract.reads)}")
    if contract.writes:
        lines.append(f"# Writes: {', '.join(contract.writes)}")
    return lines


def _ordered_unique(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


__all__ = [
    "DEFAULT_PATH_EXTENSIONS",
    "PathExtractor",
    "build_contract",
    "classify_io",
    "render_contract",
    "urls_in",
]
