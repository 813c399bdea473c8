"""Line splitting, hashing and logical statement grouping for cell text."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class NormalizedCell:
    """Cell text split into lines along with its size and content hash."""

    text: str
    lines: Tuple[str, ...]
    original_lines: int
    content_hash: str


@dataclass(frozen=True)
class Statement:
    """A logical statement: physical lines joined across open brackets or strings."""

    start: int
    end: int
    indent: int
    lines: Tuple[str, ...]
    code: str

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def head(self) -> str:
        return self.lines[0].strip()

    def opens_block(self) -> bool:
        """Return True when the statement ends with a suite-opening colon."""
        return self.code.rstrip().endswith(":")


def normalize(raw_text: Optional[str]) -> NormalizedCell:
    """Split ``raw_text`` into lines, count non-empty ones and hash the exact text."""
    text = raw_text if isinstance(raw_text, str) else ""
    lines = tuple(split_lines(text))
    return NormalizedCell(
        text=text,
        lines=lines,
        original_lines=count_non_empty_lines(lines),
        content_hash=content_hash(text),
    )


def split_lines(text: str) -> List[str]:
    if not text:
        return []
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def count_non_empty_lines(lines: Iterable[str] | str) -> int:
    if isinstance(lines, str):
        lines = split_lines(lines)
    return sum(1 for line in lines if line.strip())


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def split_statements(lines: Sequence[str]) -> List[Statement]:
    """Group physical lines into logical statements.

    Blank lines are skipped. Shell escapes and magics are always a single
    line. An unterminated bracket or string runs to the end of the cell.
    """
    statements: List[Statement] = []
    index = 0
    total = len(lines)
    while index < total:
        line = lines[index]
        stripped = line.strip()
        if not stripped:
            index += 1
            continue

        start = index
        indent = indent_of(line)
        if stripped.startswith(("!", "%")):
            statements.append(
                Statement(start=start, end=start, indent=indent, lines=(line,), code=stripped)
            )
            index += 1
            continue

        depth = 0
        quote: Optional[str] = None
        code_parts: List[str] = []
        while True:
            depth, quote, code = _scan_line(lines[index], depth, quote)
            code_parts.append(code)
            continues = depth > 0 or quote is not None or code.rstrip().endswith("\\")
            if not continues or index + 1 >= total:
                break
            index += 1

        statements.append(
            Statement(
                start=start,
                end=index,
                indent=indent,
                lines=tuple(lines[start : index + 1]),
                code="\n".join(code_parts).strip(),
            )
        )
        index += 1
    return statements


def _scan_line(line: str, depth: int, quote: Optional[str]) -> Tuple[int, Optional[str], str]:
    """Advance the bracket/string state across one physical line.

    Returns the new bracket depth, the still-open triple-quote delimiter (if
    any) and the line's code with any trailing comment removed.
    """
    code: List[str] = []
    position = 0
    length = len(line)
    while position < length:
        char = line[position]
        if quote is not None:
            if char == "\\":
                code.append(line[position : position + 2])
                position += 2
                continue
            if line.startswith(quote, position):
                code.append(quote)
                position += len(quote)
                quote = None
                continue
            code.append(char)
            position += 1
            continue

        if char == "#":
            break
        if char in {'"', "'"}:
            triple = char * 3
            quote = triple if line.startswith(triple, position) else char
            code.append(quote)
            position += len(quote)
            continue
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(depth - 1, 0)
        code.append(char)
        position += 1

    # single-quoted strings cannot span physical lines
    if quote is not None and len(quote) == 1:
        quote = None
    return depth, quote, "".join(code)


__all__ = [
    "NormalizedCell",
    "Statement",
    "content_hash",
    "count_non_empty_lines",
    "indent_of",
    "normalize",
    "split_lines",
    "split_statements",
]
