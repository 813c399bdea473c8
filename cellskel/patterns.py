"""Regular expressions and small parsers for recognising cell constructs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

_IMPORT = re.compile(r"^(?:import\s+(?P<module>[\w.]+)|from\s+(?P<source>[\w.]+)\s+import\b)")
_DEFINITION = re.compile(r"^(?:async\s+)?(?P<keyword>def|class)\s+(?P<name>[A-Za-z_]\w*)")
_ASSIGNMENT = re.compile(
    r"^(?P<name>[A-Za-z_]\w*)\s*(?::\s*(?P<annotation>[^=]+?)\s*)?=(?!=)\s*(?P<value>.+)$",
    re.DOTALL,
)
_STRING_LITERAL = re.compile(
    r"(?P<prefix>[rRbBuUfF]{0,2})(?P<quote>\"\"\"|'''|\"|')(?P<body>.*?)(?<!\\)(?P=quote)",
    re.DOTALL,
)
_SINGLE_STRING_VALUE = re.compile(
    r"^[rRbBuU]{0,2}(?P<quote>\"\"\"|'''|\"|')(?P<body>(?:\\.|(?!(?P=quote)).)*)(?P=quote)$",
    re.DOTALL,
)
_COMPOUND_KEYWORDS = re.compile(
    r"^(?:if|elif|else|for|while|with|try|except|finally|match|case|async\s+(?:for|with))\b"
)
_CLAUSE_CONTINUATION = re.compile(r"^(?:elif|else|except|finally)\b")

SHELL_PREFIXES = ("!", "%")


@dataclass(frozen=True)
class Assignment:
    """A simple ``name = value`` binding (optionally annotated)."""

    name: str
    value: str


@dataclass(frozen=True)
class StringLiteral:
    prefix: str
    body: str

    @property
    def is_formatted(self) -> bool:
        return "f" in self.prefix.lower()


def import_module(code: str) -> Optional[str]:
    """Return the module path of an import statement, or None."""
    match = _IMPORT.match(code.strip())
    if match is None:
        return None
    return match.group("module") or match.group("source")


def definition_header(code: str) -> Optional[tuple[str, str]]:
    """Return ``(kind, name)`` for ``def``/``async def``/``class`` headers."""
    stripped = code.strip()
    match = _DEFINITION.match(stripped)
    if match is None:
        return None
    keyword = match.group("keyword")
    if keyword == "class":
        kind = "class"
    elif stripped.startswith("async"):
        kind = "async_function"
    else:
        kind = "function"
    return kind, match.group("name")


def parse_assignment(code: str) -> Optional[Assignment]:
    stripped = code.strip()
    if _COMPOUND_KEYWORDS.match(stripped):
        return None
    match = _ASSIGNMENT.match(stripped)
    if match is None:
        return None
    return Assignment(name=match.group("name"), value=match.group("value").strip())


def is_clause_continuation(code: str) -> bool:
    return bool(_CLAUSE_CONTINUATION.match(code.strip()))


def is_shell_or_magic(line: str) -> bool:
    return line.strip().startswith(SHELL_PREFIXES)


def iter_string_literals(code: str) -> Iterator[StringLiteral]:
    for match in _STRING_LITERAL.finditer(code):
        yield StringLiteral(prefix=match.group("prefix"), body=match.group("body"))


def single_string_value(value: str) -> Optional[str]:
    """Return the literal body when ``value`` is exactly one plain string literal."""
    match = _SINGLE_STRING_VALUE.match(value.strip())
    if match is None:
        return None
    return match.group("body")


def count_references(text: str, name: str) -> int:
    return len(re.findall(rf"(?<![\w.]){re.escape(name)}\b", text))


__all__ = [
    "Assignment",
    "SHELL_PREFIXES",
    "StringLiteral",
    "count_references",
    "definition_header",
    "import_module",
    "is_clause_continuation",
    "is_shell_or_magic",
    "iter_string_literals",
    "parse_assignment",
    "single_string_value",
]
