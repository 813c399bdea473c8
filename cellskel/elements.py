"""Tagged outcomes produced by the element classifier, one type per category."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

COMMENT_STRUCTURAL = "structural"
COMMENT_TODO = "todo"
COMMENT_DISABLED = "disabled_code"
COMMENT_EXPLANATORY = "explanatory"
COMMENT_TRIVIAL = "trivial"

KEPT_COMMENT_KINDS = frozenset({COMMENT_STRUCTURAL, COMMENT_TODO, COMMENT_EXPLANATORY})

BODY_KEEP = "keep"
BODY_SUMMARIZE = "summarize"

ASSIGN_KEEP = "keep"
ASSIGN_PLACEHOLDER = "placeholder"
ASSIGN_REMOVE = "remove"


@dataclass(frozen=True)
class ImportElement:
    module: str
    text: str


@dataclass(frozen=True)
class CommentElement:
    kind: str
    text: str

    @property
    def kept(self) -> bool:
        return self.kind in KEPT_COMMENT_KINDS


@dataclass(frozen=True)
class BlockBody:
    """Body of a definition or compound statement and how to render it."""

    lines: Tuple[str, ...]
    decision: str
    indent: str = "    "
    docstring: Optional[str] = None
    phrases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DefinitionElement:
    kind: str
    name: str
    header_lines: Tuple[str, ...]
    body: BlockBody


@dataclass(frozen=True)
class AssignmentElement:
    name: str
    lines: Tuple[str, ...]
    decision: str
    reason: str

    @property
    def kept(self) -> bool:
        return self.decision != ASSIGN_REMOVE


@dataclass(frozen=True)
class PrintElement:
    lines: Tuple[str, ...]
    phrases: Tuple[str, ...]


@dataclass(frozen=True)
class ShellElement:
    text: str


@dataclass(frozen=True)
class OtherElement:
    header_lines: Tuple[str, ...]
    body: Optional[BlockBody] = None


ClassifiedElement = Union[
    ImportElement,
    CommentElement,
    DefinitionElement,
    AssignmentElement,
    PrintElement,
    ShellElement,
    OtherElement,
]


__all__ = [
    "ASSIGN_KEEP",
    "ASSIGN_PLACEHOLDER",
    "ASSIGN_REMOVE",
    "AssignmentElement",
    "BODY_KEEP",
    "BODY_SUMMARIZE",
    "BlockBody",
    "COMMENT_DISABLED",
    "COMMENT_EXPLANATORY",
    "COMMENT_STRUCTURAL",
    "COMMENT_TODO",
    "COMMENT_TRIVIAL",
    "ClassifiedElement",
    "CommentElement",
    "DefinitionElement",
    "ImportElement",
    "KEPT_COMMENT_KINDS",
    "OtherElement",
    "PrintElement",
    "ShellElement",
]
