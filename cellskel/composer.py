"""Assembles skeleton text from classified elements and appends statistics."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .elements import (
    ASSIGN_KEEP,
    ASSIGN_PLACEHOLDER,
    BODY_KEEP,
    AssignmentElement,
    BlockBody,
    ClassifiedElement,
    CommentElement,
    DefinitionElement,
    ImportElement,
    OtherElement,
    PrintElement,
    ShellElement,
)
from .models import Contract
from .paths import render_contract

_SLASH_COMMENT_LANGUAGES = frozenset(
    {
        "c",
        "cpp",
        "c++",
        "cs",
        "go",
        "h",
        "hpp",
        "java",
        "javascript",
        "js",
        "jsx",
        "kotlin",
        "kt",
        "rs",
        "rust",
        "swift",
        "ts",
        "tsx",
        "typescript",
    }
)


class Composer:
    """Renders the final skeleton: imports, elements, summary, contract."""

    def render_imports(self, elements: Sequence[ClassifiedElement]) -> List[str]:
        """Return de-duplicated imports sorted by module path, then text."""
        unique: Dict[str, ImportElement] = {}
        for element in elements:
            if isinstance(element, ImportElement) and element.text not in unique:
                unique[element.text] = element
        ordered = sorted(unique.values(), key=lambda item: (item.module, item.text))
        return [element.text for element in ordered]

    def render_element(self, element: ClassifiedElement) -> List[str]:
        if isinstance(element, ImportElement):
            return []
        if isinstance(element, CommentElement):
            return [element.text] if element.kept else []
        if isinstance(element, DefinitionElement):
            return list(element.header_lines) + _render_body(element.body)
        if isinstance(element, AssignmentElement):
            if element.decision == ASSIGN_KEEP:
                return list(element.lines)
            if element.decision == ASSIGN_PLACEHOLDER:
                return [f"{element.name} = ..."]
            return []
        if isinstance(element, PrintElement):
            return []
        if isinstance(element, ShellElement):
            return [element.text]
        if isinstance(element, OtherElement):
            return list(element.header_lines) + _render_body(element.body)
        raise TypeError(f"Unhandled element type: {type(element).__name__}")

    def compose(
        self,
        elements: Sequence[ClassifiedElement],
        *,
        phrases: Sequence[str] = (),
        elided: Sequence[str] = (),
        contract: Optional[Contract] = None,
    ) -> str:
        lines = self.render_imports(elements)
        for element in elements:
            lines.extend(self.render_element(element))

        summary = summary_line(phrases, elided)
        if summary:
            lines.append(summary)
        if contract is not None:
            lines.extend(render_contract(contract))
        return "\n".join(lines)


def summary_line(phrases: Sequence[str], elided: Sequence[str]) -> Optional[str]:
    parts: List[str] = []
    if phrases:
        parts.append(", ".join(phrases))
    if elided:
        parts.append(f"elided: {', '.join(elided)}")
    if not parts:
        return None
    return f"# summary: {'; '.join(parts)}"


def reduction_percent(original_lines: int, skeleton_lines: int) -> int:
    """Round-half-up of ``(1 - skeleton/original) * 100`` in exact integer arithmetic."""
    if original_lines <= 0:
        return 0
    removed = original_lines - skeleton_lines
    return (200 * removed + original_lines) // (2 * original_lines)


def compression_ratio(original_lines: int, skeleton_lines: int) -> float:
    if original_lines <= 0:
        return 0.0
    return 1 - skeleton_lines / original_lines


def comment_prefix(language: str) -> str:
    return "//" if language.lower() in _SLASH_COMMENT_LANGUAGES else "#"


def stats_line(language: str, original_lines: int, skeleton_lines: int) -> str:
    percent = reduction_percent(original_lines, skeleton_lines)
    return (
        f"{comment_prefix(language)} [{language}: {original_lines}→{skeleton_lines} lines, "
        f"{percent}% reduced]"
    )


def _render_body(body: Optional[BlockBody]) -> List[str]:
    if body is None:
        return []
    if body.decision == BODY_KEEP:
        return list(body.lines)

    rendered: List[str] = []
    if body.docstring:
        docstring = body.docstring
        if docstring.endswith('"'):
            docstring += " "
        rendered.append(f'{body.indent}"""{docstring}"""')
    if body.phrases:
        rendered.append(f"{body.indent}# summary: {', '.join(body.phrases)}")
    elif not body.docstring:
        rendered.append(f"{body.indent}# summary: implementation elided")
    return rendered


__all__ = [
    "Composer",
    "comment_prefix",
    "compression_ratio",
    "reduction_percent",
    "stats_line",
    "summary_line",
]
