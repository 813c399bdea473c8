"""Top-level construct classification for full skeletonization."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .config import EngineSettings
from .elements import (
    ASSIGN_KEEP,
    ASSIGN_PLACEHOLDER,
    ASSIGN_REMOVE,
    BODY_KEEP,
    BODY_SUMMARIZE,
    COMMENT_DISABLED,
    COMMENT_EXPLANATORY,
    COMMENT_STRUCTURAL,
    COMMENT_TODO,
    COMMENT_TRIVIAL,
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
from .normalizer import Statement, count_non_empty_lines, split_statements
from .paths import PathExtractor
from .patterns import (
    Assignment,
    count_references,
    definition_header,
    import_module,
    is_clause_continuation,
    is_shell_or_magic,
    parse_assignment,
    single_string_value,
)
from .summary import PRINT_CALL, collect_phrases, match_phrases, order_phrases, print_message, print_phrases

_STRUCTURAL_DIVIDER = re.compile(r"^-{3,}|={3,}|-{3,}$")
_TODO_MARKER = re.compile(r"^(?:TODO|FIXME|NOTE|HACK|XXX|BUG|WARNING)\b", re.IGNORECASE)
_DISABLED_CODE = re.compile(
    r"^(?:"
    r"[A-Za-z_][\w.]*\("
    r"|[A-Za-z_][\w.]*(?:\[[^\]]*\])?\s*(?:[-+*/%@]|//)?=(?!=)\s*\S"
    r"|import\s+[\w.]+"
    r"|from\s+[\w.]+\s+import\b"
    r"|(?:return|raise|yield|assert)\s+\S"
    r"|def\s+\w+\s*\("
    r"|class\s+\w+\s*[(:]"
    r"|for\s+[\w, ()]+\s+in\s+\S"
    r"|(?:if|elif|while|with)\s+.+:\s*$"
    r")"
)
_ALL_CAPS = re.compile(r"^_?[A-Z][A-Z0-9_]*$")
_CONFIG_PREFIX = re.compile(r"^(?:config|params|args|options|settings)", re.IGNORECASE)
_LARGE_OBJECT = re.compile(r"DataFrame|tensor|model|tokenizer|dataset", re.IGNORECASE)
_DOCSTRING_START = re.compile(r"^[rRuU]?(?:\"\"\"|'''|\"|')")


def _is_structural(body: str, marker: str, settings: EngineSettings) -> bool:
    return marker.startswith("##") or bool(_STRUCTURAL_DIVIDER.search(body))


def _is_todo(body: str, marker: str, settings: EngineSettings) -> bool:
    return bool(_TODO_MARKER.match(body))


def _is_disabled_code(body: str, marker: str, settings: EngineSettings) -> bool:
    return bool(_DISABLED_CODE.match(body))


def _is_explanatory(body: str, marker: str, settings: EngineSettings) -> bool:
    return len(body) >= settings.explanatory_min_length


# First match wins; anything left over is trivial.
COMMENT_RULES: Tuple[Tuple[str, Callable[[str, str, EngineSettings], bool]], ...] = (
    (COMMENT_STRUCTURAL, _is_structural),
    (COMMENT_TODO, _is_todo),
    (COMMENT_DISABLED, _is_disabled_code),
    (COMMENT_EXPLANATORY, _is_explanatory),
)


@dataclass(frozen=True)
class _AssignmentContext:
    assignment: Assignment
    statement: Statement
    cell_text: str
    settings: EngineSettings
    paths: PathExtractor


def _is_constant(ctx: _AssignmentContext) -> bool:
    return bool(_ALL_CAPS.match(ctx.assignment.name))


def _is_path_value(ctx: _AssignmentContext) -> bool:
    literal = single_string_value(ctx.assignment.value)
    return literal is not None and ctx.paths.looks_like_path(literal)


def _is_config_name(ctx: _AssignmentContext) -> bool:
    return bool(_CONFIG_PREFIX.match(ctx.assignment.name))


def _is_referenced(ctx: _AssignmentContext) -> bool:
    name = ctx.assignment.name
    elsewhere = count_references(ctx.cell_text, name) - count_references(ctx.statement.text, name)
    return elsewhere >= ctx.settings.reference_threshold


def _is_large_object(ctx: _AssignmentContext) -> bool:
    return bool(_LARGE_OBJECT.search(ctx.assignment.value))


def _is_long_value(ctx: _AssignmentContext) -> bool:
    return len(ctx.assignment.value) > ctx.settings.long_value_threshold


# Keep rules precede remove rules; the first matching rule decides.
ASSIGNMENT_RULES: Tuple[Tuple[str, str, Callable[[_AssignmentContext], bool]], ...] = (
    ("constant", ASSIGN_KEEP, _is_constant),
    ("path", ASSIGN_KEEP, _is_path_value),
    ("config", ASSIGN_KEEP, _is_config_name),
    ("referenced", ASSIGN_KEEP, _is_referenced),
    ("large_object", ASSIGN_PLACEHOLDER, _is_large_object),
    ("long_value", ASSIGN_REMOVE, _is_long_value),
)


@dataclass
class Classification:
    """Ordered elements of one cell plus the statements they came from."""

    elements: List[ClassifiedElement] = field(default_factory=list)
    statements: List[Statement] = field(default_factory=list)

    @property
    def defines(self) -> List[str]:
        names: List[str] = []
        for element in self.elements:
            if isinstance(element, DefinitionElement):
                name = element.name
            elif isinstance(element, AssignmentElement) and element.kept:
                name = element.name
            else:
                continue
            if name not in names:
                names.append(name)
        return names

    @property
    def print_phrases(self) -> List[str]:
        phrases: List[str] = []
        for element in self.elements:
            if isinstance(element, PrintElement):
                phrases.extend(element.phrases)
        return order_phrases(phrases)

    @property
    def elided_names(self) -> List[str]:
        names: List[str] = []
        for element in self.elements:
            if (
                isinstance(element, AssignmentElement)
                and element.decision == ASSIGN_PLACEHOLDER
                and element.name not in names
            ):
                names.append(element.name)
        return names


class ElementClassifier:
    """Walks top-level statements in source order and classifies each one."""

    def __init__(self, settings: EngineSettings, paths: PathExtractor) -> None:
        self.settings = settings
        self.paths = paths

    def classify(self, lines: Sequence[str]) -> Classification:
        statements = split_statements(lines)
        cell_text = "\n".join(lines)
        result = Classification(statements=statements)

        decorators: List[Statement] = []
        position = 0
        while position < len(statements):
            statement = statements[position]
            if statement.indent > 0:
                # indented code with no enclosing top-level header
                result.elements.append(OtherElement(header_lines=_rstripped(statement.lines)))
                position += 1
                continue

            head = statement.head
            if head.startswith("#") and not head.startswith("#!"):
                result.elements.append(self.classify_comment(head))
                position += 1
                continue
            if is_shell_or_magic(head):
                result.elements.append(ShellElement(text=statement.lines[0].rstrip()))
                position += 1
                continue
            if head.startswith("@"):
                decorators.append(statement)
                position += 1
                continue

            header = definition_header(statement.code)
            if header is not None:
                body_statements, position = self._collect_body(statements, position, clauses=False)
                kind, name = header
                header_lines = [line for item in decorators for line in item.lines]
                header_lines.extend(statement.lines)
                decorators = []
                result.elements.append(
                    DefinitionElement(
                        kind=kind,
                        name=name,
                        header_lines=_rstripped(header_lines),
                        body=self._block_body(lines, statement, body_statements, docstring=True),
                    )
                )
                continue

            if decorators:
                # decorators with no definition to attach to are kept as-is
                orphaned = [line for item in decorators for line in item.lines]
                result.elements.append(OtherElement(header_lines=_rstripped(orphaned)))
                decorators = []

            if statement.opens_block():
                body_statements, position = self._collect_body(statements, position, clauses=True)
                result.elements.append(
                    OtherElement(
                        header_lines=_rstripped(statement.lines),
                        body=self._block_body(lines, statement, body_statements, docstring=False),
                    )
                )
                continue

            result.elements.append(self._classify_simple(statement, cell_text))
            position += 1

        if decorators:
            orphaned = [line for item in decorators for line in item.lines]
            result.elements.append(OtherElement(header_lines=_rstripped(orphaned)))
        return result

    def classify_comment(self, text: str) -> CommentElement:
        marker = text.strip()
        body = marker.lstrip("#").strip()
        for kind, predicate in COMMENT_RULES:
            if predicate(body, marker, self.settings):
                return CommentElement(kind=kind, text=marker)
        return CommentElement(kind=COMMENT_TRIVIAL, text=marker)

    def classify_assignment(
        self, assignment: Assignment, statement: Statement, cell_text: str
    ) -> AssignmentElement:
        ctx = _AssignmentContext(
            assignment=assignment,
            statement=statement,
            cell_text=cell_text,
            settings=self.settings,
            paths=self.paths,
        )
        decision, reason = ASSIGN_KEEP, "default"
        for rule_reason, rule_decision, predicate in ASSIGNMENT_RULES:
            if predicate(ctx):
                decision, reason = rule_decision, rule_reason
                break
        return AssignmentElement(
            name=assignment.name,
            lines=_rstripped(statement.lines),
            decision=decision,
            reason=reason,
        )

    def _classify_simple(self, statement: Statement, cell_text: str) -> ClassifiedElement:
        module = import_module(statement.code)
        if module is not None:
            return ImportElement(module=module, text="\n".join(_rstripped(statement.lines)))

        if PRINT_CALL.match(statement.code):
            phrases = match_phrases(statement.code)
            message = print_message(statement.code)
            if message:
                phrases.extend(print_phrases(message))
            return PrintElement(lines=_rstripped(statement.lines), phrases=tuple(order_phrases(phrases)))

        assignment = parse_assignment(statement.code)
        if assignment is not None:
            return self.classify_assignment(assignment, statement, cell_text)

        return OtherElement(header_lines=_rstripped(statement.lines))

    def _collect_body(
        self, statements: Sequence[Statement], position: int, *, clauses: bool
    ) -> Tuple[List[Statement], int]:
        """Gather the statements belonging to the block opened at ``position``.

        With ``clauses`` set, trailing ``elif``/``else``/``except``/``finally``
        clauses at the same level are folded into the block.
        """
        header = statements[position]
        body: List[Statement] = []
        position += 1
        if not header.opens_block():
            return body, position
        while position < len(statements):
            candidate = statements[position]
            if candidate.indent > header.indent:
                body.append(candidate)
            elif clauses and candidate.indent == header.indent and is_clause_continuation(candidate.code):
                body.append(candidate)
            else:
                break
            position += 1
        return body, position

    def _block_body(
        self,
        lines: Sequence[str],
        header: Statement,
        body_statements: Sequence[Statement],
        *,
        docstring: bool,
    ) -> Optional[BlockBody]:
        if not body_statements:
            return None
        body_lines = tuple(line.rstrip() for line in lines[header.end + 1 : body_statements[-1].end + 1])
        indent = _leading_whitespace(body_statements[0].lines[0])
        if count_non_empty_lines(body_lines) <= self.settings.body_line_threshold:
            return BlockBody(lines=body_lines, decision=BODY_KEEP, indent=indent)

        summary = _docstring_summary(body_statements[0]) if docstring else None
        return BlockBody(
            lines=body_lines,
            decision=BODY_SUMMARIZE,
            indent=indent,
            docstring=summary,
            phrases=tuple(collect_phrases("\n".join(body_lines))),
        )


def _docstring_summary(statement: Statement) -> Optional[str]:
    if not _DOCSTRING_START.match(statement.code):
        return None
    literal = single_string_value(statement.code)
    if literal is None:
        return None
    for line in literal.splitlines():
        if line.strip():
            return line.strip()
    return None


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())] or "    "


def _rstripped(lines: Sequence[str]) -> Tuple[str, ...]:
    return tuple(line.rstrip() for line in lines)


__all__ = [
    "ASSIGNMENT_RULES",
    "COMMENT_RULES",
    "Classification",
    "ElementClassifier",
]
