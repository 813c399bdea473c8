"""Pipeline orchestration: one pass over a document's cells."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple

from .classifier import ElementClassifier
from .composer import Composer, compression_ratio, stats_line
from .config import EngineSettings
from .detectors import classify_bucket, extract_signature, find_duplicate, find_variant
from .logging import (
    DECISION_DUPLICATE,
    DECISION_FALLBACK,
    DECISION_SKELETON,
    DECISION_VARIANT,
    DECISION_VERBATIM,
    get_logger,
    log_decision,
    log_run_summary,
)
from .models import Cell, DocumentState, SkeletonResult
from .normalizer import NormalizedCell, count_non_empty_lines, normalize
from .paths import PathExtractor, build_contract
from .summary import one_line_summary


class SkeletonEngine:
    """Turns cells into skeletons: duplicates, variants, passthrough or full rewrite.

    The engine holds only immutable settings. All per-document bookkeeping
    lives in a :class:`DocumentState` created by :meth:`skeletonize_document`
    (or supplied by the caller), so one engine can serve many documents
    concurrently.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()
        self.paths = PathExtractor(self.settings.path_extensions)
        self.classifier = ElementClassifier(self.settings, self.paths)
        self.composer = Composer()
        self.logger = get_logger("engine")

    def skeletonize_document(self, cells: Iterable[Cell]) -> List[SkeletonResult]:
        """Process ``cells`` in order with a fresh document state."""
        state = DocumentState()
        results = [self.skeletonize_cell(cell, state) for cell in cells]
        log_run_summary(self.logger, results)
        return results

    def skeletonize_cell(self, cell: Cell, state: DocumentState) -> SkeletonResult:
        language = cell.language or self.settings.default_language
        normalized = normalize(cell.raw_text)

        duplicate_of = find_duplicate(normalized, cell.index, state)
        if duplicate_of is not None:
            defines = state.defines_by_index.get(duplicate_of, [])
            log_decision(self.logger, cell.index, DECISION_DUPLICATE, "Same text as cell %d", duplicate_of)
            return self._marker_result(
                cell,
                language,
                normalized,
                f"# Duplicate of Cell {duplicate_of} ({', '.join(defines)})",
                duplicate_of=duplicate_of,
            )

        bucket = classify_bucket(normalized.text)
        signature = extract_signature(normalized.lines)
        variant_index = find_variant(bucket, signature, cell.index, state)
        if variant_index is not None:
            _remember_defines(state, cell.index, signature)
            log_decision(
                self.logger, cell.index, DECISION_VARIANT, "Signature matches %s cell %d", bucket, variant_index
            )
            summary = one_line_summary(normalized.text)
            return self._marker_result(
                cell,
                language,
                normalized,
                f"# Variant of {bucket} (signature duplicate of Cell {variant_index}): {summary}",
                bucket=bucket,
                variant_index=variant_index,
            )

        if normalized.original_lines < self.settings.small_cell_threshold:
            _remember_defines(state, cell.index, signature)
            log_decision(
                self.logger, cell.index, DECISION_VERBATIM, "Only %d non-empty lines", normalized.original_lines
            )
            return self._verbatim_result(cell, language, normalized, bucket)

        return self._guarded_skeleton(cell, language, normalized, bucket, signature, state)

    def skeletonize_text(self, text: str, language: Optional[str] = None, *, index: int = 0) -> SkeletonResult:
        """Run classification, summary, contract and composition on ``text`` only.

        Duplicate, variant and small-cell handling are skipped, which makes
        this the entry point for rendering a single snippet in isolation.
        """
        cell = Cell(index=index, raw_text=text, language=language)
        normalized = normalize(text)
        return self._guarded_skeleton(
            cell,
            language or self.settings.default_language,
            normalized,
            classify_bucket(normalized.text),
            extract_signature(normalized.lines),
            DocumentState(),
        )

    def _guarded_skeleton(
        self,
        cell: Cell,
        language: str,
        normalized: NormalizedCell,
        bucket: str,
        signature: Tuple[str, ...],
        state: DocumentState,
    ) -> SkeletonResult:
        try:
            return self._full_skeleton(cell, language, normalized, bucket, signature, state)
        except Exception as exc:  # pragma: no cover - defensive guard
            self.logger.warning(
                "Skeletonization failed for cell %d; keeping it verbatim: %s", cell.index, exc
            )
            _remember_defines(state, cell.index, signature)
            return self._verbatim_result(cell, language, normalized, bucket)

    def _full_skeleton(
        self,
        cell: Cell,
        language: str,
        normalized: NormalizedCell,
        bucket: str,
        signature: Tuple[str, ...],
        state: DocumentState,
    ) -> SkeletonResult:
        classification = self.classifier.classify(normalized.lines)
        reads, writes = self.paths.reads_and_writes(classification.statements)
        contract = build_contract(classification.defines, reads, writes)
        skeleton = self.composer.compose(
            classification.elements,
            phrases=classification.print_phrases,
            elided=classification.elided_names,
            contract=contract,
        )
        skeleton_lines = count_non_empty_lines(skeleton)
        if skeleton_lines > normalized.original_lines:
            # the verbatim text still defines what the classifier found
            _remember_defines(state, cell.index, contract.defines or signature)
            log_decision(
                self.logger,
                cell.index,
                DECISION_FALLBACK,
                "Skeleton longer than source (%d > %d lines)",
                skeleton_lines,
                normalized.original_lines,
            )
            return self._verbatim_result(cell, language, normalized, bucket)

        _remember_defines(state, cell.index, contract.defines)
        log_decision(
            self.logger,
            cell.index,
            DECISION_SKELETON,
            "%d→%d lines",
            normalized.original_lines,
            skeleton_lines,
        )
        return SkeletonResult(
            index=cell.index,
            text=_with_stats(skeleton, language, normalized.original_lines, skeleton_lines),
            original_lines=normalized.original_lines,
            skeleton_lines=skeleton_lines,
            compression_ratio=compression_ratio(normalized.original_lines, skeleton_lines),
            language=language,
            bucket=bucket,
        )

    def _verbatim_result(
        self, cell: Cell, language: str, normalized: NormalizedCell, bucket: str
    ) -> SkeletonResult:
        body = "\n".join(normalized.lines).rstrip()
        lines = normalized.original_lines
        return SkeletonResult(
            index=cell.index,
            text=_with_stats(body, language, lines, lines),
            original_lines=lines,
            skeleton_lines=lines,
            compression_ratio=0.0,
            language=language,
            bucket=bucket,
        )

    def _marker_result(
        self,
        cell: Cell,
        language: str,
        normalized: NormalizedCell,
        marker: str,
        *,
        bucket: Optional[str] = None,
        duplicate_of: Optional[int] = None,
        variant_index: Optional[int] = None,
    ) -> SkeletonResult:
        skeleton_lines = min(1, normalized.original_lines)
        return SkeletonResult(
            index=cell.index,
            text=marker,
            original_lines=normalized.original_lines,
            skeleton_lines=skeleton_lines,
            compression_ratio=compression_ratio(normalized.original_lines, skeleton_lines),
            language=language,
            bucket=bucket,
            duplicate_of=duplicate_of,
            variant_of=(bucket, variant_index) if bucket is not None and variant_index is not None else None,
        )


def skeletonize_documents(
    documents: Sequence[Sequence[Cell]],
    *,
    settings: EngineSettings | None = None,
    max_workers: Optional[int] = None,
) -> List[List[SkeletonResult]]:
    """Skeletonize independent documents in parallel, preserving input order.

    Each document receives its own :class:`DocumentState`; nothing is shared
    between documents except the immutable engine settings.
    """
    engine = SkeletonEngine(settings)
    if not documents:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(engine.skeletonize_document, documents))


def _remember_defines(state: DocumentState, index: int, names: Sequence[str]) -> None:
    state.defines_by_index.setdefault(index, list(names))


def _with_stats(body: str, language: str, original_lines: int, skeleton_lines: int) -> str:
    footer = stats_line(language, original_lines, skeleton_lines)
    return f"{body}\n{footer}" if body else footer


__all__ = ["SkeletonEngine", "skeletonize_documents"]
