"""Duplicate, bucket and variant detection over a document's cell sequence."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

from .models import DocumentState
from .normalizer import NormalizedCell, split_statements
from .patterns import definition_header

BUCKET_OTHER = "other"


@dataclass(frozen=True)
class BucketRule:
    """Assigns ``bucket`` when any of its patterns matches the cell text."""

    bucket: str
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _bucket(name: str, *patterns: str) -> BucketRule:
    return BucketRule(bucket=name, pattern=re.compile("|".join(patterns), re.IGNORECASE))


# Priority order; the first bucket whose rule matches wins.
BUCKET_RULES: Tuple[BucketRule, ...] = (
    _bucket(
        "setup",
        r"[!%]pip\b",
        r"\bpip install\b",
        r"\bgit clone\b",
        r"\bapt-get\b",
        r"\bconda install\b",
        r"!apt\b",
        r"!sudo\b",
    ),
    _bucket(
        "data_acquisition",
        r"\bwget\b",
        r"\bcurl\b",
        r"\bgdown\b",
        r"\bgsutil\b",
        r"\bkaggle\b",
        r"\bdownload",
        r"\.parquet\b",
        r"\.csv\b",
        r"\.jsonl\b",
        r"\.tsv\b",
        r"https?://",
    ),
    _bucket(
        "dataset_build",
        r"\bdataset\b",
        r"\bdataloader\b",
        r"\btokenizer\b",
        r"\btokenize\b",
        r"\bbuild_dataset\b",
        r"\bprepare_dataset\b",
        r"\baugment",
        r"\bnp\.save\b",
        r"\.to_json\b",
    ),
    _bucket(
        "training_invocation",
        r"\btrain\b",
        r"\btrainer\b",
        r"\bfit\b",
        r"\boptimizer\b",
        r"\bbackward\b",
        r"\bepochs?\b",
    ),
    _bucket(
        "checkpoint_handling",
        r"\bcheckpoint",
        r"\bstate_dict\b",
        r"\bload_state_dict\b",
        r"\btorch\.save\b",
        r"\btorch\.load\b",
        r"\bckpt\b",
    ),
    _bucket(
        "model_load",
        r"\bfrom_pretrained\b",
        r"\bautomodel",
        r"\bautotokenizer\b",
        r"\bload_model\b",
        r"\bload_pretrained\b",
    ),
    _bucket(
        "inference_api",
        r"\bpredict",
        r"\binference\b",
        r"\bgenerate\b",
        r"\bforward\b",
        r"\bno_grad\b",
        r"\blogits\b",
        r"\bsoftmax\b",
    ),
    _bucket(
        "evaluation",
        r"\beval\b",
        r"\bevaluate",
        r"\baccuracy",
        r"\btopk\b",
        r"\bmetrics?\b",
        r"\bprecision\b",
        r"\brecall\b",
    ),
    _bucket(
        "plotting",
        r"\bplot\b",
        r"\bmatplotlib\b",
        r"\bseaborn\b",
        r"\bplt\.",
    ),
    _bucket(
        "debug_experiments",
        r"\bprint\b",
        r"\binspect\b",
        r"\bpdb\b",
        r"\bassert\b",
        r"\bdebug\b",
        r"\blogits\b",
    ),
)

BUCKETS: Tuple[str, ...] = tuple(rule.bucket for rule in BUCKET_RULES) + (BUCKET_OTHER,)


def classify_bucket(text: str) -> str:
    """Return the first bucket in priority order whose rule matches ``text``."""
    for rule in BUCKET_RULES:
        if rule.matches(text):
            return rule.bucket
    return BUCKET_OTHER


def extract_signature(lines: Sequence[str]) -> Tuple[str, ...]:
    """Top-level function and class names in source order, without repeats."""
    names: List[str] = []
    for statement in split_statements(lines):
        if statement.indent != 0:
            continue
        header = definition_header(statement.code)
        if header is not None and header[1] not in names:
            names.append(header[1])
    return tuple(names)


def find_duplicate(cell: NormalizedCell, index: int, state: DocumentState) -> Optional[int]:
    """Return the first earlier index with identical text, recording misses.

    Blank cells are neither matched nor recorded.
    """
    if cell.original_lines == 0:
        return None
    earlier = state.first_index_for(cell.content_hash)
    if earlier is not None:
        return earlier
    state.remember_hash(cell.content_hash, index)
    return None


def find_variant(
    bucket: str, signature: Tuple[str, ...], index: int, state: DocumentState
) -> Optional[int]:
    """Return an earlier same-bucket cell with an equal signature set.

    When nothing matches, the cell's signature is appended to the bucket
    history so later cells can match against it.
    """
    if signature:
        wanted = frozenset(signature)
        for earlier_index, earlier_signature in state.history_for(bucket):
            if earlier_signature and frozenset(earlier_signature) == wanted:
                return earlier_index
    state.remember_signature(bucket, index, signature)
    return None


__all__ = [
    "BUCKETS",
    "BUCKET_OTHER",
    "BUCKET_RULES",
    "BucketRule",
    "classify_bucket",
    "extract_signature",
    "find_duplicate",
    "find_variant",
]
