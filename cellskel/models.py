"""Core data models shared across cellskel components."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Cell:
    """One contiguous unit of source text, such as a notebook code cell."""

    index: int
    raw_text: Optional[str]
    language: Optional[str] = None


@dataclass
class Contract:
    """Names a cell defines and the paths it reads or writes."""

    defines: List[str] = field(default_factory=list)
    reads: List[str] = field(default_factory=list)
    writes: List[str] = field(default_factory=list)


@dataclass
class SkeletonResult:
    """Compressed rendition of a single cell."""

    index: int
    text: str
    original_lines: int
    skeleton_lines: int
    compression_ratio: float
    language: str
    bucket: Optional[str] = None
    duplicate_of: Optional[int] = None
    variant_of: Optional[Tuple[str, int]] = None


@dataclass
class DocumentState:
    """Mutable bookkeeping for one skeletonization run over one document.

    Owned by a single run and never shared between documents or threads.
    ``seen_hashes`` relies on dict insertion order and entries are never
    overwritten once recorded.
    """

    seen_hashes: Dict[str, int] = field(default_factory=dict)
    bucket_history: Dict[str, List[Tuple[int, Tuple[str, ...]]]] = field(default_factory=dict)
    defines_by_index: Dict[int, List[str]] = field(default_factory=dict)

    def first_index_for(self, content_hash: str) -> Optional[int]:
        return self.seen_hashes.get(content_hash)

    def remember_hash(self, content_hash: str, index: int) -> None:
        self.seen_hashes.setdefault(content_hash, index)

    def history_for(self, bucket: str) -> List[Tuple[int, Tuple[str, ...]]]:
        return self.bucket_history.get(bucket, [])

    def remember_signature(self, bucket: str, index: int, signature: Tuple[str, ...]) -> None:
        self.bucket_history.setdefault(bucket, []).append((index, signature))
