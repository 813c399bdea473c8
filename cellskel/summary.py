"""Pattern-driven intent phrases for elided code and removed print calls."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple


@dataclass(frozen=True)
class PhraseRule:
    """Emit ``phrase`` when ``pattern`` matches anywhere in a block of text."""

    phrase: str
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(phrase: str, *patterns: str) -> PhraseRule:
    return PhraseRule(phrase=phrase, pattern=re.compile("|".join(patterns), re.IGNORECASE))


# Order is observable: phrases are always reported in table order.
SUMMARY_RULES: Tuple[PhraseRule, ...] = (
    _rule(
        "loads checkpoint/state_dict",
        r"torch\.load\s*\(",
        r"load_state_dict\s*\(",
        r"load_checkpoint\s*\(",
    ),
    _rule(
        "writes artifacts/checkpoints",
        r"torch\.save\s*\(",
        r"np\.save\w*\s*\(",
        r"save_pretrained\s*\(",
        r"\.to_json\s*\(",
        r"\.to_csv\s*\(",
        r"\.to_parquet\s*\(",
        r"pickle\.dump\s*\(",
    ),
    _rule(
        "reads data files",
        r"pd\.read_?\w*\s*\(",
        r"np\.load\w*\s*\(",
        r"json\.load\s*\(",
        r"\bopen\s*\([^)]*['\"]r",
    ),
    _rule(
        "tokenizes/encodes text",
        r"tokenizer\s*[.(]",
        r"\.tokenize\s*\(",
        r"\.encode\s*\(",
        r"\.decode\s*\(",
    ),
    _rule(
        "applies augmentation/sampling",
        r"augment",
        r"shuffle\s*\(",
        r"\.sample\s*\(",
    ),
    _rule(
        "runs training loop",
        r"\.train\s*\(",
        r"\.fit\s*\(",
        r"\boptimizer\.",
        r"\.backward\s*\(",
        r"\bloss\.",
    ),
    _rule(
        "evaluates metrics",
        r"\.eval\s*\(",
        r"accuracy",
        r"top_?k",
        r"metric",
        r"precision",
        r"recall",
    ),
    _rule(
        "plots figures",
        r"\bplt\.",
        r"\.plot\s*\(",
        r"seaborn",
        r"\bsns\.",
    ),
    _rule(
        "moves tensors to device",
        r"\.cuda\s*\(",
        r"\.to\s*\(\s*device",
        r"\.to\s*\(\s*['\"]cuda",
    ),
    _rule(
        "prepares inputs/masks",
        r"pad_sequence",
        r"\.pad\s*\(",
        r"max_length\s*=",
        r"attention_mask",
    ),
    _rule(
        "builds batches/dataloaders",
        r"\bDataLoader\b",
        r"\.batch\s*\(",
        r"collate_fn",
    ),
    _rule(
        "computes logits/probabilities",
        r"\.logits\b",
        r"softmax\s*\(",
        r"\.argmax\s*\(",
    ),
    _rule(
        "installs dependencies",
        r"[!%]pip\b",
        r"pip install",
        r"requirements\.txt",
    ),
    _rule(
        "downloads external resources",
        r"!git clone",
        r"!wget",
        r"!curl",
        r"gdown",
    ),
)

# Applied to the message text of print-like calls; follows SUMMARY_RULES in output order.
PRINT_INTENT_RULES: Tuple[PhraseRule, ...] = (
    _rule("building/generating", r"build", r"creat", r"generat"),
    _rule("loading", r"load", r"read"),
    _rule("saving", r"sav", r"writ"),
    _rule("training progress", r"train", r"epoch"),
    _rule("processing", r"process"),
    _rule("completion", r"done", r"finish", r"complete"),
)

_PHRASE_ORDER = {
    rule.phrase: position
    for position, rule in enumerate(SUMMARY_RULES + PRINT_INTENT_RULES)
}

PRINT_CALL = re.compile(r"^(?:print|pprint|display)\s*\(")
_PRINT_MESSAGE = re.compile(
    r"\b(?:print|pprint|display)\s*\(\s*[rRbBuUfF]{0,2}(\"\"\"|'''|\"|')(.*?)\1",
    re.DOTALL,
)


def match_phrases(text: str) -> List[str]:
    """Return the summary-table phrases whose patterns match ``text``."""
    return [rule.phrase for rule in SUMMARY_RULES if rule.matches(text)]


def print_message(code: str) -> Optional[str]:
    """Return the leading string literal passed to a print-like call, if any."""
    match = _PRINT_MESSAGE.search(code)
    if match is None:
        return None
    return match.group(2)


def print_phrases(message: str) -> List[str]:
    """Phrases contributed by the message text of a removed print call."""
    phrases = match_phrases(message)
    phrases.extend(rule.phrase for rule in PRINT_INTENT_RULES if rule.matches(message))
    return order_phrases(phrases)


def collect_phrases(text: str) -> List[str]:
    """Summarize a block of code: table matches plus intents of embedded prints."""
    phrases = match_phrases(text)
    for match in _PRINT_MESSAGE.finditer(text):
        phrases.extend(print_phrases(match.group(2)))
    return order_phrases(phrases)


def order_phrases(phrases: Iterable[str]) -> List[str]:
    """Deduplicate phrases and sort them into table order."""
    unique = {phrase for phrase in phrases if phrase}
    return sorted(unique, key=lambda phrase: (_PHRASE_ORDER.get(phrase, len(_PHRASE_ORDER)), phrase))


def one_line_summary(text: str) -> str:
    phrases = collect_phrases(text)
    return ", ".join(phrases) if phrases else "content elided"


__all__ = [
    "PRINT_CALL",
    "PRINT_INTENT_RULES",
    "PhraseRule",
    "SUMMARY_RULES",
    "collect_phrases",
    "match_phrases",
    "one_line_summary",
    "order_phrases",
    "print_message",
    "print_phrases",
]
