"""Tests for the low-level construct recognisers."""

from __future__ import annotations

import pytest

from cellskel.patterns import (
    count_references,
    definition_header,
    import_module,
    is_clause_continuation,
    iter_string_literals,
    parse_assignment,
    single_string_value,
)


@pytest.mark.parametrize(
    "code, expected",
    [
        ("import os", "os"),
        ("import numpy as np", "numpy"),
        ("from collections import Counter", "collections"),
        ("from .utils import helper", ".utils"),
        ("important = 1", None),
    ],
)
def test_import_module(code: str, expected: str | None) -> None:
    assert import_module(code) == expected


def test_definition_header_kinds() -> None:
    assert definition_header("def train(model):") == ("function", "train")
    assert definition_header("async def fetch(url):") == ("async_function", "fetch")
    assert definition_header("class Trainer(Base):") == ("class", "Trainer")
    assert definition_header("default = 1") is None


def test_parse_assignment_variants() -> None:
    plain = parse_assignment("lr = 1e-3")
    annotated = parse_assignment("batch_size: int = 32")

    assert plain is not None and (plain.name, plain.value) == ("lr", "1e-3")
    assert annotated is not None and (annotated.name, annotated.value) == ("batch_size", "32")
    assert parse_assignment("x == 1") is None
    assert parse_assignment("model.eval()") is None
    assert parse_assignment("if x = 1:") is None


def test_clause_keywords() -> None:
    assert is_clause_continuation("else:")
    assert is_clause_continuation("except ValueError:")
    assert not is_clause_continuation("elsewhere = 2")


def test_iter_string_literals_reports_prefixes() -> None:
    literals = list(iter_string_literals("open(f\"{root}/x.csv\", 'w')"))

    assert [(item.prefix, item.body) for item in literals] == [("f", "{root}/x.csv"), ("", "w")]
    assert literals[0].is_formatted
    assert not literals[1].is_formatted


def test_single_string_value() -> None:
    assert single_string_value('"data/train.csv"') == "data/train.csv"
    assert single_string_value("'a' + 'b'") is None
    assert single_string_value("f'{x}.csv'") is None


def test_count_references_ignores_attributes_and_prefixes() -> None:
    text = "lr = 1\nopt.lr = lr\nlr_scale = lr * 2\nprint(lr)"

    assert count_references(text, "lr") == 4
