"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cellskel.cli import _build_parser, main
from tests._fixtures.cell_builder import CellBuilder

LONG_CELL = """
import torch


def train(model, loader, optimizer):
    \"\"\"Train the model.\"\"\"
    for batch in loader:
        optimizer.zero_grad()
        loss = model(batch)
        loss.backward()
        optimizer.step()
    torch.save(model.state_dict(), "ckpt.pt")
"""


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "skeletonize", "nb.ipynb"])
    assert args.verbose is True
    assert args.command == "skeletonize"
    assert args.path == "nb.ipynb"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["skeletonize", "nb.ipynb", "--verbose"])
    assert args.verbose is True
    assert args.command == "skeletonize"


def test_cli_accepts_batch_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["batch", "a.ipynb", "b.py", "--workers", "2", "--json"])
    assert args.command == "batch"
    assert args.paths == ["a.ipynb", "b.py"]
    assert args.workers == 2
    assert args.json is True


def test_cli_requires_a_command() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_skeletonize_prints_cell_blocks(
    cell_builder: CellBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    notebook = cell_builder.notebook("train.ipynb", ["!pip install torch", LONG_CELL])

    main(["skeletonize", str(notebook)])

    out = capsys.readouterr().out
    assert "# ---- Cell 1 ----\n!pip install torch\n# [python: 1→1 lines, 0% reduced]" in out
    assert "# ---- Cell 2 ----" in out
    assert "# summary: writes artifacts/checkpoints, runs training loop" in out


def test_skeletonize_emits_json(
    cell_builder: CellBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    script = cell_builder.script(
        "pipeline.py",
        """
        # %%
        x = 1
        # %%
        x = 1
        """,
    )

    main(["skeletonize", str(script), "--json"])

    data = json.loads(capsys.readouterr().out)
    assert [item["index"] for item in data] == [1, 2]
    assert data[1]["duplicate_of"] == 1
    assert data[1]["text"] == "# Duplicate of Cell 1 ()"
    assert data[0]["language"] == "python"


def test_skeletonize_language_override(
    cell_builder: CellBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    script = cell_builder.script("snippet.txt", "let x = 1;")

    main(["skeletonize", str(script), "--language", "javascript"])

    assert "// [javascript: 1→1 lines, 0% reduced]" in capsys.readouterr().out


def test_skeletonize_honours_config(
    cell_builder: CellBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    (cell_builder.path() / ".cellskel.yml").write_text(
        "engine:\n  default_language: r\n", encoding="utf-8"
    )
    script = cell_builder.script("notes.txt", "x <- 1")

    main(["skeletonize", str(script)])

    assert "# [r: 1→1 lines, 0% reduced]" in capsys.readouterr().out


def test_skeletonize_missing_document_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["skeletonize", str(tmp_path / "missing.ipynb")])
    assert excinfo.value.code == 1


def test_skeletonize_invalid_notebook_exits(cell_builder: CellBuilder) -> None:
    broken = cell_builder.script("broken.ipynb", "{not json")

    with pytest.raises(SystemExit) as excinfo:
        main(["skeletonize", str(broken)])
    assert excinfo.value.code == 1


def test_batch_keeps_documents_isolated(
    cell_builder: CellBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    first = cell_builder.notebook("first.ipynb", ["x = 1"])
    second = cell_builder.notebook("second.ipynb", ["x = 1"])

    main(["batch", str(first), str(second), "--json", "--workers", "2"])

    data = json.loads(capsys.readouterr().out)
    assert list(data) == [str(first), str(second)]
    for results in data.values():
        assert results[0]["duplicate_of"] is None
        assert results[0]["text"] == "x = 1\n# [python: 1→1 lines, 0% reduced]"
