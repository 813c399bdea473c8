"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cellskel.config import EngineSettings
from cellskel.engine import SkeletonEngine
from cellskel.service import create_app


class _RecordingEngine(SkeletonEngine):
    def __init__(self) -> None:
        super().__init__(EngineSettings())
        self.documents: list[list[int]] = []

    def skeletonize_document(self, cells):  # type: ignore[override]
        cells = list(cells)
        self.documents.append([cell.index for cell in cells])
        return super().skeletonize_document(cells)


@pytest.fixture
def engine() -> _RecordingEngine:
    return _RecordingEngine()


@pytest.fixture
def client(engine: _RecordingEngine) -> TestClient:
    return TestClient(create_app(lambda: engine))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_skeletonize_endpoint_returns_results_in_order(
    client: TestClient, engine: _RecordingEngine
) -> None:
    response = client.post(
        "/skeletonize",
        json={
            "cells": [
                {"index": 2, "raw_text": "x = 1\ny = 2", "language": "python"},
                {"index": 5, "raw_text": "print('hi')"},
                {"index": 7, "raw_text": "x = 1\ny = 2"},
            ]
        },
    )

    assert response.status_code == 200
    results = response.json()["results"]
    assert [item["index"] for item in results] == [2, 5, 7]
    assert results[0]["text"] == "x = 1\ny = 2\n# [python: 2→2 lines, 0% reduced]"
    assert results[2]["text"] == "# Duplicate of Cell 2 ()"
    assert results[2]["duplicate_of"] == 2
    assert results[2]["skeleton_lines"] == 1
    assert engine.documents == [[2, 5, 7]]


def test_skeletonize_endpoint_applies_request_language(client: TestClient) -> None:
    response = client.post(
        "/skeletonize",
        json={"language": "typescript", "cells": [{"index": 1, "raw_text": "const a = 1;"}]},
    )

    assert response.status_code == 200
    result = response.json()["results"][0]
    assert result["language"] == "typescript"
    assert result["text"].endswith("// [typescript: 1→1 lines, 0% reduced]")


def test_skeletonize_endpoint_reports_variants(client: TestClient) -> None:
    first = "def train_step(model, batch, optimizer):\n    loss = model(batch)\n    loss.backward()\n    optimizer.step()"
    second = "def train_step(model, batch, optimizer):\n    optimizer.zero_grad()\n    loss = model(batch)\n    loss.backward()"

    response = client.post(
        "/skeletonize",
        json={"cells": [{"index": 1, "raw_text": first}, {"index": 2, "raw_text": second}]},
    )

    result = response.json()["results"][1]
    assert result["variant_of"] == {"bucket": "training_invocation", "index": 1}
    assert result["text"] == (
        "# Variant of training_invocation (signature duplicate of Cell 1): runs training loop"
    )


def test_skeletonize_endpoint_accepts_null_text(client: TestClient) -> None:
    response = client.post("/skeletonize", json={"cells": [{"index": 1, "raw_text": None}]})

    assert response.status_code == 200
    result = response.json()["results"][0]
    assert result["original_lines"] == 0
    assert result["skeleton_lines"] == 0
    assert result["text"] == "# [python: 0→0 lines, 0% reduced]"


def test_skeletonize_endpoint_validates_payload(client: TestClient) -> None:
    response = client.post("/skeletonize", json={"cells": [{"raw_text": "x = 1"}]})
    assert response.status_code == 422
