"""Tests for top-level element classification."""

from __future__ import annotations

import pytest

from cellskel.classifier import ElementClassifier
from cellskel.config import EngineSettings
from cellskel.elements import (
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
    DefinitionElement,
    ImportElement,
    OtherElement,
    PrintElement,
    ShellElement,
)
from cellskel.paths import PathExtractor
from tests._fixtures.cell_builder import dedent


@pytest.fixture
def classifier() -> ElementClassifier:
    settings = EngineSettings()
    return ElementClassifier(settings, PathExtractor(settings.path_extensions))


@pytest.mark.parametrize(
    "comment, kind",
    [
        ("## Data loading", COMMENT_STRUCTURAL),
        ("# ---------", COMMENT_STRUCTURAL),
        ("# ===== Section =====", COMMENT_STRUCTURAL),
        ("# TODO: tune the warmup", COMMENT_TODO),
        ("# fixme later", COMMENT_TODO),
        ("# model.fit(x, y)", COMMENT_DISABLED),
        ("# lr = 3e-4", COMMENT_DISABLED),
        ("# import wandb", COMMENT_DISABLED),
        ("# normalise pixel values to the unit range", COMMENT_EXPLANATORY),
        ("# step 2", COMMENT_TRIVIAL),
        ("#", COMMENT_TRIVIAL),
    ],
)
def test_classify_comment(classifier: ElementClassifier, comment: str, kind: str) -> None:
    element = classifier.classify_comment(comment)

    assert element.kind == kind
    assert element.kept == (kind not in {COMMENT_DISABLED, COMMENT_TRIVIAL})


def _assignment(classifier: ElementClassifier, source: str, name: str) -> AssignmentElement:
    result = classifier.classify(dedent(source).splitlines())
    for element in result.elements:
        if isinstance(element, AssignmentElement) and element.name == name:
            return element
    raise AssertionError(f"no assignment to {name}")


def test_constants_and_config_names_are_kept(classifier: ElementClassifier) -> None:
    assert _assignment(classifier, "BATCH_SIZE = 32", "BATCH_SIZE").reason == "constant"
    assert _assignment(classifier, "N = 10", "N").reason == "constant"
    assert _assignment(classifier, "config = load()", "config").reason == "config"
    assert _assignment(classifier, "params_grid = {}", "params_grid").reason == "config"


def test_path_assignments_are_kept(classifier: ElementClassifier) -> None:
    element = _assignment(classifier, 'data_file = "data/train.jsonl"', "data_file")

    assert (element.decision, element.reason) == (ASSIGN_KEEP, "path")


def test_frequently_referenced_assignments_are_kept(classifier: ElementClassifier) -> None:
    source = """
    model = build_model(hidden=512)
    model.train()
    opt = make_opt(model)
    evaluate(model)
    """

    element = _assignment(classifier, source, "model")

    assert (element.decision, element.reason) == (ASSIGN_KEEP, "referenced")


def test_large_objects_become_placeholders(classifier: ElementClassifier) -> None:
    element = _assignment(classifier, "frame = pd.DataFrame(rows)", "frame")

    assert (element.decision, element.reason) == (ASSIGN_PLACEHOLDER, "large_object")


def test_long_values_are_removed(classifier: ElementClassifier) -> None:
    value = "[" + ", ".join(str(number) for number in range(40)) + "]"
    element = _assignment(classifier, f"numbers = {value}", "numbers")

    assert (element.decision, element.reason) == (ASSIGN_REMOVE, "long_value")
    assert not element.kept


def test_keep_rules_take_precedence_over_removal(classifier: ElementClassifier) -> None:
    value = "[" + ", ".join(str(number) for number in range(40)) + "]"
    element = _assignment(classifier, f"LOOKUP = {value}", "LOOKUP")

    assert element.decision == ASSIGN_KEEP


def test_classify_groups_definitions_with_decorators(classifier: ElementClassifier) -> None:
    result = classifier.classify(
        dedent(
            """
            import torch

            @torch.no_grad()
            def predict(model, x):
                return model(x).argmax(-1)
            """
        ).splitlines()
    )

    imports = [element for element in result.elements if isinstance(element, ImportElement)]
    definitions = [element for element in result.elements if isinstance(element, DefinitionElement)]
    assert [item.module for item in imports] == ["torch"]
    assert len(definitions) == 1
    definition = definitions[0]
    assert definition.header_lines == ("@torch.no_grad()", "def predict(model, x):")
    assert definition.body.decision == BODY_KEEP
    assert definition.body.lines == ("    return model(x).argmax(-1)",)
    assert result.defines == ["predict"]


def test_long_definition_bodies_are_summarised(classifier: ElementClassifier) -> None:
    result = classifier.classify(
        dedent(
            '''
            def load_frames(paths):
                """Read every shard into one frame.

                Longer description.
                """
                frames = []
                for path in paths:
                    frames.append(pd.read_parquet(path))
                return pd.concat(frames)
            '''
        ).splitlines()
    )

    definition = result.elements[0]
    assert isinstance(definition, DefinitionElement)
    assert definition.body.decision == BODY_SUMMARIZE
    assert definition.body.docstring == "Read every shard into one frame."
    assert definition.body.phrases == ("reads data files",)
    assert definition.body.indent == "    "


def test_compound_statements_fold_trailing_clauses(classifier: ElementClassifier) -> None:
    result = classifier.classify(
        dedent(
            """
            if torch.cuda.is_available():
                device = "cuda"
            else:
                device = "cpu"
            x = 1
            """
        ).splitlines()
    )

    assert isinstance(result.elements[0], OtherElement)
    assert result.elements[0].body is not None
    assert result.elements[0].body.lines == ('    device = "cuda"', "else:", '    device = "cpu"')
    assert isinstance(result.elements[1], AssignmentElement)


def test_prints_shell_lines_and_placeholders(classifier: ElementClassifier) -> None:
    result = classifier.classify(
        dedent(
            """
            !nvidia-smi
            print("Loading tokenizer")
            tokenizer = AutoTokenizer.from_pretrained(name)
            """
        ).splitlines()
    )

    shell, printed, assignment = result.elements
    assert isinstance(shell, ShellElement) and shell.text == "!nvidia-smi"
    assert isinstance(printed, PrintElement)
    assert printed.phrases == ("loading",)
    assert isinstance(assignment, AssignmentElement)
    assert assignment.decision == ASSIGN_PLACEHOLDER
    assert result.print_phrases == ["loading"]
    assert result.elided_names == ["tokenizer"]
    assert result.defines == ["tokenizer"]


def test_orphan_decorators_are_preserved(classifier: ElementClassifier) -> None:
    result = classifier.classify(["@pytest.fixture", "x = 1"])

    assert isinstance(result.elements[0], OtherElement)
    assert result.elements[0].header_lines == ("@pytest.fixture",)
