import pytest

from adkflow.eval_types import RESPONSE_EVALUATION_SCORE_KEY, RESPONSE_MATCH_SCORE_KEY
from adkflow.response import ResponseEvaluator


def _entry(response, reference=None):
    entry = {"query": "q", "response": response}
    if reference is not None:
        entry["reference"] = reference
    return entry


def test_empty_dataset_raises():
    with pytest.raises(ValueError, match="the evaluation dataset is empty"):
        ResponseEvaluator().evaluate([], {RESPONSE_MATCH_SCORE_KEY: 0.8})


def test_identical_text_scores_one():
    metrics = ResponseEvaluator().evaluate(
        [[_entry("The cat sat", "the cat sat")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}
    )
    assert metrics["rouge_1/mean"] == 1.0


def test_punctuation_is_ignored():
    metrics = ResponseEvaluator().evaluate(
        [[_entry("Hello, world!", "hello world")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}
    )
    assert metrics["rouge_1/mean"] == 1.0


def test_disjoint_text_scores_zero():
    metrics = ResponseEvaluator().evaluate(
        [[_entry("alpha", "beta")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}
    )
    assert metrics["rouge_1/mean"] == 0.0


def test_partial_overlap_is_between_bounds():
    metrics = ResponseEvaluator().evaluate(
        [[_entry("the cat", "the cat sat here")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}
    )
    assert 0.0 < metrics["rouge_1/mean"] < 1.0


def test_entries_without_reference_are_skipped():
    metrics = ResponseEvaluator().evaluate(
        [[_entry("anything")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}
    )
    assert "rouge_1/mean" not in metrics


def test_coherence_only_when_requested():
    metrics = ResponseEvaluator().evaluate(
        [[_entry("a b c", "a b c")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}
    )
    assert "coherence/mean" not in metrics


@pytest.mark.parametrize(
    "response, expected",
    [
        ("", 0.0),
        ("one two three", 1.0),
        ("one two three four five six", 3.0),
        (" ".join(["word"] * 25), 4.5),
    ],
)
def test_coherence_by_length(response, expected):
    metrics = ResponseEvaluator().evaluate(
        [[_entry(response)]], {RESPONSE_EVALUATION_SCORE_KEY: 3.0}
    )
    assert metrics["coherence/mean"] == expected


def test_mean_is_within_range_of_scores():
    dataset = [[_entry("same words", "same words")], [_entry("x", "y")]]
    metrics = ResponseEvaluator().evaluate(dataset, {RESPONSE_MATCH_SCORE_KEY: 0.8})
    assert 0.0 < metrics["rouge_1/mean"] < 1.0


def test_prints_results(capsys):
    ResponseEvaluator().evaluate(
        [[_entry("a", "a")]], {RESPONSE_MATCH_SCORE_KEY: 0.8}, True
    )
    out = capsys.readouterr().out
    assert "Response Evaluation Results:" in out
    assert "rouge_1/mean        : 1.000" in out