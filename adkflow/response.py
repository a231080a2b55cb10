"""Scoring of agent responses against reference answers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .eval_types import (
    RESPONSE_EVALUATION_SCORE_KEY,
    RESPONSE_MATCH_SCORE_KEY,
    EvaluationEntry,
)

ROUGE_METRIC = "rouge_1/mean"
COHERENCE_METRIC = "coherence/mean"

_PUNCTUATION = str.maketrans({c: " " for c in ".,!?;:()[]{}\"'\n\t"})


def _tokenize(text: str) -> list[str]:
    return text.lower().translate(_PUNCTUATION).split()


def _rouge1(response: str, reference: str) -> float:
    """Share of reference words matched by response words (response words may repeat)."""
    if not response or not reference:
        return 0.0
    reference_words = _tokenize(reference)
    if not reference_words:
        return 0.0
    vocabulary = set(reference_words)
    matches = sum(1 for word in _tokenize(response) if word in vocabulary)
    return matches / len(reference_words)


def _coherence(response: str) -> float:
    """Rough coherence score on a 0-5 scale, based on response length."""
    count = len(_tokenize(response))
    if count == 0:
        return 0.0
    if count < 5:
        return 1.0
    if count < 20:
        return 3.0
    return 4.5


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _as_entry(entry: Mapping[str, Any]) -> EvaluationEntry:
    return entry if isinstance(entry, EvaluationEntry) else EvaluationEntry(entry)


class ResponseEvaluator:
    """Computes ROUGE-1 match and coherence scores for dataset responses."""

    def evaluate(
        self,
        dataset: Iterable[Iterable[Mapping[str, Any]]],
        criteria: Mapping[str, float],
        print_detailed_results: bool = False,
    ) -> dict[str, float]:
        """Return mean scores keyed ``rouge_1/mean`` and ``coherence/mean``.

        A metric is present only when the criteria ask for it and at least one
        entry could be scored; ROUGE needs a non-empty reference.
        """
        dataset = list(dataset)
        if not dataset:
            raise ValueError("the evaluation dataset is empty")

        needs_coherence = RESPONSE_EVALUATION_SCORE_KEY in criteria
        needs_rouge = RESPONSE_MATCH_SCORE_KEY in criteria

        rouge_scores: list[float] = []
        coherence_scores: list[float] = []
        for conversation in dataset:
            for raw in conversation:
                entry = _as_entry(raw)
                response, reference = entry.response, entry.reference
                if needs_rouge and reference:
                    rouge_scores.append(_rouge1(response, reference))
                if needs_coherence:
                    coherence_scores.append(_coherence(response))

        metrics: dict[str, float] = {}
        if rouge_scores:
            metrics[ROUGE_METRIC] = _mean(rouge_scores)
        if coherence_scores:
            metrics[COHERENCE_METRIC] = _mean(coherence_scores)

        if print_detailed_results:
            self._print_results(metrics)
        return metrics

    def _print_results(self, metrics: Mapping[str, float]) -> None:
        print("\nResponse Evaluation Results:")
        print("--------------------------")
        for metric, value in metrics.items():
            print(f"{metric:<20}: {value:.3f}")
        print("--------------------------")