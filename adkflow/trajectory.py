"""Scoring of tool-use trajectories against the expected ones."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from .eval_types import EvaluationEntry, ToolUse


@dataclass
class EvaluationResult:
    """Outcome of comparing one entry's tool uses with the expected ones."""

    query: str = ""
    response: str = ""
    actual_tool_use: list[ToolUse] = field(default_factory=list)
    expected_tool_use: list[ToolUse] = field(default_factory=list)
    tool_use_accuracy: float = 0.0


@dataclass
class FailureInfo:
    """An entry whose actual tool uses did not match the expected ones."""

    turn: int = 0
    query: str = ""
    actual: list[ToolUse] = field(default_factory=list)
    expected: list[ToolUse] = field(default_factory=list)


def _as_entry(entry: Mapping[str, Any]) -> EvaluationEntry:
    return entry if isinstance(entry, EvaluationEntry) else EvaluationEntry(entry)


def _without_outputs(uses: Iterable[ToolUse]) -> list[ToolUse]:
    return [ToolUse(tool_name=u.tool_name, tool_input=u.tool_input) for u in uses]


def _same_trajectory(first: list[ToolUse], second: list[ToolUse]) -> bool:
    if len(first) != len(second):
        return False
    return all(
        a.tool_name == b.tool_name and a.tool_input == b.tool_input
        for a, b in zip(first, second)
    )


def _dump(value: Any, prefix: str = "") -> str:
    text = json.dumps(value, indent=2, ensure_ascii=False, default=str)
    return text.replace("\n", "\n" + prefix) if prefix else text


def _dump_uses(uses: list[ToolUse]) -> str:
    return _dump([u.to_dict() for u in uses])


class TrajectoryEvaluator:
    """Scores tool-use trajectories: an exact match scores 1, anything else 0."""

    def evaluate(
        self,
        dataset: Iterable[Iterable[Mapping[str, Any]]],
        print_detailed_results: bool = False,
    ) -> float:
        """Return the mean tool-use accuracy over every entry, in ``[0, 1]``.

        Mocked tool outputs in the expected uses are ignored. Mismatches are
        reported on standard output.
        """
        dataset = list(dataset)
        if not dataset:
            raise ValueError("the evaluation dataset is empty")

        results: list[EvaluationResult] = []
        failures: list[FailureInfo] = []
        for conversation in dataset:
            for turn, raw in enumerate(conversation, start=1):
                result = self._evaluate_entry(_as_entry(raw))
                results.append(result)
                if result.tool_use_accuracy != 1.0:
                    failures.append(
                        FailureInfo(
                            turn=turn,
                            query=result.query,
                            actual=result.actual_tool_use,
                            expected=result.expected_tool_use,
                        )
                    )

        self._report_failures(failures)
        if print_detailed_results:
            self._print_results(results)

        if not results:
            return 0.0
        return sum(r.tool_use_accuracy for r in results) / len(results)

    def _evaluate_entry(self, entry: EvaluationEntry) -> EvaluationResult:
        expected = _without_outputs(entry.expected_tool_uses())
        actual = entry.actual_tool_uses()
        return EvaluationResult(
            query=entry.query,
            response=entry.response,
            actual_tool_use=actual,
            expected_tool_use=expected,
            tool_use_accuracy=1.0 if _same_trajectory(actual, expected) else 0.0,
        )

    def _report_failures(self, failures: list[FailureInfo]) -> None:
        if not failures:
            return
        print("Failures:")
        for failure in failures:
            print(
                "{\n"
                f'  "turn": {failure.turn},\n'
                f'  "query": "{failure.query}",\n'
                f'  "actual": {_dump_uses(failure.actual)},\n'
                f'  "expected_tool_use": {_dump_uses(failure.expected)}\n'
                "}"
            )

    def _print_results(self, results: list[EvaluationResult]) -> None:
        print("\nTrajectory Evaluation Results:")
        print("--------------------------------")
        for number, result in enumerate(results, start=1):
            print(f"Entry {number}:")
            print(f"  Query: {result.query}")
            print(f"  Response: {result.response}")
            print(f"  Tool Use Accuracy: {result.tool_use_accuracy:.2f}")
            print("  Expected Tool Use:")
            for index, use in enumerate(result.expected_tool_use, start=1):
                print(f"    {index}. {use.tool_name}: {_dump(use.tool_input, '    ')}")
            print("  Actual Tool Use:")
            for index, use in enumerate(result.actual_tool_use, start=1):
                print(f"    {index}. {use.tool_name}: {_dump(use.tool_input, '    ')}")
            print("--------------------------------")
        if results:
            mean = sum(r.tool_use_accuracy for r in results) / len(results)
            print(f"Mean Tool Use Accuracy: {mean:.2f}")


def _optional(value: Optional[Any]) -> Any:
    return value