"""Evaluation of an agent against test files and pass thresholds."""

from __future__ import annotations

import json
import os
from typing import Any, Mapping, Optional, Union

from .eval_types import (
    ALLOWED_CRITERIA,
    DEFAULT_CRITERIA,
    EXPECTED_TOOL_USE,
    QUERY,
    REFERENCE,
    RESPONSE_EVALUATION_SCORE_KEY,
    RESPONSE_MATCH_SCORE_KEY,
    TOOL_TRAJECTORY_SCORE_KEY,
)
from .generator import EvaluationGenerator
from .response import COHERENCE_METRIC, ROUGE_METRIC, ResponseEvaluator
from .trajectory import TrajectoryEvaluator

NUM_RUNS = 2
TEST_FILE_SUFFIX = ".test.json"
CONFIG_FILE_NAME = "test_config.json"


class EvaluationError(ValueError):
    """Invalid evaluation input, or a score below its threshold."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class AgentEvaluator:
    """Runs the dataset evaluations and checks scores against criteria."""

    def __init__(self) -> None:
        self.generator = EvaluationGenerator()
        self.trajectory_evaluator = TrajectoryEvaluator()
        self.response_evaluator = ResponseEvaluator()

    def evaluate(
        self,
        agent: Any,
        eval_dataset_file_path_or_dir: Union[str, os.PathLike],
        num_runs: int = NUM_RUNS,
        agent_name: str = "",
        initial_session_file: Optional[Union[str, os.PathLike]] = None,
    ) -> dict[str, dict[str, float]]:
        """Evaluate ``agent`` on every test file; raise ``EvaluationError`` on failure.

        Returns the scores obtained, keyed by test file path.
        """
        test_files = self._find_test_files(os.fspath(eval_dataset_file_path_or_dir))
        initial_session = self._load_initial_session(initial_session_file)

        scores: dict[str, dict[str, float]] = {}
        for test_file in test_files:
            dataset = self.generator.load_dataset(test_file)
            criteria = self._find_config_for_test_file(test_file)
            self._validate_input(dataset, criteria)

            responses = self.generator.generate_responses(
                dataset, agent, num_runs, agent_name, initial_session
            )

            file_scores: dict[str, float] = {}
            if self._response_evaluation_required(criteria, dataset):
                file_scores.update(self._evaluate_response_scores(responses, criteria))
            if self._trajectory_evaluation_required(criteria, dataset):
                file_scores.update(self._evaluate_tool_trajectory(responses, criteria))
            scores[test_file] = file_scores
        return scores

    def _load_initial_session(
        self, path: Optional[Union[str, os.PathLike]]
    ) -> dict[str, Any]:
        session: dict[str, Any] = {}
        if not path:
            return session
        try:
            with open(path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as exc:
            raise OSError(f"failed to read initial session file: {exc}") from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise EvaluationError(f"failed to parse initial session JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise EvaluationError("failed to parse initial session JSON: expected an object")
        state = data.get("state")
        if isinstance(state, dict):
            session["state"] = state
        return session

    def _find_test_files(self, path: str) -> list[str]:
        try:
            os.stat(path)
        except OSError as exc:
            raise OSError(f"invalid path {path}: {exc}") from exc
        if not os.path.isdir(path):
            return [path]

        found: list[str] = []

        def _raise(exc: OSError) -> None:
            raise OSError(f"error walking directory {path}: {exc}") from exc

        for root, dirs, files in os.walk(path, onerror=_raise):
            dirs.sort()
            found.extend(
                os.path.join(root, name) for name in sorted(files) if name.endswith(TEST_FILE_SUFFIX)
            )
        return sorted(found)

    def _find_config_for_test_file(self, test_file: str) -> dict[str, float]:
        config_path = os.path.join(os.path.dirname(test_file), CONFIG_FILE_NAME)
        if not os.path.exists(config_path):
            return dict(DEFAULT_CRITERIA)
        try:
            with open(config_path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as exc:
            raise OSError(f"failed to read test config file: {exc}") from exc
        try:
            config = json.loads(text)
        except ValueError as exc:
            raise EvaluationError(f"invalid JSON in test config file: {exc}") from exc
        if not isinstance(config, dict) or "criteria" not in config:
            raise EvaluationError("test_config.json missing 'criteria' field")
        criteria = config["criteria"]
        if not isinstance(criteria, dict):
            raise EvaluationError("'criteria' must be a dictionary")
        if not all(_is_number(v) for v in criteria.values()):
            raise EvaluationError("criteria values must be numbers")
        return {str(k): float(v) for k, v in criteria.items()}

    def _validate_input(self, dataset: list, criteria: Mapping[str, float]) -> None:
        if not dataset:
            raise EvaluationError("the evaluation dataset is None or empty")
        for key in criteria:
            if key not in ALLOWED_CRITERIA:
                raise EvaluationError(
                    f"invalid criteria key: {key}. Expected one of {list(ALLOWED_CRITERIA)}"
                )
        if not dataset[0]:
            raise EvaluationError("the evaluation dataset is empty")

        first = dataset[0][0]
        required = {
            TOOL_TRAJECTORY_SCORE_KEY: (QUERY, EXPECTED_TOOL_USE),
            RESPONSE_EVALUATION_SCORE_KEY: (QUERY,),
            RESPONSE_MATCH_SCORE_KEY: (QUERY, REFERENCE),
        }
        for criterion, keys in required.items():
            if criterion not in criteria:
                continue
            for key in keys:
                if key not in first:
                    raise EvaluationError(f"samples for {criterion} must include '{key}' key")

    def _response_evaluation_required(self, criteria: Mapping[str, float], dataset: list) -> bool:
        return REFERENCE in dataset[0][0] and (
            RESPONSE_EVALUATION_SCORE_KEY in criteria or RESPONSE_MATCH_SCORE_KEY in criteria
        )

    def _trajectory_evaluation_required(self, criteria: Mapping[str, float], dataset: list) -> bool:
        return EXPECTED_TOOL_USE in dataset[0][0] and TOOL_TRAJECTORY_SCORE_KEY in criteria

    def _evaluate_response_scores(
        self, responses: list, criteria: Mapping[str, float]
    ) -> dict[str, float]:
        metrics = self.response_evaluator.evaluate(responses, criteria, True)
        if RESPONSE_EVALUATION_SCORE_KEY in criteria:
            self._assert_score(
                metrics,
                COHERENCE_METRIC,
                criteria[RESPONSE_EVALUATION_SCORE_KEY],
                "Average response evaluation score",
            )
        if RESPONSE_MATCH_SCORE_KEY in criteria:
            self._assert_score(
                metrics,
                ROUGE_METRIC,
                criteria[RESPONSE_MATCH_SCORE_KEY],
                "Average response match score",
            )
        return metrics

    def _evaluate_tool_trajectory(
        self, responses: list, criteria: Mapping[str, float]
    ) -> dict[str, float]:
        score = self.trajectory_evaluator.evaluate(responses, True)
        metrics = {TOOL_TRAJECTORY_SCORE_KEY: score}
        self._assert_score(
            metrics,
            TOOL_TRAJECTORY_SCORE_KEY,
            criteria[TOOL_TRAJECTORY_SCORE_KEY],
            "Average tool trajectory evaluation score",
        )
        return metrics

    def _assert_score(
        self, metrics: Mapping[str, float], key: str, threshold: float, description: str
    ) -> None:
        if key not in metrics:
            raise EvaluationError(f"metric {key} not found in evaluation results")
        actual = metrics[key]
        if actual < threshold:
            raise EvaluationError(
                f"{description} is lower than expected. "
                f"Expected >= {threshold:f}, but got {actual:f}"
            )