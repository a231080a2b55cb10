"""Key names, criteria and data types of evaluation datasets."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

QUERY = "query"
EXPECTED_TOOL_USE = "expected_tool_use"
RESPONSE = "response"
REFERENCE = "reference"
TOOL_NAME = "tool_name"
TOOL_INPUT = "tool_input"
MOCK_TOOL_OUTPUT = "mock_tool_output"
ACTUAL_TOOL_USE = "actual_tool_use"

TOOL_TRAJECTORY_SCORE_KEY = "tool_trajectory_avg_score"
RESPONSE_EVALUATION_SCORE_KEY = "response_evaluation_score"
RESPONSE_MATCH_SCORE_KEY = "response_match_score"

DEFAULT_TOOL_TRAJECTORY_SCORE = 1.0
DEFAULT_RESPONSE_MATCH_SCORE = 0.8

ALLOWED_CRITERIA = (
    TOOL_TRAJECTORY_SCORE_KEY,
    RESPONSE_EVALUATION_SCORE_KEY,
    RESPONSE_MATCH_SCORE_KEY,
)

DEFAULT_CRITERIA: Mapping[str, float] = MappingProxyType(
    {
        TOOL_TRAJECTORY_SCORE_KEY: DEFAULT_TOOL_TRAJECTORY_SCORE,
        RESPONSE_MATCH_SCORE_KEY: DEFAULT_RESPONSE_MATCH_SCORE,
    }
)


@dataclass
class ToolUse:
    """One call of a tool, with its input and optionally a mocked output."""

    tool_name: str = ""
    tool_input: Optional[dict[str, Any]] = None
    tool_output: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolUse":
        """Build a tool use from its JSON form; raise ``ValueError`` on bad types."""
        if not isinstance(data, Mapping):
            raise ValueError(f"tool use must be an object, got {type(data).__name__}")
        name = data.get(TOOL_NAME)
        if name is None:
            name = ""
        elif not isinstance(name, str):
            raise ValueError(f"{TOOL_NAME} must be a string, got {type(name).__name__}")
        tool_input = data.get(TOOL_INPUT)
        if tool_input is not None:
            if not isinstance(tool_input, Mapping):
                raise ValueError(
                    f"{TOOL_INPUT} must be an object, got {type(tool_input).__name__}"
                )
            tool_input = dict(tool_input)
        return cls(tool_name=name, tool_input=tool_input, tool_output=data.get(MOCK_TOOL_OUTPUT))

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form; the mock output is left out when unset."""
        data: dict[str, Any] = {TOOL_NAME: self.tool_name, TOOL_INPUT: self.tool_input}
        if self.tool_output is not None:
            data[MOCK_TOOL_OUTPUT] = self.tool_output
        return data


def _tool_uses(value: Any, what: str) -> list[ToolUse]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"failed to unmarshal {what}: expected an array, got {type(value).__name__}")
    uses = []
    for item in value:
        if isinstance(item, ToolUse):
            uses.append(ToolUse(item.tool_name, item.tool_input, item.tool_output))
            continue
        try:
            uses.append(ToolUse.from_dict(item))
        except ValueError as exc:
            raise ValueError(f"failed to unmarshal {what}: {exc}") from exc
    return uses


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class EvaluationEntry(dict):
    """One turn of an evaluation conversation, keyed by the constants above."""

    @property
    def query(self) -> str:
        """The user query, or ``""``."""
        return _text(self.get(QUERY))

    @property
    def response(self) -> str:
        """The agent response, or ``""``."""
        return _text(self.get(RESPONSE))

    @response.setter
    def response(self, value: str) -> None:
        self[RESPONSE] = value

    @property
    def reference(self) -> str:
        """The reference answer, or ``""``."""
        return _text(self.get(REFERENCE))

    def expected_tool_uses(self) -> list[ToolUse]:
        """Tool uses the entry expects; empty when none are given."""
        return _tool_uses(self.get(EXPECTED_TOOL_USE), "expected tool use")

    def actual_tool_uses(self) -> list[ToolUse]:
        """Tool uses recorded for the entry; empty when none are given."""
        return _tool_uses(self.get(ACTUAL_TOOL_USE), "actual tool use")


EvaluationConversation = list[EvaluationEntry]
EvaluationDataset = list[EvaluationConversation]