"""Assembles evaluation responses from agents or recorded sessions."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from .eval_types import (
    ACTUAL_TOOL_USE,
    EXPECTED_TOOL_USE,
    MOCK_TOOL_OUTPUT,
    QUERY,
    RESPONSE,
    TOOL_INPUT,
    TOOL_NAME,
    EvaluationEntry,
    ToolUse,
)


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where}: expected a string, got {type(value).__name__}")
    return value


def _array(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected an array, got {type(value).__name__}")
    return value


@dataclass
class FunctionCall:
    """A tool call recorded in a session."""

    name: str = ""
    args: Optional[dict[str, Any]] = None


@dataclass
class ContentPart:
    """One part of a message: text or a function call."""

    text: str = ""
    function_call: Optional[FunctionCall] = None


@dataclass
class Content:
    """A message with its role and parts."""

    role: str = ""
    parts: list[ContentPart] = field(default_factory=list)


@dataclass
class Event:
    """One interaction event in a session."""

    author: str = ""
    content: Optional[Content] = None
    invocation_id: str = ""


def _function_call(raw: Any, where: str) -> Optional[FunctionCall]:
    if raw is None:
        return None
    data = _mapping(raw, where)
    args = data.get("args")
    if args is not None:
        args = dict(_mapping(args, f"{where}.args"))
    return FunctionCall(name=_string(data.get("name"), f"{where}.name"), args=args)


def _content(raw: Any, where: str) -> Optional[Content]:
    if raw is None:
        return None
    data = _mapping(raw, where)
    parts = []
    for i, item in enumerate(_array(data.get("parts"), f"{where}.parts")):
        part = _mapping(item, f"{where}.parts[{i}]")
        parts.append(
            ContentPart(
                text=_string(part.get("text"), f"{where}.parts[{i}].text"),
                function_call=_function_call(
                    part.get("function_call"), f"{where}.parts[{i}].function_call"
                ),
            )
        )
    return Content(role=_string(data.get("role"), f"{where}.role"), parts=parts)


@dataclass
class Session:
    """A recorded conversation session."""

    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Session":
        """Build a session from its JSON form; raise ``ValueError`` on bad types."""
        data = _mapping(data, "session")
        events = []
        for i, item in enumerate(_array(data.get("events"), "events")):
            raw = _mapping(item, f"events[{i}]")
            events.append(
                Event(
                    author=_string(raw.get("author"), f"events[{i}].author"),
                    content=_content(raw.get("content"), f"events[{i}].content"),
                    invocation_id=_string(raw.get("invocation_id"), f"events[{i}].invocation_id"),
                )
            )
        return cls(events=events)


def _first_part(event: Event) -> Optional[ContentPart]:
    if event.content is None or not event.content.parts:
        return None
    return event.content.parts[0]


class EvaluationGenerator:
    """Produces the responses an evaluation scores."""

    def generate_responses(
        self,
        eval_dataset: list[list[Mapping[str, Any]]],
        root_agent: Any,
        repeat_num: int,
        agent_name: str,
        initial_session: Optional[Mapping[str, Any]],
    ) -> list[list[Mapping[str, Any]]]:
        """Return responses for the dataset; without an agent runner the input comes back."""
        print(
            "Note: GenerateResponses is implemented as a skeleton. "
            "The actual functionality requires integration with agent modules."
        )
        return eval_dataset

    def generate_responses_from_session(
        self, session_path: Union[str, os.PathLike], eval_dataset: Iterable[Iterable[Mapping[str, Any]]]
    ) -> list[list[EvaluationEntry]]:
        """Fill in responses and tool uses from a recorded session file."""
        try:
            with open(session_path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as exc:
            raise OSError(f"failed to read session file: {exc}") from exc
        try:
            session = Session.from_dict(json.loads(text))
        except ValueError as exc:
            raise ValueError(f"failed to parse session data: {exc}") from exc

        print(f"Loaded session: {session_path}")
        return [self.process_query_with_session(session, data) for data in eval_dataset]

    def process_query_with_session(
        self, session_data: Session, data: Iterable[Mapping[str, Any]]
    ) -> list[EvaluationEntry]:
        """Match each query to the session's user events and collect what followed.

        Returns new entries carrying the actual tool uses and the last
        non-user response of the matching invocations.
        """
        responses = [EvaluationEntry(entry) for entry in data]
        for index, entry in enumerate(responses):
            query = entry.get(QUERY)
            if not isinstance(query, str):
                raise ValueError(f"invalid query in entry {index}")

            tool_uses: list[ToolUse] = []
            response = ""
            for event in session_data.events:
                first = _first_part(event)
                if event.author != "user" or first is None or first.text != query:
                    continue
                for later in session_data.events:
                    if later.invocation_id != event.invocation_id:
                        continue
                    part = _first_part(later)
                    if part is None:
                        continue
                    if part.function_call is not None:
                        tool_uses.append(
                            ToolUse(
                                tool_name=part.function_call.name,
                                tool_input=part.function_call.args,
                            )
                        )
                    elif later.author != "user":
                        response = part.text

            entry[ACTUAL_TOOL_USE] = tool_uses
            entry[RESPONSE] = response
        return responses

    def _before_tool_callback(
        self, tool_name: str, args: Mapping[str, Any], eval_dataset: list[Mapping[str, Any]]
    ) -> Optional[dict[str, Any]]:
        """Return the mocked output for a matching expected call and drop its entry."""
        for index, entry in enumerate(eval_dataset):
            expected = entry.get(EXPECTED_TOOL_USE)
            if not isinstance(expected, list):
                continue
            for use in expected:
                if not isinstance(use, Mapping) or MOCK_TOOL_OUTPUT not in use:
                    continue
                if use.get(TOOL_NAME) != tool_name:
                    continue
                tool_input = use.get(TOOL_INPUT)
                if isinstance(tool_input, Mapping) and dict(tool_input) == dict(args):
                    del eval_dataset[index]
                    return {"result": use[MOCK_TOOL_OUTPUT]}
        return None

    def load_dataset(
        self, input_data: Union[str, os.PathLike, list[str]]
    ) -> list[list[EvaluationEntry]]:
        """Load conversations from a file, a directory of ``*.test.json`` files, or a list of files."""
        if isinstance(input_data, (str, os.PathLike)):
            path = os.fspath(input_data)
            try:
                is_dir = os.path.isdir(path)
                os.stat(path)
            except OSError as exc:
                raise OSError(f"invalid path {path}: {exc}") from exc
            files = self._find_test_files(path) if is_dir else [path]
        elif isinstance(input_data, list) and all(isinstance(p, str) for p in input_data):
            files = list(input_data)
        else:
            raise TypeError("unsupported input type for dataset loading")
        return [self._load_json_file(p) for p in files]

    def _find_test_files(self, directory: str) -> list[str]:
        found: list[str] = []
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise OSError(f"error walking directory {directory}: {exc}") from exc
        for entry in entries:
            if entry.is_dir():
                found.extend(self._find_test_files(entry.path))
            elif entry.name.endswith(".test.json"):
                found.append(entry.path)
        return found

    def _load_json_file(self, path: str) -> list[EvaluationEntry]:
        try:
            with open(path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as exc:
            raise OSError(f"failed to read file {path}: {exc}") from exc
        try:
            raw = json.loads(text)
        except ValueError as exc:
            raise ValueError(f"failed to parse JSON in file {path}: {exc}") from exc
        if raw is None:
            raw = []
        if not isinstance(raw, list) or not all(isinstance(e, dict) or e is None for e in raw):
            raise ValueError(f"failed to parse JSON in file {path}: expected an array of objects")
        conversation = [EvaluationEntry(e or {}) for e in raw]
        for index, entry in enumerate(conversation):
            if QUERY not in entry:
                raise ValueError(
                    f"entry {index} in file {path} is missing required 'query' field"
                )
        return conversation