"""Code executor state kept inside a session's state mapping."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Iterable, MutableMapping

from .executor_base import File

CONTEXT_KEY = "_code_execution_context"
SESSION_ID_KEY = "execution_session_id"
PROCESSED_FILE_NAMES_KEY = "processed_input_files"
INPUT_FILE_KEY = "_code_executor_input_files"
ERROR_COUNT_KEY = "_code_executor_error_counts"
CODE_EXECUTION_RESULTS_KEY = "_code_execution_results"


@dataclass
class CodeExecutionResult:
    """One recorded code execution."""

    code: str
    result_stdout: str
    result_stderr: str
    timestamp: int


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _decode_content(raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if not isinstance(raw, list):
        return b""
    return bytes(int(b) & 0xFF if _is_number(b) else 0 for b in raw)


class CodeExecutorContext:
    """Reads and writes code executor state in a session state mapping."""

    def __init__(self, session_state: MutableMapping[str, Any]) -> None:
        self._state = session_state
        context = session_state.get(CONTEXT_KEY)
        if not isinstance(context, dict):
            context = {}
            session_state[CONTEXT_KEY] = context
        self._context: dict[str, Any] = context

    def get_state_delta(self) -> dict[str, Any]:
        """Return a copy of the executor context to persist in session state."""
        return {CONTEXT_KEY: dict(self._context)}

    @property
    def execution_id(self) -> str:
        """Session id used by the executor, or ``""`` if unset."""
        value = self._context.get(SESSION_ID_KEY)
        return value if isinstance(value, str) else ""

    @execution_id.setter
    def execution_id(self, session_id: str) -> None:
        self._context[SESSION_ID_KEY] = session_id

    @property
    def processed_file_names(self) -> list[str]:
        """Names of input files already handed to the executor."""
        value = self._context.get(PROCESSED_FILE_NAMES_KEY)
        if not isinstance(value, list):
            return []
        return [name if isinstance(name, str) else "" for name in value]

    def add_processed_file_names(self, file_names: Iterable[str]) -> None:
        """Append names to the processed file list."""
        self._context[PROCESSED_FILE_NAMES_KEY] = self.processed_file_names + list(file_names)

    @property
    def input_files(self) -> list[File]:
        """Input files stored in the session state."""
        value = self._state.get(INPUT_FILE_KEY)
        if not isinstance(value, list):
            return []
        return [
            File(
                name=item.get("Name") if isinstance(item.get("Name"), str) else "",
                content=_decode_content(item.get("Content")),
            )
            for item in value
            if isinstance(item, dict)
        ]

    def add_input_files(self, input_files: Iterable[File]) -> None:
        """Append files to the session's input files."""
        existing = self._state.get(INPUT_FILE_KEY)
        files = list(existing) if isinstance(existing, list) else []
        files.extend({"Name": f.name, "Content": list(f.content)} for f in input_files)
        self._state[INPUT_FILE_KEY] = files

    def clear_input_files(self) -> None:
        """Drop all input files and forget the processed file names."""
        self._state[INPUT_FILE_KEY] = []
        if PROCESSED_FILE_NAMES_KEY in self._context:
            self._context[PROCESSED_FILE_NAMES_KEY] = []

    def _error_counts(self) -> dict[str, Any]:
        value = self._state.get(ERROR_COUNT_KEY)
        return value if isinstance(value, dict) else {}

    def get_error_count(self, invocation_id: str) -> int:
        """Number of errors recorded for an invocation."""
        count = self._error_counts().get(invocation_id)
        return int(count) if _is_number(count) else 0

    def increment_error_count(self, invocation_id: str) -> None:
        """Record one more error for an invocation."""
        counts = dict(self._error_counts())
        counts[invocation_id] = self.get_error_count(invocation_id) + 1
        self._state[ERROR_COUNT_KEY] = counts

    def reset_error_count(self, invocation_id: str) -> None:
        """Forget the errors recorded for an invocation."""
        value = self._state.get(ERROR_COUNT_KEY)
        if not isinstance(value, dict):
            return
        value.pop(invocation_id, None)
        self._state[ERROR_COUNT_KEY] = value

    def update_code_execution_result(
        self, invocation_id: str, code: str, result_stdout: str, result_stderr: str
    ) -> None:
        """Append an execution record to the invocation's history."""
        value = self._state.get(CODE_EXECUTION_RESULTS_KEY)
        results = value if isinstance(value, dict) else {}
        history = results.get(invocation_id)
        history = list(history) if isinstance(history, list) else []
        record = CodeExecutionResult(
            code=code,
            result_stdout=result_stdout,
            result_stderr=result_stderr,
            timestamp=int(time.time()),
        )
        history.append(asdict(record))
        results[invocation_id] = history
        self._state[CODE_EXECUTION_RESULTS_KEY] = results