"""Executor that runs code on the local machine without any sandbox."""

from __future__ import annotations

import dataclasses
from typing import Iterable, Mapping, Optional

from .executor_base import (
    BaseCodeExecutor,
    CodeBlockDelimiter,
    CodeExecConfig,
    CodeExecutionInput,
    ExecutionResult,
    ExecutionResultDelimiter,
    InvocationContext,
    default_code_exec_config,
)
from .local_executors import JavaScriptExecutor, LocalExecutor, PythonExecutor

_EXECUTORS: dict[str, type[LocalExecutor]] = {
    "python": PythonExecutor,
    "javascript": JavaScriptExecutor,
}

_FENCE_LANGUAGES = {
    "python\n": "python",
    "javascript\n": "javascript",
    "js\n": "javascript",
    "tool_code\n": "python",
}


def _detect_language(delimiters: Iterable[CodeBlockDelimiter]) -> str:
    for delimiter in delimiters:
        if len(delimiter.start) >= 4 and delimiter.start.startswith("```"):
            language = _FENCE_LANGUAGES.get(delimiter.start[3:])
            if language is not None:
                return language
    return "unknown"


class UnsafeLocalCodeExecutor(BaseCodeExecutor):
    """Runs code with a local interpreter; only for trusted code.

    The language comes from the first code block delimiter whose fence names
    one (``tool_code`` counts as Python).
    """

    def __init__(
        self,
        config: Optional[CodeExecConfig] = None,
        *,
        code_block_delimiters: Optional[Iterable[CodeBlockDelimiter]] = None,
        execution_result_delimiter: Optional[ExecutionResultDelimiter] = None,
        error_retry_attempts: Optional[int] = None,
        commands: Optional[Mapping[str, str]] = None,
    ) -> None:
        cfg = dataclasses.replace(config) if config is not None else default_code_exec_config()
        if code_block_delimiters is not None:
            cfg.code_block_delimiters = list(code_block_delimiters)
        if execution_result_delimiter is not None:
            cfg.execution_result_delimiter = execution_result_delimiter
        if error_retry_attempts is not None:
            cfg.error_retry_attempts = error_retry_attempts
        if cfg.stateful:
            raise ValueError("cannot set stateful=True in UnsafeLocalCodeExecutor")
        if cfg.optimize_data_file:
            raise ValueError("cannot set optimize_data_file=True in UnsafeLocalCodeExecutor")
        super().__init__(cfg)
        self._commands = dict(commands or {})

    def execute_code(
        self, invocation_context: InvocationContext, code_input: CodeExecutionInput
    ) -> ExecutionResult:
        """Run the code with the interpreter for the detected language."""
        language = _detect_language(self.config.code_block_delimiters)
        executor_cls = _EXECUTORS.get(language)
        if executor_cls is None:
            raise ValueError(
                f"unsupported language detected for UnsafeLocalCodeExecutor: {language}"
            )
        with executor_cls(command=self._commands.get(language)) as executor:
            return executor.execute(code_input.code, code_input.input_files)

    def cleanup(self) -> None:
        """Nothing to release; each run cleans up its own directory."""