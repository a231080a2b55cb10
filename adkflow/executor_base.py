"""Core data types and the abstract interface shared by code executors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable


@dataclass
class File:
    """A named file with raw byte content."""

    name: str
    content: bytes = b""


@dataclass
class ExecutionResult:
    """Output of one code execution."""

    stdout: str = ""
    stderr: str = ""
    output_files: list[File] = field(default_factory=list)


@dataclass(frozen=True)
class CodeBlockDelimiter:
    """Start and end markers around a code block."""

    start: str
    end: str


@dataclass(frozen=True)
class ExecutionResultDelimiter:
    """Start and end markers around an execution result."""

    start: str
    end: str


@dataclass
class CodeExecutionInput:
    """Code to run and the files it receives."""

    code: str
    input_files: list[File] = field(default_factory=list)


def _default_code_block_delimiters() -> list[CodeBlockDelimiter]:
    return [
        CodeBlockDelimiter(start="```tool_code\n", end="\n```"),
        CodeBlockDelimiter(start="```python\n", end="\n```"),
    ]


def _default_execution_result_delimiter() -> ExecutionResultDelimiter:
    return ExecutionResultDelimiter(start="```tool_output\n", end="\n```")


@dataclass
class CodeExecConfig:
    """Settings that govern how an executor finds and reports code."""

    optimize_data_file: bool = False
    stateful: bool = False
    error_retry_attempts: int = 2
    code_block_delimiters: list[CodeBlockDelimiter] = field(
        default_factory=_default_code_block_delimiters
    )
    execution_result_delimiter: ExecutionResultDelimiter = field(
        default_factory=_default_execution_result_delimiter
    )


def default_code_exec_config() -> CodeExecConfig:
    """Return a fresh configuration holding the default settings."""
    return CodeExecConfig()


@runtime_checkable
class EventPublisher(Protocol):
    """Anything that can receive published tool events."""

    def publish(self, event_type: Any, payload: Any) -> None:
        """Deliver one event with its payload."""
        ...


@dataclass
class InvocationContext:
    """Per-invocation information handed to an executor."""

    invocation_id: str = ""
    context: Any = None
    events: Optional[EventPublisher] = None


class BaseCodeExecutor(ABC):
    """Interface for executors that run code and report the result."""

    def __init__(self, config: Optional[CodeExecConfig] = None) -> None:
        self.config = config if config is not None else default_code_exec_config()

    @abstractmethod
    def execute_code(
        self, invocation_context: InvocationContext, code_input: CodeExecutionInput
    ) -> ExecutionResult:
        """Run ``code_input`` and return what it produced."""

    def cleanup(self) -> None:
        """Release resources held by the executor; the base holds none."""

    def __enter__(self) -> "BaseCodeExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup()