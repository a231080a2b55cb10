"""Executor that hands code to a hosted code execution service."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

from .event_bus import EventType
from .executor_base import (
    BaseCodeExecutor,
    CodeExecConfig,
    CodeExecutionInput,
    ExecutionResult,
    InvocationContext,
    default_code_exec_config,
)

TOOL_NAME = "vertex_ai_code_executor"


class VertexAICodeExecutor(BaseCodeExecutor):
    """Runs code through the hosted service.

    The service is simulated: code is reported as executed, and code
    containing "error" raises ``RuntimeError``.
    """

    def __init__(self, config: Optional[CodeExecConfig] = None) -> None:
        cfg = dataclasses.replace(config) if config is not None else default_code_exec_config()
        super().__init__(cfg)

    def _publish(self, invocation_context: InvocationContext, event_type: EventType, payload: Any) -> None:
        if invocation_context.events is not None:
            invocation_context.events.publish(event_type, payload)

    def execute_code(
        self, invocation_context: InvocationContext, code_input: CodeExecutionInput
    ) -> ExecutionResult:
        """Run the code and return the service's output."""
        self._publish(
            invocation_context, EventType.TOOL_CALLED, {"tool": TOOL_NAME, "code": code_input.code}
        )
        if "error" in code_input.code:
            message = "error executing code in Vertex AI"
            self._publish(
                invocation_context, EventType.TOOL_ERROR, {"tool": TOOL_NAME, "error": message}
            )
            raise RuntimeError(message)

        result = ExecutionResult(
            stdout=(
                f"[Vertex AI] Executed:\n{code_input.code}\n"
                "Output: Code executed successfully in Vertex AI"
            ),
            stderr="",
            output_files=[],
        )
        self._publish(
            invocation_context, EventType.TOOL_RESULT_RECEIVED, {"tool": TOOL_NAME, "result": result}
        )
        return result

    def cleanup(self) -> None:
        """Nothing to release."""