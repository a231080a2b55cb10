"""Executor that runs code inside a container."""

from __future__ import annotations

import dataclasses
import time
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

DEFAULT_IMAGE_TAG = "adk-code-executor:latest"
TOOL_NAME = "container_executor"


class ContainerCodeExecutor(BaseCodeExecutor):
    """Runs code in a container built from an image or a Dockerfile path.

    The container backend is simulated: the code is echoed back as output,
    and code mentioning "error" (in any case) yields an error result.
    """

    def __init__(
        self,
        config: Optional[CodeExecConfig] = None,
        *,
        image: str = DEFAULT_IMAGE_TAG,
        docker_path: str = "",
        container_name: Optional[str] = None,
    ) -> None:
        cfg = dataclasses.replace(config) if config is not None else default_code_exec_config()
        if not image and not docker_path:
            raise ValueError("either image or docker_path must be set for ContainerCodeExecutor")
        if cfg.stateful:
            raise ValueError("cannot set stateful=True in ContainerCodeExecutor")
        if cfg.optimize_data_file:
            raise ValueError("cannot set optimize_data_file=True in ContainerCodeExecutor")
        super().__init__(cfg)
        self.image = image
        self.docker_path = docker_path
        self.container_name = container_name or f"adk-code-executor-{int(time.time())}"
        self.initialized = False

    def _publish(self, invocation_context: InvocationContext, event_type: EventType, payload: Any) -> None:
        if invocation_context.events is not None:
            invocation_context.events.publish(event_type, payload)

    def _initialize(self) -> None:
        self.initialized = True

    def execute_code(
        self, invocation_context: InvocationContext, code_input: CodeExecutionInput
    ) -> ExecutionResult:
        """Run the code in the container and return its output."""
        self._publish(
            invocation_context, EventType.TOOL_CALLED, {"tool": TOOL_NAME, "code": code_input.code}
        )
        if not self.initialized:
            try:
                self._initialize()
            except Exception as exc:
                self._publish(
                    invocation_context, EventType.TOOL_ERROR, {"tool": TOOL_NAME, "error": str(exc)}
                )
                raise RuntimeError(f"failed to initialize container: {exc}") from exc

        stdout = f"Executed in container {self.container_name}:\n{code_input.code}"
        stderr = ""
        if "error" in code_input.code.lower():
            stderr = "Error executing code in container"
            stdout = ""

        result = ExecutionResult(stdout=stdout, stderr=stderr, output_files=[])
        self._publish(
            invocation_context, EventType.TOOL_RESULT_RECEIVED, {"tool": TOOL_NAME, "result": result}
        )
        return result

    def cleanup(self) -> None:
        """Stop the container; the next run starts it again."""
        self.initialized = False