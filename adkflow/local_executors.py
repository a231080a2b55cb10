"""Executors that run code in a local interpreter inside a scratch directory."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from . import event_bus
from .event_bus import EventType
from .executor_base import ExecutionResult, File

TEMP_DIR_PREFIX = "adk-code-executor-"


def _exit_description(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status {returncode}"


class LocalExecutor:
    """Runs a script with a local interpreter in a private temporary directory.

    Subclasses set the interpreter command, the script file name and the
    names used in events and error messages.
    """

    script_name = ""
    default_command = ""
    tool_name = ""
    language_label = ""
    runtime_label = ""

    def __init__(self, command: Optional[str] = None) -> None:
        self.command = command or self.default_command
        if not self.command or not self.script_name:
            raise TypeError(f"{type(self).__name__} has no interpreter configured")
        try:
            self.temp_dir = tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX)
        except OSError as exc:
            raise OSError(f"failed to create temporary directory: {exc}") from exc

    def __enter__(self) -> "LocalExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the temporary directory and everything in it."""
        if self.temp_dir and os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def save_file(self, file: File) -> str:
        """Write ``file`` under the temporary directory and return its path."""
        path = os.path.join(self.temp_dir, file.name)
        directory = os.path.dirname(path)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise OSError(f"failed to create directory {directory}: {exc}") from exc
        try:
            Path(path).write_bytes(bytes(file.content))
        except OSError as exc:
            raise OSError(f"failed to write file {path}: {exc}") from exc
        return path

    def execute(self, code: str, files: Iterable[File] = ()) -> ExecutionResult:
        """Run ``code`` with the given input files and return its output.

        A non-zero exit is reported as a tool error event but still yields a
        result; failing to start the interpreter raises ``RuntimeError``.
        """
        script_path = os.path.join(self.temp_dir, self.script_name)
        try:
            Path(script_path).write_bytes(code.encode("utf-8"))
        except OSError as exc:
            raise OSError(f"failed to write {self.language_label} script: {exc}") from exc

        for file in files:
            self.save_file(file)

        event_bus.publish(EventType.TOOL_CALLED, {"tool": self.tool_name, "code": code})

        try:
            proc = subprocess.run(
                [self.command, script_path],
                cwd=self.temp_dir,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            event_bus.publish(EventType.TOOL_ERROR, {"tool": self.tool_name, "error": str(exc)})
            raise RuntimeError(f"failed to start {self.runtime_label} process: {exc}") from exc

        stdout = proc.stdout.decode("utf-8", errors="replace")
        stderr = proc.stderr.decode("utf-8", errors="replace")

        if proc.returncode != 0:
            event_bus.publish(
                EventType.TOOL_ERROR,
                {
                    "tool": self.tool_name,
                    "error": _exit_description(proc.returncode),
                    "stdout": stdout,
                    "stderr": stderr,
                },
            )

        try:
            output_files = list(self._walk(self.temp_dir))
        except OSError as exc:
            raise OSError(f"failed to collect output files: {exc}") from exc

        result = ExecutionResult(stdout=stdout, stderr=stderr, output_files=output_files)
        event_bus.publish(EventType.TOOL_RESULT_RECEIVED, {"tool": self.tool_name, "result": result})
        return result

    def _walk(self, directory: str) -> Iterator[File]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk(entry.path)
            elif entry.name != self.script_name:
                yield File(
                    name=os.path.relpath(entry.path, self.temp_dir),
                    content=Path(entry.path).read_bytes(),
                )


class PythonExecutor(LocalExecutor):
    """Runs Python code with ``python3``."""

    script_name = "script.py"
    default_command = "python3"
    tool_name = "python_executor"
    language_label = "Python"
    runtime_label = "Python"


class JavaScriptExecutor(LocalExecutor):
    """Runs JavaScript code with Node.js."""

    script_name = "script.js"
    default_command = "node"
    tool_name = "javascript_executor"
    language_label = "JavaScript"
    runtime_label = "Node.js"


def new_code_executor(language: str) -> LocalExecutor:
    """Create an executor for ``language`` (python/py or javascript/js)."""
    language = language.lower()
    if language in ("python", "py"):
        return PythonExecutor()
    if language in ("javascript", "js"):
        return JavaScriptExecutor()
    raise ValueError(f"unsupported language: {language}")