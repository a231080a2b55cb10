import sys

import pytest

from adkflow.executor_base import (
    CodeBlockDelimiter,
    CodeExecConfig,
    CodeExecutionInput,
    ExecutionResultDelimiter,
    File,
    InvocationContext,
)
from adkflow.unsafe_local import UnsafeLocalCodeExecutor


def test_default_config():
    executor = UnsafeLocalCodeExecutor()
    assert executor.config.error_retry_attempts == 2
    assert executor.config.code_block_delimiters[0] == CodeBlockDelimiter("```tool_code\n", "\n```")
    assert executor.config.stateful is False
    assert executor.config.optimize_data_file is False


def test_options_override_config():
    delims = [CodeBlockDelimiter("```js\n", "\n```")]
    result_delim = ExecutionResultDelimiter("<<", ">>")
    executor = UnsafeLocalCodeExecutor(
        code_block_delimiters=delims,
        execution_result_delimiter=result_delim,
        error_retry_attempts=5,
    )
    assert executor.config.code_block_delimiters == delims
    assert executor.config.execution_result_delimiter == result_delim
    assert executor.config.error_retry_attempts == 5


def test_stateful_rejected():
    with pytest.raises(ValueError, match="stateful"):
        UnsafeLocalCodeExecutor(CodeExecConfig(stateful=True))


def test_optimize_data_file_rejected():
    with pytest.raises(ValueError, match="optimize_data_file"):
        UnsafeLocalCodeExecutor(CodeExecConfig(optimize_data_file=True))


def test_given_config_not_mutated():
    config = CodeExecConfig()
    UnsafeLocalCodeExecutor(config, error_retry_attempts=7)
    assert config.error_retry_attempts == 2


def test_unknown_language_raises():
    executor = UnsafeLocalCodeExecutor(
        code_block_delimiters=[CodeBlockDelimiter("```ruby\n", "\n```")]
    )
    with pytest.raises(
        ValueError, match="unsupported language detected for UnsafeLocalCodeExecutor: unknown"
    ):
        executor.execute_code(InvocationContext(), CodeExecutionInput(code="puts 1"))


def test_tool_code_runs_as_python():
    executor = UnsafeLocalCodeExecutor(commands={"python": sys.executable})
    result = executor.execute_code(
        InvocationContext(invocation_id="inv"), CodeExecutionInput(code="print(6 * 7)")
    )
    assert result.stdout.strip() == "42"
    assert result.stderr == ""
    assert result.output_files == []


def test_input_files_are_available_and_returned():
    executor = UnsafeLocalCodeExecutor(commands={"python": sys.executable})
    code_input = CodeExecutionInput(
        code="print(open('data.txt').read())",
        input_files=[File(name="data.txt", content=b"payload")],
    )
    result = executor.execute_code(InvocationContext(), code_input)
    assert result.stdout.strip() == "payload"
    assert [(f.name, f.content) for f in result.output_files] == [("data.txt", b"payload")]


def test_js_delimiter_selects_javascript_runner():
    executor = UnsafeLocalCodeExecutor(
        code_block_delimiters=[CodeBlockDelimiter("```js\n", "\n```")],
        commands={"javascript": sys.executable, "python": "no-such-python"},
    )
    result = executor.execute_code(InvocationContext(), CodeExecutionInput(code="print('ran')"))
    assert result.stdout.strip() == "ran"
    assert result.output_files == []


def test_first_matching_delimiter_wins():
    executor = UnsafeLocalCodeExecutor(
        code_block_delimiters=[
            CodeBlockDelimiter("```ruby\n", "\n```"),
            CodeBlockDelimiter("```python\n", "\n```"),
            CodeBlockDelimiter("```js\n", "\n```"),
        ],
        commands={"python": sys.executable, "javascript": "no-such-node"},
    )
    result = executor.execute_code(InvocationContext(), CodeExecutionInput(code="print('py')"))
    assert result.stdout.strip() == "py"