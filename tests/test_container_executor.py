import pytest

from adkflow.container_executor import DEFAULT_IMAGE_TAG, ContainerCodeExecutor
from adkflow.event_bus import EventType
from adkflow.executor_base import CodeExecConfig, CodeExecutionInput, InvocationContext


class Recorder:
    def __init__(self):
        self.events = []

    def publish(self, event_type, payload):
        self.events.append((event_type, payload))


def test_default_image_and_name_prefix():
    executor = ContainerCodeExecutor()
    assert executor.image == DEFAULT_IMAGE_TAG
    assert executor.container_name.startswith("adk-code-executor-")


def test_requires_image_or_docker_path():
    with pytest.raises(ValueError, match="either image or docker_path"):
        ContainerCodeExecutor(image="", docker_path="")


def test_docker_path_alone_is_enough():
    executor = ContainerCodeExecutor(image="", docker_path="./docker")
    assert executor.docker_path == "./docker"


def test_rejects_stateful():
    with pytest.raises(ValueError, match="stateful"):
        ContainerCodeExecutor(CodeExecConfig(stateful=True))


def test_rejects_optimize_data_file():
    with pytest.raises(ValueError, match="optimize_data_file"):
        ContainerCodeExecutor(CodeExecConfig(optimize_data_file=True))


def test_execute_echoes_code():
    executor = ContainerCodeExecutor(container_name="box")
    result = executor.execute_code(InvocationContext(), CodeExecutionInput(code="print(1)"))
    assert result.stdout == "Executed in container box:\nprint(1)"
    assert result.stderr == ""
    assert result.output_files == []
    assert executor.initialized is True


def test_error_in_code_is_case_insensitive():
    executor = ContainerCodeExecutor()
    result = executor.execute_code(InvocationContext(), CodeExecutionInput(code="raise ERROR"))
    assert result.stdout == ""
    assert result.stderr == "Error executing code in container"


def test_events_are_published_in_order():
    recorder = Recorder()
    executor = ContainerCodeExecutor()
    result = executor.execute_code(
        InvocationContext(events=recorder), CodeExecutionInput(code="x = 1")
    )
    assert [e[0] for e in recorder.events] == [
        EventType.TOOL_CALLED,
        EventType.TOOL_RESULT_RECEIVED,
    ]
    assert recorder.events[0][1] == {"tool": "container_executor", "code": "x = 1"}
    assert recorder.events[1][1]["result"] is result


def test_cleanup_resets_initialization():
    with ContainerCodeExecutor() as executor:
        executor.execute_code(InvocationContext(), CodeExecutionInput(code="pass"))
        assert executor.initialized is True
    assert executor.initialized is False


def test_config_is_copied():
    config = CodeExecConfig(error_retry_attempts=5)
    executor = ContainerCodeExecutor(config)
    assert executor.config.error_retry_attempts == 5
    assert executor.config is not config