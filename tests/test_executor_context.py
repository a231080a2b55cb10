import time

from adkflow.executor_base import File
from adkflow.executor_context import CodeExecutionResult, CodeExecutorContext


def test_new_context_is_stored_in_state():
    state = {}
    ctx = CodeExecutorContext(state)
    ctx.execution_id = "sess-1"
    assert state["_code_execution_context"]["execution_session_id"] == "sess-1"


def test_existing_context_is_reused():
    state = {"_code_execution_context": {"execution_session_id": "abc"}}
    assert CodeExecutorContext(state).execution_id == "abc"


def test_invalid_context_is_replaced():
    state = {"_code_execution_context": "junk"}
    ctx = CodeExecutorContext(state)
    assert ctx.execution_id == ""
    assert state["_code_execution_context"] == {}


def test_state_delta_is_a_copy():
    ctx = CodeExecutorContext({})
    ctx.execution_id = "first"
    delta = ctx.get_state_delta()
    ctx.execution_id = "second"
    assert delta["_code_execution_context"]["execution_session_id"] == "first"


def test_processed_file_names_accumulate():
    ctx = CodeExecutorContext({})
    assert ctx.processed_file_names == []
    ctx.add_processed_file_names(["a.csv"])
    ctx.add_processed_file_names(["b.csv", "c.csv"])
    assert ctx.processed_file_names == ["a.csv", "b.csv", "c.csv"]


def test_input_files_round_trip():
    state = {}
    ctx = CodeExecutorContext(state)
    files = [File(name="a.bin", content=bytes([0, 1, 255])), File(name="b.txt", content=b"hi")]
    ctx.add_input_files(files[:1])
    ctx.add_input_files(files[1:])
    assert ctx.input_files == files


def test_input_files_from_json_numbers():
    state = {"_code_executor_input_files": [{"Name": "x", "Content": [104.0, 105.0]}, "skip"]}
    ctx = CodeExecutorContext(state)
    assert ctx.input_files == [File(name="x", content=b"hi")]


def test_clear_input_files():
    state = {}
    ctx = CodeExecutorContext(state)
    ctx.add_input_files([File(name="f", content=b"1")])
    ctx.add_processed_file_names(["f"])
    ctx.clear_input_files()
    assert ctx.input_files == []
    assert ctx.processed_file_names == []
    assert state["_code_executor_input_files"] == []


def test_clear_without_processed_names_leaves_context_untouched():
    ctx = CodeExecutorContext({})
    ctx.clear_input_files()
    assert "processed_input_files" not in ctx.get_state_delta()["_code_execution_context"]


def test_error_count_increment_and_reset():
    ctx = CodeExecutorContext({})
    assert ctx.get_error_count("inv") == 0
    ctx.increment_error_count("inv")
    ctx.increment_error_count("inv")
    ctx.increment_error_count("other")
    assert ctx.get_error_count("inv") == 2
    assert ctx.get_error_count("other") == 1
    ctx.reset_error_count("inv")
    assert ctx.get_error_count("inv") == 0
    assert ctx.get_error_count("other") == 1


def test_error_count_ignores_malformed_state():
    state = {"_code_executor_error_counts": "bad"}
    ctx = CodeExecutorContext(state)
    assert ctx.get_error_count("inv") == 0
    ctx.reset_error_count("inv")
    assert state["_code_executor_error_counts"] == "bad"
    ctx.increment_error_count("inv")
    assert ctx.get_error_count("inv") == 1


def test_update_code_execution_result_appends():
    state = {}
    ctx = CodeExecutorContext(state)
    before = int(time.time())
    ctx.update_code_execution_result("inv", "print(1)", "1\n", "")
    ctx.update_code_execution_result("inv", "oops", "", "err")
    after = int(time.time())
    history = state["_code_execution_results"]["inv"]
    assert [h["code"] for h in history] == ["print(1)", "oops"]
    record = CodeExecutionResult(**history[1])
    assert record.result_stderr == "err"
    assert record.result_stdout == ""
    assert before <= record.timestamp <= after