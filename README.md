# adkflow

Building blocks for agent workflows:

- **Event bus**: publish and subscribe to tool events (`adkflow.event_bus`).
- **Event actions**: state, artifact and auth deltas that merge together (`adkflow.event_actions`).
- **Configuration**: YAML application settings (`adkflow.config`) and flow definitions (`adkflow.flow_config`).
- **Flow manager**: a registry of named workflows with a process-wide instance (`adkflow.flow_manager`).
- **Code executors**: run Python or JavaScript snippets in a scratch directory (`adkflow.local_executors`, `adkflow.unsafe_local`), plus simulated container and Vertex AI executors (`adkflow.container_executor`, `adkflow.vertex_executor`).
- **Code helpers**: extract fenced code blocks from model output and format execution results (`adkflow.code_utils`), and keep executor state in a session (`adkflow.executor_context`).
- **Evaluation**: load `.test.json` datasets, score tool-use trajectories and response overlap, and check them against thresholds (`adkflow.generator`, `adkflow.trajectory`, `adkflow.response`, `adkflow.agent_evaluator`).

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Subscribe to tool events:

```python
from adkflow.event_bus import EventType, subscribe, publish

def on_call(event_type, data):
    print(event_type, data["tool"])

subscribe(EventType.TOOL_CALLED, on_call)
publish(EventType.TOOL_CALLED, {"tool": "python_executor"})
```

Extract the first code block from a model reply:

```python
from adkflow.code_utils import extract_code_and_truncate_content
from adkflow.executor_base import default_code_exec_config

config = default_code_exec_config()
code = extract_code_and_truncate_content(
    "Here you go:\n```python\nprint(1)\n```\n",
    config.code_block_delimiters,
)
```

Run a snippet with a local interpreter (requires `python3` on the path):

```python
from adkflow.local_executors import new_code_executor

executor = new_code_executor("python")
try:
    result = executor.execute("print('hello')", [])
    print(result.stdout)
finally:
    executor.cleanup()
```

Evaluate an agent against a directory of `.test.json` files. A `test_config.json`
next to a test file may set the `criteria` thresholds; otherwise the defaults apply.

```python
from adkflow.agent_evaluator import AgentEvaluator, EvaluationError

evaluator = AgentEvaluator()
try:
    evaluator.evaluate(my_agent, "eval_data/", 2, "my_agent", "")
except EvaluationError as exc:
    print("evaluation failed:", exc)
```

Load application settings (defaults to `./config.yaml`):

```python
from adkflow.config import load

cfg = load("config.yaml")
print(cfg.plugin_dir, cfg.log_level)
```

Pull the JSON object out of a chatty model reply:

```python
from adkflow.text_utils import extract_json_from_response

extract_json_from_response('note {"segments": []} end')  # '{"segments": []}'
```