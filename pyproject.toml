[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "adkflow"
version = "0.1.0"
description = "Agent workflow toolkit: event bus, flow management, code executors and agent evaluation"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["agents", "llm", "evaluation", "code-execution", "workflow"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["adkflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
