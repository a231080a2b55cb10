"""Agent workflow toolkit: events, flow management, code executors and evaluation."""

__version__ = "0.1.0"