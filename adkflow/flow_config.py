"""Workflow configuration structures mapped from ``<flow_name>.json``."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

AGENT_TYPES = ("sequential", "parallel", "leaf")


@dataclass
class QueueConfig:
    """Message queue settings (Redis, NATS, ...)."""

    impl: str = ""
    stream: str = ""
    max_len: int = 0


@dataclass
class PreGenerateConfig:
    """Pre-generation stage settings."""

    enabled: bool = False
    agent: str = ""
    timeout_ms: int = 0


@dataclass
class AgentConfig:
    """One agent node; containers describe their children in ``sub_agents``."""

    id: str = ""
    type: str = ""
    model: str = ""
    instruction: str = ""
    description: str = ""
    workers: int = 0
    stream_output: bool = False
    params: dict[str, Any] = field(default_factory=dict)
    sub_agents: list["AgentConfig"] = field(default_factory=list)


@dataclass
class RouteConfig:
    """Maps an HTTP/gRPC path to an agent."""

    path: str = ""
    agent: str = ""


@dataclass
class StorageConfig:
    """Persistent storage connection."""

    dsn: str = ""


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _items(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected an array, got {type(value).__name__}")
    return value


def _agent_from_dict(raw: Any, where: str) -> AgentConfig:
    data = _mapping(raw, where)
    return AgentConfig(
        id=str(data.get("id", "")),
        type=str(data.get("type", "")),
        model=str(data.get("model", "")),
        instruction=str(data.get("instruction", "")),
        description=str(data.get("description", "")),
        workers=int(data.get("workers", 0)),
        stream_output=bool(data.get("stream_output", False)),
        params=dict(_mapping(data.get("params"), f"{where}.params")),
        sub_agents=[
            _agent_from_dict(sub, f"{where}.sub_agents[{i}]")
            for i, sub in enumerate(_items(data.get("sub_agents"), f"{where}.sub_agents"))
        ],
    )


def _check_agent(agent: AgentConfig, where: str) -> None:
    if not agent.id:
        raise ValueError(f"{where}.id is required")
    if not agent.type:
        raise ValueError(f"{where}.type is required")
    if agent.type not in AGENT_TYPES:
        raise ValueError(f"{where}.type must be one of {', '.join(AGENT_TYPES)}, got {agent.type!r}")
    for i, sub in enumerate(agent.sub_agents):
        _check_agent(sub, f"{where}.sub_agents[{i}]")


@dataclass
class FlowConfig:
    """A complete workflow configuration."""

    name: str = ""
    queue: QueueConfig = field(default_factory=QueueConfig)
    pre_generate: PreGenerateConfig = field(default_factory=PreGenerateConfig)
    agents: list[AgentConfig] = field(default_factory=list)
    routes: list[RouteConfig] = field(default_factory=list)
    storage: StorageConfig = field(default_factory=StorageConfig)
    version: str = ""
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlowConfig":
        """Build a configuration from decoded JSON."""
        data = _mapping(data, "flow")
        queue = _mapping(data.get("queue"), "queue")
        pre = _mapping(data.get("pre_generate"), "pre_generate")
        storage = _mapping(data.get("storage"), "storage")
        return cls(
            name=str(data.get("name", "")),
            queue=QueueConfig(
                impl=str(queue.get("impl", "")),
                stream=str(queue.get("stream", "")),
                max_len=int(queue.get("max_len", 0)),
            ),
            pre_generate=PreGenerateConfig(
                enabled=bool(pre.get("enabled", False)),
                agent=str(pre.get("agent", "")),
                timeout_ms=int(pre.get("timeout_ms", 0)),
            ),
            agents=[
                _agent_from_dict(raw, f"agents[{i}]")
                for i, raw in enumerate(_items(data.get("agents"), "agents"))
            ],
            routes=[
                RouteConfig(path=str(route.get("path", "")), agent=str(route.get("agent", "")))
                for route in (
                    _mapping(raw, "routes") for raw in _items(data.get("routes"), "routes")
                )
            ],
            storage=StorageConfig(dsn=str(storage.get("dsn", ""))),
            version=str(data.get("version", "")),
        )

    def validate(self) -> None:
        """Raise ``ValueError`` if a required field is missing or invalid."""
        if not self.name:
            raise ValueError("name is required")
        if not self.queue.impl:
            raise ValueError("queue.impl is required")
        if not self.agents:
            raise ValueError("agents must contain at least one agent")
        for i, agent in enumerate(self.agents):
            _check_agent(agent, f"agents[{i}]")
        if not self.routes:
            raise ValueError("routes must contain at least one route")
        for i, route in enumerate(self.routes):
            if not route.path:
                raise ValueError(f"routes[{i}].path is required")
            if not route.agent:
                raise ValueError(f"routes[{i}].agent is required")
        if not self.storage.dsn:
            raise ValueError("storage.dsn is required")