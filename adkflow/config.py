"""Global YAML configuration file loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

DEFAULT_CONFIG_PATH = "./config.yaml"
DEFAULT_PLUGIN_DIR = "./plugins"
DEFAULT_LOG_LEVEL = "info"


@dataclass
class EndpointConfig:
    """One API endpoint of a model pool."""

    url: str = ""
    api_key: str = ""


@dataclass
class ModelPoolConfig:
    """A pool of endpoints serving one base model family."""

    base: str = ""
    endpoints: list[EndpointConfig] = field(default_factory=list)


@dataclass
class DBConfig:
    """Database connection settings."""

    dsn: str = ""


@dataclass
class QueueSettings:
    """Message queue settings."""

    impl: str = ""
    addr: str = ""
    stream: str = ""


@dataclass
class Config:
    """Top-level application configuration."""

    plugin_dir: str = ""
    default_flow: str = ""
    log_level: str = ""
    log_dev: bool = False
    db: DBConfig = field(default_factory=DBConfig)
    queue: QueueSettings = field(default_factory=QueueSettings)
    model_api_pools: dict[str, ModelPoolConfig] = field(default_factory=dict)


def _mapping(value: Any, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _sequence(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a sequence, got {type(value).__name__}")
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flag(value: Any, where: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{where}: expected a boolean, got {value!r}")
    return value


def _pool(name: str, raw: Any) -> ModelPoolConfig:
    data = _mapping(raw, f"model_api_pools.{name}")
    endpoints = [
        EndpointConfig(url=_text(ep.get("url")), api_key=_text(ep.get("apikey")))
        for ep in (
            _mapping(item, f"model_api_pools.{name}.endpoints")
            for item in _sequence(data.get("endpoints"), f"model_api_pools.{name}.endpoints")
        )
    ]
    return ModelPoolConfig(base=_text(data.get("base")), endpoints=endpoints)


def load(path: Optional[str] = None) -> Config:
    """Read configuration from ``path`` (default ``./config.yaml``) and fill defaults."""
    path = path or DEFAULT_CONFIG_PATH
    with open(path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    data = _mapping(raw, "config")

    db = _mapping(data.get("db"), "db")
    queue = _mapping(data.get("queue"), "queue")
    pools = _mapping(data.get("model_api_pools"), "model_api_pools")

    cfg = Config(
        plugin_dir=_text(data.get("plugin_dir")),
        default_flow=_text(data.get("default_flow")),
        log_level=_text(data.get("log_level")),
        log_dev=_flag(data.get("log_dev"), "log_dev"),
        db=DBConfig(dsn=_text(db.get("dsn"))),
        queue=QueueSettings(
            impl=_text(queue.get("impl")),
            addr=_text(queue.get("addr")),
            stream=_text(queue.get("stream")),
        ),
        model_api_pools={str(name): _pool(str(name), pool) for name, pool in pools.items()},
    )
    if not cfg.plugin_dir:
        cfg.plugin_dir = DEFAULT_PLUGIN_DIR
    if not cfg.log_level:
        cfg.log_level = DEFAULT_LOG_LEVEL
    return cfg