"""Simplified container API option types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Optional


@dataclass
class ExecConfig:
    """Configuration for running a command in a running container."""

    user: str = ""
    privileged: bool = False
    tty: bool = False
    attach_stdin: bool = False
    attach_stdout: bool = False
    attach_stderr: bool = False
    detach_keys: str = ""
    env: list[str] = field(default_factory=list)
    working_dir: str = ""
    cmd: list[str] = field(default_factory=list)


@dataclass
class ExecStartCheck:
    """Options for starting an exec command."""

    detach: bool = False
    tty: bool = False


@dataclass
class ContainerStartOptions:
    """Options for starting a container."""

    checkpoint_id: str = ""
    checkpoint_dir: str = ""


@dataclass
class ContainerRemoveOptions:
    """Options for removing a container."""

    remove_volumes: bool = False
    remove_links: bool = False
    force: bool = False


@dataclass
class HijackedResponse:
    """A connection taken over for raw streaming, with its reader."""

    conn: Optional[Any] = None
    reader: Optional[BinaryIO] = None