"""Registry of loaded workflows and the process-wide registry instance."""

from __future__ import annotations

import threading
import uuid
from typing import Any, Optional


class Manager:
    """Thread-safe mapping from workflow name to its top-level agent."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._flows: dict[str, Any] = {}

    def register(self, name: str, agent: Any) -> None:
        """Add or replace a workflow."""
        with self._lock:
            self._flows[name] = agent

    def unregister(self, name: str) -> None:
        """Remove a workflow; unknown names are ignored."""
        with self._lock:
            self._flows.pop(name, None)

    def get(self, name: str) -> Optional[Any]:
        """Return the workflow's agent, or ``None`` if not loaded."""
        with self._lock:
            return self._flows.get(name)

    def list_names(self) -> list[str]:
        """Return the names of all loaded workflows."""
        with self._lock:
            return list(self._flows)


def trace_id() -> str:
    """Return a fresh random trace identifier."""
    return str(uuid.uuid4())


_global_lock = threading.Lock()
_global_manager: Optional[Manager] = None
_once_done = False


def get_global_manager() -> Optional[Manager]:
    """Return the process-wide manager, creating one on first use."""
    global _global_manager, _once_done
    with _global_lock:
        if not _once_done:
            _once_done = True
            if _global_manager is None:
                _global_manager = Manager()
        return _global_manager


def set_global_manager(manager: Optional[Manager]) -> None:
    """Install ``manager`` as the process-wide manager."""
    global _global_manager
    with _global_lock:
        _global_manager = manager