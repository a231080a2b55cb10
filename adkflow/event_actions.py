"""Actions attached to an agent event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class EventActions:
    """Side effects an event requests: state changes, transfers, escalation."""

    skip_summarization: bool = False
    state_delta: dict[str, Any] = field(default_factory=dict)
    artifact_delta: dict[str, int] = field(default_factory=dict)
    transfer_to_agent: str = ""
    escalate: bool = False
    requested_auth_configs: dict[str, Any] = field(default_factory=dict)

    def update(self, other: Optional["EventActions"]) -> None:
        """Merge ``other`` into these actions; flags only ever turn on."""
        if other is None:
            return
        if other.skip_summarization:
            self.skip_summarization = True
        if other.transfer_to_agent:
            self.transfer_to_agent = other.transfer_to_agent
        if other.escalate:
            self.escalate = True
        self.state_delta.update(other.state_delta)
        self.artifact_delta.update(other.artifact_delta)
        self.requested_auth_configs.update(other.requested_auth_configs)