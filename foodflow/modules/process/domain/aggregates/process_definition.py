"""ProcessDefinition: a deployed, versioned process model.

The definition text (BPMN XML) is opaque to the runtime. Every field except
``suspended`` is fixed at deploy time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class ProcessDefinition:
    id: str
    key: str
    name: str
    version: int
    bpmn_xml: str
    deployment_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    suspended: bool = False
    description: str | None = None
    category: str | None = None
    deployment_id: str | None = None
    tenant_id: str | None = None
    startable_in_tasklist: bool = True

    def suspend(self) -> None:
        self.suspended = True

    def activate(self) -> None:
        self.suspended = False
