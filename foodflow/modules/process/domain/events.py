"""Execution Events: immutable audit records of things that happened at runtime."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ExecutionEventType(str, Enum):
    PROCESS_STARTED = "PROCESS_STARTED"
    PROCESS_COMPLETED = "PROCESS_COMPLETED"
    PROCESS_TERMINATED = "PROCESS_TERMINATED"
    TASK_CREATED = "TASK_CREATED"
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_COMPLETED = "TASK_COMPLETED"
    ACTIVITY_STARTED = "ACTIVITY_STARTED"
    ACTIVITY_COMPLETED = "ACTIVITY_COMPLETED"
    SEQUENCE_FLOW_TAKEN = "SEQUENCE_FLOW_TAKEN"


@dataclass(frozen=True)
class ExecutionEvent:
    type: ExecutionEventType
    process_instance_id: str
    activity_id: str | None = None
    activity_name: str | None = None
    task_id: str | None = None
    user_id: str | None = None
    variables: dict[str, Any] | None = None
    message: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
