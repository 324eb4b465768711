"""ProcessInstance Aggregate Root: a running execution of a ProcessDefinition.

Invariants:
1. ``suspended`` is True iff status is SUSPENDED
2. ``end_time`` and ``duration`` are set together; duration is end - start in ms
3. Transitions are only ever triggered by explicit commands
4. Forbidden transitions are applied anyway unless ``strict`` is requested,
   in which case InvalidStateTransition is raised
5. Domain events are collected and drained by the application layer
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from foodflow.modules.process.domain.errors import InvalidStateTransition
from foodflow.modules.process.domain.events import ExecutionEvent, ExecutionEventType
from foodflow.modules.process.domain.variables import (
    ProcessVariable,
    VariableScope,
    VariableType,
    to_values,
    to_variables,
)


class ProcessStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"
    TERMINATED = "TERMINATED"
    FAILED = "FAILED"


# Allowed state transitions (state machine)
_TRANSITIONS: dict[ProcessStatus, set[ProcessStatus]] = {
    ProcessStatus.ACTIVE: {
        ProcessStatus.SUSPENDED,
        ProcessStatus.COMPLETED,
        ProcessStatus.TERMINATED,
    },
    ProcessStatus.SUSPENDED: {ProcessStatus.ACTIVE},
    ProcessStatus.COMPLETED: set(),
    ProcessStatus.TERMINATED: set(),
    ProcessStatus.FAILED: set(),
}


@dataclass
class ProcessInstance:
    """ProcessInstance Aggregate Root.

    Definition id/key/name are captured when the instance is created and are
    not re-read from the registry afterwards.
    """

    id: str
    process_definition_id: str
    process_definition_key: str
    process_definition_name: str
    status: ProcessStatus
    start_time: datetime
    business_key: str | None = None
    start_user_id: str | None = None
    end_time: datetime | None = None
    duration: int | None = None
    suspended: bool = False
    tenant_id: str | None = None
    variables: dict[str, ProcessVariable] = field(default_factory=dict)
    current_activities: list[str] = field(default_factory=list)

    _events: list[ExecutionEvent] = field(default_factory=list, repr=False)

    # ── Factory ──────────────────────────────────────────

    @classmethod
    def create(
        cls,
        *,
        id: str,
        process_definition_id: str,
        process_definition_key: str,
        process_definition_name: str,
        business_key: str | None = None,
        variables: dict[str, Any] | None = None,
        start_user_id: str | None = None,
    ) -> ProcessInstance:
        instance = cls(
            id=id,
            process_definition_id=process_definition_id,
            process_definition_key=process_definition_key,
            process_definition_name=process_definition_name,
            status=ProcessStatus.ACTIVE,
            start_time=datetime.now(timezone.utc),
            business_key=business_key,
            start_user_id=start_user_id,
            variables=to_variables(variables, scope=VariableScope.PROCESS, process_instance_id=id),
        )
        instance._record(ExecutionEvent(
            type=ExecutionEventType.PROCESS_STARTED,
            process_instance_id=id,
            user_id=start_user_id,
            variables=dict(variables) if variables else None,
        ))
        return instance

    # ── Commands ─────────────────────────────────────────

    def suspend(self, *, strict: bool = False) -> None:
        """ACTIVE → SUSPENDED."""
        self._check(ProcessStatus.SUSPENDED, strict)
        self.status = ProcessStatus.SUSPENDED
        self.suspended = True

    def resume(self, *, strict: bool = False) -> bool:
        """SUSPENDED → ACTIVE. Returns False and changes nothing otherwise."""
        if self.status != ProcessStatus.SUSPENDED:
            if strict:
                raise InvalidStateTransition(self.status.value, ProcessStatus.ACTIVE.value)
            return False
        self.status = ProcessStatus.ACTIVE
        self.suspended = False
        return True

    def complete(self, *, strict: bool = False) -> None:
        """ACTIVE → COMPLETED."""
        self._check(ProcessStatus.COMPLETED, strict)
        self._finish(ProcessStatus.COMPLETED)
        self._record(ExecutionEvent(
            type=ExecutionEventType.PROCESS_COMPLETED,
            process_instance_id=self.id,
        ))

    def terminate(self, reason: str | None = None, *, strict: bool = False) -> None:
        """ACTIVE → TERMINATED."""
        self._check(ProcessStatus.TERMINATED, strict)
        self._finish(ProcessStatus.TERMINATED)
        self._record(ExecutionEvent(
            type=ExecutionEventType.PROCESS_TERMINATED,
            process_instance_id=self.id,
            message=reason,
        ))

    def set_variable(self, name: str, value: Any, var_type: VariableType | None = None) -> None:
        # Terminal instances keep accepting variable writes.
        self.variables[name] = ProcessVariable.of(
            name,
            value,
            scope=VariableScope.PROCESS,
            process_instance_id=self.id,
            var_type=var_type,
        )

    def add_activity(self, activity_id: str) -> bool:
        if activity_id in self.current_activities:
            return False
        self.current_activities.append(activity_id)
        self._record(ExecutionEvent(
            type=ExecutionEventType.ACTIVITY_STARTED,
            process_instance_id=self.id,
            activity_id=activity_id,
        ))
        return True

    def remove_activity(self, activity_id: str) -> bool:
        if activity_id not in self.current_activities:
            return False
        self.current_activities = [a for a in self.current_activities if a != activity_id]
        self._record(ExecutionEvent(
            type=ExecutionEventType.ACTIVITY_COMPLETED,
            process_instance_id=self.id,
            activity_id=activity_id,
        ))
        return True

    # ── Queries ──────────────────────────────────────────

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.status]

    def can_transition_to(self, target: ProcessStatus) -> bool:
        return target in _TRANSITIONS[self.status]

    def variable_values(self) -> dict[str, Any]:
        return to_values(self.variables)

    # ── Event Collection ─────────────────────────────────

    def collect_events(self) -> list[ExecutionEvent]:
        """Drain and return all pending execution events."""
        events = list(self._events)
        self._events.clear()
        return events

    # ── Private ──────────────────────────────────────────

    def _check(self, target: ProcessStatus, strict: bool) -> None:
        if strict and not self.can_transition_to(target):
            raise InvalidStateTransition(self.status.value, target.value)

    def _finish(self, target: ProcessStatus) -> None:
        self.status = target
        self.suspended = False
        self.end_time = datetime.now(timezone.utc)
        self.duration = (self.end_time - self.start_time) // timedelta(milliseconds=1)

    def _record(self, event: ExecutionEvent) -> None:
        self._events.append(event)
