"""Task Aggregate Root: a human task bound to a process instance.

Invariants:
1. A task can only be completed while it has an assignee
2. A claim is refused when candidate users are set, the claimant is not
   one of them and is not already the assignee
3. Candidate users/groups never contain duplicates
4. IN_PROGRESS and CANCELLED are declared but no command reaches them
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from foodflow.modules.process.domain.errors import TaskNotAssigned, TaskNotCandidate
from foodflow.modules.process.domain.events import ExecutionEvent, ExecutionEventType
from foodflow.modules.process.domain.variables import (
    ProcessVariable,
    VariableScope,
    to_values,
    to_variables,
)


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class Task:
    id: str
    name: str
    process_instance_id: str
    process_definition_id: str
    task_definition_key: str
    status: TaskStatus
    create_time: datetime
    priority: int
    description: str | None = None
    assignee: str | None = None
    owner: str | None = None
    candidate_users: list[str] = field(default_factory=list)
    candidate_groups: list[str] = field(default_factory=list)
    due_date: datetime | None = None
    form_key: str | None = None
    tenant_id: str | None = None
    suspended: bool = False
    variables: dict[str, ProcessVariable] = field(default_factory=dict)

    _events: list[ExecutionEvent] = field(default_factory=list, repr=False)

    # ── Factory ──────────────────────────────────────────

    @classmethod
    def create(
        cls,
        *,
        id: str,
        process_instance_id: str,
        process_definition_id: str,
        task_definition_key: str,
        name: str,
        description: str | None = None,
        priority: int = 50,
    ) -> Task:
        task = cls(
            id=id,
            name=name,
            description=description,
            process_instance_id=process_instance_id,
            process_definition_id=process_definition_id,
            task_definition_key=task_definition_key,
            status=TaskStatus.PENDING,
            create_time=datetime.now(timezone.utc),
            priority=priority,
        )
        task._record(ExecutionEventType.TASK_CREATED)
        return task

    # ── Commands ─────────────────────────────────────────

    def assign(self, user_id: str) -> None:
        """Any state → ASSIGNED. No candidate check."""
        self.assignee = user_id
        self.status = TaskStatus.ASSIGNED
        self._record(ExecutionEventType.TASK_ASSIGNED, user_id=user_id)

    def claim(self, user_id: str) -> None:
        if not self.can_claim(user_id):
            raise TaskNotCandidate(self.id, user_id)
        self.assign(user_id)

    def unassign(self) -> None:
        """ASSIGNED → PENDING."""
        self.assignee = None
        self.status = TaskStatus.PENDING

    def complete(self, variables: dict[str, Any] | None = None) -> None:
        if not self.assignee:
            raise TaskNotAssigned(self.id)
        self.status = TaskStatus.COMPLETED
        self.variables.update(
            to_variables(variables, scope=VariableScope.TASK, task_id=self.id)
        )
        self._record(
            ExecutionEventType.TASK_COMPLETED,
            user_id=self.assignee,
            variables=dict(variables) if variables else None,
        )

    def add_candidate_user(self, user_id: str) -> None:
        if user_id not in self.candidate_users:
            self.candidate_users.append(user_id)

    def add_candidate_group(self, group_id: str) -> None:
        if group_id not in self.candidate_groups:
            self.candidate_groups.append(group_id)

    def set_variable(self, name: str, value: Any) -> None:
        self.variables[name] = ProcessVariable.of(
            name, value, scope=VariableScope.TASK, task_id=self.id
        )

    # ── Queries ──────────────────────────────────────────

    def can_claim(self, user_id: str) -> bool:
        if not self.candidate_users:
            return True
        return user_id in self.candidate_users or self.assignee == user_id

    def variable_values(self) -> dict[str, Any]:
        return to_values(self.variables)

    # ── Event Collection ─────────────────────────────────

    def collect_events(self) -> list[ExecutionEvent]:
        """Drain and return all pending execution events."""
        events = list(self._events)
        self._events.clear()
        return events

    # ── Private ──────────────────────────────────────────

    def _record(self, event_type: ExecutionEventType, **extra: Any) -> None:
        self._events.append(ExecutionEvent(
            type=event_type,
            process_instance_id=self.process_instance_id,
            task_id=self.id,
            activity_id=self.task_definition_key,
            activity_name=self.name,
            **extra,
        ))
