"""Task Application Service: human task assignment, claim and completion."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

import structlog

from foodflow.core.config import Settings, settings as default_settings
from foodflow.modules.process.domain.aggregates.task import Task, TaskStatus
from foodflow.modules.process.domain.errors import TaskNotAssigned, TaskNotCandidate
from foodflow.modules.process.domain.events import ExecutionEvent
from foodflow.modules.process.infrastructure.event_log import EventLog

logger = structlog.get_logger(__name__)


class TaskService:
    """Application service for Task state transitions.

    Unknown task ids yield ``None``. ``claim_task`` and ``complete_task`` raise
    TaskNotCandidate / TaskNotAssigned for the two business rules.
    """

    def __init__(self, settings: Settings | None = None, event_log: EventLog | None = None) -> None:
        self._settings = settings or default_settings
        self._tasks: dict[str, Task] = {}
        self._event_log = event_log or EventLog()

    def create_task(
        self,
        process_instance_id: str,
        process_definition_id: str,
        task_definition_key: str,
        name: str,
        description: Optional[str] = None,
    ) -> Task:
        task = Task.create(
            id=str(uuid.uuid4()),
            process_instance_id=process_instance_id,
            process_definition_id=process_definition_id,
            task_definition_key=task_definition_key,
            name=name,
            description=description,
            priority=self._settings.DEFAULT_TASK_PRIORITY,
        )
        self._tasks[task.id] = task
        self._drain(task)
        logger.info("task_created", task_id=task.id, proc_inst_id=process_instance_id, key=task_definition_key)
        return task

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def get_all_tasks(
        self,
        status: Optional[TaskStatus | str] = None,
        assignee: Optional[str] = None,
        candidate_user: Optional[str] = None,
        candidate_group: Optional[str] = None,
        process_instance_id: Optional[str] = None,
    ) -> list[Task]:
        tasks = list(self._tasks.values())
        if status:
            tasks = [t for t in tasks if t.status == TaskStatus(status)]
        if assignee:
            tasks = [t for t in tasks if t.assignee == assignee]
        if candidate_user:
            tasks = [t for t in tasks if candidate_user in t.candidate_users]
        if candidate_group:
            tasks = [t for t in tasks if candidate_group in t.candidate_groups]
        if process_instance_id:
            tasks = [t for t in tasks if t.process_instance_id == process_instance_id]
        return tasks

    # ── Assignment ───────────────────────────────────────

    def assign_task(self, task_id: str, user_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        task.assign(user_id)
        self._drain(task)
        logger.info("task_assigned", task_id=task_id, assignee=user_id)
        return task

    def claim_task(self, task_id: str, user_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        try:
            task.claim(user_id)
        except TaskNotCandidate:
            logger.warning("task_claim_rejected", task_id=task_id, user_id=user_id, candidates=task.candidate_users)
            raise
        self._drain(task)
        logger.info("task_claimed", task_id=task_id, assignee=user_id)
        return task

    def unassign_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        task.unassign()
        return task

    def complete_task(self, task_id: str, variables: Optional[dict[str, Any]] = None) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        try:
            task.complete(variables)
        except TaskNotAssigned:
            logger.warning("task_complete_rejected", task_id=task_id, status=task.status.value)
            raise
        self._drain(task)
        logger.info("task_completed", task_id=task_id, assignee=task.assignee)
        return task

    def delete_task(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    def add_candidate_user(self, task_id: str, user_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        task.add_candidate_user(user_id)
        return task

    def add_candidate_group(self, task_id: str, group_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        task.add_candidate_group(group_id)
        return task

    # ── Variables & Attributes ───────────────────────────

    def set_variable(self, task_id: str, name: str, value: Any) -> bool:
        task = self._tasks.get(task_id)
        if not task:
            return False
        task.set_variable(name, value)
        return True

    def get_variable(self, task_id: str, name: str) -> Any:
        task = self._tasks.get(task_id)
        if not task or name not in task.variables:
            return None
        return task.variables[name].value

    def get_variables(self, task_id: str) -> dict[str, Any]:
        task = self._tasks.get(task_id)
        if not task:
            return {}
        return task.variable_values()

    def set_priority(self, task_id: str, priority: int) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        task.priority = priority
        return task

    def set_due_date(self, task_id: str, due_date: datetime) -> Task | None:
        task = self._tasks.get(task_id)
        if not task:
            return None
        task.due_date = due_date
        return task

    # ── Events & Statistics ──────────────────────────────

    def get_events(self, task_id: Optional[str] = None) -> list[ExecutionEvent]:
        return self._event_log.get_events(task_id=task_id)

    def get_statistics(self) -> dict[str, int]:
        counts = {status: 0 for status in TaskStatus}
        for task in self._tasks.values():
            counts[task.status] += 1
        return {
            "total": len(self._tasks),
            "pending": counts[TaskStatus.PENDING],
            "assigned": counts[TaskStatus.ASSIGNED],
            "in_progress": counts[TaskStatus.IN_PROGRESS],
            "completed": counts[TaskStatus.COMPLETED],
            "cancelled": counts[TaskStatus.CANCELLED],
        }

    def clear(self) -> None:
        self._tasks.clear()
        self._event_log.clear()

    def _drain(self, task: Task) -> None:
        self._event_log.append_events(task.collect_events())
