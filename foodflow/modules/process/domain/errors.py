"""Domain Errors: business rule violation exceptions.

Lookups of unknown ids never raise; they return ``None``. Only the rule
violations below propagate to the caller.
"""
from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain-level errors."""
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class InvalidStateTransition(DomainError):
    """Raised when a strict-mode transition violates the state machine."""
    def __init__(self, current: str, target: str):
        super().__init__(
            code="INVALID_STATE_TRANSITION",
            message=f"Cannot transition from {current} to {target}",
        )
        self.current = current
        self.target = target


class ProcessDefinitionNotFound(DomainError):
    def __init__(self, key: str = ""):
        super().__init__(
            code="PROCESS_DEFINITION_NOT_FOUND",
            message=f"Process definition not found: {key}",
        )
        self.key = key


class TaskNotCandidate(DomainError):
    def __init__(self, task_id: str, user_id: str):
        super().__init__(
            code="TASK_NOT_CANDIDATE",
            message=f"User {user_id} is not a candidate for task {task_id}",
        )
        self.task_id = task_id
        self.user_id = user_id


class TaskNotAssigned(DomainError):
    def __init__(self, task_id: str):
        super().__init__(
            code="TASK_NOT_ASSIGNED",
            message=f"Task {task_id} cannot be completed without an assignee",
        )
        self.task_id = task_id

