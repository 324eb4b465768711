"""Process Instance Application Service: initiation, lifecycle, variables, activities."""
from __future__ import annotations

import uuid
from dataclasses import fields
from typing import Any, Optional

import structlog

from foodflow.core.config import Settings, settings as default_settings
from foodflow.modules.process.domain.aggregates.process_definition import ProcessDefinition
from foodflow.modules.process.domain.aggregates.process_instance import (
    ProcessInstance,
    ProcessStatus,
)
from foodflow.modules.process.domain.events import ExecutionEvent
from foodflow.modules.process.domain.variables import VariableType
from foodflow.modules.process.infrastructure.event_log import EventLog

logger = structlog.get_logger(__name__)

# ``suspended`` is derived from ``status``
_UPDATABLE_FIELDS = {f.name for f in fields(ProcessInstance) if not f.name.startswith("_")} - {"id", "suspended"}


class ProcessInstanceService:
    """Application service for process instance lifecycle.

    Unknown instance ids yield ``None`` (or ``False`` / ``{}``), never an error.
    """

    def __init__(self, settings: Settings | None = None, event_log: EventLog | None = None) -> None:
        self._settings = settings or default_settings
        self._instances: dict[str, ProcessInstance] = {}
        self._event_log = event_log or EventLog()

    # ── Lifecycle ────────────────────────────────────────

    def create_instance(
        self,
        definition: ProcessDefinition,
        business_key: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
        start_user_id: Optional[str] = None,
    ) -> ProcessInstance:
        instance = ProcessInstance.create(
            id=str(uuid.uuid4()),
            process_definition_id=definition.id,
            process_definition_key=definition.key,
            process_definition_name=definition.name,
            business_key=business_key,
            variables=variables,
            start_user_id=start_user_id,
        )
        self._instances[instance.id] = instance
        self._drain(instance)
        logger.info(
            "process_instance_started",
            proc_inst_id=instance.id,
            key=definition.key,
            version=definition.version,
            business_key=business_key,
        )
        return instance

    def suspend_instance(self, instance_id: str) -> ProcessInstance | None:
        instance = self._instances.get(instance_id)
        if not instance:
            return None
        self._warn_if_forbidden(instance, ProcessStatus.SUSPENDED)
        instance.suspend(strict=self._settings.STRICT_TRANSITIONS)
        logger.info("process_instance_suspended", proc_inst_id=instance_id)
        return instance

    def resume_instance(self, instance_id: str) -> ProcessInstance | None:
        """Only a SUSPENDED instance can be resumed; anything else yields None."""
        instance = self._instances.get(instance_id)
        if not instance:
            return None
        if not instance.resume(strict=self._settings.STRICT_TRANSITIONS):
            logger.warning("process_instance_resume_ignored", proc_inst_id=instance_id, status=instance.status.value)
            return None
        logger.info("process_instance_resumed", proc_inst_id=instance_id)
        return instance

    def complete_instance(self, instance_id: str) -> ProcessInstance | None:
        instance = self._instances.get(instance_id)
        if not instance:
            return None
        self._warn_if_forbidden(instance, ProcessStatus.COMPLETED)
        instance.complete(strict=self._settings.STRICT_TRANSITIONS)
        self._drain(instance)
        logger.info("process_instance_completed", proc_inst_id=instance_id, duration_ms=instance.duration)
        return instance

    def terminate_instance(self, instance_id: str, reason: Optional[str] = None) -> ProcessInstance | None:
        instance = self._instances.get(instance_id)
        if not instance:
            return None
        self._warn_if_forbidden(instance, ProcessStatus.TERMINATED)
        instance.terminate(reason, strict=self._settings.STRICT_TRANSITIONS)
        self._drain(instance)
        logger.info("process_instance_terminated", proc_inst_id=instance_id, reason=reason)
        return instance

    # ── Queries ──────────────────────────────────────────

    def get_instance(self, instance_id: str) -> ProcessInstance | None:
        return self._instances.get(instance_id)

    def get_all_instances(
        self,
        status: Optional[ProcessStatus | str] = None,
        process_definition_key: Optional[str] = None,
        business_key: Optional[str] = None,
    ) -> list[ProcessInstance]:
        instances = list(self._instances.values())
        if status:
            instances = [i for i in instances if i.status == ProcessStatus(status)]
        if process_definition_key:
            instances = [i for i in instances if i.process_definition_key == process_definition_key]
        if business_key:
            instances = [i for i in instances if i.business_key == business_key]
        return instances

    def update_instance(self, instance_id: str, **changes: Any) -> ProcessInstance | None:
        """Shallow field replacement. Unknown field names raise TypeError.

        ``status`` is coerced to ProcessStatus (ValueError on an unknown value)
        and ``suspended`` follows it.
        """
        instance = self._instances.get(instance_id)
        if not instance:
            return None
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown process instance fields: {sorted(unknown)}")
        if "status" in changes:
            changes["status"] = ProcessStatus(changes["status"])
        for name, value in changes.items():
            setattr(instance, name, value)
        instance.suspended = instance.status == ProcessStatus.SUSPENDED
        return instance

    def delete_instance(self, instance_id: str) -> bool:
        return self._instances.pop(instance_id, None) is not None

    # ── Variables ────────────────────────────────────────

    def set_variable(
        self,
        instance_id: str,
        name: str,
        value: Any,
        var_type: Optional[VariableType | str] = None,
    ) -> bool:
        instance = self._instances.get(instance_id)
        if not instance:
            return False
        instance.set_variable(name, value, VariableType(var_type) if var_type else None)
        return True

    def get_variable(self, instance_id: str, name: str) -> Any:
        instance = self._instances.get(instance_id)
        if not instance or name not in instance.variables:
            return None
        return instance.variables[name].value

    def get_variables(self, instance_id: str) -> dict[str, Any]:
        instance = self._instances.get(instance_id)
        if not instance:
            return {}
        return instance.variable_values()

    # ── Activities ───────────────────────────────────────

    def add_current_activity(self, instance_id: str, activity_id: str) -> None:
        instance = self._instances.get(instance_id)
        if not instance:
            return
        instance.add_activity(activity_id)
        self._drain(instance)

    def remove_current_activity(self, instance_id: str, activity_id: str) -> None:
        instance = self._instances.get(instance_id)
        if not instance:
            return
        instance.remove_activity(activity_id)
        self._drain(instance)

    # ── Events & Statistics ──────────────────────────────

    def get_events(self, instance_id: Optional[str] = None) -> list[ExecutionEvent]:
        return self._event_log.get_events(process_instance_id=instance_id)

    def get_statistics(self) -> dict[str, int]:
        counts = {status: 0 for status in ProcessStatus}
        for instance in self._instances.values():
            counts[instance.status] += 1
        return {
            "total": len(self._instances),
            "active": counts[ProcessStatus.ACTIVE],
            "completed": counts[ProcessStatus.COMPLETED],
            "suspended": counts[ProcessStatus.SUSPENDED],
            "terminated": counts[ProcessStatus.TERMINATED],
            "failed": counts[ProcessStatus.FAILED],
        }

    def clear(self) -> None:
        self._instances.clear()
        self._event_log.clear()

    # ── Private ──────────────────────────────────────────

    def _drain(self, instance: ProcessInstance) -> None:
        self._event_log.append_events(instance.collect_events())

    def _warn_if_forbidden(self, instance: ProcessInstance, target: ProcessStatus) -> None:
        if not instance.can_transition_to(target):
            logger.warning(
                "process_instance_transition_not_allowed",
                proc_inst_id=instance.id,
                current=instance.status.value,
                target=target.value,
                strict=self._settings.STRICT_TRANSITIONS,
            )
