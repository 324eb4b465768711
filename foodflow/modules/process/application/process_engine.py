"""Process Engine: composition root for definitions, instances and tasks."""
from __future__ import annotations

from typing import Any, Optional

import structlog

from foodflow.core.config import Settings, settings as default_settings
from foodflow.modules.process.application.definition_service import DefinitionService
from foodflow.modules.process.application.process_instance_service import ProcessInstanceService
from foodflow.modules.process.application.task_service import TaskService
from foodflow.modules.process.domain.aggregates.process_definition import ProcessDefinition
from foodflow.modules.process.domain.aggregates.process_instance import ProcessInstance
from foodflow.modules.process.domain.errors import ProcessDefinitionNotFound
from foodflow.modules.process.infrastructure.bpm.templates import get_template_by_id

logger = structlog.get_logger(__name__)


class ProcessEngine:
    """Owns the definition registry, the runtime service and the task service.

    HACCP and LOT services are separate collaborators wired next to the engine
    in ``foodflow.main``; the engine does not reference them.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings
        self._definitions = DefinitionService()
        self._runtime_service = ProcessInstanceService(self._settings)
        self._task_service = TaskService(self._settings)

    # ── Definitions ──────────────────────────────────────

    def deploy(
        self,
        bpmn_xml: str,
        name: str,
        key: str,
        *,
        description: str | None = None,
        category: str | None = None,
    ) -> ProcessDefinition:
        return self._definitions.deploy(bpmn_xml, name, key, description=description, category=category)

    def deploy_template(self, template_id: str, key: str | None = None) -> ProcessDefinition | None:
        template = get_template_by_id(template_id)
        if not template:
            logger.warning("process_template_not_found", template_id=template_id)
            return None
        return self._definitions.deploy(
            template.bpmn_xml,
            template.name,
            key or template.id,
            description=template.description,
            category=template.category.value,
        )

    def get_process_definition(self, proc_def_id: str) -> ProcessDefinition | None:
        return self._definitions.get(proc_def_id)

    def get_latest_process_definition_by_key(self, key: str) -> ProcessDefinition | None:
        return self._definitions.get_latest_by_key(key)

    def get_all_process_definitions(self) -> list[ProcessDefinition]:
        return self._definitions.list()

    def delete_process_definition(self, proc_def_id: str) -> bool:
        return self._definitions.delete(proc_def_id)

    def suspend_definition(self, proc_def_id: str) -> ProcessDefinition | None:
        return self._definitions.suspend(proc_def_id)

    def activate_definition(self, proc_def_id: str) -> ProcessDefinition | None:
        return self._definitions.activate(proc_def_id)

    # ── Services ─────────────────────────────────────────

    @property
    def runtime_service(self) -> ProcessInstanceService:
        return self._runtime_service

    @property
    def task_service(self) -> TaskService:
        return self._task_service

    # ── Convenience ──────────────────────────────────────

    def start_process(
        self,
        process_definition_key: str,
        business_key: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> ProcessInstance:
        """Start an instance of the latest version registered under the key.

        Raises:
            ProcessDefinitionNotFound: nothing is deployed under ``process_definition_key``.
        """
        definition = self._definitions.get_latest_by_key(process_definition_key)
        if not definition:
            raise ProcessDefinitionNotFound(process_definition_key)
        return self._runtime_service.create_instance(definition, business_key, variables, user_id)

    def get_statistics(self) -> dict[str, Any]:
        return {
            "process_definitions": self._definitions.count(),
            "process_instances": self._runtime_service.get_statistics(),
            "tasks": self._task_service.get_statistics(),
        }

    def clear(self) -> None:
        self._definitions.clear()
        self._runtime_service.clear()
        self._task_service.clear()
