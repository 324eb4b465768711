"""Process Definition Application Service: versioned registry of deployed definitions."""
from __future__ import annotations

import uuid

import structlog

from foodflow.modules.process.domain.aggregates.process_definition import ProcessDefinition

logger = structlog.get_logger(__name__)


class DefinitionService:
    """Stores definitions by id; versions are numbered per logical key."""

    def __init__(self) -> None:
        self._definitions: dict[str, ProcessDefinition] = {}

    def deploy(
        self,
        bpmn_xml: str,
        name: str,
        key: str,
        *,
        description: str | None = None,
        category: str | None = None,
        tenant_id: str | None = None,
    ) -> ProcessDefinition:
        """Register a new version under ``key``. The XML is stored as given."""
        definition = ProcessDefinition(
            id=str(uuid.uuid4()),
            key=key,
            name=name,
            version=self._next_version(key),
            bpmn_xml=bpmn_xml,
            description=description,
            category=category,
            deployment_id=str(uuid.uuid4()),
            tenant_id=tenant_id,
        )
        self._definitions[definition.id] = definition
        logger.info("process_definition_deployed", key=key, version=definition.version, proc_def_id=definition.id)
        return definition

    def get(self, proc_def_id: str) -> ProcessDefinition | None:
        return self._definitions.get(proc_def_id)

    def get_latest_by_key(self, key: str) -> ProcessDefinition | None:
        candidates = [d for d in self._definitions.values() if d.key == key]
        if not candidates:
            return None
        return max(candidates, key=lambda d: d.version)

    def get_versions(self, key: str) -> list[ProcessDefinition]:
        return sorted(
            (d for d in self._definitions.values() if d.key == key),
            key=lambda d: d.version,
        )

    def list(self) -> list[ProcessDefinition]:
        return list(self._definitions.values())

    def delete(self, proc_def_id: str) -> bool:
        return self._definitions.pop(proc_def_id, None) is not None

    def suspend(self, proc_def_id: str) -> ProcessDefinition | None:
        definition = self._definitions.get(proc_def_id)
        if not definition:
            return None
        definition.suspend()
        return definition

    def activate(self, proc_def_id: str) -> ProcessDefinition | None:
        definition = self._definitions.get(proc_def_id)
        if not definition:
            return None
        definition.activate()
        return definition

    def count(self) -> int:
        return len(self._definitions)

    def clear(self) -> None:
        self._definitions.clear()

    def _next_version(self, key: str) -> int:
        versions = [d.version for d in self._definitions.values() if d.key == key]
        return max(versions) + 1 if versions else 1
