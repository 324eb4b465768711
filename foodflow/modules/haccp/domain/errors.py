from __future__ import annotations

from foodflow.modules.process.domain.errors import DomainError


class CheckpointNotFound(DomainError):
    def __init__(self, ccp_id: str = ""):
        super().__init__(code="CCP_NOT_FOUND", message=f"CCP checkpoint not found: {ccp_id}")
        self.ccp_id = ccp_id
