from __future__ import annotations

from foodflow.modules.process.domain.errors import DomainError


class LotNotFound(DomainError):
    def __init__(self, lot_id: str = ""):
        super().__init__(code="LOT_NOT_FOUND", message=f"LOT not found: {lot_id}")
        self.lot_id = lot_id
