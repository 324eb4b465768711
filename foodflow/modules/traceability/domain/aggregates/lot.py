"""LOT Aggregate Root: a production batch and its genealogy edges.

Invariants:
1. ``parent_lots`` / ``child_lots`` hold lot numbers, never object references
2. Edges are added idempotently; nothing removes them
3. ``traceability_records`` is append-only, records are immutable
4. The genealogy graph is assumed acyclic but not checked on link
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from foodflow.modules.traceability.domain.models import (
    EnvironmentalCondition,
    MaterialUsage,
    ProductOutput,
)


class LotStatus(str, Enum):
    IN_PROCESS = "IN_PROCESS"
    QUARANTINE = "QUARANTINE"
    RELEASED = "RELEASED"
    RECALLED = "RECALLED"
    DISPOSED = "DISPOSED"


class TraceEventType(str, Enum):
    RECEIVED = "RECEIVED"
    PROCESSED = "PROCESSED"
    INSPECTED = "INSPECTED"
    STORED = "STORED"
    SHIPPED = "SHIPPED"
    REWORKED = "REWORKED"


@dataclass(frozen=True)
class TraceabilityRecord:
    id: str
    lot_id: str
    timestamp: datetime
    activity_id: str
    activity_name: str
    event_type: TraceEventType
    location: str
    operator: str
    parameters: dict[str, Any] | None = None
    input_materials: list[MaterialUsage] | None = None
    output_products: list[ProductOutput] | None = None
    equipment: list[str] | None = None
    environmental_conditions: list[EnvironmentalCondition] | None = None


@dataclass
class LOT:
    id: str
    lot_number: str
    product_id: str
    product_name: str
    process_instance_id: str
    manufacturing_date: datetime
    quantity: float
    unit: str
    expiry_date: datetime | None = None
    status: LotStatus = LotStatus.IN_PROCESS
    parent_lots: list[str] = field(default_factory=list)
    child_lots: list[str] = field(default_factory=list)
    traceability_records: list[TraceabilityRecord] = field(default_factory=list)

    # ── Genealogy ────────────────────────────────────────

    def add_parent(self, lot_number: str) -> bool:
        if lot_number in self.parent_lots:
            return False
        self.parent_lots.append(lot_number)
        return True

    def add_child(self, lot_number: str) -> bool:
        if lot_number in self.child_lots:
            return False
        self.child_lots.append(lot_number)
        return True

    # ── Records ──────────────────────────────────────────

    def append_record(self, record: TraceabilityRecord) -> None:
        self.traceability_records.append(record)
