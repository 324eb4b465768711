"""LOT Tracking Application Service: genealogy, forward/backward trace, recall."""
from __future__ import annotations

import random
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from foodflow.core.config import Settings, settings as default_settings
from foodflow.modules.traceability.domain import genealogy
from foodflow.modules.traceability.domain.aggregates.lot import (
    LOT,
    LotStatus,
    TraceabilityRecord,
    TraceEventType,
)
from foodflow.modules.traceability.domain.errors import LotNotFound
from foodflow.modules.traceability.domain.lot_number import LotNumberGenerator
from foodflow.modules.traceability.domain.models import (
    EnvironmentalCondition,
    MaterialUsage,
    ProductOutput,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TracePath:
    backward: list[LOT] = field(default_factory=list)
    current: LOT | None = None
    forward: list[LOT] = field(default_factory=list)


@dataclass(frozen=True)
class RecallResult:
    recalled_lots: list[LOT]
    affected_lots: list[LOT]


class LOTTrackingService:
    """In-memory LOT store with a flat index of every traceability record.

    Genealogy edges are lot numbers, resolved against this store on every
    traversal.
    """

    def __init__(self, settings: Settings | None = None, rng: random.Random | None = None) -> None:
        self._settings = settings or default_settings
        self._lots: dict[str, LOT] = {}
        self._records: dict[str, TraceabilityRecord] = {}
        self._lot_numbers = LotNumberGenerator(
            strategy=self._settings.LOT_SEQUENCE_STRATEGY,
            collision_retries=self._settings.LOT_COLLISION_RETRIES,
            rng=rng,
        )

    # ── LOTs ─────────────────────────────────────────────

    def create_lot(
        self,
        product_id: str,
        product_name: str,
        process_instance_id: str,
        quantity: float,
        unit: str,
        manufacturing_date: Optional[datetime] = None,
        expiry_date: Optional[datetime] = None,
    ) -> LOT:
        manufacturing_date = manufacturing_date or datetime.now(timezone.utc)
        lot = LOT(
            id=str(uuid.uuid4()),
            lot_number=self._lot_numbers.generate(product_id, manufacturing_date, self._lot_number_exists),
            product_id=product_id,
            product_name=product_name,
            process_instance_id=process_instance_id,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
            quantity=quantity,
            unit=unit,
        )
        self._lots[lot.id] = lot
        logger.info("lot_created", lot_id=lot.id, lot_number=lot.lot_number, proc_inst_id=process_instance_id)
        return lot

    def get_lot(self, lot_id: str) -> LOT | None:
        return self._lots.get(lot_id)

    def get_lot_by_number(self, lot_number: str) -> LOT | None:
        """First LOT registered under ``lot_number``."""
        return next((lot for lot in self._lots.values() if lot.lot_number == lot_number), None)

    def get_all_lots(self) -> list[LOT]:
        return list(self._lots.values())

    def get_lots_by_process(self, process_instance_id: str) -> list[LOT]:
        return [lot for lot in self._lots.values() if lot.process_instance_id == process_instance_id]

    # ── Traceability Records ─────────────────────────────

    def add_traceability_record(
        self,
        lot_id: str,
        *,
        activity_id: str,
        activity_name: str,
        event_type: TraceEventType | str,
        location: str,
        operator: str,
        parameters: Optional[dict[str, Any]] = None,
        input_materials: Optional[Iterable[MaterialUsage | Mapping[str, Any]]] = None,
        output_products: Optional[Iterable[ProductOutput | Mapping[str, Any]]] = None,
        equipment: Optional[list[str]] = None,
        environmental_conditions: Optional[Iterable[EnvironmentalCondition | Mapping[str, Any]]] = None,
    ) -> TraceabilityRecord:
        """Append a record to the LOT; id, lot id and timestamp are filled in.

        Raises:
            LotNotFound: ``lot_id`` is unknown.
        """
        lot = self._lots.get(lot_id)
        if not lot:
            raise LotNotFound(lot_id)

        record = TraceabilityRecord(
            id=str(uuid.uuid4()),
            lot_id=lot_id,
            timestamp=datetime.now(timezone.utc),
            activity_id=activity_id,
            activity_name=activity_name,
            event_type=TraceEventType(event_type),
            location=location,
            operator=operator,
            parameters=parameters,
            input_materials=_validate_all(MaterialUsage, input_materials),
            output_products=_validate_all(ProductOutput, output_products),
            equipment=equipment,
            environmental_conditions=_validate_all(EnvironmentalCondition, environmental_conditions),
        )
        lot.append_record(record)
        self._records[record.id] = record
        return record

    def get_traceability_record(self, record_id: str) -> TraceabilityRecord | None:
        return self._records.get(record_id)

    def record_material_usage(
        self,
        lot_id: str,
        activity_id: str,
        activity_name: str,
        materials: Iterable[MaterialUsage | Mapping[str, Any]],
        location: str,
        operator: str,
    ) -> TraceabilityRecord:
        return self.add_traceability_record(
            lot_id,
            activity_id=activity_id,
            activity_name=activity_name,
            event_type=TraceEventType.PROCESSED,
            location=location,
            operator=operator,
            input_materials=materials,
        )

    def record_product_output(
        self,
        lot_id: str,
        activity_id: str,
        activity_name: str,
        products: Iterable[ProductOutput | Mapping[str, Any]],
        location: str,
        operator: str,
    ) -> TraceabilityRecord:
        return self.add_traceability_record(
            lot_id,
            activity_id=activity_id,
            activity_name=activity_name,
            event_type=TraceEventType.PROCESSED,
            location=location,
            operator=operator,
            output_products=products,
        )

    # ── Genealogy ────────────────────────────────────────

    def link_parent_lot(self, child_lot_id: str, parent_lot_number: str) -> bool:
        """Add a parent edge to the child and, if the parent is known, the back edge.

        An unknown parent number is kept as a one-sided edge.
        """
        child = self._lots.get(child_lot_id)
        if not child:
            return False
        child.add_parent(parent_lot_number)

        parent = self.get_lot_by_number(parent_lot_number)
        if parent:
            parent.add_child(child.lot_number)
        else:
            logger.info("lot_parent_unregistered", child_lot_number=child.lot_number, parent_lot_number=parent_lot_number)
        return True

    def forward_trace(self, lot_number: str) -> list[LOT]:
        """Ingredient to products: the LOT itself first, then every descendant."""
        lot = self.get_lot_by_number(lot_number)
        if not lot:
            return []
        return genealogy.traverse(lot, genealogy.children, self.get_lot_by_number)

    def backward_trace(self, lot_number: str) -> list[LOT]:
        """Product to ingredients: the LOT itself first, then every ancestor."""
        lot = self.get_lot_by_number(lot_number)
        if not lot:
            return []
        return genealogy.traverse(lot, genealogy.parents, self.get_lot_by_number)

    def get_full_trace_path(self, lot_number: str) -> TracePath:
        current = self.get_lot_by_number(lot_number)
        if not current:
            return TracePath()
        return TracePath(
            backward=[lot for lot in self.backward_trace(lot_number) if lot.lot_number != lot_number],
            current=current,
            forward=[lot for lot in self.forward_trace(lot_number) if lot.lot_number != lot_number],
        )

    def find_genealogy_cycles(self) -> list[list[str]]:
        cycles = genealogy.find_cycles(self._lots.values(), self.get_lot_by_number)
        if cycles:
            logger.warning("lot_genealogy_cycles_found", count=len(cycles), cycles=cycles)
        return cycles

    # ── Status & Recall ──────────────────────────────────

    def update_lot_status(self, lot_id: str, status: LotStatus | str, reason: Optional[str] = None) -> LOT | None:
        lot = self._lots.get(lot_id)
        if not lot:
            return None
        status = LotStatus(status)

        lot.status = status
        # previous_status is read after the assignment above, so it always
        # equals new_status. Reading it before the assignment is most likely
        # what was intended.
        self.add_traceability_record(
            lot_id,
            activity_id="STATUS_CHANGE",
            activity_name="LOT status change",
            event_type=TraceEventType.PROCESSED,
            location=self._settings.SYSTEM_ACTOR,
            operator=self._settings.SYSTEM_ACTOR,
            parameters={
                "previous_status": lot.status.value,
                "new_status": status.value,
                "reason": reason,
            },
        )
        logger.info("lot_status_changed", lot_id=lot_id, lot_number=lot.lot_number, status=status.value, reason=reason)
        return lot

    def recall_lot(self, lot_number: str, reason: str) -> RecallResult:
        """Recall the LOT and everything derived from it, never its ingredients."""
        affected = self.forward_trace(lot_number)
        recalled: list[LOT] = []
        for lot in affected:
            updated = self.update_lot_status(lot.id, LotStatus.RECALLED, reason)
            if updated:
                recalled.append(updated)
        logger.warning("lot_recalled", lot_number=lot_number, affected=len(affected), reason=reason)
        return RecallResult(recalled_lots=recalled, affected_lots=affected)

    def get_lot_statistics(self) -> dict[str, int]:
        counts = {status: 0 for status in LotStatus}
        for lot in self._lots.values():
            counts[lot.status] += 1
        return {
            "total": len(self._lots),
            "in_process": counts[LotStatus.IN_PROCESS],
            "quarantine": counts[LotStatus.QUARANTINE],
            "released": counts[LotStatus.RELEASED],
            "recalled": counts[LotStatus.RECALLED],
            "disposed": counts[LotStatus.DISPOSED],
        }

    def clear(self) -> None:
        self._lots.clear()
        self._records.clear()
        self._lot_numbers.reset()

    # ── Private ──────────────────────────────────────────

    def _lot_number_exists(self, lot_number: str) -> bool:
        return self.get_lot_by_number(lot_number) is not None


def _validate_all(model: type, items: Optional[Iterable[Any]]) -> list[Any] | None:
    if items is None:
        return None
    return [model.model_validate(item) for item in items]
