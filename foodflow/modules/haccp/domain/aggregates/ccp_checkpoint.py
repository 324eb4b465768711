"""CCPCheckpoint Aggregate Root: a critical control point bound to a process activity.

Invariants:
1. One CriticalLimit per measured parameter; the first match wins
2. ``result`` always holds the latest check result only
3. CORRECTIVE_ACTION advances to PASSED once every corrective action is executed
4. ``fail`` is accepted from any state
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from foodflow.modules.haccp.domain.models import (
    CorrectiveAction,
    CriticalLimit,
    Deviation,
    HazardType,
    Measurement,
    MonitoringProcedure,
    RecordKeeping,
    VerificationProcedure,
)


class CCPStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PASSED = "PASSED"
    FAILED = "FAILED"
    CORRECTIVE_ACTION = "CORRECTIVE_ACTION"


@dataclass
class CCPCheckResult:
    id: str
    ccp_id: str
    check_time: datetime
    measurements: list[Measurement]
    passed: bool
    deviations: list[Deviation] | None = None
    corrective_actions_taken: list[str] | None = None
    verified_by: str | None = None
    notes: str | None = None


@dataclass
class CCPCheckpoint:
    id: str
    code: str
    name: str
    description: str
    process_instance_id: str
    activity_id: str
    hazard_type: HazardType = HazardType.BIOLOGICAL
    critical_limits: list[CriticalLimit] = field(default_factory=list)
    monitoring_procedure: MonitoringProcedure = field(default_factory=MonitoringProcedure)
    corrective_actions: list[CorrectiveAction] = field(default_factory=list)
    record_keeping: RecordKeeping = field(default_factory=RecordKeeping)
    verification_procedure: VerificationProcedure | None = None
    status: CCPStatus = CCPStatus.PENDING
    check_time: datetime | None = None
    checked_by: str | None = None
    result: CCPCheckResult | None = None

    # ── Commands ─────────────────────────────────────────

    def start_check(self, user_id: str) -> None:
        self.status = CCPStatus.IN_PROGRESS
        self.check_time = datetime.now(timezone.utc)
        self.checked_by = user_id

    def record_result(self, result: CCPCheckResult, *, actor: str, action_result: str) -> list[CorrectiveAction]:
        """Store ``result``; on failure run every automated corrective action.

        Returns the actions that were executed automatically.
        """
        executed: list[CorrectiveAction] = []
        if result.passed:
            self.status = CCPStatus.PASSED
        else:
            self.status = CCPStatus.CORRECTIVE_ACTION
            for action in self.corrective_actions:
                if action.automated:
                    self._stamp(action, actor, action_result)
                    executed.append(action)
            result.corrective_actions_taken = [a.description for a in executed]
        self.result = result
        return executed

    def fail(self, result: CCPCheckResult) -> None:
        self.status = CCPStatus.FAILED
        self.result = result

    def execute_corrective_action(self, action_id: str, user_id: str, result: str) -> bool:
        action = self.find_corrective_action(action_id)
        if not action:
            return False
        self._stamp(action, user_id, result)
        if self.all_actions_executed:
            self.status = CCPStatus.PASSED
        return True

    # ── Queries ──────────────────────────────────────────

    def limit_for(self, parameter: str) -> Optional[CriticalLimit]:
        return next((cl for cl in self.critical_limits if cl.parameter == parameter), None)

    def find_corrective_action(self, action_id: str) -> Optional[CorrectiveAction]:
        return next((ca for ca in self.corrective_actions if ca.id == action_id), None)

    @property
    def all_actions_executed(self) -> bool:
        return all(ca.executed for ca in self.corrective_actions)

    # ── Private ──────────────────────────────────────────

    @staticmethod
    def _stamp(action: CorrectiveAction, actor: str, result: str) -> None:
        action.executed_at = datetime.now(timezone.utc)
        action.executed_by = actor
        action.result = result
