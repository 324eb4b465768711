"""HACCP Application Service: CCP checkpoints, measurement validation, corrective actions."""
from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from foodflow.core.config import Settings, settings as default_settings
from foodflow.modules.haccp.domain.aggregates.ccp_checkpoint import (
    CCPCheckpoint,
    CCPCheckResult,
    CCPStatus,
)
from foodflow.modules.haccp.domain.critical_limits import classify_severity, evaluate_limit
from foodflow.modules.haccp.domain.errors import CheckpointNotFound
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

logger = structlog.get_logger(__name__)

MeasurementInput = Measurement | Mapping[str, Any]


@dataclass(frozen=True)
class MeasurementValidation:
    passed: bool
    deviations: list[Deviation]
    # coerced inputs in order, each carrying its ``within_limit`` flag
    measurements: list[Measurement]


class HACCPService:
    """In-memory CCP store plus a flat store of every check result ever produced."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings
        self._checkpoints: dict[str, CCPCheckpoint] = {}
        self._check_results: dict[str, CCPCheckResult] = {}

    # ── Checkpoints ──────────────────────────────────────

    def create_ccp_checkpoint(
        self,
        process_instance_id: str,
        activity_id: str,
        ccp_data: Optional[Mapping[str, Any]] = None,
    ) -> CCPCheckpoint:
        """Create a PENDING checkpoint; every field missing from ``ccp_data`` gets a default.

        ``ccp_data`` values may be models or plain dicts/lists of dicts.
        """
        data = dict(ccp_data or {})
        verification = data.get("verification_procedure")
        checkpoint = CCPCheckpoint(
            id=str(uuid.uuid4()),
            code=data.get("code") or f"{self._settings.CCP_CODE_PREFIX}-{len(self._checkpoints) + 1}",
            name=data.get("name") or "Critical Control Point",
            description=data.get("description") or "",
            process_instance_id=process_instance_id,
            activity_id=activity_id,
            hazard_type=HazardType(data.get("hazard_type") or HazardType.BIOLOGICAL),
            critical_limits=[CriticalLimit.model_validate(cl) for cl in data.get("critical_limits") or []],
            monitoring_procedure=MonitoringProcedure.model_validate(data.get("monitoring_procedure") or {}),
            corrective_actions=[CorrectiveAction.model_validate(ca) for ca in data.get("corrective_actions") or []],
            record_keeping=RecordKeeping.model_validate(data.get("record_keeping") or {}),
            verification_procedure=VerificationProcedure.model_validate(verification) if verification else None,
        )
        self._checkpoints[checkpoint.id] = checkpoint
        logger.info(
            "ccp_checkpoint_created",
            ccp_id=checkpoint.id,
            code=checkpoint.code,
            proc_inst_id=process_instance_id,
            activity_id=activity_id,
        )
        return checkpoint

    def get_ccp_checkpoint(self, ccp_id: str) -> CCPCheckpoint | None:
        return self._checkpoints.get(ccp_id)

    def get_ccp_checkpoints_by_process(self, process_instance_id: str) -> list[CCPCheckpoint]:
        return [c for c in self._checkpoints.values() if c.process_instance_id == process_instance_id]

    def start_ccp_check(self, ccp_id: str, user_id: str) -> CCPCheckpoint | None:
        checkpoint = self._checkpoints.get(ccp_id)
        if not checkpoint:
            return None
        checkpoint.start_check(user_id)
        logger.info("ccp_check_started", ccp_id=ccp_id, checked_by=user_id)
        return checkpoint

    # ── Validation ───────────────────────────────────────

    def validate_measurement(self, ccp_id: str, measurements: Iterable[MeasurementInput]) -> MeasurementValidation:
        """Check measurements against the checkpoint's critical limits.

        Each measurement's ``within_limit`` flag is updated in place. Dict inputs
        are coerced to Measurement copies, returned in ``measurements`` in input
        order. Measurements whose parameter has no critical limit are skipped.

        Raises:
            CheckpointNotFound: ``ccp_id`` is unknown.
        """
        checkpoint = self._checkpoints.get(ccp_id)
        if not checkpoint:
            raise CheckpointNotFound(ccp_id)
        return self._validate(checkpoint, self._coerce(measurements))

    def complete_ccp_check(
        self,
        ccp_id: str,
        measurements: Iterable[MeasurementInput],
        user_id: str,
        notes: Optional[str] = None,
    ) -> CCPCheckResult:
        checkpoint = self._checkpoints.get(ccp_id)
        if not checkpoint:
            raise CheckpointNotFound(ccp_id)

        coerced = self._coerce(measurements)
        validation = self._validate(checkpoint, coerced)
        result = CCPCheckResult(
            id=str(uuid.uuid4()),
            ccp_id=ccp_id,
            check_time=datetime.now(timezone.utc),
            measurements=coerced,
            passed=validation.passed,
            deviations=validation.deviations,
            verified_by=user_id,
            notes=notes,
        )
        executed = checkpoint.record_result(
            result,
            actor=self._settings.SYSTEM_ACTOR,
            action_result=self._settings.AUTO_ACTION_RESULT,
        )
        self._check_results[result.id] = result

        logger.info(
            "ccp_check_completed",
            ccp_id=ccp_id,
            passed=result.passed,
            deviations=len(validation.deviations),
            status=checkpoint.status.value,
        )
        for action in executed:
            logger.info("corrective_action_auto_executed", ccp_id=ccp_id, action_id=action.id)
        return result

    def fail_ccp_check(self, ccp_id: str, reason: str) -> CCPCheckpoint | None:
        checkpoint = self._checkpoints.get(ccp_id)
        if not checkpoint:
            return None
        result = CCPCheckResult(
            id=str(uuid.uuid4()),
            ccp_id=ccp_id,
            check_time=datetime.now(timezone.utc),
            measurements=[],
            passed=False,
            notes=reason,
        )
        checkpoint.fail(result)
        self._check_results[result.id] = result
        logger.warning("ccp_check_failed", ccp_id=ccp_id, reason=reason)
        return checkpoint

    def execute_corrective_action(self, ccp_id: str, action_id: str, user_id: str, result: str) -> bool:
        checkpoint = self._checkpoints.get(ccp_id)
        if not checkpoint:
            return False
        if not checkpoint.execute_corrective_action(action_id, user_id, result):
            return False
        logger.info(
            "corrective_action_executed",
            ccp_id=ccp_id,
            action_id=action_id,
            executed_by=user_id,
            status=checkpoint.status.value,
        )
        return True

    # ── Results & Statistics ─────────────────────────────

    def get_check_result(self, result_id: str) -> CCPCheckResult | None:
        return self._check_results.get(result_id)

    def get_check_results(self, ccp_id: str) -> list[CCPCheckResult]:
        return [r for r in self._check_results.values() if r.ccp_id == ccp_id]

    def get_ccp_statistics(self, process_instance_id: Optional[str] = None) -> dict[str, Any]:
        checkpoints = list(self._checkpoints.values())
        if process_instance_id:
            checkpoints = [c for c in checkpoints if c.process_instance_id == process_instance_id]

        counts = {status: 0 for status in CCPStatus}
        for checkpoint in checkpoints:
            counts[checkpoint.status] += 1
        passed = counts[CCPStatus.PASSED]
        failed = counts[CCPStatus.FAILED]
        return {
            "total": len(checkpoints),
            "pending": counts[CCPStatus.PENDING],
            "in_progress": counts[CCPStatus.IN_PROGRESS],
            "passed": passed,
            "failed": failed,
            "corrective_action": counts[CCPStatus.CORRECTIVE_ACTION],
            "pass_rate": passed / (passed + failed) * 100 if passed + failed else 0.0,
        }

    def clear(self) -> None:
        self._checkpoints.clear()
        self._check_results.clear()

    # ── Private ──────────────────────────────────────────

    @staticmethod
    def _coerce(measurements: Iterable[MeasurementInput]) -> list[Measurement]:
        return [Measurement.model_validate(m) for m in measurements]

    @staticmethod
    def _validate(checkpoint: CCPCheckpoint, measurements: list[Measurement]) -> MeasurementValidation:
        deviations: list[Deviation] = []
        for measurement in measurements:
            limit = checkpoint.limit_for(measurement.parameter)
            if not limit:
                continue

            evaluation = evaluate_limit(limit, measurement.value)
            measurement.within_limit = evaluation.within_limit
            if evaluation.within_limit:
                continue

            deviations.append(Deviation(
                parameter=measurement.parameter,
                expected_value=evaluation.expected_value,
                actual_value=measurement.value,
                difference=evaluation.deviation,
                severity=classify_severity(evaluation.deviation, evaluation.expected_value),
                description=(
                    f"{measurement.parameter} is outside its critical limit: "
                    f"{measurement.value}{measurement.unit} (expected {evaluation.expected_value}{limit.unit})"
                ),
            ))
        return MeasurementValidation(passed=not deviations, deviations=deviations, measurements=measurements)
