"""Unit tests for HACCPService: checkpoints, validation, corrective actions."""
import pytest

from foodflow.core.config import Settings
from foodflow.modules.haccp.application.haccp_service import HACCPService
from foodflow.modules.haccp.domain.aggregates.ccp_checkpoint import CCPStatus
from foodflow.modules.haccp.domain.errors import CheckpointNotFound
from foodflow.modules.haccp.domain.models import HazardType, Measurement, Severity

BAKING_LIMIT = {"parameter": "temp", "unit": "C", "operator": "BETWEEN", "min_value": 180, "max_value": 200}


def _make(svc: HACCPService, **data):
    data.setdefault("critical_limits", [BAKING_LIMIT])
    return svc.create_ccp_checkpoint("pi-1", "CCP_Baking", data)


class TestCreate:
    def test_defaults(self):
        svc = HACCPService()
        ccp = svc.create_ccp_checkpoint("pi-1", "CCP_Baking")
        assert ccp.code == "CCP-1"
        assert ccp.name == "Critical Control Point"
        assert ccp.hazard_type == HazardType.BIOLOGICAL
        assert ccp.status == CCPStatus.PENDING
        assert ccp.critical_limits == []
        assert ccp.record_keeping.retention_period == 365
        assert ccp.monitoring_procedure.auto_monitoring is False
        assert ccp.verification_procedure is None

    def test_codes_are_numbered(self):
        svc = HACCPService(Settings(CCP_CODE_PREFIX="HACCP"))
        svc.create_ccp_checkpoint("pi-1", "a")
        assert svc.create_ccp_checkpoint("pi-1", "b").code == "HACCP-2"

    def test_explicit_fields_are_coerced(self):
        svc = HACCPService()
        ccp = _make(
            svc,
            code="CCP-B",
            hazard_type="PHYSICAL",
            corrective_actions=[{"description": "Re-bake", "automated": True}],
            verification_procedure={"method": "Thermometer calibration"},
        )
        assert ccp.code == "CCP-B"
        assert ccp.hazard_type == HazardType.PHYSICAL
        assert ccp.critical_limits[0].max_value == 200
        assert ccp.corrective_actions[0].id
        assert ccp.verification_procedure.method == "Thermometer calibration"

    def test_lookup_by_process(self):
        svc = HACCPService()
        a = _make(svc)
        svc.create_ccp_checkpoint("pi-2", "x")
        assert svc.get_ccp_checkpoint(a.id) is a
        assert svc.get_ccp_checkpoints_by_process("pi-1") == [a]


# ── Validation ───────────────────────────────────────────

class TestValidateMeasurement:
    def test_within_limits_passes(self):
        svc = HACCPService()
        ccp = _make(svc)
        m = Measurement(parameter="temp", value=190, unit="C")
        outcome = svc.validate_measurement(ccp.id, [m])
        assert outcome.passed is True
        assert outcome.deviations == []
        assert m.within_limit is True

    def test_out_of_limit_flags_measurement_in_place(self):
        svc = HACCPService()
        ccp = _make(svc)
        m = Measurement(parameter="temp", value=210, unit="C")
        outcome = svc.validate_measurement(ccp.id, [m])
        assert m.within_limit is False
        assert outcome.passed is False
        deviation = outcome.deviations[0]
        assert deviation.expected_value == 190
        assert deviation.difference == 10
        assert deviation.severity == Severity.MEDIUM

    def test_dict_inputs_are_returned_with_flags(self):
        svc = HACCPService()
        ccp = _make(svc)
        outcome = svc.validate_measurement(ccp.id, [
            {"parameter": "temp", "value": 210, "unit": "C"},
            {"parameter": "temp", "value": 185, "unit": "C"},
        ])
        assert outcome.passed is False
        assert [m.value for m in outcome.measurements] == [210, 185]
        assert [m.within_limit for m in outcome.measurements] == [False, True]

    def test_measurement_instances_are_returned_as_is(self):
        svc = HACCPService()
        ccp = _make(svc)
        m = Measurement(parameter="temp", value=170, unit="C")
        outcome = svc.validate_measurement(ccp.id, [m])
        assert outcome.measurements[0] is m
        assert m.within_limit is False

    def test_unmatched_parameter_is_ignored(self):
        svc = HACCPService()
        ccp = _make(svc)
        outcome = svc.validate_measurement(ccp.id, [{"parameter": "humidity", "value": 999}])
        assert outcome.passed is True

    def test_unknown_checkpoint_raises(self):
        with pytest.raises(CheckpointNotFound):
            HACCPService().validate_measurement("missing", [])


# ── Check Lifecycle ──────────────────────────────────────

class TestCheckLifecycle:
    def test_start_check(self):
        svc = HACCPService()
        ccp = _make(svc)
        svc.start_ccp_check(ccp.id, "alice")
        assert ccp.status == CCPStatus.IN_PROGRESS
        assert ccp.checked_by == "alice"
        assert ccp.check_time is not None
        assert svc.start_ccp_check("missing", "alice") is None

    def test_passing_check(self):
        svc = HACCPService()
        ccp = _make(svc)
        result = svc.complete_ccp_check(ccp.id, [{"parameter": "temp", "value": 185}], "alice", "ok")
        assert result.passed is True
        assert ccp.status == CCPStatus.PASSED
        assert ccp.result is result
        assert result.verified_by == "alice"
        assert result.notes == "ok"

    def test_failing_check_runs_automated_actions_only(self):
        svc = HACCPService()
        ccp = _make(
            svc,
            corrective_actions=[
                {"id": "auto", "description": "Divert batch", "automated": True},
                {"id": "manual", "description": "Inspect oven"},
            ],
        )
        result = svc.complete_ccp_check(ccp.id, [{"parameter": "temp", "value": 210}], "alice")
        assert result.passed is False
        assert ccp.status == CCPStatus.CORRECTIVE_ACTION
        assert result.corrective_actions_taken == ["Divert batch"]
        auto, manual = ccp.corrective_actions
        assert auto.executed_by == "SYSTEM"
        assert auto.result == "Executed automatically"
        assert manual.executed_at is None

    def test_complete_unknown_raises(self):
        with pytest.raises(CheckpointNotFound):
            HACCPService().complete_ccp_check("missing", [], "alice")

    def test_result_history_kept_in_flat_store(self):
        svc = HACCPService()
        ccp = _make(svc)
        first = svc.complete_ccp_check(ccp.id, [{"parameter": "temp", "value": 210}], "alice")
        second = svc.complete_ccp_check(ccp.id, [{"parameter": "temp", "value": 190}], "alice")
        assert ccp.result is second
        assert svc.get_check_results(ccp.id) == [first, second]
        assert svc.get_check_result(first.id) is first

    def test_fail_check(self):
        svc = HACCPService()
        ccp = _make(svc)
        svc.fail_ccp_check(ccp.id, "probe broken")
        assert ccp.status == CCPStatus.FAILED
        assert ccp.result.measurements == []
        assert ccp.result.notes == "probe broken"
        assert svc.fail_ccp_check("missing", "x") is None


class TestCorrectiveActions:
    def test_all_actions_executed_advances_to_passed(self):
        svc = HACCPService()
        ccp = _make(
            svc,
            corrective_actions=[
                {"id": "auto", "description": "Divert batch", "automated": True},
                {"id": "manual", "description": "Inspect oven"},
            ],
        )
        svc.complete_ccp_check(ccp.id, [{"parameter": "temp", "value": 230}], "alice")
        assert svc.execute_corrective_action(ccp.id, "manual", "bob", "Thermostat replaced") is True
        assert ccp.status == CCPStatus.PASSED
        assert ccp.corrective_actions[1].executed_by == "bob"

    def test_unknown_ids_return_false(self):
        svc = HACCPService()
        ccp = _make(svc)
        assert svc.execute_corrective_action("missing", "a", "bob", "x") is False
        assert svc.execute_corrective_action(ccp.id, "missing", "bob", "x") is False


class TestStatistics:
    def test_pass_rate(self):
        svc = HACCPService()
        a, b, c = _make(svc), _make(svc), _make(svc)
        svc.complete_ccp_check(a.id, [{"parameter": "temp", "value": 190}], "alice")
        svc.fail_ccp_check(b.id, "x")
        stats = svc.get_ccp_statistics()
        assert stats["total"] == 3
        assert stats["passed"] == 1
        assert stats["failed"] == 1
        assert stats["pending"] == 1
        assert stats["pass_rate"] == 50.0

    def test_pass_rate_zero_without_outcomes(self):
        svc = HACCPService()
        _make(svc)
        assert svc.get_ccp_statistics()["pass_rate"] == 0.0
        assert HACCPService().get_ccp_statistics()["pass_rate"] == 0.0

    def test_filter_by_process(self):
        svc = HACCPService()
        _make(svc)
        svc.create_ccp_checkpoint("pi-2", "x")
        assert svc.get_ccp_statistics("pi-2")["total"] == 1

    def test_clear(self):
        svc = HACCPService()
        ccp = _make(svc)
        svc.complete_ccp_check(ccp.id, [], "alice")
        svc.clear()
        assert svc.get_ccp_checkpoint(ccp.id) is None
        assert svc.get_check_results(ccp.id) == []
