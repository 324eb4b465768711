"""Unit tests for the ProcessInstance Aggregate Root.

Pure domain logic, no I/O. Covers the factory, permissive and strict
transitions, variables, activity markers and event collection.
"""
from datetime import datetime, timezone

import pytest

from foodflow.modules.process.domain.aggregates.process_instance import ProcessInstance, ProcessStatus
from foodflow.modules.process.domain.errors import InvalidStateTransition
from foodflow.modules.process.domain.events import ExecutionEventType
from foodflow.modules.process.domain.variables import VariableType


def _make(*, status: ProcessStatus = ProcessStatus.ACTIVE) -> ProcessInstance:
    """Instance in a given state, bypassing factory events."""
    return ProcessInstance(
        id="pi-1",
        process_definition_id="pd-1",
        process_definition_key="bread",
        process_definition_name="Bread",
        status=status,
        start_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        suspended=status == ProcessStatus.SUSPENDED,
    )


# ── Factory ──────────────────────────────────────────────

class TestFactory:
    def test_create_starts_active(self):
        pi = ProcessInstance.create(
            id="pi-1",
            process_definition_id="pd-1",
            process_definition_key="bread",
            process_definition_name="Bread",
            business_key="LOT-1",
            start_user_id="alice",
        )
        assert pi.status == ProcessStatus.ACTIVE
        assert pi.suspended is False
        assert pi.end_time is None and pi.duration is None
        assert pi.current_activities == []
        assert pi.business_key == "LOT-1"
        assert pi.start_user_id == "alice"

    def test_create_infers_variable_types(self):
        pi = ProcessInstance.create(
            id="pi-1",
            process_definition_id="pd-1",
            process_definition_key="bread",
            process_definition_name="Bread",
            variables={"batch": 100, "temp": 190.5, "product": "bread"},
        )
        assert pi.variables["batch"].type == VariableType.INTEGER
        assert pi.variables["temp"].type == VariableType.DOUBLE
        assert pi.variables["product"].type == VariableType.STRING
        assert pi.variables["batch"].process_instance_id == "pi-1"

    def test_create_records_started_event(self):
        pi = ProcessInstance.create(
            id="pi-1",
            process_definition_id="pd-1",
            process_definition_key="bread",
            process_definition_name="Bread",
            start_user_id="alice",
        )
        events = pi.collect_events()
        assert len(events) == 1
        assert events[0].type == ExecutionEventType.PROCESS_STARTED
        assert events[0].user_id == "alice"
        assert pi.collect_events() == []


# ── Transitions ──────────────────────────────────────────

class TestTransitions:
    def test_suspend_and_resume(self):
        pi = _make()
        pi.suspend()
        assert pi.status == ProcessStatus.SUSPENDED
        assert pi.suspended is True
        assert pi.resume() is True
        assert pi.status == ProcessStatus.ACTIVE
        assert pi.suspended is False

    def test_resume_active_is_noop(self):
        pi = _make()
        assert pi.resume() is False
        assert pi.status == ProcessStatus.ACTIVE

    def test_complete_sets_end_time_and_duration(self):
        pi = _make()
        pi.complete()
        assert pi.status == ProcessStatus.COMPLETED
        assert pi.end_time is not None
        expected = int((pi.end_time - pi.start_time).total_seconds() * 1000)
        assert abs(pi.duration - expected) <= 1

    def test_terminate_carries_reason(self):
        pi = _make()
        pi.terminate("contamination")
        events = pi.collect_events()
        assert pi.status == ProcessStatus.TERMINATED
        assert events[-1].type == ExecutionEventType.PROCESS_TERMINATED
        assert events[-1].message == "contamination"

    def test_terminate_suspended_clears_flag(self):
        pi = _make(status=ProcessStatus.SUSPENDED)
        pi.terminate()
        assert pi.suspended is False

    def test_permissive_suspend_of_completed_instance(self):
        pi = _make(status=ProcessStatus.COMPLETED)
        pi.suspend()
        assert pi.status == ProcessStatus.SUSPENDED

    def test_permissive_terminate_of_completed_instance(self):
        pi = _make(status=ProcessStatus.COMPLETED)
        pi.terminate()
        assert pi.status == ProcessStatus.TERMINATED

    @pytest.mark.parametrize("status", [ProcessStatus.COMPLETED, ProcessStatus.TERMINATED])
    def test_strict_rejects_transitions_out_of_terminal(self, status):
        pi = _make(status=status)
        with pytest.raises(InvalidStateTransition) as exc:
            pi.suspend(strict=True)
        assert exc.value.code == "INVALID_STATE_TRANSITION"
        assert pi.status == status

    def test_strict_resume_of_active_raises(self):
        with pytest.raises(InvalidStateTransition):
            _make().resume(strict=True)

    def test_can_transition_to(self):
        pi = _make()
        assert pi.can_transition_to(ProcessStatus.SUSPENDED)
        assert not pi.can_transition_to(ProcessStatus.ACTIVE)
        assert _make(status=ProcessStatus.COMPLETED).is_terminal


# ── Variables & Activities ───────────────────────────────

class TestVariablesAndActivities:
    def test_set_variable_with_explicit_type(self):
        pi = _make()
        pi.set_variable("weight", 5, VariableType.LONG)
        assert pi.variables["weight"].type == VariableType.LONG

    def test_variables_remain_writable_after_termination(self):
        pi = _make(status=ProcessStatus.TERMINATED)
        pi.set_variable("note", "late entry")
        assert pi.variable_values() == {"note": "late entry"}

    def test_activities_have_set_semantics(self):
        pi = _make()
        assert pi.add_activity("CCP_Baking") is True
        assert pi.add_activity("CCP_Baking") is False
        assert pi.current_activities == ["CCP_Baking"]
        assert pi.remove_activity("CCP_Baking") is True
        assert pi.remove_activity("CCP_Baking") is False
        assert pi.current_activities == []

    def test_activity_changes_record_events(self):
        pi = _make()
        pi.add_activity("CCP_Baking")
        pi.add_activity("CCP_Baking")
        pi.remove_activity("CCP_Baking")
        types = [e.type for e in pi.collect_events()]
        assert types == [ExecutionEventType.ACTIVITY_STARTED, ExecutionEventType.ACTIVITY_COMPLETED]
