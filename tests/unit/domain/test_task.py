"""Unit tests for the Task Aggregate Root."""
from datetime import datetime, timezone

import pytest

from foodflow.modules.process.domain.aggregates.task import Task, TaskStatus
from foodflow.modules.process.domain.errors import TaskNotAssigned, TaskNotCandidate
from foodflow.modules.process.domain.events import ExecutionEventType
from foodflow.modules.process.domain.variables import VariableScope, VariableType


def _make(
    *,
    status: TaskStatus = TaskStatus.PENDING,
    assignee: str | None = None,
    candidate_users: list[str] | None = None,
) -> Task:
    return Task(
        id="t-1",
        name="Baking check",
        process_instance_id="pi-1",
        process_definition_id="pd-1",
        task_definition_key="CCP_Baking",
        status=status,
        create_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        priority=50,
        assignee=assignee,
        candidate_users=list(candidate_users or []),
    )


class TestFactory:
    def test_create_defaults(self):
        task = Task.create(
            id="t-1",
            process_instance_id="pi-1",
            process_definition_id="pd-1",
            task_definition_key="CCP_Baking",
            name="Baking check",
        )
        assert task.status == TaskStatus.PENDING
        assert task.priority == 50
        assert task.assignee is None
        events = task.collect_events()
        assert [e.type for e in events] == [ExecutionEventType.TASK_CREATED]
        assert events[0].task_id == "t-1"
        assert events[0].activity_id == "CCP_Baking"


# ── Assignment ───────────────────────────────────────────

class TestAssignment:
    def test_assign_ignores_candidates(self):
        task = _make(candidate_users=["bob"])
        task.assign("alice")
        assert task.assignee == "alice"
        assert task.status == TaskStatus.ASSIGNED

    def test_claim_without_candidates(self):
        task = _make()
        task.claim("alice")
        assert task.assignee == "alice"

    def test_claim_by_candidate(self):
        task = _make(candidate_users=["alice", "bob"])
        task.claim("bob")
        assert task.assignee == "bob"

    def test_claim_by_non_candidate_raises(self):
        task = _make(candidate_users=["bob"])
        with pytest.raises(TaskNotCandidate) as exc:
            task.claim("alice")
        assert exc.value.code == "TASK_NOT_CANDIDATE"
        assert task.assignee is None
        assert task.status == TaskStatus.PENDING

    def test_reclaim_by_current_assignee_is_allowed(self):
        task = _make(status=TaskStatus.ASSIGNED, assignee="alice", candidate_users=["bob"])
        task.claim("alice")
        assert task.assignee == "alice"

    def test_unassign_returns_to_pending(self):
        task = _make(status=TaskStatus.ASSIGNED, assignee="alice")
        task.unassign()
        assert task.assignee is None
        assert task.status == TaskStatus.PENDING

    def test_candidates_are_idempotent(self):
        task = _make()
        task.add_candidate_user("alice")
        task.add_candidate_user("alice")
        task.add_candidate_group("bakers")
        task.add_candidate_group("bakers")
        assert task.candidate_users == ["alice"]
        assert task.candidate_groups == ["bakers"]


# ── Completion ───────────────────────────────────────────

class TestCompletion:
    @pytest.mark.parametrize("status", list(TaskStatus))
    def test_complete_without_assignee_raises_in_any_state(self, status):
        task = _make(status=status)
        with pytest.raises(TaskNotAssigned):
            task.complete()
        assert task.status == status

    def test_complete_merges_task_scoped_variables(self):
        task = _make(status=TaskStatus.ASSIGNED, assignee="alice")
        task.set_variable("oven", "A")
        task.complete({"core_temp": 96, "ok": True})
        assert task.status == TaskStatus.COMPLETED
        assert task.variable_values() == {"oven": "A", "core_temp": 96, "ok": True}
        assert task.variables["core_temp"].scope == VariableScope.TASK
        assert task.variables["core_temp"].task_id == "t-1"
        assert task.variables["ok"].type == VariableType.BOOLEAN

    def test_complete_records_event_with_assignee(self):
        task = _make(status=TaskStatus.ASSIGNED, assignee="alice")
        task.complete()
        events = task.collect_events()
        assert events[-1].type == ExecutionEventType.TASK_COMPLETED
        assert events[-1].user_id == "alice"
