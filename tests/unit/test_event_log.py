from foodflow.modules.process.domain.events import ExecutionEvent, ExecutionEventType
from foodflow.modules.process.infrastructure.event_log import EventLog


def _event(pi: str, task: str | None = None, kind=ExecutionEventType.TASK_CREATED) -> ExecutionEvent:
    return ExecutionEvent(type=kind, process_instance_id=pi, task_id=task)


class TestEventLog:
    def test_preserves_order(self):
        log = EventLog()
        events = [_event("pi-1", kind=ExecutionEventType.PROCESS_STARTED), _event("pi-1", "t-1")]
        assert log.append_events(events) == 2
        assert log.get_events() == events

    def test_and_filter(self):
        log = EventLog()
        log.append(_event("pi-1", "t-1"))
        log.append(_event("pi-1", "t-2"))
        log.append(_event("pi-2", "t-1"))
        assert len(log.get_events(process_instance_id="pi-1")) == 2
        assert len(log.get_events(task_id="t-1")) == 2
        assert len(log.get_events(process_instance_id="pi-1", task_id="t-1")) == 1

    def test_returns_copy(self):
        log = EventLog()
        log.append(_event("pi-1"))
        log.get_events().clear()
        assert log.count() == 1

    def test_clear(self):
        log = EventLog()
        log.append(_event("pi-1"))
        log.clear()
        assert log.count() == 0
