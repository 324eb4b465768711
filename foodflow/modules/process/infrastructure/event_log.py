"""Append-only audit log of execution events.

Events are kept in arrival order and are never mutated or removed except by
``clear``. Nothing subscribes to the log; readers pull by correlation id.
"""
from __future__ import annotations

from foodflow.modules.process.domain.events import ExecutionEvent


class EventLog:
    def __init__(self) -> None:
        self._events: list[ExecutionEvent] = []

    def append(self, event: ExecutionEvent) -> None:
        self._events.append(event)

    def append_events(self, events: list[ExecutionEvent]) -> int:
        """Append several events in order. Returns the new log size."""
        self._events.extend(events)
        return len(self._events)

    def get_events(
        self,
        process_instance_id: str | None = None,
        task_id: str | None = None,
    ) -> list[ExecutionEvent]:
        events = self._events
        if process_instance_id:
            events = [e for e in events if e.process_instance_id == process_instance_id]
        if task_id:
            events = [e for e in events if e.task_id == task_id]
        return list(events)

    def count(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        """Drop every event. For tests and runtime resets."""
        self._events.clear()
