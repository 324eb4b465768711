import pytest
from pydantic import ValidationError

from foodflow.core.config import Settings
from foodflow.main import build_runtime


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.DEFAULT_TASK_PRIORITY == 50
        assert s.STRICT_TRANSITIONS is False
        assert s.LOT_SEQUENCE_STRATEGY == "random"
        assert s.LOT_COLLISION_RETRIES == 0
        assert s.SYSTEM_ACTOR == "SYSTEM"

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("FOODFLOW_STRICT_TRANSITIONS", "true")
        monkeypatch.setenv("FOODFLOW_DEFAULT_TASK_PRIORITY", "70")
        s = Settings()
        assert s.STRICT_TRANSITIONS is True
        assert s.DEFAULT_TASK_PRIORITY == 70

    def test_unknown_lot_strategy_rejected(self):
        with pytest.raises(ValidationError):
            Settings(LOT_SEQUENCE_STRATEGY="hourly")


class TestRuntime:
    def test_build_runtime_threads_settings(self):
        runtime = build_runtime(Settings(DEFAULT_TASK_PRIORITY=10), configure=False)
        runtime.engine.deploy("<xml/>", "Bread", "bread")
        pi = runtime.engine.start_process("bread")
        task = runtime.engine.task_service.create_task(pi.id, pi.process_definition_id, "Task_Mixing", "Mixing")
        assert task.priority == 10
        assert runtime.settings.DEFAULT_TASK_PRIORITY == 10

    def test_runtimes_are_independent(self):
        first = build_runtime(configure=False)
        second = build_runtime(configure=False)
        first.engine.deploy("<xml/>", "Bread", "bread")
        assert second.engine.get_all_process_definitions() == []

    def test_clear_resets_every_service(self):
        runtime = build_runtime(configure=False)
        runtime.engine.deploy("<xml/>", "Bread", "bread")
        runtime.haccp.create_ccp_checkpoint("pi-1", "CCP_Baking")
        runtime.lots.create_lot("FLOUR", "Flour", "pi-1", 1, "kg")
        runtime.clear()
        assert runtime.engine.get_statistics()["process_definitions"] == 0
        assert runtime.haccp.get_ccp_statistics()["total"] == 0
        assert runtime.lots.get_lot_statistics()["total"] == 0
