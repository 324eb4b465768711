from foodflow.modules.process.application.definition_service import DefinitionService


class TestDeploy:
    def test_versions_increase_per_key(self):
        svc = DefinitionService()
        versions = [svc.deploy("<xml/>", "Bread", "bread").version for _ in range(3)]
        assert versions == [1, 2, 3]

    def test_keys_are_versioned_independently(self):
        svc = DefinitionService()
        svc.deploy("<xml/>", "Bread", "bread")
        svc.deploy("<xml/>", "Bread", "bread")
        assert svc.deploy("<xml/>", "Milk", "milk").version == 1

    def test_xml_is_stored_verbatim(self):
        svc = DefinitionService()
        definition = svc.deploy("not even xml", "Bread", "bread", category="MANUFACTURING")
        assert definition.bpmn_xml == "not even xml"
        assert definition.category == "MANUFACTURING"
        assert definition.suspended is False
        assert definition.startable_in_tasklist is True

    def test_version_after_deleting_latest(self):
        svc = DefinitionService()
        svc.deploy("<xml/>", "Bread", "bread")
        latest = svc.deploy("<xml/>", "Bread", "bread")
        svc.delete(latest.id)
        assert svc.deploy("<xml/>", "Bread", "bread").version == 2


class TestLookup:
    def test_latest_by_key(self):
        svc = DefinitionService()
        svc.deploy("v1", "Bread", "bread")
        svc.deploy("v2", "Bread", "bread")
        latest = svc.get_latest_by_key("bread")
        assert latest.version == 2
        assert latest.bpmn_xml == "v2"

    def test_unknown_key_returns_none(self):
        assert DefinitionService().get_latest_by_key("nope") is None

    def test_get_versions_sorted(self):
        svc = DefinitionService()
        for _ in range(3):
            svc.deploy("<xml/>", "Bread", "bread")
        assert [d.version for d in svc.get_versions("bread")] == [1, 2, 3]

    def test_delete_unknown_returns_false(self):
        assert DefinitionService().delete("missing") is False


class TestSuspension:
    def test_suspend_and_activate(self):
        svc = DefinitionService()
        definition = svc.deploy("<xml/>", "Bread", "bread")
        assert svc.suspend(definition.id).suspended is True
        assert svc.activate(definition.id).suspended is False

    def test_suspend_unknown_returns_none(self):
        assert DefinitionService().suspend("missing") is None
