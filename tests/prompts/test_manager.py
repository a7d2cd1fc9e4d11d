"""Tests for the template version chain."""

import json

import pytest

from promptgen.errors import (
    InvalidTemplateNameError,
    StorageIOError,
    TemplateExistsError,
    TemplateNotFoundError,
)
from promptgen.prompts.manager import TemplateManager
from promptgen.prompts.models import PromptTemplate
from promptgen.storage.templates import LocalTemplateStore

pytestmark = pytest.mark.unit


class TestCreate:
    """Tests for TemplateManager.create."""

    def test_create_starts_at_version_one(self, manager: TemplateManager) -> None:
        template = manager.create("sum", "Q: <input>")

        assert template.version == 1
        assert manager.get_latest("sum").version == 1
        assert manager.list_versions("sum") == [1]

    def test_create_strips_name(self, manager: TemplateManager) -> None:
        assert manager.create("  sum  ", "x").name == "sum"

    def test_duplicate_create_leaves_records_unchanged(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "original")
        before = store.latest_path("sum").read_text()

        with pytest.raises(TemplateExistsError):
            manager.create("sum", "replacement")

        assert store.latest_path("sum").read_text() == before
        assert store.get_version("sum", 1).content == "original"

    @pytest.mark.parametrize("name", ["", "   ", "a/b", ".hidden", "sum_v2"])
    def test_invalid_names(self, manager: TemplateManager, name: str) -> None:
        with pytest.raises(InvalidTemplateNameError):
            manager.create(name, "x")

    def test_latest_write_failure_is_tolerated(
        self, manager: TemplateManager, store: LocalTemplateStore, monkeypatch
    ) -> None:
        def broken_put_latest(template: PromptTemplate) -> None:
            raise StorageIOError("disk full")

        monkeypatch.setattr(store, "put_latest", broken_put_latest)

        template = manager.create("sum", "Q: <input>")

        assert template.version == 1
        assert store.get_version("sum", 1).content == "Q: <input>"
        assert not store.has_latest("sum")


class TestUpdate:
    """Tests for TemplateManager.update."""

    def test_update_increments_version(self, manager: TemplateManager) -> None:
        manager.create("sum", "v1")

        template = manager.update("sum", "v2")

        assert template.version == 2
        assert manager.get_latest("sum").content == "v2"

    @pytest.mark.parametrize("updates", [1, 3, 7])
    def test_n_updates(self, manager: TemplateManager, updates: int) -> None:
        manager.create("sum", "v1")
        for i in range(updates):
            manager.update("sum", f"v{i + 2}")

        assert manager.get_latest("sum").version == 1 + updates
        assert manager.list_versions("sum") == list(range(1, updates + 2))

    def test_update_unknown(self, manager: TemplateManager) -> None:
        with pytest.raises(TemplateNotFoundError):
            manager.update("nope", "x")

    def test_old_versions_unchanged(self, manager: TemplateManager) -> None:
        manager.create("sum", "Q: <input>")
        manager.update("sum", "Q2: <input>")

        assert manager.get_version("sum", 1).content == "Q: <input>"
        assert manager.get_version("sum", 2).content == "Q2: <input>"

    def test_update_without_reconcile_needs_latest(self, store: LocalTemplateStore) -> None:
        manager = TemplateManager(store, reconcile_on_load=False)
        store.put_version(PromptTemplate("sum", 1, "v1"))

        with pytest.raises(TemplateNotFoundError):
            manager.update("sum", "v2")


class TestDelete:
    """Tests for TemplateManager.delete."""

    def test_delete_after_updates(self, manager: TemplateManager) -> None:
        manager.create("sum", "v1")
        manager.update("sum", "v2")
        manager.update("sum", "v3")

        result = manager.delete("sum")

        assert len(result.removed) == 4
        assert manager.list_versions("sum") == []
        with pytest.raises(TemplateNotFoundError):
            manager.get_latest("sum")
        assert not manager.exists("sum")

    def test_delete_unknown(self, manager: TemplateManager) -> None:
        with pytest.raises(TemplateNotFoundError):
            manager.delete("nope")

    def test_recreate_after_delete(self, manager: TemplateManager) -> None:
        manager.create("sum", "v1")
        manager.update("sum", "v2")
        manager.delete("sum")

        assert manager.create("sum", "fresh").version == 1


class TestListing:
    """Tests for list_all and list_versions."""

    def test_list_all_sorted_summaries(self, manager: TemplateManager) -> None:
        manager.create("beta", "b")
        manager.create("alpha", "a")
        manager.update("beta", "b2")

        summaries = manager.list_all()

        assert [(s.name, s.version) for s in summaries] == [("alpha", 1), ("beta", 2)]

    def test_list_all_skips_bad_records(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("good", "x")
        (store.templates_dir / "bad.json").write_text("{")

        assert [s.name for s in manager.list_all()] == ["good"]

    def test_list_versions_unknown_is_empty(self, manager: TemplateManager) -> None:
        assert manager.list_versions("nope") == []


class TestReconcile:
    """Tests for latest pointer reconciliation."""

    def test_consistent(self, manager: TemplateManager) -> None:
        manager.create("sum", "v1")

        result = manager.reconcile("sum")

        assert result.action == "ok"
        assert not result.repaired

    def test_missing_pointer_rebuilt(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        manager.update("sum", "v2")
        store.latest_path("sum").unlink()

        result = manager.reconcile("sum")

        assert result.action == "rebuilt_latest"
        assert result.previous_version is None
        assert store.get_latest("sum").version == 2

    def test_stale_pointer_rebuilt(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        # Simulate a crash after writing version 2 but before the pointer
        store.put_version(PromptTemplate("sum", 2, "v2"))

        result = manager.reconcile("sum")

        assert result.action == "rebuilt_latest"
        assert result.previous_version == 1
        assert store.get_latest("sum").content == "v2"

    def test_pointer_content_drift_rebuilt(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        store.put_latest(PromptTemplate("sum", 1, "tampered"))

        assert manager.reconcile("sum").action == "rebuilt_latest"
        assert store.get_latest("sum").content == "v1"

    def test_missing_version_restored(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        manager.update("sum", "v2")
        store.version_path("sum", 2).unlink()

        result = manager.reconcile("sum")

        assert result.action == "restored_version"
        assert result.previous_version == 1
        assert store.get_version("sum", 2).content == "v2"

    def test_unknown(self, manager: TemplateManager) -> None:
        with pytest.raises(TemplateNotFoundError):
            manager.reconcile("nope")

    def test_pointer_naming_other_template(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        store.ensure_dir()
        store.latest_path("sum").write_text(
            json.dumps({"name": "other", "version": 1, "template": "x"})
        )

        with pytest.raises(StorageIOError):
            manager.reconcile("sum")

    def test_get_latest_repairs_on_load(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        store.put_version(PromptTemplate("sum", 2, "v2"))

        assert manager.get_latest("sum").version == 2

    def test_get_latest_without_reconcile_trusts_pointer(self, store: LocalTemplateStore) -> None:
        manager = TemplateManager(store, reconcile_on_load=False)
        manager.create("sum", "v1")
        store.put_version(PromptTemplate("sum", 2, "v2"))

        assert manager.get_latest("sum").version == 1

    def test_update_after_crash_continues_chain(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        store.put_version(PromptTemplate("sum", 2, "v2"))

        assert manager.update("sum", "v3").version == 3

    def test_malformed_pointer_rebuilt(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        manager.update("sum", "v2")
        store.latest_path("sum").write_text('{"name": "sum", "template": "Q')

        result = manager.reconcile("sum")

        assert result.action == "rebuilt_latest"
        assert result.previous_version is None
        assert store.get_latest("sum") == PromptTemplate("sum", 2, "v2")

    def test_malformed_pointer_repaired_on_load(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        manager.create("sum", "v1")
        store.latest_path("sum").write_text("not json")

        assert manager.get_latest("sum").content == "v1"
        assert manager.update("sum", "v2").version == 2

    def test_malformed_pointer_without_versions(
        self, manager: TemplateManager, store: LocalTemplateStore
    ) -> None:
        store.ensure_dir()
        store.latest_path("sum").write_text("not json")

        with pytest.raises(StorageIOError):
            manager.reconcile("sum")


class TestNameValidation:
    """Every entry point rejects names that would escape the store."""

    @pytest.mark.parametrize(
        "operation",
        [
            lambda m: m.update("../x", "c"),
            lambda m: m.delete("../x"),
            lambda m: m.get_latest("../x"),
            lambda m: m.get_version("../x", 1),
            lambda m: m.list_versions("../x"),
            lambda m: m.reconcile("../x"),
            lambda m: m.exists("../x"),
        ],
    )
    def test_path_traversal_rejected(self, manager: TemplateManager, operation) -> None:
        with pytest.raises(InvalidTemplateNameError):
            operation(manager)

    def test_surrounding_whitespace_ignored(self, manager: TemplateManager) -> None:
        manager.create("sum", "v1")

        assert manager.get_latest(" sum ").version == 1
        assert manager.reconcile("sum ").action == "ok"
