"""Tests for taskflow.lib stores: memory, cached rules and board file."""

import pytest
import yaml
from unittest.mock import MagicMock

from taskflow.lib.boardfile import BoardFileError, load_board, save_board
from taskflow.lib.errors import MoveFailed, StoreUnavailable
from taskflow.lib.memory import MemoryStore
from taskflow.lib.stores import CachedRuleStore
from taskflow.lib.types import HistoryEntry, RequiredItem, SubtaskKind, Task, WorkflowRule
from taskflow.lib.validate import ValidationError


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestCachedRuleStore:
    """Tests for CachedRuleStore."""

    @pytest.fixture
    def inner(self):
        inner = MagicMock()
        inner.list_active_automations.return_value = ["rule"]
        return inner

    def test_cached_within_ttl(self, inner):
        clock = FakeClock()
        cached = CachedRuleStore(inner, ttl=5.0, clock=clock)

        cached.list_active_automations("status_change")
        clock.now += 4.9
        assert cached.list_active_automations("status_change") == ["rule"]

        assert inner.list_active_automations.call_count == 1

    def test_refreshed_after_ttl(self, inner):
        clock = FakeClock()
        cached = CachedRuleStore(inner, ttl=5.0, clock=clock)

        cached.list_active_automations("status_change")
        clock.now += 5.0
        cached.list_active_automations("status_change")

        assert inner.list_active_automations.call_count == 2

    def test_cached_per_trigger(self, inner):
        cached = CachedRuleStore(inner, clock=FakeClock())
        cached.list_active_automations("status_change")
        cached.list_active_automations("task_created")
        assert inner.list_active_automations.call_count == 2

    def test_zero_ttl_never_caches(self, inner):
        cached = CachedRuleStore(inner, ttl=0, clock=FakeClock())
        cached.list_active_automations("status_change")
        cached.list_active_automations("status_change")
        assert inner.list_active_automations.call_count == 2

    def test_failure_not_cached(self, inner):
        inner.list_active_automations.side_effect = [StoreUnavailable("list automations", "down"), ["rule"]]
        cached = CachedRuleStore(inner, clock=FakeClock())

        with pytest.raises(StoreUnavailable):
            cached.list_active_automations("status_change")
        assert cached.list_active_automations("status_change") == ["rule"]

    def test_invalidate(self, inner):
        cached = CachedRuleStore(inner, clock=FakeClock())
        cached.list_active_automations("status_change")
        cached.invalidate()
        cached.list_active_automations("status_change")
        assert inner.list_active_automations.call_count == 2

    def test_workflow_rules_pass_through(self, inner):
        cached = CachedRuleStore(inner, clock=FakeClock())
        cached.get_workflow_rule("video", "review")
        cached.get_workflow_rule("video", "review")
        assert inner.get_workflow_rule.call_count == 2


class TestMemoryStore:
    """Tests for MemoryStore."""

    @pytest.fixture
    def store(self):
        store = MemoryStore(destinations=["archive"])
        store.add_task(Task(id="t1", type="video", status="todo", assignee_ids=["dev"]))
        return store

    def test_snapshots_are_copies(self, store):
        task = store.get("t1")
        task.assignee_ids.append("intruder")
        assert store.get("t1").assignee_ids == ["dev"]

    def test_missing_task(self, store):
        with pytest.raises(StoreUnavailable):
            store.get("nope")

    def test_update_rejects_unknown_fields(self, store):
        with pytest.raises(StoreUnavailable):
            store.update("t1", {"priority": "high"})

    def test_append_history(self, store):
        store.append_history("t1", HistoryEntry("doing", ["dev"], "2025-01-01T00:00:00+00:00", user_id="dev"))
        store.append_history("t1", HistoryEntry("review", [], "2025-01-02T00:00:00+00:00", is_automated=True))
        history = store.get("t1").status_history
        assert [h.status for h in history] == ["doing", "review"]
        assert history[0].user_id == "dev"
        assert history[1].is_automated

    def test_subtask_ids_unique(self, store):
        store.insert_many([{"id": "st-2", "task_id": "t1", "title": "Preset"}])
        created = store.insert_many([
            {"task_id": "t1", "title": "A"},
            {"task_id": "t1", "title": "B"},
        ])
        ids = [s.id for s in created]
        assert "st-2" not in ids
        assert len(set(ids)) == 2

    def test_delete_missing_subtask(self, store):
        with pytest.raises(StoreUnavailable):
            store.delete("st-404")

    def test_upsert_workflow_rule_replaces(self, store):
        store.upsert_workflow_rule(WorkflowRule("video", "review", [RequiredItem("A")]))
        store.upsert_workflow_rule(WorkflowRule("video", "review", [RequiredItem("B", SubtaskKind.TEXT)]))

        rule = store.get_workflow_rule("video", "review")
        assert [r.title for r in rule.required_subtasks] == ["B"]
        assert len(store.list_workflow_rules()) == 1

    def test_upsert_validates(self, store):
        with pytest.raises(ValidationError):
            store.upsert_workflow_rule(WorkflowRule("video", "review", [RequiredItem("")]))

    def test_active_automations_filtered(self, store):
        store.add_automation({"id": "a", "trigger_type": "status_change", "actions": []})
        store.add_automation({"id": "b", "trigger_type": "status_change", "actions": [], "is_active": False})
        store.add_automation({"id": "c", "trigger_type": "task_created", "actions": []})
        assert [r.id for r in store.list_active_automations("status_change")] == ["a"]

    def test_move_task(self, store):
        store.move_task("t1", "archive")
        assert store.boards == {"t1": "archive"}

    def test_move_unknown_destination(self, store):
        with pytest.raises(MoveFailed):
            store.move_task("t1", "nowhere")

    def test_move_missing_task(self, store):
        with pytest.raises(MoveFailed):
            store.move_task("t9", "archive")


BOARD = """
boards: [social_media_completed]
tasks:
  - id: t1
    type: video
    status: todo
    assignee_ids: [dev]
subtasks:
  - id: st-1
    task_id: t1
    title: Roteiro
    kind: free-text
    is_required: true
workflow_rules:
  - task_type: video
    status_value: review
    required_subtasks:
      - title: Roteiro
        kind: text
automations:
  - id: r1
    trigger_type: status_change
    trigger_config: {to_status: [done]}
    actions:
      - type: move_task
        config: {destination: social_media_completed}
"""


class TestBoardFile:
    """Tests for load_board() and save_board()."""

    @pytest.fixture
    def board(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text(BOARD)
        return path

    def test_load(self, board):
        store = load_board(board)
        assert store.get("t1").assignee_ids == ["dev"]
        assert store.list_by_task("t1")[0].kind == SubtaskKind.TEXT
        assert store.get_workflow_rule("video", "review").required_subtasks[0].title == "Roteiro"
        assert [r.id for r in store.list_active_automations("status_change")] == ["r1"]
        assert store.destinations == {"social_media_completed"}

    def test_save_and_reload(self, board):
        store = load_board(board)
        store.update("t1", {"status": "doing"})
        store.append_history("t1", HistoryEntry("doing", ["dev"], "2025-01-01T00:00:00+00:00", user_id="dev"))
        save_board(store, board)

        reloaded = load_board(board)
        task = reloaded.get("t1")
        assert task.status == "doing"
        assert task.status_history[0].user_id == "dev"
        assert reloaded.list_by_task("t1")[0].title == "Roteiro"
        assert not board.with_suffix(".yaml.tmp").exists()

    def test_saved_file_is_plain_yaml(self, board):
        save_board(load_board(board), board)
        data = yaml.safe_load(board.read_text())
        assert data["subtasks"][0]["kind"] == "text"

    def test_no_boards_accepts_any_destination(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text("tasks: []\n")
        assert load_board(path).destinations is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(BoardFileError, match="not found"):
            load_board(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text("tasks: [unclosed\n")
        with pytest.raises(BoardFileError, match="Invalid YAML"):
            load_board(path)

    @pytest.mark.parametrize("content", ["- a\n- b\n", "tasks: {id: t1}\n"])
    def test_wrong_shape(self, tmp_path, content):
        path = tmp_path / "board.yaml"
        path.write_text(content)
        with pytest.raises(BoardFileError):
            load_board(path)
