"""Tests for taskflow.workflow.matcher module."""

from taskflow.lib.types import AutomationRule, TriggerConfig, TriggerType
from taskflow.workflow.matcher import match


def rule(rule_id, trigger="status_change", from_status=None, to_status=None, active=True):
    return AutomationRule(
        id=rule_id,
        trigger_type=trigger,
        trigger_config=TriggerConfig(from_status=from_status or [], to_status=to_status or []),
        actions=[],
        is_active=active,
    )


RULES = [
    rule("any"),
    rule("from_todo", from_status=["todo"]),
    rule("from_review", from_status=["review"]),
    rule("to_doing", to_status=["doing", "blocked"]),
    rule("to_done", to_status=["done"]),
    rule("todo_to_doing", from_status=["todo"], to_status=["doing"]),
    rule("review_to_doing", from_status=["review"], to_status=["doing"]),
    rule("created", trigger="task_created"),
]


class TestStatusChange:
    """Tests for status_change matching."""

    def test_allow_lists(self):
        matched = match("status_change", {"old_status": "todo", "new_status": "doing"}, RULES)
        assert [r.id for r in matched] == ["any", "from_todo", "to_doing", "todo_to_doing"]

    def test_empty_lists_are_wildcards(self):
        matched = match("status_change", {"old_status": "x", "new_status": "y"}, RULES)
        assert [r.id for r in matched] == ["any"]

    def test_accepts_enum_trigger(self):
        matched = match(TriggerType.STATUS_CHANGE, {"old_status": "review", "new_status": "done"}, RULES)
        assert [r.id for r in matched] == ["any", "from_review", "to_done"]

    def test_inactive_rules_never_match(self):
        rules = [rule("off", active=False)]
        assert match("status_change", {"old_status": "a", "new_status": "b"}, rules) == []

    def test_null_allow_list_is_wildcard(self):
        stored = AutomationRule.from_dict({
            "id": "r1",
            "trigger_type": "status_change",
            "trigger_config": {"from_status": None, "to_status": ["done"]},
            "actions": [],
        })
        assert match("status_change", {"old_status": "a", "new_status": "done"}, [stored]) == [stored]

    def test_single_status_string_is_one_entry(self):
        stored = AutomationRule.from_dict({
            "id": "r1",
            "trigger_type": "status_change",
            "trigger_config": {"from_status": "todo", "to_status": "doing"},
            "actions": [],
        })
        assert stored.trigger_config.from_status == ["todo"]
        assert match("status_change", {"old_status": "todo", "new_status": "doing"}, [stored]) == [stored]
        assert match("status_change", {"old_status": "t", "new_status": "doing"}, [stored]) == []


class TestTaskCreated:
    """Tests for task_created matching."""

    def test_matches_unconditionally(self):
        matched = match("task_created", {"task": {"id": "t1"}}, RULES)
        assert [r.id for r in matched] == ["created"]

    def test_unknown_trigger_matches_nothing(self):
        assert match("comment_added", {}, RULES) == []
