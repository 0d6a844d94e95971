"""
In-process implementation of every store interface.

Backs the test suite and the board file used by the CLI. Records are kept as
plain dicts and handed out as fresh dataclass snapshots, so callers can never
mutate stored state by accident.
"""

import copy
import itertools
import logging
from typing import Iterable, Optional

from taskflow.lib.errors import MoveFailed, StoreUnavailable
from taskflow.lib.types import AutomationRule, HistoryEntry, Subtask, Task, WorkflowRule
from taskflow.lib.validate import validate

logger = logging.getLogger(__name__)

TASK_FIELDS = {"type", "status", "assignee_ids"}
SUBTASK_FIELDS = {"title", "kind", "is_required", "is_completed", "content"}


class MemoryStore:
    """TaskStore, SubtaskStore, RuleStore and BoardMover in one object.

    Args:
        destinations: Boards move_task may target. None accepts any name.
    """

    def __init__(self, destinations: Optional[Iterable[str]] = None):
        self.tasks: dict[str, dict] = {}
        self.subtasks: dict[str, dict] = {}
        self.workflow_rules: dict[tuple[str, str], dict] = {}
        self.automations: dict[str, dict] = {}
        self.destinations = set(destinations) if destinations is not None else None
        self.boards: dict[str, str] = {}
        self._subtask_ids = itertools.count(1)

    # -- tasks --

    def add_task(self, task: Task) -> Task:
        self.tasks[task.id] = task.to_dict()
        return self.get(task.id)

    def get(self, task_id: str) -> Task:
        if task_id not in self.tasks:
            raise StoreUnavailable("get task", f"task '{task_id}' not found")
        return Task.from_dict(copy.deepcopy(self.tasks[task_id]))

    def update(self, task_id: str, fields: dict) -> Task:
        if task_id not in self.tasks:
            raise StoreUnavailable("update task", f"task '{task_id}' not found")
        unknown = set(fields) - TASK_FIELDS
        if unknown:
            raise StoreUnavailable("update task", f"unknown fields {sorted(unknown)}")
        self.tasks[task_id].update(copy.deepcopy(fields))
        return self.get(task_id)

    def append_history(self, task_id: str, entry: HistoryEntry) -> Task:
        if task_id not in self.tasks:
            raise StoreUnavailable("append history", f"task '{task_id}' not found")
        self.tasks[task_id].setdefault("status_history", []).append(entry.to_dict())
        return self.get(task_id)

    # -- subtasks --

    def _next_subtask_id(self) -> str:
        while True:
            subtask_id = f"st-{next(self._subtask_ids)}"
            if subtask_id not in self.subtasks:
                return subtask_id

    def list_by_task(self, task_id: str) -> list[Subtask]:
        return [
            Subtask.from_dict(copy.deepcopy(s))
            for s in self.subtasks.values()
            if s["task_id"] == task_id
        ]

    def insert_many(self, records: list[dict]) -> list[Subtask]:
        inserted = []
        for record in records:
            subtask_id = record.get("id") or self._next_subtask_id()
            stored = Subtask.from_dict({**record, "id": subtask_id}).to_dict()
            self.subtasks[subtask_id] = stored
            inserted.append(Subtask.from_dict(copy.deepcopy(stored)))
        return inserted

    def update_subtask(self, subtask_id: str, fields: dict) -> Subtask:
        if subtask_id not in self.subtasks:
            raise StoreUnavailable("update subtask", f"subtask '{subtask_id}' not found")
        unknown = set(fields) - SUBTASK_FIELDS
        if unknown:
            raise StoreUnavailable("update subtask", f"unknown fields {sorted(unknown)}")
        self.subtasks[subtask_id].update(fields)
        return Subtask.from_dict(copy.deepcopy(self.subtasks[subtask_id]))

    def delete(self, subtask_id: str) -> None:
        if self.subtasks.pop(subtask_id, None) is None:
            raise StoreUnavailable("delete subtask", f"subtask '{subtask_id}' not found")

    # -- rules --

    def upsert_workflow_rule(self, rule: WorkflowRule) -> WorkflowRule:
        """Insert or replace the rule for (task_type, status_value)."""
        data = rule.to_dict()
        validate(data, "workflow_rule")
        self.workflow_rules[(rule.task_type, rule.status_value)] = data
        return WorkflowRule.from_dict(copy.deepcopy(data))

    def get_workflow_rule(self, task_type: str, status: str) -> Optional[WorkflowRule]:
        data = self.workflow_rules.get((task_type, status))
        return WorkflowRule.from_dict(copy.deepcopy(data)) if data else None

    def list_workflow_rules(self) -> list[WorkflowRule]:
        return [WorkflowRule.from_dict(copy.deepcopy(d)) for d in self.workflow_rules.values()]

    def add_automation(self, data: dict) -> AutomationRule:
        """Store an automation record as-is; actions are validated when it fires."""
        rule = AutomationRule.from_dict(data)
        self.automations[rule.id] = copy.deepcopy(data)
        return rule

    def list_automations(self) -> list[AutomationRule]:
        return [AutomationRule.from_dict(copy.deepcopy(d)) for d in self.automations.values()]

    def list_active_automations(self, trigger_type: str) -> list[AutomationRule]:
        return [
            rule for rule in self.list_automations()
            if rule.is_active and rule.trigger_type == trigger_type
        ]

    # -- board mover --

    def move_task(self, task_id: str, destination: str) -> None:
        if self.destinations is not None and destination not in self.destinations:
            raise MoveFailed(task_id, destination, "unknown destination")
        if task_id not in self.tasks:
            raise MoveFailed(task_id, destination, "task not found")
        self.boards[task_id] = destination
        logger.info(f"[BOARD] {task_id}: moved to {destination}")


class SubtaskView:
    """Exposes MemoryStore's subtask methods under the SubtaskStore names.

    MemoryStore implements both TaskStore.update and SubtaskStore.update, so
    the subtask side needs its own object to satisfy the interface.
    """

    def __init__(self, store: MemoryStore):
        self.store = store

    def list_by_task(self, task_id: str) -> list[Subtask]:
        return self.store.list_by_task(task_id)

    def insert_many(self, records: list[dict]) -> list[Subtask]:
        return self.store.insert_many(records)

    def update(self, subtask_id: str, fields: dict) -> Subtask:
        return self.store.update_subtask(subtask_id, fields)

    def delete(self, subtask_id: str) -> None:
        self.store.delete(subtask_id)
