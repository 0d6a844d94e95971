"""Required checklist provisioning.

Makes sure every item a workflow rule demands for (task type, status) exists
as a required subtask on the task. Only missing titles are created, and an
existing item with a required title is flagged required rather than
duplicated. Nothing is ever deleted, so calling it again is a no-op.
"""

import logging
from typing import Optional

from taskflow.lib.stores import RuleStore, SubtaskStore
from taskflow.lib.types import Subtask, WorkflowRule

logger = logging.getLogger(__name__)


class SubtaskProvisioner:
    def __init__(self, subtasks: SubtaskStore, rules: RuleStore):
        self.subtasks = subtasks
        self.rules = rules

    def lookup(self, task_type: Optional[str], status: Optional[str]) -> Optional[WorkflowRule]:
        """Workflow rule for (task type, status); None when either is missing."""
        if not task_type or not status:
            return None
        return self.rules.get_workflow_rule(task_type, status)

    def ensure(self, task_id: str, task_type: Optional[str], status: Optional[str]) -> list[Subtask]:
        """Create missing required subtasks and return the full list.

        Without a task type or status there is nothing to look up, and the
        existing subtasks are returned unchanged.

        Raises:
            StoreUnavailable: If reading the rule or inserting items fails
        """
        return self.ensure_rule(task_id, self.lookup(task_type, status))

    def ensure_rule(self, task_id: str, rule: Optional[WorkflowRule]) -> list[Subtask]:
        """Create the missing items of an already-read rule."""
        existing = self.subtasks.list_by_task(task_id)
        if rule is None:
            return existing

        by_title = {}
        for subtask in existing:
            by_title.setdefault(subtask.title, subtask)

        # A user item that shares a required title becomes the required item
        for index, subtask in enumerate(existing):
            if subtask.is_required or by_title[subtask.title] is not subtask:
                continue
            if any(item.title == subtask.title for item in rule.required_subtasks):
                existing[index] = self.subtasks.update(subtask.id, {"is_required": True})
                logger.info(f"[PROVISION] {task_id}: '{subtask.title}' is now required")

        titles = set(by_title)
        records = []
        for item in rule.required_subtasks:
            if item.title in titles:
                continue
            titles.add(item.title)
            records.append({
                "task_id": task_id,
                "title": item.title,
                "kind": item.kind.value,
                "is_required": True,
                "is_completed": False,
                "content": None,
            })

        if not records:
            return existing

        created = self.subtasks.insert_many(records)
        logger.info(f"[PROVISION] {task_id}: created {len(created)} required subtask(s) "
                    f"for {rule.task_type}/{rule.status_value}: {', '.join(r['title'] for r in records)}")
        return existing + created
