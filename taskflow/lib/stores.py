"""
Collaborator interfaces the engine is injected with.

The engine owns no storage. It reads snapshots through these interfaces and
writes partial updates back. Implementations raise StoreUnavailable for any
read or write failure, and BoardMover raises MoveFailed.
"""

import logging
import time
from typing import Callable, Optional, Protocol

from taskflow.lib.types import AutomationRule, HistoryEntry, Subtask, Task, WorkflowRule

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def get(self, task_id: str) -> Task: ...

    def update(self, task_id: str, fields: dict) -> Task: ...

    def append_history(self, task_id: str, entry: HistoryEntry) -> Task:
        """Append one entry to the task's status log. Never rewrites earlier entries."""
        ...


class SubtaskStore(Protocol):
    def list_by_task(self, task_id: str) -> list[Subtask]: ...

    def insert_many(self, records: list[dict]) -> list[Subtask]: ...

    def update(self, subtask_id: str, fields: dict) -> Subtask: ...

    def delete(self, subtask_id: str) -> None: ...


class RuleStore(Protocol):
    def get_workflow_rule(self, task_type: str, status: str) -> Optional[WorkflowRule]: ...

    def list_active_automations(self, trigger_type: str) -> list[AutomationRule]: ...


class BoardMover(Protocol):
    def move_task(self, task_id: str, destination: str) -> None: ...


class CachedRuleStore:
    """Caches active automation lists per trigger type for `ttl` seconds.

    Events tend to arrive in bursts (a board drag fires several status
    changes), and the automation list changes rarely. Workflow rule lookups
    pass straight through since the gate must see fresh requirements.
    """

    def __init__(self, inner: RuleStore, ttl: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.inner = inner
        self.ttl = ttl
        self.clock = clock
        self._cache: dict[str, tuple[float, list[AutomationRule]]] = {}

    def get_workflow_rule(self, task_type: str, status: str) -> Optional[WorkflowRule]:
        return self.inner.get_workflow_rule(task_type, status)

    def list_active_automations(self, trigger_type: str) -> list[AutomationRule]:
        now = self.clock()
        cached = self._cache.get(trigger_type)
        if cached and now - cached[0] < self.ttl:
            logger.debug(f"[RULES] {trigger_type}: {len(cached[1])} automations from cache")
            return list(cached[1])

        # Failures are not cached; the next event retries the store
        rules = self.inner.list_active_automations(trigger_type)
        self._cache[trigger_type] = (now, list(rules))
        return list(rules)

    def invalidate(self) -> None:
        self._cache.clear()
