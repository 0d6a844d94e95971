"""Action execution for a single automation rule.

Walks a rule's typed actions in declaration order against a working copy of
the task's status and assignees, and proposes a partial update. Nothing is
written to the task store here; the engine decides what to commit.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from taskflow.lib.errors import MoveFailed
from taskflow.lib.stores import BoardMover
from taskflow.lib.types import ExecutionResult, HistoryEntry, Task
from taskflow.workflow.actions import (
    Action,
    ChangeStatus,
    MoveTask,
    ReassignPrevious,
    RemoveAssignee,
    SetAssignee,
)
from taskflow.workflow.assignees import (
    Add,
    Remove,
    ReplaceWithPreviousHandler,
    reduce_assignees,
)

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ActionExecutor:
    """Applies action lists to task snapshots.

    Args:
        board_mover: Collaborator for move_task actions. Without one, any
            move_task action fails.
        clock: Returns the ISO timestamp stamped on history entries.
    """

    def __init__(self, board_mover: Optional[BoardMover] = None, clock: Callable[[], str] = utc_now):
        self.board_mover = board_mover
        self.clock = clock

    def apply(self, actions: list[Action], task: Task) -> ExecutionResult:
        """Compute the update a rule's actions make to `task`.

        A failed move_task stops the walk. The status and assignee changes of
        earlier actions are still returned in `updates`, with `error` set, so
        the caller chooses whether to commit them.
        """
        status = task.status
        instructions = []
        error = None

        for index, action in enumerate(actions):
            if isinstance(action, ChangeStatus):
                status = action.status
            elif isinstance(action, SetAssignee):
                instructions.append(Add(tuple(action.assignee_ids)))
            elif isinstance(action, RemoveAssignee):
                ids = tuple(action.assignee_ids) if action.assignee_ids is not None else None
                instructions.append(Remove(ids))
            elif isinstance(action, ReassignPrevious):
                instructions.append(
                    ReplaceWithPreviousHandler(action.from_status, tuple(task.status_history))
                )
            elif isinstance(action, MoveTask):
                error = self._move(task.id, action.destination)
                if error is not None:
                    skipped = len(actions) - index - 1
                    logger.warning(f"[EXECUTOR] {task.id}: {error}; skipping {skipped} remaining action(s)")
                    break
            else:
                raise TypeError(f"Unknown action: {action!r}")

        reduction = reduce_assignees(task.assignee_ids, instructions)

        updates = {}
        if status != task.status:
            updates["status"] = status
        # Add/remove instructions always write the assignee field, even when
        # membership is unchanged, so the audit log records the automation
        if reduction.changed or reduction.touched:
            updates["assignee_ids"] = reduction.ids

        if not updates:
            logger.debug(f"[EXECUTOR] {task.id}: no updates needed")
            return ExecutionResult(error=error)

        entry = HistoryEntry(
            status=status,
            assignee_ids=list(reduction.ids),
            timestamp=self.clock(),
            is_automated=True,
        )
        logger.debug(f"[EXECUTOR] {task.id}: proposing {updates}")
        return ExecutionResult(updates=updates, changed=True, history_entry=entry, error=error)

    def _move(self, task_id: str, destination: str) -> Optional[MoveFailed]:
        if self.board_mover is None:
            return MoveFailed(task_id, destination, "no board mover configured")
        try:
            self.board_mover.move_task(task_id, destination)
        except MoveFailed as e:
            return e
        except Exception as e:
            return MoveFailed(task_id, destination, str(e))
        logger.info(f"[EXECUTOR] {task_id}: moved to {destination}")
        return None
