"""Task status state machine using transitions library.

Statuses are operator-defined strings, so states and transitions are added
on demand rather than declared up front. Every transition into a status:
- prepares by provisioning the destination's required checklist
- is guarded by the status gate
- persists the new status and a manual history entry after the change

Usage:
    from taskflow.workflow.fsm import TaskStatusFSM

    fsm = TaskStatusFSM(task, provisioner, rules, tasks)
    fsm.move_to("review", user_id="u1")  # raises TransitionBlocked if gated
"""

import logging
from typing import Callable, Optional

from transitions import Machine

from taskflow.lib.errors import TransitionBlocked
from taskflow.lib.stores import RuleStore, TaskStore
from taskflow.lib.types import GateResult, HistoryEntry, Task
from taskflow.workflow import gate
from taskflow.workflow.executor import utc_now
from taskflow.workflow.provisioner import SubtaskProvisioner

logger = logging.getLogger(__name__)


def trigger_name(status: str) -> str:
    return f"enter:{status}"


class TaskStatusFSM:
    """State machine for one task's status.

    Wraps the transitions library with task-specific logic:
    - Starts from the task snapshot's status
    - Gates every transition on the destination's required subtasks
    - Persists status changes and history through the task store
    """

    def __init__(
        self,
        task: Task,
        provisioner: SubtaskProvisioner,
        rules: RuleStore,
        tasks: TaskStore,
        clock: Callable[[], str] = utc_now,
        on_transition: Callable[[str, str], None] | None = None,
    ):
        """Initialize FSM for a task.

        Args:
            task: Snapshot of the task; its status is the initial state
            provisioner: Creates the destination's required subtasks
            rules: Source of workflow rules for the gate
            tasks: Store the status change is written to
            clock: Timestamp source for history entries
            on_transition: Optional callback(from_status, to_status) after commits
        """
        self.task = task
        self.task_id = task.id
        self.provisioner = provisioner
        self.rules = rules
        self.tasks = tasks
        self.clock = clock
        self.on_transition = on_transition
        self.last_gate: Optional[GateResult] = None
        self._rule = None
        self._subtasks = []

        self.machine = Machine(
            model=self,
            states=[task.status],
            initial=task.status,
            auto_transitions=False,  # Only explicit, gated transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",
        )

    def _ensure_transition(self, to_status: str) -> str:
        """Register the current-state -> to_status transition if missing."""
        if to_status not in self.machine.states:
            self.machine.add_state(to_status)

        name = trigger_name(to_status)
        if not self.machine.get_transitions(name, source=self.state, dest=to_status):
            self.machine.add_transition(
                name,
                source=self.state,
                dest=to_status,
                prepare="provision_checklist",
                conditions="gate_allows",
            )
        return name

    def provision_checklist(self, event) -> None:
        dest = event.transition.dest
        self._rule = self.provisioner.lookup(self.task.type, dest)
        self._subtasks = self.provisioner.ensure_rule(self.task_id, self._rule)

    def gate_allows(self, event) -> bool:
        dest = event.transition.dest
        self.last_gate = gate.evaluate(self._rule, self._subtasks)
        if not self.last_gate.allowed:
            logger.warning(f"[FSM] {self.task_id}: {self.state} -> {dest} blocked, "
                           f"missing {', '.join(self.last_gate.missing)}")
        return self.last_gate.allowed

    def on_state_change(self, event) -> None:
        """Callback after any state transition.

        Persists status and history, then logs the transition.
        """
        from_status = event.transition.source
        to_status = event.transition.dest
        user_id = event.kwargs.get("user_id")

        updated = self.tasks.update(self.task_id, {"status": to_status})
        self.tasks.append_history(self.task_id, HistoryEntry(
            status=to_status,
            assignee_ids=list(updated.assignee_ids),
            timestamp=self.clock(),
            is_automated=False,
            user_id=user_id,
        ))
        self.task.status = to_status

        logger.info(f"[FSM] {self.task_id}: {from_status} -> {to_status}"
                    + (f" (by {user_id})" if user_id else ""))

        if self.on_transition:
            self.on_transition(from_status, to_status)

    def move_to(self, to_status: str, user_id: Optional[str] = None) -> bool:
        """Transition to `to_status`.

        Returns False for a self-transition (no-op), True once committed.

        Raises:
            TransitionBlocked: If the destination's required subtasks are unmet
            StoreUnavailable: If a rule, subtask or task read/write fails
        """
        if to_status == self.state:
            logger.debug(f"[FSM] {self.task_id}: already in {to_status}, no-op")
            return False

        name = self._ensure_transition(to_status)
        if not self.trigger(name, user_id=user_id):
            missing = self.last_gate.missing if self.last_gate else []
            raise TransitionBlocked(self.task_id, to_status, missing)
        return True
