"""Automation engine for task lifecycle events.

Entry points:
- provision_and_gate: create the destination's checklist, then gate on it
- transition_status: gated status change followed by status_change automations
- on_event / on_task_created: run matching automation rules

Events are processed synchronously. Matched rules run one after another, each
with its own task read, execution and commit; a failing rule is reported and
the remaining rules still run. There is no locking across events, so callers
that need strict ordering must serialize events per task themselves.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from taskflow.lib.errors import StoreUnavailable, ValidationError
from taskflow.lib.stores import BoardMover, RuleStore, SubtaskStore, TaskStore
from taskflow.lib.types import AutomationRule, GateResult, RuleResult, Task, TriggerType
from taskflow.workflow import gate
from taskflow.workflow.actions import parse_actions
from taskflow.workflow.executor import ActionExecutor, utc_now
from taskflow.workflow.fsm import TaskStatusFSM
from taskflow.workflow.matcher import match
from taskflow.workflow.provisioner import SubtaskProvisioner

logger = logging.getLogger(__name__)


@dataclass
class TransitionOutcome:
    """Result of a user-facing status change.

    `automation_error` is set when the automation rule list could not be
    loaded; the status change itself has still been committed.
    """
    task_id: str
    old_status: str
    new_status: str
    changed: bool
    automation: list[RuleResult] = field(default_factory=list)
    automation_error: Optional[str] = None


class AutomationEngine:
    """Gate and automation logic over injected stores.

    Args:
        tasks: Task store
        subtasks: Subtask store
        rules: Workflow and automation rule store
        board_mover: Collaborator for move_task actions
        move_failure_policy: "commit" keeps the field changes a rule made
            before its move_task failed; "discard" drops them
        clock: Timestamp source for history entries
    """

    def __init__(
        self,
        tasks: TaskStore,
        subtasks: SubtaskStore,
        rules: RuleStore,
        board_mover: Optional[BoardMover] = None,
        move_failure_policy: str = "commit",
        clock: Callable[[], str] = utc_now,
    ):
        if move_failure_policy not in ("commit", "discard"):
            raise ValueError(f"Unknown move failure policy: {move_failure_policy}")
        self.tasks = tasks
        self.subtasks = subtasks
        self.rules = rules
        self.move_failure_policy = move_failure_policy
        self.clock = clock
        self.provisioner = SubtaskProvisioner(subtasks, rules)
        self.executor = ActionExecutor(board_mover, clock)

    def provision_and_gate(self, task_id: str, task_type: Optional[str], target_status: str) -> GateResult:
        """Ensure the target status's checklist exists and check it.

        Raises:
            StoreUnavailable: On any store failure; the transition must be denied
        """
        # One rule read serves both provisioning and the gate
        rule = self.provisioner.lookup(task_type, target_status)
        subtasks = self.provisioner.ensure_rule(task_id, rule)
        result = gate.evaluate(rule, subtasks)
        if not result.allowed:
            logger.warning(f"[GATE] {task_id}: cannot enter {target_status}, "
                           f"missing {', '.join(result.missing)}")
        return result

    def transition_status(self, task_id: str, new_status: str, user_id: Optional[str] = None) -> TransitionOutcome:
        """Move a task to `new_status`, then run status_change automations.

        Automations are best-effort: their failures show up in the outcome and
        never undo the committed transition.

        Raises:
            TransitionBlocked: If required subtasks of `new_status` are unmet
            StoreUnavailable: If gating or committing the change fails
        """
        task = self.tasks.get(task_id)
        old_status = task.status

        fsm = TaskStatusFSM(task, self.provisioner, self.rules, self.tasks, clock=self.clock)
        if not fsm.move_to(new_status, user_id=user_id):
            return TransitionOutcome(task_id, old_status, new_status, changed=False)

        outcome = TransitionOutcome(task_id, old_status, new_status, changed=True)
        event_data = {"old_status": old_status, "new_status": new_status}
        try:
            outcome.automation = self.on_event(task_id, TriggerType.STATUS_CHANGE.value, event_data)
        except StoreUnavailable as e:
            outcome.automation_error = str(e)
        return outcome

    def on_task_created(self, task_id: str) -> list[RuleResult]:
        """Run task_created automations for a freshly inserted task."""
        task = self.tasks.get(task_id)
        return self.on_event(task_id, TriggerType.TASK_CREATED.value, {"task": task.to_dict()})

    def on_event(self, task_id: str, trigger_type: str, event_data: dict) -> list[RuleResult]:
        """Run every active rule matching the event, one at a time.

        Raises:
            StoreUnavailable: If the active rule list cannot be loaded; no
                automation runs for this event
        """
        trigger_type = getattr(trigger_type, "value", trigger_type)
        try:
            active = self.rules.list_active_automations(trigger_type)
        except StoreUnavailable as e:
            logger.error(f"[AUTOMATION] {task_id}: could not load {trigger_type} automations: {e}")
            raise

        matched = match(trigger_type, event_data, active)
        if not matched:
            logger.debug(f"[AUTOMATION] {task_id}: no {trigger_type} automations matched")
            return []

        logger.info(f"[AUTOMATION] {task_id}: {len(matched)} {trigger_type} automation(s) matched")
        return [self._run_rule(task_id, rule) for rule in matched]

    def _run_rule(self, task_id: str, rule: AutomationRule) -> RuleResult:
        try:
            actions = parse_actions(rule.actions, rule.trigger_type)
        except ValidationError as e:
            logger.warning(f"[AUTOMATION] {task_id}: skipping rule {rule.id}, invalid actions: {e}")
            return RuleResult(rule.id, success=False, error=str(e))

        try:
            # Re-read per rule so each rule sees the previous rule's commit
            task = self.tasks.get(task_id)
            execution = self.executor.apply(actions, task)

            updates = execution.updates
            if execution.error is not None and self.move_failure_policy == "discard":
                if updates:
                    logger.warning(f"[AUTOMATION] {task_id}: rule {rule.id} move failed, "
                                   f"discarding pending updates {updates}")
                updates = {}

            if updates:
                self._commit(task, updates, execution.history_entry)
        except StoreUnavailable as e:
            logger.warning(f"[AUTOMATION] {task_id}: rule {rule.id} failed: {e}")
            return RuleResult(rule.id, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"[AUTOMATION] {task_id}: rule {rule.id} error: {e}")
            return RuleResult(rule.id, success=False, error=str(e))

        if execution.error is not None:
            return RuleResult(rule.id, success=False, updates=updates or None, error=str(execution.error))
        return RuleResult(rule.id, success=True, updates=updates or None)

    def _commit(self, task: Task, updates: dict, history_entry) -> None:
        self.tasks.update(task.id, updates)
        if history_entry is not None:
            self.tasks.append_history(task.id, history_entry)
        logger.info(f"[AUTOMATION] {task.id}: applied {updates}")
