"""Status gate.

A task may enter a status only when every checklist item the destination
status requires is satisfied. Requirements of the status being left play no
part.
"""

from typing import Optional

from taskflow.lib.stores import RuleStore
from taskflow.lib.types import GateResult, RequiredItem, Subtask, SubtaskKind, WorkflowRule


def can_enter(required_items: list[RequiredItem], subtasks: list[Subtask]) -> GateResult:
    """Check required items against the task's subtasks, matched by title."""
    by_title = {}
    for subtask in subtasks:
        by_title.setdefault(subtask.title, subtask)

    missing = []
    for item in required_items:
        subtask = by_title.get(item.title)
        if subtask is None:
            missing.append(item.title)
        elif item.kind == SubtaskKind.TEXT:
            if not (subtask.content and subtask.content.strip()):
                missing.append(item.title)
        elif not subtask.is_completed:
            missing.append(item.title)

    return GateResult(allowed=not missing, missing=missing)


def evaluate(rule: Optional[WorkflowRule], subtasks: list[Subtask]) -> GateResult:
    """Gate against a rule that has already been read. No rule means no requirements."""
    if rule is None or not rule.required_subtasks:
        return GateResult(allowed=True)
    return can_enter(rule.required_subtasks, subtasks)


def check(rules: RuleStore, task_type: Optional[str], status: str, subtasks: list[Subtask]) -> GateResult:
    """Look up the destination status's rule and gate against it.

    A store failure propagates as StoreUnavailable so the transition is
    denied; it is never treated as "no requirements".
    """
    rule = rules.get_workflow_rule(task_type, status) if task_type else None
    return evaluate(rule, subtasks)
