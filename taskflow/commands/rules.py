"""
tf rules - List workflow rules and automations on the board.
"""

from taskflow.commands.common import open_board
from taskflow.lib.config import EngineConfig


def _fmt_list(values) -> str:
    return ", ".join(values) if values else "any"


def cmd_rules(args, config: EngineConfig) -> int:
    store = open_board(config)

    workflow_rules = sorted(store.list_workflow_rules(), key=lambda r: (r.task_type, r.status_value))
    print("Workflow rules")
    print("=" * 60)
    if not workflow_rules:
        print("  (none)")
    for rule in workflow_rules:
        items = ", ".join(f"{i.title} [{i.kind.value}]" for i in rule.required_subtasks)
        print(f"  {rule.task_type} -> {rule.status_value}: {items or '(nothing required)'}")
    print()

    automations = store.list_automations()
    print("Automations")
    print("=" * 60)
    if not automations:
        print("  (none)")
    for rule in automations:
        state = "active" if rule.is_active else "inactive"
        label = f"{rule.id} {rule.name}".strip()
        print(f"  {label} ({rule.trigger_type}, {state})")
        if rule.trigger_type == "status_change":
            trigger = rule.trigger_config
            print(f"    from: {_fmt_list(trigger.from_status)}  to: {_fmt_list(trigger.to_status)}")
        actions = rule.actions if isinstance(rule.actions, list) else []
        for action in actions:
            if isinstance(action, dict):
                print(f"    - {action.get('type')} {action.get('config') or ''}".rstrip())
    return 0
