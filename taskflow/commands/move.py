"""
tf move - Change a task's status through the gate, then run automations.
"""

from taskflow.commands.common import build_engine, open_board, print_rule_results, write_board
from taskflow.lib.config import EngineConfig
from taskflow.lib.errors import StoreUnavailable, TransitionBlocked


def cmd_move(args, config: EngineConfig) -> int:
    store = open_board(config)
    engine = build_engine(store, config)

    try:
        outcome = engine.transition_status(args.task, args.status, user_id=args.user)
    except TransitionBlocked as e:
        # Provisioned subtasks still need saving
        write_board(store, config)
        print(f"BLOCKED: {e}")
        return 3
    except StoreUnavailable as e:
        print(f"ERROR: {e}")
        return 1

    write_board(store, config)

    if not outcome.changed:
        print(f"{args.task}: already in '{args.status}'")
        return 0

    print(f"{args.task}: {outcome.old_status} -> {outcome.new_status}")
    if outcome.automation_error:
        print(f"Automations:    not run ({outcome.automation_error})")
    else:
        print_rule_results(outcome.automation)

    task = store.get(args.task)
    print(f"Status:         {task.status}")
    print(f"Assignees:      {', '.join(task.assignee_ids) or '(none)'}")
    return 0
