"""
tf fire - Run automations for an event without changing status first.
"""

from taskflow.commands.common import build_engine, open_board, print_rule_results, write_board
from taskflow.lib.config import EngineConfig
from taskflow.lib.errors import StoreUnavailable
from taskflow.lib.types import TriggerType


def cmd_fire(args, config: EngineConfig) -> int:
    store = open_board(config)
    engine = build_engine(store, config)

    try:
        if args.trigger == TriggerType.TASK_CREATED.value:
            results = engine.on_task_created(args.task)
        else:
            event_data = {"old_status": args.from_status, "new_status": args.to_status}
            results = engine.on_event(args.task, args.trigger, event_data)
    except StoreUnavailable as e:
        print(f"ERROR: {e}")
        return 1

    write_board(store, config)
    print_rule_results(results)
    return 0 if all(r.success for r in results) else 4
