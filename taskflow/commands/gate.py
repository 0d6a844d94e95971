"""
tf gate - Provision a status's checklist and report whether a task may enter it.
"""

from taskflow.commands.common import build_engine, open_board, write_board
from taskflow.lib.config import EngineConfig
from taskflow.lib.errors import StoreUnavailable


def cmd_gate(args, config: EngineConfig) -> int:
    """Check the gate for moving a task into a status."""
    store = open_board(config)
    engine = build_engine(store, config)

    try:
        task = store.get(args.task)
        result = engine.provision_and_gate(task.id, task.type, args.status)
    except StoreUnavailable as e:
        print(f"ERROR: {e}")
        return 1

    # Provisioning may have created subtasks
    write_board(store, config)

    if result.allowed:
        print(f"{task.id}: may enter '{args.status}'")
        return 0

    print(f"{task.id}: cannot enter '{args.status}'. Complete first:")
    for title in result.missing:
        print(f"  - {title}")
    return 3
