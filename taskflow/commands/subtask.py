"""
tf subtask - Edit a task's checklist items.
"""

from taskflow.commands.common import open_board, write_board
from taskflow.lib.config import EngineConfig
from taskflow.lib.errors import RequiredSubtaskError
from taskflow.lib.memory import SubtaskView
from taskflow.workflow import checklist


def cmd_subtask_list(args, config: EngineConfig) -> int:
    store = open_board(config)
    subtasks = store.list_by_task(args.task)
    if not subtasks:
        print(f"{args.task}: no subtasks")
        return 0
    for subtask in subtasks:
        mark = "x" if subtask.is_satisfied else " "
        lock = " (required)" if subtask.is_required else ""
        line = f"  [{mark}] {subtask.title}{lock}"
        if subtask.content:
            line += f": {subtask.content}"
        print(line)
    return 0


def cmd_subtask_set(args, config: EngineConfig) -> int:
    store = open_board(config)
    view = SubtaskView(store)
    try:
        subtask = checklist.find_subtask(view, args.task, args.title)
        checklist.set_subtask_content(view, subtask, args.content)
    except KeyError as e:
        print(f"ERROR: {e.args[0]}")
        return 1
    write_board(store, config)
    return 0


def cmd_subtask_toggle(args, config: EngineConfig) -> int:
    store = open_board(config)
    view = SubtaskView(store)
    try:
        subtask = checklist.find_subtask(view, args.task, args.title)
        updated = checklist.toggle_subtask(view, subtask)
    except (KeyError, ValueError) as e:
        print(f"ERROR: {e.args[0]}")
        return 1
    write_board(store, config)
    print(f"{updated.title}: {'done' if updated.is_completed else 'not done'}")
    return 0


def cmd_subtask_add(args, config: EngineConfig) -> int:
    store = open_board(config)
    try:
        checklist.add_subtask(SubtaskView(store), args.task, args.title)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1
    write_board(store, config)
    return 0


def cmd_subtask_remove(args, config: EngineConfig) -> int:
    store = open_board(config)
    view = SubtaskView(store)
    try:
        subtask = checklist.find_subtask(view, args.task, args.title)
        checklist.delete_subtask(view, subtask)
    except KeyError as e:
        print(f"ERROR: {e.args[0]}")
        return 1
    except RequiredSubtaskError as e:
        print(f"ERROR: {e}")
        return 1
    write_board(store, config)
    return 0
