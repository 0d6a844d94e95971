#!/usr/bin/env python3
"""tf CLI entrypoint."""

import argparse
import logging
import os
import sys
from pathlib import Path

from taskflow.commands import fire as cmd_fire_module
from taskflow.commands import gate as cmd_gate_module
from taskflow.commands import move as cmd_move_module
from taskflow.commands import rules as cmd_rules_module
from taskflow.commands import subtask as cmd_subtask_module
from taskflow.lib.boardfile import BoardFileError
from taskflow.lib.config import EngineConfig, load_engine_config
from taskflow.lib.validate import ValidationError


def get_engine_config(args) -> EngineConfig:
    """Load engine config from --config, $TASKFLOW_ENV or ./taskflow.env."""
    env_path = Path(args.config or os.environ.get("TASKFLOW_ENV", "taskflow.env"))
    try:
        config = load_engine_config(env_path)
    except (OSError, ValueError) as e:
        print(f"ERROR: Could not load {env_path}: {e}")
        sys.exit(2)

    if args.board:
        config.board_file = Path(args.board)
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    return config


def run_command(module_fn, args) -> int:
    config = get_engine_config(args)
    try:
        return module_fn(args, config)
    except (BoardFileError, ValidationError) as e:
        print(f"ERROR: {e}")
        return 2


def cmd_gate(args):
    return run_command(cmd_gate_module.cmd_gate, args)


def cmd_move(args):
    return run_command(cmd_move_module.cmd_move, args)


def cmd_fire(args):
    return run_command(cmd_fire_module.cmd_fire, args)


def cmd_rules(args):
    return run_command(cmd_rules_module.cmd_rules, args)


def cmd_subtask_list(args):
    return run_command(cmd_subtask_module.cmd_subtask_list, args)


def cmd_subtask_set(args):
    return run_command(cmd_subtask_module.cmd_subtask_set, args)


def cmd_subtask_toggle(args):
    return run_command(cmd_subtask_module.cmd_subtask_toggle, args)


def cmd_subtask_add(args):
    return run_command(cmd_subtask_module.cmd_subtask_add, args)


def cmd_subtask_remove(args):
    return run_command(cmd_subtask_module.cmd_subtask_remove, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tf', description='Task lifecycle gates and automations')
    parser.add_argument('--config', help='Path to taskflow.env')
    parser.add_argument('--board', help='Board file (overrides BOARD_FILE)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # tf gate
    p_gate = subparsers.add_parser('gate', help='Provision checklist and check if a task may enter a status')
    p_gate.add_argument('task', help='Task ID')
    p_gate.add_argument('status', help='Destination status')
    p_gate.set_defaults(func=cmd_gate)

    # tf move
    p_move = subparsers.add_parser('move', help='Change task status, then run automations')
    p_move.add_argument('task', help='Task ID')
    p_move.add_argument('status', help='Destination status')
    p_move.add_argument('--user', '-u', help='User making the change (recorded in history)')
    p_move.set_defaults(func=cmd_move)

    # tf fire
    p_fire = subparsers.add_parser('fire', help='Run automations for an event')
    p_fire.add_argument('task', help='Task ID')
    p_fire.add_argument('trigger', choices=['status_change', 'task_created'])
    p_fire.add_argument('--from', dest='from_status', help='Old status (status_change)')
    p_fire.add_argument('--to', dest='to_status', help='New status (status_change)')
    p_fire.set_defaults(func=cmd_fire)

    # tf rules
    p_rules = subparsers.add_parser('rules', help='List workflow rules and automations')
    p_rules.set_defaults(func=cmd_rules)

    # tf subtask
    p_subtask = subparsers.add_parser('subtask', help='Edit checklist items')
    subtask_sub = p_subtask.add_subparsers(dest='subtask_cmd', required=True)

    p_st_list = subtask_sub.add_parser('list', help='List a task\'s subtasks')
    p_st_list.add_argument('task', help='Task ID')
    p_st_list.set_defaults(func=cmd_subtask_list)

    p_st_set = subtask_sub.add_parser('set', help='Set a text item\'s content')
    p_st_set.add_argument('task', help='Task ID')
    p_st_set.add_argument('title', help='Subtask title')
    p_st_set.add_argument('content', help='New content (blank clears it)')
    p_st_set.set_defaults(func=cmd_subtask_set)

    p_st_toggle = subtask_sub.add_parser('toggle', help='Tick or untick a checkbox item')
    p_st_toggle.add_argument('task', help='Task ID')
    p_st_toggle.add_argument('title', help='Subtask title')
    p_st_toggle.set_defaults(func=cmd_subtask_toggle)

    p_st_add = subtask_sub.add_parser('add', help='Add an optional checkbox item')
    p_st_add.add_argument('task', help='Task ID')
    p_st_add.add_argument('title', help='Subtask title')
    p_st_add.set_defaults(func=cmd_subtask_add)

    p_st_remove = subtask_sub.add_parser('remove', help='Remove an optional item')
    p_st_remove.add_argument('task', help='Task ID')
    p_st_remove.add_argument('title', help='Subtask title')
    p_st_remove.set_defaults(func=cmd_subtask_remove)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
