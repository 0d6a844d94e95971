"""
YAML board file.

A single document holding tasks, subtasks, workflow rules and automations,
loaded into a MemoryStore for the CLI and written back after each command.

Layout:
    boards: [social_media_completed]      # move_task destinations (optional)
    tasks: [{id, type, status, assignee_ids, status_history}]
    subtasks: [{id, task_id, title, kind, is_required, is_completed, content}]
    workflow_rules: [{task_type, status_value, required_subtasks: [{title, kind}]}]
    automations: [{id, name, trigger_type, trigger_config, actions, is_active}]
"""

import logging
from pathlib import Path

import yaml

from taskflow.lib.memory import MemoryStore
from taskflow.lib.types import Task, WorkflowRule

logger = logging.getLogger(__name__)

SECTIONS = ("boards", "tasks", "subtasks", "workflow_rules", "automations")


class BoardFileError(Exception):
    """Board file is missing or malformed."""


def load_board(path: Path) -> MemoryStore:
    """Load a board file into a fresh MemoryStore.

    Raises:
        BoardFileError: If the file is missing, is not valid YAML, or has a
            section of the wrong shape
        ValidationError: If a workflow rule fails schema validation
    """
    if not path.exists():
        raise BoardFileError(f"Board file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise BoardFileError(f"Invalid YAML in {path}: {e}") from None

    if not isinstance(data, dict):
        raise BoardFileError(f"{path}: top level must be a mapping")
    for section in SECTIONS:
        if not isinstance(data.get(section) or [], list):
            raise BoardFileError(f"{path}: '{section}' must be a list")

    boards = data.get("boards")
    store = MemoryStore(destinations=boards if boards else None)

    for record in data.get("tasks") or []:
        store.add_task(Task.from_dict(record))
    if data.get("subtasks"):
        store.insert_many(data["subtasks"])
    for record in data.get("workflow_rules") or []:
        store.upsert_workflow_rule(WorkflowRule.from_dict(record))
    for record in data.get("automations") or []:
        store.add_automation(record)

    logger.debug(f"[BOARD] loaded {len(store.tasks)} task(s), {len(store.automations)} automation(s) from {path}")
    return store


def save_board(store: MemoryStore, path: Path) -> None:
    """Write the store back, replacing the file atomically."""
    data = {
        "boards": sorted(store.destinations) if store.destinations is not None else [],
        "tasks": list(store.tasks.values()),
        "subtasks": list(store.subtasks.values()),
        "workflow_rules": list(store.workflow_rules.values()),
        "automations": list(store.automations.values()),
    }
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True))
    tmp_path.replace(path)
