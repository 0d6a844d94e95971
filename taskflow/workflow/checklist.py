"""Direct checklist edits.

Users tick checkbox items, fill in text items and add their own ad-hoc
items. Required items can be edited but never deleted.
"""

import logging

from taskflow.lib.errors import RequiredSubtaskError
from taskflow.lib.stores import SubtaskStore
from taskflow.lib.types import Subtask, SubtaskKind

logger = logging.getLogger(__name__)


def find_subtask(subtasks: SubtaskStore, task_id: str, title: str) -> Subtask:
    for subtask in subtasks.list_by_task(task_id):
        if subtask.title == title:
            return subtask
    raise KeyError(f"No subtask '{title}' on task {task_id}")


def set_subtask_content(subtasks: SubtaskStore, subtask: Subtask, content: str) -> Subtask:
    """Store text content; completion follows whether it is non-blank."""
    return subtasks.update(subtask.id, {
        "content": content,
        "is_completed": bool(content and content.strip()),
    })


def toggle_subtask(subtasks: SubtaskStore, subtask: Subtask) -> Subtask:
    if subtask.kind != SubtaskKind.CHECK:
        raise ValueError(f"Subtask '{subtask.title}' is a text item; set its content instead")
    return subtasks.update(subtask.id, {"is_completed": not subtask.is_completed})


def add_subtask(subtasks: SubtaskStore, task_id: str, title: str) -> Subtask:
    """Add a user checkbox item. These are never required.

    Titles are unique per task; reusing one would let an optional item stand
    in for a required item of the same name.
    """
    title = title.strip()
    if not title:
        raise ValueError("Subtask title is empty")
    if any(s.title == title for s in subtasks.list_by_task(task_id)):
        raise ValueError(f"Subtask '{title}' already exists on task {task_id}")
    created = subtasks.insert_many([{
        "task_id": task_id,
        "title": title,
        "kind": SubtaskKind.CHECK.value,
        "is_required": False,
        "is_completed": False,
    }])
    return created[0]


def delete_subtask(subtasks: SubtaskStore, subtask: Subtask) -> None:
    if subtask.is_required:
        raise RequiredSubtaskError(subtask.id, subtask.title)
    subtasks.delete(subtask.id)
    logger.info(f"[CHECKLIST] {subtask.task_id}: removed '{subtask.title}'")
