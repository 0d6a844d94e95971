"""
Error types raised across the engine.

Collaborator failures surface as StoreUnavailable or MoveFailed, gate
denials as TransitionBlocked. ValidationError lives with the schema code and
is re-exported here so callers have one import site.
"""

from taskflow.lib.validate import ValidationError

__all__ = [
    "StoreUnavailable",
    "MoveFailed",
    "TransitionBlocked",
    "RequiredSubtaskError",
    "ValidationError",
]


class StoreUnavailable(Exception):
    """A task, subtask or rule store read or write failed."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class MoveFailed(Exception):
    """The board mover could not move a task."""

    def __init__(self, task_id: str, destination: str, message: str):
        self.task_id = task_id
        self.destination = destination
        super().__init__(f"Could not move {task_id} to {destination}: {message}")


class TransitionBlocked(Exception):
    """Raised when required subtasks of the destination status are unmet."""

    def __init__(self, task_id: str, to_status: str, missing: list[str]):
        self.task_id = task_id
        self.to_status = to_status
        self.missing = missing
        super().__init__(
            f"Cannot move {task_id} to {to_status}: complete {', '.join(missing)}"
        )


class RequiredSubtaskError(Exception):
    """Required subtasks cannot be deleted."""

    def __init__(self, subtask_id: str, title: str):
        self.subtask_id = subtask_id
        self.title = title
        super().__init__(f"Subtask '{title}' is required and cannot be removed")
