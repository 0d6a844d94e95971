"""Typed automation actions.

Stored rules keep actions as `{"type": ..., "config": {...}}` records. They are
validated against the automation_rule schema and parsed into one of five
action classes before the executor touches them.
"""

from dataclasses import dataclass
from typing import Optional, Union

from taskflow.lib.validate import ValidationError, validate


@dataclass(frozen=True)
class ChangeStatus:
    status: str


@dataclass(frozen=True)
class SetAssignee:
    assignee_ids: tuple = ()


@dataclass(frozen=True)
class RemoveAssignee:
    assignee_ids: Optional[tuple] = None   # None removes everyone


@dataclass(frozen=True)
class ReassignPrevious:
    from_status: str


@dataclass(frozen=True)
class MoveTask:
    destination: str


Action = Union[ChangeStatus, SetAssignee, RemoveAssignee, ReassignPrevious, MoveTask]


def _id_tuple(value) -> Optional[tuple]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def parse_action(record: dict) -> Action:
    """Build a typed action from an already validated record."""
    action_type = record["type"]
    config = record.get("config") or {}

    if action_type == "change_status":
        return ChangeStatus(status=config["status"])
    if action_type == "set_assignee":
        return SetAssignee(assignee_ids=_id_tuple(config.get("assignee_ids")) or ())
    if action_type == "remove_assignee":
        return RemoveAssignee(assignee_ids=_id_tuple(config.get("assignee_ids")))
    if action_type == "reassign_previous":
        return ReassignPrevious(from_status=config["from_status"])
    if action_type in ("move_task", "move_task_to_social_media"):
        return MoveTask(destination=config["destination"])
    raise ValidationError("automation_rule", f"Unknown action type '{action_type}'", "actions")


def parse_actions(actions, trigger_type: str = "status_change") -> list[Action]:
    """Validate and parse a rule's stored action list.

    Raises:
        ValidationError: If the payload is not a list of well-formed actions
    """
    if not isinstance(actions, list):
        raise ValidationError(
            "automation_rule", f"actions must be a list, got {type(actions).__name__}", "actions"
        )
    validate({"trigger_type": trigger_type, "actions": actions}, "automation_rule")
    return [parse_action(record) for record in actions]
