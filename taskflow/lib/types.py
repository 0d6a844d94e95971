"""
Shared data types for the task lifecycle engine.

Records mirror what the stores hand back. Each one converts to and from the
plain dict form the stores persist, so store implementations never need to
know about the dataclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SubtaskKind(str, Enum):
    CHECK = "check"
    TEXT = "text"


class TriggerType(str, Enum):
    STATUS_CHANGE = "status_change"
    TASK_CREATED = "task_created"


def parse_kind(value) -> SubtaskKind:
    """Parse a subtask kind, accepting the long-form aliases operators type."""
    if isinstance(value, SubtaskKind):
        return value
    aliases = {"checkbox": SubtaskKind.CHECK, "free-text": SubtaskKind.TEXT, "free_text": SubtaskKind.TEXT}
    if value in aliases:
        return aliases[value]
    return SubtaskKind(value or SubtaskKind.CHECK.value)


@dataclass
class HistoryEntry:
    """One line of a task's append-only status log."""
    status: str
    assignee_ids: list[str]
    timestamp: str                         # ISO 8601
    is_automated: bool = False
    user_id: Optional[str] = None          # Who made a manual change

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            status=data.get("status"),
            assignee_ids=list(data.get("assignee_ids") or []),
            timestamp=data.get("timestamp", ""),
            # Older entries flag automation with "automation"
            is_automated=bool(data.get("is_automated", data.get("automation", False))),
            user_id=data.get("user_id"),
        )

    def to_dict(self) -> dict:
        data = {
            "status": self.status,
            "assignee_ids": list(self.assignee_ids),
            "timestamp": self.timestamp,
            "is_automated": self.is_automated,
        }
        if self.user_id is not None:
            data["user_id"] = self.user_id
        return data


@dataclass
class Task:
    id: str
    type: Optional[str]
    status: str
    assignee_ids: list[str] = field(default_factory=list)
    status_history: list[HistoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=data["id"],
            type=data.get("type"),
            status=data.get("status"),
            assignee_ids=list(data.get("assignee_ids") or []),
            status_history=[HistoryEntry.from_dict(h) for h in data.get("status_history") or []],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "status": self.status,
            "assignee_ids": list(self.assignee_ids),
            "status_history": [h.to_dict() for h in self.status_history],
        }


@dataclass
class Subtask:
    id: str
    task_id: str
    title: str
    kind: SubtaskKind = SubtaskKind.CHECK
    is_required: bool = False
    is_completed: bool = False
    content: Optional[str] = None          # Only meaningful for TEXT

    @property
    def is_satisfied(self) -> bool:
        """Checkbox items need the tick, text items need non-blank content."""
        if self.kind == SubtaskKind.TEXT:
            return bool(self.content and self.content.strip())
        return self.is_completed

    @classmethod
    def from_dict(cls, data: dict) -> "Subtask":
        return cls(
            id=data["id"],
            task_id=data["task_id"],
            title=data["title"],
            kind=parse_kind(data.get("kind", data.get("type"))),
            is_required=bool(data.get("is_required", False)),
            is_completed=bool(data.get("is_completed", False)),
            content=data.get("content"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "title": self.title,
            "kind": self.kind.value,
            "is_required": self.is_required,
            "is_completed": self.is_completed,
            "content": self.content,
        }


@dataclass
class RequiredItem:
    """A checklist item a workflow rule demands."""
    title: str
    kind: SubtaskKind = SubtaskKind.CHECK

    @classmethod
    def from_dict(cls, data: dict) -> "RequiredItem":
        return cls(title=data["title"], kind=parse_kind(data.get("kind", data.get("type"))))

    def to_dict(self) -> dict:
        return {"title": self.title, "kind": self.kind.value}


@dataclass
class WorkflowRule:
    """Required checklist for entering `status_value` on a task of `task_type`."""
    task_type: str
    status_value: str
    required_subtasks: list[RequiredItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "WorkflowRule":
        return cls(
            task_type=data["task_type"],
            status_value=data["status_value"],
            required_subtasks=[RequiredItem.from_dict(r) for r in data.get("required_subtasks") or []],
        )

    def to_dict(self) -> dict:
        return {
            "task_type": self.task_type,
            "status_value": self.status_value,
            "required_subtasks": [r.to_dict() for r in self.required_subtasks],
        }


def _status_list(value) -> list[str]:
    """Allow-list from stored config; a lone status string means just that status."""
    if not value:
        return []
    if not isinstance(value, (list, tuple)):
        return [str(value)]
    return [str(v) for v in value]


@dataclass
class TriggerConfig:
    """Allow-lists for status_change triggers. Empty means any status."""
    from_status: list[str] = field(default_factory=list)
    to_status: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TriggerConfig":
        data = data or {}
        return cls(
            from_status=_status_list(data.get("from_status")),
            to_status=_status_list(data.get("to_status")),
        )

    def to_dict(self) -> dict:
        return {"from_status": list(self.from_status), "to_status": list(self.to_status)}


@dataclass
class AutomationRule:
    """A trigger plus an ordered action list.

    `actions` holds the raw stored records; they are parsed into typed
    actions only when the rule fires, so one malformed rule cannot stop the
    others from loading.
    """
    id: str
    trigger_type: str
    trigger_config: TriggerConfig = field(default_factory=TriggerConfig)
    actions: list = field(default_factory=list)
    is_active: bool = True
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AutomationRule":
        return cls(
            id=str(data["id"]),
            trigger_type=data.get("trigger_type"),
            trigger_config=TriggerConfig.from_dict(data.get("trigger_config")),
            actions=data.get("actions", []),
            is_active=bool(data.get("is_active", True)),
            name=data.get("name", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "trigger_type": self.trigger_type,
            "trigger_config": self.trigger_config.to_dict(),
            "actions": self.actions,
            "is_active": self.is_active,
        }


@dataclass
class GateResult:
    allowed: bool
    missing: list[str] = field(default_factory=list)


@dataclass
class ExecutionResult:
    """What an action list proposes for one task.

    `error` is set when a move_task action failed part-way; `updates` then
    holds whatever the earlier actions produced.
    """
    updates: dict = field(default_factory=dict)
    changed: bool = False
    history_entry: Optional[HistoryEntry] = None
    error: Optional[Exception] = None


@dataclass
class RuleResult:
    rule_id: str
    success: bool
    updates: Optional[dict] = None
    error: Optional[str] = None
