"""Assignee set reduction.

Pure functions that fold an ordered list of add/remove/replace instructions
over a task's assignee ids. No store access happens here; the executor feeds
in the task snapshot and reads back the result.

Usage:
    from taskflow.workflow.assignees import Add, Remove, reduce_assignees

    result = reduce_assignees(["u1"], [Remove(), Add(("u2",))])
    result.ids      # ["u2"]
    result.changed  # True
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from taskflow.lib.types import HistoryEntry

logger = logging.getLogger(__name__)

# Placeholder values that leak in from loosely-typed clients
INVALID_IDS = {"", "null", "undefined", "None"}


@dataclass(frozen=True)
class Add:
    ids: tuple = ()


@dataclass(frozen=True)
class Remove:
    """Remove the listed ids. No ids (None or empty) clears the whole set.

    A non-empty list of placeholder ids removes nobody; it never clears.
    """
    ids: Optional[tuple] = None

    @property
    def is_clear(self) -> bool:
        if self.ids is None:
            return True
        if isinstance(self.ids, (str, int)):
            return False
        return len(self.ids) == 0


@dataclass(frozen=True)
class ReplaceWithPreviousHandler:
    from_status: str
    history: tuple = ()


Instruction = Union[Add, Remove, ReplaceWithPreviousHandler]


@dataclass
class AssigneeReduction:
    ids: list[str]
    changed: bool      # Membership differs from the input set
    touched: bool      # An add or remove instruction was present


def normalize_ids(ids) -> list[str]:
    """Stringify, drop empty/placeholder ids and de-duplicate, keeping first occurrence."""
    if ids is None:
        return []
    if isinstance(ids, (str, int)):
        ids = [ids]

    result = []
    for raw in ids:
        if raw is None:
            continue
        value = str(raw).strip()
        if value in INVALID_IDS or value in result:
            continue
        result.append(value)
    return result


def previous_handler(history: Iterable[HistoryEntry], from_status: str) -> Optional[str]:
    """Most recent user recorded against `from_status`, newest entry first."""
    for entry in reversed(list(history)):
        if entry.status != from_status:
            continue
        user = normalize_ids(entry.user_id)
        if user:
            return user[0]
    return None


def reduce_assignees(current, instructions: list[Instruction]) -> AssigneeReduction:
    """Apply instructions in order and report the resulting set.

    A previous-handler replacement never assigns someone the same run
    removes: it is skipped if any Remove in the run clears the set, or if any
    Remove in the run names the candidate. Removals are collected across the
    whole run, not only the instructions before the replacement.
    """
    working = normalize_ids(current)
    original = list(working)

    clears_all = any(isinstance(i, Remove) and i.is_clear for i in instructions)
    removed: set[str] = set()
    for instruction in instructions:
        if isinstance(instruction, Remove) and not instruction.is_clear:
            removed.update(normalize_ids(instruction.ids))

    touched = False
    for instruction in instructions:
        if isinstance(instruction, Add):
            touched = True
            for user_id in normalize_ids(instruction.ids):
                if user_id not in working:
                    working.append(user_id)

        elif isinstance(instruction, Remove):
            touched = True
            if instruction.is_clear:
                working = []
            else:
                targets = set(normalize_ids(instruction.ids))
                working = [user_id for user_id in working if user_id not in targets]

        elif isinstance(instruction, ReplaceWithPreviousHandler):
            if clears_all:
                logger.debug(f"[ASSIGNEES] reassign to previous '{instruction.from_status}' handler "
                             "suppressed by remove-all in the same run")
                continue
            candidate = previous_handler(instruction.history, instruction.from_status)
            if candidate is None:
                continue
            if candidate in removed:
                logger.debug(f"[ASSIGNEES] reassign to {candidate} suppressed, removed in the same run")
                continue
            working = [candidate]

        else:
            raise TypeError(f"Unknown assignee instruction: {instruction!r}")

    working = normalize_ids(working)
    return AssigneeReduction(
        ids=working,
        changed=sorted(working) != sorted(original),
        touched=touched,
    )
