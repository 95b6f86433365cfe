"""
Role, ownership and assignment based permission rules for tasks.

Every decision is a pure function of the actor (id + roles) and an
immutable snapshot of the task (creator + assignee ids). Callers check
that the task exists before asking.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from tasktracker.core.identity import Identity, actor_id
from tasktracker.errors import Unauthorized
from tasktracker.utils.ids import parse_uuid

logger = logging.getLogger(__name__)


class Roles:
    """Standard roles in the task tracker."""
    ADMIN = "Admin"
    USER = "User"

    # All roles list for validation
    ALL = [ADMIN, USER]

    # Role capabilities matrix
    # Admin: everything, including status/schedule changes, deletion
    #        and assigning other users
    # User: create tasks, self-assign, edit content of tasks they
    #       created or are assigned to


class Operation(str, enum.Enum):
    EDIT_CONTENT = "edit_content"          # title, description, progress
    EDIT_STATUS = "edit_status"
    EDIT_SCHEDULE = "edit_schedule"        # due date, priority
    DELETE = "delete"
    SELF_ASSIGN = "self_assign"            # assign/unassign yourself
    ASSIGN_OTHERS = "assign_others"        # assign/unassign an arbitrary user


# Which task fields each edit operation governs
FIELD_OPERATIONS = {
    "title": Operation.EDIT_CONTENT,
    "description": Operation.EDIT_CONTENT,
    "progress": Operation.EDIT_CONTENT,
    "status": Operation.EDIT_STATUS,
    "due_date": Operation.EDIT_SCHEDULE,
    "priority": Operation.EDIT_SCHEDULE,
}

ADMIN_ONLY = frozenset({
    Operation.EDIT_STATUS,
    Operation.EDIT_SCHEDULE,
    Operation.DELETE,
    Operation.ASSIGN_OTHERS,
})


@dataclass(frozen=True)
class TaskSnapshot:
    """The parts of a task the permission rules look at."""

    creator_id: str
    assignee_ids: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, creator_id, assignee_ids: Iterable = ()) -> "TaskSnapshot":
        """Build a snapshot, normalizing ids (UUIDs or strings) to strings."""
        return cls(
            creator_id=str(creator_id),
            assignee_ids=frozenset(str(a) for a in assignee_ids),
        )


def check_is_admin(actor: Optional[Identity]) -> bool:
    """Check if actor holds the Admin role."""
    return actor_id(actor) is not None and actor.has_role(Roles.ADMIN)


def check_is_creator(actor: Optional[Identity], task: TaskSnapshot) -> bool:
    uid = actor_id(actor)
    return uid is not None and uid == task.creator_id


def check_is_assignee(actor: Optional[Identity], task: TaskSnapshot) -> bool:
    uid = actor_id(actor)
    return uid is not None and uid in task.assignee_ids


def check_can_edit(actor: Optional[Identity], task: TaskSnapshot) -> bool:
    """Creator, admin or any current assignee may edit title/description/progress."""
    return (
        check_is_creator(actor, task)
        or check_is_admin(actor)
        or check_is_assignee(actor, task)
    )


def same_user(left, right) -> bool:
    """Compare user ids as UUIDs; plain strings only when either side isn't one."""
    left_uuid, right_uuid = parse_uuid(left), parse_uuid(right)
    if left_uuid is not None and right_uuid is not None:
        return left_uuid == right_uuid
    return str(left) == str(right)


def is_allowed(
    actor: Optional[Identity],
    operation: Operation,
    task: Optional[TaskSnapshot] = None,
    target_user_id: Optional[str] = None,
) -> bool:
    """
    Decide whether an actor may perform an operation.

    Args:
        actor: The requesting identity, None when anonymous
        operation: What the actor wants to do
        task: Snapshot of the task, required for EDIT_CONTENT
        target_user_id: For SELF_ASSIGN, the user being (un)assigned; required

    Returns:
        True if permitted, False otherwise
    """
    uid = actor_id(actor)
    if uid is None:
        return False

    if operation in ADMIN_ONLY:
        return check_is_admin(actor)

    if operation == Operation.EDIT_CONTENT:
        if task is None:
            raise ValueError("task snapshot is required for content edits")
        return check_can_edit(actor, task)

    if operation == Operation.SELF_ASSIGN:
        return target_user_id is not None and same_user(target_user_id, uid)

    return False


def can_assign(actor: Optional[Identity], target_user_id) -> bool:
    """Self (un)assignment is open to everyone signed in; others need Admin."""
    uid = actor_id(actor)
    if uid is None:
        return False
    if same_user(target_user_id, uid):
        return is_allowed(actor, Operation.SELF_ASSIGN, target_user_id=target_user_id)
    return is_allowed(actor, Operation.ASSIGN_OTHERS)


def editable_fields(actor: Optional[Identity], task: TaskSnapshot) -> FrozenSet[str]:
    """All task fields the actor may change on this task."""
    return frozenset(
        name
        for name, operation in FIELD_OPERATIONS.items()
        if is_allowed(actor, operation, task)
    )


def raise_if_not_allowed(
    actor: Optional[Identity],
    operation: Operation,
    task: Optional[TaskSnapshot] = None,
    action: str = "perform this action",
) -> None:
    """
    Raise Unauthorized if the actor may not perform the operation.

    Args:
        actor: The requesting identity
        operation: Operation being checked
        task: Task snapshot, where the rule needs one
        action: Description of action being blocked

    Raises:
        Unauthorized: if the rule denies the operation
    """
    if not is_allowed(actor, operation, task):
        logger.warning(
            "Denied %s for actor %s", operation.value, actor_id(actor) or "<anonymous>"
        )
        raise Unauthorized(f"Insufficient permissions to {action}")
