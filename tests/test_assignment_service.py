"""Assignment protocol and automatic status transitions."""

import uuid

import pytest

from tasktracker.errors import NotFound, Unauthorized
from tasktracker.models.task import TaskStatus
from tasktracker.repositories.task_assignment_repository import TaskAssignmentRepository
from tasktracker.schemas.task import TaskCreate, TaskUpdate
from tasktracker.services.assignment_service import AssignmentChange, AssignmentService
from tasktracker.services.task_service import TaskService

pytestmark = pytest.mark.db


async def create_task(db, actor, title="Write report"):
    return await TaskService(db).create(actor, TaskCreate(title=title))


async def status_of(db, actor, task_id):
    return (await TaskService(db).view(actor, task_id)).status


async def assignee_ids(db, actor, task_id):
    task = await TaskService(db).view(actor, task_id)
    return {str(u.id) for u in task.assigned_users}


@pytest.mark.asyncio
async def test_self_assign_then_unassign_round_trip(db, u1, u2):
    task = await create_task(db, u1)
    assert task.status == TaskStatus.NOT_STARTED
    service = AssignmentService(db)

    assert await service.assign_self(task.id, u2) == AssignmentChange.APPLIED
    assert await status_of(db, u1, task.id) == TaskStatus.IN_PROGRESS
    assert await assignee_ids(db, u1, task.id) == {u2.id}

    assert await service.unassign_self(task.id, u2) == AssignmentChange.APPLIED
    assert await status_of(db, u1, task.id) == TaskStatus.NOT_STARTED
    assert await assignee_ids(db, u1, task.id) == set()


@pytest.mark.asyncio
async def test_assign_is_idempotent(db, u1, u2):
    task = await create_task(db, u1)
    service = AssignmentService(db)

    assert await service.assign(task.id, u2.id, u2) == AssignmentChange.APPLIED
    assert await service.assign(task.id, u2.id, u2) == AssignmentChange.CONFLICT_IGNORED

    assert await TaskAssignmentRepository(db).count_for_task(task.id) == 1
    assert await status_of(db, u1, task.id) == TaskStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_unassign_missing_pair_is_noop(db, u1, u2):
    task = await create_task(db, u1)
    result = await AssignmentService(db).unassign(task.id, u2.id, u2)
    assert result == AssignmentChange.CONFLICT_IGNORED
    assert await status_of(db, u1, task.id) == TaskStatus.NOT_STARTED


@pytest.mark.asyncio
async def test_status_stays_in_progress_while_someone_is_assigned(db, u1, u2, u3):
    task = await create_task(db, u1)
    service = AssignmentService(db)
    await service.assign_self(task.id, u2)
    await service.assign_self(task.id, u3)

    await service.unassign_self(task.id, u2)
    assert await status_of(db, u1, task.id) == TaskStatus.IN_PROGRESS
    assert await assignee_ids(db, u1, task.id) == {u3.id}


@pytest.mark.asyncio
async def test_user_cannot_assign_someone_else(db, u1, u2, u3):
    task = await create_task(db, u1)
    service = AssignmentService(db)
    with pytest.raises(Unauthorized):
        await service.assign(task.id, u3.id, u2)

    await service.assign_self(task.id, u3)
    with pytest.raises(Unauthorized):
        await service.unassign(task.id, u3.id, u2)


@pytest.mark.asyncio
async def test_admin_assigns_and_unassigns_other_users(db, admin, u1, u2):
    task = await create_task(db, u1)
    service = AssignmentService(db)

    assert await service.assign(task.id, u2.id, admin) == AssignmentChange.APPLIED
    assert await status_of(db, u1, task.id) == TaskStatus.IN_PROGRESS

    assert await service.unassign(task.id, u2.id, admin) == AssignmentChange.APPLIED
    assert await status_of(db, u1, task.id) == TaskStatus.NOT_STARTED


@pytest.mark.asyncio
async def test_anonymous_cannot_assign(db, u1):
    task = await create_task(db, u1)
    with pytest.raises(Unauthorized):
        await AssignmentService(db).assign_self(task.id, None)
    with pytest.raises(Unauthorized):
        await AssignmentService(db).assign(task.id, u1.id, None)


@pytest.mark.asyncio
async def test_missing_task_is_not_found(db, u1, admin):
    service = AssignmentService(db)
    with pytest.raises(NotFound):
        await service.assign_self(uuid.uuid4(), u1)
    with pytest.raises(NotFound):
        await service.unassign_self(uuid.uuid4(), u1)
    with pytest.raises(NotFound):
        await service.list_assigned_users(uuid.uuid4())


@pytest.mark.asyncio
async def test_admin_assigning_unknown_user_is_not_found(db, admin, u1):
    task = await create_task(db, u1)
    with pytest.raises(NotFound):
        await AssignmentService(db).assign(task.id, str(uuid.uuid4()), admin)
    with pytest.raises(NotFound):
        await AssignmentService(db).assign(task.id, "not-a-uuid", admin)


@pytest.mark.asyncio
async def test_manual_override_survives_first_assignment(db, admin, u1, u2):
    task = await create_task(db, u1)
    await TaskService(db).update(admin, task.id, TaskUpdate(status=TaskStatus.ARCHIVED))

    service = AssignmentService(db)
    assert await service.assign_self(task.id, u2) == AssignmentChange.APPLIED
    assert await status_of(db, u1, task.id) == TaskStatus.ARCHIVED
    assert await assignee_ids(db, u1, task.id) == {u2.id}


@pytest.mark.parametrize(
    "override", [TaskStatus.UNDER_REVIEW, TaskStatus.COMPLETED, TaskStatus.ARCHIVED]
)
@pytest.mark.asyncio
async def test_manual_override_survives_last_unassignment(db, admin, u1, u2, override):
    task = await create_task(db, u1)
    service = AssignmentService(db)
    await service.assign_self(task.id, u2)
    await TaskService(db).update(admin, task.id, TaskUpdate(status=override))

    await service.unassign_self(task.id, u2)
    assert await status_of(db, u1, task.id) == override
    assert await assignee_ids(db, u1, task.id) == set()


@pytest.mark.asyncio
async def test_list_assigned_users_in_assignment_order(db, u1, u2, u3):
    task = await create_task(db, u1)
    service = AssignmentService(db)
    await service.assign_self(task.id, u3)
    await service.assign_self(task.id, u2)

    users = await service.list_assigned_users(task.id)
    assert [u.display_name for u in users] == ["Carol", "Bob"]


@pytest.mark.asyncio
async def test_own_id_in_any_uuid_spelling_counts_as_self(db, u1, u2):
    task = await create_task(db, u1)
    service = AssignmentService(db)

    assert await service.assign(task.id, u2.id.upper(), u2) == AssignmentChange.APPLIED
    assert await assignee_ids(db, u1, task.id) == {u2.id}

    braced = "{" + u2.id + "}"
    assert await service.assign(task.id, braced, u2) == AssignmentChange.CONFLICT_IGNORED
    assert await service.unassign(task.id, u2.id.upper(), u2) == AssignmentChange.APPLIED
    assert await assignee_ids(db, u1, task.id) == set()
    assert await status_of(db, u1, task.id) == TaskStatus.NOT_STARTED


@pytest.mark.asyncio
async def test_deleting_a_user_removes_their_assignments(db, u1, u2, u2_user):
    task = await create_task(db, u1)
    await AssignmentService(db).assign_self(task.id, u2)

    await db.delete(u2_user)
    await db.commit()

    assert await TaskAssignmentRepository(db).count_for_task(task.id) == 0
    assert await assignee_ids(db, u1, task.id) == set()
    # Removing a user account is not an unassignment; status is left as is
    assert await status_of(db, u1, task.id) == TaskStatus.IN_PROGRESS
