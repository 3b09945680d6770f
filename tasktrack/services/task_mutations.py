"""Create, update and delete tasks on behalf of their owner.

Payloads arrive already validated (pydantic), so no write starts with bad
input. Updates and deletes match on (id, owner) in a single predicate: a task
that belongs to someone else looks exactly like one that does not exist.
"""

from sqlalchemy.orm import Session

from tasktrack.errors import NotFound
from tasktrack.log import get_logger
from tasktrack.models.task import Task, utcnow
from tasktrack.schemas.task import TaskCreate, TaskUpdate
from tasktrack.services.task_query import get_task, owned_by
from tasktrack.store import Store

log = get_logger(__name__)


def create_task(db: Session, owner_id: str, data: TaskCreate) -> Task:
    now = utcnow()
    task = Task(**data.model_dump(), owner=owner_id, created_at=now, updated_at=now)
    task = Store(db, Task).insert(task)
    log.info("task_created", task_id=task.id, owner=owner_id)
    return task


def update_task(db: Session, owner_id: str, task_id: str, data: TaskUpdate) -> Task:
    patch = data.patch()
    if not patch:
        return get_task(db, owner_id, task_id)

    patch["updated_at"] = utcnow()
    task = Store(db, Task).update_one(owned_by(owner_id, Task.id == task_id), patch)
    if task is None:
        raise NotFound("Task not found")
    log.info("task_updated", task_id=task_id, fields=sorted(patch))
    return task


def delete_task(db: Session, owner_id: str, task_id: str) -> Task:
    task = Store(db, Task).delete_one(*owned_by(owner_id, Task.id == task_id))
    if task is None:
        raise NotFound("Task not found")
    log.info("task_deleted", task_id=task_id)
    return task
