"""Owner-scoped task queries.

``owner_id`` is a required positional argument of every function here and
the ownership predicate is always the first criterion, so caller supplied
filters can narrow a result but never widen it past the caller's own tasks.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import case, or_
from sqlalchemy.orm import Session

from tasktrack.config import MAX_PAGE_SIZE
from tasktrack.errors import NotFound, ValidationError
from tasktrack.models.task import Task, TaskPriority, TaskStatus
from tasktrack.store import Store

_STATUS_ORDER = case({s.value: i for i, s in enumerate(TaskStatus)}, value=Task.status)
_PRIORITY_ORDER = case({p.value: i for i, p in enumerate(TaskPriority)}, value=Task.priority)

SORT_FIELDS = {
    "title": Task.title,
    "description": Task.description,
    "status": _STATUS_ORDER,
    "priority": _PRIORITY_ORDER,
    "dueDate": Task.due_date,
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
}
# snake_case spellings are accepted too
SORT_FIELDS.update({
    "due_date": Task.due_date,
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
})


@dataclass
class TaskFilters:
    status: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None


@dataclass
class TaskSort:
    field: str = "createdAt"
    order: str = "desc"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def owned_by(owner_id: str, *criteria) -> list:
    if not owner_id:
        raise ValueError("owner_id is required")
    return [Task.owner == owner_id, *criteria]


def _criteria(owner_id: str, filters: TaskFilters) -> list:
    extra = []
    if filters.status:
        extra.append(Task.status == filters.status)
    if filters.priority:
        extra.append(Task.priority == filters.priority)
    term = (filters.search or "").strip()
    if term:
        pattern = f"%{_escape_like(term)}%"
        extra.append(or_(Task.title.ilike(pattern, escape="\\"), Task.description.ilike(pattern, escape="\\")))
    return owned_by(owner_id, *extra)


def _ordering(sort: TaskSort) -> list:
    errors = {}
    column = SORT_FIELDS.get(sort.field)
    if column is None:
        errors["sortBy"] = f"Cannot sort by '{sort.field}'"
    if sort.order not in ("asc", "desc"):
        errors["sortOrder"] = "Sort order must be 'asc' or 'desc'"
    if errors:
        raise ValidationError(errors)
    if sort.order == "asc":
        return [column.asc(), Task.id.asc()]
    return [column.desc(), Task.id.desc()]


def list_tasks(
    db: Session,
    owner_id: str,
    filters: Optional[TaskFilters] = None,
    sort: Optional[TaskSort] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Task], int]:
    """Return one page of the caller's tasks and the total number that match."""
    errors = {}
    if page < 1:
        errors["page"] = "Page must be a positive integer"
    if not 1 <= limit <= MAX_PAGE_SIZE:
        errors["limit"] = f"Limit must be between 1 and {MAX_PAGE_SIZE}"
    if errors:
        raise ValidationError(errors)

    criteria = _criteria(owner_id, filters or TaskFilters())
    order_by = _ordering(sort or TaskSort())
    store = Store(db, Task)
    items = store.find_many(criteria, order_by=order_by, skip=(page - 1) * limit, limit=limit)
    return items, store.count(*criteria)


def get_task(db: Session, owner_id: str, task_id: str) -> Task:
    task = Store(db, Task).find_one(*owned_by(owner_id, Task.id == task_id))
    if task is None:
        raise NotFound("Task not found")
    return task
