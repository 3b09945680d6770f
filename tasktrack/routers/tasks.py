from math import ceil
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasktrack.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tasktrack.database import get_db
from tasktrack.dependencies import require_identity
from tasktrack.models.task import TaskPriority, TaskStatus
from tasktrack.schemas.task import TaskCreate, TaskUpdate, TaskOut, TaskPage
from tasktrack.services import task_mutations, task_query
from tasktrack.services.task_query import TaskFilters, TaskSort

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=TaskPage)
def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_identity),
):
    filters = TaskFilters(
        status=status.value if status else None,
        priority=priority.value if priority else None,
        search=search,
    )
    items, total = task_query.list_tasks(db, user_id, filters, TaskSort(sort_by, sort_order), page, limit)
    return {
        "items": [TaskOut.model_validate(t) for t in items],
        "pagination": {"page": page, "limit": limit, "total": total, "pages": ceil(total / limit)},
    }


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: str, db: Session = Depends(get_db), user_id: str = Depends(require_identity)):
    return task_query.get_task(db, user_id, task_id)


@router.post("", response_model=TaskOut, status_code=201)
def create_task(task: TaskCreate, db: Session = Depends(get_db), user_id: str = Depends(require_identity)):
    return task_mutations.create_task(db, user_id, task)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    changes: TaskUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_identity),
):
    return task_mutations.update_task(db, user_id, task_id, changes)


@router.delete("/{task_id}", response_model=TaskOut)
def delete_task(task_id: str, db: Session = Depends(get_db), user_id: str = Depends(require_identity)):
    """Delete a task and return it as it was just before removal."""
    return task_mutations.delete_task(db, user_id, task_id)
