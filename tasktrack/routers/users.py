from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tasktrack.schemas.user import UserOut, UserUpdate
from tasktrack.services import users
from tasktrack.dependencies import require_identity
from tasktrack.database import get_db

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile", response_model=UserOut)
def get_profile(db: Session = Depends(get_db), user_id: str = Depends(require_identity)):
    return users.get_profile(db, user_id)


@router.put("/profile", response_model=UserOut)
def update_profile(changes: UserUpdate, db: Session = Depends(get_db), user_id: str = Depends(require_identity)):
    return users.update_profile(db, user_id, changes)
