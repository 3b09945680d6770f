from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tasktrack.schemas.user import UserCreate, UserLogin, UserOut, LoginOut
from tasktrack.services import users
from tasktrack.utils.passwords import PasswordHasher
from tasktrack.utils.tokens import TokenService
from tasktrack.dependencies import get_password_hasher, get_token_service
from tasktrack.database import get_db

# signup and login establish identity, so no auth gate here
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserOut, status_code=201)
def signup(
    payload: UserCreate,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    return users.signup(db, hasher, payload)


@router.post("/login", response_model=LoginOut)
def login(
    payload: UserLogin,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    user = users.authenticate(db, hasher, payload.email, payload.password)
    return {"token": tokens.issue(user.id), "user": UserOut.model_validate(user)}
