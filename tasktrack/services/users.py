"""Credential store and the signup/login/profile flows built on it."""

from sqlalchemy.orm import Session

from tasktrack.errors import Conflict, InvalidCredentials, NotFound
from tasktrack.log import get_logger
from tasktrack.models.task import utcnow
from tasktrack.models.user import User
from tasktrack.schemas.user import UserCreate, UserUpdate, normalize_email
from tasktrack.store import Store
from tasktrack.utils.passwords import PasswordHasher

log = get_logger(__name__)


def find_user_by_email(db: Session, email: str):
    return Store(db, User).find_one(User.email == normalize_email(email))


def find_user_by_id(db: Session, user_id: str):
    return Store(db, User).find_one(User.id == user_id)


def insert_user(db: Session, user: User) -> User:
    return Store(db, User).insert(user)


def update_user(db: Session, user_id: str, patch: dict):
    if not patch:
        return find_user_by_id(db, user_id)
    return Store(db, User).update_one([User.id == user_id], {**patch, "updated_at": utcnow()})


def signup(db: Session, hasher: PasswordHasher, data: UserCreate) -> User:
    email = normalize_email(data.email)
    if find_user_by_email(db, email):
        raise Conflict("Email already exists")

    user = User(name=data.name, email=email, password_hash=hasher.hash(data.password))
    try:
        user = insert_user(db, user)
    except Conflict:
        # lost a race against a concurrent signup for the same email
        raise Conflict("Email already exists")
    log.info("user_signed_up", user_id=user.id)
    return user


def authenticate(db: Session, hasher: PasswordHasher, email: str, password: str) -> User:
    user = find_user_by_email(db, email)
    if user is None:
        hasher.dummy_verify()
        raise InvalidCredentials()
    if not hasher.verify(password, user.password_hash):
        log.info("login_failed", user_id=user.id)
        raise InvalidCredentials()

    if hasher.needs_rehash(user.password_hash):
        user = update_user(db, user.id, {"password_hash": hasher.hash(password)})
        log.info("password_rehashed", user_id=user.id, rounds=hasher.rounds)
    return user


def get_profile(db: Session, user_id: str) -> User:
    user = find_user_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def update_profile(db: Session, user_id: str, data: UserUpdate) -> User:
    user = update_user(db, user_id, data.patch())
    if user is None:
        raise NotFound("User not found")
    return user
