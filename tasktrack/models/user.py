import enum

from sqlalchemy import Column, String, Text, DateTime
from tasktrack.database import Base
from tasktrack.models.task import new_id, utcnow


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False)
    # stored normalized (trimmed, lowercased); the unique index settles signup races
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    avatar = Column(String(2048), nullable=True)
    role = Column(String(10), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
