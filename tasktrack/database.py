from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from tasktrack.config import DATABASE_URL
from tasktrack.errors import StoreUnavailable
from tasktrack.log import get_logger

log = get_logger(__name__)

# Only apply sqlite-specific connect_args when using sqlite
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Enable pool_pre_ping to avoid stale connections (useful for cloud DBs like Neon)
engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
)

# deleted records are returned to the caller after commit, so keep them loaded
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create tables and make sure the database answers. Raises StoreUnavailable."""
    from tasktrack.models import task, user  # noqa: F401  registers the tables

    try:
        Base.metadata.create_all(bind=engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log.critical("database_unreachable", url=engine.url.render_as_string(hide_password=True), error=str(exc))
        raise StoreUnavailable("database unreachable at startup") from exc
    log.info("database_ready", dialect=engine.dialect.name)
