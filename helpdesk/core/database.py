# helpdesk/core/database.py
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from helpdesk.core.config import get_settings

settings = get_settings()

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Common DB dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
