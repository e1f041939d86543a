from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata


def new_id() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
