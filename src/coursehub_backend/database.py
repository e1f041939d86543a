import logging
from typing import Generator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from coursehub_backend.settings import settings

logger = logging.getLogger(__name__)

_database_options = {
    "pool_pre_ping": True,
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 300
}

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

def get_engine() -> Engine:
    global _engine, _SessionLocal

    if _engine is None:
        if settings.DATABASE_URL.startswith("sqlite"):
            _engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False})
        else:
            _engine = create_engine(settings.DATABASE_URL, **_database_options)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    return _engine

def get_db() -> Generator[Session, None, None]:

    get_engine()
    db = _SessionLocal()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()
