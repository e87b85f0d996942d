from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from alumni_hub.core.config import settings

# SQLAlchemy Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str = None, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine.
    SQLite gets foreign keys switched on and a generous busy timeout so
    concurrent writers wait for the lock instead of failing straight away.
    """
    database_url = database_url or settings.DATABASE_URL
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}

    engine = create_engine(database_url, echo=echo, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    # Import all models so they register with Base.metadata
    from alumni_hub.db import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


engine = create_db_engine(echo=settings.SQL_ECHO)
SessionLocal = get_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
