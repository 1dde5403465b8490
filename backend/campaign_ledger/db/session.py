from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from campaign_ledger.core.config import settings


def build_engine(database_url: str, **engine_kwargs) -> Engine:
    """Create an engine, enabling foreign keys for SQLite connections"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine_kwargs.setdefault("pool_pre_ping", True)
    new_engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
