from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


DEFAULT_SQLITE_URL = "sqlite:///./deck_monitor.sqlite3"


def make_engine(db_url: str = DEFAULT_SQLITE_URL) -> Engine:
    if db_url.startswith("sqlite:"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # One shared connection, otherwise every session sees a new database
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, **kwargs)
    return create_engine(db_url)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
