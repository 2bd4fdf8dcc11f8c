# storefront/data/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def build_engine(url: str) -> Engine:
    """
    Engine is created by the process entry point (api or celery worker),
    never at import time.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        #in-memory sqlite: one shared connection, otherwise every session sees an empty db
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            #sqlite ignores ON DELETE CASCADE / SET NULL without this
            dbapi_connection.execute("PRAGMA foreign_keys=ON")

        return engine

    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False)


def init_db(engine: Engine) -> None:
    #import all models so SQLAlchemy registers them in Base.metadata
    import storefront.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
