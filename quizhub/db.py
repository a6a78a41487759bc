from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from quizhub.config import Settings


def make_engine(database_url: str, echo: bool = False):
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)


def engine_from_settings(settings: Settings):
    return make_engine(settings.database_url, echo=settings.echo_sql)


def init_db(engine):
    # registers the table models on SQLModel.metadata
    import quizhub.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(engine):
    return Session(engine, expire_on_commit=False)
