from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, URL, make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from ..config import DatabaseSettings
from .errors import ConfigError


class Base(DeclarativeBase):
    pass


def database_url(settings: DatabaseSettings) -> URL:
    """Build the connection URL, failing fast on missing parameters."""
    if settings.url:
        return make_url(settings.url)

    if not settings.host:
        raise ConfigError("host not defined")

    if not settings.port:
        raise ConfigError("port not defined")

    if not settings.username:
        raise ConfigError("user not defined")

    if not settings.password:
        raise ConfigError("password not defined")

    if not settings.name:
        raise ConfigError("database not defined")

    try:
        port = int(settings.port)
    except ValueError as exc:
        raise ConfigError(f"invalid port {settings.port!r}", exc) from exc

    return URL.create(
        settings.driver,
        username=settings.username,
        password=settings.password,
        host=settings.host,
        port=port,
        database=settings.name,
    )


def make_engine(url) -> Engine:
    url = make_url(url)

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}  # needed for SQLite
        if url.database in (None, "", ":memory:"):
            # one shared connection, otherwise every checkout sees an empty db
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(url, pool_pre_ping=True)


def make_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    # models must be imported so their tables are registered on Base
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
