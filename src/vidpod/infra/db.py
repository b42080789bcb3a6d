from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.schema import MetaData

from vidpod.infra.settings import settings

# Deterministic constraint/index names (prevents Alembic churn)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def _engine_options(url: str) -> dict[str, Any]:
    """Pool and driver options for a database URL.

    SQLite gets no pool sizing (it uses a single-connection pool for memory databases).
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.pool_size,
        "max_overflow": settings.max_overflow,
        "pool_timeout": settings.pool_timeout,
        "connect_args": {"connect_timeout": settings.connect_timeout},
    }


engine = create_engine(
    settings.database_url,
    echo=settings.echo_sql,
    pool_pre_ping=True,
    future=True,
    **_engine_options(settings.database_url),
)


@event.listens_for(engine, "connect")
def _set_search_path(dbapi_conn, _):
    if engine.dialect.name != "postgresql":
        return
    with dbapi_conn.cursor() as cur:
        cur.execute("SET search_path TO public")


SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables known to the metadata (development and test databases)."""
    # Import models so they register on Base.metadata
    from vidpod.domain import entities  # noqa: F401

    Base.metadata.create_all(bind or engine)
