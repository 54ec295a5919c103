"""Database infrastructure: one engine per SQLite file, one session spanning both."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, ContextManager, Iterator, Tuple

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig

SessionFactory = Callable[[], ContextManager[Session]]


@dataclass(frozen=True)
class DatabaseEngines:
    """The user database and the expense database."""

    user: Engine
    expense: Engine

    def named(self) -> dict[str, Engine]:
        return {"user": self.user, "expense": self.expense}

    def dispose(self) -> None:
        self.user.dispose()
        self.expense.dispose()


def _apply_sqlite_pragmas(engine: Engine, pragmas: dict[str, str]) -> None:
    """Issue PRAGMA statements on every new SQLite connection."""

    if engine.dialect.name != "sqlite" or not pragmas:
        return

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, _connection_record) -> None:  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        try:
            for key, value in pragmas.items():
                cursor.execute(f"PRAGMA {key}={value}")
        finally:
            cursor.close()


def create_db_engine(url: str, config: BaseConfig) -> Engine:
    """Create a SQLModel engine for ``url`` using the configured options."""

    engine_options = config.sqlalchemy_engine_options() if url.startswith("sqlite") else {}
    engine = create_engine(url, **engine_options)
    _apply_sqlite_pragmas(engine, config.SQLITE_PRAGMAS)
    return engine


def create_db_engines(config: BaseConfig) -> DatabaseEngines:
    """Create both engines from configuration."""

    return DatabaseEngines(
        user=create_db_engine(config.USER_DATABASE_URL, config),
        expense=create_db_engine(config.EXPENSE_DATABASE_URL, config),
    )


def init_database(engines: DatabaseEngines) -> None:
    """Create each table on the database that owns it."""
    from ..models import EXPENSE_DB_MODELS, USER_DB_MODELS

    SQLModel.metadata.create_all(
        engines.user, tables=[model.__table__ for model in USER_DB_MODELS]
    )
    SQLModel.metadata.create_all(
        engines.expense, tables=[model.__table__ for model in EXPENSE_DB_MODELS]
    )


def session_binds(engines: DatabaseEngines) -> dict:
    """Map every table model to the engine that stores it."""
    from ..models import EXPENSE_DB_MODELS, USER_DB_MODELS

    binds: dict = {model: engines.user for model in USER_DB_MODELS}
    binds.update({model: engines.expense for model in EXPENSE_DB_MODELS})
    return binds


def create_session_factory(engines: DatabaseEngines) -> SessionFactory:
    """Create a session factory function.

    Each call yields a session routed to both databases. The session commits
    when the block exits cleanly and rolls back when it raises, so everything
    done inside one ``with`` block is a single unit of work.
    """

    binds = session_binds(engines)

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(binds=binds, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[DatabaseEngines, SessionFactory]:
    """Convenience bootstrap for engines + session_factory with schema init.

    Used by the app factory, the CLI and tests to ensure consistent engine
    options and session configuration.
    """

    cfg = config or BaseConfig()
    engines = create_db_engines(cfg)
    init_database(engines)
    return engines, create_session_factory(engines)
