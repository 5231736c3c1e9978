import sqlite3
from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine


@event.listens_for(Engine, "connect")
def _register_sqlite_functions(dbapi_connection, connection_record):
    """SQLite 내장 lower()는 ASCII만 바꾼다 → 파이썬 str.lower()로 덮어쓴다.

    제목 필터(func.lower)가 "ÉCOLE"과 "école"을 같게 보려면 필요하다.
    """
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function(
            "lower", 1, _unicode_lower, deterministic=True
        )


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """DATABASE_URL로 엔진을 만든다.

    SQLite는 FastAPI 스레드풀에서 커넥션을 공유하므로 check_same_thread를 끈다.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def create_db_and_tables(engine: Engine) -> None:
    import model.image  # noqa: F401 — 테이블 등록

    SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
    """요청마다 세션 하나. 엔진은 create_app()이 app.state에 올려둔다."""
    with Session(request.app.state.engine) as session:
        yield session
