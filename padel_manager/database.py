import os
from pathlib import Path
from typing import Any, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./padel.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def create_db_engine(url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """
    Build an engine for the given URL.

    SQLite connections are shared across FastAPI's worker threads, so
    check_same_thread is disabled. File databases get their parent directory
    created; in-memory URLs are left alone.
    """
    connect_args = dict(kwargs.pop("connect_args", {}))
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
        if url.startswith("sqlite:///") and ":memory:" not in url:
            db_path = url.replace("sqlite:///", "", 1)
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, connect_args=connect_args, **kwargs)


engine: Engine = create_db_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def register_models() -> None:
    """Import every table model so SQLModel.metadata knows about it."""
    from padel_manager.models.category import TournamentCategory  # noqa: F401
    from padel_manager.models.club import Club  # noqa: F401
    from padel_manager.models.court import Court  # noqa: F401
    from padel_manager.models.match import Match  # noqa: F401
    from padel_manager.models.player import Player  # noqa: F401
    from padel_manager.models.pool import Pool  # noqa: F401
    from padel_manager.models.team import Team  # noqa: F401
    from padel_manager.models.tournament import Tournament  # noqa: F401


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables on the given engine (the app engine by default)"""
    register_models()
    SQLModel.metadata.create_all(bind or engine)
