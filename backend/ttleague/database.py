"""
Engine and session plumbing for the league database.

Settings come from the environment (a .env file is read if present):
DATABASE_URL (default: league.db in the working directory) and SQL_ECHO.
"""
import os
from pathlib import Path
from typing import Any, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./league.db"
SQLITE_PREFIX = "sqlite:///"

DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def sqlite_file_path(url: str) -> Optional[Path]:
    """On-disk file behind a sqlite URL; None for in-memory and other backends."""
    if not url.startswith(SQLITE_PREFIX) or ":memory:" in url:
        return None
    return Path(url[len(SQLITE_PREFIX):])


def build_engine(url: str, echo: bool = False, **engine_kwargs: Any) -> Engine:
    """Engine for url. SQLite connections are shared with the TestClient/worker threads."""
    if url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        db_file = sqlite_file_path(url)
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, **engine_kwargs)


engine: Engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session (FastAPI dependency)."""
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None) -> None:
    """Create any missing tables on bind (the app engine by default)."""
    # Tables register on SQLModel.metadata when their module is imported
    from ttleague.models.match import Match  # noqa: F401
    from ttleague.models.player import Player  # noqa: F401
    from ttleague.models.tournament_settings import TournamentSettings  # noqa: F401
    from ttleague.models.weekly_recommendation import WeeklyRecommendation  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
