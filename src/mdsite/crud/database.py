"""Database engine construction and schema creation"""

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from mdsite.crud import models  # noqa: F401  (registers tables on SQLModel.metadata)


def make_engine(db_url: str):
    """Engine for db_url; in-memory SQLite shares one connection across sessions."""
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            db_url, echo=False,
            connect_args={"check_same_thread": False}, poolclass=StaticPool,
        )
    return create_engine(db_url, echo=False)


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)


def reset_db(engine) -> None:
    """Drop and recreate every table."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
