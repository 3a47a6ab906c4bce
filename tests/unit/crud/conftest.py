"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import Session

from mdsite.core.pipeline import build_site
from mdsite.crud.database import init_db, make_engine


SQLITE_MEM = "sqlite://"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine(SQLITE_MEM)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture(name="result")
def result_fixture(settings, write_doc, doc_text):
    """A successful build over two collections, one draft, and two tags."""
    write_doc("writing/2024-01-01-first.md", doc_text("First Post"))
    write_doc("writing/2024-02-01-second.md", doc_text("Second Post", tags=["python", "architecture"]))
    write_doc("writing/2024-03-01-wip.md", doc_text("Draft: Work In Progress"))
    write_doc("work/2024-01-15-case.md", doc_text("A Case", tags=["architecture"], type="case-study"))
    result = build_site(settings)
    assert result.ok, [str(i) for i in result.report.issues]
    return result
