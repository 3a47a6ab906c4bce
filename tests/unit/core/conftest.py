"""Shared fixtures for core unit tests"""

from datetime import date
from pathlib import Path

import pytest

from mdsite.core.models import Collection, ParsedDocument, RawDocument


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Factory for ParsedDocument with sensible defaults; metadata mirrors the tags."""
    def _make(
        doc_id: str,
        published: str = "2024-01-01",
        collection: Collection = Collection.writing,
        category: str = "general",
        title: str = None,
        tags: tuple = ("python",),
        **extra,
        ) -> ParsedDocument:
        fields = dict(
            id=doc_id,
            collection=collection,
            category=category,
            title=title or doc_id.replace("-", " ").title(),
            description=f"About {doc_id}.",
            published_on=date.fromisoformat(published),
            last_updated_on=date.fromisoformat(published),
            tags=tuple(tags),
            is_draft=(title or "").startswith("Draft:"),
            minutes_read=1,
            source_path=f"{collection.value}/{category}/{published}-{doc_id}.md",
            metadata={"tags": list(tags)},
        )
        fields.update(extra)
        return ParsedDocument(**fields)
    return _make


@pytest.fixture(name="make_raw")
def make_raw_fixture():
    """Factory for RawDocument from a name, metadata, and body."""
    def _make(
        name: str,
        body: str,
        metadata: dict = None,
        collection: Collection = Collection.writing,
        category: str = "general",
        ) -> RawDocument:
        rel = f"{collection.value}/{category}/{name}.md"
        return RawDocument(
            path=Path(rel),
            relative_path=rel,
            collection=collection,
            category=category,
            name=name,
            metadata=metadata if metadata is not None else {"tags": ["python"]},
            body=body,
        )
    return _make
