"""Database table definitions for the derived views of the latest build"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


class BuildRow(SQLModel, table=True):
    """One row per persisted build; the newest row describes the current views."""
    __tablename__ = "builds"
    id: Optional[int] = Field(default=None, primary_key=True)
    digest: str = Field(..., sa_column=Column(String(64), nullable=False))
    build_mode: str = Field(..., nullable=False)
    documents: int = Field(..., nullable=False, description="Extracted documents, drafts included")
    errors: int = Field(default=0, nullable=False)
    warnings: int = Field(default=0, nullable=False)
    built_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class CardRow(SQLModel, table=True):
    """A card summary and its position in the collection-wide order."""
    __tablename__ = "cards"
    collection: str = Field(primary_key=True)
    id: str = Field(primary_key=True)
    category: str = Field(..., index=True, nullable=False)
    subcategory: Optional[str] = Field(default=None)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    description: str = Field(..., sa_column=Column(Text, nullable=False))
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    published_on: date = Field(..., nullable=False)
    minutes_read: int = Field(..., nullable=False)
    link: str = Field(..., sa_column=Column(Text, nullable=False))
    is_draft: bool = Field(default=False, nullable=False)
    featured_rank: Optional[int] = Field(default=None)
    position: int = Field(..., nullable=False, description="Index in the collection-wide order")


class NavigationRow(SQLModel, table=True):
    """One link of a prev/next chain; scope is 'kind:key' (e.g. 'category:guides/backend')."""
    __tablename__ = "navigation"
    scope: str = Field(primary_key=True)
    document: str = Field(primary_key=True, description="Document key, 'collection/id'")
    position: int = Field(..., nullable=False)
    prev: Optional[str] = Field(default=None)
    next: Optional[str] = Field(default=None)


class TagEntryRow(SQLModel, table=True):
    """Membership of a document in a tag listing."""
    __tablename__ = "tag_entries"
    tag: str = Field(primary_key=True)
    document: str = Field(primary_key=True, description="Document key, 'collection/id'")
    name: str = Field(..., nullable=False, description="Display name from the tag registry")
    position: int = Field(..., nullable=False)
