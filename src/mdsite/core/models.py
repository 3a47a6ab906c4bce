"""Data models shared by the build stages"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_CATEGORY = "general"


class Collection(str, Enum):
    """Named document groupings; declaration order is the site-wide collection order."""
    writing = "writing"
    guides = "guides"
    work = "work"
    reference = "reference"


class FallbackPolicy(str, Enum):
    """How documents absent from an explicit order are appended."""
    natural = "natural"             # source path ascending
    date_desc = "date-desc"
    alphabetical = "alphabetical"   # title, then id


class WorkType(str, Enum):
    design_doc = "design-doc"
    architecture = "architecture"
    case_study = "case-study"


@dataclass
class RawDocument:
    """Loader output for one source file; not persisted."""
    path:          Path
    relative_path: str              # posix path below content_dir
    collection:    Collection
    category:      str
    name:          str              # dated file stem or dated folder name
    metadata:      dict[str, Any]
    body:          str              # markdown without the metadata block
    is_bundle:     bool = False     # folder document with co-located assets
    metadata_error: Optional[str] = None


class DocRef(BaseModel):
    """Qualified document identity; ids are only unique within a collection."""
    model_config = ConfigDict(frozen=True)

    collection: Collection
    id: str

    @classmethod
    def parse(cls, key: str) -> "DocRef":
        """Inverse of .key ('writing/event-sourcing')."""
        collection, _, doc_id = key.partition("/")
        return cls(collection=Collection(collection), id=doc_id)

    @property
    def key(self) -> str:
        return f"{self.collection.value}/{self.id}"

    def __str__(self) -> str:
        return self.key


class ParsedDocument(BaseModel):
    """Canonical metadata for a document. Immutable for the duration of a build."""
    model_config = ConfigDict(frozen=True)

    id:              str
    collection:      Collection
    category:        str
    subcategory:     Optional[str] = None
    title:           str
    description:     str
    published_on:    date
    last_updated_on: date
    tags:            tuple[str, ...] = ()
    is_draft:        bool = False
    minutes_read:    int = Field(ge=1)
    type:            Optional[str] = None
    featured_rank:   Optional[int] = None
    series:          Optional[str] = None
    source_path:     str
    metadata:        dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def ref(self) -> DocRef:
        return DocRef(collection=self.collection, id=self.id)


class CategoryOrder(BaseModel):
    items: list[str] = Field(default_factory=list)
    fallback: Optional[FallbackPolicy] = None


class CollectionOrdering(BaseModel):
    """Explicit ordering for one collection: category sequence plus per-category document sequences."""
    categories: list[str] = Field(default_factory=list)
    pinned: list[str] = Field(default_factory=list)            # ids moved to the front of the collection listing
    fallback: FallbackPolicy = FallbackPolicy.date_desc
    order: dict[str, CategoryOrder] = Field(default_factory=dict)

    def policy_for(self, category: str) -> FallbackPolicy:
        entry = self.order.get(category)
        if entry and entry.fallback:
            return entry.fallback
        return self.fallback


class OrderingConfig(BaseModel):
    collections: dict[Collection, CollectionOrdering] = Field(default_factory=dict)

    def for_collection(self, collection: Collection) -> CollectionOrdering:
        return self.collections.get(collection) or CollectionOrdering()


class TagDefinition(BaseModel):
    id: str
    name: str
    categories: list[str] = Field(default_factory=list)    # empty = valid in any category
    featured: bool = False

    def allows(self, category: str) -> bool:
        return not self.categories or category in self.categories


class TagRegistry(BaseModel):
    tags: dict[str, TagDefinition] = Field(default_factory=dict)

    def __contains__(self, tag_id: str) -> bool:
        return tag_id in self.tags

    def get(self, tag_id: str) -> Optional[TagDefinition]:
        return self.tags.get(tag_id)

    def display_name(self, tag_id: str) -> str:
        tag = self.tags.get(tag_id)
        return tag.name if tag else tag_id


class CategoryDefinition(BaseModel):
    name: Optional[str] = None
    subcategories: list[str] = Field(default_factory=list)


class CategoryRegistry(BaseModel):
    """Declared categories per collection; subcategories are the allowed enum for guides."""
    collections: dict[Collection, dict[str, CategoryDefinition]] = Field(default_factory=dict)

    def get(self, collection: Collection, category: str) -> Optional[CategoryDefinition]:
        return self.collections.get(collection, {}).get(category)


class NavScopeKind(str, Enum):
    category = "category"
    collection = "collection"
    tag = "tag"


class NavScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: NavScopeKind
    key: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.key}"


class NavigationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    document: DocRef
    scope: NavScope
    prev: Optional[DocRef] = None
    next: Optional[DocRef] = None


class CardSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    collection: Collection
    category: str
    subcategory: Optional[str] = None
    tags: tuple[str, ...] = ()
    published_on: date
    minutes_read: int
    link: str
    is_draft: bool = False
    featured_rank: Optional[int] = None

    @property
    def ref(self) -> DocRef:
        return DocRef(collection=self.collection, id=self.id)


@dataclass(frozen=True)
class Registries:
    """External read-only inputs consulted by validation and ordering."""
    tags: TagRegistry = field(default_factory=TagRegistry)
    categories: CategoryRegistry = field(default_factory=CategoryRegistry)
    ordering: OrderingConfig = field(default_factory=OrderingConfig)
