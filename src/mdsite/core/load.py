"""Source discovery, metadata block splitting, and concurrent file reads"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mdsite.core.errors import InvalidMetadataBlock, UnreadableSource
from mdsite.core.models import DEFAULT_CATEGORY, Collection, RawDocument


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*(?:\n|$)', re.DOTALL)
DATED_NAME_RE = re.compile(r'^\d{4}-\d{2}-\d{2}-')
MD_EXTENSIONS = {'.md', '.mdx'}
INDEX_NAMES = ('index.md', 'index.mdx', 'README.md')


@dataclass(frozen=True)
class SourceFile:
    """A discovered document location, before any read."""
    path:          Path
    relative_path: str
    collection:    Collection
    category:      str
    name:          str
    is_bundle:     bool = False


def split_metadata(text: str) -> tuple[dict[str, Any], str]:
    """Return (metadata, body) with the leading YAML block removed.

    Raises InvalidMetadataBlock when the block is not valid YAML or not a mapping.
    """
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        meta = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise InvalidMetadataBlock(f"Invalid YAML metadata block: {e}") from e
    if not isinstance(meta, dict):
        raise InvalidMetadataBlock(f"Invalid YAML metadata block: expected a mapping, got {type(meta).__name__}")
    return meta, text[m.end():]


def _index_file(folder: Path) -> Path | None:
    for name in INDEX_NAMES:
        candidate = folder / name
        if candidate.is_file():
            return candidate
    return None


def _category(collection_root: Path, path: Path) -> str:
    """First directory below the collection root, or the default category for top-level documents."""
    parts = path.relative_to(collection_root).parts
    return parts[0] if len(parts) > 1 else DEFAULT_CATEGORY


def _walk(directory: Path, collection_root: Path, content_dir: Path, collection: Collection) -> list[SourceFile]:
    found: list[SourceFile] = []
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith(('_', '.')):
            continue
        if entry.is_dir():
            index = _index_file(entry) if DATED_NAME_RE.match(entry.name) else None
            if index is None:
                found.extend(_walk(entry, collection_root, content_dir, collection))
                continue
            found.append(SourceFile(
                path=index,
                relative_path=index.relative_to(content_dir).as_posix(),
                collection=collection,
                category=_category(collection_root, entry),
                name=entry.name,
                is_bundle=True,
            ))
        elif entry.suffix in MD_EXTENSIONS and entry.name not in INDEX_NAMES:
            found.append(SourceFile(
                path=entry,
                relative_path=entry.relative_to(content_dir).as_posix(),
                collection=collection,
                category=_category(collection_root, entry),
                name=entry.stem,
            ))
    return found


def discover_sources(content_dir: Path) -> list[SourceFile]:
    """Return every document location under the known collection directories, sorted by relative path."""
    sources: list[SourceFile] = []
    for collection in Collection:
        root = content_dir / collection.value
        if root.is_dir():
            sources.extend(_walk(root, root, content_dir, collection))
    return sorted(sources, key=lambda s: s.relative_path)


def read_source(source: SourceFile) -> RawDocument:
    """Read and split one source file. Raises UnreadableSource on I/O or decode failure."""
    try:
        text = source.path.read_bytes().decode('utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise UnreadableSource(source.relative_path, e) from e

    metadata_error = None
    try:
        metadata, body = split_metadata(text)
    except InvalidMetadataBlock as e:
        metadata, body, metadata_error = {}, text, str(e)

    return RawDocument(
        path=source.path,
        relative_path=source.relative_path,
        collection=source.collection,
        category=source.category,
        name=source.name,
        metadata=metadata,
        body=body,
        is_bundle=source.is_bundle,
        metadata_error=metadata_error,
    )


def load_sources(content_dir: Path, max_workers: int = 8) -> list[RawDocument]:
    """Read all documents concurrently; returns only after every read has finished.

    The first UnreadableSource aborts the whole load.
    """
    sources = discover_sources(content_dir)
    logger.debug("Discovered %d source(s) under %s", len(sources), content_dir)
    if not sources:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(read_source, sources))
