"""Loaders for the read-only YAML registries: tags, categories, and ordering"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mdsite.config import Settings
from mdsite.core.errors import RegistryError
from mdsite.core.models import CategoryRegistry, OrderingConfig, Registries, TagRegistry


logger = logging.getLogger(__name__)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Return the mapping stored in path; an absent file is an empty mapping."""
    if not path.exists():
        logger.info("No registry at %s; using defaults", path)
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise RegistryError(f"Invalid {path}: {e}") from e
    if not isinstance(data, dict):
        raise RegistryError(f"Invalid {path}: expected a mapping, got {type(data).__name__}")
    return data


def _validated(model, data: dict, path: Path):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RegistryError(f"Invalid {path}: {e}") from e


def load_tag_registry(path: Path) -> TagRegistry:
    """Load tags.yaml: `id: Name` shorthand or `id: {name, categories, featured}`."""
    tags = {}
    for tag_id, entry in _read_yaml(path).items():
        if isinstance(entry, str):
            entry = {"name": entry}
        elif entry is None:
            entry = {"name": str(tag_id)}
        elif not isinstance(entry, dict):
            raise RegistryError(f"Invalid {path}: tag '{tag_id}' must be a name or a mapping")
        tags[str(tag_id)] = {"id": str(tag_id), **entry}
    return _validated(TagRegistry, {"tags": tags}, path)


def load_category_registry(path: Path) -> CategoryRegistry:
    """Load categories.yaml: collection -> category -> {name, subcategories}."""
    collections = {}
    for collection, categories in _read_yaml(path).items():
        if not isinstance(categories, dict):
            raise RegistryError(f"Invalid {path}: '{collection}' must map category ids to entries")
        collections[collection] = {str(cat): entry or {} for cat, entry in categories.items()}
    return _validated(CategoryRegistry, {"collections": collections}, path)


def _category_order(entry: Any) -> Any:
    """Accept a bare id list as shorthand for {items: [...]}."""
    if isinstance(entry, list):
        return {"items": entry}
    return entry or {}


def load_ordering(path: Path) -> OrderingConfig:
    """Load ordering.yaml: collection -> {categories, pinned, fallback, order: {category: [...] | {items, fallback}}}."""
    collections = {}
    for collection, entry in _read_yaml(path).items():
        if entry is not None and not isinstance(entry, dict):
            raise RegistryError(f"Invalid {path}: '{collection}' must be a mapping")
        entry = dict(entry or {})
        entry["order"] = {str(cat): _category_order(v) for cat, v in (entry.get("order") or {}).items()}
        collections[collection] = entry
    return _validated(OrderingConfig, {"collections": collections}, path)


def load_registries(settings: Settings) -> Registries:
    return Registries(
        tags=load_tag_registry(settings.content_path(settings.tags_file)),
        categories=load_category_registry(settings.content_path(settings.categories_file)),
        ordering=load_ordering(settings.content_path(settings.ordering_file)),
    )
