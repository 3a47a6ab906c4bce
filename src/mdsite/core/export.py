"""Export: write the derived views of a build as deterministic JSON files"""

import json
import logging
from pathlib import Path

from mdsite.core.errors import BuildFailed
from mdsite.core.models import TagRegistry
from mdsite.core.tags import TagIndex


logger = logging.getLogger(__name__)


def dump_json(data) -> str:
    """Stable text form: sorted keys, two-space indent, trailing newline."""
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False, default=str) + "\n"


def build_tags_view(index: TagIndex, registry: TagRegistry) -> dict:
    """Tag id -> display name, document count, and ordered document keys."""
    counts = index.counts()
    return {
        tag_id: {
            "name": registry.display_name(tag_id),
            "count": counts[tag_id],
            "documents": [r.key for r in refs],
            "featured": bool((tag := registry.get(tag_id)) and tag.featured),
        }
        for tag_id, refs in index.entries.items()
    }


def write_outputs(result, output_dir: Path) -> list[Path]:
    """Write every view of a successful build under output_dir.

    Files: ordering.json, navigation.json, tags.json, cards/<collection>.json,
    and report.json. Card files left by an earlier build are removed first.
    Refuses to write anything when the build has errors.
    Returns the written paths in write order.
    """
    if not result.ok:
        raise BuildFailed(result.report)

    output_dir = Path(output_dir)
    cards_dir = output_dir / "cards"
    cards_dir.mkdir(parents=True, exist_ok=True)
    for stale in sorted(cards_dir.glob("*.json")):
        logger.debug("Removing %s", stale)
        stale.unlink()

    files = {
        output_dir / "ordering.json": result.visible.to_dict(),
        output_dir / "navigation.json": result.navigation.to_dict(),
        output_dir / "tags.json": build_tags_view(result.tags, result.registries.tags),
        output_dir / "report.json": {**result.report.to_dict(), "digest": result.digest},
    }
    for collection in result.cards.collections:
        files[output_dir / "cards" / f"{collection.value}.json"] = result.cards.to_dict(collection)

    written = []
    for path, data in files.items():
        path.write_text(dump_json(data), encoding='utf-8')
        written.append(path)
    logger.info("Wrote %d file(s) to %s", len(written), output_dir)
    return written
