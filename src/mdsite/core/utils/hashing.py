"""SHA-256 digests for build outputs and source fingerprints"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def canonical_json(data: Any) -> str:
    """Serialize data with sorted keys and fixed separators so equal data gives equal bytes."""
    return json.dumps(data, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)


def digest(data: Any) -> str:
    """SHA-256 of the canonical JSON form of data."""
    return sha256(canonical_json(data))
