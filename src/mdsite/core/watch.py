"""Watch mode: poll the content tree and run a full rebuild on every change"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from mdsite.config import Settings
from mdsite.core.errors import MdsiteError
from mdsite.core.pipeline import BuildResult, build_site
from mdsite.core.utils.hashing import sha256


logger = logging.getLogger(__name__)


def source_fingerprint(content_dir: Path) -> str:
    """Hash of every file's relative path, size, and mtime under content_dir."""
    content_dir = Path(content_dir)
    if not content_dir.is_dir():
        return sha256("")
    lines = []
    for path in sorted(p for p in content_dir.rglob("*") if p.is_file()):
        stat = path.stat()
        lines.append(f"{path.relative_to(content_dir).as_posix()}\t{stat.st_size}\t{stat.st_mtime_ns}")
    return sha256("\n".join(lines))


def watch(
    settings: Settings,
    on_result: Callable[[BuildResult], None],
    interval: float = 1.0,
    max_builds: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    ) -> int:
    """Rebuild whenever the content fingerprint changes; returns the number of delivered builds.

    Every rebuild is a full build from scratch. A build whose input changed while
    it ran is discarded without being delivered, and the loop rebuilds at once.
    Build errors are logged and the loop waits for the next change.
    """
    content_dir = Path(settings.content_dir)
    delivered = 0
    last_built: Optional[str] = None

    while max_builds is None or delivered < max_builds:
        started = source_fingerprint(content_dir)
        if started == last_built:
            sleep(interval)
            continue

        try:
            result = build_site(settings)
        except MdsiteError as e:
            logger.error("Build failed: %s", e)
            last_built = started
            sleep(interval)
            continue

        if source_fingerprint(content_dir) != started:
            logger.info("Sources changed during build; discarding result %s", result.digest[:12])
            continue

        last_built = started
        delivered += 1
        on_result(result)

    return delivered
