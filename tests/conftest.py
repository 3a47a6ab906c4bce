"""Root test configuration: content-tree builders and session-level cleanup"""

import shutil
from pathlib import Path

import pytest
import yaml

from mdsite.config import Settings


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["mdsite.db", "test.db"]
_CLEANUP_DIRS = ["dist"]

DEFAULT_TAGS = {
    "python": "Python",
    "architecture": "Architecture",
    "databases": {"name": "Databases", "categories": ["backend", "general"]},
}


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and output directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


def doc_text(
    title: str = "A Document",
    description: str = "A short summary of the document.",
    tags: list = ("python",),
    body: str = "Some body text.",
    **meta,
    ) -> str:
    """Markdown source with a metadata block, an h1 title, a lead paragraph, and one section."""
    header = yaml.safe_dump({"tags": list(tags), **meta}, sort_keys=True)
    return f"---\n{header}---\n\n# {title}\n\n{description}\n\n## Details\n\n{body}\n"


@pytest.fixture(name="content")
def content_fixture(tmp_path):
    """Empty content root with a small tag registry."""
    root = tmp_path / "content"
    root.mkdir()
    (root / "tags.yaml").write_text(yaml.safe_dump(DEFAULT_TAGS))
    return root


@pytest.fixture(name="write_doc")
def write_doc_fixture(content):
    """Write a source file at a path relative to the content root; returns the path."""
    def _write(rel_path: str, text: str = None) -> Path:
        path = content / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(doc_text() if text is None else text, encoding="utf-8")
        return path
    return _write


@pytest.fixture(name="settings")
def settings_fixture(content, tmp_path):
    return Settings(
        content_dir=str(content),
        output_dir=str(tmp_path / "dist"),
        db_url=f"sqlite:///{tmp_path}/test.db",
        max_workers=2,
    )


@pytest.fixture(name="doc_text")
def doc_text_fixture():
    return doc_text
