"""Integration tests for the CLI commands (build, check, list, init, watch)"""

import json

import pytest
from typer.testing import CliRunner

from mdsite.cli.cli import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run from tmp_path with a throwaway database."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDSITE_DB_URL", f"sqlite:///{tmp_path}/test.db")
    for name in ("CONTENT_DIR", "OUTPUT_DIR", "BUILD_MODE", "SHOW_DRAFTS", "BASE_PATH"):
        monkeypatch.delenv(f"MDSITE_{name}", raising=False)


@pytest.fixture(name="site")
def site_fixture(content, write_doc, doc_text):
    write_doc("writing/2024-01-01-first.md", doc_text("First Post"))
    write_doc("writing/2024-02-01-draft.md", doc_text("Draft: Not Yet"))
    write_doc("reference/2024-01-05-glossary.md", doc_text("Glossary"))
    return content


def _build(content, out, *extra):
    return runner.invoke(app, ["build", "--content-dir", str(content), "--out-dir", str(out), *extra])


def test_build_writes_views(site, tmp_path):
    """build exports JSON views and reports the summary."""
    out = tmp_path / "dist"
    result = _build(site, out)
    assert result.exit_code == 0, result.output
    assert "3 document(s), 0 error(s), 0 warning(s)" in result.output
    cards = json.loads((out / "cards" / "writing.json").read_text())
    assert [c["id"] for c in cards["cards"]] == ["first"]
    assert (out / "cards" / "reference.json").exists()


def test_build_development_mode_includes_drafts(site, tmp_path):
    """--mode development keeps draft cards."""
    out = tmp_path / "dist"
    result = _build(site, out, "--mode", "development", "--base-path", "/blog")
    assert result.exit_code == 0, result.output
    cards = json.loads((out / "cards" / "writing.json").read_text())
    assert [c["id"] for c in cards["cards"]] == ["draft", "first"]
    assert cards["cards"][0]["link"] == "/blog/writing/general/draft"


def test_build_with_errors_writes_nothing(site, write_doc, doc_text, tmp_path):
    """Any validation error exits 1 and leaves the output directory untouched."""
    write_doc("writing/2024-03-01-bad.md", doc_text("Bad", tags=["unknown"]))
    out = tmp_path / "dist"
    result = _build(site, out)
    assert result.exit_code == 1
    assert "UnknownTag" in result.output
    assert "writing" in result.output
    assert not out.exists()


def test_build_unreadable_source_fails(site, write_doc, tmp_path):
    """An unreadable file is reported with the _fail helper."""
    write_doc("writing/2024-03-01-binary.md").write_bytes(b"\xff\xfe")
    result = _build(site, tmp_path / "dist")
    assert result.exit_code == 1
    assert "Error: Build failed" in result.output


def test_check_reports_without_writing(site, write_doc, doc_text, tmp_path):
    """check prints issues and exits 1 on errors, writing no files."""
    assert runner.invoke(app, ["check", "--content-dir", str(site)]).exit_code == 0
    write_doc("writing/undated.md", doc_text("Undated"))
    result = runner.invoke(app, ["check", "--content-dir", str(site)])
    assert result.exit_code == 1
    assert "InvalidDatePrefix" in result.output
    assert not (tmp_path / "dist").exists()


def test_list_after_build(site, tmp_path):
    """list shows stored collections, then the cards of one collection."""
    assert _build(site, tmp_path / "dist").exit_code == 0
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[:2] == ["writing", "reference"]
    assert "Last build:" in result.output

    cards = runner.invoke(app, ["list", "writing"])
    assert cards.exit_code == 0
    assert "general/first  First Post" in cards.output


def test_list_empty_database():
    """list exits 1 when nothing has been built."""
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "No views found" in result.output


def test_list_unknown_collection(site, tmp_path):
    """An unknown collection name is a user error."""
    _build(site, tmp_path / "dist")
    result = runner.invoke(app, ["list", "poetry"])
    assert result.exit_code == 1
    assert "Unknown collection 'poetry'" in result.output


def test_init_and_reset(site, tmp_path):
    """init creates the schema; --reset clears stored views."""
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert "Database initialized" in result.output
    _build(site, tmp_path / "dist")
    reset = runner.invoke(app, ["init", "--reset"])
    assert "Existing data cleared." in reset.output
    assert runner.invoke(app, ["list"]).exit_code == 1


def test_watch_single_build(site, tmp_path):
    """watch publishes each delivered build."""
    out = tmp_path / "dist"
    result = runner.invoke(app, [
        "watch", "--content-dir", str(site), "--out-dir", str(out), "--interval", "0", "--max-builds", "1",
    ])
    assert result.exit_code == 0, result.output
    assert (out / "ordering.json").exists()
