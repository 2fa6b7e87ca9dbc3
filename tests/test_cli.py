"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from article_authoring import cli
from article_authoring.config import AuthoringConfig
from article_authoring.draft_sync import DraftSyncManager
from article_authoring.storage import JsonFileStore


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestSeoReport:
    """Tests for the seo-report command."""

    def test_json_output(self, runner, sample_content_file):
        """Test the report can be printed as JSON."""
        result = runner.invoke(cli.main, [
            "seo-report", str(sample_content_file),
            "--title", "How to Bake Bread",
            "--as-json",
        ])
        assert result.exit_code == 0
        data = json.loads(result.output)
        statuses = {c["id"]: c["status"] for c in data["checks"]}
        assert statuses["h1-count"] == "pass"
        assert statuses["meta-description"] == "fail"

    def test_table_output(self, runner, sample_content_file):
        """Test the default table output ends with the overall status."""
        result = runner.invoke(cli.main, ["seo-report", str(sample_content_file), "--title", "Bread"])
        assert result.exit_code == 0
        assert "Overall" in result.output
        assert "FAIL" in result.output

    def test_extended(self, runner, sample_content_file):
        """Test --extended adds the heading-quality check."""
        result = runner.invoke(cli.main, ["seo-report", str(sample_content_file), "--extended", "--as-json"])
        ids = [c["id"] for c in json.loads(result.output)["checks"]]
        assert "heading-quality" in ids

    def test_missing_file(self, runner, tmp_path):
        """Test a missing content file is a usage error."""
        result = runner.invoke(cli.main, ["seo-report", str(tmp_path / "missing.json")])
        assert result.exit_code != 0


class TestSlugify:
    """Tests for the slugify command."""

    def test_valid(self, runner):
        """Test a title is printed in slug form."""
        result = runner.invoke(cli.main, ["slugify", "How to Bake Bread"])
        assert result.exit_code == 0
        assert result.output.strip() == "how-to-bake-bread"

    def test_invalid(self, runner):
        """Test a too-short slug exits with an error."""
        result = runner.invoke(cli.main, ["slugify", "Hi"])
        assert result.exit_code == 1
        assert "at least 3 characters" in result.output


class FakeHttpChecker:
    """Stands in for HttpSlugChecker; only 'taken-slug' is used."""

    def __init__(self, config=None, client=None):
        self.config = config

    async def is_unique(self, slug, site_id):
        return slug != "taken-slug"

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


class TestCheckSlug:
    """Tests for the check-slug command."""

    def test_available(self, runner, monkeypatch):
        """Test an available slug exits 0."""
        monkeypatch.setattr(cli, "HttpSlugChecker", FakeHttpChecker)
        result = runner.invoke(cli.main, ["check-slug", "fresh-slug", "--site-id", "site-1"])
        assert result.exit_code == 0
        assert "Available" in result.output

    def test_taken(self, runner, monkeypatch):
        """Test a taken slug exits 1 with the reason."""
        monkeypatch.setattr(cli, "HttpSlugChecker", FakeHttpChecker)
        result = runner.invoke(cli.main, ["check-slug", "taken-slug", "--site-id", "site-1"])
        assert result.exit_code == 1
        assert "already taken" in result.output


class TestDraftCommands:
    """Tests for the draft show/clear commands."""

    def test_show(self, runner, tmp_path):
        """Test the stored draft is printed as JSON."""
        path = tmp_path / "drafts.json"
        DraftSyncManager(JsonFileStore(path), "site-1", AuthoringConfig()).save({"title": "Stored"})
        result = runner.invoke(cli.main, ["draft", "show", "--site-id", "site-1", "--store", str(path)])
        assert result.exit_code == 0
        assert json.loads(result.output)["title"] == "Stored"

    def test_show_other_site(self, runner, tmp_path):
        """Test a draft for another site is not shown."""
        path = tmp_path / "drafts.json"
        DraftSyncManager(JsonFileStore(path), "site-1", AuthoringConfig()).save({"title": "Stored"})
        result = runner.invoke(cli.main, ["draft", "show", "--site-id", "site-2", "--store", str(path)])
        assert result.exit_code == 1

    def test_clear(self, runner, tmp_path):
        """Test clear removes the draft and editor cache keys."""
        path = tmp_path / "drafts.json"
        store = JsonFileStore(path)
        DraftSyncManager(store, "site-1", AuthoringConfig()).save({"title": "Stored"})
        store.set("html-content", "<p>x</p>")
        store.set("theme", "dark")

        result = runner.invoke(cli.main, ["draft", "clear", "--store", str(path)])
        assert result.exit_code == 0
        assert JsonFileStore(path).keys() == ["theme"]

    def test_clear_corrupt_store(self, runner, tmp_path):
        """Test a corrupt store file is reported."""
        path = tmp_path / "drafts.json"
        path.write_text("{broken")
        result = runner.invoke(cli.main, ["draft", "clear", "--store", str(path)])
        assert result.exit_code == 1
        assert "Storage error" in result.output
