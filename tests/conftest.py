"""
Pytest fixtures and configuration for Article Authoring tests.
"""

import json
from pathlib import Path

import pytest

from article_authoring.config import AuthoringConfig
from article_authoring.draft_sync import DraftSyncManager
from article_authoring.image_tracker import UploadedImageTracker
from article_authoring.storage import MemoryStore

from tests.helpers import FIXED_NOW_MS, FakeSlugChecker, doc, heading, paragraph, words


@pytest.fixture
def config() -> AuthoringConfig:
    """Config with millisecond debounce windows."""
    return AuthoringConfig.for_testing()


@pytest.fixture
def store() -> MemoryStore:
    """Empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def tracker() -> UploadedImageTracker:
    """Empty session image tracker."""
    return UploadedImageTracker()


@pytest.fixture
def draft_manager(store, config, tracker) -> DraftSyncManager:
    """Draft manager for site-a with a fixed clock."""
    return DraftSyncManager(store, "site-a", config, image_tracker=tracker, clock=lambda: FIXED_NOW_MS)


@pytest.fixture
def checker() -> FakeSlugChecker:
    """Slug checker that reports every slug as unique."""
    return FakeSlugChecker()


@pytest.fixture
def sample_document() -> dict:
    """A well-structured article: one H1, two H2s, 320 words of body."""
    return doc(
        heading(1, "Baking Bread at Home"),
        paragraph(words(150, "flour")),
        heading(2, "Choosing Your Flour"),
        paragraph(words(100, "water")),
        heading(2, "Kneading the Dough"),
        paragraph(words(60, "yeast")),
    )


@pytest.fixture
def sample_content_file(tmp_path: Path, sample_document) -> Path:
    """The sample article saved as editor JSON."""
    path = tmp_path / "article.json"
    path.write_text(json.dumps(sample_document))
    return path
