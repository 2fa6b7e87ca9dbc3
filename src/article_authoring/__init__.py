"""
Article Authoring

The state engine behind the article editor of a multi-site blogging platform:
- Keeps the in-progress article synchronized to local storage
- Validates URL slugs for uniqueness with debouncing and race safety
- Scores the article's structured content with live SEO checks
- Gates the two-step authoring form on those signals
"""

__version__ = "1.0.0"
__author__ = "Article Authoring Team"

from .config import AuthoringConfig

from .models import (
    AuthoringSnapshot,
    CheckStatus,
    ContentNode,
    DraftRecord,
    FormStep,
    Heading,
    ParsedImages,
    RawImages,
    SeoCheckResult,
    SeoReport,
    SlugStatus,
    SlugValidationState,
    normalize_content_document,
    normalize_content_images,
)

# Leaf utilities
from .content_tree import (
    collect_text,
    count_headings,
    count_words,
    extract_headings,
    walk,
)
from .debounce import Debouncer
from .slug_utils import format_as_slug, validate_slug_format

# SEO analysis
from .seo_analyzer import analyze_seo, extract_title_keywords

# Storage and drafts
from .storage import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    QuotaExceededError,
    StorageError,
)
from .image_tracker import UploadedImageTracker
from .draft_sync import DraftSaveOutcome, DraftSyncManager

# Slug availability
from .slug_client import HttpSlugChecker, SlugChecker, SlugCheckError
from .slug_validator import SlugAvailabilityValidator

# Submission and orchestration
from .submission import (
    ArticleSubmission,
    ArticleSubmitter,
    SubmissionError,
    SubmissionResult,
    build_submission,
    normalize_action_result,
)
from .orchestrator import ArticleFormOrchestrator, SlugGenerationOutcome

__all__ = [
    "AuthoringConfig",
    "AuthoringSnapshot",
    "CheckStatus",
    "ContentNode",
    "DraftRecord",
    "FormStep",
    "Heading",
    "ParsedImages",
    "RawImages",
    "SeoCheckResult",
    "SeoReport",
    "SlugStatus",
    "SlugValidationState",
    "normalize_content_document",
    "normalize_content_images",
    "collect_text",
    "count_headings",
    "count_words",
    "extract_headings",
    "walk",
    "Debouncer",
    "format_as_slug",
    "validate_slug_format",
    "analyze_seo",
    "extract_title_keywords",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "QuotaExceededError",
    "StorageError",
    "UploadedImageTracker",
    "DraftSaveOutcome",
    "DraftSyncManager",
    "HttpSlugChecker",
    "SlugChecker",
    "SlugCheckError",
    "SlugAvailabilityValidator",
    "ArticleSubmission",
    "ArticleSubmitter",
    "SubmissionError",
    "SubmissionResult",
    "build_submission",
    "normalize_action_result",
    "ArticleFormOrchestrator",
    "SlugGenerationOutcome",
]
