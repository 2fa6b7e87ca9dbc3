"""
Data models for the article-authoring engine.

This module defines the core data structures shared by the draft manager,
the slug validator, the SEO analyzer and the form orchestrator.
"""

import json
import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Union

logger = logging.getLogger(__name__)


# The editor owns the content tree; the engine only reads it.
# Shape: {"type": str, "attrs"?: dict, "text"?: str, "children"?: [ContentNode]}
ContentNode = Mapping[str, Any]


class FormStep(Enum):
    """Steps of the authoring form."""
    BASIC_INFO = 1
    CONTENT = 2

    @classmethod
    def from_value(cls, value: Any) -> "FormStep":
        """Map an entry-point step number to a step (unknown values -> BASIC_INFO)."""
        try:
            return cls(int(value))
        except (TypeError, ValueError, OverflowError):
            return cls.BASIC_INFO


class SlugStatus(Enum):
    """Status of a candidate slug."""
    IDLE = "idle"
    CHECKING = "checking"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    INVALID = "invalid"

    @property
    def is_terminal(self) -> bool:
        """Check if this status ends a validation round."""
        return self in (SlugStatus.AVAILABLE, SlugStatus.UNAVAILABLE, SlugStatus.INVALID)


@dataclass(frozen=True)
class SlugValidationState:
    """Validation state for the current candidate slug."""
    candidate: str = ""
    status: SlugStatus = SlugStatus.IDLE
    error_message: Optional[str] = None
    check_failed: bool = False  # True when the remote check itself errored

    @property
    def is_available(self) -> bool:
        return self.status == SlugStatus.AVAILABLE

    @property
    def is_checking(self) -> bool:
        return self.status == SlugStatus.CHECKING


class CheckStatus(Enum):
    """Outcome of a single SEO check."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


@dataclass(frozen=True)
class SeoCheckResult:
    """Result of one SEO check. Ids are stable across runs."""
    id: str
    title: str
    description: str
    status: CheckStatus
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class SeoReport:
    """
    Ordered SEO check results plus aggregate status.

    The aggregate is FAIL if any check fails, else WARNING if any check
    warns, else PASS.
    """
    checks: tuple[SeoCheckResult, ...] = ()

    @property
    def pass_count(self) -> int:
        return sum(1 for c in self.checks if c.status == CheckStatus.PASS)

    @property
    def warning_count(self) -> int:
        return sum(1 for c in self.checks if c.status == CheckStatus.WARNING)

    @property
    def fail_count(self) -> int:
        return sum(1 for c in self.checks if c.status == CheckStatus.FAIL)

    @property
    def status(self) -> CheckStatus:
        if self.fail_count:
            return CheckStatus.FAIL
        if self.warning_count:
            return CheckStatus.WARNING
        return CheckStatus.PASS

    @property
    def score(self) -> int:
        """Percentage of passing checks (0-100)."""
        if not self.checks:
            return 0
        return round(self.pass_count * 100 / len(self.checks))

    def get(self, check_id: str) -> Optional[SeoCheckResult]:
        """Look up a check result by its id."""
        for check in self.checks:
            if check.id == check_id:
                return check
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "score": self.score,
            "pass_count": self.pass_count,
            "warning_count": self.warning_count,
            "fail_count": self.fail_count,
            "checks": [c.to_dict() for c in self.checks],
        }


@dataclass(frozen=True)
class Heading:
    """A heading found in the content tree."""
    level: int
    text: str


# Fields of DraftRecord and their camelCase storage names
DRAFT_STORAGE_NAMES = {
    "title": "title",
    "slug": "slug",
    "small_description": "smallDescription",
    "keywords": "keywords",
    "cover_image_url": "coverImage",
    "site_id": "siteId",
    "content_document": "articleContent",
    "last_updated": "lastUpdated",
}


@dataclass(frozen=True)
class DraftRecord:
    """
    The canonical in-progress article.

    Immutable; edits produce a new record via with_field/replace.
    `last_updated` is epoch milliseconds, stamped by the draft manager.
    """
    site_id: str = ""
    title: str = ""
    slug: str = ""
    small_description: str = ""
    keywords: str = ""
    cover_image_url: Optional[str] = None
    content_document: Optional[ContentNode] = None
    last_updated: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        """True when there is nothing worth persisting.

        Slug and keywords alone do not count as content.
        """
        return (
            not self.title
            and not self.small_description
            and not self.cover_image_url
            and not self.content_document
        )

    def with_field(self, name: str, value: Any) -> "DraftRecord":
        """Return a copy with one field replaced."""
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown draft field '{name}'")
        return replace(self, **{name: value})

    def to_storage_dict(self) -> dict:
        """Serialize with the camelCase keys used in local storage."""
        return {
            DRAFT_STORAGE_NAMES[f.name]: getattr(self, f.name)
            for f in fields(self)
        }

    @classmethod
    def from_storage_dict(cls, data: Mapping[str, Any]) -> "DraftRecord":
        """Build a record from a stored mapping, tolerating missing keys."""
        last_updated = data.get("lastUpdated")
        try:
            last_updated = int(last_updated) if last_updated is not None else None
        except (TypeError, ValueError, OverflowError):
            last_updated = None

        return cls(
            site_id=_as_str(data.get("siteId")),
            title=_as_str(data.get("title")),
            slug=_as_str(data.get("slug")),
            small_description=_as_str(data.get("smallDescription")),
            keywords=_as_str(data.get("keywords")),
            cover_image_url=data.get("coverImage") or None,
            content_document=normalize_content_document(data.get("articleContent")),
            last_updated=last_updated,
        )


# Fields a user (or the UI) may set directly
EDITABLE_FIELDS = (
    "title",
    "slug",
    "small_description",
    "keywords",
    "cover_image_url",
    "content_document",
)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_content_document(value: Any) -> Optional[ContentNode]:
    """
    Normalize stored editor content into a single representation.

    The editor content may have been persisted as an object or as JSON
    text. Unparseable text is logged and treated as no content.

    Args:
        value: dict, JSON string, or None.

    Returns:
        The content tree mapping, or None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, Mapping):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError as e:
            logger.warning(f"Discarding unparseable editor content from draft: {e}")
            return None
        if isinstance(parsed, Mapping):
            return parsed
        logger.warning("Discarding editor content that is not a JSON object")
        return None
    logger.warning(f"Discarding editor content of unexpected type {type(value).__name__}")
    return None


@dataclass(frozen=True)
class RawImages:
    """Content images as JSON text, as received from a form field."""
    text: str


@dataclass(frozen=True)
class ParsedImages:
    """Content images already decoded into a list."""
    urls: tuple = ()


ContentImages = Union[RawImages, ParsedImages, str, list, tuple, None]


def normalize_content_images(value: ContentImages) -> list[str]:
    """
    Normalize the content-image manifest into a list of URLs.

    Accepts the tagged forms (RawImages / ParsedImages) as well as a bare
    JSON string or list. Non-string entries and malformed JSON are dropped.

    Returns:
        List of image URL strings, in original order.
    """
    if value is None:
        return []
    if isinstance(value, RawImages):
        value = value.text
    elif isinstance(value, ParsedImages):
        value = list(value.urls)

    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except ValueError as e:
            logger.warning(f"Error parsing content images: {e}")
            return []

    if not isinstance(value, (list, tuple)):
        logger.warning(f"Content images of unexpected type {type(value).__name__} ignored")
        return []

    return [url for url in value if isinstance(url, str) and url]


@dataclass(frozen=True)
class AuthoringSnapshot:
    """Point-in-time view of the authoring session for the UI layer."""
    record: DraftRecord
    slug_state: SlugValidationState
    seo_report: SeoReport
    step: FormStep
    is_new_article: bool
    can_go_next: bool
    can_submit: bool = False
