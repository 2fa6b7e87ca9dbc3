"""
Record-submission boundary.

The backend that creates or updates articles is an external collaborator.
This module builds the payload it accepts and folds the several result
shapes it may answer with into one SubmissionResult.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from .image_tracker import UploadedImageTracker
from .models import DraftRecord

logger = logging.getLogger(__name__)

SUBMISSION_FAILED_PREFIX = "Submission failed"


class SubmissionError(Exception):
    """Raised when a draft cannot be turned into a submission payload."""
    pass


@dataclass(frozen=True)
class ArticleSubmission:
    """Final article fields plus the uploaded-image manifest."""
    site_id: str
    title: str
    slug: str
    small_description: str
    keywords: str = ""
    cover_image_url: Optional[str] = None
    article_content: Optional[str] = None  # JSON text of the content tree
    content_images: tuple[str, ...] = ()

    def to_form_dict(self) -> dict[str, str]:
        """
        Flatten to the form fields the create/update action reads.

        Optional fields are omitted when empty.
        """
        form = {
            "siteId": self.site_id,
            "title": self.title,
            "slug": self.slug,
            "smallDescription": self.small_description,
        }
        if self.keywords:
            form["keywords"] = self.keywords
        if self.cover_image_url:
            form["postCoverImage"] = self.cover_image_url
        if self.article_content:
            form["articleContent"] = self.article_content
        if self.content_images:
            form["contentImages"] = json.dumps(list(self.content_images))
        return form


@dataclass(frozen=True)
class SubmissionResult:
    """Normalized outcome of a create/update action."""
    success: bool
    post_id: Optional[str] = None
    errors: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def failure(cls, *errors: str) -> "SubmissionResult":
        return cls(success=False, errors=tuple(errors))


class ArticleSubmitter(Protocol):
    """The create/update action. Returns the backend's raw result."""

    async def submit(self, payload: ArticleSubmission) -> Any:
        ...


def build_submission(
    record: DraftRecord,
    tracker: Optional[UploadedImageTracker] = None,
) -> ArticleSubmission:
    """
    Build the submission payload from a draft.

    Args:
        record: The draft to submit.
        tracker: Session image list; its URLs become the image manifest.

    Returns:
        ArticleSubmission ready for the submitter.

    Raises:
        SubmissionError: If the content tree cannot be serialized.
    """
    article_content = None
    if record.content_document:
        try:
            article_content = json.dumps(record.content_document, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SubmissionError(f"Article content could not be serialized: {e}") from e

    return ArticleSubmission(
        site_id=record.site_id,
        title=record.title,
        slug=record.slug,
        small_description=record.small_description,
        keywords=record.keywords,
        cover_image_url=record.cover_image_url,
        article_content=article_content,
        content_images=tuple(tracker.urls) if tracker is not None else (),
    )


def normalize_action_result(raw: Any) -> SubmissionResult:
    """
    Fold a backend result into a SubmissionResult.

    Handles:
    - {"success": true, "postId": "..."}
    - {"status": "success"}
    - {"status": "error", "errors": [...]}
    - {"error": {"_form": [...]}}
    - {"error": {"errors": [...]}}

    Anything else is a failure with a generic message.
    """
    if not isinstance(raw, dict):
        logger.warning(f"Unexpected submission result type: {type(raw).__name__}")
        return SubmissionResult.failure("Unexpected response from server")

    if raw.get("success") is True or raw.get("status") == "success":
        post_id = raw.get("postId")
        return SubmissionResult(
            success=True,
            post_id=str(post_id) if post_id is not None else None,
        )

    errors: Any = None
    error = raw.get("error")
    if isinstance(error, dict):
        errors = error.get("_form", error.get("errors"))
    elif isinstance(error, str):
        errors = error
    elif "errors" in raw:
        errors = raw["errors"]

    return SubmissionResult.failure(*_error_messages(errors))


def _error_messages(errors: Any) -> list[str]:
    if isinstance(errors, str):
        errors = [errors]
    if not isinstance(errors, (list, tuple)):
        return ["Submission failed"]
    messages = [str(e) for e in errors if e]
    return messages or ["Submission failed"]
