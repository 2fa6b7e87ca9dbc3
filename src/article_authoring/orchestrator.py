"""
Multi-step article form orchestration.

The orchestrator owns the canonical DraftRecord and wires every field
edit to the other components:

1. the record is replaced with the edited copy
2. slug edits go through the SlugAvailabilityValidator
3. title/description/keywords/content edits recompute the SEO report
4. the DraftSyncManager autosave is scheduled

Forward navigation from the basic-info step is gated on the metadata
being complete and the slug being confirmed available.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .config import AuthoringConfig
from .draft_sync import DraftSaveOutcome, DraftSyncManager
from .models import (
    EDITABLE_FIELDS,
    AuthoringSnapshot,
    DraftRecord,
    FormStep,
    SeoReport,
    SlugStatus,
    SlugValidationState,
    normalize_content_document,
)
from .seo_analyzer import analyze_seo
from .slug_utils import format_as_slug, with_numeric_suffix
from .slug_validator import SlugAvailabilityValidator
from .submission import (
    SUBMISSION_FAILED_PREFIX,
    ArticleSubmitter,
    SubmissionResult,
    build_submission,
    normalize_action_result,
)

logger = logging.getLogger(__name__)

NEW_ARTICLE_PARAM = "new"

TITLE_REQUIRED_MESSAGE = "Please create a title first"
SLUG_NOT_GENERATED_MESSAGE = "Could not generate a valid slug from title"
SLUG_NOT_AVAILABLE_MESSAGE = (
    "Could not generate an available slug. "
    "Please try a different title or create a custom slug."
)
CONTENT_REQUIRED_MESSAGE = "Please add some content to your article"

# Fields that feed the SEO report
SEO_FIELDS = ("title", "small_description", "keywords", "content_document")

SnapshotListener = Callable[[AuthoringSnapshot], None]


@dataclass(frozen=True)
class SlugGenerationOutcome:
    """Result of generating a slug from the title."""
    slug: str
    available: bool
    message: Optional[str] = None


def strip_query_param(url: Optional[str], name: str) -> Optional[str]:
    """
    Remove a query parameter from a URL, keeping everything else.

    Args:
        url: URL or path with query string. None passes through.
        name: Parameter to remove.

    Returns:
        The URL without ``name``.
    """
    if not url:
        return url
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    return urlunsplit(parts._replace(query=urlencode(query)))


class ArticleFormOrchestrator:
    """
    Two-step authoring form: basic info, then content and SEO.

    State is exposed through read-only properties, an immutable
    AuthoringSnapshot, and subscribe(). Operations that schedule debounced
    work (field edits, start() with a stored slug) need a running event loop.
    """

    def __init__(
        self,
        site_id: str,
        draft_manager: DraftSyncManager,
        slug_validator: SlugAvailabilityValidator,
        config: Optional[AuthoringConfig] = None,
        *,
        start_fresh: bool = False,
        initial_step: Any = 1,
        entry_url: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            site_id: Site the article belongs to.
            draft_manager: Local draft persistence for this site.
            slug_validator: Slug checks for this site.
            config: Gating thresholds and SEO settings.
            start_fresh: Entry carried the "new article" signal; start()
                clears the stored draft instead of restoring it.
            initial_step: Step to open on (1 or 2; anything else means 1).
            entry_url: URL the form was opened with. start() removes the
                "new" parameter from it so a refresh does not reset again.
            rng: Random source for the slug suffix retry.
        """
        self.site_id = site_id
        self.draft_manager = draft_manager
        self.slug_validator = slug_validator
        self.config = config or AuthoringConfig()
        self.entry_url = entry_url
        self._start_fresh = start_fresh
        self._rng = rng
        self._record = DraftRecord(site_id=site_id)
        self._step = FormStep.from_value(initial_step)
        self._is_new = start_fresh
        self._seo_report = self._analyze()
        self._listeners: list[SnapshotListener] = []
        self._unsubscribe_slug = slug_validator.subscribe(self._on_slug_state)

    @property
    def record(self) -> DraftRecord:
        return self._record

    @property
    def slug_state(self) -> SlugValidationState:
        return self.slug_validator.state

    @property
    def seo_report(self) -> SeoReport:
        return self._seo_report

    @property
    def step(self) -> FormStep:
        return self._step

    @property
    def is_new_article(self) -> bool:
        return self._is_new

    @property
    def basic_info_complete(self) -> bool:
        """Check if step one is filled in and the slug is confirmed available."""
        record = self._record
        slug_state = self.slug_validator.state
        return (
            len(record.title.strip()) >= self.config.min_title_length
            and len(record.slug) >= self.config.min_slug_length
            and len(record.small_description.strip()) >= self.config.min_description_length
            and slug_state.status == SlugStatus.AVAILABLE
            and slug_state.candidate == record.slug
        )

    @property
    def can_go_next(self) -> bool:
        return self._step == FormStep.BASIC_INFO and self.basic_info_complete

    @property
    def can_submit(self) -> bool:
        return bool(self._record.content_document) and self.basic_info_complete

    def snapshot(self) -> AuthoringSnapshot:
        return AuthoringSnapshot(
            record=self._record,
            slug_state=self.slug_validator.state,
            seo_report=self._seo_report,
            step=self._step,
            is_new_article=self._is_new,
            can_go_next=self.can_go_next,
            can_submit=self.can_submit,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every change.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> Optional[DraftRecord]:
        """
        Restore the stored draft, or reset if the entry asked for a fresh start.

        Returns:
            The restored draft, or None if nothing was restored.
        """
        if self._start_fresh:
            self._start_fresh = False
            self.reset_for_new_article()
            self.entry_url = strip_query_param(self.entry_url, NEW_ARTICLE_PARAM)
            return None

        draft = self.draft_manager.load()
        if draft is None:
            return None

        self._record = draft
        if draft.slug:
            self.slug_validator.on_candidate_change(draft.slug)
        self._seo_report = self._analyze()
        self._notify()
        return draft

    def reset_for_new_article(self) -> None:
        """Discard the draft and every field, back to step one."""
        self.draft_manager.clear()
        self.slug_validator.on_candidate_change("")
        self._record = DraftRecord(site_id=self.site_id)
        self._step = FormStep.BASIC_INFO
        self._is_new = True
        self._seo_report = self._analyze()
        logger.info(f"Started new article for site '{self.site_id}'")
        self._notify()

    def teardown(self) -> None:
        """Flush the pending autosave and stop slug checking."""
        self.draft_manager.flush()
        self.slug_validator.cancel()
        self._unsubscribe_slug()

    def set_field(self, name: str, value: Any, *, deliberate: bool = True) -> DraftRecord:
        """
        Update one field of the draft.

        Args:
            name: One of EDITABLE_FIELDS.
            value: New value.
            deliberate: False for programmatic updates (e.g. the editor
                echoing its initial content). These do not end the "new
                article" state, so they are not autosaved on a fresh form.

        Returns:
            The updated record.

        Raises:
            ValueError: If ``name`` is not an editable field.
        """
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown draft field '{name}'")

        if name == "content_document":
            value = normalize_content_document(value)
        elif name == "cover_image_url":
            value = value or None
        elif name == "slug":
            value = self.slug_validator.on_candidate_change(value or "")
        else:
            value = value or ""

        self._record = self._record.with_field(name, value)
        if deliberate:
            self._is_new = False
        if name in SEO_FIELDS:
            self._seo_report = self._analyze()
        if not self._is_new:
            self.draft_manager.schedule_autosave(self._record)

        self._notify()
        return self._record

    def add_content_image(self, url: str) -> None:
        """Track an image uploaded into the article body."""
        tracker = self.draft_manager.image_tracker
        if tracker is not None:
            tracker.add(url)

    async def generate_slug_from_title(self) -> SlugGenerationOutcome:
        """
        Derive the slug from the title and validate it immediately.

        If the slug is taken, one retry is made with a random numeric
        suffix. A failed check is reported as-is and never retried.
        """
        if not self._record.title.strip():
            return SlugGenerationOutcome(slug=self._record.slug, available=False, message=TITLE_REQUIRED_MESSAGE)

        slug = format_as_slug(self._record.title)
        if not slug:
            return SlugGenerationOutcome(slug=self._record.slug, available=False, message=SLUG_NOT_GENERATED_MESSAGE)

        state = await self._apply_generated_slug(slug)
        if state.status == SlugStatus.UNAVAILABLE and not state.check_failed:
            retry = with_numeric_suffix(slug, self.config.slug_suffix_max, self._rng)
            logger.info(f"Slug '{slug}' is taken, retrying with '{retry}'")
            state = await self._apply_generated_slug(retry)
            if state.status == SlugStatus.UNAVAILABLE and not state.check_failed:
                return SlugGenerationOutcome(slug=retry, available=False, message=SLUG_NOT_AVAILABLE_MESSAGE)

        return SlugGenerationOutcome(
            slug=self._record.slug,
            available=state.is_available,
            message=state.error_message,
        )

    def save_draft_now(self) -> DraftSaveOutcome:
        """Save immediately, superseding any pending autosave."""
        return self.draft_manager.save_now(self._record)

    def go_next(self) -> bool:
        """Advance to the content step if step one is complete."""
        if not self.can_go_next:
            logger.debug("Forward navigation rejected: basic info incomplete or slug not available")
            return False
        self._step = FormStep.CONTENT
        self._notify()
        return True

    def go_back(self) -> bool:
        """Return to the basic-info step."""
        if self._step == FormStep.BASIC_INFO:
            return False
        self._step = FormStep.BASIC_INFO
        self._notify()
        return True

    async def submit(self, submitter: ArticleSubmitter) -> SubmissionResult:
        """
        Submit the article through the create/update action.

        On success the draft is cleared and the form reset for a new
        article; on failure the draft is kept.
        """
        if not self._record.content_document:
            return SubmissionResult.failure(CONTENT_REQUIRED_MESSAGE)

        try:
            payload = build_submission(self._record, self.draft_manager.image_tracker)
            raw = await submitter.submit(payload)
        except Exception as e:
            logger.error(f"{SUBMISSION_FAILED_PREFIX}: {e}")
            return SubmissionResult.failure(f"{SUBMISSION_FAILED_PREFIX}: {e}")

        result = normalize_action_result(raw)
        if result.success:
            logger.info(f"Article '{self._record.slug}' submitted (post id: {result.post_id})")
            self.reset_for_new_article()
        else:
            logger.warning(f"Article submission rejected: {'; '.join(result.errors)}")
        return result

    async def _apply_generated_slug(self, slug: str) -> SlugValidationState:
        self._record = self._record.with_field("slug", slug)
        self._is_new = False
        self.draft_manager.schedule_autosave(self._record)
        self._notify()
        return await self.slug_validator.check_now(slug)

    def _analyze(self) -> SeoReport:
        record = self._record
        return analyze_seo(
            record.title,
            record.small_description,
            keywords=record.keywords,
            content=record.content_document,
            config=self.config,
        )

    def _on_slug_state(self, state: SlugValidationState) -> None:
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Authoring snapshot listener failed")
