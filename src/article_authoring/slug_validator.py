"""
Slug availability validation with debouncing and race safety.

State machine per candidate:

    IDLE --(debounce elapses)--> CHECKING --> AVAILABLE | UNAVAILABLE
      \\--(format error, synchronous)------> INVALID

Every edit resets to IDLE and restarts the debounce timer. Each check is
tagged with the debouncer's sequence number; a result is applied only if
its number is still the latest, so a slow answer for an abandoned
candidate can never overwrite the state of a newer one.
"""

import logging
from typing import Callable, Optional

from .config import AuthoringConfig
from .debounce import Debouncer
from .models import SlugStatus, SlugValidationState
from .slug_client import SlugChecker
from .slug_utils import format_as_slug, validate_slug_format

logger = logging.getLogger(__name__)

SLUG_TAKEN_MESSAGE = "This slug is already taken"
SLUG_CHECK_ERROR_MESSAGE = "Error checking availability"

StateListener = Callable[[SlugValidationState], None]


class SlugAvailabilityValidator:
    """
    Debounced, cancellable uniqueness checks for one site's slugs.

    Slugs confirmed available are remembered for the session and are not
    re-checked remotely.
    """

    def __init__(
        self,
        checker: SlugChecker,
        site_id: str,
        config: Optional[AuthoringConfig] = None,
    ):
        """
        Args:
            checker: Remote uniqueness authority.
            site_id: Site the slugs belong to.
            config: Debounce window and minimum slug length.
        """
        self.checker = checker
        self.site_id = site_id
        self.config = config or AuthoringConfig()
        self._debouncer = Debouncer(self.config.slug_debounce_seconds, name="slug-check")
        self._state = SlugValidationState()
        self._confirmed: set[str] = set()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> SlugValidationState:
        return self._state

    @property
    def status(self) -> SlugStatus:
        return self._state.status

    def is_confirmed(self, slug: str) -> bool:
        """Check if a slug was already confirmed available this session."""
        return slug in self._confirmed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a state listener.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_candidate_change(self, raw: str) -> str:
        """
        Handle an edit of the slug field.

        Formats the input, resets to IDLE, and either settles synchronously
        (empty, invalid format, already confirmed) or arms the debounced
        remote check.

        Returns:
            The formatted slug for display.
        """
        formatted = format_as_slug(raw)
        self._debouncer.cancel()
        self._set_state(SlugValidationState(candidate=formatted))

        if self._settle_locally(formatted):
            return formatted

        self._debouncer.schedule(self._start_check, formatted)
        return formatted

    async def check_now(self, slug: str) -> SlugValidationState:
        """
        Validate a slug immediately, bypassing the debounce.

        Any pending debounced check is cancelled and any in-flight one
        becomes stale.

        Returns:
            The resulting state (also published to listeners).
        """
        formatted = format_as_slug(slug)
        self._debouncer.cancel()
        sequence = self._debouncer.latest
        self._set_state(SlugValidationState(candidate=formatted))

        if self._settle_locally(formatted):
            return self._state

        self._set_state(SlugValidationState(candidate=formatted, status=SlugStatus.CHECKING))
        return await self._run_check(formatted, sequence)

    def cancel(self) -> None:
        """
        Cancel the pending timer and mark in-flight checks stale.

        Used when the authoring surface is torn down.
        """
        self._debouncer.cancel()
        if self._state.status == SlugStatus.CHECKING:
            self._set_state(SlugValidationState(candidate=self._state.candidate))

    async def wait_idle(self) -> None:
        """Wait until checks started by the debounce timer have finished."""
        await self._debouncer.wait_idle()

    def _settle_locally(self, formatted: str) -> bool:
        """Resolve without the network when possible. Returns True if settled."""
        if not formatted:
            return True

        error = validate_slug_format(formatted, self.config.min_slug_length)
        if error:
            self._set_state(SlugValidationState(
                candidate=formatted,
                status=SlugStatus.INVALID,
                error_message=error,
            ))
            return True

        if formatted in self._confirmed:
            self._set_state(SlugValidationState(candidate=formatted, status=SlugStatus.AVAILABLE))
            return True

        return False

    def _start_check(self, slug: str):
        # Called by the timer; the sequence is read before anything can bump it
        sequence = self._debouncer.latest
        self._set_state(SlugValidationState(candidate=slug, status=SlugStatus.CHECKING))
        return self._run_check(slug, sequence)

    async def _run_check(self, slug: str, sequence: int) -> SlugValidationState:
        try:
            is_unique = await self.checker.is_unique(slug, self.site_id)
        except Exception as e:
            if not self._debouncer.is_current(sequence):
                logger.debug(f"Discarding stale slug check failure for '{slug}'")
                return self._state
            logger.warning(f"Error checking slug availability for '{slug}': {e}")
            self._set_state(SlugValidationState(
                candidate=slug,
                status=SlugStatus.UNAVAILABLE,
                error_message=SLUG_CHECK_ERROR_MESSAGE,
                check_failed=True,
            ))
            return self._state

        if not self._debouncer.is_current(sequence):
            logger.debug(f"Discarding stale slug check result for '{slug}'")
            return self._state

        if is_unique:
            self._confirmed.add(slug)
            self._set_state(SlugValidationState(candidate=slug, status=SlugStatus.AVAILABLE))
        else:
            self._set_state(SlugValidationState(
                candidate=slug,
                status=SlugStatus.UNAVAILABLE,
                error_message=SLUG_TAKEN_MESSAGE,
            ))
        return self._state

    def _set_state(self, state: SlugValidationState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Slug state listener failed")
