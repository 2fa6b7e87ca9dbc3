"""Tests for the debounced slug availability validator."""

import asyncio

from article_authoring.models import SlugStatus
from article_authoring.slug_validator import (
    SLUG_CHECK_ERROR_MESSAGE,
    SLUG_TAKEN_MESSAGE,
    SlugAvailabilityValidator,
)

from tests.helpers import FakeSlugChecker, wait_until

SITE = "site-1"


def _settled(validator):
    return lambda: validator.state.status.is_terminal


class TestRaceSafety:
    """Tests that stale answers never overwrite newer ones."""

    def test_late_answer_for_old_candidate_discarded(self, config):
        """Test A resolving after B leaves B's status in place."""
        checker = FakeSlugChecker(taken={"first-slug"})

        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            gate_a = checker.hold("first-slug")

            validator.on_candidate_change("first-slug")
            await wait_until(lambda: validator.state.is_checking)

            validator.on_candidate_change("second-slug")
            await wait_until(_settled(validator))
            assert validator.state.candidate == "second-slug"
            assert validator.state.status == SlugStatus.AVAILABLE

            gate_a.set()
            await validator.wait_idle()
            return validator.state

        state = asyncio.run(scenario())
        assert state.candidate == "second-slug"
        assert state.status == SlugStatus.AVAILABLE
        assert checker.calls == [("first-slug", SITE), ("second-slug", SITE)]

    def test_late_failure_for_old_candidate_discarded(self, config):
        """Test a stale checker error does not mark the new slug unavailable."""
        checker = FakeSlugChecker(failing={"first-slug"})

        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            gate_a = checker.hold("first-slug")
            validator.on_candidate_change("first-slug")
            await wait_until(lambda: validator.state.is_checking)

            await validator.check_now("second-slug")
            gate_a.set()
            await validator.wait_idle()
            return validator.state

        state = asyncio.run(scenario())
        assert state.status == SlugStatus.AVAILABLE
        assert not state.check_failed


class TestDebounce:
    """Tests for debounced checking."""

    def test_burst_of_edits_checks_final_value_once(self, config):
        """Test rapid edits produce one remote call for the last value."""
        checker = FakeSlugChecker()

        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            for raw in ("my-s", "my-sl", "my-slu", "my-slug"):
                validator.on_candidate_change(raw)
            assert validator.state.status == SlugStatus.IDLE
            await wait_until(_settled(validator))
            await validator.wait_idle()
            await asyncio.sleep(config.slug_debounce_seconds * 3)
            return validator.state

        state = asyncio.run(scenario())
        assert checker.calls == [("my-slug", SITE)]
        assert state.status == SlugStatus.AVAILABLE

    def test_returns_formatted_candidate(self, config, checker):
        """Test the formatted slug is returned for display."""
        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            formatted = validator.on_candidate_change("My Great Post!")
            validator.cancel()
            return formatted

        assert asyncio.run(scenario()) == "my-great-post"

    def test_check_now_cancels_pending_timer(self, config, checker):
        """Test an immediate check supersedes the debounced one."""
        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            validator.on_candidate_change("typed-slug")
            state = await validator.check_now("generated-slug")
            await asyncio.sleep(config.slug_debounce_seconds * 3)
            return state

        state = asyncio.run(scenario())
        assert state.candidate == "generated-slug"
        assert checker.calls == [("generated-slug", SITE)]


class TestLocalResolution:
    """Tests for candidates settled without a remote call."""

    def test_invalid_short_circuits(self, config, checker):
        """Test a too-short slug is INVALID immediately with no request."""
        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            validator.on_candidate_change("ab")
            state = validator.state
            await asyncio.sleep(config.slug_debounce_seconds * 3)
            return state

        state = asyncio.run(scenario())
        assert state.status == SlugStatus.INVALID
        assert state.error_message == "Slug must be at least 3 characters"
        assert checker.calls == []

    def test_empty_candidate_stays_idle(self, config, checker):
        """Test input that formats to nothing is IDLE without error."""
        validator = SlugAvailabilityValidator(checker, SITE, config)
        assert validator.on_candidate_change("!!!") == ""
        assert validator.state.status == SlugStatus.IDLE
        assert validator.state.error_message is None

    def test_confirmed_slug_not_rechecked(self, config, checker):
        """Test a slug confirmed available is not sent to the server again."""
        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            await validator.check_now("my-slug")
            validator.on_candidate_change("other-slug")
            validator.on_candidate_change("my-slug")
            state = validator.state
            await asyncio.sleep(config.slug_debounce_seconds * 3)
            return validator, state

        validator, state = asyncio.run(scenario())
        assert state.status == SlugStatus.AVAILABLE
        assert validator.is_confirmed("my-slug")
        assert checker.calls == [("my-slug", SITE)]


class TestResults:
    """Tests for the terminal states of a remote check."""

    def test_taken(self, config):
        """Test a taken slug is UNAVAILABLE with the taken message."""
        checker = FakeSlugChecker(taken={"my-slug"})
        validator = SlugAvailabilityValidator(checker, SITE, config)
        state = asyncio.run(validator.check_now("my-slug"))
        assert state.status == SlugStatus.UNAVAILABLE
        assert state.error_message == SLUG_TAKEN_MESSAGE
        assert not state.check_failed
        assert not validator.is_confirmed("my-slug")

    def test_checker_error_fails_closed(self, config):
        """Test a checker fault is UNAVAILABLE and not retried."""
        checker = FakeSlugChecker(failing={"my-slug"})
        validator = SlugAvailabilityValidator(checker, SITE, config)
        state = asyncio.run(validator.check_now("my-slug"))
        assert state.status == SlugStatus.UNAVAILABLE
        assert state.error_message == SLUG_CHECK_ERROR_MESSAGE
        assert state.check_failed
        assert checker.calls == [("my-slug", SITE)]

    def test_check_now_validates_format_first(self, config, checker):
        """Test check_now does not call the server for invalid slugs."""
        validator = SlugAvailabilityValidator(checker, SITE, config)
        state = asyncio.run(validator.check_now("x"))
        assert state.status == SlugStatus.INVALID
        assert checker.calls == []


class TestListenersAndCancel:
    """Tests for subscription and teardown."""

    def test_listener_sees_transitions(self, config, checker):
        """Test subscribers receive each state change in order."""
        validator = SlugAvailabilityValidator(checker, SITE, config)
        statuses = []
        unsubscribe = validator.subscribe(lambda state: statuses.append(state.status))

        asyncio.run(validator.check_now("my-slug"))
        unsubscribe()
        validator.on_candidate_change("")

        assert statuses == [SlugStatus.IDLE, SlugStatus.CHECKING, SlugStatus.AVAILABLE]

    def test_failing_listener_does_not_break_validation(self, config, checker):
        """Test an exception in a listener is contained."""
        validator = SlugAvailabilityValidator(checker, SITE, config)

        def explode(state):
            raise RuntimeError("listener bug")

        validator.subscribe(explode)
        state = asyncio.run(validator.check_now("my-slug"))
        assert state.status == SlugStatus.AVAILABLE

    def test_cancel_marks_in_flight_check_stale(self, config, checker):
        """Test a check resolving after cancel() is ignored."""
        async def scenario():
            validator = SlugAvailabilityValidator(checker, SITE, config)
            gate = checker.hold("my-slug")
            validator.on_candidate_change("my-slug")
            await wait_until(lambda: validator.state.is_checking)
            validator.cancel()
            gate.set()
            await validator.wait_idle()
            return validator.state

        state = asyncio.run(scenario())
        assert state.status == SlugStatus.IDLE
        assert state.candidate == "my-slug"
