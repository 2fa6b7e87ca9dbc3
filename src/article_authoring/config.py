# -*- coding: utf-8 -*-
"""
Centralized configuration for the article-authoring engine.

This module provides a unified configuration dataclass that controls
debounce windows, step-gating thresholds, SEO heuristics and the
storage keys used for draft persistence.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


# Stop words discarded when deriving the main keyword from a title
DEFAULT_STOP_WORDS = (
    "the", "a", "an", "and", "or", "but", "is", "are",
    "in", "on", "at", "to", "for", "with", "by",
)

ENV_PREFIX = "ARTICLE_AUTHORING_"


@dataclass
class AuthoringConfig:
    """
    Central configuration for the authoring engine.

    Attributes:
        autosave_debounce_seconds: Quiet period after the last edit before
            the draft is written to local storage.
        slug_debounce_seconds: Quiet period after the last slug keystroke
            before the remote uniqueness check runs.
        slug_check_timeout_seconds: Timeout applied by the HTTP slug checker.

        min_title_length / min_slug_length / min_description_length:
            Minimum lengths required to leave the basic-info step.

        title_min_chars / title_max_chars: Recommended title length band.
        description_min_chars / description_max_chars: Recommended meta
            description length band.
        min_word_count: Below this, the content-length check warns.
        excellent_word_count: Above this, the content-length description
            says "excellent" (status stays pass).
        min_keyword_density / max_keyword_density: Acceptable density band
            (percent) for the main title keyword.
        min_keyword_length: Title tokens shorter than this are discarded.
        stop_words: Tokens never used as the main keyword.

        extended_seo_checks: Append heading-quality and explicit-keyword
            placement checks after the fixed battery.

        draft_storage_key: Key holding the serialized draft.
        editor_cache_keys: Side-storage keys owned by the editor (rendered
            HTML, editor JSON) that are removed on clear.

        slug_suffix_max: Upper bound (inclusive) of the random numeric suffix
            tried once when a generated slug is taken.

        api_base_url / check_slug_path: Location of the remote uniqueness
            endpoint.
    """

    # Timing
    autosave_debounce_seconds: float = 0.5
    slug_debounce_seconds: float = 0.5
    slug_check_timeout_seconds: float = 10.0

    # Step gating
    min_title_length: int = 3
    min_slug_length: int = 3
    min_description_length: int = 10

    # SEO thresholds
    title_min_chars: int = 30
    title_max_chars: int = 60
    description_min_chars: int = 80
    description_max_chars: int = 160
    min_word_count: int = 300
    excellent_word_count: int = 600
    min_keyword_density: float = 0.5
    max_keyword_density: float = 3.0
    min_keyword_length: int = 3
    stop_words: tuple[str, ...] = field(default=DEFAULT_STOP_WORDS)

    extended_seo_checks: bool = False

    # Storage
    draft_storage_key: str = "article-form-draft"
    editor_cache_keys: tuple[str, ...] = ("html-content", "novel-content")

    # Slug generation
    slug_suffix_max: int = 999

    # Remote uniqueness endpoint
    api_base_url: str = "http://localhost:3000"
    check_slug_path: str = "/api/check-slug"

    @property
    def check_slug_url(self) -> str:
        """Full URL of the uniqueness-check endpoint."""
        return self.api_base_url.rstrip("/") + self.check_slug_path

    def is_stop_word(self, token: str) -> bool:
        """Check if a lowercase token is in the stop-word list."""
        return token in self.stop_words

    def __post_init__(self):
        """Validate configuration values."""
        for name in (
            "autosave_debounce_seconds",
            "slug_debounce_seconds",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.slug_check_timeout_seconds <= 0:
            raise ValueError(
                f"slug_check_timeout_seconds must be > 0, got {self.slug_check_timeout_seconds}"
            )
        if self.title_min_chars > self.title_max_chars:
            raise ValueError(
                f"title_min_chars ({self.title_min_chars}) must be <= "
                f"title_max_chars ({self.title_max_chars})"
            )
        if self.description_min_chars > self.description_max_chars:
            raise ValueError(
                f"description_min_chars ({self.description_min_chars}) must be <= "
                f"description_max_chars ({self.description_max_chars})"
            )
        if self.min_keyword_density > self.max_keyword_density:
            raise ValueError(
                f"min_keyword_density ({self.min_keyword_density}) must be <= "
                f"max_keyword_density ({self.max_keyword_density})"
            )
        if self.min_word_count < 0:
            raise ValueError(f"min_word_count must be >= 0, got {self.min_word_count}")
        if self.slug_suffix_max < 1:
            raise ValueError(f"slug_suffix_max must be >= 1, got {self.slug_suffix_max}")
        if not self.draft_storage_key:
            raise ValueError("draft_storage_key must not be empty")
        # Normalize in case a list was passed
        self.stop_words = tuple(w.lower() for w in self.stop_words)
        self.editor_cache_keys = tuple(self.editor_cache_keys)

    @classmethod
    def for_testing(cls, **overrides) -> "AuthoringConfig":
        """Create config with millisecond debounce windows.

        Args:
            **overrides: Override any config values.

        Returns:
            AuthoringConfig suited to fast event-loop tests.
        """
        defaults = {
            "autosave_debounce_seconds": 0.02,
            "slug_debounce_seconds": 0.02,
            "slug_check_timeout_seconds": 1.0,
        }
        defaults.update(overrides)
        return cls(**defaults)

    @classmethod
    def from_env(
        cls,
        environ: Optional[dict] = None,
        prefix: str = ENV_PREFIX,
        **overrides,
    ) -> "AuthoringConfig":
        """Create config from environment variables.

        Recognized variables (with the default prefix):
            ARTICLE_AUTHORING_API_BASE_URL
            ARTICLE_AUTHORING_AUTOSAVE_DEBOUNCE
            ARTICLE_AUTHORING_SLUG_DEBOUNCE
            ARTICLE_AUTHORING_SLUG_TIMEOUT
            ARTICLE_AUTHORING_EXTENDED_SEO

        Args:
            environ: Mapping to read from. Defaults to os.environ.
            prefix: Variable name prefix.
            **overrides: Explicit values that win over the environment.

        Raises:
            ValueError: If a variable is set but cannot be parsed.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        base_url = env.get(f"{prefix}API_BASE_URL")
        if base_url:
            values["api_base_url"] = base_url

        float_vars = {
            "AUTOSAVE_DEBOUNCE": "autosave_debounce_seconds",
            "SLUG_DEBOUNCE": "slug_debounce_seconds",
            "SLUG_TIMEOUT": "slug_check_timeout_seconds",
        }
        for suffix, attr in float_vars.items():
            raw = env.get(f"{prefix}{suffix}")
            if raw is None or raw == "":
                continue
            try:
                values[attr] = float(raw)
            except ValueError:
                raise ValueError(f"{prefix}{suffix} must be a number, got '{raw}'")

        extended = env.get(f"{prefix}EXTENDED_SEO")
        if extended:
            lowered = extended.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                values["extended_seo_checks"] = True
            elif lowered in ("0", "false", "no", "off"):
                values["extended_seo_checks"] = False
            else:
                raise ValueError(f"{prefix}EXTENDED_SEO must be a boolean, got '{extended}'")

        values.update(overrides)
        return cls(**values)
