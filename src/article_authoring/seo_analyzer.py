"""
Real-time SEO analysis for an article under authoring.

This module runs a fixed battery of checks over the title, meta
description, keywords and content tree:
- Title length
- Meta description length
- H1 count
- H2 presence
- Word count
- Main-keyword density (keyword derived from the title)

The analysis is a pure function of its inputs and is recomputed in full
on every change. Optional extended checks (heading quality, explicit
keywords in title/description) are appended when enabled.
"""

import re
from typing import Optional

from .config import AuthoringConfig
from .content_tree import collect_text, extract_headings, split_words
from .models import CheckStatus, ContentNode, Heading, SeoCheckResult, SeoReport

# Stable check ids
TITLE_LENGTH = "title-length"
META_DESCRIPTION = "meta-description"
H1_COUNT = "h1-count"
H2_PRESENCE = "h2-presence"
CONTENT_LENGTH = "content-length"
KEYWORD_DENSITY = "keyword-density"
HEADING_QUALITY = "heading-quality"
KEYWORDS_IN_TITLE = "keywords-in-title"
KEYWORDS_IN_DESCRIPTION = "keywords-in-description"

_NON_WORD = re.compile(r"[^\w]")

_DEFAULT_CONFIG = AuthoringConfig()


def analyze_seo(
    title: Optional[str],
    small_description: Optional[str],
    keywords: Optional[str] = None,
    content: Optional[ContentNode] = None,
    config: Optional[AuthoringConfig] = None,
) -> SeoReport:
    """
    Analyze article inputs and produce an SEO report.

    Args:
        title: Article title.
        small_description: Meta description.
        keywords: Comma-separated free-text keywords (only used by the
            extended checks).
        content: Content tree produced by the editor.
        config: Thresholds. Defaults to AuthoringConfig().

    Returns:
        SeoReport with one result per check, in battery order.
    """
    config = config or _DEFAULT_CONFIG
    title = title or ""
    small_description = small_description or ""

    headings = extract_headings(content)
    words = split_words(collect_text(content))

    checks = [
        check_title_length(title, config),
        check_description_length(small_description, config),
        check_h1_count(headings),
        check_h2_presence(headings),
        check_word_count(len(words), config),
        check_keyword_density(title, words, config),
    ]

    if config.extended_seo_checks:
        checks.append(check_heading_quality(headings))
        keyword_list = parse_keywords(keywords)
        if keyword_list:
            checks.append(_check_keywords_in(
                KEYWORDS_IN_TITLE, "Keywords in Title", "title", title, keyword_list,
            ))
            checks.append(_check_keywords_in(
                KEYWORDS_IN_DESCRIPTION, "Keywords in Meta Description",
                "meta description", small_description, keyword_list,
            ))

    return SeoReport(checks=tuple(checks))


def check_title_length(title: str, config: AuthoringConfig) -> SeoCheckResult:
    """Title must exist; recommended length is inside the configured band."""
    ideal = f"Ideal title length is {config.title_min_chars}-{config.title_max_chars} characters"
    if not title.strip():
        return SeoCheckResult(
            id=TITLE_LENGTH,
            title="Missing Title",
            description="Your article has no title",
            status=CheckStatus.FAIL,
            recommendation=f"Add a title to your article ({config.title_min_chars}-{config.title_max_chars} characters)",
        )

    length = len(title)
    status = CheckStatus.PASS
    recommendation = ideal
    if length < config.title_min_chars:
        status = CheckStatus.WARNING
        recommendation = f"Your title is too short. {ideal}."
    elif length > config.title_max_chars:
        status = CheckStatus.WARNING
        recommendation = f"Your title is too long and may be truncated in search results. {ideal}."

    return SeoCheckResult(
        id=TITLE_LENGTH,
        title="Title Length",
        description=f"Your title is {length} characters",
        status=status,
        recommendation=recommendation,
    )


def check_description_length(description: str, config: AuthoringConfig) -> SeoCheckResult:
    """Meta description must exist; recommended length is inside the band."""
    band = f"{config.description_min_chars}-{config.description_max_chars}"
    if not description.strip():
        return SeoCheckResult(
            id=META_DESCRIPTION,
            title="Missing Meta Description",
            description="Your article has no meta description",
            status=CheckStatus.FAIL,
            recommendation=f"Add a meta description to your article ({band} characters)",
        )

    length = len(description)
    status = CheckStatus.PASS
    recommendation = f"Ideal meta description length is {band} characters"
    if length < config.description_min_chars:
        status = CheckStatus.WARNING
        recommendation = f"Your meta description is too short. Aim for {band} characters."
    elif length > config.description_max_chars:
        status = CheckStatus.WARNING
        recommendation = f"Your meta description is too long and may be truncated. Aim for {band} characters."

    return SeoCheckResult(
        id=META_DESCRIPTION,
        title="Meta Description",
        description=f"Your meta description is {length} characters",
        status=status,
        recommendation=recommendation,
    )


def check_h1_count(headings: list[Heading]) -> SeoCheckResult:
    """Exactly one H1 passes; none fails; several warn."""
    h1_count = sum(1 for h in headings if h.level == 1)

    if h1_count == 0:
        return SeoCheckResult(
            id=H1_COUNT,
            title="Missing H1 Heading",
            description="Your article has no H1 headings",
            status=CheckStatus.FAIL,
            recommendation="Add an H1 heading to your article (main title)",
        )
    if h1_count > 1:
        return SeoCheckResult(
            id=H1_COUNT,
            title="Too Many H1 Headings",
            description=f"Your article has {h1_count} H1 headings",
            status=CheckStatus.WARNING,
            recommendation="Use only one H1 heading per article",
        )
    return SeoCheckResult(
        id=H1_COUNT,
        title="H1 Heading",
        description="Your article has one H1 heading",
        status=CheckStatus.PASS,
        recommendation="Good job! This follows SEO best practices.",
    )


def check_h2_presence(headings: list[Heading]) -> SeoCheckResult:
    """At least one H2 is expected to structure the content."""
    h2_count = sum(1 for h in headings if h.level == 2)

    if h2_count == 0:
        return SeoCheckResult(
            id=H2_PRESENCE,
            title="Missing H2 Headings",
            description="Your article has no H2 headings",
            status=CheckStatus.WARNING,
            recommendation="Use H2 headings to divide your content into major sections",
        )
    return SeoCheckResult(
        id=H2_PRESENCE,
        title="H2 Headings",
        description=f"Your article has {h2_count} H2 heading{'s' if h2_count != 1 else ''}",
        status=CheckStatus.PASS,
        recommendation="Good heading structure helps both readers and search engines understand your content.",
    )


def check_word_count(word_count: int, config: AuthoringConfig) -> SeoCheckResult:
    """Fewer than min_word_count words warns."""
    recommendation = (
        f"Aim for at least {config.min_word_count} words for basic articles, "
        "1000+ for in-depth content"
    )
    description = f"Your article has approximately {word_count} words"

    if word_count < config.min_word_count:
        status = CheckStatus.WARNING
        recommendation = (
            f"Your content is too short. Add more content to reach at least "
            f"{config.min_word_count} words."
        )
    else:
        status = CheckStatus.PASS
        if word_count > config.excellent_word_count:
            description += " (excellent length)"

    return SeoCheckResult(
        id=CONTENT_LENGTH,
        title="Content Length",
        description=description,
        status=status,
        recommendation=recommendation,
    )


def extract_title_keywords(title: str, config: Optional[AuthoringConfig] = None) -> list[str]:
    """
    Derive candidate keywords from a title.

    Lowercases, splits on whitespace, strips non-word characters, and
    drops stop words and tokens shorter than config.min_keyword_length.

    Returns:
        Candidate keywords in title order.
    """
    config = config or _DEFAULT_CONFIG
    candidates = []
    for token in (title or "").lower().split():
        token = _NON_WORD.sub("", token)
        if len(token) < config.min_keyword_length:
            continue
        if config.is_stop_word(token):
            continue
        candidates.append(token)
    return candidates


def count_keyword_occurrences(words: list[str], keyword: str) -> int:
    """
    Count whole-word, case-insensitive occurrences of keyword in text.

    Args:
        words: Tokens of the body text.
        keyword: Keyword (may contain several words).
    """
    keyword = (keyword or "").strip().lower()
    if not keyword:
        return 0
    text = " ".join(words).lower()
    pattern = re.compile(rf"\b{re.escape(keyword)}\b")
    return len(pattern.findall(text))


def calculate_density(occurrences: int, total_words: int) -> float:
    """Keyword density as a percentage of total words."""
    if total_words <= 0:
        return 0.0
    return occurrences / total_words * 100


def check_keyword_density(title: str, words: list[str], config: AuthoringConfig) -> SeoCheckResult:
    """
    Density of the main title keyword inside the configured band passes.

    Only the first candidate keyword from the title is considered.
    """
    candidates = extract_title_keywords(title, config)
    band = f"{config.min_keyword_density:g}-{config.max_keyword_density:g}%"

    if not candidates:
        return SeoCheckResult(
            id=KEYWORD_DENSITY,
            title="Keyword Usage",
            description="No main keyword could be derived from your title",
            status=CheckStatus.WARNING,
            recommendation="Use a descriptive title that contains your main keyword",
        )

    main_keyword = candidates[0]
    occurrences = count_keyword_occurrences(words, main_keyword)

    if occurrences == 0:
        return SeoCheckResult(
            id=KEYWORD_DENSITY,
            title="Keyword Usage",
            description=f'Main keyword "{main_keyword}" from title not found in content',
            status=CheckStatus.WARNING,
            recommendation="Include your main keyword from the title in your content",
        )

    density = calculate_density(occurrences, len(words))
    description = (
        f'Title keyword "{main_keyword}" density is approximately {density:.1f}% '
        f"({occurrences} occurrence{'s' if occurrences != 1 else ''})"
    )

    if density < config.min_keyword_density:
        status = CheckStatus.WARNING
        recommendation = f'Use "{main_keyword}" more often. Aim for {band} density.'
    elif density > config.max_keyword_density:
        status = CheckStatus.WARNING
        recommendation = (
            f'Reduce the frequency of "{main_keyword}" to avoid keyword stuffing. '
            f"Aim for {band} density."
        )
    else:
        status = CheckStatus.PASS
        recommendation = "Your main keyword density is in the recommended range"

    return SeoCheckResult(
        id=KEYWORD_DENSITY,
        title="Keyword Density",
        description=description,
        status=status,
        recommendation=recommendation,
    )


def parse_keywords(keywords: Optional[str]) -> list[str]:
    """Split the comma-separated keywords field, dropping blanks."""
    if not keywords:
        return []
    return [k.strip() for k in keywords.split(",") if k.strip()]


def analyze_heading_quality(headings: list[Heading]) -> list[str]:
    """
    Find quality issues in heading texts.

    Returns:
        Human-readable issue descriptions (empty when headings look good).
    """
    issues = []

    empty = [h for h in headings if not h.text.strip()]
    if empty:
        issues.append(f"Found {len(empty)} empty heading(s)")

    non_empty = [h for h in headings if h.text.strip()]

    short = [h for h in non_empty if len(h.text.split()) < 3]
    if short:
        issues.append(f"Found {len(short)} very short heading(s)")

    long = [h for h in non_empty if len(h.text.split()) > 15]
    if long:
        issues.append(f"Found {len(long)} very long heading(s)")

    seen: set[str] = set()
    duplicates = 0
    for h in non_empty:
        key = h.text.strip().lower()
        if key in seen:
            duplicates += 1
        seen.add(key)
    if duplicates:
        issues.append(f"Found {duplicates} duplicate heading(s)")

    lowercase_start = [h for h in non_empty if not h.text.strip()[0].isupper()]
    if lowercase_start:
        issues.append(f"Found {len(lowercase_start)} heading(s) without proper capitalization")

    return issues


def check_heading_quality(headings: list[Heading]) -> SeoCheckResult:
    """More than three issues fails; any issue warns."""
    issues = analyze_heading_quality(headings)

    if not issues:
        return SeoCheckResult(
            id=HEADING_QUALITY,
            title="Heading Quality",
            description=f"Checked {len(headings)} heading(s); no issues found",
            status=CheckStatus.PASS,
            recommendation="Your headings look good! Continue using descriptive, keyword-rich headings",
        )

    status = CheckStatus.FAIL if len(issues) > 3 else CheckStatus.WARNING
    return SeoCheckResult(
        id=HEADING_QUALITY,
        title="Heading Quality",
        description="; ".join(issues),
        status=status,
        recommendation=(
            "Use unique, capitalized headings of 3-10 words. "
            "Consider using questions in some headings for voice search"
        ),
    )


def _check_keywords_in(
    check_id: str,
    title: str,
    element: str,
    text: str,
    keyword_list: list[str],
) -> SeoCheckResult:
    """Pass if any explicit keyword occurs in the given text."""
    lowered = text.lower()
    found = [k for k in keyword_list if k.lower() in lowered]

    if found:
        return SeoCheckResult(
            id=check_id,
            title=title,
            description=f"Your {element} contains {len(found)} of your specified keywords",
            status=CheckStatus.PASS,
            recommendation=f"Good job including keywords in your {element}!",
        )
    return SeoCheckResult(
        id=check_id,
        title=title,
        description=f"Your {element} doesn't contain any of your specified keywords",
        status=CheckStatus.WARNING,
        recommendation=f"Consider including at least one of your main keywords in the {element}",
    )
