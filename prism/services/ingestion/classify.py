"""Keyword heuristics for freshly ingested articles.

Decides the focus flag and a category slug from the article text. Matching is
on whole words, case-insensitive.
"""

import re
from collections.abc import Iterable

FOCUS_KEYWORDS = (
    "lgbtq",
    "lgbt",
    "gay",
    "lesbian",
    "bisexual",
    "transgender",
    "trans",
    "queer",
    "pride",
    "rainbow",
    "marriage equality",
    "discrimination",
    "civil rights",
    "coming out",
    "gender identity",
    "sexual orientation",
    "drag",
    "non-binary",
    "glaad",
    "human rights campaign",
    "stonewall",
    "gay rights",
)

# Checked in order; the first bucket with a hit wins
TAG_CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "politics": ("politics", "political", "government"),
    "culture": ("culture", "art", "entertainment", "music", "film"),
    "health": ("health", "wellness", "medical", "mental"),
    "business": ("business", "economic", "finance", "corporate"),
    "community": ("community", "local", "event", "social"),
}

TEXT_CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "politics": ("politics", "government", "election", "congress", "senate", "legislation"),
    "culture": ("culture", "art", "entertainment", "music", "film", "movie", "book", "festival"),
    "health": ("health", "medical", "wellness", "mental health", "healthcare", "hospital"),
    "business": ("business", "corporate", "company", "economic", "finance", "market", "startup"),
    "community": ("community", "local", "neighborhood", "volunteer", "charity", "nonprofit"),
}

DEFAULT_CATEGORY = "news"


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)", re.IGNORECASE)


_FOCUS_RE = _keyword_pattern(FOCUS_KEYWORDS)
_TAG_CATEGORY_RES = {
    slug: re.compile("|".join(re.escape(k) for k in words), re.IGNORECASE)
    for slug, words in TAG_CATEGORY_KEYWORDS.items()
}
_TEXT_CATEGORY_RES = {
    slug: _keyword_pattern(words) for slug, words in TEXT_CATEGORY_KEYWORDS.items()
}


def is_lgbtq_focused(title: str, content: str = "", tags: Iterable[str] = ()) -> bool:
    """True when the title, body, or tags mention a focus keyword."""
    text = " ".join([title, content, *tags])
    return _FOCUS_RE.search(text) is not None


def category_from_tags(tags: list[str], default: str = DEFAULT_CATEGORY) -> str:
    """Map a feed item's first tag onto a category slug.

    Tag matching is by substring ("Political News" -> politics), since feed
    tags are short labels rather than prose.
    """
    if tags:
        first = tags[0]
        for slug, pattern in _TAG_CATEGORY_RES.items():
            if pattern.search(first):
                return slug
    return default or DEFAULT_CATEGORY


def category_from_text(title: str, description: str = "", default: str = DEFAULT_CATEGORY) -> str:
    """Map headline and description prose onto a category slug."""
    text = f"{title} {description}"
    for slug, pattern in _TEXT_CATEGORY_RES.items():
        if pattern.search(text):
            return slug
    return default
