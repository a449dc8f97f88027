"""Slug helpers used for loose album identifier matching."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_DASH_RUNS = re.compile(r"-+")
_BASE_TITLE_SPLIT = re.compile(r"\s*[-–]\s*")


def slugify(text: str) -> str:
    """Lower-case, drop punctuation, hyphenate whitespace, collapse and trim dashes."""
    slug = _NON_WORD.sub("", text.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-").strip()


def compat_slug(title: str) -> str:
    """Legacy slug: lower-case with whitespace runs turned into dashes, nothing else."""
    return _WHITESPACE.sub("-", title.lower())


def base_title(title: str) -> str:
    """First segment of a title split on a dash or en-dash ("Song - Live" -> "song")."""
    return _BASE_TITLE_SPLIT.split(title.lower(), maxsplit=1)[0]
