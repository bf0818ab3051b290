"""Derived-field helpers used by the post write path.

Services call these explicitly, in order, before persisting:
validate (schemas) -> normalize tags -> compute read time -> persist.
"""
import json
import math
import re
from typing import Iterable, List, Optional, Union

WORDS_PER_MINUTE = 200
MAX_TAG_LENGTH = 50


def compute_read_time(content: str) -> int:
    word_count = len(re.split(r"\s+", content.strip())) if content and content.strip() else 0
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def normalize_tags(raw: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """Accepts a JSON array, a comma separated string or a list.

    Returns trimmed, non-empty tags in first-seen order without duplicates.
    """
    if raw is None:
        return []

    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = raw.split(",")
        if isinstance(parsed, str):
            parsed = parsed.split(",")
        elif not isinstance(parsed, list):
            raise ValueError("Tags must be a list or a comma separated string")
        raw = parsed

    tags = []
    for tag in raw:
        if not isinstance(tag, str):
            raise ValueError("Tags must be strings")
        tag = tag.strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tags cannot be longer than {MAX_TAG_LENGTH} characters")
        if tag not in tags:
            tags.append(tag)
    return tags


def refresh_likes_count(post) -> None:
    post.likes_count = len(post.likes)
