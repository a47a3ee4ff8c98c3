"""
Link change classification between two revisions of a message.

A single heuristic pattern decides whether a text contains something
link-like: ``http(s)://...``, ``www....`` or ``token.tld/...``. The rule is
deliberately conservative: once both revisions contain a link, any textual
difference counts as a modification. Removing a link is never a change.
"""

from __future__ import annotations

import re
from typing import Optional, Pattern, Union

from gigglesd.datatypes.link_edit_datatypes import UrlChangeType

DEFAULT_LINK_PATTERN: Pattern[str] = re.compile(
    r"(https?://\S+|www\.\S+|\S+\.[a-z]{2,}/\S*)",
    re.IGNORECASE,
)


class UrlChangeDetector:
    """Classifies edits using a replaceable link pattern."""

    def __init__(self, pattern: Union[str, Pattern[str], None] = None) -> None:
        if pattern is None:
            self.pattern = DEFAULT_LINK_PATTERN
        elif isinstance(pattern, str):
            self.pattern = re.compile(pattern, re.IGNORECASE)
        else:
            self.pattern = pattern

    def has_link(self, content: Optional[str]) -> bool:
        if not content:
            return False
        return self.pattern.search(content) is not None

    def classify(self, original_content: Optional[str], edited_content: Optional[str]) -> UrlChangeType:
        """Return how link content changed from ``original_content`` to ``edited_content``."""
        if not original_content or not edited_content:
            return UrlChangeType.NO_CHANGE

        had_link = self.has_link(original_content)
        has_link = self.has_link(edited_content)

        if not had_link and has_link:
            return UrlChangeType.ADDED
        if had_link and has_link and original_content != edited_content:
            return UrlChangeType.MODIFIED
        return UrlChangeType.NO_CHANGE


default_detector = UrlChangeDetector()


def has_link(content: Optional[str]) -> bool:
    """Return True if ``content`` contains a link-like substring."""
    return default_detector.has_link(content)


def classify(original_content: Optional[str], edited_content: Optional[str]) -> UrlChangeType:
    """Classify an edit with the default link pattern."""
    return default_detector.classify(original_content, edited_content)
