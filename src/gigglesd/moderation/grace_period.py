"""
Grace period evaluation for link edits.

Members may add or change links for a short while after posting. The window
is anchored to when the ORIGINAL message was created, not to when the edit
happened, and the boundary is inclusive.
"""

from __future__ import annotations

from datetime import datetime, timezone

from gigglesd.configuration.link_edit_settings import DEFAULT_GRACE_PERIOD_MINUTES
from gigglesd.datatypes.link_edit_datatypes import Decision, DecisionType, UrlChangeType


def _as_utc(value: datetime) -> datetime:
    # Discord timestamps are aware; naive values are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def elapsed_minutes_since(original_posted_at: datetime, now: datetime) -> float:
    """Minutes between the original post and ``now``."""
    return (_as_utc(now) - _as_utc(original_posted_at)).total_seconds() / 60.0


def evaluate(
    classification: UrlChangeType,
    original_posted_at: datetime,
    now: datetime,
    actor_exempt: bool,
    *,
    grace_period_minutes: float = DEFAULT_GRACE_PERIOD_MINUTES,
) -> Decision:
    """Decide what to do with an edit.

    Args:
        classification: Link change of the edit.
        original_posted_at: Creation time of the message before the edit.
        now: Time the edit is evaluated.
        actor_exempt: Whether the editor is exempt from the rule.
        grace_period_minutes: Inclusive grace window.

    Returns:
        Decision: ``exempt`` and ``allowed_no_link_change`` carry no elapsed
        time; ``allowed_within_grace`` and ``violation`` do.
    """
    if actor_exempt:
        return Decision(DecisionType.EXEMPT, classification)

    if classification is UrlChangeType.NO_CHANGE:
        return Decision(DecisionType.ALLOWED_NO_LINK_CHANGE, classification)

    elapsed = elapsed_minutes_since(original_posted_at, now)
    if elapsed <= grace_period_minutes:
        return Decision(DecisionType.ALLOWED_WITHIN_GRACE, classification, elapsed)
    return Decision(DecisionType.VIOLATION, classification, elapsed)
