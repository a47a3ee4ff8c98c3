"""
Entry point of the link-edit rule for a single edit.

:class:`LinkEditPolicy` classifies the edit, evaluates the grace period and
hands the decision to the enforcer. It is the outermost error boundary of
the rule: one malformed event must never take the listener down with it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from gigglesd.configuration.link_edit_settings import DEFAULT_GRACE_PERIOD_MINUTES
from gigglesd.datatypes.link_edit_datatypes import Decision, EditEvent
from gigglesd.moderation import grace_period
from gigglesd.moderation.link_edit_enforcer import LinkEditEnforcer
from gigglesd.moderation.permission_classifier import is_exempt
from gigglesd.moderation.url_change_detector import UrlChangeDetector, default_detector
from gigglesd.util.logger import get_logger

logger = get_logger("link_edit_policy")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LinkEditPolicy:
    """Evaluates and enforces the link-edit rule.

    Args:
        enforcer: Applies the resulting decision.
        grace_period_minutes: Inclusive window after the original post during
            which link edits are allowed.
        clock: Returns the current aware time; injected for tests.
        detector: Link change classifier.
    """

    def __init__(
        self,
        enforcer: LinkEditEnforcer,
        *,
        grace_period_minutes: float = DEFAULT_GRACE_PERIOD_MINUTES,
        clock: Callable[[], datetime] = utc_now,
        detector: Optional[UrlChangeDetector] = None,
    ) -> None:
        self.enforcer = enforcer
        self.grace_period_minutes = grace_period_minutes
        self.clock = clock
        self.detector = detector or default_detector

    async def handle(self, event: EditEvent) -> Optional[Decision]:
        """Evaluate one edit and apply the decision.

        Returns:
            The decision, or None if evaluation or enforcement raised.
        """
        try:
            classification = self.detector.classify(event.original_content, event.edited_content)
            decision = grace_period.evaluate(
                classification,
                event.original_posted_at,
                self.clock(),
                is_exempt(event.actor),
                grace_period_minutes=self.grace_period_minutes,
            )

            logger.debug(
                "[LINK EDIT] user=%s guild=%s channel=%s message=%s change=%s elapsed=%s decision=%s",
                event.actor.user_id,
                event.guild_id,
                event.channel_id,
                event.message_id,
                classification.value,
                decision.elapsed_minutes,
                decision.decision.value,
            )

            await self.enforcer.execute(decision, event)
            return decision
        except Exception:
            actor = getattr(event, "actor", None)
            logger.exception(
                "[LINK EDIT] Failed to handle edit (user=%s guild=%s channel=%s message=%s)",
                getattr(actor, "user_id", "unknown"),
                getattr(event, "guild_id", "unknown"),
                getattr(event, "channel_id", "unknown"),
                getattr(event, "message_id", "unknown"),
            )
            return None
