"""
Data structures for the link-edit moderation policy.

An :class:`EditEvent` is built once per edit notification and flows through
the detector, the grace period evaluator and the enforcer. Evaluated edits
that changed link content end up as :class:`LinkViolationRecord` rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional

from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID

# Stored before/after content is capped at this many characters
CONTENT_MAX_LENGTH = 1000


class UrlChangeType(Enum):
    """How the link content of a message changed between two revisions."""

    NO_CHANGE = "no_change"
    ADDED = "added"
    MODIFIED = "modified"

    def __str__(self) -> str:
        return self.value


class DecisionType(Enum):
    """Outcome of evaluating one edit against the link-edit rule."""

    EXEMPT = "exempt"
    ALLOWED_NO_LINK_CHANGE = "allowed_no_link_change"
    ALLOWED_WITHIN_GRACE = "allowed_within_grace"
    VIOLATION = "violation"

    def __str__(self) -> str:
        return self.value


class ActionTaken(Enum):
    """Action recorded alongside a persisted link edit."""

    ALLOWED_WITHIN_GRACE_PERIOD = "allowed_within_grace_period"
    MESSAGE_DELETED = "message_deleted"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ModerationActor:
    """The member who edited the message.

    Attributes:
        user_id: ID of the member.
        display_name: Name stored with violation records.
        mention: Mention string used in warning notices.
        permissions: Names of the guild permissions the member holds
            (``administrator``, ``manage_messages``, ...).
    """
    user_id: UserID
    display_name: str
    mention: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class EditEvent:
    """Snapshot of a single message edit, taken when the edit was observed."""
    actor: ModerationActor
    guild_id: GuildID
    channel_id: ChannelID
    message_id: MessageID
    original_content: Optional[str]
    edited_content: Optional[str]
    original_posted_at: datetime


@dataclass(frozen=True, slots=True)
class Decision:
    """Result of the grace period evaluation.

    ``elapsed_minutes`` is only computed once the edit is known to touch link
    content; it stays ``None`` for exempt actors and edits without link changes.
    """
    decision: DecisionType
    classification: UrlChangeType
    elapsed_minutes: Optional[float] = None

    @property
    def requires_record(self) -> bool:
        return self.decision in (DecisionType.ALLOWED_WITHIN_GRACE, DecisionType.VIOLATION)


@dataclass(slots=True)
class EnforcementOutcome:
    """What the enforcer actually did for a decision."""
    record_submitted: bool = False
    message_deleted: bool = False
    warning_sent: bool = False
    fallback_warning_sent: bool = False
    cleanup_scheduled: bool = False


@dataclass(slots=True)
class LinkViolationRecord:
    """A row of the ``link_edit_violations`` table."""
    guild_id: GuildID
    user_id: UserID
    username: str
    channel_id: ChannelID
    message_id: Optional[MessageID]
    violation_type: UrlChangeType
    old_content: Optional[str]
    new_content: Optional[str]
    action_taken: ActionTaken
    created_at: datetime


@dataclass(frozen=True, slots=True)
class LinkViolationStats:
    """Aggregated link edit counts for a guild over ``period_days``."""
    total: int
    deleted: int
    allowed: int
    added: int
    modified: int
    period_days: int


def truncate_content(content: Optional[str], limit: int = CONTENT_MAX_LENGTH) -> Optional[str]:
    """Cap stored content at ``limit`` characters, passing ``None`` through."""
    if content is None:
        return None
    return content[:limit]
