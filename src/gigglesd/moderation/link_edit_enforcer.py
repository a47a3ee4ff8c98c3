"""
Applies link-edit decisions to Discord.

- exempt / allowed_no_link_change: log only
- allowed_within_grace: record the edit, leave the message alone
- violation: record the edit, delete the message, post a self-removing
  warning; if deletion fails post a plain fallback warning instead

Recording is submitted in the background and is not awaited by
enforcement. Nothing in this module raises to the caller.
"""

from __future__ import annotations

from typing import Any, Hashable

from gigglesd.configuration.link_edit_settings import LinkEditSettings
from gigglesd.datatypes.link_edit_datatypes import (
    ActionTaken,
    Decision,
    DecisionType,
    EditEvent,
    EnforcementOutcome,
)
from gigglesd.moderation.discord_gateway import ModerationGateway
from gigglesd.moderation.violation_recorder import ViolationRecorder
from gigglesd.scheduler.notice_cleanup_scheduler import NoticeCleanupScheduler
from gigglesd.util.logger import get_logger

logger = get_logger("link_edit_enforcer")


def _format_elapsed(decision: Decision) -> str:
    if decision.elapsed_minutes is None:
        return "n/a"
    return f"{decision.elapsed_minutes:.1f}"


class LinkEditEnforcer:
    """Carries out a :class:`Decision` for one :class:`EditEvent`."""

    def __init__(
        self,
        gateway: ModerationGateway,
        recorder: ViolationRecorder,
        scheduler: NoticeCleanupScheduler,
        settings: LinkEditSettings,
    ) -> None:
        self.gateway = gateway
        self.recorder = recorder
        self.scheduler = scheduler
        self.settings = settings

    async def execute(self, decision: Decision, event: EditEvent) -> EnforcementOutcome:
        outcome = EnforcementOutcome()
        kind = decision.decision

        if kind is DecisionType.EXEMPT:
            logger.info(
                "[LINK EDIT] %s (%s) is exempt, edit of message %s allowed",
                event.actor.display_name,
                event.actor.user_id,
                event.message_id,
            )
            return outcome

        if not decision.requires_record:
            logger.debug("[LINK EDIT] Message %s edited without link changes", event.message_id)
            return outcome

        if kind is DecisionType.ALLOWED_WITHIN_GRACE:
            outcome.record_submitted = self._submit_record(decision, event, ActionTaken.ALLOWED_WITHIN_GRACE_PERIOD)
            logger.info(
                "[LINK EDIT] %s link edit by %s (%s) allowed within grace period (%s min) in guild %s",
                decision.classification.value,
                event.actor.display_name,
                event.actor.user_id,
                _format_elapsed(decision),
                event.guild_id,
            )
            return outcome

        outcome.record_submitted = self._submit_record(decision, event, ActionTaken.MESSAGE_DELETED)
        await self._enforce_violation(decision, event, outcome)
        return outcome

    def _submit_record(self, decision: Decision, event: EditEvent, action_taken: ActionTaken) -> bool:
        try:
            self.recorder.record_in_background(
                event.guild_id,
                event.actor.user_id,
                event.actor.display_name,
                event.channel_id,
                event.message_id,
                decision.classification,
                event.original_content,
                event.edited_content,
                action_taken,
            )
        except Exception as exc:
            logger.error(
                "[LINK EDIT] Could not submit record for message %s by %s (%s) in guild %s, channel %s: %s",
                event.message_id,
                event.actor.display_name,
                event.actor.user_id,
                event.guild_id,
                event.channel_id,
                exc,
            )
            return False
        return True

    async def _enforce_violation(self, decision: Decision, event: EditEvent, outcome: EnforcementOutcome) -> None:
        try:
            await self.gateway.delete_message(event.channel_id, event.message_id)
        except Exception as exc:
            logger.error(
                "[LINK EDIT] Could not delete message %s by %s (%s) in guild %s, channel %s after %s min: %s",
                event.message_id,
                event.actor.display_name,
                event.actor.user_id,
                event.guild_id,
                event.channel_id,
                _format_elapsed(decision),
                exc,
            )
            await self._send_fallback_warning(event, outcome)
            return

        outcome.message_deleted = True
        logger.info(
            "[LINK EDIT] Deleted message %s by %s (%s): %s link edit after %s min",
            event.message_id,
            event.actor.display_name,
            event.actor.user_id,
            decision.classification.value,
            _format_elapsed(decision),
        )

        # The message is already gone; a failed warning is not retried as the fallback.
        try:
            notice = await self.gateway.send_message(event.channel_id, self.settings.render_warning(event.actor.mention))
        except Exception as exc:
            logger.error("[LINK EDIT] Could not send warning in channel %s: %s", event.channel_id, exc)
            return
        outcome.warning_sent = True

        try:
            await self.scheduler.schedule(
                self._notice_key(notice, event),
                self.settings.warning_delete_after_seconds,
                lambda: self.gateway.delete_notice(notice),
            )
        except Exception as exc:
            logger.warning("[LINK EDIT] Could not schedule warning cleanup in channel %s: %s", event.channel_id, exc)
            return
        outcome.cleanup_scheduled = True

    async def _send_fallback_warning(self, event: EditEvent, outcome: EnforcementOutcome) -> None:
        try:
            await self.gateway.send_message(event.channel_id, self.settings.render_fallback_warning(event.actor.mention))
        except Exception as exc:
            logger.error(
                "[LINK EDIT] Fallback warning also failed in channel %s for message %s: %s",
                event.channel_id,
                event.message_id,
                exc,
            )
            return
        outcome.fallback_warning_sent = True

    @staticmethod
    def _notice_key(notice: Any, event: EditEvent) -> Hashable:
        notice_id = getattr(notice, "id", None)
        if notice_id is not None:
            return ("notice", notice_id)
        return ("notice", str(event.channel_id), str(event.message_id))
