"""
Decides which members are exempt from the link-edit rule.

Members holding any moderator-level permission may edit links freely. The
exempt set is defined once, in ``EXEMPT_PERMISSIONS``, and checked as a set
intersection against the permissions a member was granted.
"""

from typing import AbstractSet, FrozenSet, Optional, Union

import discord

from gigglesd.datatypes.link_edit_datatypes import ModerationActor

EXEMPT_PERMISSIONS: FrozenSet[str] = frozenset({
    "administrator",
    "manage_messages",
    "manage_channels",
    "manage_guild",
    "ban_members",
    "kick_members",
    "moderate_members",
})


def granted_permissions(member: Union[discord.Member, discord.User, None]) -> FrozenSet[str]:
    """Return the names of the guild permissions ``member`` holds.

    Users that are not guild members (or carry no permission data) are
    granted nothing.
    """
    permissions = getattr(member, "guild_permissions", None)
    if permissions is None:
        return frozenset()
    return frozenset(name for name, value in permissions if value)


def has_exempt_permission(permissions: Optional[AbstractSet[str]]) -> bool:
    return bool(permissions) and not EXEMPT_PERMISSIONS.isdisjoint(permissions)


def is_exempt(actor: Optional[ModerationActor]) -> bool:
    """Return True if the actor holds any permission from ``EXEMPT_PERMISSIONS``."""
    if actor is None:
        return False
    return has_exempt_permission(actor.permissions)
