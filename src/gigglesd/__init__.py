"""
GigglesD - Onboarding and Link-Edit Moderation Bot

GigglesD greets new members, posts static announcements and protects
channels from links that are slipped into old messages.

Core Components:

- **Link-Edit Moderation**: Classifies message edits that add or change links,
  allows them within a grace period after the original post, and deletes the
  message with a self-removing warning afterwards
- **Onboarding**: Welcome embeds and DMs for new members, a setup message when
  the bot joins a guild
- **Announcements**: Static, deduplicated announcement embeds posted on startup
- **Persistence**: SQLite (aiosqlite) audit log of link edits, member joins and
  per-guild settings

Usage:
    from gigglesd.main import main
    main()
"""
