"""
Member onboarding and static announcements.

- **welcome.py**: Member welcome flow and the guild setup message.
- **announcements.py**: One-time announcement embeds, deduplicated by title.
"""
