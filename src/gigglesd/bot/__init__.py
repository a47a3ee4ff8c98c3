"""
Discord-facing layer of GigglesD.

- **cogs/**: Event listeners and slash commands registered on the py-cord bot.
"""
