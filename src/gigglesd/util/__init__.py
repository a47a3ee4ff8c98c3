"""
Utility functions and helpers for GigglesD.

- **logger.py**: Centralized logging with colored console output via
  prompt_toolkit and per-session rotating log files.
- **discord_utils.py**: Stateless event filtering and channel selection helpers.
- **format_utils.py**: Text and time formatting helpers.
"""
