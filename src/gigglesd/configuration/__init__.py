"""
Configuration for GigglesD.

- **app_configuration.py**: YAML application config (``config/app_config.yml``)
  with typed section helpers and the shared ``app_config`` instance.
- **link_edit_settings.py**: Grace period, warning lifetime and warning templates.
- **onboarding_settings.py**: Welcome and announcement settings.
- **guild_settings.py**: Cached per-guild settings backed by the database.
"""
