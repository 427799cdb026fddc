"""
Configuration management for Sentinel.

- **app_configuration.py**: File-locked YAML configuration loader for global
  settings. Falls back to defaults on missing or malformed config files.
- **ai_settings.py**: Classification service settings (offline mode, API key,
  endpoint, model, prompts, offline emulation knobs).
- **feed_settings.py**: Feed and dashboard settings (default author, simulated
  stream samples and stagger, trailing sentiment window, topic ranking size).
"""
