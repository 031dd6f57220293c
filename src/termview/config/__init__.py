"""Configuration management for termview.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for the bot token, allowed
roles and command separator.
"""

from termview.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
