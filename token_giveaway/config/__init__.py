"""
Configuration management for the giveaway.

Loads settings from environment variables and an optional .env file and
exposes them as a single GiveawayConfig.
"""

from token_giveaway.config.settings import GiveawayConfig, get_settings  # noqa: F401

__all__ = ["GiveawayConfig", "get_settings"]
