"""Configuration module for semantic-memory."""

from semantic_memory.config.logging import configure_logging, get_logger
from semantic_memory.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_logger", "get_settings"]
