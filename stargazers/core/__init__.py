"""Core configuration, security and error types."""

from stargazers.core.config import Settings, get_settings
from stargazers.core.errors import StargazersError

__all__ = ["Settings", "StargazersError", "get_settings"]
