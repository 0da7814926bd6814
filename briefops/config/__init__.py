"""Configuration module for BriefOps."""
from briefops.config.settings import SearchLimits, Settings, UsageLimits, get_settings

__all__ = ["Settings", "get_settings", "UsageLimits", "SearchLimits"]
