"""Settings model and loader."""

from .settings import CraftmapSettings, DEFAULTS_PATH, load_settings

__all__ = ["CraftmapSettings", "DEFAULTS_PATH", "load_settings"]
