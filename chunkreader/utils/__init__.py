"""ChunkReader utilities."""

from .settings import ReaderSettings, load_settings, THEME_KEYS

__all__ = ["ReaderSettings", "load_settings", "THEME_KEYS"]
