"""Styling module for the tutor application."""

from .color_palette import ColorPalette, Theme, status_color
from .reader_preferences import ReaderPreferenceStore, ReaderPreferences

__all__ = ["ColorPalette", "ReaderPreferenceStore", "ReaderPreferences", "Theme", "status_color"]
