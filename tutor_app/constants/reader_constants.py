"""Typography constants for the chapter reader and summary pages."""

READER_FONT_SIZES_PX: tuple[int, ...] = (14, 16, 18, 20, 24, 28, 32)
SUMMARY_FONT_SIZES_PX: tuple[int, ...] = (14, 16, 18, 22, 26, 32, 40)
DEFAULT_FONT_SIZE_INDEX: int = 2

NO_CONTENT_MESSAGE: str = "No content available."
CONTENT_FORMAT_ERROR_MESSAGE: str = "Error loading content format."

ENGLISH_LINE_MARKER: str = "**English Line:**"
HINDI_LINE_MARKER: str = "**Hindi Translation:**"

# Browsers whose reader preferences are kept in memory; least recent go first.
READER_PREFERENCE_CACHE_SIZE: int = 1024
