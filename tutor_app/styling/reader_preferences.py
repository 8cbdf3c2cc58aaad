"""Font-size and color-mode state for the reader and summary pages."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from tutor_app.constants.reader_constants import (
    DEFAULT_FONT_SIZE_INDEX,
    READER_FONT_SIZES_PX,
    READER_PREFERENCE_CACHE_SIZE,
    SUMMARY_FONT_SIZES_PX,
)

from .color_palette import Theme, theme_colors


@dataclass(slots=True)
class ReaderPreferences:
    """Zoom step on a fixed font scale plus the selected color mode."""

    font_sizes: tuple[int, ...] = READER_FONT_SIZES_PX
    font_size_index: int = DEFAULT_FONT_SIZE_INDEX
    theme: Theme = Theme.DEFAULT

    def __post_init__(self) -> None:
        if not self.font_sizes:
            raise ValueError("Font scale cannot be empty.")
        self.font_size_index = self._clamp(self.font_size_index)

    @property
    def font_size_px(self) -> int:
        return self.font_sizes[self.font_size_index]

    @property
    def can_zoom_in(self) -> bool:
        return self.font_size_index < len(self.font_sizes) - 1

    @property
    def can_zoom_out(self) -> bool:
        return self.font_size_index > 0

    def zoom_in(self) -> None:
        self.font_size_index = self._clamp(self.font_size_index + 1)

    def zoom_out(self) -> None:
        self.font_size_index = self._clamp(self.font_size_index - 1)

    def set_theme(self, name: str) -> None:
        """Switch color mode; raises ValueError for an unknown theme name."""
        self.theme = Theme(name)

    def to_dict(self) -> dict[str, object]:
        return {
            "font_size_index": self.font_size_index,
            "font_size_px": self.font_size_px,
            "can_zoom_in": self.can_zoom_in,
            "can_zoom_out": self.can_zoom_out,
            "theme": self.theme.value,
            "colors": theme_colors(self.theme),
        }

    def _clamp(self, index: int) -> int:
        return min(max(index, 0), len(self.font_sizes) - 1)


class ReaderPreferenceStore:
    """Preferences per browser and page, capped to the most recent readers.

    The summary page has its own font scale, so each reader id holds one
    ``ReaderPreferences`` per page. Handlers run on a thread pool; every read
    and change happens under one lock.
    """

    def __init__(self, max_readers: int = READER_PREFERENCE_CACHE_SIZE) -> None:
        if max_readers < 1:
            raise ValueError("The store must hold at least one reader.")
        self._lock = Lock()
        self._max_readers = max_readers
        self._by_reader: OrderedDict[str, dict[str, ReaderPreferences]] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_reader)

    def __contains__(self, reader_id: object) -> bool:
        with self._lock:
            return reader_id in self._by_reader

    def apply(
        self,
        reader_id: str,
        page: str,
        change: Callable[[ReaderPreferences], None] | None = None,
    ) -> dict[str, object]:
        """Run ``change`` on a reader's page preferences and return them as a dict.

        Errors raised by ``change`` propagate and leave the preferences as they were.
        """
        with self._lock:
            prefs = self._lookup(reader_id, page)
            if change is not None:
                change(prefs)
            return prefs.to_dict()

    def _lookup(self, reader_id: str, page: str) -> ReaderPreferences:
        pages = self._by_reader.get(reader_id)
        if pages is None:
            pages = self._by_reader[reader_id] = {}
            while len(self._by_reader) > self._max_readers:
                self._by_reader.popitem(last=False)
        else:
            self._by_reader.move_to_end(reader_id)
        if page not in pages:
            font_sizes = SUMMARY_FONT_SIZES_PX if page == "summary" else READER_FONT_SIZES_PX
            pages[page] = ReaderPreferences(font_sizes=font_sizes)
        return pages[page]
