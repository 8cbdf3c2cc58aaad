from __future__ import annotations

import pytest

from tutor_app.constants.reader_constants import READER_FONT_SIZES_PX
from tutor_app.styling import ReaderPreferences, ReaderPreferenceStore, Theme


def test_font_size_clamps_to_the_scale():
    prefs = ReaderPreferences()
    assert prefs.font_size_px == 18
    for _ in range(10):
        prefs.zoom_in()
    assert prefs.font_size_px == READER_FONT_SIZES_PX[-1]
    assert not prefs.can_zoom_in
    for _ in range(10):
        prefs.zoom_out()
    assert prefs.font_size_px == READER_FONT_SIZES_PX[0]
    assert not prefs.can_zoom_out


def test_theme_switching():
    prefs = ReaderPreferences()
    prefs.set_theme("sepia")
    assert prefs.theme is Theme.SEPIA
    assert prefs.to_dict()["colors"]["page_background"] == "#F4ECD8"
    with pytest.raises(ValueError):
        prefs.set_theme("neon")


def test_initial_index_is_clamped():
    assert ReaderPreferences(font_size_index=42).font_size_px == READER_FONT_SIZES_PX[-1]


def test_store_keeps_separate_pages_per_reader():
    store = ReaderPreferenceStore()
    assert store.apply("r1", "read", ReaderPreferences.zoom_in)["font_size_px"] == 20
    assert store.apply("r1", "summary")["font_size_px"] == 18
    assert store.apply("r2", "read")["font_size_px"] == 18
    assert len(store) == 2


def test_store_drops_least_recently_used_reader():
    store = ReaderPreferenceStore(max_readers=2)
    store.apply("r1", "read", ReaderPreferences.zoom_in)
    store.apply("r2", "read")
    store.apply("r1", "read")
    store.apply("r3", "read")
    assert len(store) == 2
    assert "r1" in store
    assert "r2" not in store
    assert "r3" in store
    assert store.apply("r1", "read")["font_size_px"] == 20


def test_failed_change_propagates_and_keeps_state():
    store = ReaderPreferenceStore()
    with pytest.raises(ValueError):
        store.apply("r1", "read", lambda prefs: prefs.set_theme("neon"))
    assert store.apply("r1", "read")["theme"] == "default"
