from __future__ import annotations

import json

import pytest

from tutor_app.constants.reader_constants import CONTENT_FORMAT_ERROR_MESSAGE
from tutor_app.core.content_parser import (
    ContentFormatError,
    decode_content,
    display_title,
    parse_marked_lines,
    parse_reading,
    parse_summary,
    section_badge,
)
from tutor_app.core.models import BilingualLine, ChapterEntity


PARAGRAPH_CONTENT = {
    "chapter_metadata": {"title": "The Portrait of a Lady", "author": "Khushwant Singh"},
    "content": [
        {
            "paragraph_number": 1,
            "lines": [
                {"english": "My grandmother was an old woman.", "hindi": "मेरी दादी एक बूढ़ी औरत थीं।"},
                {"english": "", "hindi": ""},
            ],
        },
        {"paragraph_number": 2, "lines": []},
    ],
    "glossary": [{"word": "wrinkled", "meaning": "creased", "hindi_meaning": "झुर्रीदार"}],
}


def test_paragraph_format_is_detected():
    reading = parse_reading(PARAGRAPH_CONTENT, title="Fallback")
    assert reading.format == "paragraphs"
    assert reading.title == "The Portrait of a Lady"
    assert reading.author == "Khushwant Singh"
    assert len(reading.blocks) == 1
    assert reading.blocks[0].paragraph_number == 1
    assert reading.blocks[0].lines == [
        BilingualLine(english="My grandmother was an old woman.", hindi="मेरी दादी एक बूढ़ी औरत थीं।")
    ]
    assert reading.glossary[0].word == "wrinkled"


def test_sections_format_with_marker_strings():
    content = {
        "sections": [
            {"title": "Part 1", "lines": [{"englishLine": "Hello.", "hindiTranslation": "नमस्ते।"}]},
            {
                "title": "Part 2",
                "content": "**English Line:** One.\n**Hindi Translation:** एक।\n---\n**English Line:** Two.",
            },
        ]
    }
    reading = parse_reading(json.dumps(content))
    assert reading.format == "sections"
    assert [block.heading for block in reading.blocks] == ["Part 1", "Part 2"]
    assert reading.blocks[1].lines == [
        BilingualLine(english="One.", hindi="एक।"),
        BilingualLine(english="Two.", hindi=None),
    ]


def test_text_format_splits_paragraphs():
    reading = parse_reading({"text": "First line.\n\nSecond line.\n"})
    assert reading.format == "text"
    assert reading.paragraphs == ["First line.", "Second line."]


def test_full_chapter_wrapper_and_double_encoding_are_unwrapped():
    wrapped = {"chapter_metadata": {"title": "Outer"}, "fullChapter": {"text": "Body"}}
    reading = parse_reading(json.dumps(json.dumps(wrapped)))
    assert reading.format == "text"
    assert reading.title == "Outer"


def test_missing_and_broken_content():
    assert parse_reading(None, title="T").format == "empty"
    broken = parse_reading("{oops", title="T")
    assert broken.format == "error"
    assert broken.error == CONTENT_FORMAT_ERROR_MESSAGE
    with pytest.raises(ContentFormatError):
        decode_content("[1, 2]")


def test_grammar_items_without_lines_become_titled_blocks():
    content = {"content": [{"title": "Tenses", "description": "Time of an action.", "note": "Mind the auxiliary."}]}
    reading = parse_reading(content)
    assert reading.blocks[0].heading == "Tenses"
    assert [line.english for line in reading.blocks[0].lines] == ["Time of an action.", "Mind the auxiliary."]


def test_parse_marked_lines_ignores_blocks_without_marker():
    assert parse_marked_lines("just prose\n---\n**English Line:** Yes.") == [BilingualLine(english="Yes.")]
    assert parse_marked_lines("") == []


def test_summary_sources_are_collected():
    content = {
        "summary": "A **moving** portrait.",
        "keyPoints": ["Grandmother", 3],
        "importantTerms": [{"term": "dignity", "definition": "self-respect"}],
        "chapter_summary": {
            "title": "Summary Title",
            "sections": [{"heading_en": "Intro", "content_en": "Text", "content_hi": "पाठ"}],
            "key_highlights": {"theme": "Love"},
        },
    }
    summary = parse_summary(content, title="Chapter")
    assert summary.title == "Summary Title"
    assert summary.summary == "A **moving** portrait."
    assert summary.key_points == ["Grandmother"]
    assert summary.important_terms == {"dignity": "self-respect"}
    assert summary.sections[0].content_hi == "पाठ"
    assert summary.key_highlights == {"theme": "Love"}


def test_summary_falls_back_to_text_paragraphs():
    summary = parse_summary({"text": "One.\nTwo."}, title="Chapter")
    assert summary.summary is None
    assert summary.paragraphs == ["One.", "Two."]


def test_display_title_prefers_grammar_topic():
    chapter = ChapterEntity(
        id="c1",
        class_id="k",
        title="Chapter 1",
        chapter_number=1,
        section_type="grammar",
        content={"chapter_info": {"topic": "Determiners"}},
    )
    assert display_title(chapter) == "Determiners"
    chapter.content = "not json"
    assert display_title(chapter) == "Chapter 1"


def test_section_badge():
    assert section_badge("poetry") == "poetry"
    assert section_badge("prose") == "prose"
    assert section_badge(None) == "prose"


def test_summary_with_malformed_sections_degrades():
    summary = parse_summary({"chapter_summary": {"title": "T", "sections": 5, "key_highlights": ["x"]}})
    assert summary.title == "T"
    assert summary.sections == []
    assert summary.key_highlights == {}
    assert summary.error is None
