"""Parsing of chapter ``content`` JSON into reading and summary models.

Chapter rows were uploaded over time in several shapes:

* paragraphs: ``{"chapter_metadata": {...}, "content": [{"paragraph_number": 1,
  "lines": [{"english": ..., "hindi": ...}]}], "glossary": [...]}``
* sections: ``{"sections": [{"title": ..., "lines": [{"englishLine": ...,
  "hindiTranslation": ...}]}]}``; a section may instead carry a ``content``
  string in the marker format below
* text: ``{"text": "..."}``

Any of them may be wrapped in ``{"fullChapter": {...}}`` and may be stored as
a (doubly) string-encoded JSON value.

Marker format used by string sections::

    **English Line:** I went to the market.
    **Hindi Translation:** ...
    ---
    **English Line:** ...
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from tutor_app.constants.quiz_constants import MAX_PAYLOAD_DECODE_DEPTH
from tutor_app.constants.reader_constants import (
    CONTENT_FORMAT_ERROR_MESSAGE,
    ENGLISH_LINE_MARKER,
    HINDI_LINE_MARKER,
)
from tutor_app.core.models import (
    BilingualLine,
    ChapterEntity,
    ChapterReading,
    ChapterSummary,
    GlossaryEntry,
    ReadingBlock,
    SummarySection,
)

logger = logging.getLogger(__name__)

_BLOCK_SEPARATOR = re.compile(r"\n\s*---\s*\n")


class ContentFormatError(ValueError):
    """Raised when chapter content cannot be decoded into a JSON object."""


def decode_content(content: Any) -> dict[str, Any] | None:
    """Return the chapter content as a dict, None when absent.

    Raises ``ContentFormatError`` when the value is present but unusable.
    """
    if content is None or content == "":
        return None
    value = content
    for _ in range(MAX_PAYLOAD_DECODE_DEPTH):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise ContentFormatError("Chapter content is not valid JSON.") from exc
    if not isinstance(value, Mapping):
        raise ContentFormatError(f"Chapter content is a {type(value).__name__}, expected an object.")
    return _unwrap_full_chapter(dict(value))


def _unwrap_full_chapter(data: dict[str, Any]) -> dict[str, Any]:
    nested = data.get("fullChapter")
    if not isinstance(nested, Mapping):
        return data
    merged = {**data, **nested}
    if data.get("chapter_metadata") and not merged.get("chapter_metadata"):
        merged["chapter_metadata"] = data["chapter_metadata"]
    return merged


# --- Reading -----------------------------------------------------------------


def parse_reading(content: Any, title: str | None = None) -> ChapterReading:
    try:
        data = decode_content(content)
    except ContentFormatError as exc:
        logger.warning("Failed to parse chapter content: %s", exc)
        return ChapterReading(format="error", title=title, error=CONTENT_FORMAT_ERROR_MESSAGE)
    if data is None:
        return ChapterReading(format="empty", title=title)

    metadata = data.get("chapter_metadata")
    metadata = metadata if isinstance(metadata, Mapping) else {}
    reading = ChapterReading(
        format="empty",
        title=_text(metadata.get("title")) or title,
        author=_text(metadata.get("author")) or _text(data.get("author")),
        source=_text(metadata.get("source")),
        introduction=_text(data.get("introduction")),
        glossary=parse_glossary(data),
    )

    body = data.get("content")
    sections = data.get("sections")
    text = data.get("text")
    if isinstance(body, list):
        reading.format = "paragraphs"
        reading.blocks = [block for block in (_paragraph_block(item) for item in body) if block]
    elif isinstance(sections, list) and sections:
        reading.format = "sections"
        reading.blocks = [block for block in (_section_block(item) for item in sections) if block]
    elif isinstance(text, str) and text.strip():
        reading.format = "text"
        reading.paragraphs = split_paragraphs(text)
    return reading


def _paragraph_block(item: Any) -> ReadingBlock | None:
    if not isinstance(item, Mapping):
        return None
    raw_lines = item.get("lines")
    if isinstance(raw_lines, list):
        lines = [line for line in (_bilingual_line(raw) for raw in raw_lines) if line]
        if not lines:
            return None
        number = item.get("paragraph_number")
        return ReadingBlock(lines=lines, paragraph_number=number if isinstance(number, int) else None)

    # Grammar topics store titled sections with explanatory text instead of lines.
    heading = _text(item.get("title"))
    notes = [_text(item.get(key)) for key in ("description", "note")]
    lines = [BilingualLine(english=note) for note in notes if note]
    if heading or lines:
        return ReadingBlock(lines=lines, heading=heading)
    return None


def _section_block(item: Any) -> ReadingBlock | None:
    if not isinstance(item, Mapping):
        return None
    raw_lines = item.get("lines")
    if isinstance(raw_lines, list):
        lines = [line for line in (_bilingual_line(raw) for raw in raw_lines) if line]
    elif isinstance(item.get("content"), str):
        lines = parse_marked_lines(item["content"])
    else:
        lines = []
    if not lines:
        return None
    return ReadingBlock(lines=lines, heading=_text(item.get("title")))


def _bilingual_line(raw: Any) -> BilingualLine | None:
    if not isinstance(raw, Mapping):
        return None
    english = _text(raw.get("english")) or _text(raw.get("englishLine"))
    hindi = _text(raw.get("hindi")) or _text(raw.get("hindiTranslation"))
    if not english and not hindi:
        return None
    return BilingualLine(english=english or "", hindi=hindi)


def parse_marked_lines(content: str) -> list[BilingualLine]:
    """Parse ``**English Line:**`` / ``**Hindi Translation:**`` blocks."""
    if not content:
        return []
    text = content.replace("\r\n", "\n")
    lines: list[BilingualLine] = []
    for part in _BLOCK_SEPARATOR.split(text):
        english_at = part.find(ENGLISH_LINE_MARKER)
        if english_at == -1:
            continue
        hindi_at = part.find(HINDI_LINE_MARKER)
        start = english_at + len(ENGLISH_LINE_MARKER)
        if hindi_at != -1:
            english = part[start:hindi_at].strip()
            hindi = part[hindi_at + len(HINDI_LINE_MARKER):].strip()
        else:
            english = part[start:].strip()
            hindi = ""
        lines.append(BilingualLine(english=english, hindi=hindi or None))
    return lines


def parse_glossary(data: Mapping[str, Any]) -> list[GlossaryEntry]:
    entries: list[GlossaryEntry] = []
    glossary = data.get("glossary")
    if isinstance(glossary, list):
        for item in glossary:
            if isinstance(item, Mapping) and _text(item.get("word")):
                entries.append(
                    GlossaryEntry(
                        word=_text(item["word"]) or "",
                        meaning=_text(item.get("meaning")) or "",
                        hindi_meaning=_text(item.get("hindi_meaning")),
                    )
                )
    vocabulary = data.get("vocabulary")
    if isinstance(vocabulary, list):
        for item in vocabulary:
            if isinstance(item, Mapping) and _text(item.get("term")):
                entries.append(
                    GlossaryEntry(
                        word=_text(item["term"]) or "",
                        meaning=_text(item.get("definition")) or _text(item.get("englishMeaning")) or "",
                        hindi_meaning=_text(item.get("hindiMeaning")),
                    )
                )
    return entries


# --- Summary -----------------------------------------------------------------


def parse_summary(content: Any, title: str | None = None) -> ChapterSummary:
    try:
        data = decode_content(content)
    except ContentFormatError as exc:
        logger.warning("Failed to parse chapter summary: %s", exc)
        return ChapterSummary(title=title, error=CONTENT_FORMAT_ERROR_MESSAGE)
    if data is None:
        return ChapterSummary(title=title)

    key_points = data.get("keyPoints")
    result = ChapterSummary(
        title=title,
        author=_text(data.get("author")),
        summary=_text(data.get("summary")),
        key_points=[p for p in key_points if isinstance(p, str)] if isinstance(key_points, list) else [],
        important_terms=_important_terms(data.get("importantTerms")),
    )
    if not result.summary and isinstance(data.get("text"), str):
        result.paragraphs = split_paragraphs(data["text"])

    block = data.get("chapter_summary")
    if isinstance(block, Mapping):
        result.title = _text(block.get("title")) or result.title
        result.author = _text(block.get("author")) or result.author
        sections = block.get("sections")
        for section in sections if isinstance(sections, list) else []:
            if isinstance(section, Mapping):
                result.sections.append(
                    SummarySection(
                        heading_en=_text(section.get("heading_en")),
                        heading_hi=_text(section.get("heading_hi")),
                        content_en=_text(section.get("content_en")),
                        content_hi=_text(section.get("content_hi")),
                    )
                )
        highlights = block.get("key_highlights")
        if isinstance(highlights, Mapping):
            result.key_highlights = {str(k): str(v) for k, v in highlights.items() if v is not None}
    return result


def _important_terms(raw: Any) -> dict[str, str]:
    if isinstance(raw, Mapping):
        return {str(term): str(meaning) for term, meaning in raw.items() if meaning is not None}
    terms: dict[str, str] = {}
    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, Mapping):
                continue
            term = _text(item.get("term")) or _text(item.get("word"))
            meaning = _text(item.get("definition")) or _text(item.get("meaning"))
            if term:
                terms[term] = meaning or ""
    return terms


# --- Chapter lists -----------------------------------------------------------


def display_title(chapter: ChapterEntity) -> str:
    """Grammar topics keep their descriptive name in ``chapter_info.topic``."""
    try:
        data = decode_content(chapter.content)
    except ContentFormatError:
        return chapter.title
    if data:
        info = data.get("chapter_info")
        if isinstance(info, Mapping) and _text(info.get("topic")):
            return _text(info["topic"]) or chapter.title
    return chapter.title


def section_badge(section: str | None) -> str:
    kind = (section or "").lower()
    if "poetry" in kind or "poem" in kind:
        return "poetry"
    return "prose"


def split_paragraphs(text: str) -> list[str]:
    return [para.strip() for para in text.split("\n") if para.strip()]


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None
