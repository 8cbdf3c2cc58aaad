"""Domain models for the tutor application."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class Question:
    """Canonical multiple-choice question produced by the normalizer."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str | None = None


# --- Raw question shapes -------------------------------------------------
# Stored quiz JSON expresses options and answer keys in several ways. They are
# parsed into these variants first, and the answer is resolved over them.


@dataclass(frozen=True, slots=True)
class ListOptions:
    """Options stored as an ordered list of strings."""

    values: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MapOptions:
    """Options stored as a letter-keyed mapping, already sorted by key."""

    keys: tuple[str, ...]
    values: tuple[str, ...]


OptionsShape = ListOptions | MapOptions


@dataclass(frozen=True, slots=True)
class IndexKey:
    """Answer key given as a zero-based option index."""

    index: int


@dataclass(frozen=True, slots=True)
class LetterKey:
    """Answer key given as a single option letter ("A", "B", ...)."""

    letter: str


@dataclass(frozen=True, slots=True)
class TextKey:
    """Answer key given as free text, usually the literal option text."""

    text: str


AnswerKeyShape = IndexKey | LetterKey | TextKey


# --- Hosted database rows ------------------------------------------------


class SectionType(str, Enum):
    TEXTBOOK = "textbook"
    GRAMMAR = "grammar"


@dataclass(slots=True)
class ClassEntity:
    id: str
    name: str
    grade: int


@dataclass(slots=True)
class BookEntity:
    id: str
    class_id: str
    name: str
    book_order: int = 0
    has_sections: bool = False


@dataclass(slots=True)
class ChapterEntity:
    """Chapter row. ``content`` and ``quiz`` are untrusted JSON (or JSON strings)."""

    id: str
    class_id: str
    title: str
    chapter_number: int
    section_type: str = SectionType.TEXTBOOK.value
    book_id: str | None = None
    book_section: str | None = None
    content: Any = None
    quiz: Any = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ChapterEntity":
        return cls(
            id=str(row.get("id", "")),
            class_id=str(row.get("class_id", "")),
            title=str(row.get("title") or ""),
            chapter_number=int(row.get("chapter_number") or 0),
            section_type=str(row.get("section_type") or SectionType.TEXTBOOK.value),
            book_id=row.get("book_id"),
            book_section=row.get("book_section"),
            content=row.get("content"),
            quiz=row.get("quiz"),
        )


# --- Chat ----------------------------------------------------------------


class MessageRole(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(slots=True)
class ChatMessage:
    """One turn of the tutor conversation."""

    role: MessageRole
    text: str
    is_error: bool = False


# --- Chapter reading / summary models ------------------------------------


@dataclass(slots=True)
class BilingualLine:
    english: str
    hindi: str | None = None


@dataclass(slots=True)
class ReadingBlock:
    """A paragraph or titled section of bilingual lines."""

    lines: list[BilingualLine]
    heading: str | None = None
    paragraph_number: int | None = None


@dataclass(slots=True)
class GlossaryEntry:
    word: str
    meaning: str
    hindi_meaning: str | None = None


@dataclass(slots=True)
class ChapterReading:
    """Display-ready reading model for one chapter."""

    format: str
    title: str | None = None
    author: str | None = None
    source: str | None = None
    introduction: str | None = None
    blocks: list[ReadingBlock] = field(default_factory=list)
    paragraphs: list[str] = field(default_factory=list)
    glossary: list[GlossaryEntry] = field(default_factory=list)
    error: str | None = None


@dataclass(slots=True)
class SummarySection:
    heading_en: str | None = None
    heading_hi: str | None = None
    content_en: str | None = None
    content_hi: str | None = None


@dataclass(slots=True)
class ChapterSummary:
    """Display-ready summary model for one chapter."""

    title: str | None = None
    author: str | None = None
    summary: str | None = None
    paragraphs: list[str] = field(default_factory=list)
    sections: list[SummarySection] = field(default_factory=list)
    key_points: list[str] = field(default_factory=list)
    key_highlights: dict[str, str] = field(default_factory=dict)
    important_terms: dict[str, str] = field(default_factory=dict)
    error: str | None = None
