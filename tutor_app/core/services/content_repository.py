"""Service for reading classes, books and chapters from the hosted database.

The database is Supabase; rows are read through its PostgREST endpoint
(``{base_url}/rest/v1/{table}``). The repository is constructed once at
startup and passed to whatever needs it.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from tutor_app.constants.network_constants import DATABASE_TIMEOUT_SECONDS
from tutor_app.core.models import BookEntity, ChapterEntity, ClassEntity, SectionType

logger = logging.getLogger(__name__)

# Chapter lists never need the body or the quiz. Grammar topics keep their
# display name in content.chapter_info, fetched on its own as a JSON path.
_CHAPTER_LISTING_COLUMNS = (
    "id,class_id,book_id,title,chapter_number,section_type,book_section,"
    "chapter_info:content->chapter_info"
)


class ContentFetchError(Exception):
    """Raised when the hosted database cannot be reached or returns bad data."""


class ContentRepository:
    """Read-only access to the ``classes``, ``books`` and ``chapters`` tables."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: requests.Session | None = None,
        timeout: float = DATABASE_TIMEOUT_SECONDS,
    ) -> None:
        if not base_url:
            raise ValueError("A database URL is required.")
        self._rest_url = base_url.rstrip("/") + "/rest/v1"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            }
        )

    def close(self) -> None:
        self._session.close()

    # --- Classes and books -------------------------------------------------

    def get_class_by_grade(self, grade: int) -> ClassEntity | None:
        rows = self._select("classes", {"select": "id,name,grade", "grade": f"eq.{grade}"})
        if not rows:
            return None
        row = rows[0]
        return ClassEntity(
            id=str(row.get("id", "")),
            name=str(row.get("name") or f"Class {grade}"),
            grade=int(row.get("grade") or grade),
        )

    def list_books(self, class_id: str) -> list[BookEntity]:
        rows = self._select(
            "books",
            {"select": "*", "class_id": f"eq.{class_id}", "order": "book_order.asc"},
        )
        return [
            BookEntity(
                id=str(row.get("id", "")),
                class_id=str(row.get("class_id", "")),
                name=str(row.get("name") or ""),
                book_order=int(row.get("book_order") or 0),
                has_sections=bool(row.get("has_sections")),
            )
            for row in rows
        ]

    # --- Chapters ----------------------------------------------------------

    def list_textbook_chapters(self, class_id: str) -> list[ChapterEntity]:
        """Non-grammar chapters, prose and poetry grouped, by chapter number."""
        rows = self._select(
            "chapters",
            {
                "select": _CHAPTER_LISTING_COLUMNS,
                "class_id": f"eq.{class_id}",
                "section_type": f"neq.{SectionType.GRAMMAR.value}",
                "order": "section_type.desc,chapter_number.asc",
            },
        )
        return [_listed_chapter(row) for row in rows]

    def list_grammar_chapters(self, class_id: str) -> list[ChapterEntity]:
        rows = self._select(
            "chapters",
            {
                "select": _CHAPTER_LISTING_COLUMNS,
                "class_id": f"eq.{class_id}",
                "section_type": f"eq.{SectionType.GRAMMAR.value}",
                "order": "chapter_number.asc",
            },
        )
        return [_listed_chapter(row) for row in rows]

    def get_chapter(self, chapter_id: str) -> ChapterEntity | None:
        rows = self._select("chapters", {"select": "*", "id": f"eq.{chapter_id}"})
        return ChapterEntity.from_row(rows[0]) if rows else None

    def get_quiz_payload(self, chapter_id: str) -> Any:
        """Return the raw ``quiz`` column of a chapter, or None if absent."""
        rows = self._select("chapters", {"select": "title,quiz", "id": f"eq.{chapter_id}"})
        if not rows:
            return None
        return rows[0].get("quiz")

    # --- Transport ---------------------------------------------------------

    def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        url = f"{self._rest_url}/{table}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as exc:
            raise ContentFetchError(f"Failed to query '{table}': {exc}") from exc
        except ValueError as exc:
            raise ContentFetchError(f"'{table}' returned a non-JSON response.") from exc

        if not isinstance(rows, list):
            raise ContentFetchError(f"'{table}' returned {type(rows).__name__}, expected a list.")
        logger.debug("Fetched %d row(s) from %s.", len(rows), table)
        return rows


def _listed_chapter(row: dict[str, Any]) -> ChapterEntity:
    chapter = ChapterEntity.from_row(row)
    info = row.get("chapter_info")
    if info is not None:
        chapter.content = {"chapter_info": info}
    return chapter
