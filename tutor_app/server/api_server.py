"""FastAPI server that exposes the reader, quiz and tutor endpoints."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import asynccontextmanager
from dataclasses import asdict
import logging
from typing import Any, Literal
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
import uvicorn

from tutor_app.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION, SUPPORTED_GRADES
from tutor_app.constants.chat_constants import CHAT_GREETING
from tutor_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from tutor_app.core.content_parser import display_title, parse_reading, parse_summary, section_badge
from tutor_app.core.markdown_renderer import renderer
from tutor_app.core.models import ChapterEntity, ChatMessage, MessageRole, SectionType
from tutor_app.core.quiz_manager import QuizManager
from tutor_app.core.services.content_repository import ContentFetchError, ContentRepository
from tutor_app.core.services.tutor_chat import TutorChat
from tutor_app.styling import ReaderPreferences, ReaderPreferenceStore

logger = logging.getLogger(__name__)

_READER_COOKIE = "tutor_reader_id"
_READER_COOKIE_MAX_AGE = 60 * 60 * 24 * 30


class SelectPayload(BaseModel):
    """Payload schema for choosing an option on the current question."""

    option_index: int


class JumpPayload(BaseModel):
    """Payload schema for jumping to a question from the palette."""

    index: int


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str
    is_error: bool = False


class ChatPayload(BaseModel):
    """Payload schema for one tutor chat request."""

    message: str = Field(min_length=1)
    history: list[ChatTurn] = Field(default_factory=list)


def _get_dependency(value: Any):
    def dependency() -> Any:
        return value

    return dependency


def _ensure_reader_id(request: Request, response: Response) -> str:
    reader_id = request.cookies.get(_READER_COOKIE)
    if reader_id:
        return reader_id
    reader_id = uuid4().hex
    response.set_cookie(
        key=_READER_COOKIE,
        value=reader_id,
        max_age=_READER_COOKIE_MAX_AGE,
        samesite="lax",
        httponly=True,
    )
    return reader_id


def _chapter_listing(chapter: ChapterEntity) -> dict[str, object]:
    return {
        "id": chapter.id,
        "title": display_title(chapter),
        "chapter_number": chapter.chapter_number,
        "section_type": chapter.section_type,
        "badge": section_badge(chapter.section_type),
        "book_id": chapter.book_id,
        "book_section": chapter.book_section,
    }


def _fetch_chapter(repository: ContentRepository, chapter_id: str) -> ChapterEntity | None:
    try:
        return repository.get_chapter(chapter_id)
    except ContentFetchError as exc:
        logger.warning("Chapter %s could not be fetched: %s", chapter_id, exc)
        return None


def create_api_app(
    quiz_manager: QuizManager,
    repository: ContentRepository,
    tutor_chat: TutorChat,
) -> FastAPI:
    """Create a FastAPI application wired to the provided services."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        quiz_manager.shutdown()

    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
    quiz_manager_dep = _get_dependency(quiz_manager)
    repository_dep = _get_dependency(repository)
    tutor_chat_dep = _get_dependency(tutor_chat)
    preferences = ReaderPreferenceStore()

    @app.get("/health")
    def health(chat: TutorChat = Depends(tutor_chat_dep)) -> dict[str, object]:
        return {
            "status": "ok",
            "name": APP_NAME,
            "version": APP_VERSION,
            "about": APP_ABOUT_TEXT,
            "grades": list(SUPPORTED_GRADES),
            "tutor_configured": chat.is_configured,
        }

    # --- Catalogue -------------------------------------------------------

    @app.get("/classes/{grade}")
    def get_class(
        grade: int,
        repo: ContentRepository = Depends(repository_dep),
    ) -> dict[str, object]:
        if grade not in SUPPORTED_GRADES:
            raise HTTPException(status_code=404, detail=f"Class {grade} is not offered.")
        try:
            entity = repo.get_class_by_grade(grade)
            books = repo.list_books(entity.id) if entity is not None else []
        except ContentFetchError as exc:
            logger.warning("Class %d could not be fetched: %s", grade, exc)
            entity, books = None, []
        if entity is None:
            raise HTTPException(status_code=404, detail=f"Class {grade} not found.")
        return {**asdict(entity), "books": [asdict(book) for book in books]}

    @app.get("/classes/{grade}/chapters")
    def list_chapters(
        grade: int,
        section: SectionType = SectionType.TEXTBOOK,
        repo: ContentRepository = Depends(repository_dep),
    ) -> list[dict[str, object]]:
        try:
            entity = repo.get_class_by_grade(grade)
            if entity is None:
                return []
            if section is SectionType.GRAMMAR:
                chapters = repo.list_grammar_chapters(entity.id)
            else:
                chapters = repo.list_textbook_chapters(entity.id)
        except ContentFetchError as exc:
            logger.warning("Chapters for class %d could not be fetched: %s", grade, exc)
            return []
        return [_chapter_listing(chapter) for chapter in chapters]

    @app.get("/chapters/{chapter_id}/read")
    def read_chapter(
        chapter_id: str,
        repo: ContentRepository = Depends(repository_dep),
    ) -> dict[str, object]:
        chapter = _fetch_chapter(repo, chapter_id)
        if chapter is None:
            reading = parse_reading(None)
        else:
            reading = parse_reading(chapter.content, title=display_title(chapter))
        result = asdict(reading)
        result["introduction_html"] = (
            renderer.render_fragment(reading.introduction) if reading.introduction else None
        )
        return result

    @app.get("/chapters/{chapter_id}/summary")
    def summarize_chapter(
        chapter_id: str,
        repo: ContentRepository = Depends(repository_dep),
    ) -> dict[str, object]:
        chapter = _fetch_chapter(repo, chapter_id)
        if chapter is None:
            summary = parse_summary(None)
        else:
            summary = parse_summary(chapter.content, title=display_title(chapter))
        result = asdict(summary)
        result["summary_html"] = renderer.render_fragment(summary.summary)
        return result

    # --- Quiz ------------------------------------------------------------

    @app.post("/chapters/{chapter_id}/quiz", status_code=201)
    def start_quiz(
        chapter_id: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        session_id = manager.start_quiz(chapter_id)
        return {"session_id": session_id, **manager.get_snapshot(session_id)}

    @app.get("/quiz/{session_id}")
    def get_quiz(
        session_id: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            return manager.get_snapshot(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Quiz session not found.") from exc

    @app.post("/quiz/{session_id}/select")
    def select_option(
        session_id: str,
        payload: SelectPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            return manager.select_option(session_id, payload.option_index)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Quiz session not found.") from exc

    @app.post("/quiz/{session_id}/jump")
    def jump_to(
        session_id: str,
        payload: JumpPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            return manager.jump_to(session_id, payload.index)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Quiz session not found.") from exc

    @app.post("/quiz/{session_id}/{action}")
    def apply_action(
        session_id: str,
        action: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        handlers = {
            "next": manager.next_question,
            "previous": manager.previous_question,
            "clear": manager.clear_answer,
            "mark": manager.toggle_mark_for_review,
            "pause": manager.pause,
            "resume": manager.resume,
            "submit": manager.submit,
            "solutions": manager.view_solutions,
            "back-to-result": manager.back_to_result,
            "restart": manager.restart,
        }
        try:
            handler = handlers[action]
        except KeyError as exc:
            raise HTTPException(status_code=422, detail=f"Unknown quiz action '{action}'.") from exc
        try:
            return handler(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Quiz session not found.") from exc

    @app.delete("/quiz/{session_id}", status_code=204)
    def discard_quiz(
        session_id: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> Response:
        try:
            manager.discard(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Quiz session not found.") from exc
        return Response(status_code=204)

    # --- Tutor chat ------------------------------------------------------

    @app.get("/tutor")
    def tutor_greeting(chat: TutorChat = Depends(tutor_chat_dep)) -> dict[str, object]:
        return {"greeting": CHAT_GREETING, "configured": chat.is_configured}

    @app.post("/tutor/chat")
    def chat_with_tutor(
        payload: ChatPayload,
        chat: TutorChat = Depends(tutor_chat_dep),
    ) -> StreamingResponse:
        message = payload.message.strip()
        if not message:
            raise HTTPException(status_code=422, detail="Message cannot be empty.")
        history = [
            ChatMessage(role=MessageRole(turn.role), text=turn.text, is_error=turn.is_error)
            for turn in payload.history
        ]
        chunks: Iterator[str] = chat.stream_reply(history, message)
        return StreamingResponse(chunks, media_type="text/plain; charset=utf-8")

    # --- Reader preferences ----------------------------------------------

    @app.get("/reader/preferences")
    def get_preferences(
        request: Request,
        response: Response,
        page: Literal["read", "summary"] = "read",
    ) -> dict[str, object]:
        reader_id = _ensure_reader_id(request, response)
        return preferences.apply(reader_id, page)

    @app.post("/reader/preferences/theme/{name}")
    def set_theme(
        name: str,
        request: Request,
        response: Response,
        page: Literal["read", "summary"] = "read",
    ) -> dict[str, object]:
        reader_id = _ensure_reader_id(request, response)
        try:
            return preferences.apply(reader_id, page, lambda prefs: prefs.set_theme(name))
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=f"Unknown theme '{name}'.") from exc

    @app.post("/reader/preferences/{action}")
    def adjust_preferences(
        action: str,
        request: Request,
        response: Response,
        page: Literal["read", "summary"] = "read",
    ) -> dict[str, object]:
        changes: dict[str, Callable[[ReaderPreferences], None]] = {
            "zoom-in": ReaderPreferences.zoom_in,
            "zoom-out": ReaderPreferences.zoom_out,
        }
        change = changes.get(action)
        if change is None:
            raise HTTPException(status_code=422, detail=f"Unknown preference action '{action}'.")
        reader_id = _ensure_reader_id(request, response)
        return preferences.apply(reader_id, page, change)

    return app


def run_api_server(
    app: FastAPI,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the application in the foreground until interrupted."""
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
