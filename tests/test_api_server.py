from __future__ import annotations

import json
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
import pytest

from tutor_app.core.models import ChapterEntity, ClassEntity
from tutor_app.core.quiz_manager import QuizManager
from tutor_app.core.services.content_repository import ContentFetchError, ContentRepository
from tutor_app.core.services.tutor_chat import TutorChat
from tutor_app.server.api_server import create_api_app

QUIZ_PAYLOAD = json.dumps([
    {"question": "Q1", "options": ["a", "b"], "correct_answer": 1},
    {"question": "Q2", "options": ["c", "d"], "correct_answer": 0},
])


class _IdleTicker:
    def __init__(self, on_tick, interval):
        self.running = False

    def start(self):
        self.running = True

    def cancel(self):
        self.running = False

    def is_running(self):
        return self.running


@pytest.fixture
def repository():
    repo = MagicMock(spec=ContentRepository)
    repo.get_class_by_grade.return_value = ClassEntity(id="k12", name="Class 12", grade=12)
    repo.list_books.return_value = []
    repo.get_quiz_payload.return_value = QUIZ_PAYLOAD
    return repo


@pytest.fixture
def tutor_chat():
    chat = MagicMock(spec=TutorChat)
    chat.is_configured = True
    chat.stream_reply.return_value = iter(["Hello ", "student."])
    return chat


@pytest.fixture
def client(repository, tutor_chat):
    manager = QuizManager(repository, ticker_factory=_IdleTicker)
    return TestClient(create_api_app(manager, repository, tutor_chat))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["tutor_configured"] is True


def test_class_lookup(client, repository):
    assert client.get("/classes/12").json()["name"] == "Class 12"
    assert client.get("/classes/9").status_code == 404
    repository.get_class_by_grade.return_value = None
    assert client.get("/classes/11").status_code == 404


def test_grammar_chapter_list_uses_topic_titles(client, repository):
    repository.list_grammar_chapters.return_value = [
        ChapterEntity(
            id="g1",
            class_id="k12",
            title="Chapter 1",
            chapter_number=1,
            section_type="grammar",
            content={"chapter_info": {"topic": "Narration"}},
        )
    ]
    chapters = client.get("/classes/12/chapters", params={"section": "grammar"}).json()
    assert chapters == [
        {
            "id": "g1",
            "title": "Narration",
            "chapter_number": 1,
            "section_type": "grammar",
            "badge": "prose",
            "book_id": None,
            "book_section": None,
        }
    ]
    repository.list_textbook_chapters.assert_not_called()


def test_chapter_list_falls_back_to_empty_on_fetch_error(client, repository):
    repository.list_textbook_chapters.side_effect = ContentFetchError("offline")
    response = client.get("/classes/12/chapters")
    assert response.status_code == 200
    assert response.json() == []


def test_read_and_summary(client, repository):
    repository.get_chapter.return_value = ChapterEntity(
        id="c1",
        class_id="k12",
        title="The Last Lesson",
        chapter_number=1,
        content={"text": "It was late.", "summary": "Franz is **late**."},
    )
    reading = client.get("/chapters/c1/read").json()
    assert reading["format"] == "text"
    assert reading["title"] == "The Last Lesson"
    summary = client.get("/chapters/c1/summary").json()
    assert "<strong>late</strong>" in summary["summary_html"]


def test_read_of_unreachable_chapter_is_empty(client, repository):
    repository.get_chapter.side_effect = ContentFetchError("offline")
    assert client.get("/chapters/c1/read").json()["format"] == "empty"


def test_quiz_flow(client):
    started = client.post("/chapters/c1/quiz")
    assert started.status_code == 201
    session_id = started.json()["session_id"]
    assert started.json()["phase"] == "active"

    assert client.post(f"/quiz/{session_id}/select", json={"option_index": 1}).json()["answers"] == {"0": 1}
    assert client.post(f"/quiz/{session_id}/select", json={}).status_code == 422
    assert client.post(f"/quiz/{session_id}/jump", json={"index": 1}).json()["current_index"] == 1
    assert client.post(f"/quiz/{session_id}/mark").json()["statuses"][1]["status"] == "review"

    result = client.post(f"/quiz/{session_id}/submit").json()
    assert result["phase"] == "result"
    assert result["result"]["correct_count"] == 1
    assert result["result"]["percentage"] == 50

    solution = client.post(f"/quiz/{session_id}/solutions").json()
    assert solution["question"]["correct_index"] == 1
    assert client.post(f"/quiz/{session_id}/back-to-result").json()["phase"] == "result"
    assert client.post(f"/quiz/{session_id}/restart").json()["answers"] == {}

    assert client.delete(f"/quiz/{session_id}").status_code == 204
    assert client.get(f"/quiz/{session_id}").status_code == 404


def test_quiz_errors(client):
    assert client.post("/quiz/missing/next").status_code == 404
    session_id = client.post("/chapters/c1/quiz").json()["session_id"]
    assert client.post(f"/quiz/{session_id}/explode").status_code == 422


def test_unavailable_quiz(client, repository):
    repository.get_quiz_payload.return_value = None
    started = client.post("/chapters/c9/quiz").json()
    assert started["phase"] == "unavailable"
    assert started["message"]


def test_tutor_chat_streams_text(client, tutor_chat):
    response = client.post(
        "/tutor/chat",
        json={"message": "What is a clause?", "history": [{"role": "user", "text": "hi"}]},
    )
    assert response.status_code == 200
    assert response.text == "Hello student."
    history, message = tutor_chat.stream_reply.call_args.args
    assert message == "What is a clause?"
    assert history[0].text == "hi"
    assert client.post("/tutor/chat", json={"message": "   "}).status_code == 422


def test_reader_preferences_persist_per_reader(client):
    first = client.post("/reader/preferences/zoom-in").json()
    assert first["font_size_px"] == 20
    assert client.get("/reader/preferences").json()["font_size_px"] == 20
    assert client.get("/reader/preferences", params={"page": "summary"}).json()["font_size_px"] == 18
    assert client.post("/reader/preferences/theme/dark").json()["theme"] == "dark"
    assert client.post("/reader/preferences/theme/neon").status_code == 422
    assert client.post("/reader/preferences/shrink").status_code == 422


def test_tutor_greeting(client):
    body = client.get("/tutor").json()
    assert body["configured"] is True
    assert "Raj" in body["greeting"]
