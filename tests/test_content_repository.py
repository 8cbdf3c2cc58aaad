from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from tutor_app.core.content_parser import display_title
from tutor_app.core.services.content_repository import ContentFetchError, ContentRepository


def _repository(rows=None, error=None):
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    response = MagicMock()
    response.json.return_value = rows
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return ContentRepository("https://db.example.co/", "anon-key", session=session), session


def test_headers_and_class_lookup():
    repo, session = _repository([{"id": "k12", "name": "Class 12", "grade": 12}])
    entity = repo.get_class_by_grade(12)
    assert entity is not None and entity.id == "k12"
    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer anon-key"
    url = session.get.call_args.args[0]
    assert url == "https://db.example.co/rest/v1/classes"
    assert session.get.call_args.kwargs["params"]["grade"] == "eq.12"


def test_textbook_chapters_exclude_grammar_and_are_ordered():
    repo, session = _repository([{"id": "c1", "class_id": "k12", "title": "Ch", "chapter_number": 1}])
    chapters = repo.list_textbook_chapters("k12")
    params = session.get.call_args.kwargs["params"]
    assert params["section_type"] == "neq.grammar"
    assert params["order"] == "section_type.desc,chapter_number.asc"
    assert chapters[0].title == "Ch"


def test_chapter_lists_fetch_listing_columns_only():
    repo, session = _repository([{"id": "c1", "class_id": "k12", "title": "Ch", "chapter_number": 1}])
    repo.list_textbook_chapters("k12")
    columns = session.get.call_args.kwargs["params"]["select"].split(",")
    assert "*" not in columns
    assert "quiz" not in columns and "content" not in columns
    assert "chapter_info:content->chapter_info" in columns


def test_grammar_list_keeps_topic_for_display_title():
    repo, session = _repository(
        [
            {"id": "g1", "class_id": "k12", "title": "Grammar 1", "chapter_number": 1,
             "section_type": "grammar", "chapter_info": {"topic": "Tenses"}},
            {"id": "g2", "class_id": "k12", "title": "Grammar 2", "chapter_number": 2,
             "section_type": "grammar", "chapter_info": None},
        ]
    )
    tenses, untitled = repo.list_grammar_chapters("k12")
    assert session.get.call_args.kwargs["params"]["section_type"] == "eq.grammar"
    assert tenses.content == {"chapter_info": {"topic": "Tenses"}}
    assert display_title(tenses) == "Tenses"
    assert untitled.content is None
    assert display_title(untitled) == "Grammar 2"


def test_quiz_payload_selects_title_and_quiz():
    repo, session = _repository([{"title": "Ch", "quiz": "[]"}])
    assert repo.get_quiz_payload("c1") == "[]"
    assert session.get.call_args.kwargs["params"]["select"] == "title,quiz"


def test_missing_rows_map_to_none():
    repo, _ = _repository([])
    assert repo.get_chapter("nope") is None
    assert repo.get_quiz_payload("nope") is None


def test_transport_and_shape_failures_raise_content_fetch_error():
    repo, _ = _repository(error=requests.ConnectionError("down"))
    with pytest.raises(ContentFetchError):
        repo.get_chapter("c1")
    repo, _ = _repository({"message": "not a list"})
    with pytest.raises(ContentFetchError):
        repo.list_books("k12")


def test_url_is_required():
    with pytest.raises(ValueError):
        ContentRepository("", "key", session=MagicMock())
