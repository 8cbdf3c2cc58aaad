"""Utilities for rewriting stored quizzes into the canonical stored shape.

Older rows of the ``chapters.quiz`` column use letter-keyed option maps,
letter or answer-text keys and string-encoded JSON. ``migrate_payload`` turns
any accepted shape into::

    {"questions": [{"question": "...", "options": [...], "correct_answer": 0,
                    "explanation": "..."}]}

so that the loose shapes can be rewritten once instead of being carried as
permanent runtime branches.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tutor_app.core.models import Question
from tutor_app.core.quiz_normalizer import load_quiz_from_payload


def question_to_record(question: Question) -> dict[str, Any]:
    record: dict[str, Any] = {
        "question": question.text,
        "options": list(question.options),
        "correct_answer": question.correct_index,
    }
    if question.explanation is not None:
        record["explanation"] = question.explanation
    return record


def serialize_questions(questions: list[Question]) -> dict[str, Any]:
    return {"questions": [question_to_record(question) for question in questions]}


def migrate_payload(payload: Any) -> dict[str, Any]:
    """Normalize a stored payload and return it in the canonical stored shape."""
    return serialize_questions(load_quiz_from_payload(payload))


def save_quiz_to_file(file_path: Path, questions: list[Question]) -> None:
    """Persist the provided questions to disk as canonical JSON."""

    if not questions:
        raise ValueError("Cannot export an empty quiz.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    document = json.dumps(serialize_questions(questions), ensure_ascii=False, indent=2)
    file_path.write_text(document + "\n", encoding="utf-8")
