"""Normalization of stored chapter quizzes into canonical questions.

Accepted payload shapes (the ``quiz`` column of the ``chapters`` table):

    [ {question...}, ... ]
    {"questions": [ {question...}, ... ]}

Either shape may arrive as a JSON string, or as a JSON string whose decoded
value is itself a JSON string.

Accepted question shapes:

    {"question": "...", "options": ["a", "b", "c", "d"], "correct_answer": 1}
    {"question": "...", "options": {"A": "a", "B": "b"}, "correct_answer": "B"}
    {"question": "...", "options": ["a", "b"], "correct_answer": "b"}
    {"question": "...", "options": ["a", "b"], "answer": "b"}     (legacy)

Architecture note:
    Every raw question is first parsed into an explicit options variant
    (``ListOptions`` / ``MapOptions``) and answer-key variant (``IndexKey`` /
    ``LetterKey`` / ``TextKey``); the correct index is then resolved over those
    variants in one place. A question that cannot be resolved is dropped and
    the rest of the quiz survives.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from tutor_app.constants.quiz_constants import MAX_PAYLOAD_DECODE_DEPTH
from tutor_app.core.models import (
    AnswerKeyShape,
    IndexKey,
    LetterKey,
    ListOptions,
    MapOptions,
    OptionsShape,
    Question,
    TextKey,
)

logger = logging.getLogger(__name__)

_MIN_OPTION_COUNT = 2


def decode_payload(payload: Any) -> list[Any]:
    """Unwrap a stored quiz payload into its list of raw questions.

    Up to ``MAX_PAYLOAD_DECODE_DEPTH`` string-encoding layers are removed.
    Anything that still isn't a list (or a mapping holding ``questions``)
    yields an empty list.
    """
    value = payload
    for _ in range(MAX_PAYLOAD_DECODE_DEPTH):
        if not isinstance(value, (str, bytes, bytearray)):
            break
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Quiz payload is not valid JSON; treating it as empty.")
            return []

    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        questions = value.get("questions")
        if isinstance(questions, list):
            return questions
    return []


def parse_options(raw_options: Any) -> OptionsShape | None:
    if isinstance(raw_options, Mapping):
        keys = tuple(sorted(str(key) for key in raw_options))
        lookup = {str(key): value for key, value in raw_options.items()}
        values = tuple(_option_text(lookup[key]) for key in keys)
        return MapOptions(keys=keys, values=values)
    if isinstance(raw_options, Sequence) and not isinstance(raw_options, (str, bytes)):
        return ListOptions(values=tuple(_option_text(value) for value in raw_options))
    return None


def parse_answer_key(raw_answer: Any) -> AnswerKeyShape | None:
    # bool is an int subclass; a true/false answer key is meaningless here.
    if isinstance(raw_answer, bool):
        return None
    if isinstance(raw_answer, int):
        return IndexKey(raw_answer)
    if isinstance(raw_answer, float):
        return IndexKey(int(raw_answer)) if raw_answer.is_integer() else None
    if isinstance(raw_answer, str):
        if len(raw_answer.strip()) == 1 and raw_answer.strip().isalpha():
            return LetterKey(raw_answer.strip())
        return TextKey(raw_answer)
    return None


def resolve_correct_index(options: OptionsShape, answer_key: AnswerKeyShape) -> int | None:
    """Return the in-range option index named by ``answer_key``, else None."""
    option_count = len(options.values)

    if isinstance(answer_key, IndexKey):
        index = answer_key.index
    elif isinstance(options, MapOptions):
        index = _key_position(options.keys, _raw_text(answer_key))
    else:
        raw_text = _raw_text(answer_key)
        index = _text_position(options.values, raw_text)
        if index is None:
            index = _letter_position(raw_text)

    if index is None or not 0 <= index < option_count:
        return None
    return index


def normalize_question(raw: Any) -> Question | None:
    """Convert one raw question into a canonical ``Question`` or None."""
    if isinstance(raw, Question):
        # Hand-built questions get the same checks as stored records.
        raw = {
            "question": raw.text,
            "options": list(raw.options),
            "correct_answer": raw.correct_index,
            "explanation": raw.explanation,
        }
    if not isinstance(raw, Mapping):
        logger.debug("Dropping quiz entry that is not an object: %r", raw)
        return None

    text = raw.get("question")
    if text is None:
        text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        logger.debug("Dropping question without prompt text.")
        return None

    options = parse_options(raw.get("options"))
    if options is None or len(options.values) < _MIN_OPTION_COUNT:
        logger.debug("Dropping question with too few options: %s", text[:40])
        return None

    raw_answer = raw.get("correct_answer")
    if raw_answer is None:
        raw_answer = raw.get("answer")
    answer_key = parse_answer_key(raw_answer)
    if answer_key is None:
        logger.debug("Dropping question without a usable answer key: %s", text[:40])
        return None

    correct_index = resolve_correct_index(options, answer_key)
    if correct_index is None:
        logger.debug("Dropping question whose answer key %r matches no option.", raw_answer)
        return None

    explanation = raw.get("explanation")
    return Question(
        text=text,
        options=options.values,
        correct_index=correct_index,
        explanation=explanation if isinstance(explanation, str) else None,
    )


def normalize_questions(raw_questions: Sequence[Any]) -> list[Question]:
    questions: list[Question] = []
    for raw in raw_questions:
        question = normalize_question(raw)
        if question is not None:
            questions.append(question)
    dropped = len(raw_questions) - len(questions)
    if dropped:
        logger.info("Dropped %d malformed quiz question(s) of %d.", dropped, len(raw_questions))
    return questions


def load_quiz_from_payload(payload: Any) -> list[Question]:
    """Decode a stored quiz payload and return its playable questions."""
    return normalize_questions(decode_payload(payload))


def _option_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _raw_text(answer_key: LetterKey | TextKey) -> str:
    return answer_key.letter if isinstance(answer_key, LetterKey) else answer_key.text


def _key_position(keys: tuple[str, ...], raw_text: str) -> int | None:
    if raw_text in keys:
        return keys.index(raw_text)
    candidate = raw_text.strip().upper()
    if candidate in keys:
        return keys.index(candidate)
    return None


def _text_position(values: tuple[str, ...], raw_text: str) -> int | None:
    for index, value in enumerate(values):
        if value == raw_text:
            return index
    stripped = raw_text.strip()
    for index, value in enumerate(values):
        if value.strip() == stripped:
            return index
    return None


def _letter_position(raw_text: str) -> int | None:
    candidate = raw_text.strip().upper()
    if len(candidate) != 1 or not "A" <= candidate <= "Z":
        return None
    return ord(candidate) - ord("A")
