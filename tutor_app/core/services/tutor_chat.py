"""Service wrapping the Gemini chat model that plays the English tutor."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import logging

from google import genai
from google.genai import types

from tutor_app.constants.chat_constants import (
    CHAT_HISTORY_LIMIT,
    CHAT_MODEL_NAME,
    CHAT_SYSTEM_INSTRUCTION,
    CONNECTION_TROUBLE_MESSAGE,
    MISSING_API_KEY_MESSAGE,
)
from tutor_app.core.models import ChatMessage, MessageRole

logger = logging.getLogger(__name__)


class TutorChat:
    """Streams tutor replies for a conversation.

    Failures never propagate: a missing key or a failed model call is turned
    into a readable chunk of text so the chat page can show it inline.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = CHAT_MODEL_NAME,
        client: genai.Client | None = None,
    ) -> None:
        self.model_name = model_name
        if client is not None:
            self._client: genai.Client | None = client
        elif api_key:
            self._client = genai.Client(api_key=api_key)
        else:
            self._client = None

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def stream_reply(self, history: Sequence[ChatMessage], message: str) -> Iterator[str]:
        """Yield the reply to ``message`` chunk by chunk.

        ``history`` holds the earlier turns only; the new message is sent
        separately. Only the most recent turns are forwarded to the model.
        """
        if self._client is None:
            yield MISSING_API_KEY_MESSAGE
            return

        try:
            chat = self._client.chats.create(
                model=self.model_name,
                history=build_history(history),
                config=types.GenerateContentConfig(system_instruction=CHAT_SYSTEM_INSTRUCTION),
            )
            for chunk in chat.send_message_stream(message):
                if chunk.text:
                    yield chunk.text
        except Exception:
            logger.exception("Tutor chat request to %s failed.", self.model_name)
            yield CONNECTION_TROUBLE_MESSAGE

    def reply(self, history: Sequence[ChatMessage], message: str) -> str:
        return "".join(self.stream_reply(history, message))


def build_history(history: Sequence[ChatMessage]) -> list[types.Content]:
    recent = [msg for msg in history if msg.text and not msg.is_error][-CHAT_HISTORY_LIMIT:]
    return [
        types.Content(
            role="user" if msg.role is MessageRole.USER else "model",
            parts=[types.Part(text=msg.text)],
        )
        for msg in recent
    ]
