"""Application entry point for the English tutor web app."""

from __future__ import annotations

import sys

from tutor_app.constants.about import APP_NAME, APP_VERSION
from tutor_app.core.quiz_manager import QuizManager
from tutor_app.core.services.content_repository import ContentRepository
from tutor_app.core.services.tutor_chat import TutorChat
from tutor_app.server.api_server import create_api_app, run_api_server
from tutor_app.utils.logging_config import configure_logging
from tutor_app.utils.settings import load_settings


def main() -> None:
    """Initialize logging, build the service clients once and serve the API."""
    logger = configure_logging()
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)

    settings = load_settings()
    if not settings.has_database:
        logger.error("SUPABASE_URL and SUPABASE_ANON_KEY must be set.")
        sys.exit(1)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; the chat tutor will be unavailable.")

    repository = ContentRepository(settings.supabase_url, settings.supabase_anon_key)
    tutor_chat = TutorChat(settings.gemini_api_key)
    quiz_manager = QuizManager(repository)

    app = create_api_app(quiz_manager, repository, tutor_chat)
    logger.info("Serving on http://%s:%d/", settings.host, settings.port)
    try:
        run_api_server(app, host=settings.host, port=settings.port)
    finally:
        quiz_manager.shutdown()
        repository.close()


if __name__ == "__main__":
    main()
