"""Runtime settings read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os

from dotenv import load_dotenv

from tutor_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT


@dataclass(frozen=True, slots=True)
class AppSettings:
    supabase_url: str
    supabase_anon_key: str
    gemini_api_key: str = ""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @property
    def has_database(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def load_settings(environ: Mapping[str, str] | None = None, dotenv_path: str | None = None) -> AppSettings:
    """Build settings from ``environ`` (defaults to ``os.environ`` after loading ``.env``).

    Raises ValueError when ``TUTOR_PORT`` is not an integer.
    """
    if environ is None:
        load_dotenv(dotenv_path)
        environ = os.environ

    raw_port = environ.get("TUTOR_PORT", "").strip()
    try:
        port = int(raw_port) if raw_port else DEFAULT_PORT
    except ValueError as exc:
        raise ValueError(f"TUTOR_PORT must be an integer, got {raw_port!r}.") from exc

    return AppSettings(
        supabase_url=environ.get("SUPABASE_URL", "").strip(),
        supabase_anon_key=environ.get("SUPABASE_ANON_KEY", "").strip(),
        gemini_api_key=environ.get("GEMINI_API_KEY", "").strip(),
        host=environ.get("TUTOR_HOST", "").strip() or DEFAULT_HOST,
        port=port,
    )
