"""Network configuration constants for the tutor web service."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
DATABASE_TIMEOUT_SECONDS: float = 10.0
