"""Quiz-related constants shared across the engine and the HTTP layer."""

DEFAULT_POSITIVE_MARK: float = 1.0
DEFAULT_NEGATIVE_MARK: float = 0.0
TICK_INTERVAL_SECONDS: float = 1.0
# Number of string-encoding layers unwrapped from a stored quiz payload.
MAX_PAYLOAD_DECODE_DEPTH: int = 2

NO_QUIZ_AVAILABLE_MESSAGE: str = (
    "This chapter does not have a quiz added yet. Please check back later."
)

# Sessions untouched by the client for this long are dropped with their ticker.
SESSION_IDLE_TIMEOUT_SECONDS: float = 30 * 60.0
