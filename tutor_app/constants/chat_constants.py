"""Constants for the AI chat tutor."""

CHAT_MODEL_NAME: str = "gemini-2.5-flash"
CHAT_HISTORY_LIMIT: int = 10
CHAT_SYSTEM_INSTRUCTION: str = (
    "You are 'Raj', a helpful and encouraging English Tutor for Class 11 and 12 "
    "students in India using the 'EnglishRajDanHi' platform. Keep answers concise, "
    "educational, and friendly. Use simple English."
)
CHAT_GREETING: str = (
    "Hello student! I am Raj, your English tutor. Ask me about Class 11 or 12 "
    "English chapters, grammar, or summaries."
)
MISSING_API_KEY_MESSAGE: str = "Error: API Key is missing. Please configure the environment."
CONNECTION_TROUBLE_MESSAGE: str = (
    "\n(I'm having trouble connecting right now. Please try again later.)"
)
