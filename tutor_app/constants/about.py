"""Static metadata describing the English tutor web app."""

APP_NAME = "English Rajdhani Tutor"
APP_VERSION = "0.2"
APP_ABOUT_TEXT = (
    "Textbook reader, chapter summaries, chapter quizzes and an AI chat tutor "
    "for the Class 11 and Class 12 English curriculum."
)

SUPPORTED_GRADES: tuple[int, ...] = (11, 12)
