"""Quiz-related constants shared across UI, API and core layers."""

OPTION_COUNT: int = 4
OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")
UNANSWERED: int = -1
GUEST_USER_ID: str = "guest"

MIN_PASSWORD_LENGTH: int = 6

TROPHY_THRESHOLD: int = 80
SECOND_PLACE_THRESHOLD: int = 60

TICK_INTERVAL_MS: int = 1000
DEFAULT_QUESTION_TIME_LIMIT_SECONDS: int = 30

DELETED_QUIZ_TITLE: str = "Deleted quiz"
ALL_QUIZZES_TITLE: str = "All quizzes"

# Live sessions untouched for this long are dropped.
SESSION_IDLE_TIMEOUT_SECONDS: int = 30 * 60
