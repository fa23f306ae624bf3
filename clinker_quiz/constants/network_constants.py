"""Network configuration constants for the quiz platform."""

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000
SHARE_QUERY_PARAMETER: str = "quiz"
