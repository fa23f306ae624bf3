"""Key names of the persisted collections."""

USERS_KEY: str = "clinker-users"
PASSWORD_KEY_TEMPLATE: str = "clinker-password-{user_id}"
QUIZZES_KEY: str = "clinker-quizzes"
RESULTS_KEY: str = "clinker-results"
SESSION_USER_KEY: str = "clinker-user"
THEME_KEY: str = "clinker-theme"

DEFAULT_STORAGE_FILENAME: str = "clinker_storage.json"
