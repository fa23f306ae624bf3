"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "ClinkerQuiz"
PLACEHOLDER_QUESTION: str = "Enter your question text (supports Markdown + LaTeX)."
PLACEHOLDER_DESCRIPTION: str = "Optional description shown before the quiz starts."

NAV_BUTTON_DASHBOARD: str = "Dashboard"
NAV_BUTTON_CREATE: str = "Create Quiz"
NAV_BUTTON_RESULTS: str = "Results"
NAV_BUTTON_OPEN_LINK: str = "Open Quiz Link"
NAV_BUTTON_LIGHT_THEME: str = "Light Mode"
NAV_BUTTON_DARK_THEME: str = "Dark Mode"
NAV_BUTTON_LOGOUT: str = "Log Out"

AUTH_LOGIN_TITLE: str = "Welcome back"
AUTH_REGISTER_TITLE: str = "Create your account"
AUTH_LOGIN_BUTTON: str = "Sign In"
AUTH_REGISTER_BUTTON: str = "Create Account"
AUTH_SWITCH_TO_REGISTER: str = "Need an account? Register"
AUTH_SWITCH_TO_LOGIN: str = "Already registered? Sign in"

CREATOR_ADD_QUESTION: str = "Add Question"
CREATOR_REMOVE_QUESTION: str = "Remove Question"
CREATOR_PREV_QUESTION: str = "Previous"
CREATOR_NEXT_QUESTION: str = "Next"
CREATOR_SAVE_QUIZ: str = "Save Quiz"
CREATOR_IMPORT: str = "Import Questions"
CREATOR_EXPORT: str = "Export Questions"

PLAYER_START_BUTTON: str = "Start Quiz"
PLAYER_NEXT_BUTTON: str = "Next Question"
PLAYER_FINISH_BUTTON: str = "Finish Quiz"
PLAYER_RETAKE_BUTTON: str = "Retake Quiz"
PLAYER_ANSWER_KEY_BUTTON: str = "Download Answer Key"
PLAYER_BACK_BUTTON: str = "Back to Dashboard"

RESULTS_EXPORT_BUTTON: str = "Export Leaderboard"
RESULTS_COLUMNS: tuple[str, ...] = ("Rank", "Name", "Email", "Quiz", "Score", "Percentage", "Time", "Date")

IMPORT_DIALOG_TITLE: str = "Select question file"
IMPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Save questions to file"
EXPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"
REPORT_DIALOG_TITLE: str = "Save printable report"
REPORT_FILE_FILTER: str = "HTML files (*.html);;All files (*.*)"

OPEN_LINK_DIALOG_TITLE: str = "Open quiz link"
OPEN_LINK_PROMPT: str = "Paste a shared quiz link or quiz id:"

# Countdowns turn red below these thresholds.
QUIZ_TIMER_URGENT_SECONDS: int = 60
QUESTION_TIMER_URGENT_SECONDS: int = 10
