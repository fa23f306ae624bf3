"""Static metadata describing ClinkerQuiz."""

APP_NAME = "ClinkerQuiz"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "ClinkerQuiz is a local quiz platform built with Qt and FastAPI. "
    "Register, author multiple-choice quizzes, share them by link, take them "
    "against the clock and compare results on the leaderboard."
)

HELP_TEXT = (
    "Create a quiz from the dashboard, or import questions from a .txt file "
    "using the import format:\n\n"
    "Q: What is $2 + 2$?\n"
    "A: 3\nB: 4\nC: 5\nD: 22\n"
    "CORRECT: B\nCOMMENT: Basic addition.\nTIMELIMIT: 30\n\n"
    "Share a quiz by copying its link; anyone opening the link can take it "
    "after entering their name and email."
)
