"""Importing question lists from a human-friendly text file.

File format (repeat blocks separated by '---' lines; files without any
'---' may separate blocks with blank lines instead):

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question, blank lines included.
    A: First option text
    B: Second option text
    C: Third option text
    D: Fourth option text
    CORRECT: A|B|C|D   (optional, defaults to A)
    COMMENT: shown after answering (optional)
    TIMELIMIT: seconds (optional, omit for no per-question timer)

Imported questions land in the creator form as drafts; validation happens
when the quiz is saved.
"""

from __future__ import annotations

from pathlib import Path

from clinker_quiz.constants.quiz_constants import OPTION_LETTERS
from clinker_quiz.core.errors import QuizImportError
from clinker_quiz.core.quiz_builder import QuestionDraft


def load_questions_from_file(file_path: Path) -> list[QuestionDraft]:
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QuizImportError(f"Unable to read {file_path}: {exc}") from exc
    questions = parse_questions(text)
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return questions


def parse_questions(text: str) -> list[QuestionDraft]:
    lines = text.splitlines()
    # Blank lines are paragraph breaks once the file uses explicit separators.
    blank_separates = not any(line.strip() == "---" for line in lines)

    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in lines:
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped or not blank_separates:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    return [_parse_block(block, position) for position, block in enumerate(blocks, start=1) if block]


def _parse_block(block: str, position: int) -> QuestionDraft:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter = OPTION_LETTERS[0]
    comment_lines: list[str] = []
    time_limit_seconds = 0
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            if current_section == "Q":
                question_lines.append("")
            elif current_section == "COMMENT":
                comment_lines.append("")
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            if correct_letter not in OPTION_LETTERS:
                raise QuizImportError(f"Question {position}: CORRECT must be one of A, B, C, or D.")
            current_section = None
            continue

        if upper.startswith("COMMENT:"):
            comment_lines = [line.split(":", 1)[1].strip()]
            current_section = "COMMENT"
            continue

        if upper.startswith("TIMELIMIT:"):
            time_limit_seconds = _parse_time_limit(line.split(":", 1)[1].strip(), position)
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section == "COMMENT":
            comment_lines.append(line)
        elif current_section in OPTION_LETTERS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Question {position}: text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError(f"Question {position}: question text missing (Q: ...).")
    if len(options) != len(OPTION_LETTERS):
        raise QuizImportError(f"Question {position}: define exactly four options (A-D).")

    return QuestionDraft(
        text=question_text,
        options=[options[letter].strip() for letter in OPTION_LETTERS],
        correct_option_index=OPTION_LETTERS.index(correct_letter),
        comment="\n".join(comment_lines).strip(),
        time_limit_seconds=time_limit_seconds,
    )


def _parse_time_limit(raw_value: str, position: int) -> int:
    if not raw_value:
        raise QuizImportError(f"Question {position}: TIMELIMIT must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise QuizImportError(f"Question {position}: TIMELIMIT must be an integer number of seconds.") from exc
    if parsed_value <= 0:
        raise QuizImportError(f"Question {position}: TIMELIMIT must be a positive integer.")
    return parsed_value
