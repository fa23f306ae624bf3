"""Exporting a quiz's questions to the plain-text import format."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from clinker_quiz.constants.quiz_constants import OPTION_LETTERS
from clinker_quiz.core.models import Question
from clinker_quiz.core.quiz_builder import QuestionDraft


def save_questions_to_file(file_path: Path, questions: Sequence[Question | QuestionDraft]) -> None:
    if not questions:
        raise ValueError("Cannot export an empty quiz.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_questions(questions), encoding="utf-8")


def serialize_questions(questions: Sequence[Question | QuestionDraft]) -> str:
    # Every block ends with "---" so blank lines inside markdown survive a re-import.
    return "\n\n".join(f"{_serialize_question(question)}\n\n---" for question in questions) + "\n"


def _serialize_question(question: Question | QuestionDraft) -> str:
    question_lines = question.text.splitlines() or [""]
    lines = [f"Q: {question_lines[0]}", *question_lines[1:]]

    for index, letter in enumerate(OPTION_LETTERS):
        option_text = question.options[index] if index < len(question.options) else ""
        option_lines = option_text.splitlines() or [""]
        lines.append(f"{letter}: {option_lines[0]}")
        lines.extend(option_lines[1:])

    lines.append(f"CORRECT: {OPTION_LETTERS[question.correct_option_index]}")
    if question.comment:
        comment_lines = question.comment.splitlines()
        lines.append(f"COMMENT: {comment_lines[0]}")
        lines.extend(comment_lines[1:])
    if question.time_limit_seconds:
        lines.append(f"TIMELIMIT: {question.time_limit_seconds}")
    return "\n".join(lines)
