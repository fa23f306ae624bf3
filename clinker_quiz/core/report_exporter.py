"""Printable HTML documents: the quiz answer key and the leaderboard.

Both are static markup meant for the browser's print-to-PDF. User-supplied
text is either escaped or passed through the Markdown renderer, which has raw
HTML disabled.
"""

from __future__ import annotations

import html
from pathlib import Path

from clinker_quiz.constants.about import APP_NAME
from clinker_quiz.constants.quiz_constants import OPTION_LETTERS
from clinker_quiz.core.markdown_math_renderer import MATHJAX_HEAD, renderer
from clinker_quiz.core.models import Quiz
from clinker_quiz.core.services.leaderboard import LeaderboardRow

_RANK_CLASSES = {1: "rank-1", 2: "rank-2", 3: "rank-3"}

_BASE_STYLE = """
      body { font-family: Arial, sans-serif; line-height: 1.6; margin: 0; padding: 20px; color: #111827; }
      .header, .footer { text-align: center; margin: 20px 0; font-weight: bold; color: #3B82F6; }
      h1 { text-align: center; color: #3B82F6; }
      h2, .subtitle { text-align: center; color: #666; }
      @media print { body { -webkit-print-color-adjust: exact; print-color-adjust: exact; } }
"""


def _letter(index: int) -> str:
    return OPTION_LETTERS[index] if index < len(OPTION_LETTERS) else str(index + 1)


def _document(title: str, extra_style: str, body: str, with_math: bool = False) -> str:
    head_scripts = MATHJAX_HEAD if with_math else ""
    return f"""<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{html.escape(title)}</title>
    <style>{_BASE_STYLE}{extra_style}
    </style>
    {head_scripts}
  </head>
  <body>
{body}
  </body>
</html>
"""


def render_answer_key(quiz: Quiz) -> str:
    """Every question with its options, the correct one marked."""
    blocks: list[str] = []
    for number, question in enumerate(quiz.questions, start=1):
        option_lines = []
        for index, option in enumerate(question.options):
            is_correct = index == question.correct_option_index
            css = "option correct" if is_correct else "option"
            mark = " &#10003;" if is_correct else ""
            option_lines.append(
                f"        <div class=\"{css}\">{_letter(index)}) {renderer.render_inline(option)}{mark}</div>"
            )
        comment = ""
        if question.comment:
            comment = f"\n        <div class=\"comment\">Comment: {html.escape(question.comment)}</div>"
        blocks.append(
            "      <div class=\"question\">\n"
            f"        <div class=\"question-title\">Question {number}:</div>\n"
            f"        <div class=\"question-text\">{renderer.render_fragment(question.text)}</div>\n"
            + "\n".join(option_lines)
            + comment
            + "\n      </div>"
        )

    description = ""
    if quiz.description:
        description = f"    <p class=\"subtitle\">{html.escape(quiz.description)}</p>\n"

    body = (
        f"    <div class=\"header\">{html.escape(APP_NAME)}</div>\n"
        f"    <h1>{html.escape(quiz.title)}</h1>\n"
        f"{description}"
        "    <hr>\n"
        + "\n".join(blocks)
        + f"\n    <div class=\"footer\">{html.escape(APP_NAME)}</div>"
    )
    style = """
      .question { margin: 20px 0; border: 1px solid #ddd; padding: 15px; border-radius: 8px; page-break-inside: avoid; }
      .question-title { font-weight: bold; }
      .option { margin: 5px 0; padding: 5px; }
      .correct { background-color: #d4edda; border-radius: 4px; font-weight: bold; }
      .comment { margin-top: 10px; font-style: italic; color: #666; }"""
    return _document(f"{quiz.title} - {APP_NAME}", style, body, with_math=True)


def render_leaderboard(rows: list[LeaderboardRow], heading: str) -> str:
    """Ranked results table with podium colors for the top three."""
    row_lines = []
    for row in rows:
        css = _RANK_CLASSES.get(row.rank, "")
        row_lines.append(
            f"          <tr class=\"{css}\">"
            f"<td>{row.rank}</td>"
            f"<td>{html.escape(row.user_name)}</td>"
            f"<td>{html.escape(row.user_email)}</td>"
            f"<td>{html.escape(row.quiz_title)}</td>"
            f"<td>{row.score}/{row.total_questions}</td>"
            f"<td>{row.percentage}%</td>"
            f"<td>{row.time_spent_label}</td>"
            f"<td>{row.completed_at.strftime('%Y-%m-%d')}</td>"
            "</tr>"
        )
    if not row_lines:
        row_lines.append("          <tr><td colspan=\"8\">No results yet.</td></tr>")

    body = (
        f"    <div class=\"header\">{html.escape(APP_NAME)} - Results</div>\n"
        "    <h1>Leaderboard</h1>\n"
        f"    <h2>{html.escape(heading)}</h2>\n"
        "    <hr>\n"
        "    <table class=\"leaderboard\">\n"
        "      <thead>\n"
        "        <tr><th>Rank</th><th>Name</th><th>Email</th><th>Quiz</th><th>Score</th>"
        "<th>Percentage</th><th>Time</th><th>Date</th></tr>\n"
        "      </thead>\n"
        "      <tbody>\n"
        + "\n".join(row_lines)
        + "\n      </tbody>\n"
        "    </table>\n"
        f"    <div class=\"footer\">{html.escape(APP_NAME)}</div>"
    )
    style = """
      .leaderboard { width: 100%; border-collapse: collapse; margin: 20px 0; }
      .leaderboard th, .leaderboard td { border: 1px solid #ddd; padding: 12px; text-align: center; }
      .leaderboard th { background-color: #3B82F6; color: white; }
      .rank-1 { background-color: #ffd700; }
      .rank-2 { background-color: #c0c0c0; }
      .rank-3 { background-color: #cd7f32; }"""
    return _document(f"Leaderboard - {APP_NAME}", style, body)


def save_document(file_path: Path, document: str) -> Path:
    """Write an exported document to disk and return its resolved path."""
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(document, encoding="utf-8")
    return file_path
