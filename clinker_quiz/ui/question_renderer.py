"""Question rendering utilities for displaying quiz questions."""

from __future__ import annotations

from typing import List

from clinker_quiz.constants.quiz_constants import OPTION_LETTERS
from clinker_quiz.core.markdown_math_renderer import renderer


def render_question_with_options(
    question_text: str,
    options: List[str],
    font_size: int = 14,
    text_color: str = "#111827",
) -> str:
    """Render a quiz question with its options as HTML.

    Args:
        question_text: The question text (supports Markdown and LaTeX)
        options: List of 4 option strings
        font_size: Font size in points for the question text (default 14)
        text_color: CSS color for the body text, following the active theme

    Returns:
        HTML string ready for display in QWebEngineView
    """
    markdown_lines = [question_text.strip() or "(No question text)", ""]
    for letter, option in zip(OPTION_LETTERS, options):
        markdown_lines.append(f"**{letter}.** {option or '(empty)'}")
    markdown = "\n\n".join(markdown_lines)
    return renderer.render_full_document(markdown, font_size=font_size, text_color=text_color)


def render_review(review: list[dict], font_size: int = 12, text_color: str = "#111827") -> str:
    """Post-quiz breakdown: every question with the chosen and correct options."""
    if not review:
        return renderer.render_full_document(
            "_Correct answers are not shown for this quiz._",
            font_size=font_size,
            text_color=text_color,
        )

    blocks: list[str] = []
    for item in review:
        lines = [f"**{item['number']}.** {item['text'].strip()}", ""]
        for index, (letter, option) in enumerate(zip(OPTION_LETTERS, item["options"])):
            marker = ""
            if index == item["correct_option_index"]:
                marker = " ✓"
            elif index == item["selected_option_index"]:
                marker = " ✗"
            lines.append(f"- {letter}. {option}{marker}")
        if item.get("comment"):
            lines.extend(["", f"> {item['comment']}"])
        blocks.append("\n".join(lines))
    return renderer.render_full_document("\n\n---\n\n".join(blocks), font_size=font_size, text_color=text_color)
