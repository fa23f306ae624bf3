import pytest

from clinker_quiz.core.errors import QuizImportError
from clinker_quiz.core.quiz_builder import QuestionDraft
from clinker_quiz.core.quiz_exporter import save_questions_to_file, serialize_questions
from clinker_quiz.core.quiz_importer import load_questions_from_file, parse_questions

SAMPLE = """Q: What is $2 + 2$?
A: 3
B: 4
C: 5
D: 22
CORRECT: B
COMMENT: Basic addition.
TIMELIMIT: 30

---

Q: Which gas leaves the kiln
as calcination proceeds?
A: Oxygen
B: Nitrogen
C: Carbon dioxide
D: Helium
CORRECT: c
"""


class TestParseQuestions:
    def test_parses_all_markers(self):
        questions = parse_questions(SAMPLE)

        assert len(questions) == 2
        first = questions[0]
        assert first.text == "What is $2 + 2$?"
        assert first.options == ["3", "4", "5", "22"]
        assert first.correct_option_index == 1
        assert first.comment == "Basic addition."
        assert first.time_limit_seconds == 30

    def test_multiline_question_and_lowercase_answer(self):
        second = parse_questions(SAMPLE)[1]

        assert second.text == "Which gas leaves the kiln\nas calcination proceeds?"
        assert second.correct_option_index == 2
        assert second.comment == ""
        assert second.time_limit_seconds == 0

    def test_correct_defaults_to_a(self):
        questions = parse_questions("Q: Pick one\nA: a\nB: b\nC: c\nD: d\n")

        assert questions[0].correct_option_index == 0

    def test_blank_lines_separate_blocks(self):
        text = "Q: One\nA: a\nB: b\nC: c\nD: d\n\nQ: Two\nA: a\nB: b\nC: c\nD: d\n"

        assert [question.text for question in parse_questions(text)] == ["One", "Two"]

    @pytest.mark.parametrize(
        "text, message",
        [
            ("Q: Missing D\nA: a\nB: b\nC: c\n", "four options"),
            ("A: a\nB: b\nC: c\nD: d\n", "question text missing"),
            ("Q: Bad\nA: a\nB: b\nC: c\nD: d\nCORRECT: E\n", "CORRECT"),
            ("Q: Bad\nA: a\nB: b\nC: c\nD: d\nTIMELIMIT: soon\n", "TIMELIMIT"),
            ("Q: Bad\nA: a\nB: b\nC: c\nD: d\nTIMELIMIT: 0\n", "positive"),
            ("stray text\nQ: Bad\nA: a\nB: b\nC: c\nD: d\n", "outside"),
        ],
    )
    def test_malformed_blocks(self, text, message):
        with pytest.raises(QuizImportError, match=message):
            parse_questions(text)


class TestFiles:
    def test_missing_file(self, tmp_path):
        with pytest.raises(QuizImportError):
            load_questions_from_file(tmp_path / "missing.txt")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("\n\n", encoding="utf-8")

        with pytest.raises(QuizImportError):
            load_questions_from_file(path)

    def test_exported_file_imports_back(self, tmp_path):
        drafts = parse_questions(SAMPLE)
        path = tmp_path / "out" / "quiz.txt"

        save_questions_to_file(path, drafts)
        reloaded = load_questions_from_file(path)

        assert [(q.text, q.options, q.correct_option_index, q.comment, q.time_limit_seconds) for q in reloaded] == [
            (q.text, q.options, q.correct_option_index, q.comment, q.time_limit_seconds) for q in drafts
        ]

    def test_multi_paragraph_text_survives_export_and_import(self):
        draft = QuestionDraft(
            text="First paragraph.\n\nSecond paragraph with $x^2$.",
            options=["a", "b", "c", "d"],
            correct_option_index=1,
            comment="Note one.\n\nNote two.",
        )

        reloaded = parse_questions(serialize_questions([draft, draft]))

        assert len(reloaded) == 2
        assert reloaded[0].text == "First paragraph.\n\nSecond paragraph with $x^2$."
        assert reloaded[0].options == ["a", "b", "c", "d"]
        assert reloaded[0].correct_option_index == 1
        assert reloaded[1].comment == "Note one.\n\nNote two."

    def test_blank_lines_are_paragraphs_when_separators_are_used(self):
        text = "Q: Intro\n\nBody\nA: a\nB: b\nC: c\nD: d\n---\n"

        (question,) = parse_questions(text)

        assert question.text == "Intro\n\nBody"

    def test_export_writes_correct_marker_and_optional_fields(self):
        text = serialize_questions([QuestionDraft(text="T", options=["a", "b", "c", "d"], correct_option_index=3)])

        assert "CORRECT: D" in text
        assert "COMMENT" not in text
        assert "TIMELIMIT" not in text

    def test_export_refuses_empty_list(self, tmp_path):
        with pytest.raises(ValueError):
            save_questions_to_file(tmp_path / "quiz.txt", [])
