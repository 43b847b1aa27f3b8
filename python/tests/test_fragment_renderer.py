"""
Tests for block HTML fragments.
"""

import unittest

from markup import BlockKind
from markup.blocks import CardFace, Callout, Exercise, MemoryCard, Quiz, QuizOption
from markup.fragment_renderer import (
    option_label,
    render_callout,
    render_exercise,
    render_fragment,
    render_memory_card,
    render_quiz,
)


class TestRenderQuiz(unittest.TestCase):
    """Test quiz markup."""

    def setUp(self):
        self.quiz = Quiz(
            question="「青出於藍」運用了甚麼論證方法？",
            options=(QuizOption("比喻論證", True), QuizOption("舉例論證", False)),
            explanation="答案：A\n以青與藍作比喻\n說明學習的重要",
            points=2,
        )

    def test_structure_class_names(self):
        """Quiz markup should expose the class names the site scripts rely on."""
        html = render_quiz(self.quiz, 0)

        self.assertTrue(html.startswith('<div class="quiz-question" data-question-id="q1">'))
        self.assertIn('<div class="quiz-options">', html)
        self.assertIn('<div class="answer-feedback">', html)
        self.assertIn('<button class="btn check-answer-btn">查看答案</button>', html)

    def test_options_are_lettered_and_flag_correctness(self):
        html = render_quiz(self.quiz, 0)

        self.assertIn('<div class="quiz-option" data-correct="true">A. 比喻論證</div>', html)
        self.assertIn('<div class="quiz-option" data-correct="false">B. 舉例論證</div>', html)

    def test_question_number_follows_ordinal(self):
        html = render_quiz(self.quiz, 2)

        self.assertIn('data-question-id="q3"', html)
        self.assertIn("<strong>問題3：</strong>", html)

    def test_explanation_first_line_is_emphasized(self):
        """The first explanation line is bold; the rest become detail lines."""
        html = render_quiz(self.quiz, 0)

        self.assertIn("<strong>答案：A</strong>", html)
        self.assertIn('<p class="feedback-detail">以青與藍作比喻<br>說明學習的重要</p>', html)
        self.assertIn('<p class="feedback-points">分值: 2分</p>', html)

    def test_single_line_explanation_without_points(self):
        quiz = Quiz(question="Q", options=(QuizOption("a"),), explanation="只有一行")
        html = render_quiz(quiz, 0)

        self.assertIn("<strong>只有一行</strong>", html)
        self.assertNotIn("feedback-detail", html)
        self.assertNotIn("feedback-points", html)

    def test_zero_points_are_shown(self):
        quiz = Quiz.from_payload(
            {"question": "Q", "options": [{"text": "a"}], "explanation": "E", "points": 0}
        )

        self.assertEqual(quiz.points, 0)
        self.assertIn('<p class="feedback-points">分值: 0分</p>', render_quiz(quiz, 0))

    def test_blank_points_are_dropped(self):
        quiz = Quiz.from_payload(
            {"question": "Q", "options": [{"text": "a"}], "explanation": "E", "points": " "}
        )
        self.assertIsNone(quiz.points)


class TestRenderOtherKinds(unittest.TestCase):
    """Test memory card, exercise and callout markup."""

    def test_memory_card_has_two_faces(self):
        card = MemoryCard(
            front=CardFace("比喻論證", "青出於藍"),
            back=CardFace("作用", "說明學習可以改變人", footer="《勸學》"),
        )
        html = render_memory_card(card, 0)

        self.assertIn('<div class="memory-card" data-card-id="c1">', html)
        self.assertIn('<div class="memory-card-inner">', html)
        self.assertIn('<div class="memory-card-front">', html)
        self.assertIn('<div class="memory-card-back">', html)
        self.assertIn("<h4>比喻論證</h4>", html)
        self.assertIn("<p>說明學習可以改變人</p>", html)
        self.assertIn("<p>《勸學》</p>", html)

    def test_exercise_is_a_checklist(self):
        exercise = Exercise(type="self-check", questions=("我能背誦首段", "我能解釋比喻"))
        html = render_exercise(exercise, 0)

        self.assertIn('<div class="exercise self-check" data-exercise-id="e1">', html)
        self.assertIn("<h4>學習進度檢查</h4>", html)
        self.assertIn('<ul class="exercise-questions">', html)
        self.assertIn('class="exercise-checkbox" data-question="0"', html)
        self.assertIn('class="exercise-checkbox" data-question="1"', html)
        self.assertIn("<span>我能解釋比喻</span>", html)
        self.assertIn("save-progress-btn", html)

    def test_exercise_custom_title(self):
        exercise = Exercise(type="self-check", questions=("Q",), title="課後自評")
        self.assertIn("<h4>課後自評</h4>", render_exercise(exercise, 0))

    def test_callout_body_is_markdown(self):
        html = render_callout(Callout("記住**比喻論證**"), 0)

        self.assertTrue(html.startswith('<div class="dse-important">'))
        self.assertIn("<h5>考試重點提醒：</h5>", html)
        self.assertIn("<strong>比喻論證</strong>", html)


class TestRenderFragmentDispatch(unittest.TestCase):
    """Test dispatch over BlockKind."""

    def test_dispatch_matches_direct_renderer(self):
        callout = Callout("重點")
        self.assertEqual(
            render_fragment(BlockKind.CALLOUT, callout, 0), render_callout(callout, 0)
        )

    def test_meta_has_no_renderer(self):
        with self.assertRaises(ValueError):
            render_fragment(BlockKind.META, Callout("x"), 0)

    def test_option_labels(self):
        self.assertEqual(option_label(0), "A")
        self.assertEqual(option_label(25), "Z")
        self.assertEqual(option_label(26), "AA")
        self.assertEqual(option_label(27), "AB")


if __name__ == "__main__":
    unittest.main()
