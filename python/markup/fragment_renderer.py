"""
HTML fragments for annotation blocks.

One pure function per block kind; render_fragment() dispatches on BlockKind.
The class names used here (quiz-question, quiz-options, quiz-option,
answer-feedback, memory-card*, exercise, self-check, exercise-questions,
dse-important) are what the site's stylesheet and scripts hook into.
"""

from typing import Callable, Dict

from processing.content_converter import ContentConverter
from .blocks import AnnotationBlock, BlockKind, Callout, Exercise, MemoryCard, Payload, Quiz

QUESTION_LABEL = "問題"
CHECK_ANSWER_LABEL = "查看答案"
POINTS_LABEL = "分值"
EXERCISE_TITLE = "學習進度檢查"
EXERCISE_INTRO = "完成本文章學習後，請回答以下問題："
SAVE_PROGRESS_LABEL = "保存進度"
PROGRESS_SAVED_LABEL = "進度已保存"
CALLOUT_TITLE = "考試重點提醒："


def option_label(index: int) -> str:
    """A, B, ... Z, AA, AB, ..."""
    label = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        label = chr(65 + remainder) + label
    return label


def render_quiz(quiz: Quiz, ordinal: int) -> str:
    number = ordinal + 1
    options_html = "".join(
        f'\n        <div class="quiz-option" data-correct="{str(option.is_correct).lower()}">'
        f"{option_label(i)}. {option.text}</div>"
        for i, option in enumerate(quiz.options)
    )

    lines = quiz.explanation.split("\n")
    feedback = f"\n        <strong>{lines[0]}</strong>"
    detail = "<br>".join(lines[1:])
    if detail:
        feedback += f'\n        <p class="feedback-detail">{detail}</p>'
    if quiz.points is not None:
        feedback += f'\n        <p class="feedback-points">{POINTS_LABEL}: {quiz.points}分</p>'

    return (
        f'<div class="quiz-question" data-question-id="q{number}">\n'
        f"    <p><strong>{QUESTION_LABEL}{number}：</strong>{quiz.question}</p>\n"
        f'    <div class="quiz-options">{options_html}\n    </div>\n'
        f'    <div class="answer-feedback">{feedback}\n    </div>\n'
        f'    <button class="btn check-answer-btn">{CHECK_ANSWER_LABEL}</button>\n'
        f"</div>"
    )


def render_memory_card(card: MemoryCard, ordinal: int) -> str:
    footer = f"\n            <p>{card.back.footer}</p>" if card.back.footer else ""
    return (
        f'<div class="memory-card" data-card-id="c{ordinal + 1}">\n'
        f'    <div class="memory-card-inner">\n'
        f'        <div class="memory-card-front">\n'
        f"            <h4>{card.front.title}</h4>\n"
        f"            <p>{card.front.content}</p>\n"
        f"        </div>\n"
        f'        <div class="memory-card-back">\n'
        f"            <h4>{card.back.title}</h4>\n"
        f"            <p>{card.back.content}</p>{footer}\n"
        f"        </div>\n"
        f"    </div>\n"
        f"</div>"
    )


def render_exercise(exercise: Exercise, ordinal: int) -> str:
    questions_html = "".join(
        f"\n        <li>\n"
        f'            <label class="checkbox-label">\n'
        f'                <input type="checkbox" class="exercise-checkbox" data-question="{i}">\n'
        f"                <span>{question}</span>\n"
        f"            </label>\n"
        f"        </li>"
        for i, question in enumerate(exercise.questions)
    )
    return (
        f'<div class="exercise self-check" data-exercise-id="e{ordinal + 1}">\n'
        f"    <h4>{exercise.title or EXERCISE_TITLE}</h4>\n"
        f"    <p>{EXERCISE_INTRO}</p>\n"
        f'    <ul class="exercise-questions">{questions_html}\n    </ul>\n'
        f'    <button class="btn save-progress-btn">{SAVE_PROGRESS_LABEL}</button>\n'
        f'    <div class="progress-saved" hidden>{PROGRESS_SAVED_LABEL}</div>\n'
        f"</div>"
    )


def render_callout(callout: Callout, ordinal: int) -> str:
    body = ContentConverter.markdown_fragment(callout.content)
    return (
        f'<div class="dse-important">\n'
        f"    <h5>{CALLOUT_TITLE}</h5>\n"
        f"{body}\n"
        f"</div>"
    )


RENDERERS: Dict[BlockKind, Callable[..., str]] = {
    BlockKind.QUIZ: render_quiz,
    BlockKind.MEMORY_CARD: render_memory_card,
    BlockKind.EXERCISE: render_exercise,
    BlockKind.CALLOUT: render_callout,
}


def render_fragment(kind: BlockKind, payload: Payload, ordinal: int) -> str:
    """Render one block payload to a self-contained HTML fragment."""
    renderer = RENDERERS.get(kind)
    if renderer is None:
        raise ValueError(f"No renderer for block kind '{kind.value}'")
    return renderer(payload, ordinal)


def render_block(block: AnnotationBlock) -> str:
    return render_fragment(block.kind, block.payload, block.ordinal)
