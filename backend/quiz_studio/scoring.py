# Score a submission against a quiz's answer key.
from typing import Dict, Iterable

from quiz_studio.models import NO_ANSWER, Question, QuestionResult, Quiz, QuizResult


# First answer marked correct, or NO_ANSWER when none is.
def correct_answer_id(question: Question) -> int:
    for answer in question.answers:
        if answer.is_correct:
            return answer.id
    return NO_ANSWER


# Walk the quiz's questions, not the submission: unknown question ids are
# ignored and unanswered questions count as wrong. Only the first submission
# for a question is considered.
def score(quiz: Quiz, submitted_answers: Iterable) -> QuizResult:
    selections: Dict[int, int] = {}
    for submitted in submitted_answers:
        selections.setdefault(submitted.question_id, submitted.answer_id)

    details = []
    for question in quiz.questions:
        selected = selections.get(question.id, NO_ANSWER)
        expected = correct_answer_id(question)
        details.append(
            QuestionResult(
                question_id=question.id,
                selected_answer_id=selected,
                correct_answer_id=expected,
                is_correct=selected != NO_ANSWER and selected == expected,
            )
        )

    total_questions = len(quiz.questions)
    correct_answers = sum(1 for detail in details if detail.is_correct)
    return QuizResult(
        quiz_id=quiz.id,
        total_questions=total_questions,
        correct_answers=correct_answers,
        score=(correct_answers / total_questions) * 100 if total_questions else 0.0,
        details=details,
    )
