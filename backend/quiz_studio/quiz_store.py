# Quiz records behind a repository interface, with an in-memory implementation.
import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from quiz_studio.errors import NotFound
from quiz_studio.models import (
    Answer,
    PlayAnswer,
    PlayQuestion,
    PlayQuiz,
    Question,
    Quiz,
    utcnow,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "is_published")


# Storage interface for quizzes; the views and the owner check build on find_*.
class QuizRepository(ABC):
    @abstractmethod
    def create(self, data: Mapping[str, Any], author_id: Optional[str] = None) -> Quiz:
        ...

    @abstractmethod
    def find_all(self) -> List[Quiz]:
        ...

    @abstractmethod
    def find_by_id(self, quiz_id: int) -> Optional[Quiz]:
        ...

    @abstractmethod
    def update(self, quiz_id: int, patch: Mapping[str, Any]) -> Quiz:
        ...

    @abstractmethod
    def remove(self, quiz_id: int) -> None:
        ...

    def find_one(self, quiz_id: int) -> Quiz:
        quiz = self.find_by_id(quiz_id)
        if quiz is None:
            raise NotFound(f"quiz with id {quiz_id} not found")
        return quiz

    def find_published(self) -> List[Quiz]:
        return [quiz for quiz in self.find_all() if quiz.is_published]

    def find_by_author(self, author_id: str) -> List[Quiz]:
        return [quiz for quiz in self.find_all() if quiz.author_id == author_id]

    # Raises NotFound for a missing quiz, so callers report 404 before 403.
    def is_owner(self, quiz_id: int, user_id: str) -> bool:
        return self.find_one(quiz_id).author_id == user_id

    def find_one_for_play(self, quiz_id: int) -> PlayQuiz:
        quiz = self.find_one(quiz_id)
        return PlayQuiz(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            is_published=quiz.is_published,
            questions=[
                PlayQuestion(
                    id=question.id,
                    text=question.text,
                    answers=[
                        PlayAnswer(id=answer.id, text=answer.text)
                        for answer in question.answers
                    ],
                )
                for question in quiz.questions
            ],
            created_at=quiz.created_at,
            author_id=quiz.author_id,
        )


# Process-local quiz collection; its three id counters only move forward.
class InMemoryQuizStore(QuizRepository):
    def __init__(self):
        self._quizzes: List[Quiz] = []
        self._quiz_ids = itertools.count(1)
        self._question_ids = itertools.count(1)
        self._answer_ids = itertools.count(1)

    # A supplied id survives only if it already belongs to this quiz (an answer
    # id, to the same question) and appears once; everything else is renumbered.
    def _build_questions(
        self,
        items: Iterable[Mapping[str, Any]],
        existing: Sequence[Question] = (),
    ) -> List[Question]:
        known: Dict[int, Set[int]] = {
            question.id: {answer.id for answer in question.answers}
            for question in existing
        }
        used_questions: Set[int] = set()
        used_answers: Set[int] = set()
        questions = []
        for item in items:
            question_id = item.get("id")
            if question_id not in known or question_id in used_questions:
                question_id = next(self._question_ids)
            used_questions.add(question_id)
            own_answers = known.get(question_id, set())

            answers = []
            for answer in item.get("answers") or []:
                answer_id = answer.get("id")
                if answer_id not in own_answers or answer_id in used_answers:
                    answer_id = next(self._answer_ids)
                used_answers.add(answer_id)
                answers.append(
                    Answer(
                        id=answer_id,
                        text=answer["text"],
                        is_correct=bool(answer.get("is_correct", False)),
                    )
                )
            questions.append(Question(id=question_id, text=item["text"], answers=answers))
        return questions

    def create(self, data: Mapping[str, Any], author_id: Optional[str] = None) -> Quiz:
        quiz = Quiz(
            id=next(self._quiz_ids),
            title=data["title"],
            description=data.get("description"),
            is_published=bool(data.get("is_published") or False),
            questions=self._build_questions(data.get("questions") or []),
            created_at=utcnow(),
            author_id=author_id,
        )
        self._quizzes.append(quiz)
        logger.info("Created quiz %s for author %s", quiz.id, author_id)
        return quiz

    def find_all(self) -> List[Quiz]:
        return list(self._quizzes)

    def find_by_id(self, quiz_id: int) -> Optional[Quiz]:
        return next((quiz for quiz in self._quizzes if quiz.id == quiz_id), None)

    # Only keys present in the patch are applied.
    def update(self, quiz_id: int, patch: Mapping[str, Any]) -> Quiz:
        quiz = self.find_one(quiz_id)
        changes: Dict[str, Any] = {
            key: patch[key] for key in UPDATABLE_FIELDS if key in patch
        }
        if "questions" in patch:
            changes["questions"] = self._build_questions(
                patch["questions"], existing=quiz.questions
            )
        if not changes:
            return quiz

        updated = replace(quiz, **changes)
        self._quizzes = [updated if item.id == quiz_id else item for item in self._quizzes]
        logger.info("Updated quiz %s (%s)", quiz_id, ", ".join(sorted(changes)))
        return updated

    def remove(self, quiz_id: int) -> None:
        existing = self.find_one(quiz_id)
        self._quizzes = [quiz for quiz in self._quizzes if quiz.id != existing.id]
        logger.info("Removed quiz %s", quiz_id)
