import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

# Sentinel id for "no answer selected" and "no correct answer marked".
NO_ANSWER = -1


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    id: str
    email: str
    username: str
    password_hash: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Answer:
    id: int
    text: str
    is_correct: bool


@dataclass
class Question:
    id: int
    text: str
    answers: List[Answer] = field(default_factory=list)


@dataclass
class Quiz:
    id: int
    title: str
    description: Optional[str] = None
    is_published: bool = False
    questions: List[Question] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    author_id: Optional[str] = None


# Player-facing shapes: answers carry no correctness flag.
@dataclass
class PlayAnswer:
    id: int
    text: str


@dataclass
class PlayQuestion:
    id: int
    text: str
    answers: List[PlayAnswer] = field(default_factory=list)


@dataclass
class PlayQuiz:
    id: int
    title: str
    description: Optional[str]
    is_published: bool
    questions: List[PlayQuestion]
    created_at: datetime
    author_id: Optional[str] = None


@dataclass
class QuestionResult:
    question_id: int
    selected_answer_id: int
    correct_answer_id: int
    is_correct: bool


@dataclass
class QuizResult:
    quiz_id: int
    total_questions: int
    correct_answers: int
    score: float
    details: List[QuestionResult] = field(default_factory=list)
