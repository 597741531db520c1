# Pydantic request/response schemas.
import re
from datetime import datetime
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    StrictInt,
    field_validator,
)
from pydantic.alias_generators import to_camel

from quiz_studio.models import UserRole

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


# camelCase on the wire, snake_case in Python.
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# Request bodies reject keys they do not declare.
class RequestModel(CamelModel):
    model_config = ConfigDict(extra="forbid")


# Request payload for registering an account.
class RegisterIn(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    username: str = Field(..., min_length=3, max_length=30)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "password must contain at least one uppercase letter, "
                "one lowercase letter and one digit"
            )
        return value


# Request payload for logging in.
class LoginIn(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshIn(RequestModel):
    refresh_token: str = Field(..., min_length=1)


# Public view of a user: never carries the password hash.
class UserOut(CamelModel):
    id: str
    email: str
    username: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserActiveIn(RequestModel):
    is_active: StrictBool


class AuthOut(CamelModel):
    access_token: str
    refresh_token: str
    user: UserOut


class RefreshOut(CamelModel):
    access_token: str


class MessageOut(CamelModel):
    message: str


class HealthOut(CamelModel):
    status: str
    timestamp: datetime


class AnswerIn(RequestModel):
    text: str = Field(..., min_length=1, max_length=500)
    is_correct: StrictBool


class QuestionIn(RequestModel):
    text: str = Field(..., min_length=1, max_length=1000)
    answers: List[AnswerIn] = Field(..., min_length=2)


# Request payload for creating a quiz; nested ids are always server-assigned.
class QuizCreate(RequestModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_published: Optional[StrictBool] = None
    questions: Optional[List[QuestionIn]] = None


class AnswerPatch(AnswerIn):
    id: Optional[StrictInt] = Field(None, ge=1)


class QuestionPatch(RequestModel):
    id: Optional[StrictInt] = Field(None, ge=1)
    text: str = Field(..., min_length=1, max_length=1000)
    answers: List[AnswerPatch] = Field(..., min_length=2)


# Partial update: omitted keys stay untouched, so null is only meaningful
# where a field can actually be cleared (description).
class QuizUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_published: Optional[StrictBool] = None
    questions: Optional[List[QuestionPatch]] = None

    @field_validator("title", "is_published", "questions")
    @classmethod
    def reject_explicit_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but cannot be null")
        return value


class AnswerOut(CamelModel):
    id: int
    text: str
    is_correct: bool


class QuestionOut(CamelModel):
    id: int
    text: str
    answers: List[AnswerOut]


class QuizOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    is_published: bool
    questions: List[QuestionOut]
    created_at: datetime
    author_id: Optional[str] = None


class PlayAnswerOut(CamelModel):
    id: int
    text: str


class PlayQuestionOut(CamelModel):
    id: int
    text: str
    answers: List[PlayAnswerOut]


# Response model for playing a quiz without answer keys.
class QuizPlayOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    is_published: bool
    questions: List[PlayQuestionOut]
    created_at: datetime
    author_id: Optional[str] = None


class SubmittedAnswerIn(RequestModel):
    question_id: StrictInt
    answer_id: StrictInt


class SubmitIn(RequestModel):
    answers: List[SubmittedAnswerIn]


class QuestionResultOut(CamelModel):
    question_id: int
    selected_answer_id: int
    correct_answer_id: int
    is_correct: bool


class QuizResultOut(CamelModel):
    quiz_id: int
    total_questions: int
    correct_answers: int
    score: float
    details: List[QuestionResultOut]


class GenerateQuestionsIn(RequestModel):
    theme: str = Field(..., min_length=1)
    count: StrictInt = Field(..., ge=1, le=10)


class GeneratedAnswerOut(CamelModel):
    text: str
    is_correct: bool


class GeneratedQuestionOut(CamelModel):
    text: str
    answers: List[GeneratedAnswerOut]


class GenerateQuestionsOut(CamelModel):
    questions: List[GeneratedQuestionOut]
