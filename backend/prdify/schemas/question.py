# backend/prdify/schemas/question.py
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from .base import BaseSchema, Pagination


class Question(BaseSchema):
    id: str
    document_id: str
    round_number: int
    question: str
    answer: Optional[str] = None
    created_at: datetime


class AnswerItem(BaseModel):
    question_id: str
    text: str = Field(min_length=1)


class AnswersSubmit(BaseModel):
    answers: List[AnswerItem] = Field(min_length=1)


class QuestionListQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class PaginatedQuestions(BaseModel):
    questions: List[Question]
    pagination: Pagination


class QuestionRound(BaseModel):
    questions: List[Question]
