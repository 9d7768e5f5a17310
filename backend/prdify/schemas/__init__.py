# backend/prdify/schemas/__init__.py
from .document import (
    Document, DocumentCreate, DocumentUpdate, DocumentListItem, DocumentListQuery,
    PaginatedDocuments, SummaryUpdate, SummaryResponse, ContentUpdate, ContentResponse
)
from .question import Question, AnswerItem, AnswersSubmit, QuestionListQuery, PaginatedQuestions, QuestionRound

__all__ = [
    "Document", "DocumentCreate", "DocumentUpdate", "DocumentListItem", "DocumentListQuery",
    "PaginatedDocuments", "SummaryUpdate", "SummaryResponse", "ContentUpdate", "ContentResponse",
    "Question", "AnswerItem", "AnswersSubmit", "QuestionListQuery", "PaginatedQuestions", "QuestionRound"
]
