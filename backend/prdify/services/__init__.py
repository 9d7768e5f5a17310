# backend/prdify/services/__init__.py
from .completion import CompletionClient
from .content import ContentService
from .documents import document_service, get_current_round_number
from .questions import QuestionService
from .summary import SummaryService

__all__ = [
    "CompletionClient",
    "ContentService",
    "document_service",
    "get_current_round_number",
    "QuestionService",
    "SummaryService",
]
