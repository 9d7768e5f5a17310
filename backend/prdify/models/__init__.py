# backend/prdify/models/__init__.py
from ..database import Base
from .document import Document, DocumentStatus
from .question import Question

__all__ = [
    "Base",
    "Document",
    "DocumentStatus",
    "Question",
]
