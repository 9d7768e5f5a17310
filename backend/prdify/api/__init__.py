# backend/prdify/api/__init__.py
from .documents import router as documents_router
from .questions import router as questions_router
from .summary import router as summary_router
from .content import router as content_router

__all__ = ["documents_router", "questions_router", "summary_router", "content_router"]
