# backend/prdify/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from ..services.completion import CompletionClient
from ..services.content import ContentService
from ..services.questions import QuestionService
from ..services.summary import SummaryService


async def get_current_user_id(x_user_id: str = Header(default="")) -> str:
    """Owner of the request, resolved upstream by the session layer"""
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


@lru_cache
def get_completion_client() -> CompletionClient:
    """One client per process, built from settings on first use"""
    return CompletionClient.from_settings()


# Read and edit routes never call the provider and get services without a client
def get_question_service() -> QuestionService:
    return QuestionService()


def get_summary_service() -> SummaryService:
    return SummaryService()


def get_content_service() -> ContentService:
    return ContentService()


def get_question_generator(client: CompletionClient = Depends(get_completion_client)) -> QuestionService:
    return QuestionService(client)


def get_summary_generator(client: CompletionClient = Depends(get_completion_client)) -> SummaryService:
    return SummaryService(client)


def get_content_generator(client: CompletionClient = Depends(get_completion_client)) -> ContentService:
    return ContentService(client)
