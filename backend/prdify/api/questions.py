# backend/prdify/api/questions.py
import re
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.question import (
    AnswersSubmit,
    PaginatedQuestions,
    Question as QuestionSchema,
    QuestionListQuery,
    QuestionRound,
)
from ..services.questions import QuestionService
from ..utils.logging import api_logger
from .deps import get_current_user_id, get_question_generator, get_question_service

ROUND_PATTERN = re.compile(r"[1-9][0-9]*")

router = APIRouter(prefix="/api/prds/{document_id}", tags=["questions"])


@router.get("/questions", response_model=PaginatedQuestions)
async def list_questions(
        document_id: str,
        options: QuestionListQuery = Depends(),
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: QuestionService = Depends(get_question_service)
):
    api_logger.info("Listing PRD questions", extra={
        "document_id": document_id,
        "page": options.page,
        "limit": options.limit
    })
    return await service.list_questions(db, document_id, options.page, options.limit, user_id=user_id)


@router.patch("/questions", status_code=204)
async def submit_answers(
        document_id: str,
        command: AnswersSubmit,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: QuestionService = Depends(get_question_service)
):
    api_logger.info("Submitting answers", extra={
        "document_id": document_id,
        "answer_count": len(command.answers)
    })
    await service.submit_answers(db, document_id, command.answers, user_id)


@router.post("/questions/generate", response_model=List[QuestionSchema], status_code=201)
async def generate_questions(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: QuestionService = Depends(get_question_generator)
):
    api_logger.info("Generating next question round", extra={"document_id": document_id})

    start_time = time.time()
    questions = await service.generate_next_round(db, document_id, user_id)

    api_logger.info("Successfully generated questions", extra={
        "document_id": document_id,
        "question_count": len(questions),
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return questions


@router.get("/rounds/{round_number}", response_model=QuestionRound)
async def get_round(
        document_id: str,
        round_number: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: QuestionService = Depends(get_question_service)
):
    api_logger.info("Retrieving question round", extra={
        "document_id": document_id,
        "round": round_number
    })

    if round_number == "latest":
        return await service.get_latest_round(db, document_id, user_id)

    if not ROUND_PATTERN.fullmatch(round_number):
        raise HTTPException(
            status_code=400,
            detail="Invalid round parameter. Must be 'latest' or a positive integer."
        )

    return await service.get_round(db, document_id, int(round_number), user_id)
