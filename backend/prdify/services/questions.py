# backend/prdify/services/questions.py
import math
import time
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import DocumentStatus, Question
from ..schemas.base import Pagination
from ..schemas.question import (
    AnswerItem,
    PaginatedQuestions,
    Question as QuestionSchema,
    QuestionRound,
)
from ..utils.logging import service_logger
from . import lifecycle, prompts
from .completion import CompletionClient, require_client
from .completion_types import CompletionError, SamplingParams, StructuredResponseOptions
from .documents import get_current_round_number, load_document
from .errors import (
    AiGenerationError,
    QuestionConflictError,
    QuestionFetchingError,
    QuestionGenerationConflictError,
    QuestionNotFoundError,
    QuestionUpdateError,
    RoundNotFoundError,
)

ROUND_PAGE_LIMIT = 100


class QuestionService:
    """Question rounds of the planning session and answer submission"""

    def __init__(
            self,
            completion_client: Optional[CompletionClient] = None,
            questions_per_round: Optional[int] = None
    ):
        self.completion_client = completion_client
        self.questions_per_round = questions_per_round or settings.QUESTIONS_PER_ROUND

    async def list_questions(
            self,
            db: Session,
            document_id: str,
            page: int = 1,
            limit: int = 20,
            round_number: Optional[int] = None,
            user_id: Optional[str] = None
    ) -> PaginatedQuestions:
        load_document(db, document_id, user_id)
        offset = (page - 1) * limit

        try:
            query = db.query(Question).filter(Question.document_id == document_id)
            if round_number is not None:
                query = query.filter(Question.round_number == round_number)

            total_items = query.count()
            rows = query.order_by(Question.round_number.desc(), Question.created_at.desc(), Question.id) \
                .offset(offset) \
                .limit(limit) \
                .all()
        except SQLAlchemyError as e:
            raise QuestionFetchingError(str(e)) from e

        return PaginatedQuestions(
            questions=[QuestionSchema.model_validate(row) for row in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total_items=total_items,
                total_pages=math.ceil(total_items / limit)
            )
        )

    async def get_round(
            self,
            db: Session,
            document_id: str,
            round_number: int,
            user_id: Optional[str] = None
    ) -> QuestionRound:
        result = await self.list_questions(db, document_id, 1, ROUND_PAGE_LIMIT, round_number, user_id)
        if not result.questions:
            raise RoundNotFoundError(f"Round {round_number} not found for this PRD")
        return QuestionRound(questions=result.questions)

    async def get_latest_round(self, db: Session, document_id: str, user_id: Optional[str] = None) -> QuestionRound:
        load_document(db, document_id, user_id)
        latest = get_current_round_number(db, document_id)
        if latest == 0:
            return QuestionRound(questions=[])

        result = await self.list_questions(db, document_id, 1, ROUND_PAGE_LIMIT, latest, user_id)
        return QuestionRound(questions=result.questions)

    async def submit_answers(
            self,
            db: Session,
            document_id: str,
            answers: List[AnswerItem],
            user_id: Optional[str] = None
    ) -> None:
        """Store answers for questions of a document that is collecting answers.

        All answers are written in one transaction: if any update fails the
        whole batch is rolled back.
        """
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.COLLECTING_ANSWERS, QuestionConflictError,
            "Cannot update questions for a PRD that is not collecting answers"
        )

        question_ids = [answer.question_id for answer in answers]
        try:
            existing = db.query(Question.id) \
                .filter(Question.document_id == document_id, Question.id.in_(question_ids)) \
                .all()
        except SQLAlchemyError as e:
            raise QuestionUpdateError(str(e)) from e

        existing_ids = {row.id for row in existing}
        invalid_ids = [qid for qid in question_ids if qid not in existing_ids]
        if invalid_ids:
            service_logger.warning("Answers submitted for unknown questions", extra={
                "document_id": document_id,
                "invalid_ids": invalid_ids
            })
            raise QuestionNotFoundError(
                f"Questions not found or do not belong to this PRD: {', '.join(invalid_ids)}",
                details={"question_ids": invalid_ids}
            )

        try:
            for answer in answers:
                db.query(Question) \
                    .filter(Question.id == answer.question_id, Question.document_id == document_id) \
                    .update({"answer": answer.text}, synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            service_logger.error("Failed to store answers", extra={
                "document_id": document_id,
                "error": str(e)
            })
            raise QuestionUpdateError(str(e)) from e

        service_logger.info("Stored answers", extra={
            "document_id": document_id,
            "answer_count": len(answers)
        })

    async def generate_next_round(
            self,
            db: Session,
            document_id: str,
            user_id: Optional[str] = None
    ) -> List[QuestionSchema]:
        """Ask the completion provider for the next round of questions and store them unanswered"""
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.COLLECTING_ANSWERS, QuestionGenerationConflictError,
            "Cannot generate questions for a PRD that is not collecting answers"
        )

        next_round = get_current_round_number(db, document_id) + 1

        history: List[Question] = []
        if next_round > 1:
            try:
                history = db.query(Question) \
                    .filter(Question.document_id == document_id) \
                    .order_by(Question.round_number, Question.created_at, Question.id) \
                    .all()
            except SQLAlchemyError as e:
                raise QuestionFetchingError(str(e)) from e

        start_time = time.perf_counter()
        try:
            response = await require_client(self.completion_client).get_structured_response(
                StructuredResponseOptions(
                    system_prompt=prompts.QUESTIONS_SYSTEM_PROMPT,
                    user_prompt=prompts.build_questions_prompt(document, history, self.questions_per_round),
                    json_schema=prompts.QUESTIONS_SCHEMA,
                    params=SamplingParams(temperature=0.7),
                ),
                response_model=prompts.QuestionsResponse,
            )
        except CompletionError as e:
            service_logger.error("Question generation failed", extra={
                "document_id": document_id,
                "round_number": next_round,
                "error_type": type(e).__name__,
                "error": e.message
            })
            raise AiGenerationError(f"Failed to generate questions: {e.message}") from e

        rows = [
            Question(
                document_id=document_id,
                round_number=next_round,
                question=prompts.format_question(item.question, item.recommendation),
                answer=None,
            )
            for item in response.questions
        ]

        try:
            db.add_all(rows)
            db.commit()
            for row in rows:
                db.refresh(row)
        except SQLAlchemyError as e:
            db.rollback()
            raise QuestionFetchingError(str(e)) from e

        service_logger.info("Generated question round", extra={
            "document_id": document_id,
            "round_number": next_round,
            "question_count": len(rows),
            "processing_time_ms": round((time.perf_counter() - start_time) * 1000, 2)
        })
        return [QuestionSchema.model_validate(row) for row in rows]
