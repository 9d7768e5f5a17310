# backend/prdify/services/summary.py
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import DocumentStatus, Question
from ..utils.logging import service_logger
from . import lifecycle, prompts
from .completion import CompletionClient, require_client
from .completion_types import CompletionError, SamplingParams, StructuredResponseOptions
from .documents import load_document
from .errors import AiGenerationError, QuestionFetchingError, SummaryConflictError, SummaryUpdateError


def is_answered(question: Question) -> bool:
    return question.answer is not None and question.answer.strip() != ""


class SummaryService:
    """Planning summary: generation, manual edits and the revert back-edge"""

    def __init__(self, completion_client: Optional[CompletionClient] = None):
        self.completion_client = completion_client

    async def generate_summary(self, db: Session, document_id: str, user_id: Optional[str] = None) -> str:
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.COLLECTING_ANSWERS, SummaryConflictError,
            "PRD must be in collecting_answers status to generate summary"
        )

        try:
            questions = db.query(Question) \
                .filter(Question.document_id == document_id) \
                .order_by(Question.round_number, Question.created_at, Question.id) \
                .all()
        except SQLAlchemyError as e:
            raise QuestionFetchingError(str(e)) from e

        if not questions:
            raise SummaryConflictError(
                "Cannot generate summary: PRD has no questions",
                details={"reason": "no_questions"}
            )

        unanswered = [q.id for q in questions if not is_answered(q)]
        if unanswered:
            raise SummaryConflictError(
                "Cannot generate summary: PRD has unanswered questions",
                details={"reason": "unanswered_questions", "question_ids": unanswered}
            )

        start_time = time.perf_counter()
        try:
            response = await require_client(self.completion_client).get_structured_response(
                StructuredResponseOptions(
                    system_prompt=prompts.SUMMARY_SYSTEM_PROMPT,
                    user_prompt=prompts.build_summary_prompt(document, questions),
                    json_schema=prompts.SUMMARY_SCHEMA,
                    params=SamplingParams(temperature=0.5),
                ),
                response_model=prompts.SummaryResponse,
            )
        except CompletionError as e:
            service_logger.error("Summary generation failed", extra={
                "document_id": document_id,
                "error_type": type(e).__name__,
                "error": e.message
            })
            raise AiGenerationError(f"Failed to generate summary: {e.message}") from e

        lifecycle.transition(
            db, document, DocumentStatus.SUMMARY_REVIEW,
            SummaryConflictError, SummaryUpdateError,
            values={"summary": response.summary},
            error_prefix="Failed to update PRD with summary"
        )

        service_logger.info("Generated summary", extra={
            "document_id": document_id,
            "question_count": len(questions),
            "processing_time_ms": round((time.perf_counter() - start_time) * 1000, 2)
        })
        return document.summary

    async def update_summary(
            self,
            db: Session,
            document_id: str,
            summary: str,
            user_id: Optional[str] = None
    ) -> str:
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.SUMMARY_REVIEW, SummaryConflictError,
            "PRD must be in summary_review status to update summary"
        )

        lifecycle.update_fields(
            db, document, {"summary": summary},
            SummaryConflictError, SummaryUpdateError,
            error_prefix="Failed to update PRD summary"
        )
        return document.summary

    async def revert_summary(self, db: Session, document_id: str, user_id: Optional[str] = None) -> None:
        """Drop the summary and return the document to answer collection"""
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.SUMMARY_REVIEW, SummaryConflictError,
            "PRD must be in summary_review status to delete summary"
        )

        lifecycle.transition(
            db, document, DocumentStatus.COLLECTING_ANSWERS,
            SummaryConflictError, SummaryUpdateError,
            values={"summary": None},
            error_prefix="Failed to delete PRD summary"
        )
