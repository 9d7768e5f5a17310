# backend/prdify/services/content.py
import time
from typing import Optional

from sqlalchemy.orm import Session

from ..models import DocumentStatus
from ..utils.logging import service_logger
from . import lifecycle, prompts
from .completion import CompletionClient, require_client
from .completion_types import CompletionError, SamplingParams, StructuredResponseOptions
from .documents import load_document
from .errors import AiGenerationError, ContentConflictError, ContentUpdateError


class ContentService:
    """Final PRD document generation and manual edits during review"""

    def __init__(self, completion_client: Optional[CompletionClient] = None):
        self.completion_client = completion_client

    async def generate_content(self, db: Session, document_id: str, user_id: Optional[str] = None) -> str:
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.SUMMARY_REVIEW, ContentConflictError,
            "PRD must be in summary_review status to generate document"
        )

        if not document.summary:
            raise ContentConflictError("Cannot generate document: PRD has no summary")

        start_time = time.perf_counter()
        try:
            response = await require_client(self.completion_client).get_structured_response(
                StructuredResponseOptions(
                    system_prompt=prompts.build_document_system_prompt(document.name),
                    user_prompt=prompts.build_document_prompt(document),
                    json_schema=prompts.DOCUMENT_SCHEMA,
                    params=SamplingParams(temperature=0.7),
                ),
                response_model=prompts.DocumentResponse,
            )
        except CompletionError as e:
            service_logger.error("Document generation failed", extra={
                "document_id": document_id,
                "error_type": type(e).__name__,
                "error": e.message
            })
            raise AiGenerationError(f"Failed to generate PRD document: {e.message}") from e

        lifecycle.transition(
            db, document, DocumentStatus.DOCUMENT_REVIEW,
            ContentConflictError, ContentUpdateError,
            values={"content": response.document},
            error_prefix="Failed to update PRD document"
        )

        service_logger.info("Generated PRD document", extra={
            "document_id": document_id,
            "content_length": len(document.content),
            "processing_time_ms": round((time.perf_counter() - start_time) * 1000, 2)
        })
        return document.content

    async def update_content(
            self,
            db: Session,
            document_id: str,
            content: str,
            user_id: Optional[str] = None
    ) -> str:
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.DOCUMENT_REVIEW, ContentConflictError,
            "PRD must be in document_review status to update document"
        )

        lifecycle.update_fields(
            db, document, {"content": content},
            ContentConflictError, ContentUpdateError,
            error_prefix="Failed to update PRD document"
        )
        return document.content
