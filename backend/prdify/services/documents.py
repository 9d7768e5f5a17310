# backend/prdify/services/documents.py
import math
import re
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Document, DocumentStatus, Question
from ..schemas.base import Pagination
from ..schemas.document import (
    Document as DocumentSchema,
    DocumentCreate,
    DocumentListItem,
    DocumentListQuery,
    PaginatedDocuments,
)
from ..utils.logging import service_logger
from . import lifecycle
from .errors import (
    DocumentConflictError,
    DocumentCreationError,
    DocumentFetchingError,
    DocumentNameConflictError,
    DocumentNotFoundError,
    DocumentUpdateError,
    RoundCalculationError,
)

INITIAL_STATUS = DocumentStatus.COLLECTING_ANSWERS

SORT_COLUMNS = {
    "name": Document.name,
    "status": Document.status,
    "created_at": Document.created_at,
    "updated_at": Document.updated_at,
}


def get_current_round_number(db: Session, document_id: str) -> int:
    """Highest round number among the document's questions, 0 if none"""
    try:
        current = db.query(func.max(Question.round_number)) \
            .filter(Question.document_id == document_id) \
            .scalar()
    except SQLAlchemyError as e:
        service_logger.error("Failed to calculate current round", extra={
            "document_id": document_id,
            "error": str(e)
        })
        raise RoundCalculationError(str(e)) from e

    return current or 0


def load_document(db: Session, document_id: str, user_id: Optional[str] = None) -> Document:
    """Fetch a document row, scoped to ``user_id`` when given"""
    try:
        query = db.query(Document).filter(Document.id == document_id)
        if user_id is not None:
            query = query.filter(Document.user_id == user_id)
        document = query.first()
    except SQLAlchemyError as e:
        raise DocumentFetchingError(str(e)) from e

    if not document:
        raise DocumentNotFoundError()
    return document


def to_schema(db: Session, document: Document) -> DocumentSchema:
    try:
        current_round = get_current_round_number(db, document.id)
    except RoundCalculationError as e:
        raise DocumentFetchingError(f"Unable to map PRD: {e.message}") from e

    data = DocumentSchema.model_validate(document)
    data.current_round_number = current_round
    return data


def sanitize_filename(filename: str) -> str:
    """Make a document name safe for a Content-Disposition header"""
    cleaned = re.sub(r"[^\w\s\-.]", "-", filename.strip())
    cleaned = re.sub(r"\s+", "-", cleaned)
    cleaned = re.sub(r"-+", "-", cleaned)
    return cleaned.strip("-")


class DocumentService:
    """Document records and the final locking step"""

    @staticmethod
    async def create_document(db: Session, user_id: str, command: DocumentCreate) -> DocumentSchema:
        document = Document(
            user_id=user_id,
            status=INITIAL_STATUS,
            summary=None,
            content=None,
            **command.model_dump()
        )

        try:
            db.add(document)
            db.commit()
            db.refresh(document)
        except IntegrityError as e:
            db.rollback()
            service_logger.warning("Duplicate PRD name", extra={
                "user_id": user_id,
                "document_name": command.name
            })
            raise DocumentNameConflictError() from e
        except SQLAlchemyError as e:
            db.rollback()
            raise DocumentCreationError(str(e)) from e

        service_logger.info("Created PRD", extra={
            "document_id": document.id,
            "user_id": user_id
        })
        return to_schema(db, document)

    @staticmethod
    async def get_document(db: Session, document_id: str, user_id: Optional[str] = None) -> DocumentSchema:
        document = load_document(db, document_id, user_id)
        return to_schema(db, document)

    @staticmethod
    async def list_documents(db: Session, user_id: str, options: DocumentListQuery) -> PaginatedDocuments:
        sort_column = SORT_COLUMNS[options.sort_by]
        ordering = sort_column.asc() if options.order == "asc" else sort_column.desc()
        offset = (options.page - 1) * options.limit

        try:
            base_query = db.query(Document).filter(Document.user_id == user_id)
            total_items = base_query.count()
            documents = base_query.order_by(ordering, Document.id) \
                .offset(offset) \
                .limit(options.limit) \
                .all()
        except SQLAlchemyError as e:
            raise DocumentFetchingError(str(e)) from e

        return PaginatedDocuments(
            data=[DocumentListItem.model_validate(doc) for doc in documents],
            pagination=Pagination(
                page=options.page,
                limit=options.limit,
                total_items=total_items,
                total_pages=math.ceil(total_items / options.limit)
            )
        )

    @staticmethod
    async def rename_document(
            db: Session,
            document_id: str,
            name: str,
            user_id: Optional[str] = None
    ) -> DocumentSchema:
        document = load_document(db, document_id, user_id)

        if document.status == DocumentStatus.COMPLETED:
            raise DocumentConflictError("Completed PRDs cannot be modified", details={
                "current_status": DocumentStatus.COMPLETED.value
            })

        try:
            lifecycle.update_fields(
                db, document, {"name": name},
                DocumentConflictError, DocumentUpdateError,
                error_prefix="Failed to rename PRD"
            )
        except DocumentUpdateError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DocumentNameConflictError() from e
            raise

        return to_schema(db, document)

    @staticmethod
    async def delete_document(db: Session, document_id: str, user_id: Optional[str] = None) -> None:
        try:
            query = db.query(Document).filter(Document.id == document_id)
            if user_id is not None:
                query = query.filter(Document.user_id == user_id)
            # Bulk delete skips ORM cascades, so remove the questions explicitly
            if query.count():
                db.query(Question).filter(Question.document_id == document_id) \
                    .delete(synchronize_session=False)
            deleted = query.delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise DocumentUpdateError(f"Failed to delete PRD: {e}") from e

        if deleted == 0:
            raise DocumentNotFoundError()

        service_logger.info("Deleted PRD", extra={"document_id": document_id})

    @staticmethod
    async def complete_document(db: Session, document_id: str, user_id: Optional[str] = None) -> DocumentSchema:
        """Lock a reviewed document; it is read-only afterwards"""
        document = load_document(db, document_id, user_id)
        lifecycle.require_status(
            document, DocumentStatus.DOCUMENT_REVIEW, DocumentConflictError,
            "PRD must be in document_review status to be completed"
        )

        lifecycle.transition(
            db, document, DocumentStatus.COMPLETED,
            DocumentConflictError, DocumentUpdateError,
            error_prefix="Failed to complete PRD"
        )
        return to_schema(db, document)

    @staticmethod
    async def export_markdown(db: Session, document_id: str, user_id: Optional[str] = None):
        """Return ``(filename, markdown)`` for a completed document"""
        document = load_document(db, document_id, user_id)

        if document.status != DocumentStatus.COMPLETED:
            raise DocumentConflictError("PRD must be completed before exporting")

        if not document.content or not document.content.strip():
            raise DocumentConflictError("PRD content is empty and cannot be exported")

        filename = sanitize_filename(document.name) or "prd"
        return f"{filename}.md", document.content


document_service = DocumentService()
