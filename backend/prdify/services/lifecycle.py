# backend/prdify/services/lifecycle.py
"""Document status state machine.

Every status change is written as a conditional update on the expected
source status. If another request moved the document first, no row matches
and the caller gets a conflict instead of silently overwriting the newer
state.
"""
from typing import Any, Dict, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Document, DocumentStatus
from ..utils.logging import service_logger
from .errors import ConflictError, PrdifyError

ALLOWED_TRANSITIONS = {
    (DocumentStatus.COLLECTING_ANSWERS, DocumentStatus.SUMMARY_REVIEW),
    (DocumentStatus.SUMMARY_REVIEW, DocumentStatus.COLLECTING_ANSWERS),
    (DocumentStatus.SUMMARY_REVIEW, DocumentStatus.DOCUMENT_REVIEW),
    (DocumentStatus.DOCUMENT_REVIEW, DocumentStatus.COMPLETED),
}


def is_allowed_transition(source: DocumentStatus, target: DocumentStatus) -> bool:
    return (source, target) in ALLOWED_TRANSITIONS


def require_status(
        document: Document,
        expected: DocumentStatus,
        error_cls: Type[ConflictError],
        message: str
) -> None:
    """Raise ``error_cls`` unless the loaded document is in ``expected`` status"""
    if document.status != expected:
        service_logger.warning("Status guard failed", extra={
            "document_id": document.id,
            "expected_status": expected.value,
            "current_status": DocumentStatus(document.status).value
        })
        raise error_cls(message, details={
            "expected_status": expected.value,
            "current_status": DocumentStatus(document.status).value
        })


def _conditional_update(
        db: Session,
        document_id: str,
        expected: DocumentStatus,
        values: Dict[str, Any],
        conflict_cls: Type[ConflictError],
        update_error_cls: Type[PrdifyError],
        error_prefix: str
) -> None:
    try:
        updated = db.query(Document) \
            .filter(Document.id == document_id, Document.status == expected) \
            .update(values, synchronize_session=False)

        if updated == 0:
            db.rollback()
            raise conflict_cls(
                f"PRD is no longer in {expected.value} status",
                details={"expected_status": expected.value}
            )

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        service_logger.error("Conditional document update failed", extra={
            "document_id": document_id,
            "expected_status": expected.value,
            "error": str(e)
        })
        raise update_error_cls(f"{error_prefix}: {e}") from e


def transition(
        db: Session,
        document: Document,
        target: DocumentStatus,
        conflict_cls: Type[ConflictError],
        update_error_cls: Type[PrdifyError],
        values: Optional[Dict[str, Any]] = None,
        error_prefix: str = "Failed to update PRD"
) -> Document:
    """Move ``document`` to ``target`` and store ``values`` in the same write"""
    source = DocumentStatus(document.status)
    if not is_allowed_transition(source, target):
        raise ValueError(f"Illegal status transition: {source.value} -> {target.value}")

    changes = dict(values or {})
    changes["status"] = target
    _conditional_update(db, document.id, source, changes, conflict_cls, update_error_cls, error_prefix)

    db.refresh(document)
    service_logger.info("Document status changed", extra={
        "document_id": document.id,
        "from_status": source.value,
        "to_status": target.value
    })
    return document


def update_fields(
        db: Session,
        document: Document,
        values: Dict[str, Any],
        conflict_cls: Type[ConflictError],
        update_error_cls: Type[PrdifyError],
        error_prefix: str = "Failed to update PRD"
) -> Document:
    """Write ``values`` only while the document keeps its current status"""
    current = DocumentStatus(document.status)
    _conditional_update(db, document.id, current, values, conflict_cls, update_error_cls, error_prefix)
    db.refresh(document)
    return document
