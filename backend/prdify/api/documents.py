# backend/prdify/api/documents.py
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.document import (
    Document as DocumentSchema,
    DocumentCreate,
    DocumentListQuery,
    DocumentUpdate,
    PaginatedDocuments,
)
from ..services.documents import document_service
from ..services.errors import PrdifyError
from ..utils.logging import api_logger
from .deps import get_current_user_id

router = APIRouter(prefix="/api/prds", tags=["prds"])


@router.post("", response_model=DocumentSchema, status_code=201)
async def create_document(
        document: DocumentCreate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Creating new PRD", extra={
        "user_id": user_id,
        "document_name": document.name
    })

    try:
        start_time = time.time()
        result = await document_service.create_document(db, user_id, document)

        api_logger.info("Successfully created PRD", extra={
            "document_id": result.id,
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return result

    except PrdifyError:
        raise
    except Exception as e:
        api_logger.error("Error creating PRD", extra={
            "user_id": user_id,
            "error": str(e)
        })
        raise


@router.get("", response_model=PaginatedDocuments)
async def list_documents(
        options: DocumentListQuery = Depends(),
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Listing PRDs", extra={
        "user_id": user_id,
        "page": options.page,
        "limit": options.limit
    })

    start_time = time.time()
    result = await document_service.list_documents(db, user_id, options)

    api_logger.info("Successfully listed PRDs", extra={
        "user_id": user_id,
        "document_count": len(result.data),
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return result


@router.get("/{document_id}", response_model=DocumentSchema)
async def get_document(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Retrieving PRD details", extra={"document_id": document_id})
    return await document_service.get_document(db, document_id, user_id)


@router.patch("/{document_id}", response_model=DocumentSchema)
async def rename_document(
        document_id: str,
        update: DocumentUpdate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Renaming PRD", extra={
        "document_id": document_id,
        "new_name": update.name
    })
    return await document_service.rename_document(db, document_id, update.name, user_id)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Deleting PRD", extra={"document_id": document_id})
    await document_service.delete_document(db, document_id, user_id)
    return Response(status_code=204)


@router.post("/{document_id}/complete", response_model=DocumentSchema)
async def complete_document(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Completing PRD", extra={"document_id": document_id})
    result = await document_service.complete_document(db, document_id, user_id)
    api_logger.info("PRD completed", extra={"document_id": document_id})
    return result


@router.get("/{document_id}/export")
async def export_document(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id)
):
    api_logger.info("Exporting PRD as markdown", extra={"document_id": document_id})
    filename, markdown = await document_service.export_markdown(db, document_id, user_id)

    return Response(
        content=markdown,
        media_type="text/markdown; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
