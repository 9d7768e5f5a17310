# backend/prdify/api/content.py
import time

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.document import ContentResponse, ContentUpdate
from ..services.content import ContentService
from ..utils.logging import api_logger
from .deps import get_content_generator, get_content_service, get_current_user_id

router = APIRouter(prefix="/api/prds/{document_id}/document", tags=["document"])


@router.post("", response_model=ContentResponse)
async def generate_content(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: ContentService = Depends(get_content_generator)
):
    api_logger.info("Generating PRD document", extra={"document_id": document_id})

    start_time = time.time()
    content = await service.generate_content(db, document_id, user_id)

    api_logger.info("Successfully generated PRD document", extra={
        "document_id": document_id,
        "content_length": len(content),
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return ContentResponse(content=content)


@router.put("", response_model=ContentResponse)
async def update_content(
        document_id: str,
        update: ContentUpdate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: ContentService = Depends(get_content_service)
):
    api_logger.info("Updating PRD document", extra={"document_id": document_id})
    content = await service.update_content(db, document_id, update.content, user_id)
    return ContentResponse(content=content)
