# backend/prdify/api/summary.py
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.document import SummaryResponse, SummaryUpdate
from ..services.summary import SummaryService
from ..utils.logging import api_logger
from .deps import get_current_user_id, get_summary_generator, get_summary_service

router = APIRouter(prefix="/api/prds/{document_id}/summary", tags=["summary"])


@router.post("", response_model=SummaryResponse)
async def generate_summary(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: SummaryService = Depends(get_summary_generator)
):
    api_logger.info("Generating planning summary", extra={"document_id": document_id})

    start_time = time.time()
    summary = await service.generate_summary(db, document_id, user_id)

    api_logger.info("Successfully generated summary", extra={
        "document_id": document_id,
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return SummaryResponse(summary=summary)


@router.put("", response_model=SummaryResponse)
async def update_summary(
        document_id: str,
        update: SummaryUpdate,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: SummaryService = Depends(get_summary_service)
):
    api_logger.info("Updating summary", extra={"document_id": document_id})
    summary = await service.update_summary(db, document_id, update.summary, user_id)
    return SummaryResponse(summary=summary)


@router.delete("", status_code=204)
async def revert_summary(
        document_id: str,
        db: Session = Depends(get_db),
        user_id: str = Depends(get_current_user_id),
        service: SummaryService = Depends(get_summary_service)
):
    api_logger.info("Reverting summary", extra={"document_id": document_id})
    await service.revert_summary(db, document_id, user_id)
    return Response(status_code=204)
