# backend/prdify/schemas/document.py
from typing import Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import BaseSchema, TimestampMixin, Pagination
from ..models.document import DocumentStatus

NAME_MAX_LENGTH = 200
MAIN_PROBLEM_MAX_LENGTH = 5000
IN_SCOPE_MAX_LENGTH = 5000
OUT_OF_SCOPE_MAX_LENGTH = 5000
SUCCESS_CRITERIA_MAX_LENGTH = 2000
SUMMARY_MAX_LENGTH = 10000
CONTENT_MAX_LENGTH = 50000


class DocumentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    main_problem: str = Field(min_length=1, max_length=MAIN_PROBLEM_MAX_LENGTH)
    in_scope: str = Field(min_length=1, max_length=IN_SCOPE_MAX_LENGTH)
    out_of_scope: str = Field(min_length=1, max_length=OUT_OF_SCOPE_MAX_LENGTH)
    success_criteria: str = Field(min_length=1, max_length=SUCCESS_CRITERIA_MAX_LENGTH)


class DocumentUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)


class DocumentListQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: Literal["name", "status", "created_at", "updated_at"] = "updated_at"
    order: Literal["asc", "desc"] = "desc"


class Document(BaseSchema, TimestampMixin):
    id: str
    user_id: str
    name: str
    main_problem: str
    in_scope: str
    out_of_scope: str
    success_criteria: str
    status: DocumentStatus
    summary: Optional[str] = None
    content: Optional[str] = None
    current_round_number: int = 0


class DocumentListItem(BaseSchema, TimestampMixin):
    id: str
    name: str
    status: DocumentStatus


class PaginatedDocuments(BaseModel):
    data: List[DocumentListItem]
    pagination: Pagination


class SummaryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    summary: str = Field(min_length=1, max_length=SUMMARY_MAX_LENGTH)


class SummaryResponse(BaseModel):
    summary: str


class ContentUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)


class ContentResponse(BaseModel):
    content: str
