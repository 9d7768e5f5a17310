# backend/prdify/models/document.py
import enum
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class DocumentStatus(str, enum.Enum):
    COLLECTING_ANSWERS = "collecting_answers"
    SUMMARY_REVIEW = "summary_review"
    DOCUMENT_REVIEW = "document_review"
    COMPLETED = "completed"


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_documents_user_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    main_problem = Column(Text, nullable=False)
    in_scope = Column(Text, nullable=False)
    out_of_scope = Column(Text, nullable=False)
    success_criteria = Column(Text, nullable=False)
    status = Column(
        Enum(DocumentStatus, values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=DocumentStatus.COLLECTING_ANSWERS
    )
    summary = Column(Text, nullable=True)  # Filled on entering summary_review
    content = Column(Text, nullable=True)  # Filled on entering document_review
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    questions = relationship(
        "Question",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.round_number"
    )
