# backend/prdify/services/errors.py
"""Error taxonomy shared by the workflow services.

Every exception carries an ``ErrorKind`` tag. The API layer maps kinds to
HTTP statuses through a single table, so adding a kind without a status is
caught by the test suite rather than at runtime.
"""
import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    PARSING = "parsing"
    NETWORK = "network"
    API = "api"
    AI_GENERATION = "ai_generation"
    UPDATE = "update"
    FETCHING = "fetching"
    ROUND_CALCULATION = "round_calculation"


class PrdifyError(Exception):
    kind: ErrorKind = ErrorKind.FETCHING
    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# Not found

class DocumentNotFoundError(PrdifyError):
    kind = ErrorKind.NOT_FOUND
    default_message = "PRD not found"


class QuestionNotFoundError(PrdifyError):
    kind = ErrorKind.NOT_FOUND
    default_message = "PRD question not found"


class RoundNotFoundError(PrdifyError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Round not found"


# Conflicts: a guard condition on the document failed

class ConflictError(PrdifyError):
    kind = ErrorKind.CONFLICT
    default_message = "PRD status conflict"


class DocumentConflictError(ConflictError):
    default_message = "PRD status conflict for this operation"


class DocumentNameConflictError(ConflictError):
    default_message = "PRD name must be unique per user"


class QuestionConflictError(ConflictError):
    default_message = "Cannot update questions for a PRD that is not collecting answers"


class QuestionGenerationConflictError(ConflictError):
    default_message = "Cannot generate questions for a PRD that is not collecting answers"


class SummaryConflictError(ConflictError):
    default_message = "PRD status conflict for summary operation"


class ContentConflictError(ConflictError):
    default_message = "PRD status conflict for document operation"


# AI path

class AiGenerationError(PrdifyError):
    kind = ErrorKind.AI_GENERATION
    default_message = "AI generation failed"


# Record store failures

class DocumentFetchingError(PrdifyError):
    kind = ErrorKind.FETCHING
    default_message = "Unable to fetch PRDs"


class DocumentCreationError(PrdifyError):
    kind = ErrorKind.UPDATE
    default_message = "Unable to create PRD"


class DocumentUpdateError(PrdifyError):
    kind = ErrorKind.UPDATE
    default_message = "Unable to update PRD"


class QuestionFetchingError(PrdifyError):
    kind = ErrorKind.FETCHING
    default_message = "Unable to fetch PRD questions"


class QuestionUpdateError(PrdifyError):
    kind = ErrorKind.UPDATE
    default_message = "Unable to update PRD questions"


class SummaryUpdateError(PrdifyError):
    kind = ErrorKind.UPDATE
    default_message = "Unable to update PRD summary"


class ContentUpdateError(PrdifyError):
    kind = ErrorKind.UPDATE
    default_message = "Unable to update PRD document"


class RoundCalculationError(PrdifyError):
    kind = ErrorKind.ROUND_CALCULATION
    default_message = "Unable to calculate the current round number"
