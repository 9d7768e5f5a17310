# backend/prdify/services/completion_types.py
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorKind, PrdifyError


class ResponseSchema(BaseModel):
    """Object shape the provider is asked to return"""
    type: Literal["object"] = "object"
    properties: Dict[str, Any]
    required: List[str] = []
    additionalProperties: Optional[bool] = None


class JsonSchema(BaseModel):
    """Named response contract sent as the `json_schema` response format"""
    name: str
    strict: bool = True
    schema_: ResponseSchema = Field(alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class SamplingParams(BaseModel):
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None


class StructuredResponseOptions(BaseModel):
    system_prompt: str
    user_prompt: str
    json_schema: JsonSchema
    model: Optional[str] = None  # Falls back to the client's default model
    params: Optional[SamplingParams] = None


class CompletionConfigurationError(Exception):
    """Raised when the completion client cannot be constructed"""


class CompletionError(PrdifyError):
    default_message = "Completion request failed"


class NetworkError(CompletionError):
    kind = ErrorKind.NETWORK
    default_message = "Network failure while calling the completion provider"


class ApiError(CompletionError):
    kind = ErrorKind.API
    default_message = "Completion provider returned an error"

    def __init__(
            self,
            message: Optional[str] = None,
            status_code: int = 500,
            error_type: Optional[str] = None,
            error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code


class ParsingError(CompletionError):
    kind = ErrorKind.PARSING
    default_message = "Failed to parse completion response"


class ValidationError(CompletionError):
    kind = ErrorKind.VALIDATION
    default_message = "Completion response does not match the requested schema"
