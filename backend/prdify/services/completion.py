# backend/prdify/services/completion.py
import asyncio
import json
import time
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
import pydantic
from pydantic import BaseModel

from ..config import settings
from ..utils.logging import ai_logger
from .completion_types import (
    ApiError,
    CompletionConfigurationError,
    JsonSchema,
    NetworkError,
    ParsingError,
    StructuredResponseOptions,
    ValidationError,
)

T = TypeVar("T", bound=BaseModel)

RETRYABLE_STATUS_CODES = {429}


def is_retryable_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def require_client(client: Optional["CompletionClient"]) -> "CompletionClient":
    if client is None:
        raise CompletionConfigurationError("This operation needs a completion client, none was provided.")
    return client


class CompletionClient:
    """Structured chat-completion client for an OpenRouter-compatible provider.

    The client only holds static configuration, so a single instance can be
    shared by every request handler. Each call opens its own HTTP client,
    retries transport failures and 429/5xx responses with exponential
    backoff, and validates the returned JSON against the requested contract.
    """

    def __init__(
            self,
            api_key: Optional[str],
            base_url: str = "https://openrouter.ai/api/v1",
            default_model: str = "anthropic/claude-3.5-sonnet",
            max_attempts: int = 3,
            base_delay_ms: int = 1000,
            timeout: float = 120.0,
            site_url: str = "https://prdify.com",
            app_title: str = "PRDify",
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise CompletionConfigurationError(
                "Completion client initialization failed: OPENROUTER_API_KEY is not defined."
            )

        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.timeout = timeout
        self.site_url = site_url
        self.app_title = app_title
        self._transport = transport

        ai_logger.info("Completion client initialized", extra={
            "base_url": self.base_url,
            "default_model": self.default_model,
            "max_attempts": self.max_attempts
        })

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "CompletionClient":
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            default_model=settings.OPENROUTER_DEFAULT_MODEL,
            max_attempts=settings.OPENROUTER_MAX_ATTEMPTS,
            base_delay_ms=settings.OPENROUTER_BASE_DELAY_MS,
            timeout=settings.OPENROUTER_TIMEOUT_SECONDS,
            site_url=settings.SITE_URL,
            app_title=settings.APP_TITLE,
            transport=transport,
        )

    async def get_structured_response(
            self,
            options: StructuredResponseOptions,
            response_model: Optional[Type[T]] = None
    ):
        """Request a completion and return the contract-validated object.

        Returns a plain dict, or an instance of ``response_model`` when one is
        given.

        Raises:
            NetworkError: transport failures survived every attempt
            ApiError: the provider returned a non-retryable error, or kept
                returning 429/5xx
            ParsingError: the response or its content is not valid JSON
            ValidationError: the parsed object does not match the contract
        """
        payload = self.build_payload(options)
        response = await self._request(payload)
        data = self.parse_response(response, options.json_schema)

        if response_model is None:
            return data

        try:
            return response_model.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Response does not match {response_model.__name__}: {e}",
                details={"errors": e.errors(include_url=False)}
            ) from e

    def build_payload(self, options: StructuredResponseOptions) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": options.model or self.default_model,
            "messages": [
                {"role": "system", "content": options.system_prompt},
                {"role": "user", "content": options.user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": options.json_schema.model_dump(by_alias=True, exclude_none=True),
            },
        }

        # Sampling parameters are only sent when explicitly set
        if options.params is not None:
            payload.update(options.params.model_dump(exclude_none=True))

        return payload

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.site_url,
            "X-Title": self.app_title,
        }

    async def _sleep(self, delay_ms: int) -> None:
        await asyncio.sleep(delay_ms / 1000)

    def _backoff_delay(self, attempt: int) -> int:
        return self.base_delay_ms * (2 ** attempt)

    async def _request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/chat/completions"
        last_error: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            is_last_attempt = attempt == self.max_attempts - 1
            start_time = time.perf_counter()

            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.post(url, headers=self._headers(), json=payload)
            except httpx.TransportError as e:
                last_error = e
                ai_logger.warning("Completion request failed at transport level", extra={
                    "attempt": attempt + 1,
                    "error_type": type(e).__name__,
                    "error": str(e)
                })
                if not is_last_attempt:
                    await self._sleep(self._backoff_delay(attempt))
                    continue
                raise NetworkError(
                    f"Failed to make API request after {self.max_attempts} attempts: {e}"
                ) from e

            elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)

            if not response.is_success:
                error = self._error_from_response(response)
                if is_retryable_status(response.status_code) and not is_last_attempt:
                    delay = self._backoff_delay(attempt)
                    ai_logger.warning("Completion provider returned a retryable status", extra={
                        "attempt": attempt + 1,
                        "status_code": response.status_code,
                        "retry_in_ms": delay
                    })
                    await self._sleep(delay)
                    continue

                ai_logger.error("Completion provider returned an error", extra={
                    "attempt": attempt + 1,
                    "status_code": error.status_code,
                    "error_type": error.error_type,
                    "error_code": error.error_code,
                    "error": error.message
                })
                raise error

            try:
                data = response.json()
            except ValueError as e:
                raise ParsingError(f"Failed to parse API response body: {e}") from e

            if not isinstance(data, dict):
                raise ParsingError("Invalid API response: body is not an object")

            body_error = data.get("error")
            if body_error:
                body_error = body_error if isinstance(body_error, dict) else {"message": str(body_error)}
                raise ApiError(
                    body_error.get("message") or "Unknown error",
                    status_code=500,
                    error_type=body_error.get("type"),
                    error_code=body_error.get("code"),
                )

            ai_logger.info("Completion request succeeded", extra={
                "attempt": attempt + 1,
                "model": data.get("model"),
                "usage": data.get("usage"),
                "execution_time_ms": elapsed_ms
            })
            return data

        # Only reachable with max_attempts < 1
        raise NetworkError(f"Failed to make API request after {self.max_attempts} attempts") from last_error

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = {}

        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            error = {}

        message = error.get("message") or f"HTTP {response.status_code}: {response.reason_phrase}"
        return ApiError(
            message,
            status_code=response.status_code,
            error_type=error.get("type"),
            error_code=error.get("code"),
        )

    def parse_response(self, response: Dict[str, Any], schema: JsonSchema) -> Dict[str, Any]:
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ParsingError("Invalid API response: no choices returned")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            raise ParsingError("Invalid API response: no message content")

        try:
            parsed = json.loads(content)
        except (TypeError, ValueError) as e:
            raise ParsingError(f"Failed to parse response JSON: {e}") from e

        validate_against_schema(parsed, schema)
        return parsed


def validate_against_schema(data: Any, schema: JsonSchema) -> None:
    """Check required keys and, when disallowed, unexpected keys"""
    if not isinstance(data, dict):
        raise ValidationError("Response is not an object")

    contract = schema.schema_
    for prop in contract.required:
        if prop not in data:
            raise ValidationError(f"Missing required property: {prop}", details={
                "expected": list(contract.required),
                "received": list(data.keys())
            })

    if contract.additionalProperties is False:
        for key in data:
            if key not in contract.properties:
                raise ValidationError(f"Unexpected property: {key}", details={
                    "allowed_properties": list(contract.properties.keys())
                })
