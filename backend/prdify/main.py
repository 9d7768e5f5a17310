# backend/prdify/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .database import engine
from . import models
from .api import documents, questions, summary, content
from .services.completion_types import CompletionConfigurationError
from .services.errors import ErrorKind, PrdifyError
from .utils.logging import api_logger

# Create all tables on startup
models.Base.metadata.create_all(bind=engine)

# Client-correctable failures are 4xx, provider and store failures are 5xx
STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 502,
    ErrorKind.PARSING: 502,
    ErrorKind.NETWORK: 502,
    ErrorKind.API: 502,
    ErrorKind.AI_GENERATION: 502,
    ErrorKind.UPDATE: 500,
    ErrorKind.FETCHING: 500,
    ErrorKind.ROUND_CALCULATION: 500,
}

app = FastAPI(title="PRDify API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your actual frontend URL
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(documents.router)
app.include_router(questions.router)
app.include_router(summary.router)
app.include_router(content.router)


@app.exception_handler(PrdifyError)
async def prdify_error_handler(request: Request, exc: PrdifyError):
    status_code = STATUS_BY_KIND[exc.kind]
    log = api_logger.warning if status_code < 500 else api_logger.error
    log("Request failed", extra={
        "path": request.url.path,
        "error_kind": exc.kind.value,
        "error_type": type(exc).__name__,
        "error": exc.message
    })

    body = {"error": exc.message, "kind": exc.kind.value}
    if status_code < 500 and exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(CompletionConfigurationError)
async def configuration_error_handler(request: Request, exc: CompletionConfigurationError):
    api_logger.critical("Completion client is not configured", extra={
        "path": request.url.path,
        "error": str(exc)
    })
    return JSONResponse(status_code=500, content={"error": "AI service is not configured"})


@app.get("/")
async def root():
    return {"message": "PRDify API is running"}
