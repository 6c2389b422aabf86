# ---------------------------------------------------------
# propsearch/main.py
# Property Search API
#
# Run: uvicorn propsearch.main:app --reload (from repo root)
#
# - FastAPI app + CORS
# - /search, /api/search/properties : validated property search (POST body / GET query)
# - /api/search/info                : accepted parameters and value domains
# - /health                         : liveness
# - Error handlers: every failure uses the same JSON envelope
# ---------------------------------------------------------

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

try:
    from propsearch.config import CORS_ORIGINS, INCLUDE_ERROR_DETAILS, IS_DEV, IS_PROD
    from propsearch.errors import AppError, ValidationError, format_error_response, status_for
    from propsearch.routes_search import SERVICE_VERSION, router as search_router
except ModuleNotFoundError:
    from config import CORS_ORIGINS, INCLUDE_ERROR_DETAILS, IS_DEV, IS_PROD
    from errors import AppError, ValidationError, format_error_response, status_for
    from routes_search import SERVICE_VERSION, router as search_router


# ---------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------
app = FastAPI(title="Property Search API", version=SERVICE_VERSION)

# CORS configuration from config module
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(search_router)


# ---------------------------------------------------------
# Error handlers
# ---------------------------------------------------------

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        print(f"[SEARCH_ERROR] {request.method} {request.url.path}: {exc.codigo} {exc.message}"
              + (f" ({exc.original_error!r})" if getattr(exc, "original_error", None) else ""))
    return JSONResponse(
        status_code=status_for(exc),
        content=format_error_response(exc, include_details=INCLUDE_ERROR_DETAILS),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed JSON bodies never reach the pipeline; report them in the same envelope
    error = ValidationError("El cuerpo de la solicitud no es un JSON válido")
    if IS_DEV:
        print(f"[SEARCH] {request.method} {request.url.path} rejected before validation: {exc.errors()}")
    return JSONResponse(
        status_code=status_for(error),
        content=format_error_response(error, include_details=INCLUDE_ERROR_DETAILS),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    print(f"[SEARCH_ERROR] Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=format_error_response(exc, include_details=INCLUDE_ERROR_DETAILS),
    )


# ---------------------------------------------------------
# Health
# ---------------------------------------------------------

@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


if IS_DEV:
    print(f"[STARTUP] Property Search API v{SERVICE_VERSION} ready")
