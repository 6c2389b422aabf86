"""
propsearch/errors.py

Application error kinds and the failure response envelope.

Every error carries the HTTP status it maps to. The FastAPI handlers in
main.py turn these into JSON responses via format_error_response().
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AppError(Exception):
    """Base application error (operational, safe to show to clients)."""
    status_code: int = 500
    codigo: str = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.timestamp = now_iso()
        # Echoed client input, attached by the route that caught the error
        self.parametros: Optional[Dict[str, Any]] = None


class ValidationError(AppError):
    """Raised on the first invalid search parameter. Maps to HTTP 400."""
    status_code = 400
    codigo = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class SearchError(AppError):
    """Raised when the search executor fails. Maps to HTTP 500."""
    status_code = 500
    codigo = "SEARCH_ERROR"

    def __init__(
        self,
        message: str = "Error durante la búsqueda de propiedades",
        search_params: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.search_params = search_params
        self.original_error = original_error


# ---------------------------------------------------------
# Failure envelope
# ---------------------------------------------------------

SEARCH_HELP: Dict[str, Any] = {
    "requeridos": ["tipo", "operacion", "ubicacion"],
    "opcionales": ["maxPaginas", "precioMinimo", "precioMaximo", "moneda", "filtros"],
    "documentacion": "GET /api/search/info",
}


def format_error_response(
    error: BaseException,
    parametros: Optional[Dict[str, Any]] = None,
    include_details: bool = False,
) -> Dict[str, Any]:
    """
    Build the failure envelope for any error.

    Unknown (non-AppError) exceptions get a generic message so internals are
    not leaked; include_details adds the exception type and text for dev.
    """
    if isinstance(error, AppError):
        message = error.message
        codigo = error.codigo
        timestamp = error.timestamp
    else:
        message = "Error interno del servidor"
        codigo = AppError.codigo
        timestamp = now_iso()

    response: Dict[str, Any] = {
        "success": False,
        "error": message,
        "codigo": codigo,
        "timestamp": timestamp,
        "parametros": parametros if parametros is not None else (getattr(error, "parametros", None) or {}),
        "ayuda": SEARCH_HELP,
    }

    if isinstance(error, ValidationError) and error.field:
        response["campo"] = error.field

    if include_details:
        response["tipoError"] = type(error).__name__
        if not isinstance(error, AppError):
            response["detalle"] = str(error)
        elif isinstance(error, SearchError) and error.original_error is not None:
            response["detalle"] = str(error.original_error)

    return response


def status_for(error: BaseException) -> int:
    if isinstance(error, AppError):
        return error.status_code
    return 500
