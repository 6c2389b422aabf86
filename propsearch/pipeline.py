"""
propsearch/pipeline.py

Search pipeline: validate raw input, build the canonical SearchRequest and
hand it to the search executor.

    body -> validate_search_params
         -> validate_price_filters    (only if a price key was sent)
         -> validate_advanced_filters (only if filtros is non-empty)
         -> SearchRequest
         -> executor.execute(...)

The first ValidationError aborts the whole pipeline; nothing partial is
built or sent to the executor. GET requests enter through
query_normalizer.normalize_query() and then follow the exact same path.
"""

from __future__ import annotations

import math
import time
from typing import Any, Dict, Mapping

try:
    from propsearch.domain_tables import DEFAULT_MAX_PAGES, MAX_MAX_PAGES, MIN_MAX_PAGES
    from propsearch.errors import AppError, SearchError, ValidationError
    from propsearch.executor import SearchExecutor
    from propsearch.models import SearchRequest
    from propsearch.validators import (
        parse_number,
        validate_advanced_filters,
        validate_price_filters,
        validate_search_params,
    )
except ModuleNotFoundError:
    from domain_tables import DEFAULT_MAX_PAGES, MAX_MAX_PAGES, MIN_MAX_PAGES
    from errors import AppError, SearchError, ValidationError
    from executor import SearchExecutor
    from models import SearchRequest
    from validators import (
        parse_number,
        validate_advanced_filters,
        validate_price_filters,
        validate_search_params,
    )


def resolve_max_pages(value: Any) -> int:
    """None -> default (3); any integral number is clamped into [1, 10]."""
    if value is None:
        return DEFAULT_MAX_PAGES
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            pass
    # Exact ints clamp without a float conversion, however large
    if isinstance(value, int) and not isinstance(value, bool):
        return max(MIN_MAX_PAGES, min(MAX_MAX_PAGES, value))
    number = parse_number(value)
    if number is None or not number.is_integer():
        raise ValidationError("El parámetro maxPaginas debe ser un número entero", "maxPaginas")
    return max(MIN_MAX_PAGES, min(MAX_MAX_PAGES, int(number)))


PRICE_KEYS = ("precioMinimo", "precioMaximo", "moneda")


def has_price_filter(body: Mapping[str, Any]) -> bool:
    """True when any price key is sent; moneda alone still gets its code checked."""
    return any(body.get(key) is not None for key in PRICE_KEYS)


def build_search_request(body: Any) -> SearchRequest:
    """Validate a POST-shaped body and return the canonical SearchRequest."""
    if not isinstance(body, Mapping):
        raise ValidationError("El cuerpo de la solicitud debe ser un objeto JSON")

    tipo, operacion, ubicacion = validate_search_params(
        body.get("tipo"), body.get("operacion"), body.get("ubicacion")
    )

    rango_precio = None
    if has_price_filter(body):
        price_range = validate_price_filters(
            body.get("precioMinimo"), body.get("precioMaximo"), body.get("moneda")
        )
        if price_range.minimo is not None or price_range.maximo is not None:
            rango_precio = price_range

    filtros = None
    raw_filters = body.get("filtros")
    if raw_filters is not None and not (isinstance(raw_filters, Mapping) and len(raw_filters) == 0):
        filtros = validate_advanced_filters(raw_filters)

    return SearchRequest(
        tipo=tipo,
        operacion=operacion,
        ubicacion=ubicacion,
        max_paginas=resolve_max_pages(body.get("maxPaginas")),
        rango_precio=rango_precio,
        filtros=filtros,
    )


def _json_safe(value: Any) -> Any:
    # NaN / Infinity (accepted by the JSON body parser) cannot be written back out
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


def echo_parameters(body: Any) -> Dict[str, Any]:
    """Best-effort copy of the client's input for error envelopes."""
    if not isinstance(body, Mapping):
        return {}
    keys = ("tipo", "operacion", "ubicacion", "maxPaginas", "precioMinimo", "precioMaximo", "moneda")
    echoed = {k: _json_safe(body[k]) for k in keys if k in body}
    if isinstance(body.get("filtros"), Mapping):
        echoed["filtros"] = list(body["filtros"].keys())
    return echoed


async def execute_search(request: SearchRequest, executor: SearchExecutor) -> Dict[str, Any]:
    """Run the executor and wrap the result in the success envelope."""
    started = time.perf_counter()
    try:
        result = await executor.execute(
            request.tipo,
            request.operacion,
            request.ubicacion,
            request.max_paginas,
            request.rango_precio,
            request.filtros,
        )
    except AppError:
        raise
    except Exception as e:
        raise SearchError(search_params=request.to_dict(), original_error=e) from e
    elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

    data = list(result.get("data") or [])
    metadata = dict(result.get("metadata") or {})
    metadata["parametros"] = request.to_dict()
    metadata["estadisticas"] = {
        "totalPropiedades": len(data),
        "paginasProcesadas": metadata.get("paginasProcesadas", 1 if data else 0),
        "tiempoRespuestaMs": elapsed_ms,
    }

    return {
        "success": True,
        "data": data,
        "metadata": metadata,
    }


async def run_search(body: Any, executor: SearchExecutor) -> Dict[str, Any]:
    """Full pipeline for one inbound call."""
    request = build_search_request(body)
    return await execute_search(request, executor)
