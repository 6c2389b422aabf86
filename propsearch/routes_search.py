"""
propsearch/routes_search.py

Property search endpoints.

- POST /search, POST /api/search/properties : search with a JSON body
- GET  /search, GET  /api/search/properties : same search, flattened query string
- GET  /api/search/info                     : parameters, domains and examples

Both search methods run the identical pipeline; GET input is first folded
into the POST body shape by normalize_query().
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request

try:
    from propsearch.config import IS_DEV, SEARCH_EXECUTOR
    from propsearch.domain_tables import (
        DEFAULT_MAX_PAGES,
        FILTER_SPECS,
        MAX_MAX_PAGES,
        MIN_MAX_PAGES,
        PRICE_DOMAINS,
        Operation,
        PropertyType,
        describe_filters,
    )
    from propsearch.errors import AppError, now_iso
    from propsearch.executor import SearchExecutor, build_executor
    from propsearch.pipeline import echo_parameters, run_search
    from propsearch.query_normalizer import normalize_query
    from propsearch.schemas_search import ErrorResponse, SearchInfoResponse, SearchResponse
except ModuleNotFoundError:
    from config import IS_DEV, SEARCH_EXECUTOR
    from domain_tables import (
        DEFAULT_MAX_PAGES,
        FILTER_SPECS,
        MAX_MAX_PAGES,
        MIN_MAX_PAGES,
        PRICE_DOMAINS,
        Operation,
        PropertyType,
        describe_filters,
    )
    from errors import AppError, now_iso
    from executor import SearchExecutor, build_executor
    from pipeline import echo_parameters, run_search
    from query_normalizer import normalize_query
    from schemas_search import ErrorResponse, SearchInfoResponse, SearchResponse


SERVICE_VERSION = "2.0.0"

router = APIRouter(tags=["search"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid search parameters"},
    500: {"model": ErrorResponse, "description": "Search executor or internal failure"},
}


# ---------------------------------------------------------
# Executor dependency
# ---------------------------------------------------------

_executor: Optional[SearchExecutor] = None


def get_search_executor() -> SearchExecutor:
    """
    FastAPI dependency returning the configured executor (built once).
    Tests swap it with app.dependency_overrides[get_search_executor].
    """
    global _executor
    if _executor is None:
        _executor = build_executor(SEARCH_EXECUTOR)
    return _executor


async def _search(body: Any, executor: SearchExecutor, source: str) -> Dict[str, Any]:
    try:
        result = await run_search(body, executor)
    except AppError as e:
        e.parametros = echo_parameters(body)
        if IS_DEV:
            print(f"[SEARCH] {source} rejected: codigo={e.codigo}, "
                  f"campo={getattr(e, 'field', None)}, error={e.message!r}")
        raise

    if IS_DEV:
        params = result["metadata"]["parametros"]
        print(f"[SEARCH] {source} ok: tipo={params['tipo']}, operacion={params['operacion']}, "
              f"ubicacion={params['ubicacion']!r}, filtros={list(params.get('filtros', {}))}, "
              f"results={len(result['data'])}")
    return result


# ---------------------------------------------------------
# Search endpoints
# ---------------------------------------------------------

@router.post("/search", response_model=SearchResponse, responses=ERROR_RESPONSES)
@router.post("/api/search/properties", response_model=SearchResponse, responses=ERROR_RESPONSES)
async def search_properties(
    payload: Any = Body(None),
    executor: SearchExecutor = Depends(get_search_executor),
) -> Dict[str, Any]:
    """
    Search properties with a JSON body.

    Body:
        tipo, operacion, ubicacion (required), maxPaginas, precioMinimo,
        precioMaximo, moneda, filtros: {campo: {minimo?, maximo?, opcion?}}

    Raises:
        ValidationError(400): first invalid parameter (see "campo")
        SearchError(500): executor failure
    """
    return await _search(payload, executor, "POST")


@router.get("/search", response_model=SearchResponse, responses=ERROR_RESPONSES)
@router.get("/api/search/properties", response_model=SearchResponse, responses=ERROR_RESPONSES)
async def search_properties_get(
    request: Request,
    executor: SearchExecutor = Depends(get_search_executor),
) -> Dict[str, Any]:
    """
    Search properties with query parameters.

    Advanced filters use <campo>Min / <campo>Max / <campo>Opcion, e.g.
    ?tipo=Casa&operacion=Venta&ubicacion=Las%20Condes&dormitoriosMin=2&dormitoriosMax=4
    """
    body = normalize_query(request.query_params)
    return await _search(body, executor, "GET")


# ---------------------------------------------------------
# Service info
# ---------------------------------------------------------

@router.get("/api/search/info", response_model=SearchInfoResponse)
def search_info() -> Dict[str, Any]:
    """Describe accepted parameters, value domains and example requests."""
    descriptions = describe_filters()
    return {
        "success": True,
        "servicio": "Búsqueda de Propiedades",
        "version": SERVICE_VERSION,
        "parametros_busqueda": {
            "requeridos": ["tipo", "operacion", "ubicacion"],
            "opcionales": ["maxPaginas", "precioMinimo", "precioMaximo", "moneda", "filtros"],
        },
        "tipos_propiedad": [t.value for t in PropertyType],
        "operaciones": [o.value for o in Operation],
        "monedas_precio": {
            currency.value: {"minimo": domain.low, "maximo": domain.high}
            for currency, domain in PRICE_DOMAINS.items()
        },
        "filtros_avanzados": {
            field.value: {
                "descripcion": descriptions[field.value],
                "minimo": spec.domain.low,
                "maximo": spec.domain.high,
                "opciones": list(spec.options),
            }
            for field, spec in FILTER_SPECS.items()
        },
        "max_paginas": {"minimo": MIN_MAX_PAGES, "maximo": MAX_MAX_PAGES, "defecto": DEFAULT_MAX_PAGES},
        "endpoints": {
            "POST /api/search/properties": "Búsqueda con filtros en body (alias: POST /search)",
            "GET /api/search/properties": "Búsqueda con filtros en query (alias: GET /search)",
            "GET /api/search/info": "Información del servicio",
        },
        "ejemplos": {
            "busqueda_basica": {
                "tipo": "Casa",
                "operacion": "Venta",
                "ubicacion": "Las Condes",
                "maxPaginas": 2,
            },
            "busqueda_con_rangos": {
                "tipo": "Casa",
                "operacion": "Venta",
                "ubicacion": "Las Condes",
                "precioMinimo": 3000,
                "precioMaximo": 8000,
                "moneda": "CLF",
                "filtros": {
                    "dormitorios": {"minimo": 2, "maximo": 4},
                    "banos": {"minimo": 2, "maximo": 3},
                    "superficieTotal": {"minimo": 300, "maximo": 750},
                    "superficieUtil": {"minimo": 150, "maximo": 300},
                    "estacionamientos": {"minimo": 1, "maximo": 2},
                },
            },
            "busqueda_con_opciones": {
                "tipo": "Departamento",
                "operacion": "Venta",
                "ubicacion": "Providencia",
                "filtros": {
                    "dormitorios": {"opcion": "3"},
                    "banos": {"opcion": "2"},
                    "superficieTotal": {"opcion": "300-450"},
                    "estacionamientos": {"opcion": "1"},
                },
            },
            "busqueda_get": "/api/search/properties?tipo=Casa&operacion=Venta"
                            "&ubicacion=Las%20Condes&dormitoriosMin=2&dormitoriosMax=4",
        },
        "timestamp": now_iso(),
    }
