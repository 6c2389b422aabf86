"""
propsearch/schemas_search.py

Pydantic schemas for the search API responses.

Request bodies are deliberately NOT modelled here: search input is weakly
typed and goes through propsearch.validators so every failure gets the same
field-attributed error envelope.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchStatistics(BaseModel):
    totalPropiedades: int = Field(0, description="Listings returned")
    paginasProcesadas: int = Field(0, description="Result pages processed by the executor")
    tiempoRespuestaMs: float = Field(0.0, description="Executor wall time in milliseconds")


class SearchMetadata(BaseModel):
    """Executor metadata plus the echoed canonical request and statistics."""
    model_config = ConfigDict(extra="allow")

    parametros: Dict[str, Any] = Field(default_factory=dict, description="Canonical search parameters")
    estadisticas: SearchStatistics = Field(default_factory=SearchStatistics)


class SearchResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Listings")
    metadata: SearchMetadata


class ErrorResponse(BaseModel):
    success: bool = False
    error: str = Field(..., description="Human-readable message (Spanish)")
    codigo: str = Field(..., description="Error kind, e.g. VALIDATION_ERROR")
    timestamp: str = Field(..., description="ISO-8601 UTC")
    parametros: Dict[str, Any] = Field(default_factory=dict, description="Echoed client input")
    ayuda: Dict[str, Any] = Field(default_factory=dict)
    campo: Optional[str] = Field(None, description="Offending parameter, when known")


class PriceDomainInfo(BaseModel):
    minimo: float
    maximo: float


class FilterInfo(BaseModel):
    descripcion: str
    minimo: float
    maximo: float
    opciones: List[str]


class SearchInfoResponse(BaseModel):
    success: bool = True
    servicio: str
    version: str
    parametros_busqueda: Dict[str, List[str]]
    tipos_propiedad: List[str]
    operaciones: List[str]
    monedas_precio: Dict[str, PriceDomainInfo]
    filtros_avanzados: Dict[str, FilterInfo]
    max_paginas: Dict[str, int]
    endpoints: Dict[str, str]
    ejemplos: Dict[str, Any]
    timestamp: str
