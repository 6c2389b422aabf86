"""
propsearch/models.py

Canonical (validated) search objects handed to the search executor.

These are frozen dataclasses: once the pipeline builds a SearchRequest it is
never mutated. Wire names (tipo, operacion, ...) are produced by to_dict().
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

try:
    from propsearch.domain_tables import Currency, FilterField, Operation, PropertyType
except ModuleNotFoundError:
    from domain_tables import Currency, FilterField, Operation, PropertyType


def _num(value: Optional[float]) -> Optional[float]:
    # 4.0 -> 4 so echoed parameters look like what the client sent
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class FilterEntry:
    """
    One advanced filter constraint.

    Range (minimo/maximo) and option (opcion) may coexist; executors give
    opcion precedence when both are set.
    """
    minimo: Optional[float] = None
    maximo: Optional[float] = None
    opcion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.minimo is not None:
            out["minimo"] = _num(self.minimo)
        if self.maximo is not None:
            out["maximo"] = _num(self.maximo)
        if self.opcion is not None:
            out["opcion"] = self.opcion
        return out


@dataclass(frozen=True)
class PriceRange:
    moneda: Currency
    minimo: Optional[float] = None
    maximo: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "precioMinimo": _num(self.minimo),
            "precioMaximo": _num(self.maximo),
            "moneda": self.moneda.value,
        }


FiltersMap = Mapping[FilterField, FilterEntry]


def freeze_filters(entries: Mapping[FilterField, FilterEntry]) -> FiltersMap:
    return MappingProxyType(dict(entries))


@dataclass(frozen=True)
class SearchRequest:
    """Fully validated search, the only thing the executor ever sees."""
    tipo: PropertyType
    operacion: Operation
    ubicacion: str
    max_paginas: int = 3
    rango_precio: Optional[PriceRange] = None
    filtros: Optional[FiltersMap] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "tipo": self.tipo.value,
            "operacion": self.operacion.value,
            "ubicacion": self.ubicacion,
            "maxPaginas": self.max_paginas,
        }
        if self.rango_precio is not None:
            out.update(self.rango_precio.to_dict())
        if self.filtros:
            out["filtros"] = {field.value: entry.to_dict() for field, entry in self.filtros.items()}
        return out
