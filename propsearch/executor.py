"""
propsearch/executor.py

Search executor contract plus the built-in sample executor.

The pipeline only talks to a SearchExecutor. Real portal adapters live
outside this package; until one is configured the API serves deterministic
sample listings so clients and tests can exercise the full request flow.
"""

from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional, Protocol

try:
    from propsearch.config import SAMPLE_RESULTS_PER_LOCATION
    from propsearch.domain_tables import Currency, Operation, PropertyType
    from propsearch.errors import now_iso
    from propsearch.models import FilterEntry, FiltersMap, PriceRange
except ModuleNotFoundError:
    from config import SAMPLE_RESULTS_PER_LOCATION
    from domain_tables import Currency, Operation, PropertyType
    from errors import now_iso
    from models import FilterEntry, FiltersMap, PriceRange


RESULTS_PER_PAGE = 20

# Rough conversion used only to price sample listings in every currency
CLF_TO_CLP = 37_000
CLF_TO_USD = 40


class SearchExecutor(Protocol):
    async def execute(
        self,
        tipo: PropertyType,
        operacion: Operation,
        ubicacion: str,
        max_paginas: int,
        rango_precio: Optional[PriceRange],
        filtros: Optional[FiltersMap],
    ) -> Dict[str, Any]:
        """Return {"data": [...listings], "metadata": {...}}."""
        ...


# ---------------------------------------------------------
# Filter matching
# ---------------------------------------------------------

def _option_matches(option: str, value: float) -> bool:
    """'3' exact, '6+' open-ended, '300-450' bucket (inclusive low, exclusive high)."""
    if option.endswith("+"):
        return value >= float(option[:-1])
    if "-" in option:
        low, high = option.split("-", 1)
        return float(low) <= value < float(high)
    return value == float(option)


def entry_matches(entry: FilterEntry, value: float) -> bool:
    """opcion wins over minimo/maximo when a client sends both."""
    if entry.opcion is not None:
        return _option_matches(entry.opcion, value)
    if entry.minimo is not None and value < entry.minimo:
        return False
    if entry.maximo is not None and value > entry.maximo:
        return False
    return True


def price_in_currency(price_clf: float, currency: Currency) -> float:
    if currency == Currency.CLP:
        return price_clf * CLF_TO_CLP
    if currency == Currency.USD:
        return price_clf * CLF_TO_USD
    return price_clf


# ---------------------------------------------------------
# Sample executor
# ---------------------------------------------------------

class SampleSearchExecutor:
    """Deterministic sample listings per (tipo, operacion, ubicacion)."""

    def __init__(self, results_per_location: int = SAMPLE_RESULTS_PER_LOCATION):
        self.results_per_location = results_per_location

    def _listings(self, tipo: PropertyType, operacion: Operation, ubicacion: str) -> List[Dict[str, Any]]:
        seed = f"{tipo.value}|{operacion.value}|{ubicacion.lower()}"
        listings = []
        for i in range(self.results_per_location):
            digest = hashlib.sha256(f"{seed}|{i}".encode()).digest()
            dormitorios = digest[0] % 7
            banos = 1 + digest[1] % 5
            superficie_util = 30 + (digest[2] * 4) % 400
            superficie_total = superficie_util + (digest[3] * 3) % 600
            if tipo == PropertyType.DEPARTAMENTO:
                superficie_total = superficie_util + digest[3] % 30
            estacionamientos = digest[4] % 4
            if operacion == Operation.VENTA:
                precio_clf = 1_500 + superficie_util * 45 + (digest[5] % 50) * 20
            else:
                precio_clf = 10 + superficie_util * 0.12 + digest[5] % 10

            listings.append({
                "id": digest[:6].hex(),
                "titulo": f"{tipo.value} en {ubicacion} - Resultado {i + 1}",
                "precio": round(precio_clf, 1),
                "moneda": Currency.CLF.value,
                "ubicacion": ubicacion,
                "dormitorios": dormitorios,
                "banos": banos,
                "superficieTotal": superficie_total,
                "superficieUtil": superficie_util,
                "estacionamientos": estacionamientos,
                "link": f"https://ejemplo.com/propiedad/{digest[:6].hex()}",
            })
        return listings

    @staticmethod
    def _matches(listing: Dict[str, Any], rango_precio: Optional[PriceRange], filtros: Optional[FiltersMap]) -> bool:
        if rango_precio is not None:
            precio = price_in_currency(listing["precio"], rango_precio.moneda)
            if rango_precio.minimo is not None and precio < rango_precio.minimo:
                return False
            if rango_precio.maximo is not None and precio > rango_precio.maximo:
                return False
        for field, entry in (filtros or {}).items():
            if not entry_matches(entry, listing[field.value]):
                return False
        return True

    async def execute(
        self,
        tipo: PropertyType,
        operacion: Operation,
        ubicacion: str,
        max_paginas: int,
        rango_precio: Optional[PriceRange],
        filtros: Optional[FiltersMap],
    ) -> Dict[str, Any]:
        matching = [
            listing for listing in self._listings(tipo, operacion, ubicacion)
            if self._matches(listing, rango_precio, filtros)
        ]

        data = []
        for position, listing in enumerate(matching[: max_paginas * RESULTS_PER_PAGE]):
            pagina = position // RESULTS_PER_PAGE + 1
            data.append({**listing, "posicion": position % RESULTS_PER_PAGE + 1, "pagina": pagina})

        pages = (len(data) + RESULTS_PER_PAGE - 1) // RESULTS_PER_PAGE
        return {
            "data": data,
            "metadata": {
                "fuente": "sample",
                "tipo": tipo.value,
                "operacion": operacion.value,
                "ubicacion": ubicacion,
                "totalPropiedades": len(data),
                "paginasProcesadas": max(pages, 1),
                "timestamp": now_iso(),
                "filtrosAplicados": {
                    "precio": rango_precio.to_dict() if rango_precio else None,
                    "avanzados": [f.value for f in filtros] if filtros else [],
                },
            },
        }


EXECUTORS = {
    "sample": SampleSearchExecutor,
}


def build_executor(name: str) -> SearchExecutor:
    try:
        return EXECUTORS[name]()
    except KeyError:
        raise RuntimeError(f"Unknown SEARCH_EXECUTOR '{name}'. Available: {', '.join(EXECUTORS)}")
