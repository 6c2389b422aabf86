"""
propsearch/validators.py

Search parameter validators.

Each validator is a pure function over explicit inputs: it either returns the
canonical value(s) or raises ValidationError on the FIRST violation found.
No shared state, no I/O, no logging (the HTTP boundary logs failures).
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Tuple

try:
    from propsearch.domain_tables import (
        CURRENCY_CODES,
        DEFAULT_CURRENCY,
        FILTER_FIELD_NAMES,
        Currency,
        FilterField,
        Operation,
        PropertyType,
        filter_spec,
        price_domain,
    )
    from propsearch.errors import ValidationError
    from propsearch.models import FilterEntry, FiltersMap, PriceRange, freeze_filters
except ModuleNotFoundError:
    from domain_tables import (
        CURRENCY_CODES,
        DEFAULT_CURRENCY,
        FILTER_FIELD_NAMES,
        Currency,
        FilterField,
        Operation,
        PropertyType,
        filter_spec,
        price_domain,
    )
    from errors import ValidationError
    from models import FilterEntry, FiltersMap, PriceRange, freeze_filters


ENTRY_MEMBERS = ("minimo", "maximo", "opcion")


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a JSON number or numeric string into a finite float.

    Returns None when the value is not numeric. Booleans are rejected even
    though bool is an int subclass.
    """
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


# ---------------------------------------------------------
# Basic parameters
# ---------------------------------------------------------

def validate_search_params(tipo: Any, operacion: Any, ubicacion: Any) -> Tuple[PropertyType, Operation, str]:
    """Check the three mandatory dimensions. Presence first, then membership."""
    if _is_blank(tipo) or _is_blank(operacion) or _is_blank(ubicacion):
        raise ValidationError("Los parámetros tipo, operacion y ubicacion son requeridos")

    try:
        property_type = PropertyType(tipo)
    except ValueError:
        raise ValidationError('El parámetro tipo debe ser "Casa" o "Departamento"', "tipo")

    try:
        operation = Operation(operacion)
    except ValueError:
        raise ValidationError('El parámetro operacion debe ser "Venta" o "Arriendo"', "operacion")

    if not isinstance(ubicacion, str):
        raise ValidationError("El parámetro ubicacion debe ser un texto", "ubicacion")

    return property_type, operation, ubicacion.strip()


# ---------------------------------------------------------
# Price range
# ---------------------------------------------------------

def _check_price(value: Any, currency: Currency, field: str, label: str) -> float:
    number = parse_number(value)
    if number is None:
        raise ValidationError(f"{label} debe ser un número válido", field)

    domain = price_domain(currency)
    if not domain.contains(number):
        raise ValidationError(
            f"{label} debe estar entre {domain.describe()} {currency.value}",
            field,
        )
    return number


def validate_price_filters(precio_minimo: Any, precio_maximo: Any, moneda: Any = None) -> PriceRange:
    """
    Validate an optional price range against the domain of its currency.

    moneda defaults to CLF when absent. Bounds set to None count as absent.
    When both bounds are given the minimum must be strictly lower.
    """
    if moneda is None:
        currency = DEFAULT_CURRENCY
    else:
        try:
            currency = Currency(moneda)
        except ValueError:
            raise ValidationError(
                f"Moneda inválida. Valores válidos: {', '.join(CURRENCY_CODES)}",
                "moneda",
            )

    minimo = None
    maximo = None
    if precio_minimo is not None:
        minimo = _check_price(precio_minimo, currency, "precioMinimo", "Precio mínimo")
    if precio_maximo is not None:
        maximo = _check_price(precio_maximo, currency, "precioMaximo", "Precio máximo")

    if minimo is not None and maximo is not None and minimo >= maximo:
        raise ValidationError(
            "El precio mínimo debe ser menor que el precio máximo",
            "precioMinimo",
        )

    return PriceRange(moneda=currency, minimo=minimo, maximo=maximo)


# ---------------------------------------------------------
# Advanced filters
# ---------------------------------------------------------

def _check_bound(field: FilterField, member: str, value: Any) -> float:
    domain = filter_spec(field).domain
    number = parse_number(value)
    if number is None or not domain.contains(number):
        raise ValidationError(
            f'El {member} del filtro "{field.value}" debe ser un número entre {domain.describe()}',
            "filtros",
        )
    return number


def validate_filter_entry(field: FilterField, entry: Any) -> FilterEntry:
    """Structural and domain checks for a single filter entry."""
    name = field.value

    if not isinstance(entry, Mapping):
        raise ValidationError(f'El filtro "{name}" debe ser un objeto', "filtros")

    present = {m: entry.get(m) for m in ENTRY_MEMBERS if entry.get(m) is not None}
    if not present:
        raise ValidationError(
            f'El filtro "{name}" debe tener "minimo", "maximo" o "opcion"',
            "filtros",
        )

    minimo = _check_bound(field, "minimo", present["minimo"]) if "minimo" in present else None
    maximo = _check_bound(field, "maximo", present["maximo"]) if "maximo" in present else None

    if minimo is not None and maximo is not None and minimo > maximo:
        raise ValidationError(
            f'En el filtro "{name}" el minimo debe ser ≤ maximo '
            f"(minimo={present['minimo']}, maximo={present['maximo']})",
            "filtros",
        )

    opcion = None
    if "opcion" in present:
        opcion = str(present["opcion"])
        spec = filter_spec(field)
        if opcion not in spec.option_set:
            raise ValidationError(
                f'La opción "{opcion}" no es válida para el filtro "{name}". '
                f"Opciones válidas: {', '.join(spec.options)}",
                "filtros",
            )

    return FilterEntry(minimo=minimo, maximo=maximo, opcion=opcion)


def validate_advanced_filters(filtros: Any) -> FiltersMap:
    """
    Validate every (field, entry) pair in client order.

    Returns a read-only FiltersMap keyed by FilterField.
    """
    if not isinstance(filtros, Mapping):
        raise ValidationError("El parámetro filtros debe ser un objeto", "filtros")

    entries: Dict[FilterField, FilterEntry] = {}
    for key, entry in filtros.items():
        try:
            field = FilterField(key)
        except ValueError:
            raise ValidationError(
                f'Filtro "{key}" no es válido. Filtros válidos: {", ".join(FILTER_FIELD_NAMES)}',
                "filtros",
            )
        entries[field] = validate_filter_entry(field, entry)

    return freeze_filters(entries)
