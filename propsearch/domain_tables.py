"""
propsearch/domain_tables.py

Static domain tables for the search engine:
- Property types, operations and currencies accepted by the API
- Price domain per currency
- Numeric domain and predefined option set per advanced filter field

Pure Python - no FastAPI imports. Tables are built once at import time and
exposed read-only (MappingProxyType / frozenset / frozen dataclasses).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple


# ============================================================================
# Enumerations
# ============================================================================

class PropertyType(str, Enum):
    CASA = "Casa"
    DEPARTAMENTO = "Departamento"


class Operation(str, Enum):
    VENTA = "Venta"
    ARRIENDO = "Arriendo"


class Currency(str, Enum):
    CLP = "CLP"
    CLF = "CLF"  # UF
    USD = "USD"


class FilterField(str, Enum):
    DORMITORIOS = "dormitorios"
    BANOS = "banos"
    SUPERFICIE_TOTAL = "superficieTotal"
    SUPERFICIE_UTIL = "superficieUtil"
    ESTACIONAMIENTOS = "estacionamientos"


DEFAULT_CURRENCY = Currency.CLF

# maxPaginas is clamped, never rejected for being out of range
DEFAULT_MAX_PAGES = 3
MIN_MAX_PAGES = 1
MAX_MAX_PAGES = 10


# ============================================================================
# Domains
# ============================================================================

@dataclass(frozen=True)
class NumericDomain:
    """Inclusive [low, high] bounds."""
    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def describe(self) -> str:
        return f"{_fmt(self.low)} y {_fmt(self.high)}"


@dataclass(frozen=True)
class FilterSpec:
    """Domain, option labels and query-string parse kind of one filter field."""
    field: FilterField
    domain: NumericDomain
    options: Tuple[str, ...]
    integer: bool
    label: str
    unit: str = ""

    @property
    def option_set(self) -> FrozenSet[str]:
        return frozenset(self.options)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


PRICE_DOMAINS: Mapping[Currency, NumericDomain] = MappingProxyType({
    Currency.CLP: NumericDomain(1_000_000, 5_000_000_000),
    Currency.CLF: NumericDomain(50, 20_000),
    Currency.USD: NumericDomain(50_000, 5_000_000),
})

FILTER_SPECS: Mapping[FilterField, FilterSpec] = MappingProxyType({
    FilterField.DORMITORIOS: FilterSpec(
        FilterField.DORMITORIOS,
        NumericDomain(0, 10),
        ("0", "1", "2", "3", "4", "5", "6+"),
        integer=True,
        label="Número de dormitorios",
    ),
    FilterField.BANOS: FilterSpec(
        FilterField.BANOS,
        NumericDomain(1, 10),
        ("1", "2", "3", "4", "5+"),
        integer=True,
        label="Número de baños",
    ),
    FilterField.SUPERFICIE_TOTAL: FilterSpec(
        FilterField.SUPERFICIE_TOTAL,
        NumericDomain(20, 2000),
        ("0-150", "150-300", "300-450", "450-600", "600+"),
        integer=False,
        label="Superficie total",
        unit="m²",
    ),
    FilterField.SUPERFICIE_UTIL: FilterSpec(
        FilterField.SUPERFICIE_UTIL,
        NumericDomain(15, 1500),
        ("0-50", "50-100", "100-150", "150-200", "200+"),
        integer=False,
        label="Superficie útil",
        unit="m²",
    ),
    FilterField.ESTACIONAMIENTOS: FilterSpec(
        FilterField.ESTACIONAMIENTOS,
        NumericDomain(0, 10),
        ("0", "1", "2", "3", "4+"),
        integer=True,
        label="Número de estacionamientos",
    ),
})

# Wire names, in declaration order
CURRENCY_CODES: Tuple[str, ...] = tuple(c.value for c in Currency)
FILTER_FIELD_NAMES: Tuple[str, ...] = tuple(f.value for f in FilterField)


def price_domain(currency: Currency) -> NumericDomain:
    return PRICE_DOMAINS[currency]


def filter_spec(field: FilterField) -> FilterSpec:
    return FILTER_SPECS[field]


def describe_filters() -> dict[str, str]:
    """Human-readable description per filter, e.g. 'Número de dormitorios (0-10)'."""
    out = {}
    for field, spec in FILTER_SPECS.items():
        unit = f" en {spec.unit}" if spec.unit else ""
        out[field.value] = f"{spec.label}{unit} ({_fmt(spec.domain.low)}-{_fmt(spec.domain.high)})"
    return out
