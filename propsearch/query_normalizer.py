"""
propsearch/query_normalizer.py

Folds the flattened query-string encoding used by GET searches into the
same body shape the POST endpoint receives:

    ?tipo=Casa&dormitoriosMin=2&dormitoriosMax=4&banosOpcion=2
        -> {"tipo": "Casa", "filtros": {"dormitorios": {"minimo": 2, "maximo": 4},
                                        "banos": {"opcion": "2"}}}

Numbers are parsed here but never validated; a value that does not parse is
passed through as the raw string so the validators reject it with a proper
field-attributed error.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Mapping, Optional

try:
    from propsearch.domain_tables import FILTER_SPECS
except ModuleNotFoundError:
    from domain_tables import FILTER_SPECS


SUFFIX_MIN = "Min"
SUFFIX_MAX = "Max"
SUFFIX_OPTION = "Opcion"

SCALAR_KEYS = ("tipo", "operacion", "ubicacion", "moneda")


def _present(value: Optional[str]) -> bool:
    # "0" is a real bound: only missing or blank values count as absent
    return value is not None and str(value).strip() != ""


def parse_int(raw: str) -> Any:
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        return raw


def parse_float(raw: str) -> Any:
    text = raw.strip()
    try:
        number = float(text)
    except ValueError:
        return raw
    # "nan", "inf" and overlong digit strings stay raw for the validators to reject
    return number if math.isfinite(number) else raw


def _maybe(params: Mapping[str, str], key: str, parse: Callable[[str], Any]) -> Any:
    value = params.get(key)
    if not _present(value):
        return None
    return parse(value)


def build_filters_from_query(params: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    """Collect <field>Min / <field>Max / <field>Opcion groups into a filtros dict."""
    filtros: Dict[str, Dict[str, Any]] = {}

    for field, spec in FILTER_SPECS.items():
        name = field.value
        raw_min = params.get(name + SUFFIX_MIN)
        raw_max = params.get(name + SUFFIX_MAX)
        raw_option = params.get(name + SUFFIX_OPTION)

        if not (_present(raw_min) or _present(raw_max) or _present(raw_option)):
            continue

        parse = parse_int if spec.integer else parse_float
        entry: Dict[str, Any] = {}
        if _present(raw_option):
            entry["opcion"] = raw_option.strip()
        if _present(raw_min):
            entry["minimo"] = parse(raw_min)
        if _present(raw_max):
            entry["maximo"] = parse(raw_max)
        filtros[name] = entry

    return filtros


def normalize_query(params: Mapping[str, str]) -> Dict[str, Any]:
    """
    Turn GET query parameters into a POST-shaped search body.

    Args:
        params: query parameters (Starlette QueryParams or a plain dict)

    Returns:
        New dict; keys whose value is absent are left out so the pipeline
        treats them exactly like a JSON body that omits them.
    """
    body: Dict[str, Any] = {}

    for key in SCALAR_KEYS:
        value = params.get(key)
        if _present(value):
            body[key] = value.strip()

    max_pages = _maybe(params, "maxPaginas", parse_int)
    if max_pages is not None:
        body["maxPaginas"] = max_pages

    for key in ("precioMinimo", "precioMaximo"):
        value = _maybe(params, key, parse_float)
        if value is not None:
            body[key] = value

    filtros = build_filters_from_query(params)
    if filtros:
        body["filtros"] = filtros

    return body


def flatten_filters(filtros: Mapping[str, Mapping[str, Any]]) -> Dict[str, str]:
    """Inverse of build_filters_from_query: filtros dict -> query-string keys."""
    flat: Dict[str, str] = {}
    for name, entry in filtros.items():
        if entry.get("minimo") is not None:
            flat[name + SUFFIX_MIN] = str(entry["minimo"])
        if entry.get("maximo") is not None:
            flat[name + SUFFIX_MAX] = str(entry["maximo"])
        if entry.get("opcion") is not None:
            flat[name + SUFFIX_OPTION] = str(entry["opcion"])
    return flat
