"""
propsearch/test_search_api.py

HTTP tests for the search endpoints:
- POST and GET run the same pipeline and produce the same envelope
- Failure envelope: status, codigo, campo, echoed parametros, ayuda
- Executor failures map to 500
- /api/search/info and /health

Run: pytest propsearch/test_search_api.py -v
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from propsearch.main import app
from propsearch.routes_search import get_search_executor


# ========================================================================
# FIXTURES
# ========================================================================

class FakeExecutor:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def execute(self, tipo, operacion, ubicacion, max_paginas, rango_precio, filtros):
        self.calls.append({
            "tipo": tipo.value,
            "operacion": operacion.value,
            "ubicacion": ubicacion,
            "max_paginas": max_paginas,
            "rango_precio": rango_precio,
            "filtros": dict(filtros) if filtros else None,
        })
        if self.error:
            raise self.error
        return {
            "data": [{"titulo": f"{tipo.value} en {ubicacion}", "pagina": 1}],
            "metadata": {"fuente": "fake", "paginasProcesadas": 1},
        }


@pytest.fixture
def executor():
    fake = FakeExecutor()
    app.dependency_overrides[get_search_executor] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


BASE = {"tipo": "Casa", "operacion": "Venta", "ubicacion": "Las Condes"}


# ========================================================================
# POST
# ========================================================================

class TestPostSearch:

    @pytest.mark.parametrize("path", ["/search", "/api/search/properties"])
    def test_basic_search(self, client, executor, path):
        resp = client.post(path, json=BASE)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["success"] is True
        assert body["data"][0]["titulo"] == "Casa en Las Condes"
        assert body["metadata"]["fuente"] == "fake"
        assert body["metadata"]["parametros"] == {**BASE, "maxPaginas": 3}
        assert body["metadata"]["estadisticas"]["totalPropiedades"] == 1
        assert executor.calls[0]["max_paginas"] == 3
        assert executor.calls[0]["rango_precio"] is None
        assert executor.calls[0]["filtros"] is None

    def test_full_search(self, client, executor):
        resp = client.post("/search", json={
            **BASE,
            "maxPaginas": 2,
            "precioMinimo": 3000,
            "precioMaximo": 8000,
            "moneda": "CLF",
            "filtros": {"dormitorios": {"minimo": 4, "maximo": 5}, "superficieTotal": {"opcion": "300-450"}},
        })
        assert resp.status_code == 200, resp.text
        params = resp.json()["metadata"]["parametros"]
        assert params["precioMinimo"] == 3000
        assert params["moneda"] == "CLF"
        assert params["filtros"] == {
            "dormitorios": {"minimo": 4, "maximo": 5},
            "superficieTotal": {"opcion": "300-450"},
        }

    def test_price_order_error(self, client, executor):
        """Inverted price range returns a 400 envelope and never calls the executor."""
        resp = client.post("/search", json={**BASE, "precioMinimo": 9200, "precioMaximo": 8800, "moneda": "CLF"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["codigo"] == "VALIDATION_ERROR"
        assert body["campo"] == "precioMinimo"
        assert "menor que el precio máximo" in body["error"]
        assert body["parametros"]["precioMinimo"] == 9200
        assert "requeridos" in body["ayuda"]
        assert body["timestamp"]
        assert executor.calls == []

    def test_unknown_option(self, client, executor):
        resp = client.post("/search", json={**BASE, "filtros": {"dormitorios": {"opcion": "7"}}})
        assert resp.status_code == 400
        assert resp.json()["campo"] == "filtros"
        assert resp.json()["parametros"]["filtros"] == ["dormitorios"]

    def test_unknown_currency(self, client, executor):
        resp = client.post("/search", json={**BASE, "precioMaximo": 5000, "moneda": "EUR"})
        assert resp.status_code == 400
        assert resp.json()["campo"] == "moneda"

    def test_missing_required(self, client, executor):
        resp = client.post("/search", json={"tipo": "Casa"})
        assert resp.status_code == 400
        assert "requeridos" in resp.json()["error"]
        assert "campo" not in resp.json()

    def test_non_object_body(self, client, executor):
        resp = client.post("/search", json=["Casa", "Venta"])
        assert resp.status_code == 400
        assert resp.json()["codigo"] == "VALIDATION_ERROR"

    def test_malformed_json(self, client, executor):
        resp = client.post("/search", content=b"{tipo:", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["codigo"] == "VALIDATION_ERROR"


# ========================================================================
# GET
# ========================================================================

class TestGetSearch:

    @pytest.mark.parametrize("path", ["/search", "/api/search/properties"])
    def test_query_filters_normalized(self, client, executor, path):
        resp = client.get(path, params={**BASE, "dormitoriosMin": "2", "dormitoriosMax": "4"})
        assert resp.status_code == 200, resp.text
        assert resp.json()["metadata"]["parametros"]["filtros"] == {"dormitorios": {"minimo": 2, "maximo": 4}}

    def test_get_matches_post(self, client, executor):
        query = {**BASE, "maxPaginas": "2", "precioMinimo": "3000", "banosOpcion": "2",
                 "superficieUtilMin": "150", "superficieUtilMax": "300"}
        body = {**BASE, "maxPaginas": 2, "precioMinimo": 3000,
                "filtros": {"banos": {"opcion": "2"}, "superficieUtil": {"minimo": 150, "maximo": 300}}}
        via_get = client.get("/search", params=query).json()["metadata"]["parametros"]
        via_post = client.post("/search", json=body).json()["metadata"]["parametros"]
        assert via_get == via_post

    def test_zero_min_bound_kept(self, client, executor):
        resp = client.get("/search", params={**BASE, "estacionamientosMin": "0"})
        assert resp.status_code == 200
        assert resp.json()["metadata"]["parametros"]["filtros"] == {"estacionamientos": {"minimo": 0}}

    def test_malformed_number_rejected(self, client, executor):
        resp = client.get("/search", params={**BASE, "dormitoriosMin": "dos"})
        assert resp.status_code == 400
        assert "dormitorios" in resp.json()["error"]

    def test_malformed_price_rejected(self, client, executor):
        resp = client.get("/search", params={**BASE, "precioMinimo": "barato"})
        assert resp.status_code == 400
        assert resp.json()["campo"] == "precioMinimo"

    def test_unknown_currency_alone_rejected(self, client, executor):
        resp = client.get("/search", params={**BASE, "moneda": "EUR"})
        assert resp.status_code == 400
        assert resp.json()["campo"] == "moneda"
        assert executor.calls == []


# ========================================================================
# NON-FINITE AND OVERSIZED NUMBERS
# ========================================================================

HUGE = "9" * 400
BAD_NUMBERS = ["nan", "inf", "1e999", HUGE]
BASE_JSON = '"tipo": "Casa", "operacion": "Venta", "ubicacion": "Las Condes"'


def post_raw(client, extra):
    """POST a hand-written JSON body (NaN / Infinity literals included)."""
    return client.post(
        "/search",
        content=f"{{{BASE_JSON}, {extra}}}".encode(),
        headers={"Content-Type": "application/json"},
    )


class TestOutOfRangeNumbers:

    @pytest.mark.parametrize("raw", BAD_NUMBERS)
    @pytest.mark.parametrize("key", ["precioMinimo", "precioMaximo"])
    def test_get_price_is_400(self, client, executor, key, raw):
        resp = client.get("/search", params={**BASE, key: raw})
        assert resp.status_code == 400, resp.text
        assert resp.json()["campo"] == key
        assert resp.json()["parametros"][key] == raw
        assert executor.calls == []

    @pytest.mark.parametrize("raw", BAD_NUMBERS)
    @pytest.mark.parametrize("key", ["dormitoriosMin", "superficieTotalMax"])
    def test_get_filter_bound_is_400(self, client, executor, key, raw):
        resp = client.get("/search", params={**BASE, key: raw})
        assert resp.status_code == 400, resp.text
        assert resp.json()["campo"] == "filtros"

    def test_get_huge_max_pages_clamped(self, client, executor):
        resp = client.get("/search", params={**BASE, "maxPaginas": HUGE})
        assert resp.status_code == 200, resp.text
        assert executor.calls[0]["max_paginas"] == 10

    @pytest.mark.parametrize("raw", ["nan", "inf", "1e999"])
    def test_get_non_finite_max_pages_is_400(self, client, executor, raw):
        resp = client.get("/search", params={**BASE, "maxPaginas": raw})
        assert resp.status_code == 400, resp.text
        assert resp.json()["campo"] == "maxPaginas"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e999", HUGE])
    def test_post_price_is_400(self, client, executor, literal):
        resp = post_raw(client, f'"precioMinimo": {literal}')
        assert resp.status_code == 400, resp.text
        assert resp.json()["campo"] == "precioMinimo"
        assert executor.calls == []

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "1e999", HUGE])
    def test_post_filter_bound_is_400(self, client, executor, literal):
        resp = post_raw(client, f'"filtros": {{"banos": {{"maximo": {literal}}}}}')
        assert resp.status_code == 400, resp.text
        assert resp.json()["campo"] == "filtros"

    def test_post_huge_max_pages_clamped(self, client, executor):
        resp = post_raw(client, f'"maxPaginas": {HUGE}')
        assert resp.status_code == 200, resp.text
        assert resp.json()["metadata"]["parametros"]["maxPaginas"] == 10

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "1e999"])
    def test_post_non_finite_max_pages_is_400(self, client, executor, literal):
        resp = post_raw(client, f'"maxPaginas": {literal}')
        assert resp.status_code == 400, resp.text
        assert resp.json()["campo"] == "maxPaginas"
        assert resp.json()["parametros"]["maxPaginas"] in ("nan", "inf")


# ========================================================================
# EXECUTOR FAILURES
# ========================================================================

class TestExecutorFailure:

    def test_executor_exception_is_500(self, client):
        app.dependency_overrides[get_search_executor] = lambda: FakeExecutor(error=TimeoutError("portal lento"))
        try:
            resp = client.post("/search", json=BASE)
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code == 500
        body = resp.json()
        assert body["codigo"] == "SEARCH_ERROR"
        assert body["success"] is False

    def test_details_hidden_when_disabled(self, client):
        app.dependency_overrides[get_search_executor] = lambda: FakeExecutor(error=RuntimeError("secreto"))
        try:
            with patch("propsearch.main.INCLUDE_ERROR_DETAILS", False):
                resp = client.post("/search", json=BASE)
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code == 500
        assert "secreto" not in resp.text
        assert "detalle" not in resp.json()

    def test_details_shown_when_enabled(self, client):
        app.dependency_overrides[get_search_executor] = lambda: FakeExecutor(error=RuntimeError("secreto"))
        try:
            with patch("propsearch.main.INCLUDE_ERROR_DETAILS", True):
                resp = client.post("/search", json=BASE)
        finally:
            app.dependency_overrides.clear()
        assert resp.json()["tipoError"] == "SearchError"
        assert resp.json()["detalle"] == "secreto"


# ========================================================================
# DEFAULT EXECUTOR, INFO, HEALTH
# ========================================================================

def test_default_sample_executor(client):
    resp = client.post("/search", json={**BASE, "maxPaginas": 1})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["metadata"]["fuente"] == "sample"
    assert 0 < len(body["data"]) <= 20


def test_info_describes_domains(client):
    resp = client.get("/api/search/info")
    assert resp.status_code == 200
    info = resp.json()
    assert info["tipos_propiedad"] == ["Casa", "Departamento"]
    assert info["operaciones"] == ["Venta", "Arriendo"]
    assert set(info["monedas_precio"]) == {"CLP", "CLF", "USD"}
    assert info["monedas_precio"]["CLF"] == {"minimo": 50, "maximo": 20000}
    assert info["filtros_avanzados"]["dormitorios"]["opciones"][-1] == "6+"
    assert info["filtros_avanzados"]["superficieUtil"]["descripcion"] == "Superficie útil en m² (15-1500)"
    assert info["max_paginas"] == {"minimo": 1, "maximo": 10, "defecto": 3}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
