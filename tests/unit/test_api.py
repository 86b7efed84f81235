"""Tests for the FastAPI REST API module."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from quote_sentinel.api.app import create_app
from quote_sentinel.api.routes import failure_response
from quote_sentinel.core.config import APIConfig, QuoteSentinelConfig
from quote_sentinel.core.exceptions import ConfigError, ProviderError
from quote_sentinel.core.results import InvalidParameter, NotFound, Unknown, failure


# -- Fixtures --


@pytest.fixture
def config():
    return QuoteSentinelConfig()


@pytest.fixture
def app(config, service):
    return create_app(config=config, service=service)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def authed_client(service):
    config = QuoteSentinelConfig(api=APIConfig(api_key="test-secret-key"))
    with TestClient(create_app(config=config, service=service)) as c:
        yield c


# -- Health Endpoint --


@pytest.mark.unit
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": "0.1.0"}

    def test_health_no_auth_required(self, authed_client):
        resp = authed_client.get("/api/health")
        assert resp.status_code == 200


# -- Quote Endpoints --


@pytest.mark.unit
class TestQuoteEndpoint:
    def test_quote(self, client):
        resp = client.get("/api/stock/IBM/quote")
        assert resp.status_code == 200
        assert resp.json() == {
            "result": {
                "symbol": "IBM",
                "last_price": 12.02,
                "priced_at": "2000-01-01T00:00:00.000Z",
            }
        }

    def test_unknown_symbol_404(self, client):
        resp = client.get("/api/stock/AAA/quote")
        assert resp.status_code == 404
        assert resp.json() == {"errors": [{"kind": "not_found", "field": "symbol", "value": "AAA"}]}

    def test_provider_fault_500(self, client, quote_provider):
        quote_provider.errors["IBM"] = ProviderError("HTTP 502")
        resp = client.get("/api/stock/IBM/quote")
        assert resp.status_code == 500
        assert resp.json() == {"errors": [{"kind": "unknown"}]}


@pytest.mark.unit
class TestCompareEndpoint:
    def test_compare_keeps_order(self, client):
        resp = client.get("/api/stocks/AAPL/compare", params={"stocks": ["IBM"]})
        assert resp.status_code == 200
        prices = resp.json()["result"]["last_prices"]
        assert [p["symbol"] for p in prices] == ["AAPL", "IBM"]
        assert [p["last_price"] for p in prices] == [151.29, 12.02]

    def test_compare_without_others(self, client):
        resp = client.get("/api/stocks/IBM/compare")
        assert resp.status_code == 200
        assert len(resp.json()["result"]["last_prices"]) == 1

    def test_compare_unknown_symbol(self, client):
        resp = client.get("/api/stocks/IBM/compare?stocks=AAA&stocks=AAPL")
        assert resp.status_code == 404
        assert resp.json()["errors"] == [{"kind": "not_found", "field": "symbol", "value": "AAA"}]


# -- History Endpoint --


@pytest.mark.unit
class TestHistoryEndpoint:
    def test_history(self, client):
        resp = client.get(
            "/api/stocks/IBM/history", params={"from": "2022-11-18", "to": "2022-11-22"}
        )
        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["symbol"] == "IBM"
        assert [p["priced_at"] for p in result["prices"]] == [
            "2022-11-22T00:00:00.000Z",
            "2022-11-21T00:00:00.000Z",
            "2022-11-18T00:00:00.000Z",
        ]
        assert result["prices"][0] == {
            "opening": 147.6,
            "high": 149.35,
            "low": 147.02,
            "closing": 149.1,
            "priced_at": "2022-11-22T00:00:00.000Z",
        }

    def test_no_data_404(self, client):
        resp = client.get(
            "/api/stocks/IBM/history", params={"from": "2022-11-11", "to": "2022-11-15"}
        )
        assert resp.status_code == 404
        assert resp.json()["errors"] == [
            {"kind": "not_found", "field": "from", "value": "2022-11-11"},
            {"kind": "not_found", "field": "to", "value": "2022-11-15"},
        ]

    def test_weekend_400(self, client, history_provider):
        resp = client.get(
            "/api/stocks/IBM/history", params={"from": "2022-11-19", "to": "2022-11-22"}
        )
        assert resp.status_code == 400
        error = resp.json()["errors"][0]
        assert error["kind"] == "invalid"
        assert error["field"] == "from"
        assert history_provider.calls == []

    def test_missing_query_param_422(self, client):
        resp = client.get("/api/stocks/IBM/history", params={"from": "2022-11-18"})
        assert resp.status_code == 422


# -- Gains Endpoint --


@pytest.mark.unit
class TestGainsEndpoint:
    def test_gains(self, client):
        resp = client.get(
            "/api/stock/IBM/gains",
            params={"purchased_amount": "10", "purchased_at": "2022-11-22"},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "result": {
                "symbol": "IBM",
                "last_price": 12.02,
                "price_at_date": 149.1,
                "purchased_amount": 10.0,
                "purchased_at": "2022-11-22T00:00:00.000Z",
                "capital_gains": -1370.8,
            }
        }

    def test_missing_purchase_day_404(self, client):
        resp = client.get(
            "/api/stock/IBM/gains",
            params={"purchased_amount": "10", "purchased_at": "2022-11-25"},
        )
        assert resp.status_code == 404
        assert resp.json()["errors"] == [
            {"kind": "not_found", "field": "purchase_date", "value": "2022-11-25"}
        ]

    def test_invalid_amount_400(self, client):
        resp = client.get(
            "/api/stock/IBM/gains",
            params={"purchased_amount": "-3", "purchased_at": "2022-11-22"},
        )
        assert resp.status_code == 400
        assert resp.json()["errors"] == [
            {
                "kind": "invalid",
                "field": "amount",
                "value": "-3",
                "reason": "must be a positive number",
            }
        ]


# -- Status mapping --


@pytest.mark.unit
class TestFailureResponse:
    def test_invalid_wins(self):
        resp = failure_response(
            failure(NotFound(field="symbol", value="A"), InvalidParameter(field="x", value="", reason="r"))
        )
        assert resp.status_code == 400

    def test_all_not_found(self):
        resp = failure_response(failure(NotFound(field="symbol", value="A")))
        assert resp.status_code == 404

    def test_mixed_not_found_and_unknown(self):
        resp = failure_response(failure(NotFound(field="symbol", value="A"), Unknown()))
        assert resp.status_code == 500
        assert json.loads(resp.body) == {
            "errors": [{"kind": "not_found", "field": "symbol", "value": "A"}, {"kind": "unknown"}]
        }


# -- Auth & error handling --


@pytest.mark.unit
class TestAuth:
    def test_missing_key_401(self, authed_client):
        resp = authed_client.get("/api/stock/IBM/quote")
        assert resp.status_code == 401
        assert resp.json()["error"] == "Unauthorized"

    def test_valid_key(self, authed_client):
        resp = authed_client.get("/api/stock/IBM/quote", headers={"X-API-Key": "test-secret-key"})
        assert resp.status_code == 200

    def test_no_auth_when_key_unset(self, client):
        assert client.get("/api/stock/IBM/quote").status_code == 200


@pytest.mark.unit
class TestExceptionHandler:
    def test_sentinel_error_rendered(self, config):
        service = MagicMock()
        service.get_quote = AsyncMock(side_effect=ConfigError("bad config"))
        service.close = AsyncMock()
        with TestClient(create_app(config=config, service=service)) as c:
            resp = c.get("/api/stock/IBM/quote")
        assert resp.status_code == 400
        assert resp.json() == {"error": "ConfigError", "detail": "bad config"}
        service.close.assert_awaited_once()


@pytest.mark.unit
class TestAuthFromLoadedConfig:
    """Key configured only through the environment, as under ``serve``."""

    @pytest.fixture
    def env_keyed_client(self, service, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("QUOTE_SENTINEL_CONFIG", raising=False)
        monkeypatch.setenv("QUOTE_SENTINEL_API__API_KEY", "secret")
        app = create_app(service=service)
        with TestClient(app) as c:
            yield c

    def test_key_loaded_in_lifespan(self, env_keyed_client):
        assert env_keyed_client.app.state.app_state.config.api.api_key == "secret"

    def test_missing_key_401(self, env_keyed_client):
        resp = env_keyed_client.get("/api/stock/IBM/quote")
        assert resp.status_code == 401

    def test_valid_key(self, env_keyed_client):
        resp = env_keyed_client.get("/api/stock/IBM/quote", headers={"X-API-Key": "secret"})
        assert resp.status_code == 200

    def test_health_stays_public(self, env_keyed_client):
        assert env_keyed_client.get("/api/health").status_code == 200
