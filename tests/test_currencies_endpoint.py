# =============================================================================================
# TESTS/TEST_CURRENCIES_ENDPOINT.PY - /currencies ROUTES THROUGH THE HTTP BOUNDARY
# =============================================================================================
# Service behaviour is covered in test_currency_service.py; here we check role gates,
# status codes and the JSON envelopes.
# =============================================================================================

import pytest
from fastapi.testclient import TestClient

from app.services.currency_service import CurrencyService


def _delete(client, url, body, headers):
    return client.request("DELETE", url, json=body, headers=headers)


@pytest.fixture
def seeded(client, editor_headers):
    for symbol, name in (("USD", "US Dollar"), ("EUR", "Euro")):
        assert client.post("/currencies", json={"symbol": symbol, "name": name}, headers=editor_headers).status_code == 201
    return client


# =============================================================================================
# Authentication and roles
# =============================================================================================

@pytest.mark.parametrize(
    "method, url",
    [
        ("GET", "/currencies"),
        ("POST", "/currencies"),
        ("DELETE", "/currencies"),
        ("PUT", "/currencies/rate"),
        ("DELETE", "/currencies/rate"),
        ("POST", "/currencies/convert"),
    ],
)
def test_every_route_requires_a_token(client, method, url):
    response = client.request(method, url, json={})

    assert response.status_code == 401
    assert response.json() == {"ok": False, "msg": "No token provided."}


def test_invalid_token_is_forbidden(client):
    response = client.get("/currencies", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 403
    assert response.json()["msg"] == "Invalid token."


def test_viewer_cannot_write(client, viewer_headers):
    response = client.post("/currencies", json={"symbol": "USD", "name": "US Dollar"}, headers=viewer_headers)

    assert response.status_code == 403
    assert response.json() == {"ok": False, "msg": "Editor permissions required. Access denied."}


def test_editor_without_viewer_tag_cannot_read(client, auth_headers):
    response = client.get("/currencies", headers=auth_headers("editor"))

    assert response.status_code == 403
    assert response.json()["msg"] == "Viewer permissions required. Access denied."


def test_role_check_runs_before_body_validation(client, viewer_headers):
    response = client.put("/currencies/rate", json={"base": "USD"}, headers=viewer_headers)
    assert response.status_code == 403


# =============================================================================================
# Currency lifecycle
# =============================================================================================

def test_add_and_list_currencies(seeded, viewer_headers):
    response = seeded.get("/currencies", headers=viewer_headers)

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "count": 2,
        "result": [
            {"symbol": "EUR", "name": "Euro", "rates": {"EUR": 1.0}},
            {"symbol": "USD", "name": "US Dollar", "rates": {"USD": 1.0}},
        ],
    }


def test_list_when_empty(client, viewer_headers):
    assert client.get("/currencies", headers=viewer_headers).json() == {"ok": True, "count": 0, "result": []}


def test_add_currency_message(client, editor_headers):
    response = client.post("/currencies", json={"symbol": "JPY", "name": "Yen"}, headers=editor_headers)

    assert response.status_code == 201
    assert response.json() == {"ok": True, "msg": "Successfully added JPY"}


def test_add_duplicate_currency_conflicts(seeded, editor_headers):
    response = seeded.post("/currencies", json={"symbol": "USD", "name": "Dollar"}, headers=editor_headers)

    assert response.status_code == 409
    assert response.json() == {"ok": False, "msg": "Currency USD already exists"}


@pytest.mark.parametrize(
    "body",
    [{}, {"symbol": "USD"}, {"name": "Dollar"}, {"symbol": "  ", "name": "Dollar"}, {"symbol": "USD", "name": 5}],
)
def test_add_currency_validation(client, editor_headers, body):
    response = client.post("/currencies", json=body, headers=editor_headers)

    assert response.status_code == 400
    assert response.json()["msg"] == "Validation failed"


def test_delete_currency(seeded, editor_headers, viewer_headers):
    seeded.put("/currencies/rate", json={"base": "USD", "target": "EUR", "rate": 0.9}, headers=editor_headers)

    response = _delete(seeded, "/currencies", {"symbol": "EUR"}, editor_headers)
    assert response.status_code == 204
    assert response.content == b""

    result = seeded.get("/currencies", headers=viewer_headers).json()["result"]
    assert result == [{"symbol": "USD", "name": "US Dollar", "rates": {"USD": 1.0}}]


def test_delete_unknown_currency(client, editor_headers):
    response = _delete(client, "/currencies", {"symbol": "XXX"}, editor_headers)

    assert response.status_code == 404
    assert response.json() == {"ok": False, "msg": "Currency XXX not found"}


# =============================================================================================
# Exchange rates
# =============================================================================================

def test_set_rate(seeded, editor_headers, viewer_headers):
    response = seeded.put("/currencies/rate", json={"base": "USD", "target": "EUR", "rate": 0.8}, headers=editor_headers)

    assert response.status_code == 201
    assert response.json() == {"ok": True, "msg": "Successfully set exchange rate: USD -> EUR: 0.8"}

    rates = {c["symbol"]: c["rates"] for c in seeded.get("/currencies", headers=viewer_headers).json()["result"]}
    assert rates["USD"] == {"USD": 1.0, "EUR": 0.8}
    assert rates["EUR"]["USD"] == pytest.approx(1.25)


def test_set_rate_same_pair(seeded, editor_headers):
    response = seeded.put("/currencies/rate", json={"base": "USD", "target": "USD", "rate": 2}, headers=editor_headers)

    assert response.status_code == 400
    assert response.json() == {"ok": False, "msg": "Target and base should be different."}


@pytest.mark.parametrize("rate", [0, -2, "abc", None])
def test_set_rate_rejects_bad_rate(seeded, editor_headers, rate):
    response = seeded.put("/currencies/rate", json={"base": "USD", "target": "EUR", "rate": rate}, headers=editor_headers)

    assert response.status_code == 400
    assert response.json()["msg"] == "Validation failed"


def test_set_rate_rejects_rate_with_infinite_inverse(seeded, editor_headers, viewer_headers):
    response = seeded.put(
        "/currencies/rate", json={"base": "USD", "target": "EUR", "rate": 1e-320}, headers=editor_headers
    )

    assert response.status_code == 400
    assert response.json() == {"ok": False, "msg": "Exchange rate must be a positive number"}

    rates = {c["symbol"]: c["rates"] for c in seeded.get("/currencies", headers=viewer_headers).json()["result"]}
    assert rates == {"EUR": {"EUR": 1.0}, "USD": {"USD": 1.0}}


def test_set_rate_unknown_currency(seeded, editor_headers):
    response = seeded.put("/currencies/rate", json={"base": "USD", "target": "GBP", "rate": 0.7}, headers=editor_headers)

    assert response.status_code == 404
    assert response.json()["msg"] == "Currency GBP not found"


def test_remove_rate(seeded, editor_headers):
    seeded.put("/currencies/rate", json={"base": "USD", "target": "EUR", "rate": 0.9}, headers=editor_headers)

    assert _delete(seeded, "/currencies/rate", {"base": "EUR", "target": "USD"}, editor_headers).status_code == 204

    response = _delete(seeded, "/currencies/rate", {"base": "USD", "target": "EUR"}, editor_headers)
    assert response.status_code == 404
    assert response.json() == {"ok": False, "msg": "Exchange rate from USD to EUR not found"}


def test_remove_rate_same_pair(seeded, editor_headers):
    response = _delete(seeded, "/currencies/rate", {"base": "EUR", "target": "EUR"}, editor_headers)

    assert response.status_code == 400
    assert response.json()["msg"] == "Target and base should be different."


# =============================================================================================
# Conversion
# =============================================================================================

def test_convert(seeded, editor_headers, viewer_headers):
    seeded.put("/currencies/rate", json={"base": "USD", "target": "EUR", "rate": 0.9}, headers=editor_headers)

    response = seeded.post(
        "/currencies/convert", json={"base": "USD", "target": "EUR", "amount": 100}, headers=viewer_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["data"]["base"] == "USD"
    assert body["data"]["target"] == "EUR"
    assert body["data"]["amount"] == 100
    assert body["data"]["convertedAmount"] == pytest.approx(90)
    assert body["data"]["exchangeRate"] == pytest.approx(0.9)


def test_convert_back(seeded, editor_headers, viewer_headers):
    seeded.put("/currencies/rate", json={"base": "USD", "target": "EUR", "rate": 0.9}, headers=editor_headers)

    data = seeded.post(
        "/currencies/convert", json={"base": "EUR", "target": "USD", "amount": 100}, headers=viewer_headers
    ).json()["data"]

    assert data["convertedAmount"] == pytest.approx(111.11, abs=0.01)


def test_convert_same_currency(client, viewer_headers):
    response = client.post(
        "/currencies/convert", json={"base": "USD", "target": "USD", "amount": 12.5}, headers=viewer_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["convertedAmount"] == 12.5
    assert response.json()["data"]["exchangeRate"] == 1


def test_convert_without_rate(seeded, viewer_headers):
    response = seeded.post(
        "/currencies/convert", json={"base": "USD", "target": "EUR", "amount": 1}, headers=viewer_headers
    )

    assert response.status_code == 404
    assert response.json()["msg"] == "Exchange rate from USD to EUR not found"


def test_convert_requires_amount(seeded, viewer_headers):
    response = seeded.post("/currencies/convert", json={"base": "USD", "target": "EUR"}, headers=viewer_headers)
    assert response.status_code == 400


# =============================================================================================
# Error envelope for unexpected failures
# =============================================================================================

def test_unexpected_error_is_500(client, viewer_headers, monkeypatch):
    def boom(self):
        raise RuntimeError("database exploded: secret details")

    monkeypatch.setattr(CurrencyService, "get_all_currencies", boom)
    quiet_client = TestClient(client.app, raise_server_exceptions=False)

    response = quiet_client.get("/currencies", headers=viewer_headers)

    assert response.status_code == 500
    assert response.json() == {"ok": False, "msg": "Internal server error"}
