"""API tests: auth, trade CRUD and analytics through the FastAPI app."""

import pyotp
import pytest
from sqlmodel import select

from tradejournal.config import settings
from tradejournal.models.user import User
from tests.conftest import register_and_login

TRADE = {
    "ticker": "es",
    "direction": "long",
    "entryPrice": "5000",
    "positionSize": "1",
    "entryDate": "2024-03-01T14:30:00Z",
}


def _create(client, headers, **overrides) -> dict:
    resp = client.post("/api/trades", json={**TRADE, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# 1. Auth
# ---------------------------------------------------------------------------

def test_health(client):
    assert client.get("/api/system/health").json() == {"status": "ok"}


def test_register_and_me(client):
    headers = register_and_login(client, "Me@Example.com")
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "me@example.com"
    assert body["totp_enabled"] is False


def test_register_duplicate_email(client):
    register_and_login(client, "dup@example.com")
    resp = client.post("/api/auth/register", json={"email": "dup@example.com", "password": "another-pass"})
    assert resp.status_code == 409


def test_register_short_password(client):
    resp = client.post("/api/auth/register", json={"email": "x@example.com", "password": "short"})
    assert resp.status_code == 422


def test_register_disabled(client, monkeypatch):
    monkeypatch.setattr(settings, "allow_registration", False)
    resp = client.post("/api/auth/register", json={"email": "x@example.com", "password": "long-enough"})
    assert resp.status_code == 403


def test_login_wrong_password(client):
    register_and_login(client, "user@example.com")
    resp = client.post("/api/auth/login", json={"email": "user@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401


def test_login_requires_totp_when_enabled(client, session):
    register_and_login(client, "2fa@example.com")
    user = session.exec(select(User).where(User.email == "2fa@example.com")).one()
    secret = pyotp.random_base32()
    user.totp_secret = secret
    session.add(user)
    session.commit()

    creds = {"email": "2fa@example.com", "password": "s3cret-pass"}
    assert client.post("/api/auth/login", json=creds).status_code == 401
    resp = client.post("/api/auth/login", json={**creds, "totp_code": pyotp.TOTP(secret).now()})
    assert resp.status_code == 200


def test_token_rejected_after_email_change(client, session):
    headers = register_and_login(client, "old@example.com")
    user = session.exec(select(User).where(User.email == "old@example.com")).one()
    user.email = "new@example.com"
    session.add(user)
    session.commit()

    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_protected_routes_require_token(client):
    assert client.get("/api/trades").status_code in (401, 403)
    assert client.get("/api/analytics").status_code in (401, 403)
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.get("/api/trades", headers=bad).status_code == 401


# ---------------------------------------------------------------------------
# 2. Trade CRUD
# ---------------------------------------------------------------------------

def test_create_trade(client, auth_headers):
    body = _create(client, auth_headers, notes="  ", screenshotUrl="https://img.example.com/1.png")
    assert body["ticker"] == "ES"
    assert body["status"] == "open"
    assert body["entryPrice"] == "5000"
    assert body["tickSize"] == "0.25"
    assert body["notes"] is None
    assert body["screenshotUrl"] == "https://img.example.com/1.png"
    assert body["entryDate"].startswith("2024-03-01T14:30:00")


def test_create_computes_pnl_from_ticks(client, auth_headers):
    body = _create(client, auth_headers, exitPrice="5002", positionSize="2", status="closed")
    # 8 ticks * $12.50 * 2 contracts
    assert body["pnl"] == "200.00"


def test_create_keeps_explicit_pnl(client, auth_headers):
    body = _create(client, auth_headers, exitPrice="5002", pnl="150")
    assert body["pnl"] == "150"


def test_create_rejects_bad_number(client, auth_headers):
    resp = client.post("/api/trades", json={**TRADE, "entryPrice": "five thousand"}, headers=auth_headers)
    assert resp.status_code == 422


def test_list_and_filter(client, auth_headers):
    _create(client, auth_headers)
    _create(client, auth_headers, status="closed", pnl="10")

    assert len(client.get("/api/trades", headers=auth_headers).json()) == 2
    closed = client.get("/api/trades", params={"status": "closed"}, headers=auth_headers).json()
    assert [t["status"] for t in closed] == ["closed"]


def test_get_missing_trade(client, auth_headers):
    assert client.get("/api/trades/999", headers=auth_headers).status_code == 404


def test_update_trade(client, auth_headers):
    trade = _create(client, auth_headers)
    resp = client.put(
        f"/api/trades/{trade['id']}",
        json={"status": "closed", "exitPrice": "4999", "exitDate": "2024-03-01T15:00:00Z"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "closed"
    assert body["exitPrice"] == "4999"
    assert body["pnl"] == "-50.00"
    assert body["ticker"] == "ES"


def test_update_cannot_clear_required_field(client, auth_headers):
    trade = _create(client, auth_headers)
    resp = client.put(f"/api/trades/{trade['id']}", json={"entryPrice": None}, headers=auth_headers)
    assert resp.status_code == 422


@pytest.mark.parametrize("field", ["entryDate", "tickSize", "tickValue"])
def test_update_rejects_null_for_not_null_columns(client, auth_headers, field):
    trade = _create(client, auth_headers)
    resp = client.put(f"/api/trades/{trade['id']}", json={field: None}, headers=auth_headers)
    assert resp.status_code == 422
    # the stored trade is untouched
    assert client.get(f"/api/trades/{trade['id']}", headers=auth_headers).json() == trade


@pytest.mark.parametrize("change, expected_pnl", [
    ({"positionSize": "3"}, "300.00"),
    ({"direction": "short"}, "-100.00"),
    ({"tickValue": "5"}, "40.00"),
    ({"tickSize": "0.5"}, "50.00"),
])
def test_update_recomputes_tick_pnl(client, auth_headers, change, expected_pnl):
    # 2 points long = 8 ticks * $12.50 on one contract
    trade = _create(client, auth_headers, exitPrice="5002", status="closed")
    assert trade["pnl"] == "100.00"

    resp = client.put(f"/api/trades/{trade['id']}", json=change, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["pnl"] == expected_pnl


def test_update_keeps_explicit_pnl(client, auth_headers):
    trade = _create(client, auth_headers, exitPrice="5002", status="closed")
    resp = client.put(
        f"/api/trades/{trade['id']}", json={"positionSize": "3", "pnl": "42"}, headers=auth_headers,
    )
    assert resp.json()["pnl"] == "42"


def test_prices_are_returned_in_fixed_point(client, auth_headers):
    body = _create(client, auth_headers, entryPrice="5e3", positionSize=1e1)
    assert body["entryPrice"] == "5000"
    assert body["positionSize"] == "10.0"


def test_delete_trade(client, auth_headers):
    trade = _create(client, auth_headers)
    assert client.delete(f"/api/trades/{trade['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/trades/{trade['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/trades/{trade['id']}", headers=auth_headers).status_code == 404


def test_trades_are_private(client, auth_headers):
    trade = _create(client, auth_headers)
    other = register_and_login(client, "other@example.com")

    assert client.get("/api/trades", headers=other).json() == []
    assert client.get(f"/api/trades/{trade['id']}", headers=other).status_code == 404
    assert client.put(f"/api/trades/{trade['id']}", json={"notes": "x"}, headers=other).status_code == 404
    assert client.delete(f"/api/trades/{trade['id']}", headers=other).status_code == 404


# ---------------------------------------------------------------------------
# 3. Analytics
# ---------------------------------------------------------------------------

def test_analytics_empty(client, auth_headers):
    resp = client.get("/api/analytics", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "totalTrades": 0,
        "wins": 0,
        "losses": 0,
        "winRate": 0.0,
        "totalPnl": 0.0,
        "averageRiskReward": 0.0,
        "performanceCurve": [],
    }


def test_analytics_summary(client, auth_headers):
    _create(
        client, auth_headers, status="closed", pnl="500.00", commissions="0",
        riskAmount="200.00", rewardAmount="500.00", exitDate="2024-03-01T16:00:00Z",
    )
    _create(
        client, auth_headers, status="closed", pnl="-500.00", commissions="0",
        riskAmount="500.00", rewardAmount="1000.00", exitDate="2024-03-02T16:00:00Z",
    )
    _create(client, auth_headers, status="open", pnl="999")

    other = register_and_login(client, "other@example.com")
    _create(client, other, status="closed", pnl="12345")

    body = client.get("/api/analytics", headers=auth_headers).json()
    assert body["totalTrades"] == 2
    assert body["wins"] == 1
    assert body["losses"] == 1
    assert body["winRate"] == 50
    assert body["totalPnl"] == 0
    assert body["averageRiskReward"] == pytest.approx(2.5)
    assert body["performanceCurve"] == [
        {"date": "2024-03-01T16:00:00+00:00", "cumulativePnl": 500.0},
        {"date": "2024-03-02T16:00:00+00:00", "cumulativePnl": 0.0},
    ]
