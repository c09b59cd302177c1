"""
Authentication and authorization checks on the B2B gateway
"""
from datetime import datetime, timedelta, timezone

import pytest

from conftest import GATEWAY, TEST_KEY, usage_rows


def test_missing_api_key(client):
    """Test request without x-api-key is rejected"""
    response = client.get(f"{GATEWAY}/info")
    assert response.status_code == 401
    assert response.json()["code"] == "MISSING_API_KEY"
    assert usage_rows() == []


def test_blank_api_key_counts_as_missing(client):
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": "   "})
    assert response.status_code == 401
    assert response.json()["code"] == "MISSING_API_KEY"


def test_unknown_prefix(client, account):
    """Test a key whose prefix matches nothing"""
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": "ZZZZ9999-whatever"})
    assert response.status_code == 401
    body = response.json()
    assert body["code"] == "INVALID_API_KEY"
    assert "error" in body
    assert usage_rows() == []


def test_prefix_match_with_wrong_secret(client, account):
    """Test the full key is verified, not just its prefix"""
    forged = TEST_KEY[:8] + "-not-the-real-secret"
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": forged})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_API_KEY"


def test_deactivated_key(client, make_client, make_key):
    c = make_client()
    key = make_key(c, is_active=False)
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": key})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_API_KEY"


def test_expired_key(client, make_client, make_key):
    """Test keys past expires_at are rejected"""
    c = make_client()
    key = make_key(c, expires_at=datetime.now(timezone.utc) - timedelta(days=1))
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": key})
    assert response.status_code == 401
    assert response.json()["code"] == "EXPIRED_API_KEY"
    assert usage_rows() == []


def test_key_with_future_expiry_still_works(client, make_client, make_key):
    c = make_client()
    key = make_key(c, expires_at=datetime.now(timezone.utc) + timedelta(days=30))
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": key})
    assert response.status_code == 200


@pytest.mark.parametrize("endpoint", ["info", "leads", "insights", "demographics", "valuations", "purchase-lead"])
def test_inactive_account(client, make_client, make_key, endpoint):
    """Test inactive clients are refused on every endpoint"""
    c = make_client(is_active=False)
    key = make_key(c)
    response = client.post(f"{GATEWAY}/{endpoint}", headers={"x-api-key": key}, json={"lead_id": "x"})
    assert response.status_code == 403
    assert response.json()["code"] == "INACTIVE_ACCOUNT"
    assert usage_rows() == []


def test_endpoint_not_allowed(client, make_client, make_key):
    c = make_client(credits=100)
    key = make_key(c, allowed=["leads"])
    response = client.get(f"{GATEWAY}/insights", headers={"x-api-key": key})
    assert response.status_code == 403
    assert response.json()["code"] == "ENDPOINT_NOT_ALLOWED"


def test_info_always_allowed(client, make_client, make_key):
    """Test info needs no entry in allowed_endpoints"""
    c = make_client()
    key = make_key(c, allowed=[])
    response = client.get(f"{GATEWAY}/info", headers={"x-api-key": key})
    assert response.status_code == 200
    assert response.json()["data"]["allowed_endpoints"] == []


def test_unknown_endpoint_not_in_allow_list(client, account):
    """Test an unlisted unknown name fails authorization first"""
    _, headers = account
    response = client.get(f"{GATEWAY}/teleport", headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == "ENDPOINT_NOT_ALLOWED"


def test_unknown_endpoint_in_allow_list(client, make_client, make_key):
    c = make_client()
    key = make_key(c, allowed=["leads", "teleport"])
    response = client.get(f"{GATEWAY}/teleport", headers={"x-api-key": key})
    assert response.status_code == 404
    assert response.json()["code"] == "UNKNOWN_ENDPOINT"


def test_last_segment_selects_endpoint(client, account):
    _, headers = account
    response = client.get(f"{GATEWAY}/v2/extra/info", headers=headers)
    assert response.status_code == 200
    assert response.json()["meta"]["endpoint"] == "info"


def test_preflight(client):
    """Test OPTIONS answers without a key and carries CORS headers"""
    response = client.options(f"{GATEWAY}/leads")
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "x-api-key" in response.headers["access-control-allow-headers"]
    assert usage_rows() == []


def test_error_responses_carry_cors_headers(client):
    response = client.get(f"{GATEWAY}/leads")
    assert response.status_code == 401
    assert response.headers["access-control-allow-origin"] == "*"


def test_head_reaches_gateway(client, account):
    """Test HEAD is handled like any other method"""
    c, headers = account
    response = client.head(f"{GATEWAY}/info", headers=headers)
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert [(r.endpoint, r.method, r.response_status) for r in usage_rows(c.id)] == [("info", "HEAD", 200)]


def test_head_without_key(client):
    response = client.head(f"{GATEWAY}/leads")
    assert response.status_code == 401
    assert response.headers["access-control-allow-origin"] == "*"


def test_head_on_purchase_lead(client, account):
    c, headers = account
    response = client.head(f"{GATEWAY}/purchase-lead", headers=headers)
    assert response.status_code == 405
    assert [(r.endpoint, r.response_status) for r in usage_rows(c.id)] == [("purchase-lead", 405)]
