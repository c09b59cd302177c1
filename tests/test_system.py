"""
Health, version, metrics and logging plumbing
"""
import json
import logging

from prometheus_client import REGISTRY

from b2b_gateway.endpoints import Endpoint, endpoint_label, endpoint_name_from_path, lookup, pricing_catalogue
from b2b_gateway.logging_config import JsonFormatter, trace_id_var
from b2b_gateway.metrics import path_group
from b2b_gateway.services.leads import lead_price
from b2b_gateway.services.market import simulated_demographics

from conftest import GATEWAY


def test_health_endpoint(client):
    response = client.get("/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"
    assert "X-API-Version" in response.headers


def test_version_endpoint(client):
    data = client.get("/v1/version").json()
    assert data["version"]
    assert data["api_version"] == "v1"


def test_request_id_round_trip(client):
    response = client.get("/v1/health", headers={"X-Request-ID": "trace-abc"})
    assert response.headers["X-Request-ID"] == "trace-abc"
    assert client.get("/v1/health").headers["X-Request-ID"]


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_prometheus_metrics(client, account):
    _, headers = account
    ok_before = _sample("b2b_gateway_calls_total", endpoint="insights", code="OK")
    denied_before = _sample("b2b_gateway_calls_total", endpoint="unknown", code="ENDPOINT_NOT_ALLOWED")
    charged_before = _sample("b2b_credits_charged_total", endpoint="insights")

    client.get(f"{GATEWAY}/insights", headers=headers)
    client.get(f"{GATEWAY}/teleport", headers=headers)

    assert _sample("b2b_gateway_calls_total", endpoint="insights", code="OK") == ok_before + 1
    assert _sample("b2b_gateway_calls_total", endpoint="unknown", code="ENDPOINT_NOT_ALLOWED") == denied_before + 1
    assert _sample("b2b_credits_charged_total", endpoint="insights") == charged_before + 15

    response = client.get("/v1/metrics/prometheus")
    assert response.status_code == 200
    assert "b2b_gateway_calls_total" in response.text
    assert "teleport" not in response.text


def test_path_group():
    assert path_group("/v1/b2b-api/leads") == "gateway"
    assert path_group("/v1/admin/clients/1") == "admin"
    assert path_group("/v1/health") == "health"
    assert path_group("/") == "root"


class TestEndpointCatalogue:

    def test_endpoint_name_from_path(self):
        assert endpoint_name_from_path("") == "info"
        assert endpoint_name_from_path("/") == "info"
        assert endpoint_name_from_path("leads") == "leads"
        assert endpoint_name_from_path("a/b/valuations/") == "valuations"

    def test_lookup(self):
        assert lookup("purchase-lead").endpoint is Endpoint.PURCHASE_LEAD
        assert lookup("teleport") is None

    def test_endpoint_label(self):
        assert endpoint_label("valuations") == "valuations"
        assert endpoint_label("teleport") == "unknown"
        assert endpoint_label("x" * 500) == "unknown"

    def test_pricing_catalogue_covers_every_endpoint(self):
        catalogue = pricing_catalogue()
        assert set(catalogue) == {e.value for e in Endpoint}
        assert catalogue["info"]["credits"] == 0
        assert catalogue["leads"]["credits"] == 0

    def test_lead_price(self):
        assert lead_price(70) == 25
        assert lead_price(69) == 10
        assert lead_price(None) == 10


def test_simulated_demographics_stable_per_region():
    a = simulated_demographics("Medan")
    assert a == simulated_demographics("Medan")
    assert a["population"] == simulated_demographics("MEDAN")["population"]
    assert a != simulated_demographics("Makassar")
    assert abs(sum(a["age_distribution"].values()) - 1.0) < 0.05


def test_json_formatter_includes_trace_and_extras():
    token = trace_id_var.set("trace-123")
    try:
        record = logging.LogRecord("app", logging.INFO, __file__, 1, "gateway call ok", None, None)
        record.endpoint = "leads"
        record.credits_used = 15
        out = json.loads(JsonFormatter().format(record))
    finally:
        trace_id_var.reset(token)
    assert out["msg"] == "gateway call ok"
    assert out["trace_id"] == "trace-123"
    assert out["endpoint"] == "leads"
    assert out["credits_used"] == 15
    assert out["level"] == "INFO"


def test_setup_logging_uses_configured_level_and_format(monkeypatch, tmp_path):
    from b2b_gateway import logging_config

    monkeypatch.setattr(logging_config, "LOGGING_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setattr(logging_config, "LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(logging_config, "LOG_FORMAT", "yaml-ish")
    try:
        config = logging_config.setup_logging()
        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"]["app"]["level"] == "DEBUG"
        assert logging.getLogger("app").level == logging.DEBUG
    finally:
        monkeypatch.undo()
        logging_config.setup_logging()
