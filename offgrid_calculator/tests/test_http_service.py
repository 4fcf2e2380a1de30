# offgrid_calculator/tests/test_http_service.py

import json
import threading

import pytest
import requests

from offgrid_calculator.config import Config
from offgrid_calculator.logging import ConsoleLog, get_logger
from offgrid_calculator.services.http_service import CalculatorService, build_server


ConsoleLog(level="INFO", quiet=True).setup()
LOG = get_logger("http-service-test")

HOUSEHOLD = [
    {"name": "Fridge", "watts": 100, "hours_per_day": 5, "category": "Kitchen", "essential": True},
    {"name": "Laptop", "watts": 50, "hoursPerDay": 10, "category": "Office"},
]


def _service():
    return CalculatorService(Config.defaults(), LOG, clock=lambda: "2024-06-01T12:00:00.000Z")


def _post(service, path, payload):
    return service.handle("POST", path, json.dumps(payload).encode("utf-8"))


def test_health_payload():
    status, payload = _service().handle("GET", "/api/health")
    assert status == 200
    assert payload == {
        "status": "ok",
        "timestamp": "2024-06-01T12:00:00.000Z",
        "service": "off-grid-living-api",
    }


def test_root_greeting_is_text():
    status, payload = _service().handle("GET", "/")
    assert status == 200
    assert isinstance(payload, str)


def test_solar_panels_endpoint_defaults():
    status, payload = _post(_service(), "/api/calculators/solar-panels", {"daily_usage_wh": 3000, "panel_wattage": 300})
    assert status == 200
    assert payload["panels"] == 3
    assert payload["average_sun_hours"] == 5.0
    assert payload["efficiency_loss"] == 0.2


def test_solar_panels_rejects_zero_wattage():
    status, payload = _post(_service(), "/api/calculators/solar-panels", {"daily_usage_wh": 1000, "panel_wattage": 0})
    assert status == 400
    assert "panel_wattage" in payload["error"]


def test_solar_panels_requires_usage():
    status, _ = _post(_service(), "/api/calculators/solar-panels", {"panel_wattage": 300})
    assert status == 400


def test_home_load_endpoint():
    status, payload = _post(_service(), "/api/calculators/home-load", {"appliances": HOUSEHOLD})
    assert status == 200
    assert payload["summary"]["total_wh"] == 1000
    assert payload["summary"]["essential_wh"] == 500
    assert [c["category"] for c in payload["summary"]["categories"]] == ["kitchen", "office"]
    assert payload["battery"]["total_wh"] == 1500
    assert payload["battery"]["essential_wh"] == 750
    assert payload["array"] == {"minimum_watts": 250, "peak_sun_hours": 4.0}


def test_home_load_rejects_bad_appliance():
    bad = [{"name": "Heater", "watts": 1500, "hours_per_day": 30}]
    status, payload = _post(_service(), "/api/calculators/home-load", {"appliances": bad})
    assert status == 400
    assert "hours_per_day" in payload["error"]


def test_system_design_endpoint():
    status, payload = _post(
        _service(),
        "/api/calculators/system-design",
        {"appliances": HOUSEHOLD, "panel_wattage": 100, "days_of_autonomy": 2},
    )
    assert status == 200
    assert payload["number_of_panels"] == 3
    assert payload["array_watts"] == 300
    assert payload["battery_capacity_wh"] == 3000
    assert payload["inverter_size_w"] == 150


def test_appliance_catalog_endpoint():
    service = _service()
    status, payload = service.handle("GET", "/api/calculators/appliances?category=laundry")
    assert status == 200
    assert [a["name"] for a in payload["appliances"]] == ["Washing Machine", "Clothes Dryer", "Iron"]

    status, _ = service.handle("GET", "/api/calculators/appliances?category=garage")
    assert status == 400


def test_routing_errors():
    service = _service()
    assert service.handle("GET", "/api/nothing")[0] == 404
    assert service.handle("POST", "/api/health", b"{}")[0] == 405
    assert service.handle("GET", "/api/calculators/home-load")[0] == 405
    assert service.handle("POST", "/api/calculators/home-load", b"not json")[0] == 400
    assert service.handle("POST", "/api/calculators/home-load", b"")[0] == 400
    assert service.handle("POST", "/api/calculators/home-load", b"[1, 2]")[0] == 400


@pytest.fixture
def running_server():
    server = build_server(Config.defaults(), LOG, host="127.0.0.1", port=0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


def test_server_over_http(running_server):
    resp = requests.get(f"{running_server}/api/health", timeout=5)
    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    body = resp.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")

    resp = requests.post(
        f"{running_server}/api/calculators/solar-panels",
        json={"daily_usage_wh": 1000, "panel_wattage": 300},
        timeout=5,
    )
    assert resp.status_code == 200
    assert resp.json()["panels"] == 1

    resp = requests.get(f"{running_server}/", timeout=5)
    assert resp.headers["Content-Type"].startswith("text/plain")

    resp = requests.options(f"{running_server}/api/calculators/home-load", timeout=5)
    assert resp.status_code == 204
    assert "POST" in resp.headers["Access-Control-Allow-Methods"]


def test_solar_panels_out_of_range_is_bad_request():
    status, payload = _post(
        _service(),
        "/api/calculators/solar-panels",
        {"daily_usage_wh": 1000, "panel_wattage": 1e-320},
    )
    assert status == 400
    assert "out of range" in payload["error"]


def test_home_load_battery_overflow_is_bad_request():
    huge = [{"name": "Smelter", "watts": 1e306, "hours_per_day": 24}]
    status, payload = _post(_service(), "/api/calculators/home-load", {"appliances": huge, "days_of_autonomy": 10})
    assert status == 400
    assert "battery capacity" in payload["error"]
