# offgrid_calculator/tests/test_api_client.py

import requests

from offgrid_calculator.config import APIConfig
from offgrid_calculator.logging import ConsoleLog, get_logger
from offgrid_calculator.models.appliance import Appliance
from offgrid_calculator.services.api_client import CalculatorAPIClient


ConsoleLog(level="INFO", quiet=True).setup()
LOG = get_logger("api-client-test")


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        status_code, payload = self.responses.get((method, url), (404, {"error": "missing"}))
        if isinstance(status_code, Exception):
            raise status_code
        return FakeResponse(status_code=status_code, payload=payload)


def _client(responses):
    session = FakeSession(responses)
    cfg = APIConfig(base_url="http://calc.test/", timeout=3)
    return CalculatorAPIClient(cfg, LOG, session=session), session


def test_health_ok():
    client, session = _client(
        {("GET", "http://calc.test/api/health"): (200, {"status": "ok", "service": "off-grid-living-api"})}
    )
    assert client.is_healthy() is True
    assert session.calls[0]["timeout"] == 3


def test_connection_error_returns_none():
    client, _ = _client({("GET", "http://calc.test/api/health"): (requests.ConnectionError("refused"), None)})
    assert client.health() is None
    assert client.is_healthy() is False


def test_http_error_returns_none():
    client, _ = _client(
        {("POST", "http://calc.test/api/calculators/solar-panels"): (400, {"error": "panel_wattage must be > 0"})}
    )
    assert client.solar_panels(1000, 0) is None


def test_non_json_payload_returns_none():
    client, _ = _client({("GET", "http://calc.test/api/health"): (200, ValueError("no json"))})
    assert client.health() is None


def test_posts_appliances_as_json():
    url = "http://calc.test/api/calculators/home-load"
    client, session = _client({("POST", url): (200, {"summary": {"total_wh": 500}})})
    result = client.home_load([Appliance("Fridge", 100, 5)], days_of_autonomy=2)
    assert result["summary"]["total_wh"] == 500
    body = session.calls[0]["json"]
    assert body["days_of_autonomy"] == 2
    assert body["appliances"][0]["hours_per_day"] == 5


def test_catalog_category_param():
    url = "http://calc.test/api/calculators/appliances"
    client, session = _client({("GET", url): (200, {"appliances": []})})
    assert client.appliances("office") == {"appliances": []}
    assert session.calls[0]["params"] == {"category": "office"}


def test_system_design_posts_panel_wattage():
    url = "http://calc.test/api/calculators/system-design"
    client, session = _client({("POST", url): (200, {"number_of_panels": 3})})
    result = client.system_design([Appliance("Pump", 250, 2, "Other", True)], 300, average_sun_hours=4)
    assert result == {"number_of_panels": 3}
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["json"]["panel_wattage"] == 300
    assert call["json"]["average_sun_hours"] == 4
    assert call["json"]["appliances"][0]["essential"] is True


def test_system_design_rejected_returns_none():
    url = "http://calc.test/api/calculators/system-design"
    client, _ = _client({("POST", url): (400, {"error": "panel_wattage must be greater than zero"})})
    assert client.system_design([Appliance("Pump", 250, 2)], 0) is None
