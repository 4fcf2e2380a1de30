from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import requests

from offgrid_calculator.config import APIConfig
from offgrid_calculator.models.appliance import Appliance
from offgrid_calculator.services.output_formatter import appliance_to_dict


class CalculatorAPIClient:
    """Thin client for a running calculator API; failures are logged and return None."""

    def __init__(self, cfg: APIConfig, log, session: Optional[requests.Session] = None, base_url: Optional[str] = None):
        self.cfg = cfg
        self.log = log
        self.session = session or requests.Session()
        self.base_url = (base_url or cfg.base_url).rstrip("/")

    # ------------------------------------------------------------------
    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> Optional[Any]:
        url = self._build_url(path)
        try:
            resp = self.session.request(method, url, timeout=self.cfg.timeout, **kwargs)
        except requests.RequestException as exc:
            self.log.warning("Calculator API request failed for %s: %s", path, exc)
            return None

        if resp.status_code != 200:
            detail = ""
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get("error", "")
            self.log.warning("Calculator API %s returned HTTP %s %s", path, resp.status_code, detail)
            return None

        try:
            return resp.json()
        except ValueError:
            self.log.warning("Calculator API %s returned non-JSON payload", path)
            return None

    # ------------------------------------------------------------------
    def health(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/api/health")

    def is_healthy(self) -> bool:
        payload = self.health()
        return bool(payload and payload.get("status") == "ok")

    def appliances(self, category: Optional[str] = None) -> Optional[Dict[str, Any]]:
        params = {"category": category} if category else None
        return self._request("GET", "/api/calculators/appliances", params=params)

    def home_load(self, appliances: Iterable[Appliance], **options) -> Optional[Dict[str, Any]]:
        body = {"appliances": [appliance_to_dict(a) for a in appliances], **options}
        return self._request("POST", "/api/calculators/home-load", json=body)

    def solar_panels(self, daily_usage_wh: float, panel_wattage: float, **options) -> Optional[Dict[str, Any]]:
        body = {"daily_usage_wh": daily_usage_wh, "panel_wattage": panel_wattage, **options}
        return self._request("POST", "/api/calculators/solar-panels", json=body)

    def system_design(self, appliances: Iterable[Appliance], panel_wattage: float, **options) -> Optional[Dict[str, Any]]:
        body = {
            "appliances": [appliance_to_dict(a) for a in appliances],
            "panel_wattage": panel_wattage,
            **options,
        }
        return self._request("POST", "/api/calculators/system-design", json=body)
