# offgrid_calculator/services/http_service.py

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from offgrid_calculator.config import AppConfig
from offgrid_calculator.models.sizing import BatteryParams, SolarSystemParams
from offgrid_calculator.services.appliance_catalog import appliances_from_list, list_catalog
from offgrid_calculator.services.load_aggregator import summarize_load
from offgrid_calculator.services.output_formatter import (
    appliance_to_dict,
    design_to_dict,
    home_load_payload,
)
from offgrid_calculator.services.panel_sizing import (
    design_system,
    minimum_array_watts,
    panels_needed,
    recommend_battery,
)
from offgrid_calculator.services.validation import InvalidInput

Response = Tuple[int, Any]

GREETING = "Hello from the Off-Grid Living API"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CalculatorService:
    """Request routing for the calculator API, independent of the socket layer."""

    def __init__(self, cfg: AppConfig, log: logging.Logger, clock: Callable[[], str] = _utc_timestamp):
        self.cfg = cfg
        self.log = log
        self.clock = clock
        self._get_routes: Dict[str, Callable[[Dict[str, list[str]]], Response]] = {
            "/": self._hello,
            "/api/health": self._health,
            "/api/calculators/appliances": self._appliances,
        }
        self._post_routes: Dict[str, Callable[[Any], Response]] = {
            "/api/calculators/home-load": self._home_load,
            "/api/calculators/solar-panels": self._solar_panels,
            "/api/calculators/system-design": self._system_design,
        }

    # ------------------------------------------------------------------
    def handle(self, method: str, target: str, body: Optional[bytes] = None) -> Response:
        parsed = urlparse(target)
        path = parsed.path.rstrip("/") or "/"
        method = method.upper()

        if path not in self._get_routes and path not in self._post_routes:
            return HTTPStatus.NOT_FOUND, {"error": f"No route for {path}"}

        try:
            if method == "GET" and path in self._get_routes:
                return self._get_routes[path](parse_qs(parsed.query))
            if method == "POST" and path in self._post_routes:
                return self._post_routes[path](self._decode(body))
        except InvalidInput as exc:
            self.log.info("Rejected %s %s: %s", method, path, exc)
            return HTTPStatus.BAD_REQUEST, {"error": str(exc)}

        return HTTPStatus.METHOD_NOT_ALLOWED, {"error": f"{method} not allowed on {path}"}

    @staticmethod
    def _decode(body: Optional[bytes]) -> Any:
        if not body:
            raise InvalidInput("Request body is empty")
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidInput(f"Request body is not valid JSON: {exc}") from exc

    @staticmethod
    def _object(payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise InvalidInput("Request body must be a JSON object")
        return payload

    def _battery_params(self, payload: Dict[str, Any]) -> BatteryParams:
        base = self.cfg.battery
        return BatteryParams(
            safety_margin=payload.get("safety_margin", base.safety_margin),
            depth_of_discharge=payload.get("depth_of_discharge", base.depth_of_discharge),
            days_of_autonomy=payload.get("days_of_autonomy", base.days_of_autonomy),
        )

    def _solar_params(self, payload: Dict[str, Any]) -> SolarSystemParams:
        base = self.cfg.sizing
        return SolarSystemParams(
            panel_wattage=payload.get("panel_wattage", base.panel_wattage),
            average_sun_hours=payload.get("average_sun_hours", base.average_sun_hours),
            efficiency_loss=payload.get("efficiency_loss", base.efficiency_loss),
        )

    # ------------------------------------------------------------------
    def _hello(self, _query) -> Response:
        return HTTPStatus.OK, GREETING

    def _health(self, _query) -> Response:
        return HTTPStatus.OK, {
            "status": "ok",
            "timestamp": self.clock(),
            "service": self.cfg.api.service_name,
        }

    def _appliances(self, query) -> Response:
        category = (query.get("category") or [None])[0]
        return HTTPStatus.OK, {"appliances": [appliance_to_dict(a) for a in list_catalog(category)]}

    def _home_load(self, payload) -> Response:
        payload = self._object(payload)
        appliances = appliances_from_list(payload.get("appliances"))
        summary = summarize_load(appliances)
        battery = recommend_battery(summary, self._battery_params(payload))
        peak_hours = payload.get("peak_sun_hours", self.cfg.array.peak_sun_hours)
        min_array = minimum_array_watts(summary.total_wh, peak_hours)
        return HTTPStatus.OK, home_load_payload(summary, battery, min_array, peak_hours)

    def _solar_panels(self, payload) -> Response:
        payload = self._object(payload)
        if "daily_usage_wh" not in payload:
            raise InvalidInput("daily_usage_wh is required")
        params = self._solar_params(payload)
        panels = panels_needed(
            payload["daily_usage_wh"],
            params.panel_wattage,
            params.average_sun_hours,
            params.efficiency_loss,
        )
        return HTTPStatus.OK, {
            "panels": panels,
            "daily_usage_wh": payload["daily_usage_wh"],
            "panel_wattage": params.panel_wattage,
            "average_sun_hours": params.average_sun_hours,
            "efficiency_loss": params.efficiency_loss,
        }

    def _system_design(self, payload) -> Response:
        payload = self._object(payload)
        appliances = appliances_from_list(payload.get("appliances"))
        design = design_system(
            appliances,
            self._solar_params(payload),
            self._battery_params(payload),
            payload.get("peak_sun_hours", self.cfg.array.peak_sun_hours),
        )
        return HTTPStatus.OK, design_to_dict(design)


def _make_handler(service: CalculatorService):
    class CalculatorRequestHandler(BaseHTTPRequestHandler):
        server_version = "OffGridCalculator/1.0"

        def _send(self, status: int, payload: Any) -> None:
            if isinstance(payload, str):
                body = payload.encode("utf-8")
                content_type = "text/plain; charset=utf-8"
            else:
                body = json.dumps(payload).encode("utf-8")
                content_type = "application/json"
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.send_header("Access-Control-Allow-Origin", "*")
            self.end_headers()
            self.wfile.write(body)

        def do_GET(self) -> None:
            self._send(*service.handle("GET", self.path))

        def do_POST(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            self._send(*service.handle("POST", self.path, body))

        def do_OPTIONS(self) -> None:
            self.send_response(HTTPStatus.NO_CONTENT)
            self.send_header("Access-Control-Allow-Origin", "*")
            self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
            self.send_header("Access-Control-Allow-Headers", "Content-Type")
            self.end_headers()

        def log_message(self, format: str, *args) -> None:
            service.log.debug("%s - %s", self.address_string(), format % args)

    return CalculatorRequestHandler


def build_server(
    cfg: AppConfig,
    log: logging.Logger,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> ThreadingHTTPServer:
    """Bind the calculator API; port 0 picks a free port."""
    service = CalculatorService(cfg, log)
    bind_host = host if host is not None else cfg.api.host
    bind_port = port if port is not None else cfg.api.port
    server = ThreadingHTTPServer((bind_host, bind_port), _make_handler(service))
    server.daemon_threads = True
    return server


def serve(cfg: AppConfig, log: logging.Logger, host: Optional[str] = None, port: Optional[int] = None) -> None:
    server = build_server(cfg, log, host, port)
    bound_host, bound_port = server.server_address[:2]
    log.info("Application is running on: http://%s:%s", bound_host, bound_port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("Shutting down calculator API")
    finally:
        server.server_close()
