from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Iterable, TextIO

APP_LOGGER = "offgrid"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ConsoleLog:
    """Route calculator logs to the terminal, away from command output."""

    def __init__(
        self,
        level: str = "INFO",
        quiet: bool = False,
        debug_modules: Iterable[str] | None = None,
        stream: TextIO | None = None,
    ):
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.quiet = quiet
        self.debug_modules = list(debug_modules or [])
        # stdout carries --json payloads, so logs default to stderr
        self.stream = stream or sys.stderr

    def setup(self) -> logging.Logger:
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(logging.DEBUG)

        if not self.quiet:
            handler = logging.StreamHandler(self.stream)
            handler.setLevel(self.level)
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            root.addHandler(handler)

        for name in self.debug_modules:
            logging.getLogger(name).setLevel(logging.DEBUG)

        return logging.getLogger(APP_LOGGER)


@dataclass
class CalculationLogEntry:
    timestamp: str
    command: str
    inputs: dict[str, Any] | None
    result: Any
    error: str | None = None


class StructuredLog:
    """Append-only JSONL record of calculation runs."""

    def __init__(self, path: str | None, enabled: bool = False):
        self.enabled = enabled and bool(path)
        self.path = Path(path).expanduser() if path else None
        if self.enabled and self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, entry: CalculationLogEntry) -> None:
        if not self.enabled or not self.path:
            return
        payload = asdict(entry)
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(payload, default=str) + "\n")
        except OSError as exc:  # pragma: no cover - best-effort logging
            logging.getLogger(__name__).debug("Structured log write skipped: %s", exc)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
