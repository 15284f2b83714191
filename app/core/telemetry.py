import logging
from typing import Any

from app.core.config import Settings

logger = logging.getLogger("telemetry")


class Telemetry:
    def __init__(self, service_name: str, service_version: str, environment: str):
        self.resource = {
            "service.name": service_name,
            "service.version": service_version,
            "service.namespace": "todolist",
            "environment": environment,
        }
        self.events_emitted = 0

    def emit(self, event: str, **fields: Any) -> None:
        self.events_emitted += 1
        logger.info(event, extra={"event": event, **self.resource, **fields})


_telemetry: Telemetry | None = None


def init_telemetry(settings: Settings) -> Telemetry:
    global _telemetry
    if _telemetry is None:
        _telemetry = Telemetry(
            settings.app_name, settings.app_version, settings.environment
        )
        logger.info(f"Telemetry started for {settings.app_name}")
    return _telemetry


def shutdown_telemetry() -> None:
    global _telemetry
    if _telemetry is None:
        return
    logger.info(f"Telemetry shut down after {_telemetry.events_emitted} event(s)")
    _telemetry = None


def emit(event: str, **fields: Any) -> None:
    """Record a domain event; a no-op while telemetry is not running."""
    if _telemetry is not None:
        _telemetry.emit(event, **fields)
