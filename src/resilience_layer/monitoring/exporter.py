"""Prometheus exposition for processes without their own /metrics endpoint."""

import structlog
from prometheus_client import start_http_server

from resilience_layer.config import Settings

logger = structlog.get_logger(__name__)


def start_metrics_server(settings: Settings) -> bool:
    """
    Serve the default registry on METRICS_PORT if PROMETHEUS_ENABLED.

    Applications that already expose /metrics (e.g. through their web
    framework) should not call this.

    Returns:
        True if the exporter was started
    """
    if not settings.PROMETHEUS_ENABLED:
        logger.info("Prometheus exporter disabled")
        return False

    start_http_server(settings.METRICS_PORT, addr=settings.METRICS_ADDR)
    logger.info("Prometheus exporter started", addr=settings.METRICS_ADDR, port=settings.METRICS_PORT)
    return True
