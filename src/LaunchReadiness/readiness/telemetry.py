"""OpenTelemetry bootstrap for launch readiness runs."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional
from urllib.parse import unquote

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from .metrics import NAMESPACE

logger = logging.getLogger(__name__)


def exporter_headers(env: Mapping[str, str]) -> dict[str, str]:
    """Read ``OTEL_EXPORTER_OTLP_HEADERS`` into a dict.

    Values are percent-decoded. Entries without ``=`` or with an empty key are ignored.
    """

    entries = (entry.partition("=") for entry in env.get("OTEL_EXPORTER_OTLP_HEADERS", "").split(","))
    return {
        unquote(key.strip()): unquote(value.strip())
        for key, sep, value in entries
        if sep and key.strip()
    }


def configure_otel(
    service_name: str = NAMESPACE,
    env: Optional[Mapping[str, str]] = None,
) -> bool:
    """Install a global OTLP meter provider when an exporter endpoint is configured.

    Returns ``True`` when a provider was installed.
    """

    env = os.environ if env is None else env
    endpoint = env.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        logger.debug("readiness.otel.skipped", extra={"reason": "no endpoint"})
        return False
    headers = exporter_headers(env)
    exporter = OTLPMetricExporter(endpoint=endpoint, headers=headers or None)
    reader = PeriodicExportingMetricReader(exporter)
    resource = Resource.create({"service.name": service_name})
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    otel_metrics.set_meter_provider(provider)
    logger.info("readiness.otel.configured", extra={"endpoint": endpoint, "service_name": service_name})
    return True


__all__ = ["configure_otel", "exporter_headers"]
