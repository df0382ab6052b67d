"""Telemetry instrumentation unit tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from seabattle.engine.fleet import Ruleset
from seabattle.engine.geometry import Position
from seabattle.lobby.service import GameService
from seabattle.telemetry import config as telemetry_config_module
from seabattle.telemetry import logger as logger_module
from seabattle.telemetry import metrics as metrics_module
from seabattle.telemetry import tracer as tracer_module
from seabattle.telemetry.config import TelemetryConfig

OTEL_ENV = (
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
    "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
    "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
    "OTEL_TRACES_ENABLED",
    "OTEL_METRICS_ENABLED",
    "OTEL_LOGS_ENABLED",
    "OTEL_SERVICE_NAME",
    "OTEL_SERVICE_NAMESPACE",
    "OTEL_RESOURCE_ATTRIBUTES",
    "SEABATTLE_ENABLE_TRACING",
    "SEABATTLE_ENABLE_METRICS",
    "SEABATTLE_ENABLE_LOGGING",
    "SEABATTLE_LOG_LEVEL",
)


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self._names = names
        self._names.append(span_name)
        self.attributes: dict[str, object] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, key, value):
        self.attributes[key] = value


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


def reset_singletons() -> None:
    tracer_module._TRACER = None
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METER = None
    metrics_module._METER_PROVIDER = None
    metrics_module._INSTRUMENTS = {}
    metrics_module._HISTOGRAMS = {}
    logger_module._LOGGER = None


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in OTEL_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_lazy_init_tracer(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    assert tracer_module.get_tracer() is tracer_module.get_tracer()

    provider_instance = MagicMock()
    provider_instance.get_tracer.return_value = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    tracer_module.init_tracing(
        TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example")
    )
    assert tracer_module._TRACER is provider_instance.get_tracer.return_value

    meter_provider = MagicMock()
    meter_provider.get_meter.return_value = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module, "OTLPMetricExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(
        metrics_module, "PeriodicExportingMetricReader", MagicMock(return_value=MagicMock())
    )
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    metrics_module.init_metrics(
        TelemetryConfig(enable_metrics=True, otlp_metrics_endpoint="http://example")
    )
    assert metrics_module._METER is meter_provider.get_meter.return_value
    reset_singletons()


def test_record_helpers_cache_instruments(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    meter = MagicMock()
    monkeypatch.setattr(metrics_module, "_METER", meter)

    metrics_module.record_game_metric("seabattle_test_total", 1, {"result": "hit"})
    metrics_module.record_game_metric("seabattle_test_total", 2)
    metrics_module.record_duration("seabattle_test_seconds", 0.5)

    meter.create_counter.assert_called_once_with("seabattle_test_total")
    counter = meter.create_counter.return_value
    counter.add.assert_any_call(1, attributes={"result": "hit"})
    counter.add.assert_any_call(2, attributes={})
    meter.create_histogram.return_value.record.assert_called_once_with(0.5, attributes={})
    reset_singletons()


def test_get_logger_is_cached() -> None:
    reset_singletons()
    logger = logger_module.get_logger("test")
    assert logger_module.get_logger("other") is logger
    reset_singletons()


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    config = TelemetryConfig(enable_tracing=True, enable_logging=True)
    telemetry_config_module.init_telemetry(config)
    assert calls == ["tr", "lo"]


def test_from_env_derives_endpoints(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    clean_env.setenv("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "http://logs:4317")
    clean_env.setenv("OTEL_RESOURCE_ATTRIBUTES", "deployment.environment=test,broken")
    clean_env.setenv("SEABATTLE_LOG_LEVEL", "debug")

    config = TelemetryConfig.from_env()
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.otlp_metrics_endpoint == "http://collector:4317/v1/metrics"
    assert config.otlp_logs_endpoint == "http://logs:4317"
    assert config.enable_tracing and config.enable_metrics and config.enable_logging
    assert config.log_level == "DEBUG"
    assert config.resource_dict()["deployment.environment"] == "test"
    assert config.resource_dict()["service.name"] == "seabattle"


def test_from_env_switches(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SEABATTLE_ENABLE_METRICS", "yes")
    clean_env.setenv("OTEL_TRACES_ENABLED", "off")
    config = TelemetryConfig.from_env()
    assert config.enable_metrics is True
    assert config.enable_tracing is False
    assert config.otlp_traces_endpoint is None


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    def fake_from_env(cls, **overrides):
        calls["count"] += 1
        return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(
        telemetry_config_module.TelemetryConfig, "from_env", classmethod(fake_from_env)
    )

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_service_emits_spans_and_metrics(
    monkeypatch: pytest.MonkeyPatch, duel_fleet
) -> None:
    tracer = DummyTracer()
    metric_calls: list[tuple[str, float, dict | None]] = []

    monkeypatch.setattr("seabattle.lobby.service.tracer", tracer)
    monkeypatch.setattr(
        "seabattle.lobby.service.record_game_metric",
        lambda name, value, attrs=None: metric_calls.append((name, value, attrs)),
    )
    monkeypatch.setattr("seabattle.lobby.service.record_duration", lambda *_, **__: None)

    service = GameService(rows=4, cols=4, ruleset=Ruleset("duel", (1, 1)))
    first = service.start_game(duel_fleet).value.session_id
    service.start_game(duel_fleet)
    assert tracer.span_names.count("service.start_game") == 2

    tracer.span_names.clear()
    metric_calls.clear()
    service.shoot(first, Position(3, 3))
    service.shoot(first, Position(0, 0))
    assert tracer.span_names == ["service.shoot", "service.shoot"]
    names = [name for name, _, _ in metric_calls]
    assert names == ["seabattle_shots_total", "seabattle_shots_rejected_total"]
    assert metric_calls[0][2] == {"result": "miss"}
    assert metric_calls[1][2] == {"reason": "not_your_turn"}


def test_rejected_fleet_is_counted(monkeypatch: pytest.MonkeyPatch, make_ship) -> None:
    metric_calls: list[str] = []
    monkeypatch.setattr(
        "seabattle.lobby.service.record_game_metric",
        lambda name, value, attrs=None: metric_calls.append(name),
    )
    service = GameService(rows=4, cols=4, ruleset=Ruleset("duel", (1, 1)))
    service.start_game([make_ship((0, 0), (0, 0))])
    assert metric_calls == ["seabattle_fleets_rejected_total"]
