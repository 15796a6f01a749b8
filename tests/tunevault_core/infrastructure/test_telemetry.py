"""Unit tests for TelemetryService."""

from unittest.mock import MagicMock, patch

import pytest

from tunevault_core.infrastructure.telemetry import TelemetryService


class TestTelemetryService:
    def test_is_singleton(self, fresh_service):
        assert TelemetryService() is TelemetryService()

    def test_disabled_setup_creates_no_provider(self, fresh_service, monkeypatch):
        from tunevault_core.config import settings

        monkeypatch.setattr(settings, "ENABLE_TELEMETRY", False)

        service = TelemetryService()
        service.setup()

        assert service.tracer_provider is None

    def test_disabled_instrument_app_is_noop(self, fresh_service, monkeypatch):
        from tunevault_core.config import settings

        monkeypatch.setattr(settings, "ENABLE_TELEMETRY", False)
        app = MagicMock()

        with patch("tunevault_core.infrastructure.telemetry.FastAPIInstrumentor") as mock_instr:
            TelemetryService().instrument_app(app)

        mock_instr.instrument_app.assert_not_called()

    def test_enabled_setup_instruments_httpx(self, fresh_service, monkeypatch):
        from tunevault_core.config import settings

        monkeypatch.setattr(settings, "ENABLE_TELEMETRY", True)
        monkeypatch.setattr(settings, "OTEL_EXPORTER_OTLP_ENDPOINT", None)

        with patch("tunevault_core.infrastructure.telemetry.trace") as mock_trace, patch(
            "tunevault_core.infrastructure.telemetry.HTTPXClientInstrumentor"
        ) as mock_httpx:
            service = TelemetryService()
            service.setup()

        assert service.tracer_provider is not None
        mock_trace.set_tracer_provider.assert_called_once_with(service.tracer_provider)
        mock_httpx.return_value.instrument.assert_called_once()


# --- Fixtures ---


@pytest.fixture
def fresh_service():
    TelemetryService._instance = None
    yield
    TelemetryService._instance = None
