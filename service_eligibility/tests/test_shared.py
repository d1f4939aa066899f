"""
Unit tests for shared configuration, logging, metrics and errors.
"""

import pytest
from prometheus_client import CollectorRegistry

from shared.config import get_config
from shared.errors import EligibilityServiceError
from shared.logging import (
    add_request_context,
    clear_context,
    service_context,
    set_locale_context,
    set_request_id,
)
from shared.metrics import MetricsCollector


class TestConfig:
    """Test cases for service configuration."""

    def test_defaults(self):
        config = get_config("eligibility")

        assert config.port == 3011
        assert config.default_locale == "en"
        assert config.batch_concurrency == 8
        assert config.strict_checking is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ELIGIBILITY_PORT", "4000")
        monkeypatch.setenv("ELIGIBILITY_BATCH_CONCURRENCY", "3")
        monkeypatch.setenv("ELIGIBILITY_STRICT_CHECKING", "true")

        config = get_config("eligibility")

        assert config.port == 4000
        assert config.batch_concurrency == 3
        assert config.strict_checking is True

    def test_explicit_port_wins(self, monkeypatch):
        monkeypatch.setenv("ELIGIBILITY_PORT", "4000")

        assert get_config("eligibility", port=5000).port == 5000

    def test_invalid_concurrency(self, monkeypatch):
        monkeypatch.setenv("ELIGIBILITY_BATCH_CONCURRENCY", "0")

        with pytest.raises(ValueError):
            get_config("eligibility")


class TestMetricsCollector:
    """Test cases for MetricsCollector."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("eligibility", registry=CollectorRegistry())

    def test_record_batch(self, metrics):
        metrics.record_batch("users", {"eligible": 2, "ineligible": 0, "error": 1})

        output = metrics.export().decode()
        assert 'eligibility_checks_total{mode="users",outcome="eligible"} 2.0' in output
        assert 'outcome="ineligible"' not in output
        assert 'eligibility_checks_total{mode="users",outcome="error"} 1.0' in output

    def test_time_operation(self, metrics):
        with metrics.time_operation("eligibility_check_duration_seconds", mode="schemas"):
            pass

        assert 'eligibility_check_duration_seconds_count{mode="schemas"} 1.0' in metrics.export().decode()

    def test_unknown_metric_ignored(self, metrics):
        metrics.increment_counter("does_not_exist", code="x")

        assert metrics.get_metric("does_not_exist") is None

    def test_other_services_skip_eligibility_metrics(self):
        metrics = MetricsCollector("gateway", registry=CollectorRegistry())

        assert metrics.get_metric("eligibility_checks_total") is None
        assert metrics.get_metric("http_requests_total") is not None


class TestErrors:
    """Test cases for service errors."""

    def test_to_response_carries_request_id(self):
        set_request_id("req-1")
        try:
            response = EligibilityServiceError("CODE", "message", {"a": 1}).to_response()
        finally:
            clear_context()

        assert response.model_dump() == {
            "trace_id": "req-1",
            "code": "CODE",
            "message": "message",
            "details": {"a": 1},
        }


class TestLogging:
    """Test cases for logging context processors."""

    def test_service_context(self):
        processor = service_context("eligibility")

        assert processor(None, "info", {"event": "x"}) == {"event": "x", "service": "eligibility"}

    def test_request_context(self):
        set_request_id("req-9")
        set_locale_context("hi")
        try:
            event = add_request_context(None, "info", {"event": "x"})
        finally:
            clear_context()

        assert event == {"event": "x", "request_id": "req-9", "locale": "hi"}

    def test_request_context_empty_outside_request(self):
        assert add_request_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_generated_request_id(self):
        try:
            request_id = set_request_id("")
        finally:
            clear_context()

        assert len(request_id) == 32
