"""Unit tests for logging, tracing and metrics helpers."""

import json
import logging
import sys

import pytest

from affiliate_bridge.observability.context import get_current_store_id, store_context
from affiliate_bridge.observability.logging import StoreContextFilter, StructuredLogFormatter
from affiliate_bridge.observability.metrics import MetricsRegistry, get_metrics_registry
from affiliate_bridge.observability.telemetry import TelemetryConfig
from affiliate_bridge.observability.tracing import get_current_trace_id, traced


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("affiliate_bridge.test", logging.INFO, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStoreContext:
    """Tests for store context propagation."""

    def test_bind_and_reset(self):
        assert get_current_store_id() is None
        with store_context(1) as value:
            assert value == "1"
            assert get_current_store_id() == "1"
        assert get_current_store_id() is None

    def test_none(self):
        with store_context(None):
            assert get_current_store_id() is None


class TestStructuredLogFormatter:
    """Tests for StructuredLogFormatter."""

    def test_basic_fields(self):
        entry = json.loads(StructuredLogFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["message"] == "hello"
        assert entry["logger"] == "affiliate_bridge.test"
        assert "trace_id" not in entry
        assert entry["location"]["line"] == 10

    def test_store_id_included(self):
        with store_context("42"):
            entry = json.loads(StructuredLogFormatter().format(_record()))
        assert entry["store_id"] == "42"

    def test_extra_fields(self):
        """Test values passed with extra= are kept."""
        record = _record(remote_status=422, response_body='{"code": "taken"}')
        entry = json.loads(StructuredLogFormatter().format(record))

        assert entry["extra"] == {"remote_status": 422, "response_body": '{"code": "taken"}'}

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "affiliate_bridge.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        entry = json.loads(StructuredLogFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]

    def test_filter_sets_defaults(self):
        record = _record()
        assert StoreContextFilter().filter(record) is True
        assert record.store_id == "-"
        assert record.trace_id == ""


class TestTracing:
    """Tests for the traced decorator."""

    def test_traced_sync(self):
        @traced(name="test_function")
        def double(x):
            return x * 2

        assert double(5) == 10

    @pytest.mark.asyncio
    async def test_traced_async(self):
        @traced()
        async def double(x):
            return x * 2

        assert await double(4) == 8

    @pytest.mark.asyncio
    async def test_traced_reraises(self):
        @traced(name="failing")
        async def fail():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await fail()

    def test_no_trace_outside_span(self):
        assert get_current_trace_id() is None


class TestMetrics:
    """Tests for MetricsRegistry."""

    def test_registry_is_shared(self):
        assert get_metrics_registry() is get_metrics_registry()

    def test_record_methods(self):
        """Test recording without a configured meter provider does not raise."""
        registry = MetricsRegistry(meter_name="affiliate_bridge.test")
        registry.record_webhook("nuvemshop", "order/paid", "processed")
        registry.record_remote_failure("get_order")
        registry.record_coupon_created("1")

    def test_telemetry_defaults(self):
        config = TelemetryConfig()
        assert config.service_name == "affiliate-bridge"
        assert config.enable_tracing is False
        assert config.enable_metrics is True
