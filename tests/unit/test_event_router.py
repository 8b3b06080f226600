"""Unit tests for webhook classification and routing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from affiliate_bridge.exceptions import MissingPrerequisiteError
from affiliate_bridge.integrations.goaffpro.webhooks import (
    GoAffProWebhookHandler,
    extract_affiliate,
)
from affiliate_bridge.models.event import AffiliateEventKind, OrderEventKind, Platform, WebhookEvent
from affiliate_bridge.observability.metrics import MetricsRegistry
from affiliate_bridge.sync.router import EventRouter, classify_affiliate_event, classify_order_event


class TestClassifyOrderEvent:
    """Tests for classify_order_event."""

    @pytest.mark.parametrize(
        "event,expected",
        [
            ("order/paid", OrderEventKind.PAID),
            ("order/created", OrderEventKind.CREATED),
            ("order/updated", OrderEventKind.UPDATED),
        ],
    )
    def test_qualifying_events(self, event, expected):
        assert classify_order_event(event) == expected

    @pytest.mark.parametrize("event", ["order/shipped", "app/uninstalled", "ORDER/PAID", "", None])
    def test_other_events_ignored(self, event):
        """Test only the exact order identifiers qualify."""
        assert classify_order_event(event) is None


class TestClassifyAffiliateEvent:
    """Tests for classify_affiliate_event."""

    @pytest.mark.parametrize(
        "event",
        [
            "affiliate_signup",
            "Affiliate Created",
            "affiliate.updated",
            "AFFILIATE_APPROVED",
            "affiliate/create",
        ],
    )
    def test_upsert_events(self, event):
        assert classify_affiliate_event(event) == AffiliateEventKind.UPSERT

    @pytest.mark.parametrize(
        "event", ["affiliate_deleted", "order_created", "payout_updated", "unknown", None]
    )
    def test_other_events(self, event):
        """Test both halves must match."""
        assert classify_affiliate_event(event) == AffiliateEventKind.OTHER


class TestGoAffProWebhookHandler:
    """Tests for GoAffPro secret check and decoding."""

    @pytest.fixture
    def handler(self):
        return GoAffProWebhookHandler(webhook_secret="hook-secret")

    def test_verify_secret(self, handler):
        assert handler.verify_secret("hook-secret") is True
        assert handler.verify_secret("wrong") is False
        assert handler.verify_secret(None) is False

    def test_empty_configured_secret_rejects(self):
        assert GoAffProWebhookHandler(webhook_secret="").verify_secret("") is False

    def test_event_from_header_first(self, handler):
        event = handler.parse_event({"event": "body_event", "type": "t"}, "affiliate_signup")
        assert event.kind == "affiliate_signup"
        assert event.platform == Platform.GOAFFPRO

    def test_event_from_body(self, handler):
        assert handler.parse_event({"event": "affiliate_updated"}).kind == "affiliate_updated"
        assert handler.parse_event({"type": "affiliate_created"}).kind == "affiliate_created"

    def test_event_defaults_to_unknown(self, handler):
        assert handler.parse_event({}).kind == "unknown"
        assert handler.parse_event(None).kind == "unknown"

    def test_subject_is_affiliate_id(self, handler, sample_affiliate_event):
        assert handler.parse_event(sample_affiliate_event).subject_id == "555"

    def test_extract_affiliate_order(self):
        """Test affiliate, data and payload are checked in that order."""
        assert extract_affiliate({"data": {"id": 1}, "payload": {"id": 2}}) == {"id": 1}
        assert extract_affiliate({"payload": {"id": 2}}) == {"id": 2}
        assert extract_affiliate({"affiliate": {}, "data": "x"}) is None


@pytest.fixture
def order_handler():
    handler = MagicMock()
    handler.handle = AsyncMock(return_value="order-result")
    return handler


@pytest.fixture
def affiliate_handler():
    handler = MagicMock()
    handler.handle = AsyncMock(return_value="affiliate-result")
    return handler


@pytest.fixture
def metrics():
    return MagicMock(spec=MetricsRegistry)


@pytest.fixture
def router(order_handler, affiliate_handler, metrics):
    return EventRouter(order_handler, affiliate_handler, metrics=metrics)


class TestEventRouter:
    """Tests for EventRouter.dispatch."""

    @pytest.mark.asyncio
    async def test_order_paid_dispatched(self, router, order_handler, affiliate_handler, metrics):
        event = WebhookEvent(platform=Platform.NUVEMSHOP, kind="order/paid", store_id="1", subject_id="42")

        result = await router.dispatch(event)

        assert result.handled is True
        assert result.detail == "order-result"
        order_handler.handle.assert_awaited_once_with(event)
        affiliate_handler.handle.assert_not_awaited()
        metrics.record_webhook.assert_called_once_with("nuvemshop", "order/paid", "processed")

    @pytest.mark.asyncio
    async def test_other_order_event_ignored(self, router, order_handler, metrics):
        """Test order/shipped is acknowledged without any work."""
        event = WebhookEvent(platform=Platform.NUVEMSHOP, kind="order/shipped", store_id="1", subject_id="42")

        result = await router.dispatch(event)

        assert result.handled is False
        order_handler.handle.assert_not_awaited()
        metrics.record_webhook.assert_called_once_with("nuvemshop", "order/shipped", "ignored")

    @pytest.mark.asyncio
    async def test_affiliate_upsert_dispatched(self, router, affiliate_handler, sample_affiliate_event):
        event = WebhookEvent(
            platform=Platform.GOAFFPRO, kind="affiliate_signup", raw_payload=sample_affiliate_event
        )

        result = await router.dispatch(event)

        assert result.handled is True
        assert result.detail == "affiliate-result"
        affiliate_handler.handle.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_affiliate_event_without_affiliate_ignored(self, router, affiliate_handler):
        event = WebhookEvent(platform=Platform.GOAFFPRO, kind="affiliate_signup", raw_payload={})

        result = await router.dispatch(event)

        assert result.handled is False
        affiliate_handler.handle.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_upsert_affiliate_event_ignored(self, router, affiliate_handler, sample_affiliate_event):
        event = WebhookEvent(
            platform=Platform.GOAFFPRO, kind="affiliate_deleted", raw_payload=sample_affiliate_event
        )

        result = await router.dispatch(event)

        assert result.handled is False
        affiliate_handler.handle.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_affiliate_failure_recorded_and_raised(
        self, router, affiliate_handler, metrics, sample_affiliate_event
    ):
        affiliate_handler.handle.side_effect = MissingPrerequisiteError()
        event = WebhookEvent(
            platform=Platform.GOAFFPRO, kind="affiliate_signup", raw_payload=sample_affiliate_event
        )

        with pytest.raises(MissingPrerequisiteError):
            await router.dispatch(event)

        metrics.record_webhook.assert_called_once_with("goaffpro", "affiliate_signup", "failed")
