"""Tests for container wiring."""

import asyncio

import pytest

from meal_subscriptions import containers
from meal_subscriptions.adapters.push_client import HttpxPushClient
from meal_subscriptions.config import Settings
from meal_subscriptions.containers import build_container
from tests.test_supabase_adapters import FakeSupabaseClient


def test_build_container_creates_services(
    settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: list[tuple[str, str]] = []

    def fake_create_client(url: str, key: str) -> FakeSupabaseClient:
        seen.append((url, key))
        return FakeSupabaseClient()

    monkeypatch.setattr(containers, "create_client", fake_create_client)

    container = build_container(settings)

    assert seen == [("https://example.supabase.co", "service-key")]
    assert container.order_service.cart_aggregator is container.cart_aggregator
    assert container.notification_service.push_client is None
    asyncio.run(container.close_resources())


def test_build_container_with_push_gateway(
    settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        containers, "create_client", lambda url, key: FakeSupabaseClient()
    )
    settings.push_gateway_url = "https://push.example/"

    container = build_container(settings)

    push_client = container.notification_service.push_client
    assert isinstance(push_client, HttpxPushClient)
    assert push_client.base_url == "https://push.example"
    asyncio.run(container.close_resources())
