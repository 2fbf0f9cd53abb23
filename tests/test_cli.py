"""Tests for the booking-bridge command line."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from booking_bridge import cli
from booking_bridge.models import WebhookSubscription
from booking_bridge.registrar import RegistrationResult


@pytest.fixture(autouse=True)
def patched_settings(settings):
    with patch("booking_bridge.cli.get_settings", return_value=settings):
        yield settings


@pytest.fixture()
def shopify_client():
    with patch("booking_bridge.cli.ShopifyAdminClient") as client_cls:
        yield client_cls.from_settings.return_value.__enter__.return_value


class TestSubscribeWebhook:
    def test_already_exists(self, shopify_client, capsys):
        with patch("booking_bridge.cli.ensure_subscription", return_value=RegistrationResult("exists")) as ensure:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["subscribe-webhook"])
        assert exc_info.value.code == 0
        ensure.assert_called_once_with(
            shopify_client, "https://hooks.example.com/webhooks/shopify/orders-create", "ORDERS_CREATE"
        )
        assert "already exists" in capsys.readouterr().out

    def test_created_prints_subscription(self, shopify_client, capsys):
        sub = WebhookSubscription(id="gid://shopify/WebhookSubscription/9", callback_url="https://x", topic="ORDERS_CREATE")
        with patch("booking_bridge.cli.ensure_subscription", return_value=RegistrationResult("created", sub)):
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["subscribe-webhook", "--address", "https://x"])
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "created successfully" in out
        assert "gid://shopify/WebhookSubscription/9" in out

    def test_errors_exit_nonzero(self, shopify_client, capsys):
        result = RegistrationResult("error", errors=[{"message": "Access denied"}])
        with patch("booking_bridge.cli.ensure_subscription", return_value=result):
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["subscribe-webhook"])
        assert exc_info.value.code == 1
        assert "Access denied" in capsys.readouterr().err

    def test_missing_configuration(self, patched_settings, capsys):
        patched_settings.shop_name = ""
        with patch("booking_bridge.cli.ensure_subscription") as ensure:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["subscribe-webhook"])
        assert exc_info.value.code == 1
        assert "SHOP_NAME" in capsys.readouterr().err
        ensure.assert_not_called()


def test_serve_runs_uvicorn():
    with patch("uvicorn.run") as run:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["serve", "--port", "9001"])
    assert exc_info.value.code == 0
    assert run.call_args.kwargs["port"] == 9001
