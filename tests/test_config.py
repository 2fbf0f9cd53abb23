"""Tests for environment-driven settings."""

from __future__ import annotations

from booking_bridge.config import Settings


class TestSettings:
    def test_reads_deployment_variable_names(self, monkeypatch):
        monkeypatch.setenv("SHOPIFY_WEBHOOK_SECRET", "whsec")
        monkeypatch.setenv("SHOP_NAME", "acme")
        monkeypatch.setenv("ADMIN_API_ACCESS_TOKEN", "shpat_x")
        monkeypatch.setenv("CALENDLY_API_TOKEN", "cal")
        monkeypatch.setenv("KLAVIYO_API_KEY", "pk")
        monkeypatch.setenv("WEBHOOK_ADDRESS", "https://hooks.example.com/x")
        s = Settings(_env_file=None)
        assert s.shopify_webhook_secret == "whsec"
        assert s.shop_name == "acme"
        assert s.admin_api_access_token == "shpat_x"
        assert s.calendly_api_token == "cal"
        assert s.klaviyo_api_key == "pk"
        assert s.webhook_address == "https://hooks.example.com/x"

    def test_defaults(self, monkeypatch):
        for name in ("SHOPIFY_API_VERSION", "KLAVIYO_REVISION", "KLAVIYO_METRIC_NAME", "HTTP_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.shopify_api_version == "2023-10"
        assert s.klaviyo_revision == "2023-07-15"
        assert s.klaviyo_metric_name == "Purchase with Scheduling Link"
        assert s.http_timeout == 30.0
