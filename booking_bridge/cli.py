"""Command-line entry points.

Usage:
    booking-bridge subscribe-webhook
    booking-bridge subscribe-webhook --address https://example.com/webhooks/shopify/orders-create
    booking-bridge serve --port 8000
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys

from booking_bridge.clients.shopify import ShopifyAdminClient
from booking_bridge.config import configure_logging, get_settings
from booking_bridge.registrar import ORDERS_CREATE_TOPIC, ensure_subscription


def cmd_subscribe_webhook(args: argparse.Namespace) -> int:
    """Ensure the orders/create webhook subscription exists."""
    settings = get_settings()
    address = args.address or settings.webhook_address

    missing = [
        name
        for name, value in (
            ("SHOP_NAME", settings.shop_name),
            ("ADMIN_API_ACCESS_TOKEN", settings.admin_api_access_token),
            ("WEBHOOK_ADDRESS", address),
        )
        if not value
    ]
    if missing:
        print(f"ERROR: missing configuration: {', '.join(missing)}", file=sys.stderr)
        return 1

    print(f"Shop Name:     {settings.shop_name}")
    print(f"Webhook URL:   {address}")
    print(f"Webhook Topic: {args.topic}")

    with ShopifyAdminClient.from_settings(settings) as client:
        result = ensure_subscription(client, address, args.topic)

    if result.status == "exists":
        print("Webhook subscription already exists.")
    elif result.status == "created":
        created = dataclasses.asdict(result.subscription) if result.subscription else {}
        print("Webhook subscription created successfully:")
        print(json.dumps(created, indent=2))
    else:
        print("Errors:", file=sys.stderr)
        print(json.dumps(result.errors, indent=2, default=str), file=sys.stderr)
    return 0 if result.ok else 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the webhook receiver under uvicorn."""
    import uvicorn

    from booking_bridge.app import create_app

    uvicorn.run(create_app(get_settings()), host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="booking-bridge",
        description="Shopify -> Calendly -> Klaviyo order bridge",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # subscribe-webhook
    p_sub = sub.add_parser("subscribe-webhook", help="Register the orders/create webhook")
    p_sub.add_argument("--address", help="Callback URL (defaults to WEBHOOK_ADDRESS)")
    p_sub.add_argument("--topic", default=ORDERS_CREATE_TOPIC, help="Webhook topic enum")
    p_sub.set_defaults(func=cmd_subscribe_webhook)

    # serve
    p_serve = sub.add_parser("serve", help="Run the webhook receiver")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    configure_logging(get_settings().log_level)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
