"""Inbound Shopify webhooks: signature check and the orders/create route."""
