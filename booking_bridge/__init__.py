"""booking-bridge: turns Shopify orders into Calendly scheduling links.

Verified order webhooks are fanned out into single-use booking links, which are
recorded on the customer's Klaviyo profile and written back onto the order.
"""

__version__ = "0.1.0"
