"""Order payload parsing.

The body must already have passed signature verification; parsing happens on
the same raw bytes afterwards.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from booking_bridge.errors import ParseError

logger = logging.getLogger(__name__)


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    first_name: str
    last_name: str


class LineItem(BaseModel):
    """One product entry in an order. Custom items carry no product_id."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    product_id: int | str | None = None
    quantity: int = Field(default=1, ge=1)
    title: str = ""


class InboundOrder(BaseModel):
    """The subset of a Shopify `orders/create` payload the pipeline needs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    email: str = Field(min_length=1)
    customer: Customer
    created_at: datetime | None = None
    line_items: list[LineItem] = Field(default_factory=list)

    @property
    def first_name(self) -> str:
        return self.customer.first_name

    @property
    def last_name(self) -> str:
        return self.customer.last_name


def parse_order(body: bytes | str) -> InboundOrder:
    """Parse a verified webhook body into an InboundOrder.

    Raises:
        ParseError: body is not a JSON object or lacks email / customer name.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Order body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Order body must be a JSON object")

    try:
        order = InboundOrder.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ParseError(f"Order payload invalid ({missing})") from e

    logger.info(
        "Parsed order %s: %d line item(s) for %s %s",
        order.id,
        len(order.line_items),
        order.first_name,
        order.last_name,
    )
    return order
