from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote

from checkout.config import settings
from checkout.models import Cart, Catalog, ContactInfo, StoreConfig
from checkout.services.cart import line_items, remaining_for_minimum, total_items, total_price
from checkout.services.cart_store import CartStore
from checkout.utils.formatters import format_price
from checkout.utils.validators import digits_only

logger = logging.getLogger(__name__)

Sink = Callable[[str], Any]

REASON_INCOMPLETE = "incomplete"
REASON_MIN_PURCHASE = "min_purchase"

# characters encodeURIComponent leaves alone (besides alphanumerics)
_URI_COMPONENT_SAFE = "-_.!~*'()"


class OrderValidationError(ValueError):
    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


@dataclass(frozen=True)
class OrderResult:
    message: str
    url: str


def sanitize_phone(raw: str) -> str:
    return digits_only(raw)


def can_submit(contact: ContactInfo, cart: Cart, min_purchase: int) -> bool:
    return not contact.missing_fields() and total_items(cart) >= min_purchase


def validation_error(contact: ContactInfo, cart: Cart, store: StoreConfig) -> Optional[OrderValidationError]:
    """First unmet submit condition, or None. Contact fields are checked first."""
    if contact.missing_fields():
        return OrderValidationError(store.messages.incomplete_form, REASON_INCOMPLETE)
    if total_items(cart) < store.min_purchase:
        text = store.messages.min_purchase.replace("{minPurchase}", str(store.min_purchase), 1)
        return OrderValidationError(text, REASON_MIN_PURCHASE)
    return None


def submit_hint(contact: ContactInfo, cart: Cart, store: StoreConfig) -> str:
    """Footer text while the checkout button is disabled; empty when it is enabled."""
    remaining = remaining_for_minimum(cart, store.min_purchase)
    if remaining:
        return store.messages.add_more_hint.replace("{remaining}", str(remaining), 1)
    if contact.missing_fields():
        return store.messages.complete_form_hint
    return ""


def order_details(cart: Cart, catalog: Catalog) -> str:
    return "\n".join(
        f"{it.product.name} x{it.qty} = {format_price(it.line_total)}"
        for it in line_items(cart, catalog)
    )


def compose_message(cart: Cart, catalog: Catalog, contact: ContactInfo) -> str:
    # str.replace(..., 1): only the first occurrence of each placeholder
    return (
        catalog.store.messages.order_message
        .replace("{orderDetails}", order_details(cart, catalog), 1)
        .replace("{total}", format_price(total_price(cart, catalog)), 1)
        .replace("{name}", contact.name, 1)
        .replace("{email}", contact.email, 1)
        .replace("{phone}", contact.phone, 1)
    )


def build_whatsapp_url(number: str, message: str, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.whatsapp_base_url).rstrip("/")
    return f"{base}/{number}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"


def open_in_new_tab(url: str) -> None:
    webbrowser.open_new_tab(url)


class OrderComposer:
    def __init__(self, catalog: Catalog, store: CartStore, sink: Optional[Sink] = None) -> None:
        self.catalog = catalog
        self.store = store
        self.sink = sink or open_in_new_tab

    def can_submit(self, contact: ContactInfo) -> bool:
        return can_submit(contact, self.store.cart, self.catalog.store.min_purchase)

    def submit(self, contact: ContactInfo) -> OrderResult:
        """
        Validate, hand the deep link to the sink, then clear the cart.

        Raises OrderValidationError (nothing sent, nothing changed) when a
        contact field is empty or the cart is below the minimum purchase.
        Delivery is not awaited: the cart is cleared as soon as the sink
        returns.
        """
        cart = self.store.cart
        err = validation_error(contact, cart, self.catalog.store)
        if err is not None:
            logger.info("order refused: %s", err.reason)
            raise err

        message = compose_message(cart, self.catalog, contact)
        url = build_whatsapp_url(self.catalog.store.whatsapp_number, message)

        self.sink(url)
        logger.info("order dispatched: %s items, total %s", total_items(cart), total_price(cart, self.catalog))

        self.store.clear()
        return OrderResult(message=message, url=url)
