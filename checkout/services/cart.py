"""
Cart arithmetic. Pure functions: a cart is never mutated in place,
every operation returns a new dict (insertion order kept).
"""
from __future__ import annotations

from typing import List

from checkout.models import Cart, Catalog, LineItem


def update_quantity(cart: Cart, product_id: str, new_quantity: int) -> Cart:
    new_cart = dict(cart)
    if new_quantity <= 0:
        new_cart.pop(product_id, None)
    else:
        new_cart[product_id] = new_quantity
    return new_cart


def remove_item(cart: Cart, product_id: str) -> Cart:
    new_cart = dict(cart)
    new_cart.pop(product_id, None)
    return new_cart


def add_item(cart: Cart, product_id: str, quantity: int = 1) -> Cart:
    return update_quantity(cart, product_id, cart.get(product_id, 0) + quantity)


def total_items(cart: Cart) -> int:
    return sum(cart.values())


def line_items(cart: Cart, catalog: Catalog) -> List[LineItem]:
    """Resolved entries in cart order; ids missing from the catalog are skipped."""
    items = []
    for pid, qty in cart.items():
        product = catalog.get(pid)
        if product is None:
            continue
        items.append(LineItem(product=product, qty=qty))
    return items


def total_price(cart: Cart, catalog: Catalog) -> int:
    return sum(it.line_total for it in line_items(cart, catalog))


def remaining_for_minimum(cart: Cart, min_purchase: int) -> int:
    return max(min_purchase - total_items(cart), 0)
