"""Shared fixtures: a two-product catalog, in-memory storage and a manual clock."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from checkout.db.sqlite import MemoryStorage
from checkout.models import Catalog, Messages, Product, StoreConfig

TEMPLATE = (
    "Order:\n{orderDetails}\nTotal: {total}\n"
    "Name: {name}\nEmail: {email}\nPhone: {phone}"
)


@pytest.fixture
def catalog() -> Catalog:
    products = (
        Product(id="A", name="ProductA", type="voucher", price=10000),
        Product(id="B", name="ProductB", type="physical", price=5000, original_price=7500),
    )
    store = StoreConfig(
        name="Test Store",
        min_purchase=3,
        whatsapp_number="6281200000000",
        messages=Messages(order_message=TEMPLATE),
    )
    return Catalog(products=products, store=store)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@dataclass
class _Handle:
    due: float
    fn: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """scheduler(delay, fn) double; nothing runs until advance()."""

    now: float = 0.0
    handles: list[_Handle] = field(default_factory=list)

    def __call__(self, delay: float, fn: Callable[[], None]) -> _Handle:
        h = _Handle(due=self.now + delay, fn=fn)
        self.handles.append(h)
        return h

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for h in list(self.handles):
            if not h.cancelled and h.due <= self.now:
                self.handles.remove(h)
                h.fn()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def navigations() -> list[tuple[str, str]]:
    return []
