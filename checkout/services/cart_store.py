from __future__ import annotations

import json
import logging
import sqlite3
from typing import Callable, Optional

from checkout.config import settings
from checkout.constants import CART_KEY, LANDING_VIEW, NAV_REPLACE
from checkout.db.sqlite import Storage
from checkout.models import Cart
from checkout.services import cart as engine
from checkout.services.timer import RedirectTimer, Scheduler
from checkout.utils.validators import require_positive_int

logger = logging.getLogger(__name__)

Navigator = Callable[[str, str], None]  # (mode, target)


class CartLoadError(ValueError):
    pass


def _parse_cart(raw: str) -> Cart:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise CartLoadError(f"cart must be a JSON object, got {type(data).__name__}")
    cart: Cart = {}
    for pid, qty in data.items():
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise CartLoadError(f"bad quantity for {pid!r}: {qty!r}")
        cart[str(pid)] = qty
    return cart


class CartStore:
    """
    Cart state of one checkout view.

    Built when the view opens, close()d when it goes away. Every mutation
    returns the new cart and then writes it to storage. When a mutation
    empties a loaded cart, a RedirectTimer sends the view back to landing
    after `redirect_delay` seconds unless close() comes first.
    """

    def __init__(
        self,
        storage: Storage,
        navigate: Optional[Navigator] = None,
        redirect_delay: Optional[float] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.storage = storage
        self._navigate = navigate
        self.redirect_delay = settings.redirect_delay if redirect_delay is None else redirect_delay
        self._scheduler = scheduler
        self._cart: Cart = {}
        self._loaded = False
        self._closed = False
        self._timer: Optional[RedirectTimer] = None

    @property
    def cart(self) -> Cart:
        return dict(self._cart)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def redirect_pending(self) -> bool:
        return self._timer is not None and self._timer.pending

    # ---------------- load / persist ----------------

    def load(self, allow_empty: bool = False) -> bool:
        """True if an active (non-empty) cart was restored.

        False means "no session": nothing stored, an empty mapping or an
        unreadable payload. The checkout view is replaced by landing in that
        case; the landing view itself passes allow_empty=True and keeps
        going with an empty cart.
        """
        try:
            raw = self.storage.get(CART_KEY)
            cart = _parse_cart(raw) if raw is not None else {}
        except (sqlite3.Error, OSError, ValueError) as e:
            # json.JSONDecodeError and CartLoadError are ValueErrors
            logger.error("Error loading cart from storage: %s", e)
            cart = {}

        self._cart = cart
        if not cart and not allow_empty:
            self._go(NAV_REPLACE, LANDING_VIEW)
            return False

        self._loaded = True
        return bool(cart)

    def persist(self) -> None:
        if not self._loaded:
            return
        try:
            self.storage.set(CART_KEY, json.dumps(self._cart))
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            logger.error("Error saving cart to storage: %s", e)

    def clear(self) -> None:
        """Drop the cart in memory and in storage (after a submitted order)."""
        self._cancel_timer()
        self._cart = {}
        try:
            self.storage.delete(CART_KEY)
        except (sqlite3.Error, OSError) as e:
            logger.error("Error clearing stored cart: %s", e)

    # ---------------- mutations ----------------

    def update_quantity(self, product_id: str, qty: int) -> Cart:
        return self._apply(engine.update_quantity(self._cart, product_id, qty))

    def remove_item(self, product_id: str) -> Cart:
        return self._apply(engine.remove_item(self._cart, product_id))

    def add_item(self, product_id: str, qty: int = 1) -> Cart:
        require_positive_int(qty, "qty")
        return self._apply(engine.add_item(self._cart, product_id, qty))

    def _apply(self, new_cart: Cart) -> Cart:
        was_empty = not self._cart
        self._cart = new_cart
        self.persist()

        if self._loaded and not self._closed:
            if not new_cart and not was_empty:
                self._schedule_redirect()
            elif new_cart:
                self._cancel_timer()
        return self.cart

    # ---------------- empty-cart transition ----------------

    def _schedule_redirect(self) -> None:
        self._cancel_timer()
        self._timer = RedirectTimer(
            self.redirect_delay,
            lambda: self._go(NAV_REPLACE, LANDING_VIEW),
            scheduler=self._scheduler,
        )
        self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _go(self, mode: str, target: str) -> None:
        if self._closed or self._navigate is None:
            return
        logger.info("navigate %s -> %s", mode, target)
        self._navigate(mode, target)

    def close(self) -> None:
        """View teardown. Pending redirect is cancelled, nothing fires later."""
        self._cancel_timer()
        self._closed = True
