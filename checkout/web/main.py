from __future__ import annotations

import secrets
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from checkout.constants import CHECKOUT_VIEW, CLIENT_COOKIE, LANDING_VIEW, NAV_PUSH, NAV_REPLACE, PRODUCT_TYPES
from checkout.db.sqlite import SqliteStorage, Storage, init_db
from checkout.models import Catalog, ContactInfo
from checkout.services.cart import line_items, remaining_for_minimum, total_items, total_price
from checkout.services.cart_store import CartStore
from checkout.services.catalog import load_catalog
from checkout.services.order import OrderComposer, OrderValidationError, can_submit, submit_hint
from checkout.utils.formatters import money

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

app = FastAPI(title="Storefront Checkout")

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["money"] = money
templates.env.globals["product_types"] = PRODUCT_TYPES

if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.on_event("startup")
def _startup() -> None:
    init_db()
    get_catalog()


# ---------------- dependencies ----------------

@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog()


def get_client_id(request: Request) -> str:
    cid = request.cookies.get(CLIENT_COOKIE)
    if not cid:
        cid = secrets.token_hex(16)
        request.state.new_client_id = cid
    return cid


def get_storage(cid: str = Depends(get_client_id)) -> Storage:
    return SqliteStorage(namespace=cid)


def _finish(request: Request, response: Response) -> Response:
    new_cid: Optional[str] = getattr(request.state, "new_client_id", None)
    if new_cid:
        response.set_cookie(CLIENT_COOKIE, new_cid, httponly=True, samesite="lax")
    return response


def _navigate_response(mode: str, target: str) -> RedirectResponse:
    # replace: no way back to the page we leave; push: regular history entry
    status = 303 if mode == NAV_REPLACE else 302
    return RedirectResponse(url=target, status_code=status)


def _render(request: Request, name: str, ctx: dict[str, Any], status_code: int = 200) -> Response:
    return _finish(request, templates.TemplateResponse(request, name, ctx, status_code=status_code))


def _checkout_url(contact: ContactInfo) -> str:
    q = {k: v for k, v in vars(contact).items() if v}
    return f"{CHECKOUT_VIEW}?{urlencode(q)}" if q else CHECKOUT_VIEW


def _empty_page(request: Request, store: CartStore, catalog: Catalog) -> Response:
    return _render(request, "empty.html", {"catalog": catalog, "redirect_after": store.redirect_delay})


# ---------------- landing ----------------

@app.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    msg: str = "",
    storage: Storage = Depends(get_storage),
    catalog: Catalog = Depends(get_catalog),
):
    store = CartStore(storage)
    try:
        store.load(allow_empty=True)
        cart = store.cart
    finally:
        store.close()
    return _render(request, "index.html", {"catalog": catalog, "cart": cart, "total_items": total_items(cart), "message": msg})


@app.post("/cart/add")
def cart_add(
    request: Request,
    product_id: str = Form(...),
    qty: int = Form(1),
    storage: Storage = Depends(get_storage),
    catalog: Catalog = Depends(get_catalog),
):
    if catalog.get(product_id) is None:
        return _finish(request, RedirectResponse(url="/?msg=unknown_product", status_code=303))

    store = CartStore(storage)
    try:
        store.load(allow_empty=True)
        store.add_item(product_id, qty)
    except ValueError:
        return _finish(request, RedirectResponse(url="/?msg=bad_qty", status_code=303))
    finally:
        store.close()
    return _finish(request, RedirectResponse(url=LANDING_VIEW, status_code=303))


# ---------------- checkout ----------------

def _checkout_ctx(store: CartStore, catalog: Catalog, contact: ContactInfo, error: str = "") -> dict[str, Any]:
    cart = store.cart
    return {
        "items": line_items(cart, catalog),
        "total_items": total_items(cart),
        "total_price": total_price(cart, catalog),
        "remaining": remaining_for_minimum(cart, catalog.store.min_purchase),
        "contact": contact,
        "can_submit": can_submit(contact, cart, catalog.store.min_purchase),
        "hint": submit_hint(contact, cart, catalog.store),
        "error": error,
        "catalog": catalog,
    }


@app.get("/checkout", response_class=HTMLResponse)
def checkout_get(
    request: Request,
    name: str = "",
    email: str = "",
    phone: str = "",
    storage: Storage = Depends(get_storage),
    catalog: Catalog = Depends(get_catalog),
):
    navs: list[tuple[str, str]] = []
    store = CartStore(storage, navigate=lambda mode, target: navs.append((mode, target)))
    try:
        if not store.load():
            mode, target = navs[-1] if navs else (NAV_REPLACE, LANDING_VIEW)
            return _finish(request, _navigate_response(mode, target))
        contact = ContactInfo(name=name, email=email, phone=phone)
        return _render(request, "checkout.html", _checkout_ctx(store, catalog, contact))
    finally:
        store.close()


@app.get("/checkout/back")
def checkout_back(request: Request):
    return _finish(request, _navigate_response(NAV_PUSH, LANDING_VIEW))


def _mutate(request: Request, storage: Storage, catalog: Catalog, contact: ContactInfo, op) -> Response:
    store = CartStore(storage)
    try:
        if not store.load():
            return _finish(request, _navigate_response(NAV_REPLACE, LANDING_VIEW))
        op(store)
        if store.redirect_pending:
            # the browser waits out the delay; this view ends with the request
            return _empty_page(request, store, catalog)
        return _finish(request, RedirectResponse(url=_checkout_url(contact), status_code=303))
    finally:
        store.close()


# product_id and qty come in the query string; the contact fields come from
# the checkout form the +/- buttons belong to
@app.post("/checkout/quantity")
def checkout_quantity(
    request: Request,
    product_id: str,
    qty: int,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    storage: Storage = Depends(get_storage),
    catalog: Catalog = Depends(get_catalog),
):
    contact = ContactInfo(name=name, email=email, phone=phone)
    if catalog.get(product_id) is None:
        return _finish(request, RedirectResponse(url=_checkout_url(contact), status_code=303))
    return _mutate(request, storage, catalog, contact, lambda s: s.update_quantity(product_id, qty))


@app.post("/checkout/remove")
def checkout_remove(
    request: Request,
    product_id: str,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    storage: Storage = Depends(get_storage),
    catalog: Catalog = Depends(get_catalog),
):
    contact = ContactInfo(name=name, email=email, phone=phone)
    return _mutate(request, storage, catalog, contact, lambda s: s.remove_item(product_id))


@app.post("/checkout/submit")
def checkout_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    storage: Storage = Depends(get_storage),
    catalog: Catalog = Depends(get_catalog),
):
    contact = ContactInfo(name=name.strip(), email=email.strip(), phone=phone)
    sent: list[str] = []
    store = CartStore(storage)
    try:
        if not store.load():
            return _finish(request, _navigate_response(NAV_REPLACE, LANDING_VIEW))

        composer = OrderComposer(catalog, store, sink=sent.append)
        try:
            composer.submit(contact)
        except OrderValidationError as e:
            return _render(request, "checkout.html", _checkout_ctx(store, catalog, contact, e.message), status_code=400)
    finally:
        store.close()

    # the shopper's browser opens the deep link
    return _finish(request, RedirectResponse(url=sent[-1], status_code=303))
