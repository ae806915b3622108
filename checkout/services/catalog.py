from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from checkout.config import settings
from checkout.constants import PRODUCT_TYPES
from checkout.models import Catalog, FormLabels, Messages, Product, StoreConfig
from checkout.utils.validators import require_positive_int

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    pass


def _product(raw: Dict[str, Any]) -> Product:
    pid = str(raw.get("id", "")).strip()
    if not pid:
        raise CatalogError(f"product without id: {raw!r}")

    ptype = raw.get("type")
    if ptype not in PRODUCT_TYPES:
        raise CatalogError(f"product {pid}: unknown type {ptype!r}")

    price = raw.get("price")
    if isinstance(price, bool) or not isinstance(price, int) or price < 0:
        raise CatalogError(f"product {pid}: price must be a non-negative integer")

    original = raw.get("originalPrice")
    return Product(
        id=pid,
        name=str(raw.get("name", pid)),
        type=ptype,
        price=price,
        image=str(raw.get("image", "")),
        description=str(raw.get("description", "")),
        original_price=int(original) if original is not None else None,
    )


def _pick(cls, raw: Dict[str, Any], mapping: Dict[str, str]):
    # camelCase json -> dataclass fields, missing keys keep defaults
    kwargs = {field: raw[key] for key, field in mapping.items() if key in raw}
    return cls(**kwargs)


def parse_catalog(doc: Dict[str, Any]) -> Catalog:
    info = doc.get("storeInfo") or {}
    min_purchase = info.get("minPurchase", 1)
    try:
        require_positive_int(min_purchase, "storeInfo.minPurchase")
    except ValueError as e:
        raise CatalogError(str(e)) from e

    number = str(info.get("whatsappNumber", "")).strip()
    if not number:
        raise CatalogError("storeInfo.whatsappNumber is empty")

    products = tuple(_product(p) for p in doc.get("products") or [])
    seen = set()
    for p in products:
        if p.id in seen:
            raise CatalogError(f"duplicate product id: {p.id}")
        seen.add(p.id)

    labels = _pick(
        FormLabels,
        doc.get("formLabels") or {},
        {
            "name": "name",
            "namePlaceholder": "name_placeholder",
            "email": "email",
            "emailPlaceholder": "email_placeholder",
            "phone": "phone",
            "phonePlaceholder": "phone_placeholder",
        },
    )
    messages = _pick(
        Messages,
        doc.get("messages") or {},
        {
            "orderMessage": "order_message",
            "checkoutButton": "checkout_button",
            "incompleteForm": "incomplete_form",
            "minPurchase": "min_purchase",
            "addMoreHint": "add_more_hint",
            "completeFormHint": "complete_form_hint",
        },
    )

    store = StoreConfig(
        name=str(info.get("name", "")),
        min_purchase=min_purchase,
        whatsapp_number=number,
        form_labels=labels,
        messages=messages,
    )
    return Catalog(products=products, store=store)


def load_catalog(path: Optional[str] = None) -> Catalog:
    p = Path(path or settings.catalog_path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            doc = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"cannot read catalog {p}: {e}") from e

    catalog = parse_catalog(doc)
    logger.info("Catalog loaded: %s products from %s", len(catalog.products), p)
    return catalog
