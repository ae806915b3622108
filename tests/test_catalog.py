from __future__ import annotations

import copy
import json

import pytest

from checkout.services.catalog import CatalogError, load_catalog, parse_catalog

DOC = {
    "storeInfo": {"name": "Shop", "minPurchase": 2, "whatsappNumber": "62811"},
    "products": [
        {"id": "v1", "name": "Voucher", "type": "voucher", "price": 15000, "originalPrice": 20000},
        {"id": "p1", "name": "Mug", "type": "physical", "price": 40000},
    ],
    "formLabels": {"name": "Name", "phonePlaceholder": "08..."},
    "messages": {"orderMessage": "{orderDetails} / {total}", "checkoutButton": "Send"},
}


def test_parse_catalog() -> None:
    catalog = parse_catalog(DOC)
    assert [p.id for p in catalog.products] == ["v1", "p1"]
    assert catalog.get("v1").original_price == 20000
    assert catalog.get("p1").original_price is None
    assert catalog.get("nope") is None
    assert catalog.store.min_purchase == 2
    assert catalog.store.whatsapp_number == "62811"
    assert catalog.store.form_labels.name == "Name"
    assert catalog.store.form_labels.phone_placeholder == "08..."
    # missing keys keep defaults
    assert catalog.store.form_labels.email == "Email"
    assert catalog.store.messages.order_message == "{orderDetails} / {total}"
    assert catalog.store.messages.incomplete_form == "Mohon lengkapi semua data yang diperlukan"


@pytest.mark.parametrize(
    "path, value",
    [
        (("storeInfo", "minPurchase"), 0),
        (("storeInfo", "minPurchase"), "3"),
        (("storeInfo", "whatsappNumber"), ""),
        (("products", 0, "type"), "digital"),
        (("products", 0, "price"), -1),
        (("products", 0, "price"), 9.5),
        (("products", 1, "id"), "v1"),
        (("products", 1, "id"), ""),
    ],
)
def test_parse_catalog_rejects(path, value) -> None:
    doc = copy.deepcopy(DOC)
    target = doc
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    with pytest.raises(CatalogError):
        parse_catalog(doc)


def test_load_catalog_from_file(tmp_path) -> None:
    p = tmp_path / "store-config.json"
    p.write_text(json.dumps(DOC), encoding="utf-8")
    assert len(load_catalog(str(p)).products) == 2


def test_load_catalog_bad_file(tmp_path) -> None:
    p = tmp_path / "broken.json"
    p.write_text("{", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(str(p))
    with pytest.raises(CatalogError):
        load_catalog(str(tmp_path / "missing.json"))


def test_bundled_catalog_loads() -> None:
    catalog = load_catalog()
    assert catalog.products
    assert catalog.store.min_purchase >= 1
