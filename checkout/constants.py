PRODUCT_TYPES = {
    "voucher": "Voucher",
    "physical": "Physical",
}

# localStorage-style slot holding the JSON cart
CART_KEY = "cart"

CURRENCY_PREFIX = "Rp"
THOUSANDS_SEP = "."

NAV_REPLACE = "replace"
NAV_PUSH = "push"
LANDING_VIEW = "/"
CHECKOUT_VIEW = "/checkout"

CLIENT_COOKIE = "cid"
