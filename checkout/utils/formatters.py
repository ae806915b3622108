from checkout.constants import CURRENCY_PREFIX, THOUSANDS_SEP


def money(v: int) -> str:
    """20000 -> 'Rp20.000' (IDR, no decimals)."""
    amount = int(round(v))
    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,}".replace(",", THOUSANDS_SEP)
    return f"{sign}{CURRENCY_PREFIX}{digits}"


format_price = money
