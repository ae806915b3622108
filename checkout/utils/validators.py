import re

_NON_DIGITS = re.compile(r"[^0-9]")


def digits_only(v: str | None) -> str:
    return _NON_DIGITS.sub("", v or "")


def require_positive_int(v: int, name: str = "value") -> None:
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise ValueError(f"{name} must be a positive integer")
