from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_money(v) -> Decimal:
    # str() first so floats like 3.5 don't carry binary noise into Decimal.
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v))
    except Exception:
        raise ValueError(f"Not a valid amount: {v!r}")


def round_money(v: Decimal) -> Decimal:
    return to_money(v).quantize(CENT, rounding=ROUND_HALF_UP)


def fmt_money(v, currency: str = "USD") -> str:
    symbol = {"USD": "$", "EUR": "€", "GBP": "£"}.get(currency, f"{currency} ")
    return f"{symbol}{round_money(v):,.2f}"


def is_blank(s) -> bool:
    return s is None or not str(s).strip()


def to_whole(v) -> int:
    # Refuse anything that would lose a fraction on int(); bools are not counts.
    if isinstance(v, bool):
        raise ValueError(f"Not a whole number: {v!r}")
    if isinstance(v, str):
        v = v.strip()
    try:
        d = Decimal(str(v))
    except Exception:
        raise ValueError(f"Not a whole number: {v!r}")
    if not d.is_finite() or d != d.to_integral_value():
        raise ValueError(f"Not a whole number: {v!r}")
    return int(d)
