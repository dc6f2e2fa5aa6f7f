# lpg_orders/utils/money.py

from decimal import Decimal, ROUND_HALF_UP

Money = Decimal

CENT = Decimal("0.01")
UNIT = Decimal("1")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)


def round_units(x) -> Money:
    # Whole currency units, half away from zero (2.5 -> 3)
    return D(x).quantize(UNIT, rounding=ROUND_HALF_UP).quantize(CENT)
