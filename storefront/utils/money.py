"""
Money formatting (amounts are integer fils, 1 KWD = 1000 fils)
"""
from decimal import Decimal

FILS_PER_UNIT = 1000


def fils_to_amount(fils) -> str:
    """12500 -> '12.500'"""
    value = Decimal(int(fils or 0)) / FILS_PER_UNIT
    return f"{value:.3f}"


def format_money(fils, currency: str = "KWD") -> str:
    """12500 -> 'KWD 12.500'"""
    return f"{currency} {fils_to_amount(fils)}"
