from __future__ import annotations


def round_money(value: float) -> float:
    return round(float(value), 2)


def format_money(value: float) -> str:
    return f"${round_money(value):,.2f}"
