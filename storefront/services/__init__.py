# Services Module
from .money import to_decimal, round_money, multiply

__all__ = ["to_decimal", "round_money", "multiply"]
