"""
Pure helpers shared by services: URL normalization and price rounding.
"""

from utils.url_normalization import normalize_url
from utils.price_rounding import auto_round_price

__all__ = [
    "normalize_url",
    "auto_round_price",
]
