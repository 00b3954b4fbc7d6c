"""
Item count extraction for the remote cart payload.

Strategies are tried in order and the first positive answer wins:
1. the server's explicit itemCount
2. the sum of per-line quantities
3. the number of lines
"""
from typing import Callable, List, Optional

from storefront.api.models import RemoteCartData

CountStrategy = Callable[[RemoteCartData], Optional[int]]


def server_item_count(data: RemoteCartData) -> Optional[int]:
    return data.item_count


def summed_quantities(data: RemoteCartData) -> Optional[int]:
    return sum(item.quantity or 0 for item in data.items)


def line_count(data: RemoteCartData) -> Optional[int]:
    return len(data.items)


COUNT_STRATEGIES: List[CountStrategy] = [
    server_item_count,
    summed_quantities,
    line_count,
]


def extract_item_count(data: RemoteCartData, strategies: Optional[List[CountStrategy]] = None) -> int:
    """Apply the strategies in priority order; 0 when none yields a positive value."""
    for strategy in strategies or COUNT_STRATEGIES:
        value = strategy(data)
        if value and value > 0:
            return value
    return 0
