# auto_invoice/allocator.py
from __future__ import annotations

import logging
from typing import Optional

from .config import COUNTER_KEY
from .errors import CounterStoreError
from .models import Reservation

logger = logging.getLogger(__name__)


def parse_counter(raw: Optional[str], key: str = COUNTER_KEY) -> int:
    """Last invoice number issued; a missing value counts as 0."""
    if raw is None or str(raw).strip() == "":
        return 0
    try:
        value = int(str(raw).strip(), 10)
    except ValueError:
        raise CounterStoreError(f"{key} holds a non-integer value: {raw!r}")
    if value < 0:
        raise CounterStoreError(f"{key} holds a negative value: {value}")
    return value


def read_counter(store, key: str = COUNTER_KEY) -> int:
    return parse_counter(store.get(key), key)


def reserve(store, batch_size: int, key: str = COUNTER_KEY) -> Reservation:
    """Reserve ``batch_size`` consecutive invoice numbers.

    The new counter value is persisted before this returns. Once it is,
    the numbers are spent whatever happens to the deliveries. Stores that
    offer ``compare_and_set`` get a conditional write, so an overlapping
    run fails instead of reusing numbers.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    raw = store.get(key)
    last = parse_counter(raw, key)
    start = last + 1
    end = last + batch_size

    if hasattr(store, "compare_and_set"):
        store.compare_and_set(key, raw, str(end))
    else:
        store.put(key, str(end))

    logger.info("Reserved invoice numbers %d-%d (previous counter %d)", start, end, last)
    return Reservation(start=start, end=end)
