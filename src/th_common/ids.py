"""Prefixed random IDs for rows this service creates.

Format: "<prefix>_<24 hex chars>", e.g. "ord_3f9a0c1b2d4e5f60718293ab".
Prefixes make IDs self-describing in logs and support tickets.
"""

import uuid

ORDER_PREFIX = "ord"
ORDER_ITEM_PREFIX = "oit"
PROMO_PREFIX = "promo"


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:24]}"
