"""Human-readable order number generation."""

import secrets
from datetime import datetime, timezone
from typing import Optional

# No 0, O or I, which read like O, 0 and 1
ORDER_NUMBER_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ123456789"
SUFFIX_LENGTH = 6


def generate_order_number(
    prefix: str = "CD", now: Optional[datetime] = None
) -> str:
    """Return a new order number such as ``CD-240105-XK9P2M``.

    Numbers are random, not sequential; uniqueness is enforced by the
    store and collisions are resolved by regenerating.
    """
    now = now or datetime.now(timezone.utc)
    suffix = "".join(
        secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(SUFFIX_LENGTH)
    )
    return f"{prefix}-{now:%y%m%d}-{suffix}"
