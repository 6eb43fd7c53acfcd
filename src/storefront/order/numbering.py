"""Human-readable order numbers: ``ORD-<YYYYMMDDHHMMSS>-<6 upper alnum>``."""

import secrets
import string

from storefront.domain import setting
from storefront.utils.dates import utcnow

_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 6


def generate_order_number(at=None) -> str:
    prefix = setting("order_number_prefix", "ORD")
    stamp = (at or utcnow()).strftime("%Y%m%d%H%M%S")
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{stamp}-{suffix}"
