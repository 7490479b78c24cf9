"""
Reference number generation for new registrations.

Format: <PREFIX>-<6 uppercase base-36 characters>, e.g. MKT-4K9Q2Z.
No collision check is made here; the unique constraint on ref_no is the
only guard.
"""

import secrets
import string

MARKET_PREFIX = "MKT"
VENDOR_PREFIX = "VND"

_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 6


def generate_reference(prefix: str) -> str:
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{suffix}"
