"""
Primary keys for qualtrack rows.

Every table uses a readable string key made of a short entity code and a
random suffix, e.g. `QUA-7KD2M0XA` for a qualification or `TRN-4PZQ81CE`
for a training, so ids quoted in audit events and support tickets show
what they point at.
"""

import random
import string

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 8


def generate_id(prefix: str = "ID") -> str:
    suffix = "".join(random.choices(SUFFIX_ALPHABET, k=SUFFIX_LENGTH))
    return f"{prefix}-{suffix}" if prefix else suffix


def prefixed(prefix: str):
    """Zero-argument column default producing ids with the given entity code."""

    def _default() -> str:
        return generate_id(prefix)

    _default.__name__ = f"generate_{prefix.lower()}_id"
    return _default
