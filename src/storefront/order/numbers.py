"""Order numbers: short enough to read over the phone, too random to guess.

Format: ``ORD-<epoch millis>-<8 characters from A-Z0-9>``. The suffix comes
from ``secrets`` (about 41 bits), so knowing one order number says nothing
useful about the next.
"""

import secrets
import string
import time
from collections.abc import Callable

ORDER_NUMBER_PREFIX = "ORD"
SUFFIX_LENGTH = 8
MAX_ATTEMPTS = 5

_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now_ms: int | None = None) -> str:
    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{ORDER_NUMBER_PREFIX}-{millis}-{suffix}"


def unique_order_number(exists: Callable[[str], bool], attempts: int = MAX_ATTEMPTS) -> str:
    """Generate numbers until ``exists`` reports one as unused."""
    for _ in range(attempts):
        number = generate_order_number()
        if not exists(number):
            return number
    raise RuntimeError(f"Could not generate an unused order number in {attempts} attempts")
