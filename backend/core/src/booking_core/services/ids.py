"""Short numeric IDs for bookings and payments.

An ID is the SHA-256 digest of a random UUID, read as a big integer and
reduced modulo ``10**digits``, left-padded with zeros.
"""

import hashlib
import uuid

BOOKING_ID_DIGITS = 10
PAYMENT_ID_DIGITS = 15


def generate_numeric_id(digits: int = BOOKING_ID_DIGITS) -> str:
    """Generate a fixed-width decimal ID.

    Args:
        digits: Number of decimal digits

    Returns:
        Zero-padded numeric string of exactly ``digits`` characters
    """
    if digits <= 0:
        raise ValueError("digits must be positive")
    digest = hashlib.sha256(str(uuid.uuid4()).encode()).hexdigest()
    return str(int(digest, 16) % 10**digits).zfill(digits)


def generate_booking_id() -> str:
    return generate_numeric_id(BOOKING_ID_DIGITS)


def generate_payment_id() -> str:
    return generate_numeric_id(PAYMENT_ID_DIGITS)
