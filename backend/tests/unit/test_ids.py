"""Unit tests for numeric booking and payment IDs."""

from unittest.mock import patch

import pytest

from booking_core.services.ids import (
    BOOKING_ID_DIGITS,
    PAYMENT_ID_DIGITS,
    generate_booking_id,
    generate_numeric_id,
    generate_payment_id,
)


class TestNumericIds:
    """Tests for generate_numeric_id and its wrappers."""

    def test_booking_id_has_ten_digits(self) -> None:
        booking_id = generate_booking_id()

        assert len(booking_id) == BOOKING_ID_DIGITS == 10
        assert booking_id.isdigit()

    def test_payment_id_has_fifteen_digits(self) -> None:
        payment_id = generate_payment_id()

        assert len(payment_id) == PAYMENT_ID_DIGITS == 15
        assert payment_id.isdigit()

    def test_ids_differ_between_calls(self) -> None:
        assert len({generate_booking_id() for _ in range(50)}) == 50

    def test_small_values_are_zero_padded(self) -> None:
        with patch("booking_core.services.ids.hashlib.sha256") as sha256:
            sha256.return_value.hexdigest.return_value = "0" * 63 + "7"
            assert generate_numeric_id(5) == "00007"

    def test_rejects_non_positive_width(self) -> None:
        with pytest.raises(ValueError):
            generate_numeric_id(0)
