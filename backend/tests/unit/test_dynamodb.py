"""Unit tests for the DynamoDB wrapper and value conversion."""

from decimal import Decimal

from booking_core.models import BookingStatus, Guests
from booking_core.services.dynamodb import (
    DynamoDBService,
    deserialize_item,
    get_dynamodb_service,
    reset_dynamodb_service,
    serialize_item,
    to_dynamodb,
)


class TestConversion:
    def test_to_dynamodb(self) -> None:
        value = {
            "status": BookingStatus.PAID,
            "rate": 1.5,
            "guests": Guests(adults=2),
            "missing": None,
            "flags": [True, None],
        }

        assert to_dynamodb(value) == {
            "status": "paid",
            "rate": Decimal("1.5"),
            "guests": {"adults": 2, "children": 0, "infants": 0},
            "flags": [True, None],
        }

    def test_serialize_round_trip(self) -> None:
        item = {"id": "1", "total": Decimal("300"), "tags": ["a"]}

        assert serialize_item(item)["total"] == {"N": "300"}
        assert deserialize_item(serialize_item(item)) == item


class TestDynamoDBService:
    def test_table_names_use_prefix(self, db) -> None:
        assert db.table_name("bookings") == "test-rstays-bookings"

    def test_put_get_and_conditional_put(self, db) -> None:
        assert db.put_item("promos", {"code": "SUMMER", "discount": Decimal("20")})
        assert not db.put_item(
            "promos",
            {"code": "SUMMER", "discount": Decimal("30")},
            condition_expression="attribute_not_exists(code)",
        )
        assert db.get_item("promos", {"code": "SUMMER"})["discount"] == Decimal("20")
        assert db.get_item("promos", {"code": "WINTER"}) is None

    def test_failed_condition_on_update_returns_none(self, db) -> None:
        db.put_item("units", {"id": "unit-1", "version": 3})

        assert (
            db.update_item(
                "units",
                key={"id": "unit-1"},
                update_expression="SET #version = :next",
                expression_attribute_names={"#version": "version"},
                expression_attribute_values={":next": 5, ":expected": 4},
                condition_expression="#version = :expected",
            )
            is None
        )

    def test_query_by_gsi(self, db) -> None:
        db.put_item("payments", {"id": "p1", "booking_id": "b1"})
        db.put_item("payments", {"id": "p2", "booking_id": "b2"})

        items = db.query_by_gsi("payments", "booking_id-index", "booking_id", "b1")

        assert [item["id"] for item in items] == ["p1"]

    def test_batch_get(self, db) -> None:
        db.put_item("units", {"id": "unit-1", "guests": 2})
        db.put_item("units", {"id": "unit-2", "guests": 4})

        items = db.batch_get(
            "units", [{"id": "unit-1"}, {"id": "unit-2"}, {"id": "unit-9"}], consistent_read=True
        )

        assert sorted(item["id"] for item in items) == ["unit-1", "unit-2"]

    def test_batch_get_without_keys(self, db) -> None:
        assert db.batch_get("units", []) == []

    def test_singleton_is_reset(self, db) -> None:
        reset_dynamodb_service()
        first = get_dynamodb_service()

        assert get_dynamodb_service() is first
        assert isinstance(first, DynamoDBService)
        reset_dynamodb_service()
        assert get_dynamodb_service() is not first
