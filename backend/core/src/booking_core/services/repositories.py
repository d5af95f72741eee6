"""Repository functions over DynamoDB tables.

Repositories take and return plain pydantic models. Writes that must commit
together are exposed as ``*_item`` builders returning TransactWriteItem dicts,
so the booking service can combine them into a single transaction.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from ..models import (
    Booking,
    BookingStatus,
    CalendarEvent,
    GatewayFee,
    Inventory,
    InventoryKind,
    Listing,
    Payment,
    PaymentStatus,
    Promo,
    RatePlan,
    RoomType,
    Session,
    Unit,
)
from .dynamodb import serialize_item, to_dynamodb

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

_inventory_adapter: TypeAdapter[Unit | RoomType] = TypeAdapter(Inventory)


def version_condition(expected_version: int) -> str:
    """Condition that the stored ``version`` is still ``expected_version``.

    Documents written by the listings side carry no ``version`` attribute
    until their first ledger write; those read as version 0.
    """
    if expected_version == 0:
        return "attribute_not_exists(#version) OR #version = :expected"
    return "#version = :expected"


def _update_expression(fields: dict[str, Any]) -> tuple[str, dict[str, str], dict[str, Any]]:
    """Build a ``SET`` expression with placeholder names for every field."""
    names = {f"#{k}": k for k in fields}
    values = {f":{k}": v for k, v in fields.items()}
    expression = "SET " + ", ".join(f"#{k} = :{k}" for k in fields)
    return expression, names, values


class InventoryRepository:
    """Units and room types, with optimistic ``version`` checks on ledger writes."""

    TABLES = {
        InventoryKind.UNIT: "units",
        InventoryKind.MULTIUNIT: "multiunits",
    }

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get(self, kind: InventoryKind, inventory_id: str) -> Unit | RoomType | None:
        """Get a unit or room type by ID.

        Args:
            kind: Inventory form, selects the table
            inventory_id: Unit or room type ID

        Returns:
            The inventory document or None if not found
        """
        item = self.db.get_item(
            self.TABLES[kind], {"id": inventory_id}, consistent_read=True
        )
        if not item:
            return None
        return _inventory_adapter.validate_python({**item, "kind": kind.value})

    def get_many(self, kind: InventoryKind, ids: list[str]) -> list[Unit | RoomType]:
        """Get several documents, returned in the order of ``ids``.

        Missing IDs are skipped. Reads are strongly consistent, like ``get``.
        """
        unique = list(dict.fromkeys(ids))
        items = self.db.batch_get(
            self.TABLES[kind],
            [{"id": inventory_id} for inventory_id in unique],
            consistent_read=True,
        )
        by_id = {item["id"]: item for item in items}
        return [
            _inventory_adapter.validate_python({**by_id[inventory_id], "kind": kind.value})
            for inventory_id in unique
            if inventory_id in by_id
        ]

    def put(self, inventory: Unit | RoomType) -> Unit | RoomType:
        """Store a document unconditionally (seeding and host edits)."""
        self.db.put_item(self.TABLES[InventoryKind(inventory.kind)], inventory.model_dump())
        return inventory

    def ledger_update_item(
        self, inventory: Unit | RoomType, expected_version: int
    ) -> dict[str, Any]:
        """Build a transaction item replacing the ledger of ``inventory``.

        The update only applies if the stored ``version`` still equals
        ``expected_version``; it bumps the version by one.

        Args:
            inventory: Document carrying the new ``not_available`` ledger
            expected_version: Version that was read before mutating

        Returns:
            TransactWriteItem dict
        """
        table = self.TABLES[InventoryKind(inventory.kind)]
        return {
            "Update": {
                "TableName": self.db.table_name(table),
                "Key": serialize_item({"id": inventory.id}),
                "UpdateExpression": "SET #ledger = :ledger, #version = :next",
                "ConditionExpression": version_condition(expected_version),
                "ExpressionAttributeNames": {
                    "#ledger": "not_available",
                    "#version": "version",
                },
                "ExpressionAttributeValues": serialize_item(
                    {
                        ":ledger": inventory.not_available,
                        ":next": expected_version + 1,
                        ":expected": expected_version,
                    }
                ),
            }
        }

    def save_ledger(self, inventory: Unit | RoomType, expected_version: int) -> bool:
        """Write the ledger of one document with the version check.

        Returns:
            True if written, False if the document changed since it was read
        """
        table = self.TABLES[InventoryKind(inventory.kind)]
        result = self.db.update_item(
            table,
            key={"id": inventory.id},
            update_expression="SET #ledger = :ledger, #version = :next",
            condition_expression=version_condition(expected_version),
            expression_attribute_names={"#ledger": "not_available", "#version": "version"},
            expression_attribute_values={
                ":ledger": inventory.not_available,
                ":next": expected_version + 1,
                ":expected": expected_version,
            },
        )
        return result is not None


class ListingRepository:
    TABLE = "listings"
    RATE_PLANS_TABLE = "rate-plans"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get(self, listing_id: str) -> Listing | None:
        item = self.db.get_item(self.TABLE, {"id": listing_id})
        return Listing.model_validate(item) if item else None

    def put(self, listing: Listing) -> Listing:
        self.db.put_item(self.TABLE, listing.model_dump())
        return listing

    def get_rate_plan(self, rate_plan_id: str) -> RatePlan | None:
        item = self.db.get_item(self.RATE_PLANS_TABLE, {"id": rate_plan_id})
        return RatePlan.model_validate(item) if item else None

    def put_rate_plan(self, rate_plan: RatePlan) -> RatePlan:
        self.db.put_item(self.RATE_PLANS_TABLE, rate_plan.model_dump())
        return rate_plan


class PromoRepository:
    TABLE = "promos"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get(self, code: str) -> Promo | None:
        item = self.db.get_item(self.TABLE, {"code": code})
        return Promo.model_validate(item) if item else None

    def put(self, promo: Promo) -> Promo:
        self.db.put_item(self.TABLE, promo.model_dump())
        return promo


class BookingRepository:
    """Booking records, keyed by the numeric booking ID."""

    TABLE = "bookings"
    USER_INDEX = "user-index"
    LISTING_INDEX = "listing-index"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get(self, booking_id: str) -> Booking | None:
        item = self.db.get_item(self.TABLE, {"id": booking_id}, consistent_read=True)
        return Booking.model_validate(item) if item else None

    def exists(self, booking_id: str) -> bool:
        return self.db.get_item(self.TABLE, {"id": booking_id}) is not None

    def list_for_user(self, uid: str) -> list[Booking]:
        items = self.db.query_by_gsi(self.TABLE, self.USER_INDEX, "user", uid)
        return [Booking.model_validate(item) for item in items]

    def list_for_listing(self, listing_id: str) -> list[Booking]:
        items = self.db.query_by_gsi(
            self.TABLE, self.LISTING_INDEX, "listing_id", listing_id
        )
        return [Booking.model_validate(item) for item in items]

    def put_item(self, booking: Booking) -> dict[str, Any]:
        """Build a transaction item creating ``booking``; fails if the ID is taken."""
        return {
            "Put": {
                "TableName": self.db.table_name(self.TABLE),
                "Item": serialize_item(booking.model_dump()),
                "ConditionExpression": "attribute_not_exists(id)",
            }
        }

    def status_update_item(
        self,
        booking: Booking,
        status: BookingStatus,
        updated_at: str,
    ) -> dict[str, Any]:
        """Build a transaction item moving ``booking`` to ``status``.

        Conditioned on the stored status still being the one that was read.
        """
        return {
            "Update": {
                "TableName": self.db.table_name(self.TABLE),
                "Key": serialize_item({"id": booking.id}),
                "UpdateExpression": "SET #status = :status, #updated_at = :updated_at",
                "ConditionExpression": "#status = :expected",
                "ExpressionAttributeNames": {
                    "#status": "status",
                    "#updated_at": "updated_at",
                },
                "ExpressionAttributeValues": serialize_item(
                    {
                        ":status": status,
                        ":expected": booking.status,
                        ":updated_at": updated_at,
                    }
                ),
            }
        }

    def update_fields(self, booking_id: str, **fields: Any) -> Booking | None:
        """Set top-level fields of a booking.

        Returns:
            The updated booking or None if it does not exist
        """
        expression, names, values = _update_expression(fields)
        attrs = self.db.update_item(
            self.TABLE,
            key={"id": booking_id},
            update_expression=expression,
            expression_attribute_names=names,
            expression_attribute_values=values,
            condition_expression="attribute_exists(id)",
        )
        return Booking.model_validate(attrs) if attrs else None

    def update_status(
        self, booking: Booking, status: BookingStatus, updated_at: str
    ) -> bool:
        """Move a booking to ``status`` if it is still in the status that was read."""
        attrs = self.db.update_item(
            self.TABLE,
            key={"id": booking.id},
            update_expression="SET #status = :status, #updated_at = :updated_at",
            condition_expression="#status = :expected",
            expression_attribute_names={"#status": "status", "#updated_at": "updated_at"},
            expression_attribute_values={
                ":status": status,
                ":expected": booking.status,
                ":updated_at": updated_at,
            },
        )
        return attrs is not None


class PaymentRepository:
    TABLE = "payments"
    BOOKING_INDEX = "booking_id-index"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get_for_booking(self, booking_id: str) -> Payment | None:
        items = self.db.query_by_gsi(
            self.TABLE, self.BOOKING_INDEX, "booking_id", booking_id
        )
        return Payment.model_validate(items[0]) if items else None

    def put(self, payment: Payment) -> Payment:
        self.db.put_item(self.TABLE, payment.model_dump())
        return payment

    def cancel_item(
        self,
        payment: Payment,
        amount_after_cancelling: Decimal,
        refund_amount: Decimal,
        updated_at: str,
    ) -> dict[str, Any]:
        """Build a transaction item marking ``payment`` cancelled."""
        return {
            "Update": {
                "TableName": self.db.table_name(self.TABLE),
                "Key": serialize_item({"id": payment.id}),
                "UpdateExpression": (
                    "SET #status = :status, amount_after_cancelling = :after, "
                    "refund_amount = :refund, updated_at = :updated_at"
                ),
                "ExpressionAttributeNames": {"#status": "status"},
                "ExpressionAttributeValues": serialize_item(
                    {
                        ":status": PaymentStatus.CANCELLED,
                        ":after": amount_after_cancelling,
                        ":refund": refund_amount,
                        ":updated_at": updated_at,
                    }
                ),
            }
        }

    def record_capture(
        self, payment: Payment, fees: list[GatewayFee], updated_at: str
    ) -> Payment | None:
        """Mark a payment captured, store gateway fees and take them off the payout."""
        fee_total = sum((fee.price for fee in fees), Decimal(0))
        attrs = self.db.update_item(
            self.TABLE,
            key={"id": payment.id},
            update_expression=(
                "SET #status = :status, stripe_fee = :fees, updated_at = :updated_at "
                "ADD payout_amount :decrement"
            ),
            expression_attribute_names={"#status": "status"},
            expression_attribute_values={
                ":status": PaymentStatus.CAPTURED,
                ":fees": [fee.model_dump() for fee in fees],
                ":decrement": Decimal(0) - fee_total,
                ":updated_at": updated_at,
            },
        )
        return Payment.model_validate(attrs) if attrs else None

    def update_status(
        self, payment: Payment, status: PaymentStatus, updated_at: str
    ) -> Payment | None:
        attrs = self.db.update_item(
            self.TABLE,
            key={"id": payment.id},
            update_expression="SET #status = :status, updated_at = :updated_at",
            expression_attribute_names={"#status": "status"},
            expression_attribute_values={":status": status, ":updated_at": updated_at},
        )
        return Payment.model_validate(attrs) if attrs else None


class CalendarRepository:
    """Personal calendars of users, one document per owner."""

    TABLE = "calendars"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def append_event_item(self, owner: str, event: CalendarEvent) -> dict[str, Any]:
        """Build a transaction item appending a VEVENT to the owner's calendar."""
        return {
            "Update": {
                "TableName": self.db.table_name(self.TABLE),
                "Key": serialize_item({"owner": owner}),
                "UpdateExpression": (
                    "SET vevent = list_append(if_not_exists(vevent, :empty), :event)"
                ),
                "ExpressionAttributeValues": serialize_item(
                    {
                        ":empty": [],
                        ":event": [event.model_dump(by_alias=True, exclude_none=True)],
                    }
                ),
            }
        }

    def get_events(self, owner: str) -> list[dict[str, Any]]:
        item = self.db.get_item(self.TABLE, {"owner": owner})
        return list(item.get("vevent", [])) if item else []


class UserRepository:
    TABLE = "users"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get(self, uid: str) -> dict[str, Any] | None:
        return self.db.get_item(self.TABLE, {"uid": uid})

    def credit_balance_item(self, uid: str, amount: Decimal) -> dict[str, Any]:
        """Build a transaction item adding ``amount`` to the user's balance."""
        return {
            "Update": {
                "TableName": self.db.table_name(self.TABLE),
                "Key": serialize_item({"uid": uid}),
                "UpdateExpression": "ADD balance :amount",
                "ExpressionAttributeValues": serialize_item({":amount": amount}),
            }
        }


class SessionRepository:
    TABLE = "sessions"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get(self, token: str) -> Session | None:
        item = self.db.get_item(self.TABLE, {"token": token})
        return Session.model_validate(item) if item else None

    def put(self, session: Session) -> Session:
        self.db.put_item(self.TABLE, to_dynamodb(session))
        return session
