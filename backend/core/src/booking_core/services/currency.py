"""Currency rate lookups backed by the currency-rates table."""

from decimal import Decimal
from typing import TYPE_CHECKING

from ..models import BookingError, ErrorCode
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class CurrencyRateService:
    """Resolve exchange rates for ``"FROM-TO"`` pair keys.

    Rates are read once per service instance and cached.
    """

    TABLE = "currency-rates"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db
        self._cache: dict[str, Decimal] = {}

    def get(self, pair: str) -> Decimal:
        """Get the rate converting one unit of FROM into TO.

        Args:
            pair: Pair key such as ``"EUR-USD"``

        Returns:
            Exchange rate; 1 when both currencies are the same

        Raises:
            BookingError: CURRENCY_RATE_MISSING if neither the pair nor its
                inverse is stored
        """
        source, _, target = pair.upper().partition("-")
        if not target:
            raise BookingError(ErrorCode.CURRENCY_RATE_MISSING, {"pair": pair})
        if source == target:
            return Decimal(1)

        key = f"{source}-{target}"
        if key in self._cache:
            return self._cache[key]

        rate = self._lookup(key)
        if rate is None:
            inverse = self._lookup(f"{target}-{source}")
            if inverse:
                rate = Decimal(1) / inverse
        if rate is None:
            logger.error("No currency rate stored for %s", key)
            raise BookingError(ErrorCode.CURRENCY_RATE_MISSING, {"pair": key})

        self._cache[key] = rate
        return rate

    def convert(self, amount: Decimal, source: str, target: str) -> Decimal:
        """Convert ``amount`` from ``source`` to ``target`` currency (unrounded)."""
        return Decimal(amount) * self.get(f"{source}-{target}")

    def set_rate(self, pair: str, rate: Decimal) -> None:
        """Store a rate, replacing any cached value."""
        key = pair.upper()
        self.db.put_item(self.TABLE, {"pair": key, "rate": Decimal(rate)})
        self._cache.pop(key, None)

    def _lookup(self, key: str) -> Decimal | None:
        item = self.db.get_item(self.TABLE, {"pair": key})
        if not item or item.get("rate") is None:
            return None
        return Decimal(item["rate"])
