"""Localized display labels for booking price lines.

Purely presentational: labels are attached to discount, service and tax
lines and never take part in price computation.
"""

from ..models import Booking, PriceLine

DEFAULT_LANGUAGE = "en"

# Labels for the discount lines produced by the pricing engine
PRICE_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "Base Discount": "Discount",
        "Last Minute Discount": "Last minute deal",
        "Day Deal": "Long stay deal",
        "Country Discount": "Country deal",
        "Guests Deal": "Group deal",
        "Promocode": "Promo code",
    },
    "ru": {
        "Base Discount": "Скидка",
        "Last Minute Discount": "Горящее предложение",
        "Day Deal": "Скидка за длительное проживание",
        "Country Discount": "Скидка для вашей страны",
        "Guests Deal": "Групповая скидка",
        "Promocode": "Промокод",
    },
    "ar": {
        "Base Discount": "خصم",
        "Last Minute Discount": "عرض اللحظة الأخيرة",
        "Day Deal": "خصم الإقامة الطويلة",
        "Country Discount": "خصم الدولة",
        "Guests Deal": "خصم المجموعات",
        "Promocode": "رمز ترويجي",
    },
}


class LocalizationService:
    """Attach localized labels to booking price breakdowns."""

    def __init__(self, labels: dict[str, dict[str, str]] | None = None) -> None:
        self.labels = labels if labels is not None else PRICE_LABELS

    def label(self, name: str, lang: str | None) -> str:
        """Look up the label for ``name``, falling back to English, then the name."""
        catalog = self.labels.get(lang or DEFAULT_LANGUAGE) or {}
        return catalog.get(name) or self.labels.get(DEFAULT_LANGUAGE, {}).get(name, name)

    def translate_lines(self, lines: list[PriceLine], lang: str | None) -> list[PriceLine]:
        return [
            line.model_copy(update={"label": self.label(line.name, lang)}) for line in lines
        ]

    def translate_booking_prices(
        self, bookings: list[Booking], lang: str | None
    ) -> list[Booking]:
        """Return copies of ``bookings`` with labelled discounts, services and taxes.

        Args:
            bookings: Bookings to localize
            lang: Session language code

        Returns:
            New booking objects; the inputs are left untouched
        """
        return [
            booking.model_copy(
                update={
                    "discounts": self.translate_lines(booking.discounts, lang),
                    "services": self.translate_lines(booking.services, lang),
                    "taxes": self.translate_lines(booking.taxes, lang),
                }
            )
            for booking in bookings
        ]
