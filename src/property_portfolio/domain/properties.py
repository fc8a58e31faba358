"""Property records owned (optionally) by a company."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from property_portfolio.domain._common import _utc_now, to_money
from property_portfolio.exceptions import MissingFieldsError, ValidationError

_POSTAL_CODE_PATTERN = re.compile(r"^\d{4}$")


class PropertyType(str, Enum):
    """Danish property forms."""

    EJERLEJLIGHED = "ejerlejlighed"  # owner-occupied flat, a share of a building
    SAMLET_FAST_EJENDOM = "samlet_fast_ejendom"  # whole real property


@dataclass
class Property:
    name: str
    address: str
    postal_code: str
    city: str
    acquisition_price: Decimal
    organization_id: UUID
    property_type: PropertyType = PropertyType.SAMLET_FAST_EJENDOM
    acquisition_date: date | None = None
    share_numerator: int | None = None
    share_denominator: int | None = None
    owner_company_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        missing = [
            name
            for name in ("name", "address", "postal_code", "city")
            if not getattr(self, name)
        ]
        if missing:
            raise MissingFieldsError(*missing)

        if not _POSTAL_CODE_PATTERN.match(self.postal_code):
            raise ValidationError(
                "Postnummer skal være 4 cifre",
                context={"postal_code": self.postal_code},
            )

        self.acquisition_price = to_money(self.acquisition_price, "acquisitionPrice")
        if self.acquisition_price < 0:
            raise ValidationError("Anskaffelsespris skal være 0 eller mere")

        if not isinstance(self.property_type, PropertyType):
            try:
                self.property_type = PropertyType(self.property_type)
            except ValueError as exc:
                raise ValidationError(
                    "Ugyldig ejendomstype",
                    context={"property_type": str(self.property_type)},
                ) from exc

        if self.property_type == PropertyType.EJERLEJLIGHED:
            if not self.share_numerator or not self.share_denominator:
                raise ValidationError(
                    "Fordelingstal skal angives for ejerlejligheder"
                )
        for name in ("share_numerator", "share_denominator"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValidationError(
                    "Fordelingstal skal være et positivt heltal",
                    context={"field": name},
                )


__all__ = ["Property", "PropertyType"]
