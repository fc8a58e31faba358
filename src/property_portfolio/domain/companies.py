"""Company nodes and weighted ownership edges of the ownership graph."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID, uuid4

from property_portfolio.domain._common import CENT, _utc_now, to_decimal
from property_portfolio.exceptions import (
    InvalidOwnershipPercentageError,
    MissingFieldsError,
    SelfOwnershipError,
    ValidationError,
)

MIN_PERCENTAGE = Decimal("0.01")
MAX_PERCENTAGE = Decimal("100")

_CVR_PATTERN = re.compile(r"^[1-9]\d{7}$")


def normalize_percentage(value: Any) -> Decimal:
    """Validate an ownership percentage and quantize it to two decimals.

    Accepts anything Decimal can parse. Values outside [0.01, 100] are
    rejected before rounding, so 0.004 is an error rather than 0.00.
    """
    try:
        pct = to_decimal(value, "ownershipPercentage")
    except ValidationError as exc:
        raise InvalidOwnershipPercentageError(value) from exc
    if not pct.is_finite() or pct < MIN_PERCENTAGE or pct > MAX_PERCENTAGE:
        raise InvalidOwnershipPercentageError(value)
    return pct.quantize(CENT, rounding=ROUND_HALF_UP)


def validate_cvr(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not _CVR_PATTERN.match(value):
        raise ValidationError(
            "CVR-nummer skal være præcis 8 cifre", context={"cvr_number": value}
        )
    return value


@dataclass
class Company:
    name: str
    organization_id: UUID
    cvr_number: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise MissingFieldsError("name")
        self.cvr_number = validate_cvr(self.cvr_number)


@dataclass
class CompanyRelation:
    """Directed edge: ``parent_company_id`` owns a share of ``child_company_id``."""

    parent_company_id: UUID
    child_company_id: UUID
    ownership_percentage: Decimal
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        self.ownership_percentage = normalize_percentage(self.ownership_percentage)
        if self.parent_company_id == self.child_company_id:
            raise SelfOwnershipError(self.parent_company_id)

    @property
    def fraction(self) -> Decimal:
        return self.ownership_percentage / Decimal(100)

    def update_percentage(self, new_percentage: Any) -> None:
        self.ownership_percentage = normalize_percentage(new_percentage)


__all__ = [
    "Company",
    "CompanyRelation",
    "MAX_PERCENTAGE",
    "MIN_PERCENTAGE",
    "normalize_percentage",
    "validate_cvr",
]
