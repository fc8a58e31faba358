"""Leases (rentable units of a property), tenants, and the tenancies linking them."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from property_portfolio.domain._common import _utc_now, optional_money, to_money
from property_portfolio.exceptions import (
    InvalidPeriodError,
    MissingFieldsError,
    ValidationError,
)

# Stand-in for "no end date" when comparing periods.
OPEN_END = date(2099, 12, 31)


class LeaseType(str, Enum):
    BOLIG = "Bolig"
    DETAIL = "Detail"
    KONTOR = "Kontor"
    LAGER = "Lager"
    GARAGE = "Garage"
    INDUSTRI = "Industri"


class TenantType(str, Enum):
    PRIVAT = "privat"
    ERHVERV = "erhverv"


class DepositType(str, Enum):
    """Deposit or prepaid rent, expressed in months of rent or a fixed amount."""

    NONE = "none"
    ONE_MONTH = "1_month"
    TWO_MONTHS = "2_months"
    THREE_MONTHS = "3_months"
    FOUR_MONTHS = "4_months"
    FIVE_MONTHS = "5_months"
    SIX_MONTHS = "6_months"
    AMOUNT = "amount"


class RegulationType(str, Enum):
    """Annual rent regulation: net price index, optionally with a floor."""

    NONE = "none"
    NPI = "NPI"
    NPI_MIN_1 = "NPI_min_1"
    NPI_MIN_2 = "NPI_min_2"
    NPI_MIN_3 = "NPI_min_3"


class TenancyStatus(str, Enum):
    FUTURE = "Future"
    ACTIVE = "Active"
    PAST = "Past"


def _coerce_enum(enum_cls: type[Enum], value: Any, message: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(message, context={"value": str(value)}) from exc


@dataclass
class Lease:
    property_id: UUID
    name: str
    organization_id: UUID
    lease_type: LeaseType = LeaseType.BOLIG
    registered_area: int = 0
    total_area: int = 0
    vat_registered: bool = False
    max_rent_per_sqm: Decimal | None = None
    yield_requirement_pct: Decimal | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise MissingFieldsError("name")
        self.lease_type = _coerce_enum(LeaseType, self.lease_type, "Ugyldig lejemålstype")
        missing = [
            n for n in ("property_id", "registered_area", "total_area") if getattr(self, n) is None
        ]
        if missing:
            raise MissingFieldsError(*missing)
        if self.registered_area < 0 or self.total_area < 0:
            raise ValidationError("Areal skal være 0 eller mere")
        self.max_rent_per_sqm = optional_money(self.max_rent_per_sqm, "maxRentPerSqm")
        self.yield_requirement_pct = optional_money(
            self.yield_requirement_pct, "yieldRequirementPct"
        )


@dataclass
class Tenant:
    name: str
    tenant_type: TenantType
    email: str
    phone: str
    organization_id: UUID
    internal_number: int = 0
    cvr_number: str | None = None
    contact_person: str | None = None
    invoice_email: str | None = None
    notes: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        missing = [n for n in ("name", "email", "phone") if not getattr(self, n)]
        if missing:
            raise MissingFieldsError(*missing)
        self.tenant_type = _coerce_enum(TenantType, self.tenant_type, "Ugyldig lejertype")


@dataclass
class LeaseTenant:
    """A tenant's occupation of a lease over an inclusive date period.

    ``period_end`` of None means open-ended.
    """

    lease_id: UUID
    tenant_id: UUID
    rent_amount: Decimal
    period_start: date
    organization_id: UUID
    period_end: date | None = None
    advance_water: Decimal | None = None
    advance_heating: Decimal | None = None
    advance_electricity: Decimal | None = None
    advance_other: Decimal | None = None
    deposit_type: DepositType = DepositType.NONE
    deposit_amount: Decimal | None = None
    prepaid_type: DepositType = DepositType.NONE
    prepaid_amount: Decimal | None = None
    regulation_type: RegulationType = RegulationType.NONE
    note: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        missing = [
            n for n in ("lease_id", "tenant_id", "period_start") if getattr(self, n) is None
        ]
        if missing:
            raise MissingFieldsError(*missing)
        self.rent_amount = to_money(self.rent_amount, "rentAmount")
        if self.rent_amount < 0:
            raise ValidationError("Husleje skal være 0 eller mere")
        for name in (
            "advance_water",
            "advance_heating",
            "advance_electricity",
            "advance_other",
            "deposit_amount",
            "prepaid_amount",
        ):
            setattr(self, name, optional_money(getattr(self, name), name))
        self.deposit_type = _coerce_enum(
            DepositType, self.deposit_type, "Ugyldig depositumtype"
        )
        self.prepaid_type = _coerce_enum(
            DepositType, self.prepaid_type, "Ugyldig forudbetalingstype"
        )
        self.regulation_type = _coerce_enum(
            RegulationType, self.regulation_type, "Ugyldig reguleringstype"
        )
        if self.period_end is not None and self.period_end < self.period_start:
            raise InvalidPeriodError(self.period_start, self.period_end)

    @property
    def effective_end(self) -> date:
        return self.period_end if self.period_end is not None else OPEN_END

    def contains(self, day: date) -> bool:
        return self.period_start <= day <= self.effective_end

    def overlaps(self, other: "LeaseTenant") -> bool:
        return (
            self.period_start <= other.effective_end
            and self.effective_end >= other.period_start
        )

    def status_on(self, today: date) -> TenancyStatus:
        if self.period_start > today:
            return TenancyStatus.FUTURE
        if self.period_end is not None and self.period_end < today:
            return TenancyStatus.PAST
        return TenancyStatus.ACTIVE


__all__ = [
    "DepositType",
    "Lease",
    "LeaseTenant",
    "LeaseType",
    "OPEN_END",
    "RegulationType",
    "TenancyStatus",
    "Tenant",
    "TenantType",
]
