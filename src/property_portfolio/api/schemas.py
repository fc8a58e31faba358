"""Pydantic v2 schemas for API request/response models.

The wire format is camelCase; Python code uses snake_case field names.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from property_portfolio.domain.leases import (
    DepositType,
    LeaseType,
    RegulationType,
    TenancyStatus,
    TenantType,
)
from property_portfolio.domain.properties import PropertyType
from property_portfolio.domain.users import DashboardViewMode, UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class PartialUpdate(CamelModel):
    """Body of a PUT/PATCH: omitted fields stay unchanged.

    Fields listed in ``required_fields`` may be omitted but not sent as null.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset()

    @field_validator("*")
    @classmethod
    def reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name in cls.required_fields:
            raise ValueError("må ikke være tom")
        return value


# Common
class HealthResponse(BaseModel):
    status: str


class SuccessResponse(CamelModel):
    success: bool = True


class SessionResponse(CamelModel):
    success: bool = True
    token: str


class SetupNeededResponse(CamelModel):
    needed: bool


# Auth / users
class SetupRequest(CamelModel):
    organization_name: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str


class LoginRequest(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    organization_id: UUID
    assigned_company_id: UUID | None = None
    dashboard_view_mode: DashboardViewMode
    created_at: datetime


class PreferencesUpdate(CamelModel):
    dashboard_view_mode: str | None = None


class ProfileUpdate(CamelModel):
    name: str | None = None
    email: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class UserUpdate(CamelModel):
    role: UserRole | None = None
    assigned_company_id: UUID | None = None


# Invitations
class InvitationCreate(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    role: UserRole = UserRole.USER
    assigned_company_id: UUID | None = None


class InvitationResponse(CamelModel):
    id: UUID
    email: str
    token: str
    organization_id: UUID
    invited_by: UUID
    role: UserRole
    assigned_company_id: UUID | None = None
    expires_at: datetime
    created_at: datetime


class InvitationCreatedResponse(CamelModel):
    invitation: InvitationResponse
    invitation_link: str


class InvitationAccept(CamelModel):
    token: str | None = None
    name: str | None = None
    password: str | None = None


class InvitationAcceptedResponse(CamelModel):
    message: str
    user: UserResponse


# Companies
class CompanyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    cvr_number: str | None = None


class CompanyUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"name"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    cvr_number: str | None = None


class CompanyResponse(CamelModel):
    id: UUID
    name: str
    cvr_number: str | None = None
    organization_id: UUID
    created_at: datetime


class CompanyRelationCreate(CamelModel):
    parent_company_id: UUID
    child_company_id: UUID
    ownership_percentage: Decimal


class CompanyRelationUpdate(CamelModel):
    ownership_percentage: Decimal


class CompanyRelationResponse(CamelModel):
    id: UUID
    parent_company_id: UUID
    child_company_id: UUID
    ownership_percentage: str
    created_at: datetime


class CompanyRelationsResponse(CamelModel):
    parents: list[CompanyRelationResponse]
    children: list[CompanyRelationResponse]


# Properties
class PropertyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    postal_code: str
    city: str = Field(..., min_length=1)
    acquisition_price: Decimal
    acquisition_date: date | None = None
    property_type: PropertyType = PropertyType.SAMLET_FAST_EJENDOM
    share_numerator: int | None = None
    share_denominator: int | None = None
    owner_company_id: UUID | None = None


class PropertyUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"name", "address", "postal_code", "city", "acquisition_price", "property_type"}
    )

    name: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    acquisition_price: Decimal | None = None
    acquisition_date: date | None = None
    property_type: PropertyType | None = None
    share_numerator: int | None = None
    share_denominator: int | None = None
    owner_company_id: UUID | None = None


class PropertyResponse(CamelModel):
    id: UUID
    name: str
    address: str
    postal_code: str
    city: str
    acquisition_price: str
    acquisition_date: date | None = None
    property_type: PropertyType
    share_numerator: int | None = None
    share_denominator: int | None = None
    owner_company_id: UUID | None = None
    organization_id: UUID
    created_at: datetime


# Leases
class LeaseCreate(CamelModel):
    property_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    lease_type: LeaseType = Field(default=LeaseType.BOLIG, alias="type")
    registered_area: int = Field(default=0, ge=0)
    total_area: int = Field(default=0, ge=0)
    vat_registered: bool = False
    max_rent_per_sqm: Decimal | None = None
    yield_requirement_pct: Decimal | None = None


class LeaseUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "property_id",
            "name",
            "lease_type",
            "registered_area",
            "total_area",
            "vat_registered",
        }
    )

    property_id: UUID | None = None
    name: str | None = None
    lease_type: LeaseType | None = Field(default=None, alias="type")
    registered_area: int | None = Field(default=None, ge=0)
    total_area: int | None = Field(default=None, ge=0)
    vat_registered: bool | None = None
    max_rent_per_sqm: Decimal | None = None
    yield_requirement_pct: Decimal | None = None


class LeaseResponse(CamelModel):
    id: UUID
    property_id: UUID
    name: str
    lease_type: LeaseType = Field(alias="type")
    registered_area: int
    total_area: int
    vat_registered: bool
    max_rent_per_sqm: str | None = None
    yield_requirement_pct: str | None = None
    organization_id: UUID
    created_at: datetime
    property: PropertyResponse | None = None


# Tenants
class TenantCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    tenant_type: TenantType = Field(alias="type")
    cvr_number: str | None = None
    contact_person: str | None = None
    email: str = Field(..., min_length=1)
    invoice_email: str | None = None
    phone: str = Field(..., min_length=1)
    notes: str | None = None


class TenantUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"name", "tenant_type", "email", "phone"}
    )

    name: str | None = None
    tenant_type: TenantType | None = Field(default=None, alias="type")
    cvr_number: str | None = None
    contact_person: str | None = None
    email: str | None = None
    invoice_email: str | None = None
    phone: str | None = None
    notes: str | None = None


class TenantResponse(CamelModel):
    id: UUID
    internal_number: int
    name: str
    tenant_type: TenantType = Field(alias="type")
    cvr_number: str | None = None
    contact_person: str | None = None
    email: str | None = None
    invoice_email: str | None = None
    phone: str
    notes: str | None = None
    organization_id: UUID
    created_at: datetime


# Lease tenancies
class LeaseTenantCreate(CamelModel):
    lease_id: UUID
    tenant_id: UUID
    rent_amount: Decimal
    advance_water: Decimal | None = None
    advance_heating: Decimal | None = None
    advance_electricity: Decimal | None = None
    advance_other: Decimal | None = None
    period_start: date
    period_end: date | None = None
    deposit_type: DepositType = DepositType.NONE
    deposit_amount: Decimal | None = None
    prepaid_type: DepositType = DepositType.NONE
    prepaid_amount: Decimal | None = None
    regulation_type: RegulationType = RegulationType.NONE
    note: str | None = None


class LeaseTenantUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "tenant_id",
            "rent_amount",
            "period_start",
            "deposit_type",
            "prepaid_type",
            "regulation_type",
        }
    )

    tenant_id: UUID | None = None
    rent_amount: Decimal | None = None
    advance_water: Decimal | None = None
    advance_heating: Decimal | None = None
    advance_electricity: Decimal | None = None
    advance_other: Decimal | None = None
    period_start: date | None = None
    period_end: date | None = None
    deposit_type: DepositType | None = None
    deposit_amount: Decimal | None = None
    prepaid_type: DepositType | None = None
    prepaid_amount: Decimal | None = None
    regulation_type: RegulationType | None = None
    note: str | None = None


class LeaseTenantResponse(CamelModel):
    id: UUID
    lease_id: UUID
    tenant_id: UUID
    rent_amount: str
    advance_water: str | None = None
    advance_heating: str | None = None
    advance_electricity: str | None = None
    advance_other: str | None = None
    period_start: date
    period_end: date | None = None
    deposit_type: DepositType
    deposit_amount: str | None = None
    prepaid_type: DepositType
    prepaid_amount: str | None = None
    regulation_type: RegulationType
    note: str | None = None
    status: TenancyStatus
    organization_id: UUID
    created_at: datetime
    tenant: TenantResponse | None = None


# Dashboard
class LeaseStatsResponse(CamelModel):
    count: float
    total_rent_capacity: str


class DashboardStatsResponse(CamelModel):
    mode: DashboardViewMode
    count: float
    total_value: str
    latest_property: PropertyResponse | None = None
    lease_stats: LeaseStatsResponse
