"""Domain models for organizations, the company ownership graph and the property portfolio."""

from property_portfolio.domain.companies import Company, CompanyRelation
from property_portfolio.domain.leases import (
    DepositType,
    Lease,
    LeaseTenant,
    LeaseType,
    RegulationType,
    TenancyStatus,
    Tenant,
    TenantType,
)
from property_portfolio.domain.organizations import Organization
from property_portfolio.domain.properties import Property, PropertyType
from property_portfolio.domain.users import (
    DashboardViewMode,
    Invitation,
    Session,
    User,
    UserRole,
)

__all__ = [
    "Company",
    "CompanyRelation",
    "DashboardViewMode",
    "DepositType",
    "Invitation",
    "Lease",
    "LeaseTenant",
    "LeaseType",
    "Organization",
    "Property",
    "PropertyType",
    "RegulationType",
    "Session",
    "TenancyStatus",
    "Tenant",
    "TenantType",
    "User",
    "UserRole",
]
