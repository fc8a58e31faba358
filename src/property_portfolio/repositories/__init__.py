from property_portfolio.repositories.interfaces import (
    CompanyRelationRepository,
    CompanyRepository,
    InvitationRepository,
    LeaseRepository,
    LeaseTenantRepository,
    OrganizationRepository,
    PropertyRepository,
    SessionRepository,
    TenantRepository,
    UserRepository,
)
from property_portfolio.repositories.sqlite import (
    SQLiteCompanyRelationRepository,
    SQLiteCompanyRepository,
    SQLiteDatabase,
    SQLiteInvitationRepository,
    SQLiteLeaseRepository,
    SQLiteLeaseTenantRepository,
    SQLiteOrganizationRepository,
    SQLitePropertyRepository,
    SQLiteSessionRepository,
    SQLiteTenantRepository,
    SQLiteUserRepository,
)

__all__ = [
    "CompanyRelationRepository",
    "CompanyRepository",
    "InvitationRepository",
    "LeaseRepository",
    "LeaseTenantRepository",
    "OrganizationRepository",
    "PropertyRepository",
    "SQLiteCompanyRelationRepository",
    "SQLiteCompanyRepository",
    "SQLiteDatabase",
    "SQLiteInvitationRepository",
    "SQLiteLeaseRepository",
    "SQLiteLeaseTenantRepository",
    "SQLiteOrganizationRepository",
    "SQLitePropertyRepository",
    "SQLiteSessionRepository",
    "SQLiteTenantRepository",
    "SQLiteUserRepository",
    "SessionRepository",
    "TenantRepository",
    "UserRepository",
]
