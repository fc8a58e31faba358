from property_portfolio.services.access_control import AccessControlService, AccessScope
from property_portfolio.services.auth import (
    AuthService,
    PasswordHasher,
    UserAdministrationService,
)
from property_portfolio.services.companies import CompanyService
from property_portfolio.services.ownership_graph import OwnershipEdge, OwnershipGraphService
from property_portfolio.services.portfolio_stats import PortfolioStats, PortfolioStatsService
from property_portfolio.services.properties import LeaseService, PropertyService
from property_portfolio.services.redaction import anonymize_tenant
from property_portfolio.services.tenancy import (
    LeaseTenantService,
    TenancyView,
    check_tenancy_conflicts,
)
from property_portfolio.services.tenants import TenantService

__all__ = [
    "AccessControlService",
    "AccessScope",
    "AuthService",
    "CompanyService",
    "LeaseService",
    "LeaseTenantService",
    "OwnershipEdge",
    "OwnershipGraphService",
    "PasswordHasher",
    "PortfolioStats",
    "PortfolioStatsService",
    "PropertyService",
    "TenancyView",
    "TenantService",
    "UserAdministrationService",
    "anonymize_tenant",
    "check_tenancy_conflicts",
]
