from property_portfolio.domain.companies import Company, CompanyRelation
from property_portfolio.domain.leases import Lease, LeaseTenant, Tenant
from property_portfolio.domain.properties import Property
from property_portfolio.domain.users import User, UserRole

__all__ = [
    "Company",
    "CompanyRelation",
    "Lease",
    "LeaseTenant",
    "Property",
    "Tenant",
    "User",
    "UserRole",
]

__version__ = "0.1.0"
