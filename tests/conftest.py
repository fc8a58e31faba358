import os
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

# Keep password hashing cheap and the environment predictable for every test.
os.environ.setdefault("PP_PASSWORD_HASH_ITERATIONS", "1000")
os.environ["PP_ENVIRONMENT"] = "testing"

from property_portfolio.config import get_settings  # noqa: E402
from property_portfolio.container import ServiceRegistry  # noqa: E402
from property_portfolio.domain.companies import Company  # noqa: E402
from property_portfolio.domain.organizations import Organization  # noqa: E402
from property_portfolio.domain.properties import Property  # noqa: E402
from property_portfolio.domain.users import User, UserRole  # noqa: E402
from property_portfolio.repositories.sqlite import SQLiteDatabase  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db() -> SQLiteDatabase:
    database = SQLiteDatabase(":memory:")
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def services(db: SQLiteDatabase) -> ServiceRegistry:
    return ServiceRegistry(db)


@pytest.fixture
def organization(services: ServiceRegistry) -> Organization:
    org = Organization(name="Ejendomsgruppen ApS")
    services.organizations.add(org)
    return org


@pytest.fixture
def other_organization(services: ServiceRegistry) -> Organization:
    org = Organization(name="Konkurrenten A/S")
    services.organizations.add(org)
    return org


@pytest.fixture
def make_company(services: ServiceRegistry, organization: Organization):
    def _make(name: str, organization_id=None) -> Company:
        return services.company_service.create_company(
            organization_id or organization.id, name=name
        )

    return _make


@pytest.fixture
def make_property(services: ServiceRegistry, organization: Organization):
    def _make(
        name: str,
        owner: Company | None = None,
        price: str = "1000000",
        acquired: date | None = None,
    ) -> Property:
        prop = Property(
            name=name,
            address="Vestergade 1",
            postal_code="8000",
            city="Aarhus",
            acquisition_price=Decimal(price),
            organization_id=organization.id,
            acquisition_date=acquired,
            owner_company_id=owner.id if owner else None,
        )
        services.properties.add(prop)
        return prop

    return _make


@pytest.fixture
def make_user(services: ServiceRegistry, organization: Organization):
    def _make(
        role: UserRole = UserRole.USER,
        company: Company | None = None,
        email: str | None = None,
        **kwargs,
    ) -> User:
        user = User(
            name=f"{role.value} bruger",
            email=email or f"{role.value}-{uuid4().hex[:8]}@example.dk",
            organization_id=organization.id,
            role=role,
            assigned_company_id=company.id if company else None,
            **kwargs,
        )
        services.users.add(user)
        return user

    return _make
