"""Dependency injection container for Property Portfolio.

Usage:
    from property_portfolio.container import get_container

    container = get_container()
    companies = container.services.company_service
"""

from functools import cached_property, lru_cache

from property_portfolio.config import Settings, get_settings
from property_portfolio.logging_config import get_logger
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
from property_portfolio.services.access_control import AccessControlService
from property_portfolio.services.auth import AuthService, UserAdministrationService
from property_portfolio.services.companies import CompanyService
from property_portfolio.services.ownership_graph import OwnershipGraphService
from property_portfolio.services.portfolio_stats import PortfolioStatsService
from property_portfolio.services.properties import LeaseService, PropertyService
from property_portfolio.services.tenancy import LeaseTenantService
from property_portfolio.services.tenants import TenantService

logger = get_logger(__name__)


class ServiceRegistry:
    """Repositories and services bound to one database, built on first access."""

    def __init__(self, database: SQLiteDatabase, settings: Settings | None = None) -> None:
        self.database = database
        self.settings = settings or get_settings()

    # Repositories

    @cached_property
    def organizations(self) -> SQLiteOrganizationRepository:
        return SQLiteOrganizationRepository(self.database)

    @cached_property
    def companies(self) -> SQLiteCompanyRepository:
        return SQLiteCompanyRepository(self.database)

    @cached_property
    def relations(self) -> SQLiteCompanyRelationRepository:
        return SQLiteCompanyRelationRepository(self.database)

    @cached_property
    def users(self) -> SQLiteUserRepository:
        return SQLiteUserRepository(self.database)

    @cached_property
    def sessions(self) -> SQLiteSessionRepository:
        return SQLiteSessionRepository(self.database)

    @cached_property
    def invitations(self) -> SQLiteInvitationRepository:
        return SQLiteInvitationRepository(self.database)

    @cached_property
    def properties(self) -> SQLitePropertyRepository:
        return SQLitePropertyRepository(self.database)

    @cached_property
    def leases(self) -> SQLiteLeaseRepository:
        return SQLiteLeaseRepository(self.database)

    @cached_property
    def tenants(self) -> SQLiteTenantRepository:
        return SQLiteTenantRepository(self.database)

    @cached_property
    def lease_tenants(self) -> SQLiteLeaseTenantRepository:
        return SQLiteLeaseTenantRepository(self.database)

    # Services

    @cached_property
    def ownership_graph(self) -> OwnershipGraphService:
        return OwnershipGraphService(self.relations)

    @cached_property
    def access_control(self) -> AccessControlService:
        return AccessControlService(self.ownership_graph)

    @cached_property
    def company_service(self) -> CompanyService:
        return CompanyService(
            self.database, self.companies, self.relations, self.ownership_graph
        )

    @cached_property
    def property_service(self) -> PropertyService:
        return PropertyService(
            self.properties, self.companies, self.leases, self.access_control
        )

    @cached_property
    def lease_service(self) -> LeaseService:
        return LeaseService(self.leases, self.properties, self.access_control)

    @cached_property
    def tenant_service(self) -> TenantService:
        return TenantService(self.database, self.tenants)

    @cached_property
    def lease_tenant_service(self) -> LeaseTenantService:
        return LeaseTenantService(
            self.database, self.lease_tenants, self.lease_service, self.tenants
        )

    @cached_property
    def stats_service(self) -> PortfolioStatsService:
        return PortfolioStatsService(self.properties, self.leases, self.ownership_graph)

    @cached_property
    def auth_service(self) -> AuthService:
        return AuthService(
            self.database,
            self.organizations,
            self.users,
            self.sessions,
            settings=self.settings,
        )

    @cached_property
    def user_admin_service(self) -> UserAdministrationService:
        return UserAdministrationService(
            self.database,
            self.users,
            self.invitations,
            self.companies,
            settings=self.settings,
        )


class Container:
    """Process-wide holder of settings and the database connection.

    For tests, build one with custom settings:

        container = Container(settings=Settings(sqlite_path=":memory:"))
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        logger.debug(
            "container_created", environment=self._settings.environment.value
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def database(self) -> SQLiteDatabase:
        """The SQLite database, created and initialized on first access."""
        db_path = str(self._settings.sqlite_path)
        logger.info("initializing_sqlite_database", path=db_path)
        # API handlers run on a thread pool; writes are serialized by the database lock.
        db = SQLiteDatabase(db_path, check_same_thread=False)
        db.initialize()
        return db

    @cached_property
    def services(self) -> ServiceRegistry:
        return ServiceRegistry(self.database, self._settings)

    def close(self) -> None:
        if "database" in self.__dict__:
            logger.info("closing_database_connection")
            self.database.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


_container: Container | None = None


@lru_cache
def get_container() -> Container:
    """Get the global container singleton."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Close and forget the global container."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
    get_container.cache_clear()


def get_database() -> SQLiteDatabase:
    """FastAPI dependency for database access."""
    return get_container().database


__all__ = [
    "Container",
    "ServiceRegistry",
    "get_container",
    "get_database",
    "reset_container",
]
