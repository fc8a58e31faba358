from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from property_portfolio.domain.companies import Company, CompanyRelation
from property_portfolio.domain.leases import Lease, LeaseTenant, Tenant
from property_portfolio.domain.organizations import Organization
from property_portfolio.domain.properties import Property
from property_portfolio.domain.users import Invitation, Session, User


class OrganizationRepository(ABC):
    @abstractmethod
    def add(self, organization: Organization) -> None:
        pass

    @abstractmethod
    def get(self, organization_id: UUID) -> Organization | None:
        pass

    @abstractmethod
    def list_all(self) -> Iterable[Organization]:
        pass


class CompanyRepository(ABC):
    @abstractmethod
    def add(self, company: Company) -> None:
        pass

    @abstractmethod
    def get(self, company_id: UUID, organization_id: UUID) -> Company | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[Company]:
        pass

    @abstractmethod
    def update(self, company: Company) -> None:
        pass

    @abstractmethod
    def delete(self, company_id: UUID, organization_id: UUID) -> None:
        pass


class CompanyRelationRepository(ABC):
    @abstractmethod
    def add(self, relation: CompanyRelation) -> None:
        pass

    @abstractmethod
    def get(self, relation_id: UUID, organization_id: UUID) -> CompanyRelation | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[CompanyRelation]:
        pass

    @abstractmethod
    def list_by_parent(self, parent_company_id: UUID) -> Iterable[CompanyRelation]:
        pass

    @abstractmethod
    def list_by_child(self, child_company_id: UUID) -> Iterable[CompanyRelation]:
        pass

    @abstractmethod
    def update(self, relation: CompanyRelation) -> None:
        pass

    @abstractmethod
    def delete(self, relation_id: UUID) -> None:
        pass


class UserRepository(ABC):
    @abstractmethod
    def add(self, user: User) -> None:
        pass

    @abstractmethod
    def get(self, user_id: UUID) -> User | None:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[User]:
        pass

    @abstractmethod
    def update(self, user: User) -> None:
        pass

    @abstractmethod
    def delete(self, user_id: UUID) -> None:
        pass


class SessionRepository(ABC):
    @abstractmethod
    def add(self, session: Session) -> None:
        pass

    @abstractmethod
    def get_by_token_hash(self, token_hash: str) -> Session | None:
        pass

    @abstractmethod
    def delete(self, session_id: UUID) -> None:
        pass

    @abstractmethod
    def delete_for_user(self, user_id: UUID) -> None:
        pass


class InvitationRepository(ABC):
    @abstractmethod
    def add(self, invitation: Invitation) -> None:
        pass

    @abstractmethod
    def get(self, invitation_id: UUID, organization_id: UUID) -> Invitation | None:
        pass

    @abstractmethod
    def get_by_token(self, token: str) -> Invitation | None:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Invitation | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[Invitation]:
        pass

    @abstractmethod
    def delete(self, invitation_id: UUID) -> None:
        pass


class PropertyRepository(ABC):
    @abstractmethod
    def add(self, prop: Property) -> None:
        pass

    @abstractmethod
    def get(self, property_id: UUID, organization_id: UUID) -> Property | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[Property]:
        pass

    @abstractmethod
    def update(self, prop: Property) -> None:
        pass

    @abstractmethod
    def delete(self, property_id: UUID, organization_id: UUID) -> None:
        pass


class LeaseRepository(ABC):
    @abstractmethod
    def add(self, lease: Lease) -> None:
        pass

    @abstractmethod
    def get(self, lease_id: UUID, organization_id: UUID) -> Lease | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[Lease]:
        pass

    @abstractmethod
    def list_by_property(self, property_id: UUID) -> Iterable[Lease]:
        pass

    @abstractmethod
    def update(self, lease: Lease) -> None:
        pass

    @abstractmethod
    def delete(self, lease_id: UUID, organization_id: UUID) -> None:
        pass


class TenantRepository(ABC):
    @abstractmethod
    def add(self, tenant: Tenant) -> None:
        pass

    @abstractmethod
    def get(self, tenant_id: UUID, organization_id: UUID) -> Tenant | None:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[Tenant]:
        pass

    @abstractmethod
    def next_internal_number(self, organization_id: UUID) -> int:
        pass

    @abstractmethod
    def update(self, tenant: Tenant) -> None:
        pass

    @abstractmethod
    def delete(self, tenant_id: UUID, organization_id: UUID) -> None:
        pass


class LeaseTenantRepository(ABC):
    @abstractmethod
    def add(self, lease_tenant: LeaseTenant) -> None:
        pass

    @abstractmethod
    def get(self, lease_tenant_id: UUID, organization_id: UUID) -> LeaseTenant | None:
        pass

    @abstractmethod
    def list_by_lease(self, lease_id: UUID) -> Iterable[LeaseTenant]:
        pass

    @abstractmethod
    def list_by_organization(self, organization_id: UUID) -> Iterable[LeaseTenant]:
        pass

    @abstractmethod
    def update(self, lease_tenant: LeaseTenant) -> None:
        pass

    @abstractmethod
    def delete(self, lease_tenant_id: UUID, organization_id: UUID) -> None:
        pass
