"""Derives what a user may read from its role and its place in the ownership graph."""

from collections.abc import Iterable
from uuid import UUID

from property_portfolio.domain.leases import Lease
from property_portfolio.domain.properties import Property
from property_portfolio.domain.users import User
from property_portfolio.logging_config import get_logger
from property_portfolio.services.ownership_graph import OwnershipGraphService

logger = get_logger(__name__)


class AccessScope:
    """The set of companies a user can read, or ``None`` for the whole organization."""

    def __init__(self, company_ids: set[UUID] | None) -> None:
        self.company_ids = company_ids

    @property
    def unrestricted(self) -> bool:
        return self.company_ids is None

    def allows_company(self, company_id: UUID) -> bool:
        return self.company_ids is None or company_id in self.company_ids

    def allows_property(self, prop: Property) -> bool:
        if self.company_ids is None:
            return True
        return prop.owner_company_id is not None and self.allows_company(prop.owner_company_id)


class AccessControlService:
    def __init__(self, graph: OwnershipGraphService) -> None:
        self._graph = graph

    def scope_for(self, user: User) -> AccessScope:
        if user.sees_whole_organization:
            return AccessScope(None)
        if user.assigned_company_id is None:
            return AccessScope(set())
        company_ids = self._graph.accessible_company_ids(
            user.organization_id, user.assigned_company_id
        )
        logger.debug(
            "access_scope_resolved",
            user_id=str(user.id),
            root_company_id=str(user.assigned_company_id),
            company_count=len(company_ids),
        )
        return AccessScope(company_ids)

    def visible_properties(
        self, user: User, properties: Iterable[Property]
    ) -> list[Property]:
        scope = self.scope_for(user)
        return [prop for prop in properties if scope.allows_property(prop)]

    def can_read_property(self, user: User, prop: Property) -> bool:
        return self.scope_for(user).allows_property(prop)

    def visible_leases(
        self,
        user: User,
        leases: Iterable[Lease],
        properties: Iterable[Property],
    ) -> list[Lease]:
        """Leases are visible exactly when their property is."""
        scope = self.scope_for(user)
        if scope.unrestricted:
            return list(leases)
        visible_property_ids = {
            prop.id for prop in properties if scope.allows_property(prop)
        }
        return [lease for lease in leases if lease.property_id in visible_property_ids]


__all__ = ["AccessControlService", "AccessScope"]
