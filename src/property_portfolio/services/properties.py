"""Property and lease management, filtered through the caller's access scope."""

import dataclasses
from typing import Any
from uuid import UUID

from property_portfolio.domain.leases import Lease
from property_portfolio.domain.properties import Property
from property_portfolio.domain.users import User
from property_portfolio.exceptions import NotFoundError
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import (
    CompanyRepository,
    LeaseRepository,
    PropertyRepository,
)
from property_portfolio.services.access_control import AccessControlService

logger = get_logger(__name__)

PROPERTY_FIELDS = frozenset(
    {
        "name",
        "address",
        "postal_code",
        "city",
        "acquisition_price",
        "acquisition_date",
        "property_type",
        "share_numerator",
        "share_denominator",
        "owner_company_id",
    }
)

LEASE_FIELDS = frozenset(
    {
        "property_id",
        "name",
        "lease_type",
        "registered_area",
        "total_area",
        "vat_registered",
        "max_rent_per_sqm",
        "yield_requirement_pct",
    }
)


def _pick(changes: dict[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {sorted(unknown)}")
    return changes


class PropertyService:
    def __init__(
        self,
        property_repo: PropertyRepository,
        company_repo: CompanyRepository,
        lease_repo: LeaseRepository,
        access: AccessControlService,
    ) -> None:
        self._property_repo = property_repo
        self._company_repo = company_repo
        self._lease_repo = lease_repo
        self._access = access

    def list_for(self, user: User) -> list[Property]:
        properties = self._property_repo.list_by_organization(user.organization_id)
        return self._access.visible_properties(user, properties)

    def get_for(self, user: User, property_id: UUID) -> Property:
        """Fetch a property the user may read; anything else looks like a missing record."""
        prop = self._property_repo.get(property_id, user.organization_id)
        if prop is None or not self._access.can_read_property(user, prop):
            raise NotFoundError("Ejendom", property_id)
        return prop

    def leases_for(self, user: User, property_id: UUID) -> list[Lease]:
        prop = self.get_for(user, property_id)
        return list(self._lease_repo.list_by_property(prop.id))

    def create(self, user: User, **fields: Any) -> Property:
        _pick(fields, PROPERTY_FIELDS)
        self._require_owner(user, fields.get("owner_company_id"))
        prop = Property(organization_id=user.organization_id, **fields)
        self._property_repo.add(prop)
        logger.info(
            "property_created",
            property_id=str(prop.id),
            owner_company_id=str(prop.owner_company_id) if prop.owner_company_id else None,
        )
        return prop

    def update(self, user: User, property_id: UUID, **changes: Any) -> Property:
        _pick(changes, PROPERTY_FIELDS)
        current = self.get_for(user, property_id)
        if "owner_company_id" in changes:
            self._require_owner(user, changes["owner_company_id"])
        updated = dataclasses.replace(current, **changes)
        self._property_repo.update(updated)
        logger.info("property_updated", property_id=str(property_id))
        return updated

    def delete(self, user: User, property_id: UUID) -> None:
        self.get_for(user, property_id)
        self._property_repo.delete(property_id, user.organization_id)
        logger.info("property_deleted", property_id=str(property_id))

    def _require_owner(self, user: User, company_id: UUID | None) -> None:
        """The owner must exist in the organization and lie inside the user's scope."""
        if company_id is None:
            return
        company = self._company_repo.get(company_id, user.organization_id)
        if company is None or not self._access.scope_for(user).allows_company(company.id):
            raise NotFoundError("Selskab", company_id)


class LeaseService:
    def __init__(
        self,
        lease_repo: LeaseRepository,
        property_repo: PropertyRepository,
        access: AccessControlService,
    ) -> None:
        self._lease_repo = lease_repo
        self._property_repo = property_repo
        self._access = access

    def list_for(self, user: User) -> list[Lease]:
        leases = self._lease_repo.list_by_organization(user.organization_id)
        properties = self._property_repo.list_by_organization(user.organization_id)
        return self._access.visible_leases(user, leases, properties)

    def get_for(self, user: User, lease_id: UUID) -> Lease:
        lease = self._lease_repo.get(lease_id, user.organization_id)
        if lease is None:
            raise NotFoundError("Lejemål", lease_id)
        prop = self._property_repo.get(lease.property_id, user.organization_id)
        if prop is None or not self._access.can_read_property(user, prop):
            raise NotFoundError("Lejemål", lease_id)
        return lease

    def create(self, user: User, **fields: Any) -> Lease:
        _pick(fields, LEASE_FIELDS)
        self._require_property(user, fields.get("property_id"))
        lease = Lease(organization_id=user.organization_id, **fields)
        self._lease_repo.add(lease)
        logger.info(
            "lease_created", lease_id=str(lease.id), property_id=str(lease.property_id)
        )
        return lease

    def update(self, user: User, lease_id: UUID, **changes: Any) -> Lease:
        _pick(changes, LEASE_FIELDS)
        current = self.get_for(user, lease_id)
        if "property_id" in changes:
            self._require_property(user, changes["property_id"])
        updated = dataclasses.replace(current, **changes)
        self._lease_repo.update(updated)
        logger.info("lease_updated", lease_id=str(lease_id))
        return updated

    def delete(self, user: User, lease_id: UUID) -> None:
        self.get_for(user, lease_id)
        self._lease_repo.delete(lease_id, user.organization_id)
        logger.info("lease_deleted", lease_id=str(lease_id))

    def _require_property(self, user: User, property_id: UUID | None) -> None:
        prop = (
            self._property_repo.get(property_id, user.organization_id)
            if property_id is not None
            else None
        )
        if prop is None or not self._access.can_read_property(user, prop):
            raise NotFoundError("Ejendom", property_id)


__all__ = ["LeaseService", "PropertyService"]
