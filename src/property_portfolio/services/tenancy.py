"""Lease tenancy management and the one-tenant-at-a-time rule.

Two rules apply to the tenancies of a single lease, on create and on update:

1. Periods (inclusive, open end treated as 2099-12-31) may not overlap.
2. If the new period contains today, no other tenancy may contain today.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any
from uuid import UUID

from property_portfolio.domain.leases import LeaseTenant, TenancyStatus
from property_portfolio.domain.users import User
from property_portfolio.exceptions import NotFoundError, TenancyConflictError
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import (
    LeaseTenantRepository,
    TenantRepository,
)
from property_portfolio.repositories.sqlite import SQLiteDatabase
from property_portfolio.services.properties import LeaseService

logger = get_logger(__name__)

OVERLAP_MESSAGE = "Lejeperioden overlapper med en eksisterende kontrakt"
ACTIVE_MESSAGE = "Der er allerede en aktiv lejer for dette lejemål"

# Fields a caller may change on an existing tenancy.
UPDATABLE_FIELDS = frozenset(
    {
        "tenant_id",
        "rent_amount",
        "advance_water",
        "advance_heating",
        "advance_electricity",
        "advance_other",
        "period_start",
        "period_end",
        "deposit_type",
        "deposit_amount",
        "prepaid_type",
        "prepaid_amount",
        "regulation_type",
        "note",
    }
)


def check_tenancy_conflicts(
    candidate: LeaseTenant, existing: Iterable[LeaseTenant], today: date
) -> None:
    """Raise TenancyConflictError if ``candidate`` collides with ``existing``.

    A record in ``existing`` with the candidate's id is ignored, so updates
    are checked against the other tenancies only.
    """
    others = [lt for lt in existing if lt.id != candidate.id]
    for other in others:
        if candidate.overlaps(other):
            raise TenancyConflictError(OVERLAP_MESSAGE, candidate.lease_id, other.id)
    if candidate.contains(today):
        for other in others:
            if other.contains(today):
                raise TenancyConflictError(ACTIVE_MESSAGE, candidate.lease_id, other.id)


@dataclass
class TenancyView:
    """A tenancy together with its status on the day it was read."""

    lease_tenant: LeaseTenant
    status: TenancyStatus


class LeaseTenantService:
    """Tenancies of the leases a user can see.

    A tenancy whose lease is outside the user's access scope is reported as
    missing, for reads and writes alike.
    """

    def __init__(
        self,
        database: SQLiteDatabase,
        lease_tenant_repo: LeaseTenantRepository,
        lease_service: LeaseService,
        tenant_repo: TenantRepository,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._db = database
        self._lease_tenant_repo = lease_tenant_repo
        self._lease_service = lease_service
        self._tenant_repo = tenant_repo
        self._clock = clock

    def with_status(self, lease_tenants: Iterable[LeaseTenant]) -> list[TenancyView]:
        today = self._clock()
        return [TenancyView(lt, lt.status_on(today)) for lt in lease_tenants]

    def list_for_lease(self, user: User, lease_id: UUID) -> list[TenancyView]:
        lease = self._lease_service.get_for(user, lease_id)
        return self.with_status(self._lease_tenant_repo.list_by_lease(lease.id))

    def list_all(self, user: User) -> list[TenancyView]:
        visible = {lease.id for lease in self._lease_service.list_for(user)}
        return self.with_status(
            lt
            for lt in self._lease_tenant_repo.list_by_organization(user.organization_id)
            if lt.lease_id in visible
        )

    def get(self, user: User, lease_tenant_id: UUID) -> LeaseTenant:
        lease_tenant = self._lease_tenant_repo.get(lease_tenant_id, user.organization_id)
        if lease_tenant is None:
            raise NotFoundError("Lejekontrakt", lease_tenant_id)
        try:
            self._lease_service.get_for(user, lease_tenant.lease_id)
        except NotFoundError:
            raise NotFoundError("Lejekontrakt", lease_tenant_id) from None
        return lease_tenant

    def create(self, user: User, **fields: Any) -> LeaseTenant:
        candidate = LeaseTenant(organization_id=user.organization_id, **fields)
        with self._db.transaction():
            self._lease_service.get_for(user, candidate.lease_id)
            self._require_tenant(user, candidate.tenant_id)
            self._check(candidate)
            self._lease_tenant_repo.add(candidate)
        logger.info(
            "lease_tenant_created",
            lease_tenant_id=str(candidate.id),
            lease_id=str(candidate.lease_id),
            tenant_id=str(candidate.tenant_id),
            period_start=candidate.period_start.isoformat(),
            period_end=candidate.period_end.isoformat() if candidate.period_end else None,
        )
        return candidate

    def update(self, user: User, lease_tenant_id: UUID, **changes: Any) -> LeaseTenant:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown lease tenant fields: {sorted(unknown)}")

        with self._db.transaction():
            current = self.get(user, lease_tenant_id)
            merged = {name: getattr(current, name) for name in UPDATABLE_FIELDS}
            merged.update(changes)

            updated = LeaseTenant(
                lease_id=current.lease_id,
                organization_id=current.organization_id,
                id=current.id,
                created_at=current.created_at,
                **merged,
            )
            if updated.tenant_id != current.tenant_id:
                self._require_tenant(user, updated.tenant_id)
            self._check(updated)
            self._lease_tenant_repo.update(updated)

        logger.info("lease_tenant_updated", lease_tenant_id=str(lease_tenant_id))
        return updated

    def delete(self, user: User, lease_tenant_id: UUID) -> None:
        self.get(user, lease_tenant_id)
        self._lease_tenant_repo.delete(lease_tenant_id, user.organization_id)
        logger.info("lease_tenant_deleted", lease_tenant_id=str(lease_tenant_id))

    def _require_tenant(self, user: User, tenant_id: UUID) -> None:
        if self._tenant_repo.get(tenant_id, user.organization_id) is None:
            raise NotFoundError("Lejer", tenant_id)

    def _check(self, candidate: LeaseTenant) -> None:
        existing = self._lease_tenant_repo.list_by_lease(candidate.lease_id)
        try:
            check_tenancy_conflicts(candidate, existing, self._clock())
        except TenancyConflictError as exc:
            logger.warning(
                "tenancy_conflict",
                lease_tenant_id=str(candidate.id),
                reason=exc.message,
                **exc.context,
            )
            raise


__all__ = [
    "ACTIVE_MESSAGE",
    "LeaseTenantService",
    "OVERLAP_MESSAGE",
    "TenancyView",
    "check_tenancy_conflicts",
]
