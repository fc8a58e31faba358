"""Tenant register with per-organization internal numbering."""

import dataclasses
from typing import Any
from uuid import UUID

from property_portfolio.domain.leases import Tenant
from property_portfolio.exceptions import NotFoundError
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import TenantRepository
from property_portfolio.repositories.sqlite import SQLiteDatabase

logger = get_logger(__name__)

TENANT_FIELDS = frozenset(
    {
        "name",
        "tenant_type",
        "cvr_number",
        "contact_person",
        "email",
        "invoice_email",
        "phone",
        "notes",
    }
)


class TenantService:
    def __init__(self, database: SQLiteDatabase, tenant_repo: TenantRepository) -> None:
        self._db = database
        self._tenant_repo = tenant_repo

    def list(self, organization_id: UUID) -> list[Tenant]:
        return list(self._tenant_repo.list_by_organization(organization_id))

    def get(self, organization_id: UUID, tenant_id: UUID) -> Tenant:
        tenant = self._tenant_repo.get(tenant_id, organization_id)
        if tenant is None:
            raise NotFoundError("Lejer", tenant_id)
        return tenant

    def create(self, organization_id: UUID, **fields: Any) -> Tenant:
        """Create a tenant; numbering starts at 1001 and increases per organization."""
        unknown = set(fields) - TENANT_FIELDS
        if unknown:
            raise ValueError(f"Unknown tenant fields: {sorted(unknown)}")
        with self._db.transaction():
            tenant = Tenant(
                organization_id=organization_id,
                internal_number=self._tenant_repo.next_internal_number(organization_id),
                **fields,
            )
            self._tenant_repo.add(tenant)
        logger.info(
            "tenant_created",
            tenant_id=str(tenant.id),
            internal_number=tenant.internal_number,
        )
        return tenant

    def update(self, organization_id: UUID, tenant_id: UUID, **changes: Any) -> Tenant:
        unknown = set(changes) - TENANT_FIELDS
        if unknown:
            raise ValueError(f"Unknown tenant fields: {sorted(unknown)}")
        updated = dataclasses.replace(self.get(organization_id, tenant_id), **changes)
        self._tenant_repo.update(updated)
        logger.info("tenant_updated", tenant_id=str(tenant_id))
        return updated

    def delete(self, organization_id: UUID, tenant_id: UUID) -> None:
        self.get(organization_id, tenant_id)
        self._tenant_repo.delete(tenant_id, organization_id)
        logger.info("tenant_deleted", tenant_id=str(tenant_id))


__all__ = ["TenantService"]
