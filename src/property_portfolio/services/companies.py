"""Company and ownership-relation management.

Every write to ``company_relations`` goes through this service, which keeps
three invariants: no company owns itself, no company is owned more than 100%
in total, and the graph stays acyclic. The checks and the write share one
database transaction.
"""

from decimal import Decimal
from typing import Any
from uuid import UUID

from property_portfolio.domain.companies import (
    MAX_PERCENTAGE,
    Company,
    CompanyRelation,
    normalize_percentage,
    validate_cvr,
)
from property_portfolio.exceptions import (
    MissingFieldsError,
    NotFoundError,
    OwnershipLimitExceededError,
    SelfOwnershipError,
)
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import (
    CompanyRelationRepository,
    CompanyRepository,
)
from property_portfolio.repositories.sqlite import SQLiteDatabase
from property_portfolio.services.ownership_graph import OwnershipGraphService

logger = get_logger(__name__)


class CompanyService:
    def __init__(
        self,
        database: SQLiteDatabase,
        company_repo: CompanyRepository,
        relation_repo: CompanyRelationRepository,
        graph: OwnershipGraphService | None = None,
    ) -> None:
        self._db = database
        self._company_repo = company_repo
        self._relation_repo = relation_repo
        self._graph = graph or OwnershipGraphService(relation_repo)

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    def list_companies(self, organization_id: UUID) -> list[Company]:
        return list(self._company_repo.list_by_organization(organization_id))

    def get_company(self, organization_id: UUID, company_id: UUID) -> Company:
        company = self._company_repo.get(company_id, organization_id)
        if company is None:
            raise NotFoundError("Selskab", company_id)
        return company

    def create_company(
        self, organization_id: UUID, name: str, cvr_number: str | None = None
    ) -> Company:
        company = Company(
            name=name, organization_id=organization_id, cvr_number=cvr_number
        )
        self._company_repo.add(company)
        logger.info(
            "company_created",
            company_id=str(company.id),
            organization_id=str(organization_id),
        )
        return company

    def update_company(
        self, organization_id: UUID, company_id: UUID, **changes: Any
    ) -> Company:
        company = self.get_company(organization_id, company_id)
        if "name" in changes and changes["name"] is not None:
            if not changes["name"].strip():
                raise MissingFieldsError("name")
            company.name = changes["name"]
        if "cvr_number" in changes:
            company.cvr_number = validate_cvr(changes["cvr_number"])
        self._company_repo.update(company)
        logger.info("company_updated", company_id=str(company_id))
        return company

    def delete_company(self, organization_id: UUID, company_id: UUID) -> None:
        """Delete a company; its relations go with it, owned properties become ownerless."""
        self.get_company(organization_id, company_id)
        self._company_repo.delete(company_id, organization_id)
        logger.info("company_deleted", company_id=str(company_id))

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def list_relations(self, organization_id: UUID) -> list[CompanyRelation]:
        return list(self._relation_repo.list_by_organization(organization_id))

    def parent_relations(
        self, organization_id: UUID, company_id: UUID
    ) -> list[CompanyRelation]:
        """Incoming edges: who owns this company."""
        self.get_company(organization_id, company_id)
        return list(self._relation_repo.list_by_child(company_id))

    def child_relations(
        self, organization_id: UUID, company_id: UUID
    ) -> list[CompanyRelation]:
        """Outgoing edges: what this company owns."""
        self.get_company(organization_id, company_id)
        return list(self._relation_repo.list_by_parent(company_id))

    def get_relation(self, organization_id: UUID, relation_id: UUID) -> CompanyRelation:
        relation = self._relation_repo.get(relation_id, organization_id)
        if relation is None:
            raise NotFoundError("Ejerskabsrelation", relation_id)
        return relation

    def incoming_total(
        self, child_company_id: UUID, exclude_relation_id: UUID | None = None
    ) -> Decimal:
        return sum(
            (
                relation.ownership_percentage
                for relation in self._relation_repo.list_by_child(child_company_id)
                if relation.id != exclude_relation_id
            ),
            Decimal("0"),
        )

    def create_relation(
        self,
        organization_id: UUID,
        parent_company_id: UUID,
        child_company_id: UUID,
        ownership_percentage: Any,
    ) -> CompanyRelation:
        percentage = normalize_percentage(ownership_percentage)
        if parent_company_id == child_company_id:
            raise SelfOwnershipError(parent_company_id)

        with self._db.transaction():
            self.get_company(organization_id, parent_company_id)
            self.get_company(organization_id, child_company_id)

            self._check_limit(child_company_id, percentage)
            self._graph.validate_new_edge(
                organization_id, parent_company_id, child_company_id
            )

            relation = CompanyRelation(
                parent_company_id=parent_company_id,
                child_company_id=child_company_id,
                ownership_percentage=percentage,
            )
            self._relation_repo.add(relation)

        logger.info(
            "company_relation_created",
            relation_id=str(relation.id),
            parent_company_id=str(parent_company_id),
            child_company_id=str(child_company_id),
            ownership_percentage=str(percentage),
        )
        return relation

    def update_relation(
        self, organization_id: UUID, relation_id: UUID, ownership_percentage: Any
    ) -> CompanyRelation:
        percentage = normalize_percentage(ownership_percentage)

        with self._db.transaction():
            relation = self.get_relation(organization_id, relation_id)
            self._check_limit(
                relation.child_company_id, percentage, exclude_relation_id=relation.id
            )
            relation.update_percentage(percentage)
            self._relation_repo.update(relation)

        logger.info(
            "company_relation_updated",
            relation_id=str(relation_id),
            ownership_percentage=str(percentage),
        )
        return relation

    def delete_relation(self, organization_id: UUID, relation_id: UUID) -> None:
        with self._db.transaction():
            self.get_relation(organization_id, relation_id)
            self._relation_repo.delete(relation_id)
        logger.info("company_relation_deleted", relation_id=str(relation_id))

    def _check_limit(
        self,
        child_company_id: UUID,
        percentage: Decimal,
        exclude_relation_id: UUID | None = None,
    ) -> None:
        existing = self.incoming_total(child_company_id, exclude_relation_id)
        new_total = existing + percentage
        if new_total > MAX_PERCENTAGE:
            logger.warning(
                "ownership_limit_exceeded",
                child_company_id=str(child_company_id),
                existing_total=str(existing),
                new_total=str(new_total),
            )
            raise OwnershipLimitExceededError(child_company_id, existing, new_total)


__all__ = ["CompanyService"]
