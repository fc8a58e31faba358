"""Dashboard statistics, either as raw totals or weighted by effective ownership."""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from property_portfolio.domain.leases import Lease
from property_portfolio.domain.properties import Property
from property_portfolio.domain.users import DashboardViewMode, User, UserRole
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import (
    LeaseRepository,
    PropertyRepository,
)
from property_portfolio.services.ownership_graph import AdjacencyMap, OwnershipGraphService

logger = get_logger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
RECENT_LIMIT = 5


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _newest_first(properties: list[Property]) -> list[Property]:
    """Sort by acquisition date, newest first; undated properties last, ties stable."""
    dated = [p for p in properties if p.acquisition_date is not None]
    undated = [p for p in properties if p.acquisition_date is None]
    dated.sort(key=lambda p: p.acquisition_date or date.min, reverse=True)
    return dated + undated


@dataclass
class PortfolioStats:
    """Dashboard figures. Counts are fractional in weighted mode."""

    mode: DashboardViewMode
    count: Decimal = ZERO
    total_value: Decimal = ZERO
    latest_property: Property | None = None
    lease_count: Decimal = ZERO
    total_rent_capacity: Decimal = ZERO
    weights: dict[UUID, Decimal] = field(default_factory=dict, repr=False)

    def rounded(self) -> "PortfolioStats":
        return PortfolioStats(
            mode=self.mode,
            count=_round(self.count),
            total_value=_round(self.total_value),
            latest_property=self.latest_property,
            lease_count=_round(self.lease_count),
            total_rent_capacity=_round(self.total_rent_capacity),
            weights=self.weights,
        )


class PortfolioStatsService:
    def __init__(
        self,
        property_repo: PropertyRepository,
        lease_repo: LeaseRepository,
        graph: OwnershipGraphService,
    ) -> None:
        self._property_repo = property_repo
        self._lease_repo = lease_repo
        self._graph = graph

    def stats_for(self, user: User) -> PortfolioStats:
        """Pick total or weighted statistics for a user and round them for reporting."""
        if user.role == UserRole.BROKER:
            return self.total_stats(user.organization_id).rounded()
        if user.dashboard_view_mode == DashboardViewMode.WEIGHTED:
            if user.assigned_company_id is None:
                logger.info(
                    "weighted_stats_fallback_to_total",
                    user_id=str(user.id),
                    reason="no_assigned_company",
                )
                return self.total_stats(user.organization_id).rounded()
            return self.weighted_stats(
                user.organization_id, user.assigned_company_id
            ).rounded()
        return self.total_stats(user.organization_id).rounded()

    def total_stats(self, organization_id: UUID) -> PortfolioStats:
        properties = list(self._property_repo.list_by_organization(organization_id))
        leases = list(self._lease_repo.list_by_organization(organization_id))
        ordered = _newest_first(properties)
        return PortfolioStats(
            mode=DashboardViewMode.TOTAL,
            count=Decimal(len(properties)),
            total_value=sum((p.acquisition_price for p in properties), ZERO),
            latest_property=ordered[0] if ordered else None,
            lease_count=Decimal(len(leases)),
            total_rent_capacity=Decimal(sum(lease.total_area for lease in leases)),
        )

    def weighted_stats(
        self, organization_id: UUID, root_company_id: UUID
    ) -> PortfolioStats:
        """Aggregate every property scaled by the root's effective share of its owner.

        Properties without an owner company are skipped. Nothing is rounded
        here; callers round when they report.
        """
        properties = list(self._property_repo.list_by_organization(organization_id))
        leases = list(self._lease_repo.list_by_organization(organization_id))
        weights = self.property_weights(organization_id, root_company_id, properties)

        count = ZERO
        total_value = ZERO
        for prop in properties:
            weight = weights.get(prop.id, ZERO)
            count += weight
            total_value += prop.acquisition_price * weight

        latest = next(
            (p for p in _newest_first(properties) if weights.get(p.id, ZERO) > ZERO),
            None,
        )

        lease_count, area = self._weighted_leases(leases, weights)

        logger.debug(
            "weighted_stats_computed",
            organization_id=str(organization_id),
            root_company_id=str(root_company_id),
            property_count=len(properties),
        )
        return PortfolioStats(
            mode=DashboardViewMode.WEIGHTED,
            count=count,
            total_value=total_value,
            latest_property=latest,
            lease_count=lease_count,
            total_rent_capacity=area,
            weights=weights,
        )

    def property_weights(
        self,
        organization_id: UUID,
        root_company_id: UUID,
        properties: list[Property],
    ) -> dict[UUID, Decimal]:
        """Weight per property id; ownerless properties are absent."""
        adjacency: AdjacencyMap = self._graph.build_adjacency_map(organization_id)
        by_company: dict[UUID, Decimal] = {}
        weights: dict[UUID, Decimal] = {}
        for prop in properties:
            owner = prop.owner_company_id
            if owner is None:
                continue
            if owner not in by_company:
                by_company[owner] = self._graph.weight_from_root_to(
                    organization_id, root_company_id, owner, adjacency=adjacency
                )
            weights[prop.id] = by_company[owner]
        return weights

    def recent_properties(self, user: User, limit: int = RECENT_LIMIT) -> list[Property]:
        properties = list(self._property_repo.list_by_organization(user.organization_id))
        ordered = _newest_first(properties)
        weighted = (
            user.role == UserRole.USER
            and user.dashboard_view_mode == DashboardViewMode.WEIGHTED
        )
        if not weighted:
            return ordered[:limit]
        if user.assigned_company_id is None:
            return []
        weights = self.property_weights(
            user.organization_id, user.assigned_company_id, properties
        )
        return [p for p in ordered if weights.get(p.id, ZERO) > ZERO][:limit]

    @staticmethod
    def _weighted_leases(
        leases: list[Lease], weights: dict[UUID, Decimal]
    ) -> tuple[Decimal, Decimal]:
        count = ZERO
        area = ZERO
        for lease in leases:
            weight = weights.get(lease.property_id, ZERO)
            if weight > ZERO:
                count += weight
                area += Decimal(lease.total_area) * weight
        return count, area


__all__ = ["PortfolioStats", "PortfolioStatsService", "RECENT_LIMIT"]
