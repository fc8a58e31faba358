"""Service for ownership graph traversal, cycle detection, and weighted look-through."""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from property_portfolio.exceptions import CycleDetectedError
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import CompanyRelationRepository

logger = get_logger(__name__)

ONE = Decimal("1")
ZERO = Decimal("0")

AdjacencyMap = dict[UUID, list["OwnershipEdge"]]


@dataclass(frozen=True)
class OwnershipEdge:
    child_company_id: UUID
    fraction: Decimal


class OwnershipGraphService:
    """Read-side view of an organization's company ownership graph.

    Two traversals are offered and they answer different questions:

    * :meth:`reachable_with_weight` (first path wins) decides *which*
      companies a user rooted at a company may see.
    * :meth:`weight_from_root_to` (sum over all paths) decides *how much*
      of a company the root effectively owns, for weighted statistics.

    All traversal state is local to a single call.
    """

    def __init__(self, relation_repo: CompanyRelationRepository) -> None:
        self._relation_repo = relation_repo

    def build_adjacency_map(self, organization_id: UUID) -> AdjacencyMap:
        adjacency: AdjacencyMap = defaultdict(list)
        for relation in self._relation_repo.list_by_organization(organization_id):
            adjacency[relation.parent_company_id].append(
                OwnershipEdge(
                    child_company_id=relation.child_company_id,
                    fraction=relation.fraction,
                )
            )
        return dict(adjacency)

    def reachable_with_weight(
        self,
        organization_id: UUID,
        root_company_id: UUID,
        adjacency: AdjacencyMap | None = None,
    ) -> dict[UUID, Decimal]:
        """Companies reachable from the root, each with the weight of the first path found.

        The root is always present with weight 1. A company reached a
        second time is not expanded again, which also stops cycles.
        """
        if adjacency is None:
            adjacency = self.build_adjacency_map(organization_id)
        visited: set[UUID] = set()
        reachable: dict[UUID, Decimal] = {}

        def visit(company_id: UUID, weight: Decimal) -> None:
            if company_id in visited:
                return
            visited.add(company_id)
            if weight > ZERO:
                reachable[company_id] = weight
            for edge in adjacency.get(company_id, []):
                visit(edge.child_company_id, weight * edge.fraction)

        visit(root_company_id, ONE)
        return reachable

    def accessible_company_ids(
        self, organization_id: UUID, root_company_id: UUID
    ) -> set[UUID]:
        return set(self.reachable_with_weight(organization_id, root_company_id))

    def weight_from_root_to(
        self,
        organization_id: UUID,
        root_company_id: UUID,
        target_company_id: UUID,
        adjacency: AdjacencyMap | None = None,
    ) -> Decimal:
        """Effective fraction of ``target`` owned by ``root``, summed over every path.

        An edge leading back onto the current path contributes nothing, so
        legacy cyclic data still terminates. Returns 1 when root is target.
        """
        if root_company_id == target_company_id:
            return ONE
        if adjacency is None:
            adjacency = self.build_adjacency_map(organization_id)

        def weight(company_id: UUID, on_path: frozenset[UUID]) -> Decimal:
            total = ZERO
            for edge in adjacency.get(company_id, []):
                child = edge.child_company_id
                if child == target_company_id:
                    total += edge.fraction
                elif child not in on_path:
                    total += edge.fraction * weight(child, on_path | {child})
            return total

        return weight(root_company_id, frozenset({root_company_id}))

    def detect_cycle(self, adjacency: AdjacencyMap) -> list[UUID] | None:
        """Return one directed cycle as a closed path, or None if the graph is acyclic."""
        visited: set[UUID] = set()
        rec_stack: set[UUID] = set()
        path: list[UUID] = []

        def dfs(node: UUID) -> list[UUID] | None:
            visited.add(node)
            rec_stack.add(node)
            path.append(node)

            for edge in adjacency.get(node, []):
                child = edge.child_company_id
                if child not in visited:
                    result = dfs(child)
                    if result is not None:
                        return result
                elif child in rec_stack:
                    cycle_start = path.index(child)
                    return path[cycle_start:] + [child]

            path.pop()
            rec_stack.remove(node)
            return None

        for node in list(adjacency):
            if node not in visited:
                cycle = dfs(node)
                if cycle is not None:
                    return cycle
        return None

    def validate_new_edge(
        self, organization_id: UUID, parent_company_id: UUID, child_company_id: UUID
    ) -> None:
        """Raise CycleDetectedError if ``parent -> child`` would close a cycle.

        The edge closes a cycle exactly when ``parent`` is already reachable
        from ``child``.
        """
        adjacency = self.build_adjacency_map(organization_id)
        path = self._find_path(adjacency, child_company_id, parent_company_id)
        if path is not None:
            cycle = [parent_company_id] + path
            logger.warning(
                "ownership_cycle_rejected",
                parent_company_id=str(parent_company_id),
                child_company_id=str(child_company_id),
                cycle=[str(company_id) for company_id in cycle],
            )
            raise CycleDetectedError(cycle)

    def _find_path(
        self, adjacency: AdjacencyMap, start: UUID, goal: UUID
    ) -> list[UUID] | None:
        visited: set[UUID] = set()
        path: list[UUID] = []

        def dfs(current: UUID) -> bool:
            path.append(current)
            if current == goal:
                return True
            visited.add(current)
            for edge in adjacency.get(current, []):
                if edge.child_company_id not in visited and dfs(edge.child_company_id):
                    return True
            path.pop()
            return False

        if dfs(start):
            return path
        return None


__all__ = ["AdjacencyMap", "OwnershipEdge", "OwnershipGraphService"]
