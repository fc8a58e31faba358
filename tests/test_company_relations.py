"""Tests for companies and the ownership-edge invariants enforced on write."""

from decimal import Decimal
from uuid import uuid4

import pytest

from property_portfolio.domain.companies import normalize_percentage
from property_portfolio.exceptions import (
    CycleDetectedError,
    InvalidOwnershipPercentageError,
    MissingFieldsError,
    NotFoundError,
    OwnershipLimitExceededError,
    SelfOwnershipError,
    ValidationError,
)


@pytest.fixture
def company_service(services):
    return services.company_service


class TestNormalizePercentage:
    @pytest.mark.parametrize("value", ["0.01", "50", 100, "33.333"])
    def test_accepts_range(self, value) -> None:
        assert Decimal("0.01") <= normalize_percentage(value) <= Decimal("100")

    def test_quantizes_to_two_decimals(self) -> None:
        assert normalize_percentage("33.335") == Decimal("33.34")

    @pytest.mark.parametrize("value", ["0", "0.004", "-5", "100.01", "abc", "NaN"])
    def test_rejects_out_of_range(self, value) -> None:
        with pytest.raises(InvalidOwnershipPercentageError):
            normalize_percentage(value)


class TestCompanyService:
    def test_create_and_list(self, company_service, organization) -> None:
        company_service.create_company(organization.id, name="Alfa ApS", cvr_number="12345678")

        companies = company_service.list_companies(organization.id)

        assert [c.name for c in companies] == ["Alfa ApS"]
        assert companies[0].cvr_number == "12345678"

    def test_rejects_bad_cvr(self, company_service, organization) -> None:
        with pytest.raises(ValidationError, match="CVR-nummer"):
            company_service.create_company(organization.id, name="Alfa", cvr_number="1234")

    def test_rejects_blank_name(self, company_service, organization) -> None:
        with pytest.raises(MissingFieldsError):
            company_service.create_company(organization.id, name="  ")

    def test_update_changes_name(self, company_service, organization, make_company) -> None:
        company = make_company("Gammelt navn")

        company_service.update_company(organization.id, company.id, name="Nyt navn")

        assert company_service.get_company(organization.id, company.id).name == "Nyt navn"

    def test_other_organization_is_not_found(
        self, company_service, other_organization, make_company
    ) -> None:
        company = make_company("Alfa")

        with pytest.raises(NotFoundError):
            company_service.get_company(other_organization.id, company.id)

    def test_delete_removes_relations(self, company_service, organization, make_company) -> None:
        a, b = make_company("A"), make_company("B")
        company_service.create_relation(organization.id, a.id, b.id, "50")

        company_service.delete_company(organization.id, b.id)

        assert company_service.list_relations(organization.id) == []


class TestCreateRelation:
    def test_creates_edge(self, company_service, organization, make_company) -> None:
        a, b = make_company("A"), make_company("B")

        relation = company_service.create_relation(organization.id, a.id, b.id, "60")

        assert relation.ownership_percentage == Decimal("60.00")
        assert company_service.parent_relations(organization.id, b.id) == [relation]
        assert company_service.child_relations(organization.id, a.id) == [relation]

    def test_rejects_over_hundred_percent(
        self, company_service, organization, make_company
    ) -> None:
        a, b, child = make_company("A"), make_company("B"), make_company("Datter")
        company_service.create_relation(organization.id, a.id, child.id, "50")

        with pytest.raises(OwnershipLimitExceededError) as exc_info:
            company_service.create_relation(organization.id, b.id, child.id, "60")

        assert exc_info.value.existing_total == Decimal("50")
        assert exc_info.value.new_total == Decimal("110")
        assert "110.00%" in exc_info.value.message
        assert "50.00%" in exc_info.value.message
        assert company_service.incoming_total(child.id) == Decimal("50")

    def test_hundredth_over_limit_reported_exactly(
        self, company_service, organization, make_company
    ) -> None:
        a, b, child = make_company("A"), make_company("B"), make_company("Datter")
        company_service.create_relation(organization.id, a.id, child.id, "50")

        with pytest.raises(OwnershipLimitExceededError) as exc_info:
            company_service.create_relation(organization.id, b.id, child.id, "50.01")

        assert "100.01%" in exc_info.value.message

    def test_allows_exactly_hundred(self, company_service, organization, make_company) -> None:
        a, b, child = make_company("A"), make_company("B"), make_company("Datter")
        company_service.create_relation(organization.id, a.id, child.id, "40")
        company_service.create_relation(organization.id, b.id, child.id, "60")

        assert company_service.incoming_total(child.id) == Decimal("100")

    def test_rejects_self_ownership(self, company_service, organization, make_company) -> None:
        a = make_company("A")

        with pytest.raises(SelfOwnershipError):
            company_service.create_relation(organization.id, a.id, a.id, "10")

    def test_rejects_invalid_percentage(self, company_service, organization, make_company) -> None:
        a, b = make_company("A"), make_company("B")

        with pytest.raises(InvalidOwnershipPercentageError):
            company_service.create_relation(organization.id, a.id, b.id, "0")

    def test_rejects_cycle(self, company_service, organization, make_company) -> None:
        a, b, c = make_company("A"), make_company("B"), make_company("C")
        company_service.create_relation(organization.id, a.id, b.id, "60")
        company_service.create_relation(organization.id, b.id, c.id, "50")

        with pytest.raises(CycleDetectedError):
            company_service.create_relation(organization.id, c.id, a.id, "10")

        assert len(company_service.list_relations(organization.id)) == 2

    def test_rejects_company_from_other_organization(
        self, company_service, organization, other_organization, make_company
    ) -> None:
        a = make_company("A")
        foreign = make_company("Fremmed", organization_id=other_organization.id)

        with pytest.raises(NotFoundError):
            company_service.create_relation(organization.id, a.id, foreign.id, "10")

    def test_rejects_unknown_company(self, company_service, organization, make_company) -> None:
        a = make_company("A")

        with pytest.raises(NotFoundError):
            company_service.create_relation(organization.id, a.id, uuid4(), "10")


class TestUpdateAndDeleteRelation:
    def test_update_excludes_own_percentage(
        self, company_service, organization, make_company
    ) -> None:
        a, b, child = make_company("A"), make_company("B"), make_company("Datter")
        first = company_service.create_relation(organization.id, a.id, child.id, "50")
        company_service.create_relation(organization.id, b.id, child.id, "40")

        updated = company_service.update_relation(organization.id, first.id, "60")

        assert updated.ownership_percentage == Decimal("60.00")
        assert company_service.incoming_total(child.id) == Decimal("100")

    def test_update_rejects_over_limit(self, company_service, organization, make_company) -> None:
        a, b, child = make_company("A"), make_company("B"), make_company("Datter")
        first = company_service.create_relation(organization.id, a.id, child.id, "50")
        company_service.create_relation(organization.id, b.id, child.id, "40")

        with pytest.raises(OwnershipLimitExceededError):
            company_service.update_relation(organization.id, first.id, "61")

        assert company_service.get_relation(organization.id, first.id).ownership_percentage == Decimal("50")

    def test_delete(self, company_service, organization, make_company) -> None:
        a, b = make_company("A"), make_company("B")
        relation = company_service.create_relation(organization.id, a.id, b.id, "60")

        company_service.delete_relation(organization.id, relation.id)

        with pytest.raises(NotFoundError):
            company_service.get_relation(organization.id, relation.id)

    def test_relation_of_other_organization_is_not_found(
        self, company_service, organization, other_organization, make_company
    ) -> None:
        a, b = make_company("A"), make_company("B")
        relation = company_service.create_relation(organization.id, a.id, b.id, "60")

        with pytest.raises(NotFoundError):
            company_service.delete_relation(other_organization.id, relation.id)
