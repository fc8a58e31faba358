"""Tests for lease tenancy periods, status and conflict rules."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from property_portfolio.domain.leases import Lease, LeaseTenant, TenancyStatus, Tenant, TenantType
from property_portfolio.domain.users import User, UserRole
from property_portfolio.exceptions import (
    InvalidPeriodError,
    MissingFieldsError,
    NotFoundError,
    TenancyConflictError,
)
from property_portfolio.services.tenancy import (
    OVERLAP_MESSAGE,
    LeaseTenantService,
    check_tenancy_conflicts,
)

TODAY = date(2024, 5, 15)


def _period(start: date, end: date | None = None, **kwargs) -> LeaseTenant:
    return LeaseTenant(
        lease_id=kwargs.pop("lease_id", uuid4()),
        tenant_id=uuid4(),
        rent_amount=Decimal("8500"),
        period_start=start,
        period_end=end,
        organization_id=uuid4(),
        **kwargs,
    )


@pytest.fixture
def lease(services, organization, make_property) -> Lease:
    lease = Lease(property_id=make_property("Havnehuset").id, name="1. th", organization_id=organization.id)
    services.leases.add(lease)
    return lease


@pytest.fixture
def tenant(services, organization) -> Tenant:
    return services.tenant_service.create(
        organization.id,
        name="Karen Jensen",
        tenant_type=TenantType.PRIVAT,
        email="karen@example.dk",
        phone="12345678",
    )


@pytest.fixture
def tenancies(services) -> LeaseTenantService:
    return LeaseTenantService(
        services.database,
        services.lease_tenants,
        services.lease_service,
        services.tenants,
        clock=lambda: TODAY,
    )


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN)

class TestLeaseTenantModel:
    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(InvalidPeriodError):
            _period(date(2024, 6, 1), date(2024, 5, 31))

    def test_single_day_period_allowed(self) -> None:
        lt = _period(date(2024, 6, 1), date(2024, 6, 1))
        assert lt.contains(date(2024, 6, 1))

    def test_money_quantized(self) -> None:
        lt = _period(date(2024, 1, 1), advance_water="125.555")
        assert lt.rent_amount == Decimal("8500.00")
        assert lt.advance_water == Decimal("125.56")

    def test_missing_start_rejected(self) -> None:
        with pytest.raises(MissingFieldsError):
            LeaseTenant(
                lease_id=uuid4(),
                tenant_id=uuid4(),
                rent_amount=Decimal("8500"),
                period_start=None,
                organization_id=uuid4(),
            )


class TestOverlaps:
    def test_overlapping(self) -> None:
        assert _period(date(2024, 1, 1), date(2024, 6, 30)).overlaps(
            _period(date(2024, 3, 1), date(2024, 9, 30))
        )

    def test_touching_bounds_overlap(self) -> None:
        assert _period(date(2024, 1, 1), date(2024, 6, 30)).overlaps(
            _period(date(2024, 6, 30), date(2024, 12, 31))
        )

    def test_adjacent_do_not_overlap(self) -> None:
        assert not _period(date(2024, 1, 1), date(2024, 6, 30)).overlaps(
            _period(date(2024, 7, 1))
        )

    def test_open_ended_overlaps_everything_later(self) -> None:
        assert _period(date(2023, 1, 1)).overlaps(_period(date(2090, 1, 1)))


class TestStatusOn:
    @pytest.mark.parametrize(
        ("start", "end", "expected"),
        [
            (date(2024, 6, 1), None, TenancyStatus.FUTURE),
            (date(2023, 1, 1), date(2024, 5, 14), TenancyStatus.PAST),
            (date(2023, 1, 1), date(2024, 5, 15), TenancyStatus.ACTIVE),
            (date(2024, 5, 15), None, TenancyStatus.ACTIVE),
        ],
    )
    def test_status_on_day(self, start, end, expected) -> None:
        assert _period(start, end).status_on(TODAY) == expected


class TestCheckTenancyConflicts:
    def test_overlap_reported_first(self) -> None:
        lease_id = uuid4()
        existing = _period(date(2024, 3, 1), date(2024, 9, 30), lease_id=lease_id)
        candidate = _period(date(2024, 1, 1), date(2024, 6, 30), lease_id=lease_id)

        with pytest.raises(TenancyConflictError, match=OVERLAP_MESSAGE) as exc_info:
            check_tenancy_conflicts(candidate, [existing], TODAY)

        assert exc_info.value.context["conflicting_lease_tenant_id"] == str(existing.id)

    def test_ignores_own_record(self) -> None:
        current = _period(date(2024, 1, 1))
        check_tenancy_conflicts(current, [current], TODAY)

    def test_no_conflict_with_past_tenancy(self) -> None:
        past = _period(date(2022, 1, 1), date(2023, 12, 31))
        check_tenancy_conflicts(_period(date(2024, 1, 1)), [past], TODAY)


class TestLeaseTenantService:
    def test_create_and_list_with_status(self, tenancies, admin, lease, tenant) -> None:
        created = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2024, 1, 1),
        )

        views = tenancies.list_for_lease(admin, lease.id)

        assert [v.lease_tenant.id for v in views] == [created.id]
        assert views[0].status == TenancyStatus.ACTIVE

    def test_open_ended_tenancy_blocks_later_one(self, tenancies, admin, lease, tenant) -> None:
        first = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )
        later = dict(
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9500"),
            period_start=date(2025, 1, 1),
        )

        with pytest.raises(TenancyConflictError):
            tenancies.create(admin, **later)

        tenancies.update(admin, first.id, period_end=date(2024, 12, 31))
        created = tenancies.create(admin, **later)

        assert created.period_start == date(2025, 1, 1)
        assert len(tenancies.list_all(admin)) == 2

    def test_update_checked_against_others(self, tenancies, admin, lease, tenant) -> None:
        tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2022, 1, 1),
            period_end=date(2022, 12, 31),
        )
        second = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )

        with pytest.raises(TenancyConflictError):
            tenancies.update(admin, second.id, period_start=date(2022, 6, 1))

        assert tenancies.get(admin, second.id).period_start == date(2023, 1, 1)

    def test_update_own_period_allowed(self, tenancies, admin, lease, tenant) -> None:
        current = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )

        updated = tenancies.update(
            admin, current.id, period_start=date(2023, 2, 1), rent_amount="9100"
        )

        assert updated.rent_amount == Decimal("9100.00")

    def test_update_to_null_start_rejected(self, tenancies, admin, lease, tenant) -> None:
        current = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )

        with pytest.raises(MissingFieldsError):
            tenancies.update(admin, current.id, period_start=None)

    def test_second_active_tenancy_rejected(self, tenancies, admin, lease, tenant) -> None:
        tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2024, 1, 1),
            period_end=date(2024, 12, 31),
        )

        with pytest.raises(TenancyConflictError):
            tenancies.create(
                admin,
                lease_id=lease.id,
                tenant_id=tenant.id,
                rent_amount=Decimal("9000"),
                period_start=date(2024, 5, 1),
                period_end=date(2024, 5, 31),
            )

    def test_unknown_lease_is_not_found(self, tenancies, admin, tenant) -> None:
        with pytest.raises(NotFoundError):
            tenancies.create(
                admin,
                lease_id=uuid4(),
                tenant_id=tenant.id,
                rent_amount=Decimal("9000"),
                period_start=date(2024, 1, 1),
            )

    def test_update_rejects_unknown_fields(self, tenancies, admin, lease, tenant) -> None:
        current = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )

        with pytest.raises(ValueError):
            tenancies.update(admin, current.id, lease_id=uuid4())

    def test_delete(self, tenancies, admin, lease, tenant) -> None:
        current = tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )

        tenancies.delete(admin, current.id)

        assert tenancies.list_for_lease(admin, lease.id) == []


class TestLeaseTenantScope:
    """A user rooted at one company cannot reach tenancies outside its graph."""

    @pytest.fixture
    def restricted(self, make_company, make_user) -> User:
        return make_user(UserRole.USER, company=make_company("Holding A"))

    @pytest.fixture
    def existing(self, tenancies, admin, lease, tenant) -> LeaseTenant:
        return tenancies.create(
            admin,
            lease_id=lease.id,
            tenant_id=tenant.id,
            rent_amount=Decimal("9000"),
            period_start=date(2023, 1, 1),
        )

    def test_hidden_lease_not_listed(self, tenancies, restricted, existing) -> None:
        assert tenancies.list_all(restricted) == []
        with pytest.raises(NotFoundError):
            tenancies.list_for_lease(restricted, existing.lease_id)

    def test_hidden_tenancy_not_readable(self, tenancies, restricted, existing) -> None:
        with pytest.raises(NotFoundError, match="Lejekontrakt"):
            tenancies.get(restricted, existing.id)

    def test_create_on_hidden_lease_rejected(
        self, tenancies, restricted, existing, tenant
    ) -> None:
        with pytest.raises(NotFoundError):
            tenancies.create(
                restricted,
                lease_id=existing.lease_id,
                tenant_id=tenant.id,
                rent_amount=Decimal("9000"),
                period_start=date(2030, 1, 1),
            )

    def test_update_and_delete_rejected(self, tenancies, admin, restricted, existing) -> None:
        with pytest.raises(NotFoundError):
            tenancies.update(restricted, existing.id, rent_amount="1")
        with pytest.raises(NotFoundError):
            tenancies.delete(restricted, existing.id)

        assert tenancies.get(admin, existing.id).rent_amount == Decimal("9000.00")
