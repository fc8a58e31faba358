"""Tests for SQLite repositories and the transaction helper."""

from datetime import date
from decimal import Decimal

import pytest

from property_portfolio.domain.companies import Company, CompanyRelation
from property_portfolio.domain.leases import Lease, LeaseTenant, Tenant, TenantType
from property_portfolio.domain.organizations import Organization
from property_portfolio.domain.properties import Property, PropertyType
from property_portfolio.repositories.schema import TABLE_NAMES
from property_portfolio.repositories.sqlite import SQLiteDatabase


class TestSQLiteDatabase:
    def test_initialize_creates_tables(self, db: SQLiteDatabase) -> None:
        rows = db.get_connection().execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
        assert set(TABLE_NAMES) <= {row["name"] for row in rows}

    def test_initialize_is_idempotent(self, db: SQLiteDatabase) -> None:
        db.initialize()

    def test_transaction_rolls_back_on_error(self, db: SQLiteDatabase, services) -> None:
        with pytest.raises(RuntimeError):
            with db.transaction():
                services.organizations.add(Organization(name="Midlertidig"))
                raise RuntimeError("boom")

        assert list(services.organizations.list_all()) == []

    def test_nested_transactions_join_outer(self, db: SQLiteDatabase, services) -> None:
        with pytest.raises(RuntimeError):
            with db.transaction():
                services.organizations.add(Organization(name="Ydre"))
                with db.transaction():
                    services.organizations.add(Organization(name="Indre"))
                raise RuntimeError("boom")

        assert list(services.organizations.list_all()) == []

    def test_commit_on_clean_exit(self, db: SQLiteDatabase, services) -> None:
        with db.transaction():
            services.organizations.add(Organization(name="Varig"))

        assert [o.name for o in services.organizations.list_all()] == ["Varig"]


class TestCompanyRepositories:
    def test_round_trip(self, services, organization) -> None:
        company = Company(name="Alfa ApS", organization_id=organization.id, cvr_number="12345678")
        services.companies.add(company)

        assert services.companies.get(company.id, organization.id) == company

    def test_get_scoped_by_organization(self, services, organization, other_organization) -> None:
        company = Company(name="Alfa ApS", organization_id=organization.id)
        services.companies.add(company)

        assert services.companies.get(company.id, other_organization.id) is None

    def test_self_edge_rejected_by_database(self, db, services, make_company) -> None:
        import sqlite3

        a = make_company("A")
        with pytest.raises(sqlite3.IntegrityError):
            db.get_connection().execute(
                "INSERT INTO company_relations VALUES (?, ?, ?, ?, ?)",
                ("x", str(a.id), str(a.id), "10", "2024-01-01T00:00:00+00:00"),
            )

    def test_deleting_parent_cascades_relations(self, services, organization, make_company) -> None:
        a, b = make_company("A"), make_company("B")
        services.relations.add(
            CompanyRelation(parent_company_id=a.id, child_company_id=b.id, ownership_percentage=Decimal("40"))
        )

        services.companies.delete(a.id, organization.id)

        assert list(services.relations.list_by_child(b.id)) == []

    def test_deleting_owner_leaves_property_ownerless(
        self, services, organization, make_company, make_property
    ) -> None:
        owner = make_company("Ejer")
        prop = make_property("Havnehuset", owner=owner)

        services.companies.delete(owner.id, organization.id)

        assert services.properties.get(prop.id, organization.id).owner_company_id is None


class TestPropertyRepository:
    def test_round_trip_keeps_decimal_and_date(self, services, organization) -> None:
        prop = Property(
            name="Lejlighed",
            address="Nørregade 7, 2. tv",
            postal_code="1165",
            city="København K",
            acquisition_price=Decimal("2450000.50"),
            organization_id=organization.id,
            property_type=PropertyType.EJERLEJLIGHED,
            acquisition_date=date(2021, 3, 1),
            share_numerator=125,
            share_denominator=10000,
        )
        services.properties.add(prop)

        loaded = services.properties.get(prop.id, organization.id)

        assert loaded == prop

    def test_deleting_property_cascades_leases_and_tenancies(
        self, services, organization, make_property
    ) -> None:
        prop = make_property("Havnehuset")
        lease = Lease(property_id=prop.id, name="St. th", organization_id=organization.id)
        services.leases.add(lease)
        tenant = Tenant(
            name="Lejer", tenant_type=TenantType.PRIVAT, email="l@example.dk",
            phone="11223344", organization_id=organization.id, internal_number=1001,
        )
        services.tenants.add(tenant)
        services.lease_tenants.add(
            LeaseTenant(
                lease_id=lease.id, tenant_id=tenant.id, rent_amount=Decimal("7000"),
                period_start=date(2024, 1, 1), organization_id=organization.id,
            )
        )

        services.properties.delete(prop.id, organization.id)

        assert services.leases.get(lease.id, organization.id) is None
        assert list(services.lease_tenants.list_by_organization(organization.id)) == []
        assert services.tenants.get(tenant.id, organization.id) is not None


class TestTenantRepository:
    def test_internal_numbers_start_at_1001_per_organization(
        self, services, organization, other_organization
    ) -> None:
        first = services.tenant_service.create(
            organization.id, name="En", tenant_type="privat", email="en@example.dk", phone="1"
        )
        second = services.tenant_service.create(
            organization.id, name="To", tenant_type="erhverv", email="to@example.dk", phone="2"
        )
        elsewhere = services.tenant_service.create(
            other_organization.id, name="Tre", tenant_type="privat", email="tre@example.dk", phone="3"
        )

        assert (first.internal_number, second.internal_number) == (1001, 1002)
        assert elsewhere.internal_number == 1001
        assert [t.name for t in services.tenant_service.list(organization.id)] == ["En", "To"]
