"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from property_portfolio.domain.companies import Company, CompanyRelation
from property_portfolio.domain.leases import (
    DepositType,
    Lease,
    LeaseTenant,
    LeaseType,
    RegulationType,
    Tenant,
    TenantType,
)
from property_portfolio.domain.organizations import Organization
from property_portfolio.domain.properties import Property, PropertyType
from property_portfolio.domain.users import (
    DashboardViewMode,
    Invitation,
    Session,
    User,
    UserRole,
)
from property_portfolio.repositories.interfaces import (
    CompanyRelationRepository,
    CompanyRepository,
    InvitationRepository,
    LeaseRepository,
    LeaseTenantRepository,
    OrganizationRepository,
    PropertyRepository,
    SessionRepository,
    TenantRepository,
    UserRepository,
)
from property_portfolio.repositories.schema import all_statements


def _str_or_none(value: object | None) -> str | None:
    return str(value) if value is not None else None


def _uuid_or_none(value: str | None) -> UUID | None:
    return UUID(value) if value else None


def _date_or_none(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _decimal_or_none(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


class SQLiteDatabase:
    """SQLite database connection manager.

    The connection runs in autocommit mode; multi-statement work goes through
    :meth:`transaction`, which takes a write lock up front (``BEGIN
    IMMEDIATE``) so that a check followed by a write cannot interleave with
    another writer.
    """

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self._path,
                check_same_thread=self._check_same_thread,
                isolation_level=None,
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements atomically.

        Re-entrant: nested blocks join the outermost transaction, which
        commits on clean exit and rolls back if an exception escapes it.
        """
        conn = self.get_connection()
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                conn.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield conn
            except BaseException:
                self._depth -= 1
                if outermost:
                    conn.rollback()
                raise
            self._depth -= 1
            if outermost:
                conn.commit()

    def initialize(self) -> None:
        """Create all database tables."""
        with self.transaction() as conn:
            for statement in all_statements():
                conn.execute(statement)

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class SQLiteOrganizationRepository(OrganizationRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, organization: Organization) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "INSERT INTO organizations (id, name, created_at) VALUES (?, ?, ?)",
                (
                    str(organization.id),
                    organization.name,
                    organization.created_at.isoformat(),
                ),
            )

    def get(self, organization_id: UUID) -> Organization | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM organizations WHERE id = ?", (str(organization_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_organization(row)

    def list_all(self) -> Iterable[Organization]:
        conn = self._db.get_connection()
        rows = conn.execute("SELECT * FROM organizations ORDER BY created_at").fetchall()
        return [self._row_to_organization(row) for row in rows]

    def _row_to_organization(self, row: sqlite3.Row) -> Organization:
        return Organization(
            name=row["name"],
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteCompanyRepository(CompanyRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, company: Company) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO companies (id, name, cvr_number, organization_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(company.id),
                    company.name,
                    company.cvr_number,
                    str(company.organization_id),
                    company.created_at.isoformat(),
                ),
            )

    def get(self, company_id: UUID, organization_id: UUID) -> Company | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM companies WHERE id = ? AND organization_id = ?",
            (str(company_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_company(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[Company]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM companies WHERE organization_id = ? ORDER BY created_at DESC",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_company(row) for row in rows]

    def update(self, company: Company) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE companies SET name = ?, cvr_number = ? WHERE id = ? AND organization_id = ?",
                (
                    company.name,
                    company.cvr_number,
                    str(company.id),
                    str(company.organization_id),
                ),
            )

    def delete(self, company_id: UUID, organization_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM companies WHERE id = ? AND organization_id = ?",
                (str(company_id), str(organization_id)),
            )

    def _row_to_company(self, row: sqlite3.Row) -> Company:
        return Company(
            name=row["name"],
            organization_id=UUID(row["organization_id"]),
            cvr_number=row["cvr_number"],
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteCompanyRelationRepository(CompanyRelationRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, relation: CompanyRelation) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO company_relations (
                    id, parent_company_id, child_company_id, ownership_percentage, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(relation.id),
                    str(relation.parent_company_id),
                    str(relation.child_company_id),
                    str(relation.ownership_percentage),
                    relation.created_at.isoformat(),
                ),
            )

    def get(self, relation_id: UUID, organization_id: UUID) -> CompanyRelation | None:
        conn = self._db.get_connection()
        row = conn.execute(
            """
            SELECT r.* FROM company_relations r
            JOIN companies c ON c.id = r.child_company_id
            WHERE r.id = ? AND c.organization_id = ?
            """,
            (str(relation_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_relation(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[CompanyRelation]:
        conn = self._db.get_connection()
        rows = conn.execute(
            """
            SELECT r.* FROM company_relations r
            JOIN companies c ON c.id = r.child_company_id
            WHERE c.organization_id = ?
            ORDER BY r.created_at
            """,
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_relation(row) for row in rows]

    def list_by_parent(self, parent_company_id: UUID) -> Iterable[CompanyRelation]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM company_relations WHERE parent_company_id = ? ORDER BY created_at",
            (str(parent_company_id),),
        ).fetchall()
        return [self._row_to_relation(row) for row in rows]

    def list_by_child(self, child_company_id: UUID) -> Iterable[CompanyRelation]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM company_relations WHERE child_company_id = ? ORDER BY created_at",
            (str(child_company_id),),
        ).fetchall()
        return [self._row_to_relation(row) for row in rows]

    def update(self, relation: CompanyRelation) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE company_relations SET ownership_percentage = ? WHERE id = ?",
                (str(relation.ownership_percentage), str(relation.id)),
            )

    def delete(self, relation_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM company_relations WHERE id = ?", (str(relation_id),)
            )

    def _row_to_relation(self, row: sqlite3.Row) -> CompanyRelation:
        return CompanyRelation(
            parent_company_id=UUID(row["parent_company_id"]),
            child_company_id=UUID(row["child_company_id"]),
            ownership_percentage=Decimal(row["ownership_percentage"]),
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteUserRepository(UserRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, user: User) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO users (
                    id, name, email, password_hash, organization_id, role,
                    assigned_company_id, dashboard_view_mode, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(user.id),
                    user.name,
                    user.email,
                    user.password_hash,
                    str(user.organization_id),
                    user.role.value,
                    _str_or_none(user.assigned_company_id),
                    user.dashboard_view_mode.value,
                    user.created_at.isoformat(),
                ),
            )

    def get(self, user_id: UUID) -> User | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM users WHERE id = ?", (str(user_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_by_email(self, email: str) -> User | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[User]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM users WHERE organization_id = ? ORDER BY created_at",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_user(row) for row in rows]

    def update(self, user: User) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE users SET
                    name = ?, email = ?, password_hash = ?, role = ?,
                    assigned_company_id = ?, dashboard_view_mode = ?
                WHERE id = ?
                """,
                (
                    user.name,
                    user.email,
                    user.password_hash,
                    user.role.value,
                    _str_or_none(user.assigned_company_id),
                    user.dashboard_view_mode.value,
                    str(user.id),
                ),
            )

    def delete(self, user_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM users WHERE id = ?", (str(user_id),))

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            name=row["name"],
            email=row["email"],
            organization_id=UUID(row["organization_id"]),
            role=UserRole(row["role"]),
            password_hash=row["password_hash"],
            assigned_company_id=_uuid_or_none(row["assigned_company_id"]),
            dashboard_view_mode=DashboardViewMode(row["dashboard_view_mode"]),
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteSessionRepository(SessionRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, session: Session) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO sessions (id, user_id, token_hash, expires_at, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(session.id),
                    str(session.user_id),
                    session.token_hash,
                    session.expires_at.isoformat(),
                    session.created_at.isoformat(),
                ),
            )

    def get_by_token_hash(self, token_hash: str) -> Session | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM sessions WHERE token_hash = ?", (token_hash,)
        ).fetchone()
        if row is None:
            return None
        return Session(
            user_id=UUID(row["user_id"]),
            token_hash=row["token_hash"],
            expires_at=datetime.fromisoformat(row["expires_at"]),
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def delete(self, session_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM sessions WHERE id = ?", (str(session_id),))

    def delete_for_user(self, user_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM sessions WHERE user_id = ?", (str(user_id),))


class SQLiteInvitationRepository(InvitationRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, invitation: Invitation) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO invitations (
                    id, email, token, organization_id, invited_by, role,
                    assigned_company_id, expires_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(invitation.id),
                    invitation.email,
                    invitation.token,
                    str(invitation.organization_id),
                    str(invitation.invited_by),
                    invitation.role.value,
                    _str_or_none(invitation.assigned_company_id),
                    invitation.expires_at.isoformat(),
                    invitation.created_at.isoformat(),
                ),
            )

    def get(self, invitation_id: UUID, organization_id: UUID) -> Invitation | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM invitations WHERE id = ? AND organization_id = ?",
            (str(invitation_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_invitation(row)

    def get_by_token(self, token: str) -> Invitation | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM invitations WHERE token = ?", (token,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_invitation(row)

    def get_by_email(self, email: str) -> Invitation | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM invitations WHERE email = ?", (email.strip().lower(),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_invitation(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[Invitation]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM invitations WHERE organization_id = ? ORDER BY created_at DESC",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_invitation(row) for row in rows]

    def delete(self, invitation_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM invitations WHERE id = ?", (str(invitation_id),)
            )

    def _row_to_invitation(self, row: sqlite3.Row) -> Invitation:
        return Invitation(
            email=row["email"],
            token=row["token"],
            organization_id=UUID(row["organization_id"]),
            invited_by=UUID(row["invited_by"]),
            role=UserRole(row["role"]),
            assigned_company_id=_uuid_or_none(row["assigned_company_id"]),
            expires_at=datetime.fromisoformat(row["expires_at"]),
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLitePropertyRepository(PropertyRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, prop: Property) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO properties (
                    id, name, address, postal_code, city, acquisition_price,
                    acquisition_date, property_type, share_numerator,
                    share_denominator, owner_company_id, organization_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(prop.id),
                    prop.name,
                    prop.address,
                    prop.postal_code,
                    prop.city,
                    str(prop.acquisition_price),
                    prop.acquisition_date.isoformat() if prop.acquisition_date else None,
                    prop.property_type.value,
                    prop.share_numerator,
                    prop.share_denominator,
                    _str_or_none(prop.owner_company_id),
                    str(prop.organization_id),
                    prop.created_at.isoformat(),
                ),
            )

    def get(self, property_id: UUID, organization_id: UUID) -> Property | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM properties WHERE id = ? AND organization_id = ?",
            (str(property_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_property(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[Property]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM properties WHERE organization_id = ? ORDER BY created_at DESC",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_property(row) for row in rows]

    def update(self, prop: Property) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE properties SET
                    name = ?, address = ?, postal_code = ?, city = ?,
                    acquisition_price = ?, acquisition_date = ?, property_type = ?,
                    share_numerator = ?, share_denominator = ?, owner_company_id = ?
                WHERE id = ? AND organization_id = ?
                """,
                (
                    prop.name,
                    prop.address,
                    prop.postal_code,
                    prop.city,
                    str(prop.acquisition_price),
                    prop.acquisition_date.isoformat() if prop.acquisition_date else None,
                    prop.property_type.value,
                    prop.share_numerator,
                    prop.share_denominator,
                    _str_or_none(prop.owner_company_id),
                    str(prop.id),
                    str(prop.organization_id),
                ),
            )

    def delete(self, property_id: UUID, organization_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM properties WHERE id = ? AND organization_id = ?",
                (str(property_id), str(organization_id)),
            )

    def _row_to_property(self, row: sqlite3.Row) -> Property:
        return Property(
            name=row["name"],
            address=row["address"],
            postal_code=row["postal_code"],
            city=row["city"],
            acquisition_price=Decimal(row["acquisition_price"]),
            organization_id=UUID(row["organization_id"]),
            property_type=PropertyType(row["property_type"]),
            acquisition_date=_date_or_none(row["acquisition_date"]),
            share_numerator=row["share_numerator"],
            share_denominator=row["share_denominator"],
            owner_company_id=_uuid_or_none(row["owner_company_id"]),
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteLeaseRepository(LeaseRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, lease: Lease) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO leases (
                    id, property_id, name, lease_type, registered_area, total_area,
                    vat_registered, max_rent_per_sqm, yield_requirement_pct,
                    organization_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(lease.id),
                    str(lease.property_id),
                    lease.name,
                    lease.lease_type.value,
                    lease.registered_area,
                    lease.total_area,
                    1 if lease.vat_registered else 0,
                    _str_or_none(lease.max_rent_per_sqm),
                    _str_or_none(lease.yield_requirement_pct),
                    str(lease.organization_id),
                    lease.created_at.isoformat(),
                ),
            )

    def get(self, lease_id: UUID, organization_id: UUID) -> Lease | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM leases WHERE id = ? AND organization_id = ?",
            (str(lease_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_lease(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[Lease]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM leases WHERE organization_id = ? ORDER BY created_at DESC",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_lease(row) for row in rows]

    def list_by_property(self, property_id: UUID) -> Iterable[Lease]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM leases WHERE property_id = ? ORDER BY created_at DESC",
            (str(property_id),),
        ).fetchall()
        return [self._row_to_lease(row) for row in rows]

    def update(self, lease: Lease) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE leases SET
                    property_id = ?, name = ?, lease_type = ?, registered_area = ?,
                    total_area = ?, vat_registered = ?, max_rent_per_sqm = ?,
                    yield_requirement_pct = ?
                WHERE id = ? AND organization_id = ?
                """,
                (
                    str(lease.property_id),
                    lease.name,
                    lease.lease_type.value,
                    lease.registered_area,
                    lease.total_area,
                    1 if lease.vat_registered else 0,
                    _str_or_none(lease.max_rent_per_sqm),
                    _str_or_none(lease.yield_requirement_pct),
                    str(lease.id),
                    str(lease.organization_id),
                ),
            )

    def delete(self, lease_id: UUID, organization_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM leases WHERE id = ? AND organization_id = ?",
                (str(lease_id), str(organization_id)),
            )

    def _row_to_lease(self, row: sqlite3.Row) -> Lease:
        return Lease(
            property_id=UUID(row["property_id"]),
            name=row["name"],
            organization_id=UUID(row["organization_id"]),
            lease_type=LeaseType(row["lease_type"]),
            registered_area=row["registered_area"],
            total_area=row["total_area"],
            vat_registered=bool(row["vat_registered"]),
            max_rent_per_sqm=_decimal_or_none(row["max_rent_per_sqm"]),
            yield_requirement_pct=_decimal_or_none(row["yield_requirement_pct"]),
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteTenantRepository(TenantRepository):
    FIRST_INTERNAL_NUMBER = 1001

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, tenant: Tenant) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO tenants (
                    id, internal_number, name, tenant_type, cvr_number, contact_person,
                    email, invoice_email, phone, notes, organization_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(tenant.id),
                    tenant.internal_number,
                    tenant.name,
                    tenant.tenant_type.value,
                    tenant.cvr_number,
                    tenant.contact_person,
                    tenant.email,
                    tenant.invoice_email,
                    tenant.phone,
                    tenant.notes,
                    str(tenant.organization_id),
                    tenant.created_at.isoformat(),
                ),
            )

    def get(self, tenant_id: UUID, organization_id: UUID) -> Tenant | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM tenants WHERE id = ? AND organization_id = ?",
            (str(tenant_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_tenant(row)

    def list_by_organization(self, organization_id: UUID) -> Iterable[Tenant]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM tenants WHERE organization_id = ? ORDER BY internal_number",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_tenant(row) for row in rows]

    def next_internal_number(self, organization_id: UUID) -> int:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT MAX(internal_number) AS highest FROM tenants WHERE organization_id = ?",
            (str(organization_id),),
        ).fetchone()
        if row is None or row["highest"] is None:
            return self.FIRST_INTERNAL_NUMBER
        return int(row["highest"]) + 1

    def update(self, tenant: Tenant) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE tenants SET
                    name = ?, tenant_type = ?, cvr_number = ?, contact_person = ?,
                    email = ?, invoice_email = ?, phone = ?, notes = ?
                WHERE id = ? AND organization_id = ?
                """,
                (
                    tenant.name,
                    tenant.tenant_type.value,
                    tenant.cvr_number,
                    tenant.contact_person,
                    tenant.email,
                    tenant.invoice_email,
                    tenant.phone,
                    tenant.notes,
                    str(tenant.id),
                    str(tenant.organization_id),
                ),
            )

    def delete(self, tenant_id: UUID, organization_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM tenants WHERE id = ? AND organization_id = ?",
                (str(tenant_id), str(organization_id)),
            )

    def _row_to_tenant(self, row: sqlite3.Row) -> Tenant:
        return Tenant(
            name=row["name"],
            tenant_type=TenantType(row["tenant_type"]),
            email=row["email"],
            phone=row["phone"],
            organization_id=UUID(row["organization_id"]),
            internal_number=row["internal_number"],
            cvr_number=row["cvr_number"],
            contact_person=row["contact_person"],
            invoice_email=row["invoice_email"],
            notes=row["notes"],
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteLeaseTenantRepository(LeaseTenantRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, lease_tenant: LeaseTenant) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO lease_tenants (
                    id, lease_id, tenant_id, rent_amount, advance_water, advance_heating,
                    advance_electricity, advance_other, period_start, period_end,
                    deposit_type, deposit_amount, prepaid_type, prepaid_amount,
                    regulation_type, note, organization_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(lease_tenant.id),
                    str(lease_tenant.lease_id),
                    str(lease_tenant.tenant_id),
                    *self._values(lease_tenant),
                    str(lease_tenant.organization_id),
                    lease_tenant.created_at.isoformat(),
                ),
            )

    def get(self, lease_tenant_id: UUID, organization_id: UUID) -> LeaseTenant | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM lease_tenants WHERE id = ? AND organization_id = ?",
            (str(lease_tenant_id), str(organization_id)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_lease_tenant(row)

    def list_by_lease(self, lease_id: UUID) -> Iterable[LeaseTenant]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM lease_tenants WHERE lease_id = ? ORDER BY period_start DESC",
            (str(lease_id),),
        ).fetchall()
        return [self._row_to_lease_tenant(row) for row in rows]

    def list_by_organization(self, organization_id: UUID) -> Iterable[LeaseTenant]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM lease_tenants WHERE organization_id = ? ORDER BY period_start DESC",
            (str(organization_id),),
        ).fetchall()
        return [self._row_to_lease_tenant(row) for row in rows]

    def update(self, lease_tenant: LeaseTenant) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE lease_tenants SET
                    rent_amount = ?, advance_water = ?, advance_heating = ?,
                    advance_electricity = ?, advance_other = ?, period_start = ?,
                    period_end = ?, deposit_type = ?, deposit_amount = ?,
                    prepaid_type = ?, prepaid_amount = ?, regulation_type = ?, note = ?,
                    tenant_id = ?
                WHERE id = ? AND organization_id = ?
                """,
                (
                    *self._values(lease_tenant),
                    str(lease_tenant.tenant_id),
                    str(lease_tenant.id),
                    str(lease_tenant.organization_id),
                ),
            )

    def delete(self, lease_tenant_id: UUID, organization_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM lease_tenants WHERE id = ? AND organization_id = ?",
                (str(lease_tenant_id), str(organization_id)),
            )

    @staticmethod
    def _values(lt: LeaseTenant) -> tuple[object, ...]:
        """Mutable columns, in the order shared by INSERT and UPDATE."""
        return (
            str(lt.rent_amount),
            _str_or_none(lt.advance_water),
            _str_or_none(lt.advance_heating),
            _str_or_none(lt.advance_electricity),
            _str_or_none(lt.advance_other),
            lt.period_start.isoformat(),
            lt.period_end.isoformat() if lt.period_end else None,
            lt.deposit_type.value,
            _str_or_none(lt.deposit_amount),
            lt.prepaid_type.value,
            _str_or_none(lt.prepaid_amount),
            lt.regulation_type.value,
            lt.note,
        )

    def _row_to_lease_tenant(self, row: sqlite3.Row) -> LeaseTenant:
        return LeaseTenant(
            lease_id=UUID(row["lease_id"]),
            tenant_id=UUID(row["tenant_id"]),
            rent_amount=Decimal(row["rent_amount"]),
            period_start=date.fromisoformat(row["period_start"]),
            organization_id=UUID(row["organization_id"]),
            period_end=_date_or_none(row["period_end"]),
            advance_water=_decimal_or_none(row["advance_water"]),
            advance_heating=_decimal_or_none(row["advance_heating"]),
            advance_electricity=_decimal_or_none(row["advance_electricity"]),
            advance_other=_decimal_or_none(row["advance_other"]),
            deposit_type=DepositType(row["deposit_type"]),
            deposit_amount=_decimal_or_none(row["deposit_amount"]),
            prepaid_type=DepositType(row["prepaid_type"]),
            prepaid_amount=_decimal_or_none(row["prepaid_amount"]),
            regulation_type=RegulationType(row["regulation_type"]),
            note=row["note"],
            id=UUID(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
