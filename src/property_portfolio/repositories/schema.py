"""DDL shared by ``SQLiteDatabase.initialize`` and the Alembic baseline migration."""

TABLES: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS organizations (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS companies (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        cvr_number TEXT,
        organization_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS company_relations (
        id TEXT PRIMARY KEY,
        parent_company_id TEXT NOT NULL,
        child_company_id TEXT NOT NULL,
        ownership_percentage TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (parent_company_id) REFERENCES companies(id) ON DELETE CASCADE,
        FOREIGN KEY (child_company_id) REFERENCES companies(id) ON DELETE CASCADE,
        CHECK (parent_company_id <> child_company_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT,
        organization_id TEXT NOT NULL,
        role TEXT NOT NULL,
        assigned_company_id TEXT,
        dashboard_view_mode TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE,
        FOREIGN KEY (assigned_company_id) REFERENCES companies(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        token_hash TEXT NOT NULL UNIQUE,
        expires_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invitations (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL,
        token TEXT NOT NULL UNIQUE,
        organization_id TEXT NOT NULL,
        invited_by TEXT NOT NULL,
        role TEXT NOT NULL,
        assigned_company_id TEXT,
        expires_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE,
        FOREIGN KEY (invited_by) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY (assigned_company_id) REFERENCES companies(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS properties (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        address TEXT NOT NULL,
        postal_code TEXT NOT NULL,
        city TEXT NOT NULL,
        acquisition_price TEXT NOT NULL,
        acquisition_date TEXT,
        property_type TEXT NOT NULL,
        share_numerator INTEGER,
        share_denominator INTEGER,
        owner_company_id TEXT,
        organization_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (owner_company_id) REFERENCES companies(id) ON DELETE SET NULL,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS leases (
        id TEXT PRIMARY KEY,
        property_id TEXT NOT NULL,
        name TEXT NOT NULL,
        lease_type TEXT NOT NULL,
        registered_area INTEGER NOT NULL DEFAULT 0,
        total_area INTEGER NOT NULL DEFAULT 0,
        vat_registered INTEGER NOT NULL DEFAULT 0,
        max_rent_per_sqm TEXT,
        yield_requirement_pct TEXT,
        organization_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (property_id) REFERENCES properties(id) ON DELETE CASCADE,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tenants (
        id TEXT PRIMARY KEY,
        internal_number INTEGER NOT NULL,
        name TEXT NOT NULL,
        tenant_type TEXT NOT NULL,
        cvr_number TEXT,
        contact_person TEXT,
        email TEXT NOT NULL,
        invoice_email TEXT,
        phone TEXT NOT NULL,
        notes TEXT,
        organization_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE,
        UNIQUE (organization_id, internal_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lease_tenants (
        id TEXT PRIMARY KEY,
        lease_id TEXT NOT NULL,
        tenant_id TEXT NOT NULL,
        rent_amount TEXT NOT NULL,
        advance_water TEXT,
        advance_heating TEXT,
        advance_electricity TEXT,
        advance_other TEXT,
        period_start TEXT NOT NULL,
        period_end TEXT,
        deposit_type TEXT NOT NULL DEFAULT 'none',
        deposit_amount TEXT,
        prepaid_type TEXT NOT NULL DEFAULT 'none',
        prepaid_amount TEXT,
        regulation_type TEXT NOT NULL DEFAULT 'none',
        note TEXT,
        organization_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (lease_id) REFERENCES leases(id) ON DELETE CASCADE,
        FOREIGN KEY (tenant_id) REFERENCES tenants(id) ON DELETE CASCADE,
        FOREIGN KEY (organization_id) REFERENCES organizations(id) ON DELETE CASCADE
    )
    """,
]

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_companies_org ON companies(organization_id)",
    "CREATE INDEX IF NOT EXISTS idx_relations_parent ON company_relations(parent_company_id)",
    "CREATE INDEX IF NOT EXISTS idx_relations_child ON company_relations(child_company_id)",
    "CREATE INDEX IF NOT EXISTS idx_users_org ON users(organization_id)",
    "CREATE INDEX IF NOT EXISTS idx_properties_org ON properties(organization_id)",
    "CREATE INDEX IF NOT EXISTS idx_properties_owner ON properties(owner_company_id)",
    "CREATE INDEX IF NOT EXISTS idx_leases_property ON leases(property_id)",
    "CREATE INDEX IF NOT EXISTS idx_tenants_org ON tenants(organization_id)",
    "CREATE INDEX IF NOT EXISTS idx_lease_tenants_lease ON lease_tenants(lease_id)",
]

# Tables in dependency order, children last; used for downgrades.
TABLE_NAMES: list[str] = [
    "organizations",
    "companies",
    "company_relations",
    "users",
    "sessions",
    "invitations",
    "properties",
    "leases",
    "tenants",
    "lease_tenants",
]


def all_statements() -> list[str]:
    return [stmt.strip() for stmt in TABLES + INDEXES]
