"""Domain models for users, sessions and invitations.

Roles are deliberately coarse: ``admin`` and ``user`` may write, ``broker``
reads the whole organization but never sees tenant personal data.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from uuid import UUID, uuid4

from property_portfolio.domain._common import _utc_now
from property_portfolio.exceptions import MissingFieldsError


class UserRole(str, Enum):
    ADMIN = "admin"  # Full access, manages users
    USER = "user"  # Reads what its assigned company reaches, may write
    BROKER = "broker"  # Read-only, anonymized tenants


class DashboardViewMode(str, Enum):
    TOTAL = "total"
    WEIGHTED = "weighted"


WRITE_ROLES = frozenset({UserRole.ADMIN, UserRole.USER})


def default_view_mode(role: UserRole) -> DashboardViewMode:
    if role == UserRole.USER:
        return DashboardViewMode.WEIGHTED
    return DashboardViewMode.TOTAL


@dataclass
class User:
    """A user account belonging to exactly one organization."""

    name: str
    email: str
    organization_id: UUID
    role: UserRole = UserRole.USER
    password_hash: str | None = None
    assigned_company_id: UUID | None = None
    dashboard_view_mode: DashboardViewMode | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        missing = [n for n in ("name", "email") if not getattr(self, n)]
        if missing:
            raise MissingFieldsError(*missing)
        self.email = self.email.strip().lower()
        self.role = UserRole(self.role)
        if self.dashboard_view_mode is None:
            self.dashboard_view_mode = default_view_mode(self.role)
        else:
            self.dashboard_view_mode = DashboardViewMode(self.dashboard_view_mode)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_broker(self) -> bool:
        return self.role == UserRole.BROKER

    @property
    def can_write(self) -> bool:
        return self.role in WRITE_ROLES

    @property
    def sees_whole_organization(self) -> bool:
        """Admins and brokers are not restricted by the ownership graph."""
        return self.role in (UserRole.ADMIN, UserRole.BROKER)


@dataclass
class Session:
    """A login session. Only a hash of the bearer token is stored."""

    user_id: UUID
    token_hash: str
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    @property
    def is_valid(self) -> bool:
        return self.expires_at > _utc_now()


@dataclass
class Invitation:
    """An invitation for a new user to join an organization."""

    email: str
    token: str
    organization_id: UUID
    invited_by: UUID
    role: UserRole = UserRole.USER
    assigned_company_id: UUID | None = None
    expires_at: datetime = field(
        default_factory=lambda: _utc_now() + timedelta(days=7)
    )
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not self.email:
            raise MissingFieldsError("email")
        self.email = self.email.strip().lower()
        self.role = UserRole(self.role)

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= _utc_now()


__all__ = [
    "DashboardViewMode",
    "Invitation",
    "Session",
    "User",
    "UserRole",
    "WRITE_ROLES",
    "default_view_mode",
]
