"""Authentication, sessions, and user administration.

Provides:
- Organization setup with its first administrator
- Password hashing (PBKDF2) and login
- Opaque session tokens, stored only as an HMAC digest
- Profile, password and dashboard-preference changes
- User administration and invitations
"""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from property_portfolio.config import Settings, get_settings
from property_portfolio.domain.organizations import Organization
from property_portfolio.domain.users import (
    DashboardViewMode,
    Invitation,
    Session,
    User,
    UserRole,
)
from property_portfolio.exceptions import (
    AdminRequiredError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    MissingFieldsError,
    NotFoundError,
    ValidationError,
    WriteAccessDeniedError,
)
from property_portfolio.logging_config import get_logger
from property_portfolio.repositories.interfaces import (
    CompanyRepository,
    InvitationRepository,
    OrganizationRepository,
    SessionRepository,
    UserRepository,
)
from property_portfolio.repositories.sqlite import SQLiteDatabase

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


class PasswordHasher:
    """Secure password hashing using PBKDF2."""

    ALGORITHM = "pbkdf2_sha256"
    ITERATIONS = 600_000  # OWASP 2023 recommendation
    SALT_LENGTH = 32

    def __init__(self, iterations: int | None = None) -> None:
        self.iterations = iterations or self.ITERATIONS

    def hash(self, password: str) -> str:
        """Hash a password; format is ``algorithm$iterations$salt$hash``."""
        salt = secrets.token_hex(self.SALT_LENGTH)
        hash_bytes = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            self.iterations,
        )
        return f"{self.ALGORITHM}${self.iterations}${salt}${hash_bytes.hex()}"

    def verify(self, password: str, hash_string: str | None) -> bool:
        if not hash_string:
            return False
        try:
            algorithm, iterations, salt, stored_hash = hash_string.split("$")
            if algorithm != self.ALGORITHM:
                return False
            hash_bytes = hashlib.pbkdf2_hmac(
                "sha256",
                password.encode("utf-8"),
                salt.encode("utf-8"),
                int(iterations),
            )
            return secrets.compare_digest(hash_bytes.hex(), stored_hash)
        except (ValueError, AttributeError):
            return False


def _validate_password(password: str | None) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Adgangskoden skal være mindst {MIN_PASSWORD_LENGTH} tegn"
        )
    return password


def require_write_access(user: User) -> None:
    if not user.can_write:
        raise WriteAccessDeniedError()


def require_admin(user: User, message: str | None = None) -> None:
    if not user.is_admin:
        raise AdminRequiredError(message) if message else AdminRequiredError()


class AuthService:
    def __init__(
        self,
        database: SQLiteDatabase,
        organization_repo: OrganizationRepository,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        settings: Settings | None = None,
    ) -> None:
        self._db = database
        self._organization_repo = organization_repo
        self._user_repo = user_repo
        self._session_repo = session_repo
        self._settings = settings or get_settings()
        self.hasher = PasswordHasher(self._settings.password_hash_iterations)

    def setup_organization(
        self, organization_name: str, name: str, email: str, password: str
    ) -> User:
        """Create a new organization and its first administrator."""
        _validate_password(password)
        with self._db.transaction():
            if self._user_repo.get_by_email(email) is not None:
                raise ConflictError("En bruger med denne e-mail eksisterer allerede")
            organization = Organization(name=organization_name)
            self._organization_repo.add(organization)
            user = User(
                name=name,
                email=email,
                organization_id=organization.id,
                role=UserRole.ADMIN,
                password_hash=self.hasher.hash(password),
            )
            self._user_repo.add(user)
        logger.info(
            "organization_created",
            organization_id=str(organization.id),
            admin_user_id=str(user.id),
        )
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._user_repo.get_by_email(email)
        if user is None or not self.hasher.verify(password, user.password_hash):
            logger.info("login_failed", email=email.strip().lower())
            raise AuthenticationError("Ugyldig e-mail eller adgangskode")
        logger.info("login_succeeded", user_id=str(user.id))
        return user

    def _token_hash(self, token: str) -> str:
        return hmac.new(
            self._settings.secret_key.encode("utf-8"),
            token.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def create_session(self, user: User) -> str:
        """Open a session and return the bearer token; only its digest is stored."""
        token = secrets.token_urlsafe(32)
        session = Session(
            user_id=user.id,
            token_hash=self._token_hash(token),
            expires_at=datetime.now(UTC)
            + timedelta(hours=self._settings.session_ttl_hours),
        )
        self._session_repo.add(session)
        logger.debug("session_created", user_id=str(user.id), session_id=str(session.id))
        return token

    def resolve_session(self, token: str | None) -> User:
        if not token:
            raise AuthenticationError()
        session = self._session_repo.get_by_token_hash(self._token_hash(token))
        if session is None:
            raise AuthenticationError()
        if not session.is_valid:
            self._session_repo.delete(session.id)
            raise AuthenticationError()
        user = self._user_repo.get(session.user_id)
        if user is None:
            raise AuthenticationError()
        return user

    def logout(self, token: str | None) -> None:
        if not token:
            return
        session = self._session_repo.get_by_token_hash(self._token_hash(token))
        if session is not None:
            self._session_repo.delete(session.id)
            logger.info("logout", user_id=str(session.user_id))

    def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> None:
        if not self.hasher.verify(current_password, user.password_hash):
            raise ValidationError("Nuværende adgangskode er forkert")
        user.password_hash = self.hasher.hash(_validate_password(new_password))
        self._user_repo.update(user)
        logger.info("password_changed", user_id=str(user.id))

    def update_profile(
        self, user: User, name: str | None = None, email: str | None = None
    ) -> User:
        if name is not None:
            if not name.strip():
                raise MissingFieldsError("name")
            user.name = name
        if email is not None:
            email = email.strip().lower()
            if not email:
                raise MissingFieldsError("email")
            existing = self._user_repo.get_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ConflictError("En bruger med denne e-mail eksisterer allerede")
            user.email = email
        self._user_repo.update(user)
        logger.info("profile_updated", user_id=str(user.id))
        return user

    def update_preferences(self, user: User, dashboard_view_mode: Any) -> User:
        try:
            user.dashboard_view_mode = DashboardViewMode(dashboard_view_mode)
        except ValueError as exc:
            raise ValidationError("Ugyldig visningsform") from exc
        self._user_repo.update(user)
        logger.info(
            "preferences_updated",
            user_id=str(user.id),
            dashboard_view_mode=user.dashboard_view_mode.value,
        )
        return user


class UserAdministrationService:
    """Organization-level user management and invitations."""

    def __init__(
        self,
        database: SQLiteDatabase,
        user_repo: UserRepository,
        invitation_repo: InvitationRepository,
        company_repo: CompanyRepository,
        settings: Settings | None = None,
    ) -> None:
        self._db = database
        self._user_repo = user_repo
        self._invitation_repo = invitation_repo
        self._company_repo = company_repo
        self._settings = settings or get_settings()
        self._hasher = PasswordHasher(self._settings.password_hash_iterations)

    def list_users(self, actor: User) -> list[User]:
        if actor.role not in (UserRole.ADMIN, UserRole.BROKER):
            raise AuthorizationError("Kun administratorer og mæglere kan se brugere")
        return list(self._user_repo.list_by_organization(actor.organization_id))

    def _require_company(self, organization_id: UUID, company_id: UUID | None) -> None:
        if company_id is not None and self._company_repo.get(company_id, organization_id) is None:
            raise NotFoundError("Selskab", company_id)

    def _admin_count(self, organization_id: UUID) -> int:
        return sum(
            1
            for user in self._user_repo.list_by_organization(organization_id)
            if user.role == UserRole.ADMIN
        )

    def update_user(
        self,
        actor: User,
        user_id: UUID,
        role: Any = None,
        assigned_company_id: UUID | None = None,
    ) -> User:
        require_admin(actor, "Kun administratorer kan redigere brugere")
        target = self._user_repo.get(user_id)
        if target is None or target.organization_id != actor.organization_id:
            raise NotFoundError("Bruger", user_id)

        new_role = UserRole(role) if role is not None else target.role
        if (
            target.id == actor.id
            and new_role != UserRole.ADMIN
            and self._admin_count(actor.organization_id) == 1
        ):
            raise ValidationError(
                "Du kan ikke ændre din egen rolle når du er den eneste administrator"
            )
        self._require_company(actor.organization_id, assigned_company_id)

        target.role = new_role
        target.assigned_company_id = assigned_company_id
        self._user_repo.update(target)
        logger.info(
            "user_updated",
            user_id=str(target.id),
            role=target.role.value,
            assigned_company_id=str(assigned_company_id) if assigned_company_id else None,
        )
        return target

    def delete_user(self, actor: User, user_id: UUID) -> None:
        require_admin(actor, "Kun administratorer kan slette brugere")
        target = self._user_repo.get(user_id)
        if target is None or target.organization_id != actor.organization_id:
            raise NotFoundError("Bruger", user_id)
        if target.id == actor.id and self._admin_count(actor.organization_id) == 1:
            raise ValidationError(
                "Du kan ikke slette dig selv når du er den eneste administrator"
            )
        self._user_repo.delete(user_id)
        logger.info("user_deleted", user_id=str(user_id))

    def create_invitation(
        self,
        actor: User,
        email: str,
        role: Any = UserRole.USER,
        assigned_company_id: UUID | None = None,
    ) -> Invitation:
        require_write_access(actor)
        if not email:
            raise MissingFieldsError("email")
        if self._user_repo.get_by_email(email) is not None:
            raise ConflictError("En bruger med denne e-mail eksisterer allerede")
        if self._invitation_repo.get_by_email(email) is not None:
            raise ConflictError("Der er allerede sendt en invitation til denne e-mail")
        self._require_company(actor.organization_id, assigned_company_id)

        invitation = Invitation(
            email=email,
            token=secrets.token_urlsafe(24),
            organization_id=actor.organization_id,
            invited_by=actor.id,
            role=role,
            assigned_company_id=assigned_company_id,
            expires_at=datetime.now(UTC)
            + timedelta(days=self._settings.invitation_ttl_days),
        )
        self._invitation_repo.add(invitation)
        logger.info(
            "invitation_created",
            invitation_id=str(invitation.id),
            role=invitation.role.value,
        )
        return invitation

    def list_invitations(self, actor: User) -> list[Invitation]:
        if actor.role not in (UserRole.ADMIN, UserRole.BROKER):
            raise AuthorizationError(
                "Kun administratorer og mæglere kan se invitationer"
            )
        return list(self._invitation_repo.list_by_organization(actor.organization_id))

    def delete_invitation(self, actor: User, invitation_id: UUID) -> None:
        require_admin(actor, "Kun administratorer kan slette invitationer")
        if self._invitation_repo.get(invitation_id, actor.organization_id) is None:
            raise NotFoundError("Invitation", invitation_id)
        self._invitation_repo.delete(invitation_id)
        logger.info("invitation_deleted", invitation_id=str(invitation_id))

    def verify_invitation(self, token: str) -> Invitation:
        invitation = self._invitation_repo.get_by_token(token)
        if invitation is None or invitation.is_expired:
            raise NotFoundError("Invitation")
        return invitation

    def accept_invitation(self, token: str, name: str, password: str) -> User:
        if not token or not name or not password:
            raise MissingFieldsError(
                *[n for n, v in (("token", token), ("name", name), ("password", password)) if not v]
            )
        _validate_password(password)
        with self._db.transaction():
            invitation = self.verify_invitation(token)
            if self._user_repo.get_by_email(invitation.email) is not None:
                raise ConflictError("En bruger med denne e-mail eksisterer allerede")
            user = User(
                name=name,
                email=invitation.email,
                organization_id=invitation.organization_id,
                role=invitation.role,
                assigned_company_id=invitation.assigned_company_id,
                password_hash=self._hasher.hash(password),
            )
            self._user_repo.add(user)
            self._invitation_repo.delete(invitation.id)
        logger.info(
            "invitation_accepted",
            invitation_id=str(invitation.id),
            user_id=str(user.id),
        )
        return user


__all__ = [
    "AuthService",
    "MIN_PASSWORD_LENGTH",
    "PasswordHasher",
    "UserAdministrationService",
    "require_admin",
    "require_write_access",
]
