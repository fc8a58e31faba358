"""Domain exception hierarchy for Property Portfolio.

All domain-specific exceptions inherit from PropertyPortfolioError. The API
layer turns any of them into a JSON body via ``to_dict()`` and the class's
``status_code``. User-facing messages are Danish.
"""

from decimal import Decimal
from typing import Any
from uuid import UUID


class PropertyPortfolioError(Exception):
    """Base exception for all Property Portfolio errors."""

    error_code: str = "PP_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Input Errors
# =============================================================================


class ValidationError(PropertyPortfolioError):
    """Raised for malformed or out-of-range input."""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class MissingFieldsError(ValidationError):
    error_code = "MISSING_FIELDS"

    def __init__(self, *fields: str) -> None:
        super().__init__(
            "Manglende påkrævede felter",
            context={"fields": list(fields)},
        )


class InvalidOwnershipPercentageError(ValidationError):
    error_code = "INVALID_OWNERSHIP_PERCENTAGE"

    def __init__(self, percentage: Any) -> None:
        super().__init__(
            "Ejerskabsprocent skal være mellem 0.01 og 100",
            context={"percentage": str(percentage)},
        )


class InvalidPeriodError(ValidationError):
    error_code = "INVALID_PERIOD"

    def __init__(self, period_start: Any, period_end: Any) -> None:
        super().__init__(
            "Slutdato skal være efter eller lig med startdato",
            context={"period_start": str(period_start), "period_end": str(period_end)},
        )


class ConflictError(ValidationError):
    """Raised when a unique value (e-mail, invitation) is already taken."""

    error_code = "CONFLICT"


# =============================================================================
# Invariant Violations
# =============================================================================


class InvariantViolationError(PropertyPortfolioError):
    """Raised when a write would break a data invariant."""

    error_code = "INVARIANT_VIOLATION"
    status_code = 400


class OwnershipLimitExceededError(InvariantViolationError):
    """Incoming ownership of a company would exceed 100%."""

    error_code = "OWNERSHIP_LIMIT_EXCEEDED"

    def __init__(
        self, child_company_id: UUID | str, existing_total: Decimal, new_total: Decimal
    ) -> None:
        super().__init__(
            f"Den samlede ejerskabsprocent vil blive {new_total:.2f}%, hvilket "
            f"overskrider 100%. Der er allerede {existing_total:.2f}% ejerskab registreret.",
            context={
                "child_company_id": str(child_company_id),
                "existing_total": str(existing_total),
                "new_total": str(new_total),
            },
        )
        self.existing_total = existing_total
        self.new_total = new_total


class SelfOwnershipError(InvariantViolationError):
    error_code = "SELF_OWNERSHIP"

    def __init__(self, company_id: UUID | str) -> None:
        super().__init__(
            "Et selskab kan ikke eje sig selv",
            context={"company_id": str(company_id)},
        )


class CycleDetectedError(InvariantViolationError):
    """The new edge would close a directed ownership cycle."""

    error_code = "OWNERSHIP_CYCLE"

    def __init__(self, cycle_path: list[UUID]) -> None:
        self.cycle_path = cycle_path
        super().__init__(
            "Ejerskabsrelationen vil skabe en cirkulær ejerskabsstruktur",
            context={"cycle_path": [str(company_id) for company_id in cycle_path]},
        )


class TenancyConflictError(InvariantViolationError):
    """A tenancy period collides with another tenancy on the same lease."""

    error_code = "TENANCY_CONFLICT"

    def __init__(
        self, message: str, lease_id: UUID | str, conflicting_id: UUID | str
    ) -> None:
        super().__init__(
            message,
            context={
                "lease_id": str(lease_id),
                "conflicting_lease_tenant_id": str(conflicting_id),
            },
        )


# =============================================================================
# Lookup Errors
# =============================================================================


class NotFoundError(PropertyPortfolioError):
    """Raised when a record is missing or belongs to another organization."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: UUID | str | None = None) -> None:
        super().__init__(
            f"{resource} ikke fundet",
            context={"resource_id": str(resource_id)} if resource_id else None,
        )


# =============================================================================
# Authentication / Authorization Errors
# =============================================================================


class AuthenticationError(PropertyPortfolioError):
    error_code = "AUTHENTICATION_ERROR"
    status_code = 401

    def __init__(self, message: str = "Ikke autoriseret") -> None:
        super().__init__(message)


class AuthorizationError(PropertyPortfolioError):
    error_code = "AUTHORIZATION_ERROR"
    status_code = 403


class WriteAccessDeniedError(AuthorizationError):
    """Brokers only have read access."""

    error_code = "WRITE_ACCESS_DENIED"

    def __init__(self) -> None:
        super().__init__("Kun læseadgang (Mægler)")


class AdminRequiredError(AuthorizationError):
    error_code = "ADMIN_REQUIRED"

    def __init__(self, message: str = "Kun administratorer har adgang") -> None:
        super().__init__(message)
