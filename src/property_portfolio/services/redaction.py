"""Read-only projection hiding tenant personal data from brokers."""

import dataclasses

from property_portfolio.domain.leases import Tenant
from property_portfolio.domain.users import User

ANONYMIZED = "Anonymiseret"


def _mask_email(value: str | None) -> str | None:
    if not value:
        return None
    return f"{value[0]}*****@*****"


def anonymize_tenant(tenant: Tenant, viewer: User) -> Tenant:
    """Return ``tenant`` unchanged, or a masked copy when ``viewer`` is a broker.

    The stored record is never modified. Fields that are empty stay empty.
    """
    if not viewer.is_broker:
        return tenant
    masked = dataclasses.replace(tenant)
    masked.name = ANONYMIZED
    masked.cvr_number = "********" if tenant.cvr_number else None
    masked.contact_person = ANONYMIZED if tenant.contact_person else None
    masked.phone = "*******"
    masked.email = _mask_email(tenant.email)
    masked.invoice_email = _mask_email(tenant.invoice_email)
    masked.notes = "(Anonymiseret)" if tenant.notes else None
    return masked


__all__ = ["ANONYMIZED", "anonymize_tenant"]
