"""Helpers shared by the domain dataclasses."""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from property_portfolio.exceptions import ValidationError

CENT = Decimal("0.01")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Coerce ``value`` to a Decimal, raising ValidationError on garbage."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(
            f"Ugyldig værdi for {field_name}", context={"field": field_name}
        ) from exc


def to_money(value: Any, field_name: str) -> Decimal:
    return to_decimal(value, field_name).quantize(CENT, rounding=ROUND_HALF_UP)


def optional_money(value: Any, field_name: str) -> Decimal | None:
    if value is None:
        return None
    return to_money(value, field_name)
