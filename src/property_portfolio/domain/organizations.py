"""Organization: the tenant boundary every other record is scoped to."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from property_portfolio.domain._common import _utc_now
from property_portfolio.exceptions import MissingFieldsError


@dataclass
class Organization:
    name: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise MissingFieldsError("name")


__all__ = ["Organization"]
