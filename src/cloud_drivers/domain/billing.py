"""Domain models for pricing and usage billing."""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class PriceCatalogEntry:
    """Billing attributes of a single product SKU."""

    sku: str
    instance_type: str
    price: Decimal
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UsageRecord:
    """Recorded consumption of one instance type."""

    instance_type: str
    time: Decimal
