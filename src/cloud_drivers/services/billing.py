"""Usage-based billing over a static price catalog."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from cloud_drivers.domain.billing import PriceCatalogEntry, UsageRecord

_CREDIT_PRECISION = Decimal("0.0001")

_logger = logging.getLogger(__name__)


class UsageHistorySource(Protocol):
    """Source of per-user usage history."""

    async def get_history(self, user_id: str, backend: str) -> list[UsageRecord]:
        """Return the user's usage records recorded for a backend."""


@dataclass(frozen=True)
class PriceCatalog:
    """Read-only mapping from SKU to price entry."""

    _entries: Mapping[str, PriceCatalogEntry] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Iterable[PriceCatalogEntry]) -> "PriceCatalog":
        """Build a catalog, rejecting duplicate SKUs."""
        indexed: dict[str, PriceCatalogEntry] = {}
        for entry in entries:
            if entry.sku in indexed:
                raise ValueError(f"Duplicate SKU in price catalog: {entry.sku}")
            indexed[entry.sku] = entry
        return cls(indexed)

    @classmethod
    def from_products(cls, payload: Mapping[str, object]) -> "PriceCatalog":
        """Build a catalog from a pricing payload keyed by product SKU."""
        products = payload.get("products") or {}
        if not isinstance(products, Mapping):
            raise ValueError("Pricing payload 'products' must be a mapping")
        entries = []
        for key, product in products.items():
            attributes = dict(product.get("attributes") or {})
            instance_type = attributes.pop("instanceType", None)
            price = attributes.pop("price", None)
            if instance_type is None or price is None:
                raise ValueError(f"Product {key} has no instance type or price")
            entries.append(
                PriceCatalogEntry(
                    sku=str(product.get("sku", key)),
                    instance_type=str(instance_type),
                    price=Decimal(str(price)),
                    attributes={name: str(value) for name, value in attributes.items()},
                )
            )
        return cls.from_entries(entries)

    def get(self, sku: str) -> PriceCatalogEntry | None:
        """Return the entry for a SKU, if present."""
        return self._entries.get(sku)

    def find_by_instance_type(self, instance_type: str) -> PriceCatalogEntry | None:
        """Return the first entry priced for an instance type."""
        for entry in self._entries.values():
            if entry.instance_type == instance_type:
                return entry
        return None

    def __iter__(self) -> Iterator[PriceCatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class BillingCalculator:
    """Joins usage history against a price catalog."""

    catalog: PriceCatalog

    def calculate(self, history: Iterable[UsageRecord]) -> Decimal:
        """Return the total cost of a usage history, rounded to 4 places."""
        total = Decimal(0)
        for record in history:
            entry = self.catalog.find_by_instance_type(record.instance_type)
            if entry is None:
                _logger.debug(
                    "No price for instance type %s, skipping", record.instance_type
                )
                continue
            total += Decimal(str(record.time)) * entry.price
        return total.quantize(_CREDIT_PRECISION, rounding=ROUND_HALF_UP)

    async def user_credit(
        self, history_source: UsageHistorySource, user_id: str, backend: str
    ) -> Decimal:
        """Fetch a user's history and return the credit it consumed."""
        history = await history_source.get_history(user_id, backend)
        return self.calculate(history)
