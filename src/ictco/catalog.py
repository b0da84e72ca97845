"""
Equipment price catalog.

The engine never fetches prices. A PriceCatalog is an immutable table of
unit prices keyed by (category, subcategory, currency), injected by the
caller and read through a single lookup function. Exchange rates are
applied by the caller before the catalog reaches the engine.
"""

from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from .constants import DEFAULT_PRICES_USD, SUPPORTED_CURRENCIES
from .exceptions import CatalogLookupMissing


CatalogKey = Tuple[str, str, str]


@dataclass(frozen=True)
class EquipmentPricing:
    """Unit pricing for one catalog entry in a single currency."""

    equipment_cost: float
    installation_cost: float = 0.0
    maintenance_annual_pct: float = 0.0

    def scaled(self, factor: float) -> "EquipmentPricing":
        """Return pricing with both cost components multiplied by factor."""
        return EquipmentPricing(
            equipment_cost=self.equipment_cost * factor,
            installation_cost=self.installation_cost * factor,
            maintenance_annual_pct=self.maintenance_annual_pct,
        )


class PriceCatalog:
    """
    Read-only equipment price table.

    Example:
        >>> catalog = default_catalog()
        >>> catalog.lookup("air_cooling", "rack", "USD").equipment_cost
        2500.0
    """

    def __init__(self, entries: Mapping[CatalogKey, EquipmentPricing]):
        self._entries = MappingProxyType(dict(entries))

    def lookup(self, category: str, subcategory: str, currency: str) -> EquipmentPricing:
        """
        Resolve pricing for an equipment entry.

        Raises:
            CatalogLookupMissing: if no entry exists for the key
        """
        try:
            return self._entries[(category, subcategory, currency)]
        except KeyError:
            raise CatalogLookupMissing(category, subcategory, currency) from None

    def currencies(self) -> Tuple[str, ...]:
        return tuple(sorted({key[2] for key in self._entries}))

    def converted(self, currency: str, rate: float) -> "PriceCatalog":
        """
        Build a catalog in another currency from this catalog's USD entries.

        Args:
            currency: Target currency code
            rate: Units of target currency per USD

        Returns:
            New PriceCatalog holding only the target currency
        """
        if currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {currency}")
        if rate <= 0:
            raise ValueError(f"Exchange rate must be positive, got {rate}")

        entries = {
            (category, subcategory, currency): pricing.scaled(rate)
            for (category, subcategory, code), pricing in self._entries.items()
            if code == "USD"
        }
        return PriceCatalog(entries)

    def fingerprint(self) -> Dict[str, Dict[str, float]]:
        """Plain, key-sorted view of the catalog used for configuration digests."""
        return {
            "/".join(key): asdict(self._entries[key])
            for key in sorted(self._entries)
        }

    def __iter__(self) -> Iterator[CatalogKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries


def default_catalog() -> PriceCatalog:
    """Catalog holding the published USD default prices."""
    entries = {
        (category, subcategory, "USD"): EquipmentPricing(**prices)
        for (category, subcategory), prices in DEFAULT_PRICES_USD.items()
    }
    return PriceCatalog(entries)
