"""
Capital expenditure for each cooling strategy.

Prices one-time equipment, installation and infrastructure cost from the
injected PriceCatalog and the normalized equipment quantities. CAPEX is
strategy-local: it depends on neither the analysis horizon nor the
discount rate.
"""

from dataclasses import dataclass, asdict
import logging
import math
from typing import Dict

from .catalog import PriceCatalog
from .constants import HVAC, TANK_23U
from .environmental import power_usage_effectiveness
from .normalizer import AIR_COOLING, IMMERSION_COOLING, CoolingSystemSpec


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapexBreakdown:
    """One-time cost of a cooling strategy."""

    equipment: float
    installation: float
    infrastructure: float

    # Share of total CAPEX charged as annual maintenance
    maintenance_annual_pct: float = 0.0

    @property
    def total(self) -> float:
        return self.equipment + self.installation + self.infrastructure

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data["total"] = self.total
        return data


@dataclass(frozen=True)
class CapexComparison:
    """CAPEX of both strategies and the per-category savings (air minus immersion)."""

    air_cooling: CapexBreakdown
    immersion_cooling: CapexBreakdown

    @property
    def savings(self) -> float:
        return self.air_cooling.total - self.immersion_cooling.total

    def category_savings(self) -> Dict[str, float]:
        return {
            category: getattr(self.air_cooling, category) - getattr(self.immersion_cooling, category)
            for category in ("equipment", "installation", "infrastructure")
        }

    def to_dict(self) -> Dict:
        return {
            "air_cooling": self.air_cooling.to_dict(),
            "immersion_cooling": self.immersion_cooling.to_dict(),
            "savings": self.savings,
            "category_savings": self.category_savings(),
        }


def hvac_units_required(spec: CoolingSystemSpec) -> int:
    """
    Number of CRAC units needed to carry the cooling overhead.

    The overhead is the non-IT share of facility power implied by the
    strategy's PUE, covered in units of fixed capacity.
    """
    overhead_kw = spec.total_rated_power_kw * (power_usage_effectiveness(spec) - 1.0)
    return max(0, math.ceil(round(overhead_kw / HVAC.unit_capacity_kw, 9)))


def air_cooling_capex(
    spec: CoolingSystemSpec,
    catalog: PriceCatalog,
    currency: str,
) -> CapexBreakdown:
    """
    CAPEX for air cooling: racks, CRAC units, per-kW infrastructure.

    Args:
        spec: Normalized air cooling spec
        catalog: Price catalog
        currency: Currency of the calculation

    Returns:
        CapexBreakdown

    Raises:
        CatalogLookupMissing: if a required price entry is absent
    """
    rack = catalog.lookup(AIR_COOLING, "rack", currency)
    hvac = catalog.lookup(AIR_COOLING, "hvac", currency)
    infra = catalog.lookup(AIR_COOLING, "infrastructure", currency)

    racks = spec.quantity
    hvac_units = hvac_units_required(spec)
    logger.debug("Air cooling: %d racks, %d HVAC units", racks, hvac_units)

    return CapexBreakdown(
        equipment=racks * rack.equipment_cost + hvac_units * hvac.equipment_cost,
        installation=racks * rack.installation_cost + hvac_units * hvac.installation_cost,
        infrastructure=spec.total_rated_power_kw * infra.equipment_cost,
        maintenance_annual_pct=rack.maintenance_annual_pct,
    )


def immersion_cooling_capex(
    spec: CoolingSystemSpec,
    catalog: PriceCatalog,
    currency: str,
) -> CapexBreakdown:
    """
    CAPEX for immersion cooling.

    Tank prices scale linearly with height from the reference tank. Pump
    skids and heat exchangers are shared across tanks, and the initial
    coolant fill counts as equipment.

    Args:
        spec: Normalized immersion cooling spec
        catalog: Price catalog
        currency: Currency of the calculation

    Returns:
        CapexBreakdown

    Raises:
        CatalogLookupMissing: if a required price entry is absent
    """
    tank = catalog.lookup(IMMERSION_COOLING, "tank", currency)
    pump = catalog.lookup(IMMERSION_COOLING, "pump", currency)
    exchanger = catalog.lookup(IMMERSION_COOLING, "heat_exchanger", currency)
    coolant = catalog.lookup(IMMERSION_COOLING, "coolant", currency)
    infra = catalog.lookup(IMMERSION_COOLING, "infrastructure", currency)

    # Tank-equivalents of the reference height
    tank_equivalents = sum(
        group.quantity * group.height_units / TANK_23U.height_units
        for group in spec.tank_groups
    )
    tanks = spec.quantity

    equipment = (
        tank_equivalents * tank.equipment_cost
        + tanks / TANK_23U.tanks_per_pump_skid * pump.equipment_cost
        + tanks / TANK_23U.tanks_per_heat_exchanger * exchanger.equipment_cost
        + spec.coolant_liters * coolant.equipment_cost
    )
    installation = (
        tank_equivalents * tank.installation_cost
        + tanks / TANK_23U.tanks_per_pump_skid * pump.installation_cost
        + tanks / TANK_23U.tanks_per_heat_exchanger * exchanger.installation_cost
    )

    return CapexBreakdown(
        equipment=equipment,
        installation=installation,
        infrastructure=spec.total_rated_power_kw * infra.equipment_cost,
        maintenance_annual_pct=tank.maintenance_annual_pct,
    )


def calculate_capex(
    air: CoolingSystemSpec,
    immersion: CoolingSystemSpec,
    catalog: PriceCatalog,
    currency: str,
) -> CapexComparison:
    """Price both strategies."""
    return CapexComparison(
        air_cooling=air_cooling_capex(air, catalog, currency),
        immersion_cooling=immersion_cooling_capex(immersion, catalog, currency),
    )
