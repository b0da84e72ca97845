"""
Unit normalization for cooling system inputs.

Resolves the alternative input methods of each strategy (rack count or
total power for air cooling; auto-optimized or manual tank layout for
immersion cooling) into one canonical CoolingSystemSpec, and fills every
omitted financial or environmental parameter from the published defaults.
Everything downstream consumes only the normalized shapes defined here.
"""

from dataclasses import dataclass, asdict
import logging
import math
from typing import Dict, List, Optional, Tuple

import numpy as np

from .constants import (
    FINANCIAL_DEFAULTS,
    HVAC,
    RACK_42U,
    REGIONAL_ENERGY_COST,
    REGIONAL_ENVIRONMENTAL_FACTORS,
    REGIONAL_LABOR_COST,
    TANK_23U,
)
from .exceptions import ConfigurationIncomplete, FieldError
from .schemas import (
    AutoOptimizeInput,
    CalculationConfiguration,
    EnvironmentalInput,
    FinancialInput,
    ManualConfigInput,
    RackCountInput,
    TotalPowerInput,
)


logger = logging.getLogger(__name__)

AIR_COOLING = "air_cooling"
IMMERSION_COOLING = "immersion_cooling"


@dataclass(frozen=True)
class TankGroup:
    """A group of identical immersion tanks."""

    height_units: int
    quantity: int
    power_kw: float         # Group total
    coolant_liters: float   # Group total


@dataclass(frozen=True)
class CoolingSystemSpec:
    """
    Canonical description of one cooling strategy.

    ``quantity`` counts racks (air) or tanks (immersion). Efficiency factors
    are multiplicative coefficients in (0, 1]; their product sets the PUE.
    """

    strategy: str
    input_method: str
    quantity: int
    power_per_unit_kw: float
    efficiency_factors: Tuple[Tuple[str, float], ...]
    tank_groups: Tuple[TankGroup, ...] = ()

    @property
    def total_rated_power_kw(self) -> float:
        return self.quantity * self.power_per_unit_kw

    @property
    def efficiency_product(self) -> float:
        return float(np.prod([value for _, value in self.efficiency_factors]))

    @property
    def coolant_liters(self) -> float:
        return sum(group.coolant_liters for group in self.tank_groups)

    def efficiency(self, name: str) -> float:
        return dict(self.efficiency_factors)[name]


@dataclass(frozen=True)
class FinancialAssumptions:
    """Financial parameters with every default resolved."""

    analysis_years: int
    discount_rate: float
    energy_cost_per_kwh: float
    energy_escalation_rate: float
    maintenance_escalation_rate: float
    labor_escalation_rate: float
    labor_cost_per_hour: float
    currency: str
    region: str


@dataclass(frozen=True)
class EnvironmentalFactors:
    """Conversion factors for environmental equivalents; None marks a missing factor."""

    co2_tons_per_mwh: Optional[float] = None
    avg_home_annual_mwh: Optional[float] = None
    avg_car_annual_tons_co2: Optional[float] = None
    water_gallons_per_mwh: Optional[float] = None
    trees_per_ton_co2: Optional[float] = None

    @classmethod
    def for_region(cls, region: str) -> "EnvironmentalFactors":
        return cls(**REGIONAL_ENVIRONMENTAL_FACTORS[region])

    def missing(self) -> List[str]:
        return [name for name, value in asdict(self).items() if value is None]


@dataclass(frozen=True)
class NormalizedConfiguration:
    """Fully resolved calculation input."""

    air_cooling: CoolingSystemSpec
    immersion_cooling: CoolingSystemSpec
    financial: FinancialAssumptions
    environmental: EnvironmentalFactors

    def to_dict(self) -> Dict:
        return asdict(self)


# ============================================================================
# Helpers
# ============================================================================

def _first(*values):
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def _is_positive(value) -> bool:
    return value is not None and value > 0


def units_needed(power_kw: float, unit_capacity_kw: float) -> int:
    """
    Smallest unit count whose combined capacity covers power_kw.

    The ratio is rounded to 9 decimals before the ceiling so that exact
    multiples never pick up an extra unit from floating-point noise.
    """
    return max(1, math.ceil(round(power_kw / unit_capacity_kw, 9)))


def _require(errors: List[FieldError], field: str, value, method: str) -> None:
    if value is None:
        errors.append(FieldError(field, f"Required for the {method} input method"))
    elif not value > 0:
        errors.append(FieldError(field, f"Must be positive for the {method} input method"))


# ============================================================================
# Air cooling
# ============================================================================

def _air_factors(air) -> Tuple[Tuple[str, float], ...]:
    return (
        ("hvac", _first(air.hvac_efficiency, HVAC.efficiency)),
        ("power_distribution", _first(
            air.power_distribution_efficiency, HVAC.power_distribution_efficiency
        )),
    )


def _resolve_rack_count(air: RackCountInput) -> CoolingSystemSpec:
    errors: List[FieldError] = []
    _require(errors, "air_cooling.rack_count", air.rack_count, air.input_method)
    _require(errors, "air_cooling.power_per_rack_kw", air.power_per_rack_kw, air.input_method)
    if errors:
        raise ConfigurationIncomplete(errors)

    return CoolingSystemSpec(
        strategy=AIR_COOLING,
        input_method=air.input_method,
        quantity=int(air.rack_count),
        power_per_unit_kw=float(air.power_per_rack_kw),
        efficiency_factors=_air_factors(air),
    )


def _resolve_total_power(air: TotalPowerInput) -> CoolingSystemSpec:
    errors: List[FieldError] = []
    _require(errors, "air_cooling.total_power_kw", air.total_power_kw, air.input_method)
    if errors:
        raise ConfigurationIncomplete(errors)

    # Implied rack count at standard rack capacity, load spread evenly
    racks = units_needed(air.total_power_kw, RACK_42U.power_capacity_kw)
    return CoolingSystemSpec(
        strategy=AIR_COOLING,
        input_method=air.input_method,
        quantity=racks,
        power_per_unit_kw=air.total_power_kw / racks,
        efficiency_factors=_air_factors(air),
    )


# ============================================================================
# Immersion cooling
# ============================================================================

def _immersion_factors(immersion) -> Tuple[Tuple[str, float], ...]:
    return (
        ("pumping", _first(immersion.pumping_efficiency, TANK_23U.pumping_efficiency)),
        ("heat_exchanger", _first(
            immersion.heat_exchanger_efficiency, TANK_23U.heat_exchanger_efficiency
        )),
    )


def optimize_tank_count(target_power_kw: float) -> int:
    """Minimum number of standard tanks that carries the target load."""
    return units_needed(target_power_kw, TANK_23U.power_capacity_kw)


def _resolve_auto_optimize(immersion: AutoOptimizeInput) -> CoolingSystemSpec:
    errors: List[FieldError] = []
    _require(errors, "immersion_cooling.target_power_kw", immersion.target_power_kw,
             immersion.input_method)
    if errors:
        raise ConfigurationIncomplete(errors)

    target = float(immersion.target_power_kw)
    tanks = optimize_tank_count(target)
    group = TankGroup(
        height_units=TANK_23U.height_units,
        quantity=tanks,
        power_kw=target,
        coolant_liters=tanks * TANK_23U.height_units * TANK_23U.coolant_liters_per_u,
    )
    logger.debug("Auto-optimized %.1f kW onto %d x %dU tanks",
                 target, tanks, TANK_23U.height_units)

    return CoolingSystemSpec(
        strategy=IMMERSION_COOLING,
        input_method=immersion.input_method,
        quantity=tanks,
        power_per_unit_kw=target / tanks,
        efficiency_factors=_immersion_factors(immersion),
        tank_groups=(group,),
    )


def _resolve_manual_config(immersion: ManualConfigInput) -> CoolingSystemSpec:
    tanks = immersion.tank_configurations
    if not tanks:
        raise ConfigurationIncomplete([FieldError(
            "immersion_cooling.tank_configurations",
            "At least one tank configuration is required for the manual_config input method",
        )])

    errors: List[FieldError] = []
    groups = []
    for i, tank in enumerate(tanks):
        prefix = f"immersion_cooling.tank_configurations.{i}"
        _require(errors, f"{prefix}.quantity", tank.quantity, immersion.input_method)
        _require(errors, f"{prefix}.power_density_kw_per_u", tank.power_density_kw_per_u,
                 immersion.input_method)
        if tank.height_units <= 0:
            errors.append(FieldError(f"{prefix}.size", "Tank size must be at least 1U"))
        if errors:
            continue

        units = tank.height_units
        groups.append(TankGroup(
            height_units=units,
            quantity=tank.quantity,
            power_kw=units * tank.power_density_kw_per_u * tank.quantity,
            coolant_liters=units * TANK_23U.coolant_liters_per_u * tank.quantity,
        ))

    if errors:
        raise ConfigurationIncomplete(errors)

    quantity = sum(group.quantity for group in groups)
    total_power = sum(group.power_kw for group in groups)

    return CoolingSystemSpec(
        strategy=IMMERSION_COOLING,
        input_method=immersion.input_method,
        quantity=quantity,
        power_per_unit_kw=total_power / quantity,
        efficiency_factors=_immersion_factors(immersion),
        tank_groups=tuple(groups),
    )


_AIR_RESOLVERS = {
    "rack_count": _resolve_rack_count,
    "total_power": _resolve_total_power,
}

_IMMERSION_RESOLVERS = {
    "auto_optimize": _resolve_auto_optimize,
    "manual_config": _resolve_manual_config,
}


# ============================================================================
# Financial and environmental
# ============================================================================

def resolve_financial(financial: FinancialInput) -> FinancialAssumptions:
    """Fill omitted financial parameters from regional and global defaults."""
    region = financial.region
    return FinancialAssumptions(
        analysis_years=int(financial.analysis_years),
        discount_rate=_first(
            financial.custom_discount_rate,
            financial.discount_rate,
            FINANCIAL_DEFAULTS["discount_rate"],
        ),
        energy_cost_per_kwh=_first(
            financial.custom_energy_cost,
            financial.energy_cost_kwh,
            REGIONAL_ENERGY_COST[region],
        ),
        energy_escalation_rate=_first(
            financial.energy_escalation_rate, FINANCIAL_DEFAULTS["energy_escalation_rate"]
        ),
        maintenance_escalation_rate=_first(
            financial.maintenance_escalation_rate,
            FINANCIAL_DEFAULTS["maintenance_escalation_rate"],
        ),
        labor_escalation_rate=_first(
            financial.labor_escalation_rate, FINANCIAL_DEFAULTS["labor_escalation_rate"]
        ),
        labor_cost_per_hour=_first(
            financial.custom_labor_cost,
            financial.labor_cost_per_hour,
            REGIONAL_LABOR_COST[region],
        ),
        currency=financial.currency,
        region=region,
    )


def resolve_environmental(
    environmental: Optional[EnvironmentalInput],
    region: str,
) -> EnvironmentalFactors:
    """
    Regional defaults when the block is omitted; otherwise exactly what was given.

    A supplied block with gaps is kept as-is so the analyzer can report the
    environmental figures as unavailable.
    """
    if environmental is None:
        return EnvironmentalFactors.for_region(region)
    return EnvironmentalFactors(**environmental.model_dump())


# ============================================================================
# Entry point
# ============================================================================

def normalize(config: CalculationConfiguration) -> NormalizedConfiguration:
    """
    Resolve a parsed configuration into its canonical form.

    Args:
        config: Parsed calculation configuration

    Returns:
        NormalizedConfiguration

    Raises:
        ConfigurationIncomplete: if a strategy lacks the fields its input
            method requires
    """
    errors: List[FieldError] = []
    specs = {}

    for name, section, resolvers in (
        (AIR_COOLING, config.air_cooling, _AIR_RESOLVERS),
        (IMMERSION_COOLING, config.immersion_cooling, _IMMERSION_RESOLVERS),
    ):
        try:
            specs[name] = resolvers[section.input_method](section)
        except ConfigurationIncomplete as exc:
            errors.extend(exc.errors)

    if errors:
        raise ConfigurationIncomplete(errors)

    financial = resolve_financial(config.financial)
    environmental = resolve_environmental(config.environmental, financial.region)

    return NormalizedConfiguration(
        air_cooling=specs[AIR_COOLING],
        immersion_cooling=specs[IMMERSION_COOLING],
        financial=financial,
        environmental=environmental,
    )
