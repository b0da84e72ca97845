"""
Power usage effectiveness and environmental impact.

PUE follows from each strategy's efficiency factors. Energy savings are
taken from the first year of the OPEX projection (consumption does not
escalate, so the first year is also the average year) and converted into
carbon, water, homes, cars and trees equivalents with the configured
conversion factors. Missing factors downgrade the environmental block to
unavailable instead of failing the calculation.
"""

from dataclasses import dataclass, asdict
import logging
from typing import TYPE_CHECKING, Dict, Optional

import numpy as np

from .constants import HOURS_PER_YEAR
from .exceptions import ConfigurationOutOfRange, FieldError
from .normalizer import CoolingSystemSpec, EnvironmentalFactors

if TYPE_CHECKING:
    from .opex import OpexProjection


logger = logging.getLogger(__name__)


def power_usage_effectiveness(spec: CoolingSystemSpec) -> float:
    """
    PUE of a cooling strategy: 1 / product of its efficiency factors.

    Raises:
        ConfigurationOutOfRange: if the factors imply a PUE below 1.0
    """
    product = spec.efficiency_product
    if not 0.0 < product <= 1.0:
        raise ConfigurationOutOfRange([FieldError(
            f"{spec.strategy}.efficiency_factors",
            f"Efficiency factors multiply to {product:.4f}, implying a PUE below 1.0",
            suggestion="Each efficiency factor must lie in (0, 1]",
        )])
    return 1.0 / product


def annual_energy_kwh(spec: CoolingSystemSpec) -> float:
    """Facility energy drawn over one year of continuous operation."""
    return spec.total_rated_power_kw * power_usage_effectiveness(spec) * HOURS_PER_YEAR


def round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def _percent(part: float, whole: float) -> Optional[float]:
    if whole == 0:
        return None
    return part / whole * 100


@dataclass(frozen=True)
class PUEAnalysis:
    """Air vs immersion PUE."""

    air_cooling: float
    immersion_cooling: float
    improvement_percent: float
    energy_savings_kwh_annual: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class EnvironmentalImpact:
    """
    Environmental effect of switching from air to immersion cooling.

    Energy figures are always present. Factor-derived figures are None when
    ``available`` is False.
    """

    available: bool
    energy_savings_mwh_annual: float
    energy_savings_kwh_annual: float
    energy_savings_mwh_total: float
    energy_reduction_percent: Optional[float]
    co2_reduction_tons_annual: Optional[float] = None
    carbon_savings_kg_co2_annual: Optional[float] = None
    co2_reduction_tons_total: Optional[float] = None
    water_savings_gallons_annual: Optional[float] = None
    homes_equivalent: Optional[int] = None
    cars_equivalent: Optional[int] = None
    trees_equivalent: Optional[int] = None
    carbon_footprint_reduction_percent: Optional[float] = None
    unavailable_reason: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def analyze_pue(air: CoolingSystemSpec, immersion: CoolingSystemSpec,
                projection: "OpexProjection") -> PUEAnalysis:
    """Compare the PUE of both strategies."""
    pue_air = power_usage_effectiveness(air)
    pue_immersion = power_usage_effectiveness(immersion)
    first = projection.years[0]

    return PUEAnalysis(
        air_cooling=pue_air,
        immersion_cooling=pue_immersion,
        improvement_percent=(pue_air - pue_immersion) / pue_air * 100,
        energy_savings_kwh_annual=(
            first.air_cooling.energy_mwh - first.immersion_cooling.energy_mwh
        ) * 1000,
    )


def analyze_environmental_impact(
    projection: "OpexProjection",
    factors: EnvironmentalFactors,
) -> EnvironmentalImpact:
    """
    Derive energy savings and environmental equivalents.

    Args:
        projection: OPEX projection; its first year is the headline baseline
        factors: Conversion factors

    Returns:
        EnvironmentalImpact, with ``available=False`` when any factor is missing
    """
    first = projection.years[0]
    air_mwh = first.air_cooling.energy_mwh
    savings_mwh = air_mwh - first.immersion_cooling.energy_mwh
    total_mwh = sum(
        year.air_cooling.energy_mwh - year.immersion_cooling.energy_mwh
        for year in projection.years
    )

    energy = dict(
        energy_savings_mwh_annual=savings_mwh,
        energy_savings_kwh_annual=savings_mwh * 1000,
        energy_savings_mwh_total=total_mwh,
        energy_reduction_percent=_percent(savings_mwh, air_mwh),
    )

    missing = factors.missing()
    if missing:
        reason = "Missing conversion factors: " + ", ".join(missing)
        logger.warning("Environmental impact unavailable. %s", reason)
        return EnvironmentalImpact(available=False, unavailable_reason=reason, **energy)

    co2_tons = savings_mwh * factors.co2_tons_per_mwh
    air_co2_tons = air_mwh * factors.co2_tons_per_mwh
    derived = dict(
        co2_reduction_tons_annual=co2_tons,
        carbon_savings_kg_co2_annual=co2_tons * 1000,
        co2_reduction_tons_total=total_mwh * factors.co2_tons_per_mwh,
        water_savings_gallons_annual=savings_mwh * factors.water_gallons_per_mwh,
        homes_equivalent=savings_mwh / factors.avg_home_annual_mwh,
        cars_equivalent=co2_tons / factors.avg_car_annual_tons_co2,
        trees_equivalent=co2_tons * factors.trees_per_ton_co2,
    )

    overflowed = [name for name, value in derived.items() if not np.isfinite(value)]
    if overflowed:
        reason = "Non-finite environmental figures: " + ", ".join(overflowed)
        logger.warning("Environmental impact unavailable. %s", reason)
        return EnvironmentalImpact(available=False, unavailable_reason=reason, **energy)

    for name in ("homes_equivalent", "cars_equivalent", "trees_equivalent"):
        derived[name] = round_half_up(derived[name])

    return EnvironmentalImpact(
        available=True,
        carbon_footprint_reduction_percent=_percent(co2_tons, air_co2_tons),
        **derived,
        **energy,
    )
