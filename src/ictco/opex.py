"""
Year-by-year operating cost projection.

For every year of the analysis horizon, each strategy accrues energy,
maintenance, coolant and labor cost. Each category compounds at its own
escalation rate from year 1, where no escalation is applied.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple
import numpy as np

from .capex import CapexComparison
from .catalog import PriceCatalog
from .constants import COOLANT, MAINTENANCE, RACK_42U, TANK_23U
from .environmental import annual_energy_kwh
from .normalizer import IMMERSION_COOLING, CoolingSystemSpec, FinancialAssumptions


@dataclass(frozen=True)
class StrategyYearCost:
    """Operating cost of one strategy in one year."""

    energy: float
    maintenance: float
    coolant: float
    labor: float
    energy_mwh: float

    @property
    def total(self) -> float:
        return self.energy + self.maintenance + self.coolant + self.labor

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data["total"] = self.total
        return data


@dataclass(frozen=True)
class OpexYear:
    """Both strategies' operating cost for one year, with savings."""

    year: int
    air_cooling: StrategyYearCost
    immersion_cooling: StrategyYearCost

    @property
    def savings(self) -> float:
        return self.air_cooling.total - self.immersion_cooling.total

    @property
    def savings_percent(self) -> Optional[float]:
        if self.air_cooling.total == 0:
            return None
        return self.savings / self.air_cooling.total * 100

    @property
    def energy_savings(self) -> float:
        return self.air_cooling.energy - self.immersion_cooling.energy

    def to_dict(self) -> Dict:
        return {
            "year": self.year,
            "air_cooling": self.air_cooling.to_dict(),
            "immersion_cooling": self.immersion_cooling.to_dict(),
            "savings": self.savings,
            "savings_percent": self.savings_percent,
            "energy_savings": self.energy_savings,
        }


@dataclass(frozen=True)
class MaintenanceScheduleEntry:
    year: int
    air_cooling_maintenance: float
    immersion_cooling_maintenance: float
    major_overhaul: bool
    major_overhaul_cost: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class OpexProjection:
    """Ordered OPEX years, year 1 first."""

    years: Tuple[OpexYear, ...]

    def __len__(self) -> int:
        return len(self.years)

    @property
    def air_totals(self) -> np.ndarray:
        return np.array([year.air_cooling.total for year in self.years])

    @property
    def immersion_totals(self) -> np.ndarray:
        return np.array([year.immersion_cooling.total for year in self.years])

    @property
    def savings(self) -> np.ndarray:
        return np.array([year.savings for year in self.years])

    def maintenance_schedule(self) -> List[MaintenanceScheduleEntry]:
        """
        Per-year maintenance with a major overhaul on every fifth year.

        The overhaul is costed at twice the combined routine maintenance of
        that year. It is reported here only and is not added to OPEX totals.
        """
        schedule = []
        for entry in self.years:
            air = entry.air_cooling.maintenance
            immersion = entry.immersion_cooling.maintenance
            overhaul = entry.year % MAINTENANCE.major_overhaul_interval_years == 0
            schedule.append(MaintenanceScheduleEntry(
                year=entry.year,
                air_cooling_maintenance=air,
                immersion_cooling_maintenance=immersion,
                major_overhaul=overhaul,
                major_overhaul_cost=(
                    MAINTENANCE.major_overhaul_multiplier * (air + immersion) if overhaul else 0.0
                ),
            ))
        return schedule

    def to_dict(self) -> List[Dict]:
        return [year.to_dict() for year in self.years]


def escalation_factors(rate: float, years: int) -> np.ndarray:
    """(1 + rate)^(y - 1) for y = 1..years; exactly 1.0 in year 1."""
    return (1.0 + rate) ** np.arange(years, dtype=float)


def _labor_hours(spec: CoolingSystemSpec) -> float:
    if spec.strategy == IMMERSION_COOLING:
        return spec.quantity * TANK_23U.labor_hours_per_year
    return spec.quantity * RACK_42U.labor_hours_per_year


def _project_strategy(
    spec: CoolingSystemSpec,
    capex_total: float,
    maintenance_pct: float,
    coolant_cost_per_event: float,
    financial: FinancialAssumptions,
) -> List[StrategyYearCost]:
    n = financial.analysis_years
    year_numbers = np.arange(1, n + 1)

    energy_kwh = annual_energy_kwh(spec)
    energy = energy_kwh * financial.energy_cost_per_kwh * escalation_factors(
        financial.energy_escalation_rate, n
    )
    maintenance = capex_total * maintenance_pct * escalation_factors(
        financial.maintenance_escalation_rate, n
    )
    coolant = np.where(
        year_numbers % COOLANT.replacement_interval_years == 0, coolant_cost_per_event, 0.0
    )
    labor = _labor_hours(spec) * financial.labor_cost_per_hour * escalation_factors(
        financial.labor_escalation_rate, n
    )

    return [
        StrategyYearCost(
            energy=float(energy[i]),
            maintenance=float(maintenance[i]),
            coolant=float(coolant[i]),
            labor=float(labor[i]),
            energy_mwh=energy_kwh / 1000,
        )
        for i in range(n)
    ]


def project_opex(
    air: CoolingSystemSpec,
    immersion: CoolingSystemSpec,
    capex: CapexComparison,
    financial: FinancialAssumptions,
    catalog: PriceCatalog,
) -> OpexProjection:
    """
    Project operating cost for both strategies.

    Args:
        air: Normalized air cooling spec
        immersion: Normalized immersion cooling spec
        capex: CAPEX of both strategies
        financial: Resolved financial assumptions
        catalog: Price catalog, used for the coolant unit price

    Returns:
        OpexProjection with exactly ``analysis_years`` entries

    Raises:
        CatalogLookupMissing: if the coolant price entry is absent
    """
    coolant_price = catalog.lookup(IMMERSION_COOLING, "coolant", financial.currency)
    top_up_cost = (
        immersion.coolant_liters * coolant_price.equipment_cost * COOLANT.replacement_fraction
    )

    air_years = _project_strategy(
        air, capex.air_cooling.total, capex.air_cooling.maintenance_annual_pct, 0.0, financial,
    )
    immersion_years = _project_strategy(
        immersion, capex.immersion_cooling.total,
        capex.immersion_cooling.maintenance_annual_pct, top_up_cost, financial,
    )

    return OpexProjection(years=tuple(
        OpexYear(year=i + 1, air_cooling=a, immersion_cooling=m)
        for i, (a, m) in enumerate(zip(air_years, immersion_years))
    ))
