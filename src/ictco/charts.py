"""
Chart series built from upstream results.

Pure reshaping. Every number here is either copied from the CAPEX, OPEX,
discounting or PUE results or is a running sum of them.
"""

from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple
import numpy as np

from .capex import CapexComparison
from .environmental import PUEAnalysis
from .financial import FinancialMetrics
from .opex import OpexProjection


@dataclass(frozen=True)
class TCOPoint:
    """Cumulative cost of ownership at the end of a year."""

    year: int
    air_cooling: float
    immersion_cooling: float
    savings: float
    npv_savings: float
    cumulative_savings: float
    cumulative_npv_savings: float


@dataclass(frozen=True)
class CategoryComparison:
    air_cooling: float
    immersion_cooling: float
    difference: float


@dataclass(frozen=True)
class ChartData:
    tco_progression: Tuple[TCOPoint, ...]
    cost_categories: Mapping[str, CategoryComparison]
    pue_comparison: Mapping[str, float]

    def to_dict(self) -> Dict:
        return {
            "tco_progression": [asdict(point) for point in self.tco_progression],
            "cost_categories": {
                name: asdict(category) for name, category in self.cost_categories.items()
            },
            "pue_comparison": dict(self.pue_comparison),
        }


def tco_progression(
    capex: CapexComparison,
    projection: OpexProjection,
    financials: FinancialMetrics,
) -> List[TCOPoint]:
    """
    Cumulative TCO per strategy, starting from CAPEX.

    ``savings`` is the cumulative TCO gap (CAPEX savings plus OPEX savings to
    date); ``npv_savings`` is that year's discounted OPEX saving.
    """
    air = capex.air_cooling.total + np.cumsum(projection.air_totals)
    immersion = capex.immersion_cooling.total + np.cumsum(projection.immersion_totals)
    opex_savings = np.cumsum(projection.savings)
    discounted = projection.savings * np.asarray(financials.discount_factors)
    discounted_cumulative = np.cumsum(discounted)

    return [
        TCOPoint(
            year=entry.year,
            air_cooling=float(air[i]),
            immersion_cooling=float(immersion[i]),
            savings=float(air[i] - immersion[i]),
            npv_savings=float(discounted[i]),
            cumulative_savings=float(opex_savings[i]),
            cumulative_npv_savings=float(discounted_cumulative[i]),
        )
        for i, entry in enumerate(projection.years)
    ]


def cost_categories(
    capex: CapexComparison,
    projection: OpexProjection,
) -> Dict[str, CategoryComparison]:
    """CAPEX categories plus first-year energy, side by side."""
    category_savings = capex.category_savings()
    categories = {
        name.capitalize(): CategoryComparison(
            air_cooling=getattr(capex.air_cooling, name),
            immersion_cooling=getattr(capex.immersion_cooling, name),
            difference=category_savings[name],
        )
        for name in ("equipment", "installation", "infrastructure")
    }

    first = projection.years[0]
    categories["Annual Energy"] = CategoryComparison(
        air_cooling=first.air_cooling.energy,
        immersion_cooling=first.immersion_cooling.energy,
        difference=first.energy_savings,
    )
    return categories


def build_chart_data(
    capex: CapexComparison,
    projection: OpexProjection,
    financials: FinancialMetrics,
    pue: PUEAnalysis,
) -> ChartData:
    """Assemble every chart series."""
    return ChartData(
        tco_progression=tuple(tco_progression(capex, projection, financials)),
        cost_categories=MappingProxyType(cost_categories(capex, projection)),
        pue_comparison=MappingProxyType({
            "air_cooling": pue.air_cooling,
            "immersion_cooling": pue.immersion_cooling,
        }),
    )
