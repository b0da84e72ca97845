"""
Discounted cash-flow metrics.

Turns CAPEX totals and the nominal OPEX series into present values,
payback period, ROI and IRR. Division-by-zero cases are not errors: the
affected metric is reported as None and its name is recorded in
``degenerate_fields``.
"""

from dataclasses import dataclass, asdict
import logging
from typing import Dict, Optional, Sequence, Tuple
import numpy as np
from scipy.optimize import brentq

from .capex import CapexComparison
from .opex import OpexProjection


logger = logging.getLogger(__name__)

# Candidate rates scanned for an IRR bracket
_IRR_GRID = np.concatenate([
    np.linspace(-0.99, 1.0, 400),
    np.geomspace(1.0, 1e4, 200)[1:],
])


@dataclass(frozen=True)
class FinancialMetrics:
    """Present-value and return metrics for immersion vs air cooling."""

    discount_rate: float
    discount_factors: Tuple[float, ...]

    npv_air_cooling: float
    npv_immersion_cooling: float
    npv_tco_savings: float
    npv_savings: float          # Discounted OPEX savings only

    total_capex_savings: float
    total_opex_savings: float
    total_tco_savings: float
    annual_savings: float       # First-year, undiscounted

    payback_years: Optional[float]
    payback_months: Optional[float]
    roi_percent: Optional[float]
    irr_percent: Optional[float]

    degenerate_fields: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["discount_factors"] = list(self.discount_factors)
        data["degenerate_fields"] = list(self.degenerate_fields)
        return data


def discount_factors(rate: float, years: int) -> np.ndarray:
    """1 / (1 + rate)^y for y = 1..years."""
    return 1.0 / (1.0 + rate) ** np.arange(1, years + 1, dtype=float)


def net_present_value(rate: float, flows: Sequence[float]) -> float:
    """NPV of flows where flows[0] occurs now and flows[t] at the end of year t."""
    flows = np.asarray(flows, dtype=float)
    return float(np.sum(flows / (1.0 + rate) ** np.arange(len(flows))))


def internal_rate_of_return(flows: Sequence[float]) -> Optional[float]:
    """
    Rate at which the NPV of flows is zero.

    Scans a fixed grid for the first sign change and refines it with
    Brent's method.

    Returns:
        IRR as a fraction, or None when no root is bracketed
    """
    flows = np.asarray(flows, dtype=float)
    if not (np.any(flows > 0) and np.any(flows < 0)):
        return None

    values = np.array([net_present_value(rate, flows) for rate in _IRR_GRID])
    if np.any(values == 0):
        return float(_IRR_GRID[np.argmax(values == 0)])

    crossings = np.nonzero(np.sign(values[:-1]) != np.sign(values[1:]))[0]
    if len(crossings) == 0:
        return None

    i = crossings[0]
    return float(brentq(net_present_value, _IRR_GRID[i], _IRR_GRID[i + 1], args=(flows,)))


def payback_period(capex: CapexComparison, annual_savings: float) -> Optional[float]:
    """
    Years for first-year OPEX savings to recover the extra immersion CAPEX.

    Zero when immersion costs no more up front. None when the first year
    saves nothing.
    """
    if annual_savings <= 0:
        return None
    extra = capex.immersion_cooling.total - capex.air_cooling.total
    return max(0.0, extra / annual_savings)


def calculate_financials(
    capex: CapexComparison,
    projection: OpexProjection,
    discount_rate: float,
) -> FinancialMetrics:
    """
    Discount the OPEX series and derive the headline financial metrics.

    The discount rate is assumed to be validated upstream.

    Args:
        capex: CAPEX of both strategies
        projection: Nominal OPEX series
        discount_rate: Annual discount rate

    Returns:
        FinancialMetrics
    """
    factors = discount_factors(discount_rate, len(projection))
    savings = projection.savings
    degenerate = []

    npv_air = capex.air_cooling.total + float(np.sum(projection.air_totals * factors))
    npv_immersion = capex.immersion_cooling.total + float(np.sum(projection.immersion_totals * factors))
    npv_tco_savings = npv_air - npv_immersion

    total_opex_savings = float(np.sum(savings))
    annual_savings = float(savings[0])

    payback_years = payback_period(capex, annual_savings)
    if payback_years is None:
        degenerate.append("payback_months")

    capex_immersion = capex.immersion_cooling.total
    if capex_immersion == 0:
        roi_percent = None
        degenerate.append("roi_percent")
    else:
        roi_percent = npv_tco_savings / capex_immersion * 100

    irr = internal_rate_of_return(np.concatenate([[capex.savings], savings]))
    if irr is None:
        degenerate.append("irr_percent")

    if degenerate:
        logger.warning("Degenerate financial metrics reported as None: %s", ", ".join(degenerate))

    return FinancialMetrics(
        discount_rate=discount_rate,
        discount_factors=tuple(float(f) for f in factors),
        npv_air_cooling=npv_air,
        npv_immersion_cooling=npv_immersion,
        npv_tco_savings=npv_tco_savings,
        npv_savings=float(np.sum(savings * factors)),
        total_capex_savings=capex.savings,
        total_opex_savings=total_opex_savings,
        total_tco_savings=capex.savings + total_opex_savings,
        annual_savings=annual_savings,
        payback_years=payback_years,
        payback_months=None if payback_years is None else payback_years * 12,
        roi_percent=roi_percent,
        irr_percent=None if irr is None else irr * 100,
        degenerate_fields=tuple(degenerate),
    )
