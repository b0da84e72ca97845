"""
TCO calculation orchestrator.

Runs one calculation end to end:
validation -> normalization -> CAPEX and OPEX -> discounting ->
PUE and environmental analysis -> chart series -> configuration digest,
and assembles an immutable CalculationResult.

Example usage:
    >>> from ictco import calculate
    >>> result = calculate({
    ...     "air_cooling": {"input_method": "rack_count", "rack_count": 10,
    ...                     "power_per_rack_kw": 15},
    ...     "immersion_cooling": {"input_method": "auto_optimize", "target_power_kw": 150},
    ...     "financial": {"currency": "USD"},
    ... })
    >>> print(result.summary())
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .capex import CapexComparison, calculate_capex
from .catalog import PriceCatalog, default_catalog
from .charts import ChartData, TCOPoint, build_chart_data
from .constants import CALCULATION_VERSION
from .digest import configuration_digest
from .environmental import (
    EnvironmentalImpact,
    PUEAnalysis,
    analyze_environmental_impact,
    analyze_pue,
)
from .exceptions import CalculationError
from .financial import FinancialMetrics, calculate_financials
from .normalizer import NormalizedConfiguration
from .opex import MaintenanceScheduleEntry, OpexProjection, project_opex
from .schemas import CalculationConfiguration
from .validation import ValidationReport, validate


logger = logging.getLogger(__name__)

ConfigurationInput = Union[CalculationConfiguration, Mapping[str, Any]]


@dataclass(frozen=True)
class CalculationSummary:
    """Headline metrics. Degenerate metrics are None and listed in ``degenerate_fields``."""

    total_capex_savings: float
    total_opex_savings_5yr: float
    total_tco_savings_5yr: float
    annual_savings: float
    npv_savings: float
    npv_tco_savings: float
    npv_air_cooling: float
    npv_immersion_cooling: float
    roi_percent: Optional[float]
    payback_years: Optional[float]
    payback_months: Optional[float]
    irr_percent: Optional[float]
    pue_air_cooling: float
    pue_immersion_cooling: float
    energy_efficiency_improvement: float
    cost_per_kw_air_cooling: Optional[float]
    cost_per_kw_immersion_cooling: Optional[float]
    cost_per_rack_equivalent: Optional[float]
    degenerate_fields: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["degenerate_fields"] = list(self.degenerate_fields)
        return data


@dataclass(frozen=True)
class CalculationBreakdown:
    capex: CapexComparison
    opex_annual: OpexProjection
    tco_cumulative: Tuple[TCOPoint, ...]
    maintenance_schedule: Tuple[MaintenanceScheduleEntry, ...]

    def to_dict(self) -> Dict:
        return {
            "capex": self.capex.to_dict(),
            "opex_annual": self.opex_annual.to_dict(),
            "tco_cumulative": [asdict(point) for point in self.tco_cumulative],
            "maintenance_schedule": [entry.to_dict() for entry in self.maintenance_schedule],
        }


@dataclass(frozen=True)
class CalculationResult:
    """
    Complete, immutable outcome of one TCO calculation.

    Two results for the same normalized input compare equal once
    ``calculated_at`` is set aside (see ``without_timestamp``).
    """

    summary_metrics: CalculationSummary
    breakdown: CalculationBreakdown
    environmental: EnvironmentalImpact
    pue_analysis: PUEAnalysis
    charts: ChartData
    financials: FinancialMetrics
    configuration_hash: str
    currency: str
    analysis_years: int
    calculated_at: str
    calculation_version: str = CALCULATION_VERSION

    def without_timestamp(self) -> Dict:
        data = self.to_dict()
        data.pop("calculated_at")
        return data

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": self.summary_metrics.to_dict(),
            "breakdown": self.breakdown.to_dict(),
            "environmental": self.environmental.to_dict(),
            "pue_analysis": self.pue_analysis.to_dict(),
            "charts": self.charts.to_dict(),
            "configuration_hash": self.configuration_hash,
            "currency": self.currency,
            "analysis_years": self.analysis_years,
            "calculated_at": self.calculated_at,
            "calculation_version": self.calculation_version,
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, allow_nan=False)

    def save(self, filepath: str):
        """Save results to JSON file."""
        with open(filepath, 'w') as f:
            f.write(self.to_json())

    def summary(self) -> str:
        """Generate a plain-text TCO report."""
        s = self.summary_metrics
        env = self.environmental
        cur = self.currency

        def money(value):
            return "n/a" if value is None else f"{value:,.0f} {cur}"

        def maybe(value, fmt, suffix=""):
            return "n/a" if value is None else f"{value:{fmt}}{suffix}"

        lines = [
            "=" * 70,
            "IMMERSION VS AIR COOLING TCO REPORT",
            "=" * 70,
            f"Analysis period: {self.analysis_years} years",
            f"Configuration: {self.configuration_hash[:12]}",
            f"Calculated at: {self.calculated_at}",
            "",
            "CAPITAL EXPENDITURE:",
            f"  Air cooling:       {money(self.breakdown.capex.air_cooling.total)}",
            f"  Immersion cooling: {money(self.breakdown.capex.immersion_cooling.total)}",
            f"  CAPEX savings:     {money(s.total_capex_savings)}",
            "",
            "OPERATING EXPENDITURE:",
            f"  First-year savings: {money(s.annual_savings)}",
            f"  Total OPEX savings: {money(s.total_opex_savings_5yr)}",
            f"  NPV of savings:     {money(s.npv_savings)}",
            "",
            "TOTAL COST OF OWNERSHIP:",
            f"  TCO savings:     {money(s.total_tco_savings_5yr)}",
            f"  NPV TCO savings: {money(s.npv_tco_savings)}",
            f"  ROI:             {maybe(s.roi_percent, '.1f', '%')}",
            f"  Payback:         {maybe(s.payback_months, '.1f', ' months')}",
            f"  IRR:             {maybe(s.irr_percent, '.1f', '%')}",
            "",
            "EFFICIENCY:",
            f"  PUE air cooling:       {s.pue_air_cooling:.3f}",
            f"  PUE immersion cooling: {s.pue_immersion_cooling:.3f}",
            f"  Improvement:           {s.energy_efficiency_improvement:.1f}%",
            "",
            "ENVIRONMENTAL IMPACT (annual):",
            f"  Energy savings: {env.energy_savings_mwh_annual:,.1f} MWh",
        ]

        if env.available:
            lines.extend([
                f"  CO2 reduction:  {env.co2_reduction_tons_annual:,.1f} t",
                f"  Water savings:  {env.water_savings_gallons_annual:,.0f} gal",
                f"  Equivalent to {env.homes_equivalent} homes, {env.cars_equivalent} cars, "
                f"{env.trees_equivalent} trees",
            ])
        else:
            lines.append(f"  Unavailable: {env.unavailable_reason}")

        lines.append("=" * 70)
        return "\n".join(lines)


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator == 0:
        return None
    return numerator / denominator


def _non_finite_paths(data: Any, path: str = "") -> List[str]:
    if isinstance(data, float):
        return [] if math.isfinite(data) else [path or "result"]
    if isinstance(data, Mapping):
        found = []
        for key, value in data.items():
            found.extend(_non_finite_paths(value, f"{path}.{key}" if path else str(key)))
        return found
    if isinstance(data, (list, tuple)):
        found = []
        for i, value in enumerate(data):
            found.extend(_non_finite_paths(value, f"{path}[{i}]"))
        return found
    return []


class TCOCalculationEngine:
    """
    Immersion vs air cooling TCO calculator.

    Holds only the injected price catalog. Every call to ``calculate`` is
    independent and side-effect free apart from logging.
    """

    def __init__(self, catalog: PriceCatalog = None):
        """
        Initialize engine.

        Args:
            catalog: Equipment price catalog (default: published USD prices)
        """
        self.catalog = catalog if catalog is not None else default_catalog()

    def validate(self, config: ConfigurationInput) -> ValidationReport:
        """Pre-flight check; see ``ictco.validation.validate``."""
        return validate(config)

    def calculate(self, config: ConfigurationInput) -> CalculationResult:
        """
        Run a complete TCO calculation.

        Args:
            config: Parsed configuration or plain mapping

        Returns:
            CalculationResult

        Raises:
            ConfigurationIncomplete: required input-method fields are missing
            ConfigurationOutOfRange: a value lies outside its bounds
            CatalogLookupMissing: the catalog lacks a required price
            CalculationError: a non-finite number reached the result
        """
        report = self.validate(config)
        report.raise_for_errors()
        return self.calculate_normalized(report.normalized)

    def calculate_normalized(self, normalized: NormalizedConfiguration) -> CalculationResult:
        """Run the calculation on an already-normalized configuration."""
        air = normalized.air_cooling
        immersion = normalized.immersion_cooling
        financial = normalized.financial

        digest = configuration_digest(normalized, self.catalog)
        logger.info(
            "Calculating TCO %s: %d years in %s",
            digest[:12], financial.analysis_years, financial.currency,
        )

        capex = calculate_capex(air, immersion, self.catalog, financial.currency)
        projection = project_opex(air, immersion, capex, financial, self.catalog)
        financials = calculate_financials(capex, projection, financial.discount_rate)
        pue = analyze_pue(air, immersion, projection)
        environmental = analyze_environmental_impact(projection, normalized.environmental)
        charts = build_chart_data(capex, projection, financials, pue)

        logger.debug("PUE air %.3f, immersion %.3f", pue.air_cooling, pue.immersion_cooling)

        cost_per_kw_air = _ratio(capex.air_cooling.total, air.total_rated_power_kw)
        cost_per_kw_immersion = _ratio(capex.immersion_cooling.total, immersion.total_rated_power_kw)
        cost_per_rack = _ratio(capex.immersion_cooling.total, air.quantity)
        degenerate = list(financials.degenerate_fields)
        for name, value in (
            ("cost_per_kw_air_cooling", cost_per_kw_air),
            ("cost_per_kw_immersion_cooling", cost_per_kw_immersion),
            ("cost_per_rack_equivalent", cost_per_rack),
        ):
            if value is None:
                degenerate.append(name)

        summary = CalculationSummary(
            total_capex_savings=financials.total_capex_savings,
            total_opex_savings_5yr=financials.total_opex_savings,
            total_tco_savings_5yr=financials.total_tco_savings,
            annual_savings=financials.annual_savings,
            npv_savings=financials.npv_savings,
            npv_tco_savings=financials.npv_tco_savings,
            npv_air_cooling=financials.npv_air_cooling,
            npv_immersion_cooling=financials.npv_immersion_cooling,
            roi_percent=financials.roi_percent,
            payback_years=financials.payback_years,
            payback_months=financials.payback_months,
            irr_percent=financials.irr_percent,
            pue_air_cooling=pue.air_cooling,
            pue_immersion_cooling=pue.immersion_cooling,
            energy_efficiency_improvement=pue.improvement_percent,
            cost_per_kw_air_cooling=cost_per_kw_air,
            cost_per_kw_immersion_cooling=cost_per_kw_immersion,
            cost_per_rack_equivalent=cost_per_rack,
            degenerate_fields=tuple(degenerate),
        )

        result = CalculationResult(
            summary_metrics=summary,
            breakdown=CalculationBreakdown(
                capex=capex,
                opex_annual=projection,
                tco_cumulative=charts.tco_progression,
                maintenance_schedule=tuple(projection.maintenance_schedule()),
            ),
            environmental=environmental,
            pue_analysis=pue,
            charts=charts,
            financials=financials,
            configuration_hash=digest,
            currency=financial.currency,
            analysis_years=financial.analysis_years,
            calculated_at=datetime.now(timezone.utc).isoformat(),
        )

        bad = _non_finite_paths(result.to_dict())
        if bad:
            raise CalculationError(f"Non-finite values in result: {', '.join(bad)}")
        return result


def calculate(
    config: ConfigurationInput,
    catalog: PriceCatalog = None,
) -> CalculationResult:
    """
    Convenience function for a single calculation.

    Args:
        config: Parsed configuration or plain mapping
        catalog: Equipment price catalog (default: published USD prices)

    Returns:
        CalculationResult
    """
    return TCOCalculationEngine(catalog).calculate(config)
