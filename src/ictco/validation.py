"""
Pre-flight validation of calculation configurations.

Hard bounds are enforced by the pydantic input models; this module turns
their errors into field-level records, classifies each as an incomplete
configuration or an out-of-range value, runs the normalizer to catch
method-specific gaps, and adds soft warnings for inputs that are legal
but unusual.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import numpy as np
from pydantic import ValidationError

from .constants import VALIDATION_LIMITS, WARNING_THRESHOLDS
from .exceptions import (
    ConfigurationIncomplete,
    ConfigurationOutOfRange,
    FieldError,
)
from .normalizer import NormalizedConfiguration, normalize
from .schemas import CalculationConfiguration


logger = logging.getLogger(__name__)

_INPUT_METHOD_TAGS = {"rack_count", "total_power", "auto_optimize", "manual_config"}
_TAGGED_SECTIONS = {"air_cooling", "immersion_cooling"}

# Fields for which a non-positive value means "not supplied"
_QUANTITY_FIELDS = {
    "rack_count",
    "power_per_rack_kw",
    "total_power_kw",
    "target_power_kw",
    "quantity",
    "power_density_kw_per_u",
}

_INCOMPLETE_ERROR_TYPES = {"missing", "union_tag_not_found"}
_LOWER_BOUND_ERROR_TYPES = {"greater_than", "greater_than_equal"}

# Input field name -> VALIDATION_LIMITS key
LIMIT_KEYS = {
    "rack_count": "rack_count",
    "power_per_rack_kw": "power_per_rack_kw",
    "total_power_kw": "total_power_kw",
    "target_power_kw": "total_power_kw",
    "quantity": "tank_quantity",
    "tank_configurations": "tank_configurations",
    "power_density_kw_per_u": "power_density_kw_per_u",
    "hvac_efficiency": "efficiency",
    "power_distribution_efficiency": "efficiency",
    "pumping_efficiency": "efficiency",
    "heat_exchanger_efficiency": "efficiency",
    "analysis_years": "analysis_years",
    "discount_rate": "discount_rate",
    "custom_discount_rate": "discount_rate",
    "energy_cost_kwh": "energy_cost_kwh",
    "custom_energy_cost": "energy_cost_kwh",
    "energy_escalation_rate": "escalation_rate",
    "maintenance_escalation_rate": "escalation_rate",
    "labor_escalation_rate": "escalation_rate",
    "labor_cost_per_hour": "labor_cost_per_hour",
    "custom_labor_cost": "labor_cost_per_hour",
    "co2_tons_per_mwh": "co2_tons_per_mwh",
    "avg_home_annual_mwh": "avg_home_annual_mwh",
    "avg_car_annual_tons_co2": "avg_car_annual_tons_co2",
    "water_gallons_per_mwh": "water_gallons_per_mwh",
    "trees_per_ton_co2": "trees_per_ton_co2",
}


@dataclass
class ValidationReport:
    """
    Outcome of validating one configuration.

    Errors are split by kind. ``configuration`` and ``normalized`` hold the
    parsed and resolved input when validation got that far.
    """

    incomplete: List[FieldError] = field(default_factory=list)
    out_of_range: List[FieldError] = field(default_factory=list)
    warnings: List[FieldError] = field(default_factory=list)
    estimated_processing_time_ms: Optional[int] = None

    configuration: Optional[CalculationConfiguration] = None
    normalized: Optional[NormalizedConfiguration] = None

    @property
    def errors(self) -> List[FieldError]:
        return self.incomplete + self.out_of_range

    @property
    def valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """
        Raise the configuration error matching the report.

        Raises:
            ConfigurationIncomplete: if any field is missing for its input method
            ConfigurationOutOfRange: if only bound violations were found
        """
        if self.incomplete:
            raise ConfigurationIncomplete(self.errors)
        if self.out_of_range:
            raise ConfigurationOutOfRange(self.out_of_range)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "estimated_processing_time_ms": self.estimated_processing_time_ms,
        }

    def summary(self) -> str:
        lines = [
            "CONFIGURATION VALIDATION",
            "=" * 50,
            f"Status: {'VALID' if self.valid else 'INVALID'}",
        ]
        for error in self.errors:
            lines.append(f"  ERROR   {error.field}: {error.message}")
        for warning in self.warnings:
            lines.append(f"  WARNING {warning.field}: {warning.message}")
        if self.estimated_processing_time_ms is not None:
            lines.append(f"Estimated processing time: {self.estimated_processing_time_ms} ms")
        lines.append("=" * 50)
        return "\n".join(lines)


# ============================================================================
# Pydantic error translation
# ============================================================================

def _field_path(loc) -> str:
    parts = [str(part) for part in loc]
    # Drop the discriminator tag pydantic inserts into union locations
    if len(parts) > 2 and parts[0] in _TAGGED_SECTIONS and parts[1] in _INPUT_METHOD_TAGS:
        del parts[1]
    return ".".join(parts) or "configuration"


def _suggestion(path: str) -> Optional[str]:
    leaf = path.rsplit(".", 1)[-1]
    key = LIMIT_KEYS.get(leaf)
    if key is None:
        return None
    low, high = VALIDATION_LIMITS[key]
    return f"Use a value between {low} and {high}"


def clip_to_limits(path: str, value: float) -> float:
    """
    Pull a value inside the hard bounds of the field at path.

    Fields without a known bound are returned unchanged. The discount rate
    upper bound is exclusive.
    """
    key = LIMIT_KEYS.get(path.rsplit(".", 1)[-1])
    if key is None:
        return value
    low, high = VALIDATION_LIMITS[key]
    if key == "discount_rate":
        high = float(np.nextafter(high, low))
    return float(np.clip(value, low, high))


def _is_incomplete(error: Mapping[str, Any], path: str) -> bool:
    if error["type"] in _INCOMPLETE_ERROR_TYPES:
        return True
    if error["type"] in _LOWER_BOUND_ERROR_TYPES:
        leaf = path.rsplit(".", 1)[-1]
        value = error.get("input")
        return leaf in _QUANTITY_FIELDS and isinstance(value, (int, float)) and value <= 0
    return False


def _translate(exc: ValidationError, report: ValidationReport) -> None:
    for error in exc.errors():
        path = _field_path(error["loc"])
        record = FieldError(path, error["msg"], _suggestion(path))
        if _is_incomplete(error, path):
            report.incomplete.append(record)
        else:
            report.out_of_range.append(record)


# ============================================================================
# Soft warnings
# ============================================================================

@dataclass(frozen=True)
class SoftLimit:
    """An advisory threshold on a resolved input value."""

    field: str
    threshold: float
    message: str
    value: Callable[[CalculationConfiguration, NormalizedConfiguration], Optional[float]]
    suggestion: Optional[str] = None

    def check(self, config, normalized) -> Optional[FieldError]:
        value = self.value(config, normalized)
        if value is None or value <= self.threshold:
            return None
        return FieldError(
            self.field,
            self.message.format(value=value, threshold=self.threshold),
            self.suggestion,
        )


def _rack_count(config, normalized):
    return getattr(config.air_cooling, "rack_count", None)


SOFT_LIMITS = (
    SoftLimit(
        "air_cooling.rack_count", WARNING_THRESHOLDS["rack_count"],
        "High rack count may result in less accurate estimates",
        _rack_count,
        "Consider breaking down into smaller deployments",
    ),
    SoftLimit(
        "financial.analysis_years", WARNING_THRESHOLDS["analysis_years"],
        "Long-term projections have higher uncertainty",
        lambda config, normalized: normalized.financial.analysis_years,
        "Consider focusing on 3-7 year analysis periods",
    ),
    SoftLimit(
        "financial.discount_rate", WARNING_THRESHOLDS["discount_rate"],
        "Discount rate of {value:.0%} is unusually high",
        lambda config, normalized: normalized.financial.discount_rate,
    ),
    SoftLimit(
        "financial.energy_escalation_rate", WARNING_THRESHOLDS["escalation_rate"],
        "Energy escalation of {value:.0%} per year compounds quickly",
        lambda config, normalized: normalized.financial.energy_escalation_rate,
    ),
    SoftLimit(
        "financial.maintenance_escalation_rate", WARNING_THRESHOLDS["escalation_rate"],
        "Maintenance escalation of {value:.0%} per year compounds quickly",
        lambda config, normalized: normalized.financial.maintenance_escalation_rate,
    ),
    SoftLimit(
        "financial.labor_escalation_rate", WARNING_THRESHOLDS["escalation_rate"],
        "Labor escalation of {value:.0%} per year compounds quickly",
        lambda config, normalized: normalized.financial.labor_escalation_rate,
    ),
)


def _collect_warnings(config: CalculationConfiguration,
                      normalized: NormalizedConfiguration) -> List[FieldError]:
    warnings = [w for w in (limit.check(config, normalized) for limit in SOFT_LIMITS) if w]

    air = normalized.air_cooling.efficiency_product
    immersion = normalized.immersion_cooling.efficiency_product
    if immersion < air:
        warnings.append(FieldError(
            "immersion_cooling",
            "Immersion efficiency factors are worse than air cooling; PUE will favor air",
            suggestion="Check pumping and heat exchanger efficiencies",
        ))
    return warnings


def estimate_processing_time_ms(normalized: NormalizedConfiguration) -> int:
    tank_groups = len(normalized.immersion_cooling.tank_groups)
    years = normalized.financial.analysis_years
    return min(100 + 10 * tank_groups + 20 * years, 5000)


# ============================================================================
# Entry point
# ============================================================================

def validate(
    config: Union[CalculationConfiguration, Mapping[str, Any]],
) -> ValidationReport:
    """
    Validate a configuration without calculating.

    Args:
        config: Parsed configuration or a plain mapping (e.g. decoded JSON)

    Returns:
        ValidationReport; never raises for bad input
    """
    report = ValidationReport()

    if isinstance(config, CalculationConfiguration):
        parsed = config
    else:
        try:
            parsed = CalculationConfiguration.model_validate(config)
        except ValidationError as exc:
            _translate(exc, report)
            logger.debug("Configuration rejected with %d errors", len(report.errors))
            return report

    report.configuration = parsed

    try:
        normalized = normalize(parsed)
    except ConfigurationIncomplete as exc:
        report.incomplete.extend(exc.errors)
        return report

    report.normalized = normalized
    report.warnings = _collect_warnings(parsed, normalized)
    report.estimated_processing_time_ms = estimate_processing_time_ms(normalized)
    return report
