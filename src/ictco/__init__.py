"""
Immersion Cooling TCO (ICTCO)
=============================

Deterministic total-cost-of-ownership comparison between conventional air
cooling and immersion cooling for data centers: CAPEX and year-by-year
OPEX, discounted cash-flow metrics (NPV, payback, ROI, IRR), PUE and
environmental impact, and chart-ready series.

Example:
    >>> from ictco import calculate
    >>> result = calculate(config)
    >>> print(result.summary())
"""

__version__ = "0.1.0"

from .exceptions import (
    FieldError,
    TCOError,
    ConfigurationError,
    ConfigurationIncomplete,
    ConfigurationOutOfRange,
    CatalogLookupMissing,
    CalculationError,
)

from .schemas import (
    CalculationConfiguration,
    RackCountInput,
    TotalPowerInput,
    AutoOptimizeInput,
    ManualConfigInput,
    TankConfiguration,
    FinancialInput,
    EnvironmentalInput,
)

from .catalog import (
    EquipmentPricing,
    PriceCatalog,
    default_catalog,
)

from .normalizer import (
    CoolingSystemSpec,
    TankGroup,
    FinancialAssumptions,
    EnvironmentalFactors,
    NormalizedConfiguration,
    normalize,
)

from .capex import CapexBreakdown, CapexComparison, calculate_capex
from .opex import OpexProjection, OpexYear, project_opex
from .financial import FinancialMetrics, calculate_financials
from .environmental import (
    PUEAnalysis,
    EnvironmentalImpact,
    power_usage_effectiveness,
)
from .charts import ChartData
from .digest import configuration_digest

from .validation import ValidationReport, validate

from .engine import (
    TCOCalculationEngine,
    CalculationResult,
    CalculationSummary,
    CalculationBreakdown,
    calculate,
)

from .scenarios import Scenario, ScenarioComparison, compare_scenarios
from .sensitivity import SensitivityParameter, SensitivityResult, run_sensitivity_analysis

__all__ = [
    # Errors
    "FieldError",
    "TCOError",
    "ConfigurationError",
    "ConfigurationIncomplete",
    "ConfigurationOutOfRange",
    "CatalogLookupMissing",
    "CalculationError",
    # Input
    "CalculationConfiguration",
    "RackCountInput",
    "TotalPowerInput",
    "AutoOptimizeInput",
    "ManualConfigInput",
    "TankConfiguration",
    "FinancialInput",
    "EnvironmentalInput",
    # Catalog
    "EquipmentPricing",
    "PriceCatalog",
    "default_catalog",
    # Normalization
    "CoolingSystemSpec",
    "TankGroup",
    "FinancialAssumptions",
    "EnvironmentalFactors",
    "NormalizedConfiguration",
    "normalize",
    # Components
    "CapexBreakdown",
    "CapexComparison",
    "calculate_capex",
    "OpexProjection",
    "OpexYear",
    "project_opex",
    "FinancialMetrics",
    "calculate_financials",
    "PUEAnalysis",
    "EnvironmentalImpact",
    "power_usage_effectiveness",
    "ChartData",
    "configuration_digest",
    # Entry points
    "ValidationReport",
    "validate",
    "TCOCalculationEngine",
    "CalculationResult",
    "CalculationSummary",
    "CalculationBreakdown",
    "calculate",
    # Analysis
    "Scenario",
    "ScenarioComparison",
    "compare_scenarios",
    "SensitivityParameter",
    "SensitivityResult",
    "run_sensitivity_analysis",
]
