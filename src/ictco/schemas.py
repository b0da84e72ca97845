"""
Pydantic models for the calculation input contract.

Each cooling strategy is a tagged union keyed by ``input_method``; the
normalizer resolves whichever variant arrives into one canonical shape.
Method-specific fields are optional here so that a missing field is
reported as an incomplete configuration rather than a type error.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import VALIDATION_LIMITS


Currency = Literal["USD", "EUR", "SAR", "AED"]
Region = Literal["US", "EU", "ME"]

_EFF_MIN, _EFF_MAX = VALIDATION_LIMITS["efficiency"]
_ESC_MIN, _ESC_MAX = VALIDATION_LIMITS["escalation_rate"]


class _InputModel(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)


# ============================================================================
# Air cooling
# ============================================================================

class _AirCoolingBase(_InputModel):
    hvac_efficiency: Optional[float] = Field(
        default=None, ge=_EFF_MIN, le=_EFF_MAX, description="HVAC efficiency factor",
    )
    power_distribution_efficiency: Optional[float] = Field(
        default=None, ge=_EFF_MIN, le=_EFF_MAX, description="Power distribution efficiency factor",
    )


class RackCountInput(_AirCoolingBase):
    """Air cooling sized from an explicit rack count."""

    input_method: Literal["rack_count"] = "rack_count"
    rack_count: Optional[int] = Field(
        default=None,
        ge=VALIDATION_LIMITS["rack_count"][0],
        le=VALIDATION_LIMITS["rack_count"][1],
        description="Number of 42U racks",
    )
    power_per_rack_kw: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["power_per_rack_kw"][0],
        le=VALIDATION_LIMITS["power_per_rack_kw"][1],
        description="IT power per rack in kW",
    )
    rack_type: Optional[str] = None


class TotalPowerInput(_AirCoolingBase):
    """Air cooling sized from a total IT load."""

    input_method: Literal["total_power"] = "total_power"
    total_power_kw: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["total_power_kw"][0],
        le=VALIDATION_LIMITS["total_power_kw"][1],
        description="Total IT power in kW",
    )


AirCoolingInput = Annotated[
    Union[RackCountInput, TotalPowerInput],
    Field(discriminator="input_method"),
]


# ============================================================================
# Immersion cooling
# ============================================================================

class TankConfiguration(_InputModel):
    """One group of identical immersion tanks."""

    size: str = Field(..., pattern=r"^\d+U$", examples=["23U"])
    quantity: int = Field(
        ...,
        ge=VALIDATION_LIMITS["tank_quantity"][0],
        le=VALIDATION_LIMITS["tank_quantity"][1],
    )
    power_density_kw_per_u: float = Field(
        ...,
        ge=VALIDATION_LIMITS["power_density_kw_per_u"][0],
        le=VALIDATION_LIMITS["power_density_kw_per_u"][1],
    )

    @property
    def height_units(self) -> int:
        return int(self.size[:-1])


class _ImmersionCoolingBase(_InputModel):
    pumping_efficiency: Optional[float] = Field(
        default=None, ge=_EFF_MIN, le=_EFF_MAX, description="Pumping efficiency factor",
    )
    heat_exchanger_efficiency: Optional[float] = Field(
        default=None, ge=_EFF_MIN, le=_EFF_MAX, description="Heat exchanger efficiency factor",
    )
    coolant_type: Optional[str] = None


class AutoOptimizeInput(_ImmersionCoolingBase):
    """Immersion cooling sized automatically from a target IT load."""

    input_method: Literal["auto_optimize"] = "auto_optimize"
    target_power_kw: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["total_power_kw"][0],
        le=VALIDATION_LIMITS["total_power_kw"][1],
        description="Target IT power in kW",
    )


class ManualConfigInput(_ImmersionCoolingBase):
    """Immersion cooling from an explicit list of tank groups."""

    input_method: Literal["manual_config"] = "manual_config"
    tank_configurations: Optional[List[TankConfiguration]] = Field(
        default=None,
        max_length=VALIDATION_LIMITS["tank_configurations"][1],
    )


ImmersionCoolingInput = Annotated[
    Union[AutoOptimizeInput, ManualConfigInput],
    Field(discriminator="input_method"),
]


# ============================================================================
# Financial and environmental
# ============================================================================

class FinancialInput(_InputModel):
    """Financial assumptions. ``None`` means use the default."""

    analysis_years: int = Field(
        default=5,
        ge=VALIDATION_LIMITS["analysis_years"][0],
        le=VALIDATION_LIMITS["analysis_years"][1],
    )
    discount_rate: Optional[float] = Field(default=None, ge=0.0, lt=0.5)
    energy_cost_kwh: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["energy_cost_kwh"][0],
        le=VALIDATION_LIMITS["energy_cost_kwh"][1],
    )
    energy_escalation_rate: Optional[float] = Field(default=None, ge=_ESC_MIN, le=_ESC_MAX)
    maintenance_escalation_rate: Optional[float] = Field(default=None, ge=_ESC_MIN, le=_ESC_MAX)
    labor_escalation_rate: Optional[float] = Field(default=None, ge=_ESC_MIN, le=_ESC_MAX)
    labor_cost_per_hour: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["labor_cost_per_hour"][0],
        le=VALIDATION_LIMITS["labor_cost_per_hour"][1],
    )
    currency: Currency
    region: Region = "US"

    # Legacy overrides, take precedence when present
    custom_discount_rate: Optional[float] = Field(default=None, ge=0.0, lt=0.5)
    custom_energy_cost: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["energy_cost_kwh"][0],
        le=VALIDATION_LIMITS["energy_cost_kwh"][1],
    )
    custom_labor_cost: Optional[float] = Field(
        default=None,
        ge=VALIDATION_LIMITS["labor_cost_per_hour"][0],
        le=VALIDATION_LIMITS["labor_cost_per_hour"][1],
    )


def _factor(name: str, positive: bool = False):
    low, high = VALIDATION_LIMITS[name]
    if positive:
        return Field(default=None, gt=low, le=high)
    return Field(default=None, ge=low, le=high)


class EnvironmentalInput(_InputModel):
    """Conversion factors for environmental equivalents. Omitted factors are missing."""

    co2_tons_per_mwh: Optional[float] = _factor("co2_tons_per_mwh")
    avg_home_annual_mwh: Optional[float] = _factor("avg_home_annual_mwh", positive=True)
    avg_car_annual_tons_co2: Optional[float] = _factor("avg_car_annual_tons_co2", positive=True)
    water_gallons_per_mwh: Optional[float] = _factor("water_gallons_per_mwh")
    trees_per_ton_co2: Optional[float] = _factor("trees_per_ton_co2")


class CalculationConfiguration(_InputModel):
    """Complete input for one TCO calculation."""

    air_cooling: AirCoolingInput
    immersion_cooling: ImmersionCoolingInput
    financial: FinancialInput
    environmental: Optional[EnvironmentalInput] = None
