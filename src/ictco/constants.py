"""
Default parameters for the immersion cooling TCO engine.

Catalog prices, financial assumptions, validation limits and the regional
tables used to fill omitted inputs. Every table is read-only; callers that
need different numbers pass them in through the configuration or a
custom PriceCatalog instead of mutating these.
"""

from dataclasses import dataclass
from types import MappingProxyType


HOURS_PER_YEAR = 8760
CALCULATION_VERSION = "1.0"

SUPPORTED_CURRENCIES = ("USD", "EUR", "SAR", "AED")
SUPPORTED_REGIONS = ("US", "EU", "ME")
DEFAULT_CURRENCY = "USD"
DEFAULT_REGION = "US"


@dataclass(frozen=True)
class RackDefaults:
    """Standard 42U air-cooled rack."""

    height_units: int = 42
    power_capacity_kw: float = 15.0
    labor_hours_per_year: float = 24.0


@dataclass(frozen=True)
class HVACDefaults:
    """CRAC unit sizing and efficiency for air cooling."""

    unit_capacity_kw: float = 30.0
    efficiency: float = 0.85
    power_distribution_efficiency: float = 0.95


@dataclass(frozen=True)
class TankDefaults:
    """Standard immersion tank used by auto-optimization."""

    height_units: int = 23
    power_density_kw_per_u: float = 2.0
    coolant_liters_per_u: float = 25.0
    labor_hours_per_year: float = 8.0

    # Balance-of-plant sharing
    tanks_per_pump_skid: float = 10.0
    tanks_per_heat_exchanger: float = 15.0

    pumping_efficiency: float = 0.92
    heat_exchanger_efficiency: float = 0.95

    @property
    def power_capacity_kw(self) -> float:
        return self.height_units * self.power_density_kw_per_u


@dataclass(frozen=True)
class CoolantDefaults:
    """Dielectric coolant replenishment policy."""

    replacement_interval_years: int = 2   # 24-month cycle
    replacement_fraction: float = 0.10    # Top-up share of fill volume


@dataclass(frozen=True)
class MaintenanceDefaults:
    """Maintenance schedule assumptions."""

    major_overhaul_interval_years: int = 5
    major_overhaul_multiplier: float = 2.0


RACK_42U = RackDefaults()
HVAC = HVACDefaults()
TANK_23U = TankDefaults()
COOLANT = CoolantDefaults()
MAINTENANCE = MaintenanceDefaults()


# Catalog unit prices in USD, keyed by (category, subcategory).
# equipment_cost / installation_cost are per unit; for "infrastructure" they
# are per kW of rated IT power, for "coolant" per liter, for "pump" per skid
# and for "heat_exchanger" per exchanger.
DEFAULT_PRICES_USD = MappingProxyType({
    ("air_cooling", "rack"): {
        "equipment_cost": 2_500.0,
        "installation_cost": 1_000.0,
        "maintenance_annual_pct": 0.08,
    },
    ("air_cooling", "hvac"): {
        "equipment_cost": 25_000.0,
        "installation_cost": 8_000.0,
        "maintenance_annual_pct": 0.08,
    },
    ("air_cooling", "infrastructure"): {
        "equipment_cost": 500.0,
        "installation_cost": 0.0,
        "maintenance_annual_pct": 0.0,
    },
    ("immersion_cooling", "tank"): {
        "equipment_cost": 35_000.0,     # 23U reference tank
        "installation_cost": 8_750.0,   # 25% of equipment
        "maintenance_annual_pct": 0.03,
    },
    ("immersion_cooling", "pump"): {
        "equipment_cost": 8_000.0,
        "installation_cost": 0.0,
        "maintenance_annual_pct": 0.03,
    },
    ("immersion_cooling", "heat_exchanger"): {
        "equipment_cost": 5_000.0,
        "installation_cost": 0.0,
        "maintenance_annual_pct": 0.03,
    },
    ("immersion_cooling", "coolant"): {
        "equipment_cost": 25.0,
        "installation_cost": 0.0,
        "maintenance_annual_pct": 0.0,
    },
    ("immersion_cooling", "infrastructure"): {
        "equipment_cost": 200.0,
        "installation_cost": 0.0,
        "maintenance_annual_pct": 0.0,
    },
})


FINANCIAL_DEFAULTS = MappingProxyType({
    "analysis_years": 5,
    "discount_rate": 0.08,
    "energy_escalation_rate": 0.03,
    "maintenance_escalation_rate": 0.025,
    "labor_escalation_rate": 0.04,
})

# Per kWh, in the region's usual billing currency
REGIONAL_ENERGY_COST = MappingProxyType({"US": 0.12, "EU": 0.28, "ME": 0.08})

# Technician hourly rate
REGIONAL_LABOR_COST = MappingProxyType({"US": 75.0, "EU": 65.0, "ME": 45.0})

# Published conversion factors for environmental equivalents
REGIONAL_ENVIRONMENTAL_FACTORS = MappingProxyType({
    region: MappingProxyType({
        "co2_tons_per_mwh": co2,
        "avg_home_annual_mwh": 10.812,
        "avg_car_annual_tons_co2": 4.6,
        "water_gallons_per_mwh": 500.0,
        "trees_per_ton_co2": 16.5,
    })
    for region, co2 in (("US", 0.4), ("EU", 0.3), ("ME", 0.5))
})


# Hard bounds enforced on input (min, max)
VALIDATION_LIMITS = MappingProxyType({
    "rack_count": (1, 1000),
    "power_per_rack_kw": (0.5, 50.0),
    "total_power_kw": (1.0, 50_000.0),
    "tank_quantity": (1, 500),
    "tank_configurations": (1, 50),
    "power_density_kw_per_u": (0.5, 5.0),
    "efficiency": (0.1, 1.0),
    "analysis_years": (1, 10),
    "discount_rate": (0.0, 0.5),
    "energy_cost_kwh": (0.01, 1.0),
    "escalation_rate": (-0.2, 0.2),
    "labor_cost_per_hour": (10.0, 200.0),
    "co2_tons_per_mwh": (0.0, 5.0),
    "avg_home_annual_mwh": (0.0, 100.0),
    "avg_car_annual_tons_co2": (0.0, 100.0),
    "water_gallons_per_mwh": (0.0, 10_000.0),
    "trees_per_ton_co2": (0.0, 1000.0),
})

# Soft thresholds that only produce validation warnings
WARNING_THRESHOLDS = MappingProxyType({
    "rack_count": 500,
    "analysis_years": 7,
    "discount_rate": 0.25,
    "escalation_rate": 0.10,
})
