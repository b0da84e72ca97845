"""
FastAPI Backend for the Immersion Cooling TCO Calculator.

Provides REST API endpoints for:
- Configuration validation
- TCO calculation
- Scenario comparison
- Sensitivity analysis
- Default configuration values

Run with: uvicorn main:app --reload --port 8000
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any
from datetime import datetime, timezone
import logging
import os
import sys
import time

# Add src directory to path for ictco imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from ictco import (
    CatalogLookupMissing,
    ConfigurationError,
    ConfigurationIncomplete,
    PriceCatalog,
    Scenario,
    SensitivityParameter,
    __version__,
    compare_scenarios,
    default_catalog,
    run_sensitivity_analysis,
    validate,
    calculate,
)
from ictco.constants import (
    CALCULATION_VERSION,
    FINANCIAL_DEFAULTS,
    REGIONAL_ENERGY_COST,
    REGIONAL_ENVIRONMENTAL_FACTORS,
    REGIONAL_LABOR_COST,
    SUPPORTED_CURRENCIES,
    SUPPORTED_REGIONS,
    VALIDATION_LIMITS,
)


logger = logging.getLogger(__name__)


# ============================================================================
# FastAPI App Configuration
# ============================================================================

app = FastAPI(
    title="Immersion Cooling TCO API",
    description="Total cost of ownership comparison of air and immersion cooling",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS for browser frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class CalculationRequest(BaseModel):
    """Request for validation or calculation."""

    configuration: Dict[str, Any] = Field(..., description="Calculation configuration")
    exchange_rate: Optional[float] = Field(
        default=None, gt=0, description="Units of the configured currency per USD",
    )


class ScenarioRequest(BaseModel):
    name: str
    description: str = ""
    changes: Dict[str, Any] = Field(..., description="Dotted-path configuration changes")


class ScenarioComparisonRequest(CalculationRequest):
    scenarios: List[ScenarioRequest] = Field(..., min_length=1, max_length=10)
    metrics: List[str] = Field(
        default=["tco_savings", "npv_tco_savings", "roi_percent", "payback_months"],
    )


class SensitivityRequest(CalculationRequest):
    parameters: List[str] = Field(
        default=[
            "financial.energy_cost_kwh",
            "financial.discount_rate",
            "financial.energy_escalation_rate",
        ],
        max_length=10,
    )
    variation_percent: float = Field(default=20.0, gt=0, le=90)
    steps: int = Field(default=5, ge=2, le=21)


# ============================================================================
# Helpers
# ============================================================================

def _meta(**extra) -> Dict[str, Any]:
    return {"timestamp": datetime.now(timezone.utc).isoformat(), **extra}


def _catalog(request: CalculationRequest) -> PriceCatalog:
    catalog = default_catalog()
    if request.exchange_rate is None:
        return catalog
    financial = request.configuration.get("financial")
    currency = financial.get("currency", "USD") if isinstance(financial, dict) else "USD"
    try:
        return catalog.converted(currency, request.exchange_rate)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={
            "code": "INVALID_CURRENCY", "message": str(e),
        })


def _error_detail(exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, ConfigurationError):
        code = (
            "INCOMPLETE_CONFIGURATION" if isinstance(exc, ConfigurationIncomplete)
            else "INVALID_CONFIGURATION"
        )
        return {
            "code": code,
            "message": str(exc),
            "details": [e.to_dict() for e in exc.errors],
        }
    return {"code": "CATALOG_LOOKUP_MISSING", "message": str(exc)}


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


@app.get("/api/v1/config/defaults")
async def get_defaults():
    """Defaults used to fill omitted configuration values."""
    return {
        "currencies": list(SUPPORTED_CURRENCIES),
        "regions": list(SUPPORTED_REGIONS),
        "financial": dict(FINANCIAL_DEFAULTS),
        "energy_cost_kwh": dict(REGIONAL_ENERGY_COST),
        "labor_cost_per_hour": dict(REGIONAL_LABOR_COST),
        "environmental": {
            region: dict(factors) for region, factors in REGIONAL_ENVIRONMENTAL_FACTORS.items()
        },
        "limits": {name: list(bounds) for name, bounds in VALIDATION_LIMITS.items()},
        "catalog": default_catalog().fingerprint(),
    }


@app.post("/api/v1/calculations/validate")
async def validate_configuration(request: CalculationRequest):
    """Validate a configuration without calculating."""
    report = validate(request.configuration)
    if not report.valid:
        raise HTTPException(status_code=400, detail={
            "code": "VALIDATION_ERROR",
            "message": "Invalid configuration parameters",
            "details": [e.to_dict() for e in report.errors],
        })
    return {"success": True, "data": report.to_dict(), "meta": _meta()}


@app.post("/api/v1/calculations/calculate")
async def calculate_tco(request: CalculationRequest):
    """Perform a complete TCO calculation."""
    start = time.perf_counter()
    try:
        result = calculate(request.configuration, catalog=_catalog(request))
    except (ConfigurationError, CatalogLookupMissing) as e:
        logger.info("Calculation rejected: %s", e)
        raise HTTPException(status_code=400, detail=_error_detail(e))

    return {
        "success": True,
        "data": result.to_dict(),
        "meta": _meta(
            version=CALCULATION_VERSION,
            currency=result.currency,
            processing_time_ms=round((time.perf_counter() - start) * 1000, 1),
        ),
    }


@app.post("/api/v1/calculations/scenarios")
async def compare(request: ScenarioComparisonRequest):
    """Compare named variations of a base configuration."""
    scenarios = [Scenario(s.name, s.changes, s.description) for s in request.scenarios]
    try:
        comparison = compare_scenarios(
            request.configuration, scenarios, request.metrics, catalog=_catalog(request),
        )
    except (ConfigurationError, CatalogLookupMissing) as e:
        raise HTTPException(status_code=400, detail=_error_detail(e))
    except AttributeError as e:
        raise HTTPException(status_code=400, detail={"code": "UNKNOWN_METRIC", "message": str(e)})

    return {"success": True, "data": comparison.to_dict(), "meta": _meta()}


@app.post("/api/v1/calculations/sensitivity")
async def sensitivity(request: SensitivityRequest):
    """One-at-a-time sensitivity analysis."""
    parameters = [
        SensitivityParameter(name, variation_percent=request.variation_percent, steps=request.steps)
        for name in request.parameters
    ]
    try:
        result = run_sensitivity_analysis(
            request.configuration, parameters, catalog=_catalog(request),
        )
    except (ConfigurationError, CatalogLookupMissing) as e:
        raise HTTPException(status_code=400, detail=_error_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "UNKNOWN_PARAMETER", "message": str(e)})

    return {"success": True, "data": result.to_dict(), "meta": _meta()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
