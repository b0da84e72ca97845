#!/usr/bin/env python3
"""
ICTCO Quickstart Example
========================
Demonstrates core functionality in a few lines.
"""

from ictco import calculate, validate, compare_scenarios, Scenario, default_catalog

config = {
    "air_cooling": {"input_method": "rack_count", "rack_count": 20, "power_per_rack_kw": 15},
    "immersion_cooling": {"input_method": "auto_optimize", "target_power_kw": 300},
    "financial": {"currency": "USD", "analysis_years": 5, "discount_rate": 0.08},
}

# 1. Pre-flight check
report = validate(config)
print(f"Valid: {report.valid} | Warnings: {len(report.warnings)}")

# 2. Full calculation
result = calculate(config)
s = result.summary_metrics
print(f"TCO savings: {s.total_tco_savings_5yr:,.0f} USD | NPV: {s.npv_tco_savings:,.0f} USD")
print(f"PUE: {s.pue_air_cooling:.2f} -> {s.pue_immersion_cooling:.2f}")

# 3. Another currency, priced through a converted catalog
config_eur = {**config, "financial": {**config["financial"], "currency": "EUR"}}
result_eur = calculate(config_eur, catalog=default_catalog().converted("EUR", 0.92))
print(f"CAPEX (EUR): {result_eur.breakdown.capex.immersion_cooling.total:,.0f}")

# 4. What if power gets expensive?
comparison = compare_scenarios(config, [
    Scenario("Expensive power", {"financial.energy_cost_kwh": 0.25}),
])
delta = comparison.comparison_metrics["tco_savings"][0]
print(f"{delta.scenario}: {delta.difference_from_base:+,.0f} USD TCO savings")
