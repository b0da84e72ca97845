"""
Test suite for the TCO calculation components.

Run with: pytest tests/test_ictco.py -v
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose


def make_config(**sections):
    """10 racks x 15 kW vs 150 kW auto-optimized immersion, USD defaults."""
    config = {
        "air_cooling": {
            "input_method": "rack_count",
            "rack_count": 10,
            "power_per_rack_kw": 15.0,
        },
        "immersion_cooling": {
            "input_method": "auto_optimize",
            "target_power_kw": 150.0,
        },
        "financial": {"currency": "USD"},
    }
    for name, values in sections.items():
        if values is None:
            config[name] = None
        elif name in config and not values.get("input_method"):
            config[name] = {**config[name], **values}
        else:
            config[name] = values
    return config


def normalized(**sections):
    from ictco import CalculationConfiguration, normalize

    return normalize(CalculationConfiguration.model_validate(make_config(**sections)))


AIR_PUE = 1 / (0.85 * 0.95)
IMMERSION_PUE = 1 / (0.92 * 0.95)


class TestCatalog:
    """Test price catalog lookup and currency handling."""

    def test_default_catalog_lookup(self):
        from ictco import default_catalog

        catalog = default_catalog()
        rack = catalog.lookup("air_cooling", "rack", "USD")
        assert rack.equipment_cost == 2500.0
        assert rack.installation_cost == 1000.0
        assert rack.maintenance_annual_pct == 0.08
        assert catalog.currencies() == ("USD",)

    def test_missing_entry_raises(self):
        from ictco import default_catalog, CatalogLookupMissing

        with pytest.raises(CatalogLookupMissing) as exc_info:
            default_catalog().lookup("air_cooling", "rack", "EUR")
        assert exc_info.value.currency == "EUR"
        assert "air_cooling/rack" in str(exc_info.value)

    def test_converted_catalog(self):
        from ictco import default_catalog

        eur = default_catalog().converted("EUR", 0.9)
        tank = eur.lookup("immersion_cooling", "tank", "EUR")
        assert tank.equipment_cost == pytest.approx(35000 * 0.9)
        assert tank.maintenance_annual_pct == 0.03
        assert ("immersion_cooling", "tank", "USD") not in eur

    def test_converted_rejects_bad_input(self):
        from ictco import default_catalog

        with pytest.raises(ValueError):
            default_catalog().converted("GBP", 0.8)
        with pytest.raises(ValueError):
            default_catalog().converted("EUR", 0)

    def test_conversion_only_through_catalog(self):
        import ictco

        for name in ictco.__all__:
            assert hasattr(ictco, name)
        assert "convert_currency" not in ictco.__all__
        assert not hasattr(ictco.catalog, "convert_currency")

    def test_catalog_is_read_only(self):
        from ictco import default_catalog

        catalog = default_catalog()
        with pytest.raises(TypeError):
            catalog._entries[("air_cooling", "rack", "USD")] = None


class TestNormalizer:
    """Test resolution of input methods into canonical specs."""

    def test_rack_count_method(self):
        config = normalized()
        air = config.air_cooling

        assert air.quantity == 10
        assert air.power_per_unit_kw == 15.0
        assert air.total_rated_power_kw == 150.0
        assert air.efficiency("hvac") == 0.85
        assert air.efficiency("power_distribution") == 0.95
        assert air.tank_groups == ()

    def test_total_power_method(self):
        config = normalized(air_cooling={"input_method": "total_power", "total_power_kw": 100.0})
        air = config.air_cooling

        assert air.quantity == 7
        assert_allclose(air.total_rated_power_kw, 100.0)

    def test_total_power_exact_multiple(self):
        config = normalized(air_cooling={"input_method": "total_power", "total_power_kw": 150.0})
        assert config.air_cooling.quantity == 10
        assert config.air_cooling.power_per_unit_kw == 15.0

    def test_auto_optimize_tank_count(self):
        from ictco.normalizer import optimize_tank_count

        assert optimize_tank_count(46.0) == 1
        assert optimize_tank_count(92.0) == 2
        assert optimize_tank_count(92.01) == 3
        assert optimize_tank_count(150.0) == 4
        assert optimize_tank_count(1.0) == 1

    def test_auto_optimize_spec(self):
        immersion = normalized().immersion_cooling

        assert immersion.quantity == 4
        assert_allclose(immersion.total_rated_power_kw, 150.0)
        assert len(immersion.tank_groups) == 1
        group = immersion.tank_groups[0]
        assert group.height_units == 23
        assert group.quantity == 4
        assert immersion.coolant_liters == 4 * 23 * 25

    def test_manual_config(self):
        config = normalized(immersion_cooling={
            "input_method": "manual_config",
            "tank_configurations": [
                {"size": "42U", "quantity": 2, "power_density_kw_per_u": 2.0},
                {"size": "23U", "quantity": 3, "power_density_kw_per_u": 1.5},
            ],
        })
        immersion = config.immersion_cooling

        assert immersion.quantity == 5
        assert_allclose(immersion.total_rated_power_kw, 42 * 2.0 * 2 + 23 * 1.5 * 3)
        assert immersion.coolant_liters == 42 * 25 * 2 + 23 * 25 * 3
        assert [g.height_units for g in immersion.tank_groups] == [42, 23]

    def test_missing_method_fields(self):
        from ictco import ConfigurationIncomplete

        with pytest.raises(ConfigurationIncomplete) as exc_info:
            normalized(
                air_cooling={"input_method": "rack_count", "rack_count": 10},
                immersion_cooling={"input_method": "auto_optimize"},
            )

        fields = {e.field for e in exc_info.value.errors}
        assert fields == {"air_cooling.power_per_rack_kw", "immersion_cooling.target_power_kw"}

    def test_manual_config_requires_tanks(self):
        from ictco import ConfigurationIncomplete

        with pytest.raises(ConfigurationIncomplete) as exc_info:
            normalized(immersion_cooling={"input_method": "manual_config"})
        assert exc_info.value.errors[0].field == "immersion_cooling.tank_configurations"

    def test_financial_defaults(self):
        financial = normalized().financial

        assert financial.analysis_years == 5
        assert financial.discount_rate == 0.08
        assert financial.energy_cost_per_kwh == 0.12
        assert financial.energy_escalation_rate == 0.03
        assert financial.maintenance_escalation_rate == 0.025
        assert financial.labor_escalation_rate == 0.04
        assert financial.labor_cost_per_hour == 75.0

    def test_regional_defaults(self):
        config = normalized(financial={"currency": "USD", "region": "EU"})

        assert config.financial.energy_cost_per_kwh == 0.28
        assert config.financial.labor_cost_per_hour == 65.0
        assert config.environmental.co2_tons_per_mwh == 0.3

    def test_explicit_zero_is_honored(self):
        config = normalized(financial={"currency": "USD", "energy_escalation_rate": 0.0,
                                       "discount_rate": 0.0})
        assert config.financial.energy_escalation_rate == 0.0
        assert config.financial.discount_rate == 0.0

    def test_custom_overrides_take_precedence(self):
        config = normalized(financial={
            "currency": "USD",
            "energy_cost_kwh": 0.10,
            "custom_energy_cost": 0.15,
            "discount_rate": 0.05,
            "custom_discount_rate": 0.12,
            "custom_labor_cost": 90.0,
        })
        assert config.financial.energy_cost_per_kwh == 0.15
        assert config.financial.discount_rate == 0.12
        assert config.financial.labor_cost_per_hour == 90.0

    def test_partial_environmental_block_keeps_gaps(self):
        config = normalized(environmental={"co2_tons_per_mwh": 0.5})
        assert config.environmental.co2_tons_per_mwh == 0.5
        assert "avg_home_annual_mwh" in config.environmental.missing()


class TestCapex:
    """Test CAPEX calculation."""

    def test_air_cooling_capex(self):
        from ictco import calculate_capex, default_catalog
        from ictco.capex import hvac_units_required

        config = normalized()
        assert hvac_units_required(config.air_cooling) == 2

        capex = calculate_capex(config.air_cooling, config.immersion_cooling,
                                default_catalog(), "USD")
        air = capex.air_cooling
        assert_allclose(air.equipment, 10 * 2500 + 2 * 25000)
        assert_allclose(air.installation, 10 * 1000 + 2 * 8000)
        assert_allclose(air.infrastructure, 150 * 500)
        assert_allclose(air.total, 176000)
        assert air.maintenance_annual_pct == 0.08

    def test_immersion_cooling_capex(self):
        from ictco import calculate_capex, default_catalog

        config = normalized()
        capex = calculate_capex(config.air_cooling, config.immersion_cooling,
                                default_catalog(), "USD")
        immersion = capex.immersion_cooling

        expected_equipment = 4 * 35000 + 0.4 * 8000 + 4 / 15 * 5000 + 2300 * 25
        assert_allclose(immersion.equipment, expected_equipment)
        assert_allclose(immersion.installation, 4 * 8750)
        assert_allclose(immersion.infrastructure, 150 * 200)
        assert_allclose(immersion.total,
                        immersion.equipment + immersion.installation + immersion.infrastructure)

    def test_tank_price_scales_with_height(self):
        from ictco import calculate_capex, default_catalog

        small = normalized(immersion_cooling={
            "input_method": "manual_config",
            "tank_configurations": [{"size": "23U", "quantity": 1, "power_density_kw_per_u": 2.0}],
        })
        large = normalized(immersion_cooling={
            "input_method": "manual_config",
            "tank_configurations": [{"size": "46U", "quantity": 1, "power_density_kw_per_u": 2.0}],
        })
        catalog = default_catalog()
        small_capex = calculate_capex(small.air_cooling, small.immersion_cooling, catalog, "USD")
        large_capex = calculate_capex(large.air_cooling, large.immersion_cooling, catalog, "USD")

        assert_allclose(large_capex.immersion_cooling.installation,
                        2 * small_capex.immersion_cooling.installation)

    def test_capex_savings_by_category(self):
        from ictco import calculate_capex, default_catalog

        config = normalized()
        capex = calculate_capex(config.air_cooling, config.immersion_cooling,
                                default_catalog(), "USD")
        categories = capex.category_savings()

        assert_allclose(sum(categories.values()), capex.savings)
        assert_allclose(categories["infrastructure"], 150 * 500 - 150 * 200)

    def test_missing_currency_in_catalog(self):
        from ictco import calculate_capex, default_catalog, CatalogLookupMissing

        config = normalized()
        with pytest.raises(CatalogLookupMissing):
            calculate_capex(config.air_cooling, config.immersion_cooling, default_catalog(), "EUR")


class TestOpex:
    """Test the year-by-year OPEX projection."""

    def _projection(self, **sections):
        from ictco import calculate_capex, project_opex, default_catalog

        config = normalized(**sections)
        catalog = default_catalog()
        capex = calculate_capex(config.air_cooling, config.immersion_cooling, catalog, "USD")
        return capex, project_opex(config.air_cooling, config.immersion_cooling, capex,
                                   config.financial, catalog)

    def test_year_count(self):
        _, projection = self._projection(financial={"currency": "USD", "analysis_years": 7})
        assert len(projection) == 7
        assert [y.year for y in projection.years] == list(range(1, 8))

    def test_first_year_costs(self):
        capex, projection = self._projection()
        first = projection.years[0]

        assert_allclose(first.air_cooling.energy, 150 * AIR_PUE * 8760 * 0.12)
        assert_allclose(first.immersion_cooling.energy, 150 * IMMERSION_PUE * 8760 * 0.12)
        assert_allclose(first.air_cooling.maintenance, 176000 * 0.08)
        assert_allclose(first.immersion_cooling.maintenance,
                        capex.immersion_cooling.total * 0.03)
        assert_allclose(first.air_cooling.labor, 10 * 24 * 75)
        assert_allclose(first.immersion_cooling.labor, 4 * 8 * 75)
        assert first.immersion_cooling.coolant == 0.0
        assert_allclose(first.air_cooling.energy_mwh, 150 * AIR_PUE * 8.76)

    def test_escalation(self):
        _, projection = self._projection()
        first, second = projection.years[0], projection.years[1]

        assert_allclose(second.air_cooling.energy, first.air_cooling.energy * 1.03)
        assert_allclose(second.air_cooling.maintenance, first.air_cooling.maintenance * 1.025)
        assert_allclose(second.air_cooling.labor, first.air_cooling.labor * 1.04)

    def test_coolant_replacement_interval(self):
        _, projection = self._projection()
        coolant = [y.immersion_cooling.coolant for y in projection.years]

        top_up = 2300 * 25 * 0.10
        assert_allclose(coolant, [0, top_up, 0, top_up, 0])
        assert all(y.air_cooling.coolant == 0 for y in projection.years)

    def test_savings(self):
        _, projection = self._projection()
        for year in projection.years:
            assert_allclose(year.savings, year.air_cooling.total - year.immersion_cooling.total)
            assert_allclose(year.savings_percent, year.savings / year.air_cooling.total * 100)

    def test_zero_escalation_is_flat(self):
        _, projection = self._projection(financial={"currency": "USD", "energy_escalation_rate": 0})
        energy = [y.air_cooling.energy for y in projection.years]
        assert len(set(energy)) == 1

    def test_maintenance_schedule(self):
        _, projection = self._projection()
        schedule = projection.maintenance_schedule()

        assert [s.major_overhaul for s in schedule] == [False, False, False, False, True]
        fifth = projection.years[4]
        assert_allclose(
            schedule[4].major_overhaul_cost,
            2 * (fifth.air_cooling.maintenance + fifth.immersion_cooling.maintenance),
        )
        assert all(s.major_overhaul_cost == 0 for s in schedule[:4])

    def test_escalation_factors(self):
        from ictco.opex import escalation_factors

        factors = escalation_factors(0.05, 3)
        assert factors[0] == 1.0
        assert_allclose(factors, [1.0, 1.05, 1.05 ** 2])


class TestFinancial:
    """Test discounting, payback, ROI and IRR."""

    def _inputs(self, capex_air, capex_immersion, air_totals, immersion_totals):
        from ictco.capex import CapexBreakdown, CapexComparison
        from ictco.opex import OpexProjection, OpexYear, StrategyYearCost

        def cost(total):
            return StrategyYearCost(energy=total, maintenance=0.0, coolant=0.0,
                                    labor=0.0, energy_mwh=0.0)

        capex = CapexComparison(
            air_cooling=CapexBreakdown(capex_air, 0.0, 0.0),
            immersion_cooling=CapexBreakdown(capex_immersion, 0.0, 0.0),
        )
        projection = OpexProjection(years=tuple(
            OpexYear(i + 1, cost(a), cost(m))
            for i, (a, m) in enumerate(zip(air_totals, immersion_totals))
        ))
        return capex, projection

    def test_discount_factors(self):
        from ictco.financial import discount_factors

        assert_allclose(discount_factors(0.08, 3), [1 / 1.08, 1 / 1.08 ** 2, 1 / 1.08 ** 3])
        assert_allclose(discount_factors(0.0, 4), np.ones(4))

    def test_npv_and_payback(self):
        from ictco import calculate_financials

        capex, projection = self._inputs(100.0, 300.0, [150.0] * 3, [50.0] * 3)
        metrics = calculate_financials(capex, projection, 0.1)

        factors = np.array([1 / 1.1, 1 / 1.21, 1 / 1.331])
        assert_allclose(metrics.npv_air_cooling, 100 + 150 * factors.sum())
        assert_allclose(metrics.npv_immersion_cooling, 300 + 50 * factors.sum())
        assert_allclose(metrics.npv_savings, 100 * factors.sum())
        assert_allclose(metrics.npv_tco_savings,
                        metrics.npv_air_cooling - metrics.npv_immersion_cooling)
        assert metrics.total_opex_savings == 300.0
        assert metrics.total_tco_savings == 100.0
        assert metrics.payback_years == pytest.approx(2.0)
        assert metrics.payback_months == pytest.approx(24.0)
        assert metrics.roi_percent == pytest.approx(metrics.npv_tco_savings / 300 * 100)

    def test_no_payback_when_no_savings(self):
        from ictco import calculate_financials

        capex, projection = self._inputs(100.0, 300.0, [50.0] * 3, [80.0] * 3)
        metrics = calculate_financials(capex, projection, 0.08)

        assert metrics.payback_years is None
        assert metrics.payback_months is None
        assert "payback_months" in metrics.degenerate_fields

    def test_immediate_payback(self):
        from ictco import calculate_financials

        capex, projection = self._inputs(300.0, 100.0, [150.0] * 2, [50.0] * 2)
        metrics = calculate_financials(capex, projection, 0.08)
        assert metrics.payback_months == 0.0

    def test_zero_immersion_capex(self):
        from ictco import calculate_financials

        capex, projection = self._inputs(0.0, 0.0, [150.0] * 2, [50.0] * 2)
        metrics = calculate_financials(capex, projection, 0.08)

        assert metrics.roi_percent is None
        assert "roi_percent" in metrics.degenerate_fields
        assert metrics.payback_months == 0.0

    def test_irr(self):
        from ictco.financial import internal_rate_of_return, net_present_value

        assert internal_rate_of_return([-100, 110]) == pytest.approx(0.10, rel=1e-6)
        assert internal_rate_of_return([-100, 60, 60]) == pytest.approx(0.130662, rel=1e-4)
        assert internal_rate_of_return([100, 50]) is None

        irr = internal_rate_of_return([-200, 100, 100, 100])
        assert net_present_value(irr, [-200, 100, 100, 100]) == pytest.approx(0, abs=1e-6)

    def test_irr_reported_in_percent(self):
        from ictco import calculate_financials

        capex, projection = self._inputs(0.0, 100.0, [110.0], [0.0])
        metrics = calculate_financials(capex, projection, 0.05)
        assert metrics.irr_percent == pytest.approx(10.0, rel=1e-6)


class TestEnvironmental:
    """Test PUE and environmental impact."""

    def test_pue(self):
        from ictco import power_usage_effectiveness

        config = normalized()
        assert power_usage_effectiveness(config.air_cooling) == pytest.approx(AIR_PUE)
        assert power_usage_effectiveness(config.immersion_cooling) == pytest.approx(IMMERSION_PUE)

    def test_pue_below_one_rejected(self):
        from ictco import CoolingSystemSpec, ConfigurationOutOfRange, power_usage_effectiveness

        spec = CoolingSystemSpec(
            strategy="air_cooling",
            input_method="rack_count",
            quantity=1,
            power_per_unit_kw=10.0,
            efficiency_factors=(("hvac", 1.2),),
        )
        with pytest.raises(ConfigurationOutOfRange):
            power_usage_effectiveness(spec)

    def test_round_half_up(self):
        from ictco.environmental import round_half_up

        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2
        assert round_half_up(0.0) == 0

    def test_equivalents(self):
        from ictco import calculate

        result = calculate(make_config())
        env = result.environmental
        savings_mwh = 150 * (AIR_PUE - IMMERSION_PUE) * 8.76

        assert env.available is True
        assert_allclose(env.energy_savings_mwh_annual, savings_mwh)
        assert_allclose(env.energy_savings_kwh_annual, savings_mwh * 1000)
        assert_allclose(env.co2_reduction_tons_annual, savings_mwh * 0.4)
        assert_allclose(env.carbon_savings_kg_co2_annual, savings_mwh * 400)
        assert_allclose(env.water_savings_gallons_annual, savings_mwh * 500)
        assert env.homes_equivalent == int(np.floor(savings_mwh / 10.812 + 0.5))
        assert env.cars_equivalent == int(np.floor(savings_mwh * 0.4 / 4.6 + 0.5))
        assert_allclose(env.energy_savings_mwh_total, 5 * savings_mwh)
        assert_allclose(env.energy_reduction_percent,
                        (AIR_PUE - IMMERSION_PUE) / AIR_PUE * 100)

    def test_missing_factor_degrades_gracefully(self):
        from ictco import calculate

        full = calculate(make_config())
        partial = calculate(make_config(environmental={"co2_tons_per_mwh": 0.4}))

        assert partial.environmental.available is False
        assert "avg_home_annual_mwh" in partial.environmental.unavailable_reason
        assert partial.environmental.co2_reduction_tons_annual is None
        assert partial.environmental.homes_equivalent is None
        assert_allclose(partial.environmental.energy_savings_mwh_annual,
                        full.environmental.energy_savings_mwh_annual)
        assert partial.summary_metrics == full.summary_metrics

    def test_huge_factor_is_unavailable(self):
        from ictco import EnvironmentalFactors, calculate_capex, default_catalog, project_opex
        from ictco.environmental import analyze_environmental_impact

        config = normalized()
        catalog = default_catalog()
        capex = calculate_capex(config.air_cooling, config.immersion_cooling, catalog, "USD")
        projection = project_opex(config.air_cooling, config.immersion_cooling, capex,
                                  config.financial, catalog)
        factors = EnvironmentalFactors(
            co2_tons_per_mwh=1e308,
            avg_home_annual_mwh=10.812,
            avg_car_annual_tons_co2=4.6,
            water_gallons_per_mwh=500.0,
            trees_per_ton_co2=16.5,
        )

        env = analyze_environmental_impact(projection, factors)
        assert env.available is False
        assert "co2_reduction_tons_annual" in env.unavailable_reason
        assert env.homes_equivalent is None
        assert env.cars_equivalent is None
        assert env.energy_savings_mwh_annual > 0

    def test_factor_bounds(self):
        from pydantic import ValidationError
        from ictco import EnvironmentalInput

        assert EnvironmentalInput(co2_tons_per_mwh=5.0).co2_tons_per_mwh == 5.0
        for values in ({"co2_tons_per_mwh": 1e308},
                       {"co2_tons_per_mwh": float("inf")},
                       {"trees_per_ton_co2": float("nan")},
                       {"avg_home_annual_mwh": 0.0}):
            with pytest.raises(ValidationError):
                EnvironmentalInput(**values)

    def test_pue_analysis(self):
        from ictco import calculate

        pue = calculate(make_config()).pue_analysis
        assert pue.air_cooling == pytest.approx(AIR_PUE)
        assert pue.improvement_percent == pytest.approx(
            (AIR_PUE - IMMERSION_PUE) / AIR_PUE * 100
        )


class TestCharts:
    """Test chart series reshaping."""

    def test_tco_progression(self):
        from ictco import calculate

        result = calculate(make_config())
        points = result.charts.tco_progression
        s = result.summary_metrics

        assert len(points) == 5
        assert points[-1].savings == pytest.approx(s.total_tco_savings_5yr)
        assert points[-1].cumulative_savings == pytest.approx(s.total_opex_savings_5yr)
        assert points[-1].cumulative_npv_savings == pytest.approx(s.npv_savings)
        assert points[0].air_cooling == pytest.approx(
            result.breakdown.capex.air_cooling.total
            + result.breakdown.opex_annual.years[0].air_cooling.total
        )

    def test_cost_categories(self):
        from ictco import calculate

        result = calculate(make_config())
        categories = result.charts.cost_categories
        capex = result.breakdown.capex

        assert list(categories) == ["Equipment", "Installation", "Infrastructure", "Annual Energy"]
        assert categories["Equipment"].difference == capex.category_savings()["equipment"]
        first = result.breakdown.opex_annual.years[0]
        assert categories["Annual Energy"].air_cooling == first.air_cooling.energy

    def test_pue_comparison(self):
        from ictco import calculate

        result = calculate(make_config())
        assert result.charts.pue_comparison == {
            "air_cooling": result.pue_analysis.air_cooling,
            "immersion_cooling": result.pue_analysis.immersion_cooling,
        }

    def test_chart_mappings_are_read_only(self):
        from ictco import calculate

        charts = calculate(make_config()).charts
        with pytest.raises(TypeError):
            charts.pue_comparison["air_cooling"] = 1.0
        with pytest.raises(TypeError):
            del charts.cost_categories["Equipment"]

        data = charts.to_dict()
        data["pue_comparison"]["air_cooling"] = 1.0
        assert charts.pue_comparison["air_cooling"] != 1.0


class TestDigest:
    """Test configuration digest stability."""

    def test_same_input_same_digest(self):
        from ictco import configuration_digest

        assert configuration_digest(normalized()) == configuration_digest(normalized())

    def test_defaults_and_explicit_values_match(self):
        from ictco import configuration_digest

        implicit = normalized()
        explicit = normalized(financial={"currency": "USD", "discount_rate": 0.08,
                                         "energy_cost_kwh": 0.12, "analysis_years": 5})
        assert configuration_digest(implicit) == configuration_digest(explicit)

    def test_different_input_different_digest(self):
        from ictco import configuration_digest

        cheap = normalized(financial={"currency": "USD", "energy_cost_kwh": 0.10})
        assert configuration_digest(cheap) != configuration_digest(normalized())

    def test_catalog_changes_digest(self):
        from ictco import configuration_digest, default_catalog

        config = normalized()
        usd = configuration_digest(config, default_catalog())
        scaled = configuration_digest(config, default_catalog().converted("USD", 1.1))
        assert usd != scaled
        assert len(usd) == 64

    def test_canonical_json(self):
        from ictco.digest import canonical_json

        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'
