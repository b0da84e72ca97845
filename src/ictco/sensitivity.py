"""
Sensitivity analysis for TCO results.

This module implements:
- One-at-a-time parameter sweeps around a base configuration
- Elasticity of each headline metric with respect to each parameter
- Tornado data for low/high swings

Only public calculation results are used; nothing here re-derives costs.
Parameters are addressed by dotted configuration paths such as
``financial.energy_cost_kwh``.
"""

from dataclasses import dataclass, field
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import numpy as np
from scipy import stats

from .catalog import PriceCatalog
from .engine import ConfigurationInput, TCOCalculationEngine
from .normalizer import NormalizedConfiguration
from .scenarios import DEFAULT_METRICS, apply_changes, metric_value, read_path
from .validation import clip_to_limits


logger = logging.getLogger(__name__)

# Resolved values for parameters the configuration may leave unset
_RESOLVED_VALUES: Dict[str, Callable[[NormalizedConfiguration], float]] = {
    "financial.discount_rate": lambda n: n.financial.discount_rate,
    "financial.energy_cost_kwh": lambda n: n.financial.energy_cost_per_kwh,
    "financial.energy_escalation_rate": lambda n: n.financial.energy_escalation_rate,
    "financial.maintenance_escalation_rate": lambda n: n.financial.maintenance_escalation_rate,
    "financial.labor_escalation_rate": lambda n: n.financial.labor_escalation_rate,
    "financial.labor_cost_per_hour": lambda n: n.financial.labor_cost_per_hour,
    "air_cooling.hvac_efficiency": lambda n: n.air_cooling.efficiency("hvac"),
    "air_cooling.power_distribution_efficiency":
        lambda n: n.air_cooling.efficiency("power_distribution"),
    "immersion_cooling.pumping_efficiency": lambda n: n.immersion_cooling.efficiency("pumping"),
    "immersion_cooling.heat_exchanger_efficiency":
        lambda n: n.immersion_cooling.efficiency("heat_exchanger"),
}

# Legacy overrides that would mask a change to the plain field
_OVERRIDES = {
    "financial.discount_rate": "financial.custom_discount_rate",
    "financial.energy_cost_kwh": "financial.custom_energy_cost",
    "financial.labor_cost_per_hour": "financial.custom_labor_cost",
}

DEFAULT_PARAMETERS = (
    "financial.energy_cost_kwh",
    "financial.discount_rate",
    "financial.energy_escalation_rate",
    "immersion_cooling.pumping_efficiency",
    "air_cooling.hvac_efficiency",
)


@dataclass
class SensitivityParameter:
    """
    One swept parameter.

    ``base_value`` defaults to the configured (or resolved default) value;
    the sweep covers base × (1 ± variation_percent / 100) in ``steps`` points.
    """

    name: str
    variation_percent: float = 20.0
    steps: int = 5
    base_value: Optional[float] = None


@dataclass
class ParameterSweep:
    """Metric values along one parameter sweep."""

    parameter: str
    base_value: float
    values: List[float]
    outputs: Dict[str, List[Optional[float]]]
    elasticity: Dict[str, Optional[float]] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "parameter": self.parameter,
            "base_value": self.base_value,
            "scenarios": [
                {"value": value, **{m: out[i] for m, out in self.outputs.items()}}
                for i, value in enumerate(self.values)
            ],
            "elasticity": dict(self.elasticity),
        }


@dataclass
class TornadoData:
    """
    Data for tornado diagram visualization.

    A metric that is undefined at either end of a parameter's range (e.g.
    no payback) leaves that parameter out of ``swing`` and ``sorted_by_swing``.
    """

    parameter_names: List[str]
    low_values: List[Optional[float]]   # Metric at parameter low bound
    high_values: List[Optional[float]]  # Metric at parameter high bound
    baseline: Optional[float]
    metric: str = "tco_savings"

    def _defined(self):
        for name, low, high in zip(self.parameter_names, self.low_values, self.high_values):
            if low is not None and high is not None:
                yield name, low, high

    @property
    def swing(self) -> Dict[str, float]:
        """Calculate swing (high - low) for each parameter."""
        return {name: abs(high - low) for name, low, high in self._defined()}

    @property
    def sorted_by_swing(self) -> List[Tuple[str, float, float, float]]:
        """Return parameters sorted by swing magnitude."""
        data = [(name, low, high, abs(high - low)) for name, low, high in self._defined()]
        return sorted(data, key=lambda x: x[3], reverse=True)


@dataclass
class SensitivityResult:
    """Complete sensitivity analysis results."""

    metrics: List[str]
    baseline: Dict[str, Optional[float]]
    sweeps: List[ParameterSweep]
    tornado: Optional[TornadoData] = None

    def most_influential(self, metric: str = "tco_savings") -> List[Tuple[str, float]]:
        """Parameters sorted by absolute elasticity of metric; undefined elasticities last."""
        ranked = [
            (sweep.parameter, abs(sweep.elasticity[metric]))
            for sweep in self.sweeps
            if sweep.elasticity.get(metric) is not None
        ]
        return sorted(ranked, key=lambda x: x[1], reverse=True)

    def to_dict(self) -> Dict:
        data = {
            "metrics": list(self.metrics),
            "baseline": dict(self.baseline),
            "sensitivity_analysis": [sweep.to_dict() for sweep in self.sweeps],
        }
        if self.tornado is not None:
            data["tornado"] = {
                "metric": self.tornado.metric,
                "baseline": self.tornado.baseline,
                "parameters": [
                    {"name": name, "low": low, "high": high, "swing": swing}
                    for name, low, high, swing in self.tornado.sorted_by_swing
                ],
            }
        return data

    def summary(self) -> str:
        """Generate text summary of elasticities."""
        lines = [
            "TCO SENSITIVITY ANALYSIS",
            "=" * 60,
            f"{'Parameter':<40} " + " ".join(f"{m[:12]:>12}" for m in self.metrics),
            "-" * 60,
        ]
        for sweep in self.sweeps:
            cells = []
            for m in self.metrics:
                e = sweep.elasticity.get(m)
                cells.append(f"{'n/a':>12}" if e is None else f"{e:>12.3f}")
            lines.append(f"{sweep.parameter:<40} " + " ".join(cells))
        lines.append("-" * 60)
        lines.append("Values are elasticities (% change in metric per % change in parameter)")
        return "\n".join(lines)


def _base_value(config, engine: TCOCalculationEngine, name: str) -> float:
    value = read_path(config, name)
    if value is not None:
        override = _OVERRIDES.get(name)
        override_value = read_path(config, override) if override else None
        return float(override_value if override_value is not None else value)

    if name not in _RESOLVED_VALUES:
        raise ValueError(f"Parameter {name} is not set and has no default")
    report = engine.validate(config)
    report.raise_for_errors()
    return float(_RESOLVED_VALUES[name](report.normalized))


_INTEGER_FIELDS = ("rack_count", "quantity", "analysis_years")


def _with_value(config, name: str, value: float):
    if name.endswith(_INTEGER_FIELDS):
        value = int(round(value))
    changes = {name: value}
    if name in _OVERRIDES:
        changes[_OVERRIDES[name]] = None
    return apply_changes(config, changes)


def _elasticity(values: np.ndarray, outputs: List[Optional[float]],
                base_value: float, base_output: Optional[float]) -> Optional[float]:
    if base_output is None or base_output == 0 or base_value == 0:
        return None
    if any(out is None for out in outputs) or np.ptp(values) == 0:
        return None
    slope = stats.linregress(values, np.asarray(outputs, dtype=float)).slope
    return float(slope * base_value / base_output)


def sweep_parameter(
    config: ConfigurationInput,
    parameter: SensitivityParameter,
    metrics: Sequence[str] = DEFAULT_METRICS,
    engine: TCOCalculationEngine = None,
    baseline: Optional[Dict[str, Optional[float]]] = None,
) -> ParameterSweep:
    """
    Recalculate across a range of one parameter.

    Sweep points outside the parameter's hard bounds are clipped to them.

    Args:
        config: Base configuration
        parameter: Parameter to sweep
        metrics: Summary metrics to record
        engine: Engine to run (default: engine with default catalog)
        baseline: Metric values of the base configuration, if already known

    Returns:
        ParameterSweep
    """
    engine = engine or TCOCalculationEngine()
    base_value = parameter.base_value
    if base_value is None:
        base_value = _base_value(config, engine, parameter.name)

    fraction = parameter.variation_percent / 100
    values = np.linspace(base_value * (1 - fraction), base_value * (1 + fraction), parameter.steps)
    values = np.array([clip_to_limits(parameter.name, v) for v in values])

    outputs: Dict[str, List[Optional[float]]] = {m: [] for m in metrics}
    for value in values:
        result = engine.calculate(_with_value(config, parameter.name, float(value)))
        for m in metrics:
            outputs[m].append(metric_value(result, m))

    if baseline is None:
        base_result = engine.calculate(config)
        baseline = {m: metric_value(base_result, m) for m in metrics}

    elasticity = {
        m: _elasticity(values, outputs[m], base_value, baseline.get(m)) for m in metrics
    }
    logger.debug("Swept %s over %d points", parameter.name, len(values))

    return ParameterSweep(
        parameter=parameter.name,
        base_value=base_value,
        values=[float(v) for v in values],
        outputs=outputs,
        elasticity=elasticity,
    )


def compute_tornado(
    config: ConfigurationInput,
    parameters: Sequence[SensitivityParameter],
    metric: str = "tco_savings",
    engine: TCOCalculationEngine = None,
) -> TornadoData:
    """
    Compute one-at-a-time sensitivity for tornado diagram.

    Args:
        config: Base configuration
        parameters: Parameters with their variation percentages
        metric: Summary metric to analyze
        engine: Engine to run

    Returns:
        TornadoData for visualization
    """
    engine = engine or TCOCalculationEngine()
    baseline = metric_value(engine.calculate(config), metric)

    low_values = []
    high_values = []
    for parameter in parameters:
        base_value = parameter.base_value
        if base_value is None:
            base_value = _base_value(config, engine, parameter.name)
        fraction = parameter.variation_percent / 100

        low = clip_to_limits(parameter.name, base_value * (1 - fraction))
        high = clip_to_limits(parameter.name, base_value * (1 + fraction))
        low_metric = metric_value(engine.calculate(_with_value(config, parameter.name, low)), metric)
        high_metric = metric_value(engine.calculate(_with_value(config, parameter.name, high)), metric)
        if low_metric is None or high_metric is None:
            logger.debug("%s undefined at an end of %s, no tornado bar", metric, parameter.name)
        low_values.append(low_metric)
        high_values.append(high_metric)

    return TornadoData(
        parameter_names=[p.name for p in parameters],
        low_values=low_values,
        high_values=high_values,
        baseline=baseline,
        metric=metric,
    )


def run_sensitivity_analysis(
    config: ConfigurationInput,
    parameters: Sequence[SensitivityParameter] = None,
    metrics: Sequence[str] = DEFAULT_METRICS,
    catalog: PriceCatalog = None,
    include_tornado: bool = True,
) -> SensitivityResult:
    """
    Run one-at-a-time sensitivity analysis.

    Args:
        config: Base configuration
        parameters: Parameters to sweep (default: energy cost, discount rate,
            energy escalation, pumping and HVAC efficiency)
        metrics: Summary metrics to record
        catalog: Price catalog shared by every run
        include_tornado: Whether to compute tornado data on the first metric

    Returns:
        SensitivityResult
    """
    if parameters is None:
        parameters = [SensitivityParameter(name) for name in DEFAULT_PARAMETERS]
    engine = TCOCalculationEngine(catalog)

    base_result = engine.calculate(config)
    baseline = {m: metric_value(base_result, m) for m in metrics}

    sweeps = [
        sweep_parameter(config, parameter, metrics, engine, baseline)
        for parameter in parameters
    ]

    tornado = None
    if include_tornado and metrics:
        tornado = compute_tornado(config, parameters, metrics[0], engine)

    return SensitivityResult(
        metrics=list(metrics),
        baseline=baseline,
        sweeps=sweeps,
        tornado=tornado,
    )
