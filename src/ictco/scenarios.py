"""
Scenario comparison.

Runs a base configuration and a set of named variations of it, then lines
up selected headline metrics against the base. Variations are expressed as
dotted-path changes, e.g. ``{"financial.energy_cost_kwh": 0.20}``.
"""

from dataclasses import dataclass, field
import copy
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .catalog import PriceCatalog
from .engine import CalculationResult, ConfigurationInput, TCOCalculationEngine
from .schemas import CalculationConfiguration


# Short metric names -> CalculationSummary attributes
METRIC_ALIASES = {
    "tco_savings": "total_tco_savings_5yr",
    "opex_savings": "total_opex_savings_5yr",
    "capex_savings": "total_capex_savings",
}

DEFAULT_METRICS = ("tco_savings", "npv_tco_savings", "roi_percent", "payback_months")


def config_to_dict(config: ConfigurationInput) -> Dict[str, Any]:
    """Detached, mutable copy of a configuration."""
    if isinstance(config, CalculationConfiguration):
        return config.model_dump()
    return copy.deepcopy(dict(config))


def apply_changes(config: ConfigurationInput, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of config with dotted-path values replaced.

    Intermediate sections are created when absent.
    """
    data = config_to_dict(config)
    for path, value in changes.items():
        *parents, leaf = path.split(".")
        node = data
        for key in parents:
            if node.get(key) is None:
                node[key] = {}
            node = node[key]
        node[leaf] = value
    return data


def read_path(config: ConfigurationInput, path: str) -> Any:
    """Value at a dotted path, or None if any part is absent."""
    node: Any = config_to_dict(config)
    for key in path.split("."):
        if not isinstance(node, Mapping) or node.get(key) is None:
            return None
        node = node[key]
    return node


def metric_value(result: CalculationResult, metric: str) -> Optional[float]:
    """Headline metric by short or full name."""
    return getattr(result.summary_metrics, METRIC_ALIASES.get(metric, metric))


@dataclass
class Scenario:
    """A named variation of the base configuration."""

    name: str
    changes: Dict[str, Any]
    description: str = ""


@dataclass
class MetricDelta:
    scenario: str
    value: Optional[float]
    difference_from_base: Optional[float]
    difference_percent: Optional[float]


@dataclass
class ScenarioOutcome:
    scenario: Scenario
    result: CalculationResult


@dataclass
class ScenarioComparison:
    """Base result, alternative results and per-metric differences."""

    base: CalculationResult
    alternatives: List[ScenarioOutcome]
    comparison_metrics: Dict[str, List[MetricDelta]] = field(default_factory=dict)

    def best(self, metric: str = "tco_savings") -> Optional[str]:
        """Name of the alternative with the highest value of metric, if any is defined."""
        candidates = [
            delta for delta in self.comparison_metrics.get(metric, []) if delta.value is not None
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda delta: delta.value).scenario

    def to_dict(self) -> Dict:
        return {
            "base_scenario": self.base.to_dict(),
            "alternative_scenarios": [
                {
                    "name": outcome.scenario.name,
                    "description": outcome.scenario.description,
                    "changes": outcome.scenario.changes,
                    "results": outcome.result.to_dict(),
                }
                for outcome in self.alternatives
            ],
            "comparison_metrics": {
                metric: [vars(delta) for delta in deltas]
                for metric, deltas in self.comparison_metrics.items()
            },
        }

    def summary(self) -> str:
        lines = ["SCENARIO COMPARISON", "=" * 60]
        for metric, deltas in self.comparison_metrics.items():
            base = metric_value(self.base, metric)
            base_text = "n/a" if base is None else f"{base:,.1f}"
            lines.append(f"{metric} (base {base_text}):")
            for delta in deltas:
                if delta.difference_from_base is None:
                    lines.append(f"  {delta.scenario:<30} n/a")
                    continue
                pct = "" if delta.difference_percent is None else f" ({delta.difference_percent:+.1f}%)"
                lines.append(f"  {delta.scenario:<30} {delta.difference_from_base:+,.1f}{pct}")
        lines.append("=" * 60)
        return "\n".join(lines)


def _delta(name: str, value: Optional[float], base: Optional[float]) -> MetricDelta:
    if value is None or base is None:
        return MetricDelta(name, value, None, None)
    difference = value - base
    percent = None if base == 0 else difference / abs(base) * 100
    return MetricDelta(name, value, difference, percent)


def compare_scenarios(
    base_config: ConfigurationInput,
    scenarios: Sequence[Scenario],
    metrics: Sequence[str] = DEFAULT_METRICS,
    catalog: PriceCatalog = None,
) -> ScenarioComparison:
    """
    Calculate the base configuration and every scenario.

    Args:
        base_config: Base configuration
        scenarios: Variations to compare
        metrics: Summary metrics to compare (short or full names)
        catalog: Price catalog shared by every run

    Returns:
        ScenarioComparison
    """
    engine = TCOCalculationEngine(catalog)
    base = engine.calculate(base_config)

    outcomes = [
        ScenarioOutcome(scenario, engine.calculate(apply_changes(base_config, scenario.changes)))
        for scenario in scenarios
    ]

    comparison = {
        metric: [
            _delta(outcome.scenario.name, metric_value(outcome.result, metric),
                   metric_value(base, metric))
            for outcome in outcomes
        ]
        for metric in metrics
    }

    return ScenarioComparison(base=base, alternatives=outcomes, comparison_metrics=comparison)
