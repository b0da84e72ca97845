"""
Visualization module for TCO calculation results.

This module provides plotting functions for:
- Cumulative TCO progression
- CAPEX / energy cost category comparison
- PUE comparison
- Year-by-year OPEX breakdown
- Tornado diagrams for sensitivity

Plots consume the chart series already present on a CalculationResult.
matplotlib is an optional dependency (``pip install immersion-tco[viz]``).
"""

from typing import Any, Optional, Tuple
import numpy as np

# Check for visualization libraries
try:
    import matplotlib.pyplot as plt
    import matplotlib.patches as mpatches
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False


# Color schemes
COLORS = {
    "air": "#ef4444",        # Red
    "immersion": "#3b82f6",  # Blue
    "savings": "#22c55e",    # Green
    "low": "#3b82f6",
    "high": "#8b5cf6",       # Purple
}

OPEX_CATEGORIES = ("energy", "maintenance", "coolant", "labor")


def check_matplotlib():
    """Check if matplotlib is available."""
    if not HAS_MATPLOTLIB:
        raise ImportError(
            "matplotlib is required for plotting. "
            "Install with: pip install matplotlib"
        )


def _finish(fig, save_path: Optional[str]):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
    return fig


def plot_tco_progression(
    result: 'CalculationResult',
    title: str = "Cumulative Total Cost of Ownership",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None,
    ax=None,
) -> Any:
    """
    Plot cumulative TCO of both strategies with the running gap.

    Args:
        result: CalculationResult
        title: Plot title
        figsize: Figure size
        save_path: Path to save figure (optional)
        ax: Existing axes to draw on (optional)

    Returns:
        matplotlib figure
    """
    check_matplotlib()
    fig, ax = (ax.figure, ax) if ax is not None else plt.subplots(figsize=figsize)

    points = result.charts.tco_progression
    years = [p.year for p in points]
    air = np.array([p.air_cooling for p in points])
    immersion = np.array([p.immersion_cooling for p in points])

    ax.plot(years, air, marker='o', color=COLORS["air"], linewidth=2, label='Air cooling')
    ax.plot(years, immersion, marker='o', color=COLORS["immersion"], linewidth=2,
            label='Immersion cooling')
    ax.fill_between(years, immersion, air, where=air >= immersion,
                    color=COLORS["savings"], alpha=0.2, label='Savings')

    ax.set_xlabel('Year', fontsize=12)
    ax.set_ylabel(f'Cumulative cost ({result.currency})', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xticks(years)
    ax.legend()
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path)


def plot_cost_categories(
    result: 'CalculationResult',
    title: str = "Cost Category Comparison",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None,
    ax=None,
) -> Any:
    """
    Plot CAPEX categories and first-year energy side by side.

    Args:
        result: CalculationResult
        title: Plot title
        figsize: Figure size
        save_path: Path to save figure
        ax: Existing axes to draw on (optional)

    Returns:
        matplotlib figure
    """
    check_matplotlib()
    fig, ax = (ax.figure, ax) if ax is not None else plt.subplots(figsize=figsize)

    categories = result.charts.cost_categories
    names = list(categories)
    x = np.arange(len(names))
    width = 0.35

    air_vals = [categories[n].air_cooling / 1e3 for n in names]
    immersion_vals = [categories[n].immersion_cooling / 1e3 for n in names]

    ax.bar(x - width/2, air_vals, width, label='Air cooling', color=COLORS["air"])
    ax.bar(x + width/2, immersion_vals, width, label='Immersion cooling',
           color=COLORS["immersion"])

    ax.set_ylabel(f'Cost (thousand {result.currency})', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=30, ha='right')
    ax.legend()
    ax.grid(True, alpha=0.3, axis='y')

    return _finish(fig, save_path)


def plot_pue_comparison(
    result: 'CalculationResult',
    title: str = "Power Usage Effectiveness",
    figsize: Tuple[int, int] = (6, 5),
    save_path: Optional[str] = None,
    ax=None,
) -> Any:
    """Bar chart of air vs immersion PUE against the ideal of 1.0."""
    check_matplotlib()
    fig, ax = (ax.figure, ax) if ax is not None else plt.subplots(figsize=figsize)

    pue = result.charts.pue_comparison
    labels = ['Air cooling', 'Immersion cooling']
    values = [pue["air_cooling"], pue["immersion_cooling"]]
    bars = ax.bar(labels, values, color=[COLORS["air"], COLORS["immersion"]])
    ax.axhline(1.0, color='black', linestyle='--', linewidth=1, label='Ideal (1.0)')

    for bar, value in zip(bars, values):
        ax.annotate(f'{value:.2f}',
                    xy=(bar.get_x() + bar.get_width() / 2, value),
                    xytext=(0, 3), textcoords="offset points",
                    ha='center', va='bottom', fontsize=10)

    ax.set_ylim(0, max(values) * 1.15)
    ax.set_ylabel('PUE', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='lower right')

    return _finish(fig, save_path)


def plot_opex_breakdown(
    result: 'CalculationResult',
    title: str = "Annual Operating Cost",
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None,
) -> Any:
    """
    Stacked OPEX categories per year, one panel per strategy.

    Args:
        result: CalculationResult
        title: Plot title
        figsize: Figure size
        save_path: Path to save figure

    Returns:
        matplotlib figure
    """
    check_matplotlib()
    fig, axes = plt.subplots(1, 2, figsize=figsize, sharey=True)

    years_data = result.breakdown.opex_annual.years
    years = [y.year for y in years_data]
    colors = plt.cm.Blues(np.linspace(0.4, 0.9, len(OPEX_CATEGORIES)))

    for ax, strategy, label in zip(
        axes, ("air_cooling", "immersion_cooling"), ("Air cooling", "Immersion cooling")
    ):
        bottom = np.zeros(len(years))
        for color, category in zip(colors, OPEX_CATEGORIES):
            values = np.array([getattr(getattr(y, strategy), category) for y in years_data]) / 1e3
            ax.bar(years, values, bottom=bottom, color=color, label=category.capitalize())
            bottom += values
        ax.set_title(label, fontsize=12, fontweight='bold')
        ax.set_xlabel('Year', fontsize=12)
        ax.set_xticks(years)
        ax.grid(True, alpha=0.3, axis='y')

    axes[0].set_ylabel(f'Cost (thousand {result.currency})', fontsize=12)
    axes[1].legend()
    fig.suptitle(title, fontsize=14, fontweight='bold', y=1.02)

    return _finish(fig, save_path)


def plot_tornado_diagram(
    tornado_data: 'TornadoData',
    title: str = "Parameter Sensitivity (Tornado Diagram)",
    figsize: Tuple[int, int] = (10, 8),
    save_path: Optional[str] = None,
) -> Any:
    """
    Plot tornado diagram showing parameter sensitivity.

    Args:
        tornado_data: TornadoData from sensitivity analysis
        title: Plot title
        figsize: Figure size
        save_path: Path to save figure

    Returns:
        matplotlib figure
    """
    check_matplotlib()

    fig, ax = plt.subplots(figsize=figsize)

    sorted_data = tornado_data.sorted_by_swing[:10]  # Top 10
    names = [d[0] for d in sorted_data]
    baseline = tornado_data.baseline if tornado_data.baseline is not None else 0.0

    for i, (_, low, high, _) in enumerate(sorted_data):
        ax.barh(i, low - baseline, left=baseline, color=COLORS["low"], alpha=0.7)
        ax.barh(i, high - baseline, left=baseline, color=COLORS["high"], alpha=0.7)

    ax.axvline(baseline, color='black', linestyle='-', linewidth=2)

    ax.set_yticks(np.arange(len(names)))
    ax.set_yticklabels(names)
    ax.invert_yaxis()
    ax.set_xlabel(tornado_data.metric, fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')

    low_patch = mpatches.Patch(color=COLORS["low"], alpha=0.7, label='Low value')
    high_patch = mpatches.Patch(color=COLORS["high"], alpha=0.7, label='High value')
    ax.legend(handles=[low_patch, high_patch], loc='lower right')
    ax.grid(True, alpha=0.3, axis='x')

    return _finish(fig, save_path)


def create_tco_dashboard(
    result: 'CalculationResult',
    figsize: Tuple[int, int] = (14, 10),
    save_path: Optional[str] = None,
) -> Any:
    """
    Four-panel overview: TCO progression, cost categories, PUE and key metrics.

    Args:
        result: CalculationResult
        figsize: Figure size
        save_path: Path to save figure

    Returns:
        matplotlib figure
    """
    check_matplotlib()
    fig, axes = plt.subplots(2, 2, figsize=figsize)

    plot_tco_progression(result, ax=axes[0, 0])
    plot_cost_categories(result, ax=axes[0, 1])
    plot_pue_comparison(result, ax=axes[1, 0])

    s = result.summary_metrics
    rows = [
        ['TCO savings', f'{s.total_tco_savings_5yr:,.0f} {result.currency}'],
        ['NPV TCO savings', f'{s.npv_tco_savings:,.0f} {result.currency}'],
        ['ROI', 'n/a' if s.roi_percent is None else f'{s.roi_percent:.1f}%'],
        ['Payback', 'n/a' if s.payback_months is None else f'{s.payback_months:.1f} months'],
        ['PUE improvement', f'{s.energy_efficiency_improvement:.1f}%'],
    ]
    table_ax = axes[1, 1]
    table_ax.axis('off')
    table = table_ax.table(cellText=rows, colLabels=['Metric', 'Value'], loc='center')
    table.scale(1, 1.6)
    table_ax.set_title('Key Metrics', fontsize=14, fontweight='bold')

    fig.suptitle("Immersion vs Air Cooling TCO", fontsize=16, fontweight='bold')
    return _finish(fig, save_path)
