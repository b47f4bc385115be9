"""Plain-text report generation for tolerance stack analysis results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tolstack.analysis import AnalysisReport
from tolstack.statistics import failure_rate_interval, percent_contribution


@dataclass
class ReportConfig:
    """Configuration for report generation.

    Attributes:
        title: Report title.
        include_features: Include the feature table.
        include_variance: Include the RSS variance contribution of each
            feature, largest first.
        include_interval: Include a confidence interval on the Monte Carlo
            failure rate (requires a goal).
        confidence: Confidence level for that interval.
        width: Width of the report rules, in characters.
    """
    title: str = "Tolerance Stack Report"
    include_features: bool = True
    include_variance: bool = True
    include_interval: bool = True
    confidence: float = 0.95
    width: int = 100


_FEATURE_COLUMNS = ("Name", "Alpha", "Tol", "Lower", "Nominal", "Upper", "Contribution")
_OUTPUT_COLUMNS = ("Method", "Lower", "Center", "Upper", "Goal Met")
_VARIANCE_COLUMNS = ("Name", "Variance %")


def generate_text_report(report: AnalysisReport, config: Optional[ReportConfig] = None) -> str:
    """Generate a plain-text tolerance analysis report."""
    config = config or ReportConfig()
    stack = report.stack
    rule = "=" * config.width

    lines = [
        rule,
        config.title.center(config.width),
        rule,
        f"Name:   {stack.name}",
        f"Units:  {stack.units}",
    ]
    if report.goal is not None:
        lines.append(f"Goal:   [{report.goal.lower}, {report.goal.upper}] {report.goal.units}")
    lines.append(rule)
    lines.append("")

    if config.include_features:
        lines.append(f"INPUTS: {len(report.features)}")
        rows = [
            (f.name, f.alpha, f.tolerance, f.lower, f.nominal, f.upper, f.contribution)
            for f in report.features
        ]
        lines.extend(_table(_FEATURE_COLUMNS, rows))
        lines.append("")

    if config.include_variance:
        lines.append("VARIANCE CONTRIBUTION (RSS):")
        rows = [(name, f"{pct:.2f}") for name, pct in percent_contribution(stack.features)]
        lines.extend(_table(_VARIANCE_COLUMNS, rows))
        lines.append("")

    lines.append(f"OUTPUTS: {len(report.results)}")
    rows = [
        (o.label, o.lower, o.center, o.upper, _goal_text(o.goal_met))
        for o in report.results
    ]
    lines.extend(_table(_OUTPUT_COLUMNS, rows))
    lines.append("")

    if report.iterations:
        if report.goal is not None:
            pct = report.failure_rate * 100
            lines.append(
                f"MONTE CARLO: {report.monte_carlo_failures} failures in "
                f"{report.iterations} iterations ({pct:.4f}%)"
            )
            if config.include_interval:
                low, high = failure_rate_interval(
                    report.monte_carlo_failures, report.iterations, config.confidence,
                )
                lines.append(
                    f"  {config.confidence:.0%} interval on failure rate: "
                    f"[{low * 100:.4f}%, {high * 100:.4f}%]"
                )
        else:
            lines.append(f"MONTE CARLO: {report.iterations} iterations (no goal)")
        lines.append("")

    lines.append(rule)
    lines.append("END OF REPORT")
    return "\n".join(lines)


def _goal_text(goal_met) -> str:
    if goal_met is None:
        return "-"
    return "yes" if goal_met else "NO"


def _table(headers: tuple[str, ...], rows: list[tuple]) -> list[str]:
    """Left-align the first column, right-align the rest."""
    cells = [[str(c) for c in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, c in enumerate(row):
            widths[i] = max(widths[i], len(c))

    def fmt(row):
        parts = [row[0].ljust(widths[0])]
        parts.extend(c.rjust(w) for c, w in zip(row[1:], widths[1:]))
        return "  ".join(parts)

    out = [fmt(list(headers)), "  ".join("-" * w for w in widths)]
    out.extend(fmt(row) for row in cells)
    return out
