"""Linear Tolerance Stack Analysis Tool.

Supports Worst-Case, RSS, Bender (1.5 x RSS) and Monte Carlo analysis of
1-D dimension chains, with:
- Symmetric, bilateral, limit, band and assembly-shift dimensions
- Decimal arithmetic at a configurable working precision
- Acceptance goals with Monte Carlo failure counts
- Per-feature contribution attribution
- Plain-text reports and a command-line driver
"""

from tolstack.models import (
    Dimension, DimensionKind, Feature, Stack, Goal, to_decimal,
    ToleranceStackError, InvalidDimensionError, DegenerateStackError,
    EmptyStackError,
)
from tolstack.analysis import (
    Analysis, AnalysisConfig, AnalysisReport, FeatureReport, Output,
    analyze_stack, round_display,
    WORST_CASE, RSS, BENDER, MONTE_CARLO,
)
from tolstack.statistics import (
    failure_rate, failure_rate_interval, percent_contribution,
)
from tolstack.reporting import ReportConfig, generate_text_report

__all__ = [
    # Core models
    "Dimension", "DimensionKind", "Feature", "Stack", "Goal", "to_decimal",
    # Errors
    "ToleranceStackError", "InvalidDimensionError", "DegenerateStackError",
    "EmptyStackError",
    # Analysis
    "Analysis", "AnalysisConfig", "AnalysisReport", "FeatureReport", "Output",
    "analyze_stack", "round_display",
    "WORST_CASE", "RSS", "BENDER", "MONTE_CARLO",
    # Statistics
    "failure_rate", "failure_rate_interval", "percent_contribution",
    # Reporting
    "ReportConfig", "generate_text_report",
]
__version__ = "0.1.0"
