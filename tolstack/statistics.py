"""Statistical utilities for analysis results.

Provides the Monte Carlo failure rate with an exact confidence interval,
and RSS variance-weighted percent contribution.
"""

from __future__ import annotations

from decimal import Decimal

from tolstack.models import Feature


def failure_rate(failures: int, iterations: int) -> Decimal:
    """Fraction of Monte Carlo trials that failed the goal."""
    if iterations < 1:
        raise ValueError(f"iterations must be positive, got {iterations}")
    if not 0 <= failures <= iterations:
        raise ValueError(f"failures must be in 0..{iterations}, got {failures}")
    return Decimal(failures) / Decimal(iterations)


def failure_rate_interval(
    failures: int,
    iterations: int,
    confidence: float = 0.95,
) -> tuple[float, float]:
    """Exact (Clopper-Pearson) confidence interval on the failure rate.

    The empirical rate from a finite simulation is only an estimate of
    the true nonconformance probability; this bounds it.

    Args:
        failures: Number of failed trials.
        iterations: Total number of trials.
        confidence: Two-sided confidence level, e.g. 0.95.

    Returns:
        (low, high) bounds on the failure probability.
    """
    from scipy.stats import beta as _beta  # deferred import

    failure_rate(failures, iterations)
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")

    alpha = 1.0 - confidence
    if failures == 0:
        low = 0.0
    else:
        low = float(_beta.ppf(alpha / 2, failures, iterations - failures + 1))
    if failures == iterations:
        high = 1.0
    else:
        high = float(_beta.ppf(1 - alpha / 2, failures + 1, iterations - failures))
    return low, high


def percent_contribution(features: list[Feature]) -> list[tuple[str, Decimal]]:
    """Compute percent contribution of each feature to total variance.

    Uses RSS-style variance weighting:
    contribution_i = (|alpha_i| * tol_i)^2 / total_var.

    Args:
        features: Features of the stack.

    Returns:
        List of (name, percent_contribution) sorted by contribution descending.
    """
    variances = [(f.name, f.weighted_tolerance ** 2) for f in features]

    total_var = sum((v for _, v in variances), Decimal(0))
    if total_var == 0:
        return [(name, Decimal(0)) for name, _ in variances]

    pcts = [(name, v / total_var * 100) for name, v in variances]
    return sorted(pcts, key=lambda x: x[1], reverse=True)
