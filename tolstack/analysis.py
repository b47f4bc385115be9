"""Tolerance stack analysis engine: Worst Case, RSS, Bender and Monte Carlo."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import (
    ROUND_HALF_UP, Context, Decimal, DivisionByZero, InvalidOperation,
    Overflow, localcontext,
)
from typing import Optional

import numpy as np

from tolstack.models import (
    DegenerateStackError, EmptyStackError, Feature, Goal, Stack,
)

logger = logging.getLogger(__name__)

WORST_CASE = "Worst Case"
RSS = "RSS"
BENDER = "Bender"
MONTE_CARLO = "Monte Carlo"

# Statistical correction applied to RSS for small feature counts.
BENDER_FACTOR = Decimal("1.5")

MIN_PRECISION = 20
# numpy draws int64, so 10**18 is the largest usable sample scale.
MAX_SAMPLE_DIGITS = 18


@dataclass
class AnalysisConfig:
    """Numeric configuration for one analysis run.

    Attributes:
        precision: Significant digits of working precision for every
            accumulation (at least 20).
        places: Fractional digits outputs and contributions are rounded to.
        iterations: Number of Monte Carlo trials.
        seed: Random seed for reproducible Monte Carlo runs.
        sample_digits: Decimal digits of resolution in each uniform sample.
        chunk_size: Trials drawn from the generator per block.
    """
    precision: int = MIN_PRECISION
    places: int = 4
    iterations: int = 10_000
    seed: Optional[int] = None
    sample_digits: int = 8
    chunk_size: int = 4096

    def __post_init__(self) -> None:
        if self.precision < MIN_PRECISION:
            raise ValueError(
                f"precision must be at least {MIN_PRECISION} digits, got {self.precision}"
            )
        if self.places < 0:
            raise ValueError(f"places must be non-negative, got {self.places}")
        if self.iterations < 1:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        if not 1 <= self.sample_digits <= MAX_SAMPLE_DIGITS:
            raise ValueError(
                f"sample_digits must be in 1..{MAX_SAMPLE_DIGITS}, got {self.sample_digits}"
            )
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    def context(self) -> Context:
        """Decimal context that traps every arithmetic fault."""
        return Context(
            prec=self.precision,
            traps=[InvalidOperation, DivisionByZero, Overflow],
        )


def round_display(value: Decimal, places: int) -> Decimal:
    """Round a value half-up to ``places`` fractional digits.

    The active context is widened to hold every integer digit plus
    ``places``; accumulation precision is unaffected.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Output:
    """Envelope produced by one stacking method.

    Attributes:
        label: Method name.
        lower: Lower bound of the result, rounded for display.
        center: Center (nominal or mean) of the result.
        upper: Upper bound of the result.
        goal_met: Whether [lower, upper] lies inside the goal, or None
            when no goal was given.
    """
    label: str
    lower: Decimal
    center: Decimal
    upper: Decimal
    goal_met: Optional[bool] = None

    @classmethod
    def build(
        cls,
        label: str,
        lower: Decimal,
        center: Decimal,
        upper: Decimal,
        goal: Optional[Goal] = None,
        places: int = 4,
    ) -> Output:
        """Judge the unrounded envelope against the goal, then round it."""
        goal_met = goal.contains(lower, upper) if goal is not None else None
        return cls(
            label=label,
            lower=round_display(lower, places),
            center=round_display(center, places),
            upper=round_display(upper, places),
            goal_met=goal_met,
        )

    @property
    def width(self) -> Decimal:
        return self.upper - self.lower

    def summary(self) -> str:
        line = f"{self.label:12s}  [{self.lower}, {self.center}, {self.upper}]"
        if self.goal_met is not None:
            line += "  goal met" if self.goal_met else "  goal NOT met"
        return line


@dataclass(frozen=True)
class FeatureReport:
    """One feature row as handed to the reporting layer."""
    name: str
    alpha: Decimal
    tolerance: Decimal
    lower: Decimal
    nominal: Decimal
    upper: Decimal
    contribution: Decimal

    @classmethod
    def from_feature(cls, feature: Feature, contribution: Decimal) -> FeatureReport:
        return cls(
            name=feature.name,
            alpha=feature.alpha,
            tolerance=feature.tolerance,
            lower=feature.lower,
            nominal=feature.nominal,
            upper=feature.upper,
            contribution=contribution,
        )


@dataclass
class AnalysisReport:
    """Everything a completed analysis hands to the reporting layer.

    Attributes:
        stack: The analyzed stack.
        goal: The acceptance window, if any.
        features: One row per feature, in stack order, with contributions.
        results: Outputs in run order: Worst Case, RSS, Bender, Monte Carlo.
        monte_carlo_failures: Trials that landed on or outside the goal.
        iterations: Number of Monte Carlo trials run.
    """
    stack: Stack
    goal: Optional[Goal]
    features: list[FeatureReport] = field(default_factory=list)
    results: list[Output] = field(default_factory=list)
    monte_carlo_failures: int = 0
    iterations: int = 0

    @property
    def failure_rate(self) -> Decimal:
        """Fraction of Monte Carlo trials that failed the goal."""
        if self.iterations == 0:
            return Decimal(0)
        return Decimal(self.monte_carlo_failures) / Decimal(self.iterations)

    def result(self, label: str) -> Output:
        """Return the first output with the given label."""
        for output in self.results:
            if output.label == label:
                return output
        raise KeyError(label)

    def summary(self) -> str:
        lines = [f"=== {self.stack.name} ({self.stack.units}) ==="]
        if self.goal is not None:
            lines.append(f"  Goal: [{self.goal.lower}, {self.goal.upper}] {self.goal.units}")
        for output in self.results:
            lines.append("  " + output.summary())
        if self.goal is not None:
            lines.append(
                f"  Monte Carlo failures: {self.monte_carlo_failures} "
                f"in {self.iterations} iterations"
            )
        return "\n".join(lines)


@dataclass
class _MonteCarloTally:
    """Running reduction over Monte Carlo trial results."""
    total: Decimal = Decimal(0)
    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None
    failures: int = 0
    count: int = 0

    def add(self, value: Decimal, goal: Optional[Goal]) -> None:
        self.total += value
        self.count += 1
        if self.minimum is None or value < self.minimum:
            self.minimum = value
        if self.maximum is None or value > self.maximum:
            self.maximum = value
        if goal is not None and goal.rejects(value):
            self.failures += 1


class Analysis:
    """Runs every stacking method over one stack.

    An Analysis is single-use: each call to :meth:`run` appends another
    full set of outputs to :attr:`results`. Create a fresh instance per run.

    Args:
        stack: The stack to analyze.
        goal: Optional acceptance window the outputs are judged against.
        config: Numeric configuration; defaults to :class:`AnalysisConfig`.
    """

    def __init__(
        self,
        stack: Stack,
        goal: Optional[Goal] = None,
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self.stack = stack
        self.goal = goal
        self.config = config or AnalysisConfig()
        self.results: list[Output] = []
        self.contributions: dict[int, Decimal] = {}
        self.monte_carlo_failures = 0
        self.monte_carlo_iterations = 0

    def run(self) -> AnalysisReport:
        """Run the arithmetic method then Monte Carlo and return the report.

        Nothing is recorded on the instance unless both methods complete.
        """
        logger.info("Analyzing stack %r (%s), %d features",
                    self.stack.name, self.stack.units, len(self.stack.features))
        if self.goal is not None:
            logger.info("Goal: [%s, %s] %s", self.goal.lower, self.goal.upper, self.goal.units)
        self._require_features()

        with localcontext(self.config.context()):
            outputs, contributions = self._arithmetic()
            mc_output, failures = self._monte_carlo(self.config.iterations)

        self.results.extend(outputs)
        self.results.append(mc_output)
        self.contributions = contributions
        self.monte_carlo_failures = failures
        self.monte_carlo_iterations = self.config.iterations
        return self.report()

    def arithmetic_method(self) -> list[Output]:
        """Worst Case, RSS and Bender envelopes; also sets contributions."""
        self._require_features()
        with localcontext(self.config.context()):
            outputs, contributions = self._arithmetic()
        self.results.extend(outputs)
        self.contributions = contributions
        return outputs

    def monte_carlo_method(self, iterations: Optional[int] = None) -> Output:
        """Simulate the stack and return the Monte Carlo envelope."""
        self._require_features()
        iterations = self.config.iterations if iterations is None else iterations
        if iterations < 1:
            raise ValueError(f"iterations must be positive, got {iterations}")
        with localcontext(self.config.context()):
            output, failures = self._monte_carlo(iterations)
        self.results.append(output)
        self.monte_carlo_failures = failures
        self.monte_carlo_iterations = iterations
        return output

    def report(self) -> AnalysisReport:
        """Snapshot the current results for the reporting layer."""
        features = [
            FeatureReport.from_feature(f, self.contributions.get(i, Decimal(0)))
            for i, f in enumerate(self.stack.features)
        ]
        return AnalysisReport(
            stack=self.stack,
            goal=self.goal,
            features=features,
            results=list(self.results),
            monte_carlo_failures=self.monte_carlo_failures,
            iterations=self.monte_carlo_iterations,
        )

    def _require_features(self) -> None:
        if not self.stack.features:
            raise EmptyStackError(f"stack {self.stack.name!r} has no features")

    def _output(self, label: str, lower: Decimal, center: Decimal, upper: Decimal) -> Output:
        return Output.build(label, lower, center, upper, self.goal, self.config.places)

    def _arithmetic(self) -> tuple[list[Output], dict[int, Decimal]]:
        start = time.perf_counter()
        shift = Decimal(0)
        tol_sum = Decimal(0)
        tol_squared_sum = Decimal(0)
        for f in self.stack.features:
            weighted = f.weighted_tolerance
            shift += f.nominal * f.alpha
            tol_sum += weighted
            tol_squared_sum += weighted * weighted

        if tol_sum == 0:
            raise DegenerateStackError(
                f"stack {self.stack.name!r} has zero total tolerance; "
                "contributions are undefined"
            )

        tol_rss = tol_squared_sum.sqrt()
        tol_bender = tol_rss * BENDER_FACTOR
        outputs = [
            self._output(WORST_CASE, shift - tol_sum, shift, shift + tol_sum),
            self._output(RSS, shift - tol_rss, shift, shift + tol_rss),
            self._output(BENDER, shift - tol_bender, shift, shift + tol_bender),
        ]
        contributions = {
            i: round_display(f.weighted_tolerance / tol_sum, self.config.places)
            for i, f in enumerate(self.stack.features)
        }
        logger.debug("Arithmetic: shift=%s tol_sum=%s tol_rss=%s (%.3fs)",
                     shift, tol_sum, tol_rss, time.perf_counter() - start)
        return outputs, contributions

    def _monte_carlo(self, iterations: int) -> tuple[Output, int]:
        start = time.perf_counter()
        digits = self.config.sample_digits
        scale = 10 ** digits
        rng = np.random.default_rng(self.config.seed)

        features = self.stack.features
        lowers = [f.lower for f in features]
        widths = [f.upper - f.lower for f in features]
        alphas = [f.alpha for f in features]
        terms = list(zip(lowers, widths, alphas))

        tally = _MonteCarloTally()
        remaining = iterations
        while remaining > 0:
            n = min(remaining, self.config.chunk_size)
            draws = rng.integers(0, scale, size=(n, len(features)), endpoint=True)
            for row in draws.tolist():
                trial = Decimal(0)
                for (lower, width, alpha), k in zip(terms, row):
                    sample = lower + width * Decimal(k).scaleb(-digits)
                    trial += sample * alpha
                tally.add(trial, self.goal)
            remaining -= n

        average = tally.total / iterations
        logger.debug("Monte Carlo: %d iterations, mean=%s (%.3fs)",
                     iterations, average, time.perf_counter() - start)
        if self.goal is not None:
            logger.info("Monte Carlo: %d failures in %d iterations",
                        tally.failures, iterations)
        output = self._output(MONTE_CARLO, tally.minimum, average, tally.maximum)
        return output, tally.failures


def analyze_stack(
    stack: Stack,
    goal: Optional[Goal] = None,
    config: Optional[AnalysisConfig] = None,
    **config_kwargs,
) -> AnalysisReport:
    """Run a fresh analysis on a stack.

    Args:
        stack: The stack to analyze.
        goal: Optional acceptance window.
        config: Numeric configuration. If omitted, one is built from
            ``config_kwargs`` (precision, places, iterations, seed, ...).

    Returns:
        The completed AnalysisReport.
    """
    if config is None:
        config = AnalysisConfig(**config_kwargs)
    elif config_kwargs:
        raise TypeError("pass either config or config keyword arguments, not both")
    return Analysis(stack, goal, config).run()
