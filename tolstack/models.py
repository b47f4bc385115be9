"""Data models for 1-D linear tolerance stack analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Union

Number = Union[Decimal, int, float, str]


class ToleranceStackError(Exception):
    """Base class for tolerance stack errors."""


class InvalidDimensionError(ToleranceStackError, ValueError):
    """A dimension could not be normalized into a non-negative tolerance."""


class DegenerateStackError(ToleranceStackError, ZeroDivisionError):
    """The stack has zero total tolerance, so contributions are undefined."""


class EmptyStackError(ToleranceStackError, ValueError):
    """The stack has no features to analyze."""


def to_decimal(value: Number) -> Decimal:
    """Convert a user-supplied number to Decimal.

    Floats go through their shortest repr so ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidDimensionError(f"expected a number, got {value!r}")
    if isinstance(value, float):
        value = repr(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidDimensionError(f"expected a number, got {value!r}") from None
    if not result.is_finite():
        raise InvalidDimensionError(f"expected a finite number, got {value!r}")
    return result


class DimensionKind(Enum):
    """Tolerancing convention a dimension was specified in."""
    SYMMETRIC = "symmetric"
    BILATERAL = "bilateral"
    LIMITS = "limits"
    BAND = "band"
    ASSEMBLY_SHIFT = "assembly_shift"


@dataclass(frozen=True)
class Dimension:
    """A toleranced dimension in canonical (nominal, symmetric tolerance) form.

    Use the classmethod constructors rather than building one directly;
    each normalizes its own tolerancing convention.

    Attributes:
        nominal: Center of the tolerance zone.
        tolerance: Non-negative half-width of the tolerance zone.
        kind: The convention the dimension was specified in.
    """
    nominal: Decimal
    tolerance: Decimal
    kind: DimensionKind = DimensionKind.SYMMETRIC

    def __post_init__(self) -> None:
        object.__setattr__(self, "nominal", to_decimal(self.nominal))
        object.__setattr__(self, "tolerance", to_decimal(self.tolerance))
        if self.tolerance < 0:
            raise InvalidDimensionError(
                f"tolerance must be non-negative, got {self.tolerance}"
            )

    @property
    def upper(self) -> Decimal:
        return self.nominal + self.tolerance

    @property
    def lower(self) -> Decimal:
        return self.nominal - self.tolerance

    @classmethod
    def symmetric(cls, nominal: Number, tolerance: Number) -> Dimension:
        """Nominal plus or minus an equal tolerance, e.g. 1.750 ±.015."""
        return cls(to_decimal(nominal), to_decimal(tolerance), DimensionKind.SYMMETRIC)

    @classmethod
    def bilateral(cls, nominal: Number, deviation1: Number, deviation2: Number) -> Dimension:
        """Nominal with two signed deviations, e.g. .750 +.010/-.015.

        The deviations may be given in either order.
        """
        nominal = to_decimal(nominal)
        d1, d2 = to_decimal(deviation1), to_decimal(deviation2)
        return cls._from_bounds(nominal + max(d1, d2), nominal + min(d1, d2),
                                DimensionKind.BILATERAL)

    @classmethod
    def limits(cls, bound_a: Number, bound_b: Number) -> Dimension:
        """Upper and lower limit pair, e.g. .135/.120, in either order."""
        a, b = to_decimal(bound_a), to_decimal(bound_b)
        return cls._from_bounds(max(a, b), min(a, b), DimensionKind.LIMITS)

    @classmethod
    def band(cls, nominal: Number, total_band: Number) -> Dimension:
        """Nominal with a total tolerance band centered on it."""
        total_band = to_decimal(total_band)
        if total_band < 0:
            raise InvalidDimensionError(f"band must be non-negative, got {total_band}")
        return cls(to_decimal(nominal), total_band / 2, DimensionKind.BAND)

    @classmethod
    def assembly_shift(cls, inside: Dimension, outside: Dimension) -> Dimension:
        """Worst-case positional play of an inside feature within an outside one.

        For a boss in a hole, ``inside`` is the boss and ``outside`` the
        hole. The play is half the clearance between the two at least
        material condition, centered on zero.
        """
        inner_lmc = inside.nominal - inside.tolerance
        outer_lmc = outside.nominal + outside.tolerance
        if outer_lmc < inner_lmc:
            raise InvalidDimensionError(
                f"inside feature ({inner_lmc} at LMC) does not fit the outside "
                f"feature ({outer_lmc} at LMC)"
            )
        return cls(Decimal(0), (outer_lmc - inner_lmc) / 2, DimensionKind.ASSEMBLY_SHIFT)

    @classmethod
    def _from_bounds(cls, upper: Decimal, lower: Decimal, kind: DimensionKind) -> Dimension:
        center = (upper + lower) / 2
        return cls(center, upper - center, kind)


@dataclass(frozen=True)
class Feature:
    """A dimension bound into a stack with a sensitivity coefficient.

    Attributes:
        name: Descriptive name for this feature.
        dimension: The normalized dimension.
        alpha: Signed sensitivity; the sign gives the direction the
            dimension moves the result, the magnitude its gain.
        part_number: Optional drawing/part number the dimension comes from.
        revision: Optional drawing revision.
        source: Optional free-form reference (sheet, zone, note).
    """
    name: str
    dimension: Dimension
    alpha: Decimal = Decimal(1)
    part_number: str = ""
    revision: str = ""
    source: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "alpha", to_decimal(self.alpha))

    @property
    def nominal(self) -> Decimal:
        return self.dimension.nominal

    @property
    def tolerance(self) -> Decimal:
        return self.dimension.tolerance

    @property
    def upper(self) -> Decimal:
        return self.dimension.upper

    @property
    def lower(self) -> Decimal:
        return self.dimension.lower

    @property
    def weighted_tolerance(self) -> Decimal:
        """Tolerance scaled by the magnitude of the sensitivity."""
        return self.tolerance * abs(self.alpha)


@dataclass
class Stack:
    """An ordered chain of features making up one assembly result.

    Attributes:
        name: Descriptive name for the stack.
        units: Units all dimensions are expressed in.
        features: Features in report order.
    """
    name: str
    units: str = ""
    features: list[Feature] = field(default_factory=list)

    def add_feature(self, name: str, dimension: Dimension, alpha: Number = 1,
                    **metadata: str) -> Feature:
        """Build a feature, append it to the stack and return it."""
        feature = Feature(name, dimension, to_decimal(alpha), **metadata)
        self.features.append(feature)
        return feature

    def __len__(self) -> int:
        return len(self.features)


@dataclass(frozen=True)
class Goal:
    """Acceptance window for the stack result.

    The bounds may be given in either order; they are sorted so that
    ``lower <= upper``.
    """
    lower: Decimal
    upper: Decimal
    units: str = ""

    def __post_init__(self) -> None:
        a, b = to_decimal(self.lower), to_decimal(self.upper)
        object.__setattr__(self, "lower", min(a, b))
        object.__setattr__(self, "upper", max(a, b))

    def contains(self, lower: Decimal, upper: Decimal) -> bool:
        """True if the envelope [lower, upper] lies inside the window."""
        return lower >= self.lower and upper <= self.upper

    def rejects(self, value: Decimal) -> bool:
        """True if a single result counts as a failure.

        Results landing exactly on a bound are failures.
        """
        return value <= self.lower or value >= self.upper
