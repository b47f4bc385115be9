"""Command-line interface for linear tolerance stack analysis."""

from __future__ import annotations

import argparse
import logging
import sys

from tolstack.analysis import Analysis, AnalysisConfig
from tolstack.models import Dimension, ToleranceStackError
from tolstack.reporting import ReportConfig, generate_text_report

logger = logging.getLogger(__name__)


def _config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(
        precision=args.precision,
        places=args.places,
        iterations=args.iterations,
        seed=args.seed,
        sample_digits=args.sample_digits,
    )


def cmd_example(args: argparse.Namespace) -> None:
    """Analyze the built-in example stack."""
    from tolstack.examples import create_bracket_example

    stack, goal = create_bracket_example()
    report = Analysis(stack, goal, _config_from_args(args)).run()
    print(generate_text_report(report, ReportConfig(include_interval=not args.no_interval)))


def cmd_shift(args: argparse.Namespace) -> None:
    """Print the assembly shift of an inside feature within an outside one."""
    inside = Dimension.symmetric(args.inside_nominal, args.inside_tol)
    outside = Dimension.symmetric(args.outside_nominal, args.outside_tol)
    shift = Dimension.assembly_shift(inside, outside)
    print(f"Assembly shift: {shift.nominal} +/- {shift.tolerance}")


def _add_analysis_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("-n", "--iterations", type=int, default=10_000,
                   help="Number of Monte Carlo iterations (default: 10000)")
    p.add_argument("--seed", type=int, default=None,
                   help="Random seed for Monte Carlo")
    p.add_argument("--places", type=int, default=4,
                   help="Decimal places shown in results (default: 4)")
    p.add_argument("--precision", type=int, default=20,
                   help="Working precision in significant digits (default: 20)")
    p.add_argument("--sample-digits", type=int, default=8,
                   help="Decimal digits of resolution per random sample (default: 8)")
    p.add_argument("--no-interval", action="store_true",
                   help="Omit the confidence interval on the failure rate")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tolstack",
        description="Linear Tolerance Stack Analysis Tool",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v for info, -vv for debug)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- example ---
    p_example = subparsers.add_parser("example", help="Analyze the built-in example stack")
    _add_analysis_options(p_example)
    p_example.set_defaults(func=cmd_example)

    # --- shift ---
    p_shift = subparsers.add_parser(
        "shift", help="Compute positional play of a symmetric inside feature in an outside one")
    p_shift.add_argument("inside_nominal")
    p_shift.add_argument("inside_tol")
    p_shift.add_argument("outside_nominal")
    p_shift.add_argument("outside_tol")
    p_shift.set_defaults(func=cmd_shift)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except (ToleranceStackError, ValueError, ArithmeticError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
