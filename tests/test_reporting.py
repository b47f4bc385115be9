"""Tests for report generation."""

import pytest

from tolstack.analysis import Analysis, AnalysisConfig
from tolstack.examples import create_bracket_example
from tolstack.models import Dimension, Stack
from tolstack.reporting import ReportConfig, generate_text_report


@pytest.fixture(scope="module")
def example_report():
    stack, goal = create_bracket_example()
    return Analysis(stack, goal, AnalysisConfig(iterations=1000, seed=42)).run()


class TestTextReport:
    def test_basic(self, example_report):
        text = generate_text_report(example_report, ReportConfig(title="Bracket"))
        assert "Bracket" in text
        assert "Name:   Bracket Fastener Gap" in text
        assert "Units:  in" in text
        assert "Goal:   [0, 0.48] in" in text
        assert "END OF REPORT" in text

    def test_feature_table(self, example_report):
        text = generate_text_report(example_report)
        assert "INPUTS: 7" in text
        assert "Contribution" in text
        assert "Boss in hole" in text
        assert "0.6042" in text

    def test_output_table(self, example_report):
        text = generate_text_report(example_report)
        assert "OUTPUTS: 4" in text
        for label in ("Worst Case", "RSS", "Bender", "Monte Carlo"):
            assert label in text
        assert "NO" in text
        assert "yes" in text

    def test_monte_carlo_line(self, example_report):
        text = generate_text_report(example_report)
        expected = (f"MONTE CARLO: {example_report.monte_carlo_failures} failures "
                    f"in 1000 iterations")
        assert expected in text
        assert "95% interval on failure rate" in text

    def test_interval_optional(self, example_report):
        text = generate_text_report(example_report, ReportConfig(include_interval=False))
        assert "interval" not in text

    def test_features_optional(self, example_report):
        text = generate_text_report(example_report, ReportConfig(include_features=False))
        assert "INPUTS" not in text
        assert "OUTPUTS: 4" in text

    def test_variance_section(self, example_report):
        text = generate_text_report(example_report)
        assert "VARIANCE CONTRIBUTION (RSS):" in text
        section = text.split("VARIANCE CONTRIBUTION (RSS):")[1].split("OUTPUTS")[0]
        rows = [line for line in section.splitlines() if line.strip()]
        # header, rule, then the largest contributor first
        assert rows[2].startswith("Boss in hole")
        assert rows[2].endswith("91.41")

    def test_variance_optional(self, example_report):
        text = generate_text_report(example_report, ReportConfig(include_variance=False))
        assert "VARIANCE" not in text

    def test_no_goal(self):
        stack = Stack("Plain", "mm")
        stack.add_feature("Block", Dimension.symmetric(1, 0.1), 1)
        report = Analysis(stack, config=AnalysisConfig(iterations=100, seed=1)).run()
        text = generate_text_report(report)
        assert "Goal:" not in text
        assert "MONTE CARLO: 100 iterations (no goal)" in text
        assert "failures" not in text
