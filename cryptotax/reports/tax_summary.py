"""Tax report summary generator."""

from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from cryptotax.models.diagnostics import DiagnosticSeverity
from cryptotax.models.reports import TaxReport

TEMPLATE_DIR = Path(__file__).parent / "templates"


class TaxSummaryGenerator:
    """Generates a human-readable summary of a tax report."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True)
        self.env.filters["money"] = lambda value: f"{Decimal(value):,.2f}"
        self.env.filters["percent"] = lambda value: f"{Decimal(value) * 100:.1f}%"

    def render(self, report: TaxReport) -> str:
        """Render tax report summary."""
        template = self.env.get_template("tax_summary.txt")
        problems = [
            d for d in report.diagnostics if d.severity != DiagnosticSeverity.INFO
        ]
        return template.render(
            report=report,
            s=report.summary,
            problems=problems,
            info_count=len(report.diagnostics) - len(problems),
        )
