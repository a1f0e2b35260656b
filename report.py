"""
PDF report for a saved scenario.

The report is drawn with Matplotlib as a single text figure and saved
through ``PdfPages`` into an in-memory buffer, so rendering has no side
effects.  The figure is created with ``Figure`` directly rather than through
pyplot, so concurrent renders share no figure registry.  ``save_report`` writes the bytes to the public reports
directory under ``<scenario_id>.pdf`` and returns the URL path that the
static file route serves them from.
"""

import io
import logging
import os
import tempfile
from datetime import datetime
from typing import Dict, List, Optional

from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure

from calculator import DEFAULT_IMPLEMENTATION_COST, format_number
from errors import RenderError

logger = logging.getLogger(__name__)

A4W, A4H = 8.27, 11.69
REPORT_TITLE = "Invoicing Automation ROI Report"
FOOTER = "Thank you for using BLACKBOX.AI Assistant's ROI Calculator!"


def _grouped(value) -> str:
    """Format a currency figure with thousands separators."""
    if value is None:
        return "N/A"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and not value.is_integer():
            return f"{value:,}"
        try:
            return f"{int(value):,}"
        except (OverflowError, ValueError):
            return format_number(value)
    return str(value)


def _timestamp(moment: datetime) -> str:
    """Locale-style timestamp without zero padding, e.g. ``3/5/2024, 2:07:09 PM``."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment:%M:%S} {meridiem}"


def _display(value) -> str:
    if value is None:
        return "N/A"
    return format_number(value)


def _report_lines(scenario: Dict, generated_at: datetime) -> List[List[str]]:
    """Lay out the report as paragraphs of lines."""
    inputs = scenario["inputs"]
    results = scenario["results"]
    horizon = _display(inputs.get("time_horizon_months"))
    return [
        [REPORT_TITLE],
        [f"Scenario: {scenario['name']}"],
        [
            "Inputs:",
            f"• Monthly Invoice Volume: {_display(inputs.get('monthly_invoice_volume'))}",
            f"• Number of AP Staff: {format_number(inputs.get('num_ap_staff') or 'N/A')}",
            f"• Average Hours per Invoice (Manual): {_display(inputs.get('avg_hours_per_invoice'))}",
            f"• Hourly Wage: ${_display(inputs.get('hourly_wage'))}",
            f"• Manual Error Rate: {_display(inputs.get('error_rate_manual'))}%",
            f"• Error Fix Cost: ${_display(inputs.get('error_cost'))}",
            f"• Time Horizon: {horizon} months",
            "• One-Time Implementation Cost: "
            f"${format_number(inputs.get('one_time_implementation_cost') or DEFAULT_IMPLEMENTATION_COST)}",
        ],
        [
            "Results:",
            f"• Monthly Savings: ${_grouped(results.get('monthly_savings'))}",
            f"• Payback Period: {_display(results.get('payback_months'))} months",
            f"• ROI ({horizon} months): {_display(results.get('roi_percentage'))}",
            f"• Net Savings: ${_grouped(results.get('net_savings'))}",
        ],
        [f"Report generated: {_timestamp(generated_at)}"],
        [FOOTER],
    ]


def render_report(scenario: Dict, generated_at: Optional[datetime] = None) -> bytes:
    """Render the PDF summary of a stored scenario.

    Parameters
    ----------
    scenario : dict
        A record as returned by ``ScenarioStore.get`` with ``name``,
        ``inputs`` and ``results``.
    generated_at : datetime, optional
        Timestamp printed on the report.  Defaults to now.

    Returns
    -------
    bytes
        The PDF document.

    Raises
    ------
    RenderError
        If the figure cannot be drawn or saved.
    """
    generated_at = generated_at or datetime.now()
    buffer = io.BytesIO()
    try:
        paragraphs = _report_lines(scenario, generated_at)
        with PdfPages(buffer) as pdf:
            fig = Figure(figsize=(A4W, A4H))
            ax = fig.add_subplot()
            ax.axis('off')
            y = 0.97
            line_height = 0.025
            for index, para in enumerate(paragraphs):
                for line in para:
                    if line == REPORT_TITLE:
                        ax.text(0.02, y, line, fontsize=18, fontweight='bold', va='top', ha='left')
                        y -= line_height * 1.5
                    elif line in ("Inputs:", "Results:"):
                        ax.text(0.02, y, line, fontsize=14, fontweight='bold', va='top', ha='left')
                        y -= line_height
                    else:
                        ax.text(0.02, y, line, fontsize=10, va='top', ha='left', wrap=True)
                        y -= line_height
                if index < len(paragraphs) - 1:
                    y -= line_height
            pdf.savefig(fig)
    except (KeyError, TypeError, ValueError, RuntimeError) as exc:
        raise RenderError(f"Failed to render report: {exc}") from exc
    return buffer.getvalue()


def save_report(reports_dir: str, scenario_id: str, data: bytes) -> str:
    """Write ``data`` to ``<reports_dir>/<scenario_id>.pdf``.

    An existing report for the same scenario is replaced.  The file is
    written under a temporary name first and moved into place, so a
    reader never sees a partially written PDF.

    Returns
    -------
    str
        The URL path of the report, ``/reports/<scenario_id>.pdf``.
    """
    filename = f"{scenario_id}.pdf"
    try:
        os.makedirs(reports_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=reports_dir, suffix=".pdf.tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, os.path.join(reports_dir, filename))
    except OSError as exc:
        raise RenderError(f"Failed to write report: {exc}") from exc
    logger.info("Wrote report %s", os.path.join(reports_dir, filename))
    return f"/reports/{filename}"
