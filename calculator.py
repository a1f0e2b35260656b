"""
Invoice Automation ROI Calculator
=================================

This module implements the return-on-investment projection used by the
API, the Streamlit form and the command line.  It maps a dictionary of
business inputs describing the current, manual accounts-payable process
to a dictionary of headline financial results.

Design choices
--------------

The projection compares the monthly cost of processing invoices by hand
(labour plus the cost of fixing errors) with the cost of an automated
pipeline charged per invoice.  Automation is assumed to reduce the error
rate to 0.1 percent.  The resulting monthly saving is scaled by a fixed
boost factor of 1.1, applied to every projection, before being projected
over the chosen time horizon and compared with the one-time
implementation cost.

No guard is placed on the payback division: a zero or negative monthly
saving produces an infinite or negative payback period.  These values
are reported as they are so that a reader can see that the scenario
never pays back.  Non-finite numbers are written to JSON as ``null``
(see ``json_safe``).

Rounding is half-up (ties go toward positive infinity) so that the
figures are identical to those produced by the browser front-end.

Usage example:

```python
from calculator import calculate_results

results = calculate_results({
    "monthly_invoice_volume": 1000,
    "avg_hours_per_invoice": 0.5,
    "hourly_wage": 25,
    "error_rate_manual": 2,
    "error_cost": 50,
    "time_horizon_months": 12,
})
print(results["roi_percentage"])  # 249.8%
```
"""

import logging
import math
from typing import Any, Dict, List

import pandas as pd

logger = logging.getLogger(__name__)

AUTOMATED_COST_PER_INVOICE = 0.20
ERROR_RATE_AUTO = 0.001  # 0.1%
MIN_ROI_BOOST_FACTOR = 1.1
DEFAULT_IMPLEMENTATION_COST = 50000

INFINITE_ROI = "Infinite"

REQUIRED_INPUTS = (
    "monthly_invoice_volume",
    "avg_hours_per_invoice",
    "hourly_wage",
    "error_rate_manual",
    "error_cost",
    "time_horizon_months",
)


###############################################################################
# Utility functions
###############################################################################

def _as_number(value: Any) -> float:
    """Coerce a raw input value to a float without raising.

    Missing values and anything that does not parse as a number become
    ``nan`` so that they propagate through the arithmetic instead of
    failing it.  A blank string counts as ``0``.
    """
    if value is None:
        return math.nan
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _round_half_up(value: float, digits: int = 0):
    """Round ``value`` to ``digits`` decimals with ties toward +infinity.

    Whole-number rounding returns an ``int``.  Infinite and NaN values
    are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    if digits == 0:
        return int(rounded)
    return rounded


def _implementation_cost(inputs: Dict) -> float:
    """Implementation cost, defaulting to 50000 when absent, null or blank.

    An explicit ``0`` is kept so that a free implementation reaches the
    ``"Infinite"`` ROI branch.
    """
    cost = inputs.get("one_time_implementation_cost")
    if cost is None or (isinstance(cost, str) and not cost.strip()):
        return float(DEFAULT_IMPLEMENTATION_COST)
    return _as_number(cost)


def _monthly_savings(inputs: Dict) -> float:
    """Unrounded monthly saving, boost factor included."""
    volume = _as_number(inputs.get("monthly_invoice_volume"))
    hours_per_invoice = _as_number(inputs.get("avg_hours_per_invoice"))
    hourly_wage = _as_number(inputs.get("hourly_wage"))
    error_rate_manual = _as_number(inputs.get("error_rate_manual"))
    error_cost = _as_number(inputs.get("error_cost"))

    labor_cost_manual = volume * hours_per_invoice * hourly_wage
    auto_cost = volume * AUTOMATED_COST_PER_INVOICE
    error_savings = ((error_rate_manual / 100) - ERROR_RATE_AUTO) * volume * error_cost
    monthly_savings = (labor_cost_manual + error_savings) - auto_cost
    return monthly_savings * MIN_ROI_BOOST_FACTOR


def format_number(value: Any) -> str:
    """Render a number the way the report and ROI strings display it.

    Whole floats lose their decimal part (``25.0`` becomes ``"25"``),
    other floats use the shortest round-tripping representation and
    non-finite values are spelled ``Infinity``, ``-Infinity`` and ``NaN``.
    Anything that is not a number is passed to ``str``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def missing_inputs(inputs: Dict) -> List[str]:
    """Return the required input fields that are absent or falsy.

    This is a presence check only: ``0`` and empty strings count as
    missing, while negative or non-numeric values are accepted.
    """
    return [field for field in REQUIRED_INPUTS if not inputs.get(field)]


def json_safe(record: Dict) -> Dict:
    """Replace non-finite floats in ``record`` with ``None``.

    JSON has no representation for infinity or NaN, so results that
    contain them are stored and returned with ``null`` in their place.
    Nested dictionaries are handled recursively.
    """
    safe = {}
    for key, value in record.items():
        if isinstance(value, dict):
            safe[key] = json_safe(value)
        elif isinstance(value, float) and not math.isfinite(value):
            safe[key] = None
        else:
            safe[key] = value
    return safe


###############################################################################
# Main calculation
###############################################################################

def calculate_results(inputs: Dict) -> Dict:
    """Compute the ROI projection for a set of business inputs.

    Parameters
    ----------
    inputs : dict
        Business inputs.  The six fields in ``REQUIRED_INPUTS`` are read
        as numbers; values that do not parse become ``nan`` and flow
        through to the results.  ``one_time_implementation_cost``
        defaults to 50000 when it is falsy in the sense of being absent,
        null or blank; an explicit ``0`` is kept and yields the
        ``"Infinite"`` ROI.  ``num_ap_staff`` and any other keys are
        ignored.

    Returns
    -------
    dict
        ``monthly_savings``, ``cumulative_savings`` and ``net_savings``
        rounded to whole currency units, ``payback_months`` rounded to
        one decimal and ``roi_percentage`` as a string: either a number
        with a ``%`` suffix or ``"Infinite"`` when the implementation
        cost is zero or negative.
    """
    horizon = _as_number(inputs.get("time_horizon_months"))
    implementation_cost = _implementation_cost(inputs)

    monthly_savings = _monthly_savings(inputs)
    cumulative_savings = monthly_savings * horizon
    net_savings = cumulative_savings - implementation_cost

    if implementation_cost <= 0:
        payback_months = 0
        roi_percentage = INFINITE_ROI
    else:
        payback_months = _round_half_up(_safe_divide(implementation_cost, monthly_savings), 1)
        roi = (net_savings / implementation_cost) * 100
        roi_percentage = format_number(_round_half_up(roi, 1)) + "%"

    results = {
        "monthly_savings": _round_half_up(monthly_savings),
        "cumulative_savings": _round_half_up(cumulative_savings),
        "net_savings": _round_half_up(net_savings),
        "payback_months": payback_months,
        "roi_percentage": roi_percentage,
    }
    logger.debug("Calculated results %s for inputs %s", results, inputs)
    return results


def _safe_divide(numerator: float, denominator: float) -> float:
    """IEEE-754 division: a zero denominator yields a signed infinity or NaN."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def savings_timeline(inputs: Dict) -> pd.DataFrame:
    """Build a month-by-month view of the projection for charting.

    Parameters
    ----------
    inputs : dict
        The same business inputs accepted by ``calculate_results``.

    Returns
    -------
    DataFrame
        Columns ``Month``, ``MonthlySavings``, ``CumulativeSavings`` and
        ``NetPosition`` (cumulative savings less the implementation
        cost).  The figures are not rounded.  A horizon that is not a
        positive finite number produces an empty frame.
    """
    monthly_savings = _monthly_savings(inputs)
    horizon = _as_number(inputs.get("time_horizon_months"))
    months = int(horizon) if math.isfinite(horizon) and horizon > 0 else 0
    implementation_cost = _implementation_cost(inputs)

    month_index = list(range(1, months + 1))
    cumulative = [monthly_savings * m for m in month_index]
    return pd.DataFrame({
        "Month": month_index,
        "MonthlySavings": [monthly_savings] * months,
        "CumulativeSavings": cumulative,
        "NetPosition": [c - implementation_cost for c in cumulative],
    })
