"""Error types raised by the store, the report renderer and the API.

Each error carries the HTTP status it maps to.  The message is returned
to the caller unchanged as ``{"error": message}``.
"""


class RoiCalculatorError(Exception):
    """Base class for errors with a known HTTP status."""

    status_code = 500


class ValidationError(RoiCalculatorError):
    """A required field is missing or empty."""

    status_code = 400


class NotFoundError(RoiCalculatorError):
    """No scenario exists with the requested id."""

    status_code = 404


class PersistenceError(RoiCalculatorError):
    """The database rejected or failed an operation."""


class ConflictError(PersistenceError):
    """A scenario with the same name already exists."""


class RenderError(RoiCalculatorError):
    """The PDF report could not be produced or written."""
