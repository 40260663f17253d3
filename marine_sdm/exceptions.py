"""
Errors raised by the point extraction pipeline.

File system problems are reported with the built-in ``OSError`` family
(``FileNotFoundError``, ``PermissionError``).
"""


class FormatError(ValueError):
    """The record table is not valid delimited text, repeats a column name or lacks required columns."""

    def __init__(self, message: str, path=None, missing_columns=None):
        self.path = path
        self.missing_columns = list(missing_columns or [])
        details = []
        if path is not None:
            details.append(f"file: {path}")
        if self.missing_columns:
            details.append(f"missing columns: {self.missing_columns}")
        if details:
            message = f"{message} ({'; '.join(details)})"
        super().__init__(message)


class ValidationError(ValueError):
    """A record holds an out-of-range or non-numeric value."""

    def __init__(self, message: str, row=None, column=None):
        self.row = row
        self.column = column
        if row is not None:
            message = f"{message} (row {row}, column '{column}')"
        super().__init__(message)


class ExtractionError(ValueError):
    """The raster stack and the points cannot be sampled together."""
