"""Exceptions raised by the data quality engine."""


class DataQualityError(Exception):
    """Base class for all data quality engine errors."""


class InvalidConfiguration(DataQualityError, ValueError):
    """Raised before any row is scanned when the requested assessment is malformed.

    Covers unknown columns, rules applied to columns of the wrong type,
    malformed ranges and conflicting correction tables.
    """
