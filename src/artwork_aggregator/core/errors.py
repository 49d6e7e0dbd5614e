"""Custom exceptions for the artwork aggregator.

Provider failures never escape the public lookup methods; these types exist
so the orchestrators can tell provider errors apart from programming errors
when logging.
"""


class ArtworkError(Exception):
    """Base exception for all artwork aggregator errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    pass
