"""
Request-level error conditions.

Every error carries the HTTP status and the human-readable message that
the exception handler in ``main`` sends back as ``{"message": ...}``.
"""


class ExplorerError(Exception):
    """Base exception for conditions reported back to the caller."""

    status_code: int = 404
    message: str = "Request failed."

    def __init__(self, message: str = None):
        if message:
            self.message = message
        super().__init__(self.message)


class DatasetNotFoundError(ExplorerError):
    """Raised when a dataset resolves to no epochs."""
    message = "No record for this dataset!"


class InvalidEpochError(ExplorerError):
    """Raised when a requested epoch is not one of the dataset's epochs."""
    message = "Invalid epoch!"


class StoreUnavailableError(ExplorerError):
    """Raised when any query against the store fails."""
    message = "Database unreachable. Please try again later."


class InvalidSearchInputError(ExplorerError):
    """Raised when none of the advanced search items is an entity id."""
    message = "Query items not valid"


class InvalidIdentifierError(ExplorerError):
    """Raised when a schema or table name contains disallowed characters."""
    message = "Invalid dataset or epoch name!"


class UnsupportedSearchError(ExplorerError):
    message = "Advanced search is not available for this dataset."


class SearchNotImplementedError(ExplorerError):
    status_code = 501
    message = "Advanced search is not implemented for this dataset yet."
